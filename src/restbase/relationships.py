import collections.abc
import typing

from .interfaces import CollectionProxy
from .models import HasManyDescriptor, HasOneDescriptor
from .types import ABSENT


class HasManyProxy(CollectionProxy):
    """
    A :py:class:`HasManyProxy` wraps the children materialized for a ``has_many``
    relationship of a parent resource.

    :param Resource parent: The resource the children belong to.
    :param type target_class: The resource type of the children.
    :param Iterable[Resource] collection: The children.
    """

    parent: "resource.Resource"
    target_class: typing.Type["resource.Resource"]
    collection: typing.List["resource.Resource"]

    @property
    def parent_name(self) -> str:
        return self.parent.descriptor().endpoint_name

    def _parent_options(self) -> typing.Dict[str, typing.Any]:
        return {self.parent_name: self.parent}

    def build(
        self, attrs: typing.Optional[typing.MutableMapping[str, typing.Any]] = None
    ) -> "resource.Resource":
        """
        Builds a new, unsaved child wired to the parent and appends it to the collection.
        """
        child = self.target_class(self.parent.client, attrs=attrs, **self._parent_options())
        self.collection.append(child)
        return child

    def refresh(self) -> "HasManyProxy":
        """
        Lists the children from the collection endpoint of the target type,
        below the parent, and replaces the wrapped instances by them.
        """
        self.collection = self.target_class.all(self.parent.client, **self._parent_options())
        return self

    def __iter__(self) -> typing.Iterator["resource.Resource"]:
        return iter(self.collection)

    def __len__(self) -> int:
        return len(self.collection)

    def __getitem__(self, index: int) -> "resource.Resource":
        return self.collection[index]

    def __bool__(self) -> bool:
        return bool(self.collection)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.target_class.__name__} x {len(self.collection)}>"

    def __init__(
        self,
        parent: "resource.Resource",
        target_class: typing.Type["resource.Resource"],
        collection: typing.Iterable["resource.Resource"] = (),
    ):
        self.parent = parent
        self.target_class = target_class
        self.collection = list(collection)


def resolve_has_one(
    parent: "resource.Resource", descr: HasOneDescriptor
) -> typing.Optional["resource.Resource"]:
    attribute = parent.attrs.lookup(descr.attribute_key, descr.nested_under)
    if attribute is ABSENT or attribute is None:
        return None
    return descr.child(parent.client, attrs=attribute)


def resolve_has_many(parent: "resource.Resource", descr: HasManyDescriptor) -> HasManyProxy:
    attribute = parent.attrs.lookup(descr.attribute_key, descr.nested_under)
    if attribute is ABSENT or attribute is None:
        attribute = []
    elif not isinstance(attribute, collections.abc.Sequence) or isinstance(attribute, str):
        raise TypeError(
            f"{descr.name} of {type(parent).__name__} is expected to be an array, got {type(attribute).__name__}"
        )
    child_class = descr.child
    parent_options = {parent.descriptor().endpoint_name: parent}
    return HasManyProxy(
        parent,
        child_class,
        (
            child_class(parent.client, attrs=child_attrs, **parent_options)
            for child_attrs in attribute
        ),
    )


if typing.TYPE_CHECKING:
    from . import resource  # noqa: E402
