import enum
import types
import typing
from collections import OrderedDict

from .deferred import Deferred, resolve
from .exceptions import InvalidDeclarationError
from .utils import classify

ChildType = typing.Type["resource.Resource"]
ChildResolver = typing.Callable[[str], ChildType]


class RelationshipType(enum.Enum):
    HAS_ONE = "has_one"
    HAS_MANY = "has_many"


class ResourceRelationshipDescriptor:
    """
    A :py:class:`ResourceRelationshipDescriptor` describes where the data of a
    child relationship lives within the attributes of the parent and which
    resource type it is materialized as.
    """

    type: RelationshipType
    name: str
    attribute_key: str
    nested_under: typing.Optional[typing.Tuple[str, ...]]
    _child: typing.Union[ChildType, Deferred[ChildType]]

    @property
    def child(self) -> ChildType:
        return resolve(self._child)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, attribute_key={self.attribute_key!r}, "
            f"nested_under={self.nested_under!r})"
        )

    def __init__(
        self,
        name: str,
        child: typing.Union[ChildType, Deferred[ChildType]],
        attribute_key: typing.Optional[str] = None,
        nested_under: typing.Union[None, str, typing.Sequence[str]] = None,
    ):
        self.name = name
        self._child = child
        self.attribute_key = attribute_key if attribute_key is not None else name
        if nested_under is None:
            self.nested_under = None
        elif isinstance(nested_under, str):
            self.nested_under = (nested_under,)
        else:
            self.nested_under = tuple(nested_under)


class HasOneDescriptor(ResourceRelationshipDescriptor):
    type = RelationshipType.HAS_ONE


class HasManyDescriptor(ResourceRelationshipDescriptor):
    type = RelationshipType.HAS_MANY


class ResourceDescriptor:
    """
    A :py:class:`ResourceDescriptor` holds the declarations of a resource type.
    It is built once when the type is registered and never changes afterwards.

    :param str endpoint_name: The lowercase singular name used in paths.
    :param str key_attribute: The attribute that holds the identity of an instance.
    :param Sequence[str] belongs_to: The parent relations, in path order.
    :param Iterable[HasOneDescriptor] has_one: Single-child relationships.
    :param Iterable[HasManyDescriptor] has_many: Collection relationships.
    :param bool nested_collections: Whether listings wrap their array under the pluralized endpoint name.
    """

    endpoint_name: str
    key_attribute: str
    belongs_to: typing.Tuple[str, ...]
    nested_collections: bool
    _has_one: typing.Mapping[str, HasOneDescriptor]
    _has_many: typing.Mapping[str, HasManyDescriptor]

    @property
    def has_one(self) -> typing.Mapping[str, HasOneDescriptor]:
        return self._has_one

    @property
    def has_many(self) -> typing.Mapping[str, HasManyDescriptor]:
        return self._has_many

    def get_relationship(self, name: str) -> typing.Optional[ResourceRelationshipDescriptor]:
        """
        Returns the child relationship descriptor whose name is ``name``, or None.
        """
        if name in self._has_one:
            return self._has_one[name]
        return self._has_many.get(name)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(endpoint_name={self.endpoint_name!r}, key_attribute={self.key_attribute!r}, "
            f"belongs_to={self.belongs_to!r}, has_one={list(self._has_one)!r}, "
            f"has_many={list(self._has_many)!r}, nested_collections={self.nested_collections!r})"
        )

    def __init__(
        self,
        endpoint_name: str,
        key_attribute: str = "id",
        belongs_to: typing.Sequence[str] = (),
        has_one: typing.Iterable[HasOneDescriptor] = (),
        has_many: typing.Iterable[HasManyDescriptor] = (),
        nested_collections: bool = False,
    ):
        self.endpoint_name = endpoint_name
        self.key_attribute = key_attribute
        self.belongs_to = tuple(belongs_to)
        self.nested_collections = nested_collections
        self._has_one = types.MappingProxyType(OrderedDict((d.name, d) for d in has_one))
        self._has_many = types.MappingProxyType(OrderedDict((d.name, d) for d in has_many))


class ResourceDescriptorBuilder:
    """
    A :py:class:`ResourceDescriptorBuilder` collects the declarations of a resource
    type and yields a :py:class:`ResourceDescriptor` when called.

    :param str endpoint_name: The lowercase singular name used in paths.
    :param Callable[[str], type] child_resolver: Looks up a resource type by class name; used for children whose type is not given explicitly.
    """

    endpoint_name: str
    key_attribute: str
    child_resolver: ChildResolver
    _belongs_to: typing.List[str]
    _has_one: typing.List[HasOneDescriptor]
    _has_many: typing.List[HasManyDescriptor]
    _nested_collections: bool
    _names: typing.Set[str]

    def _claim_name(self, name: str) -> None:
        if not name:
            raise InvalidDeclarationError("relation name must not be empty")
        if name in self._names:
            raise InvalidDeclarationError(f"relation {name} is declared more than once")
        self._names.add(name)

    def _child(
        self, name: str, child: typing.Union[None, str, ChildType]
    ) -> typing.Union[ChildType, Deferred[ChildType]]:
        if child is None:
            return Deferred(self.child_resolver, classify(name))
        elif isinstance(child, str):
            return Deferred(self.child_resolver, child)
        else:
            return child

    def belongs_to(self, name: str) -> "ResourceDescriptorBuilder":
        self._claim_name(name)
        self._belongs_to.append(name)
        return self

    def has_one(
        self,
        name: str,
        attribute_key: typing.Optional[str] = None,
        nested_under: typing.Union[None, str, typing.Sequence[str]] = None,
        child: typing.Union[None, str, ChildType] = None,
    ) -> "ResourceDescriptorBuilder":
        self._claim_name(name)
        self._has_one.append(
            HasOneDescriptor(
                name=name,
                child=self._child(name, child),
                attribute_key=attribute_key,
                nested_under=nested_under,
            )
        )
        return self

    def has_many(
        self,
        name: str,
        attribute_key: typing.Optional[str] = None,
        nested_under: typing.Union[None, str, typing.Sequence[str]] = None,
        child: typing.Union[None, str, ChildType] = None,
    ) -> "ResourceDescriptorBuilder":
        self._claim_name(name)
        self._has_many.append(
            HasManyDescriptor(
                name=name,
                child=self._child(name, child),
                attribute_key=attribute_key,
                nested_under=nested_under,
            )
        )
        return self

    def nested_collections(self, value: bool) -> "ResourceDescriptorBuilder":
        self._nested_collections = bool(value)
        return self

    def __call__(self) -> ResourceDescriptor:
        return ResourceDescriptor(
            endpoint_name=self.endpoint_name,
            key_attribute=self.key_attribute,
            belongs_to=self._belongs_to,
            has_one=self._has_one,
            has_many=self._has_many,
            nested_collections=self._nested_collections,
        )

    def __init__(
        self, endpoint_name: str, child_resolver: ChildResolver, key_attribute: str = "id"
    ):
        self.endpoint_name = endpoint_name
        self.key_attribute = key_attribute
        self.child_resolver = child_resolver  # type: ignore
        self._belongs_to = []
        self._has_one = []
        self._has_many = []
        self._nested_collections = False
        self._names = set()


if typing.TYPE_CHECKING:
    from . import resource  # noqa: E402
