import collections.abc
import dataclasses
import logging
import typing

from .exceptions import InvalidDeclarationError, UnknownResourceTypeError
from .models import ResourceDescriptor, ResourceDescriptorBuilder
from .resource import Resource

logger = logging.getLogger(__name__)


class UnspecifiedType:
    _singleton: typing.ClassVar[typing.Optional["UnspecifiedType"]] = None

    def __bool__(self):
        return False

    def __new__(cls) -> "UnspecifiedType":
        if cls._singleton is None:
            cls._singleton = object.__new__(cls)
        return cls._singleton


UNSPECIFIED = UnspecifiedType()

NestedUnder = typing.Union[None, str, typing.Sequence[str]]


@dataclasses.dataclass
class Rel:
    name: typing.Union[UnspecifiedType, str] = UNSPECIFIED
    attribute_key: typing.Optional[str] = None
    nested_under: NestedUnder = None
    child: typing.Union[None, str, typing.Type[Resource]] = None


@dataclasses.dataclass
class HasOne(Rel):
    pass


@dataclasses.dataclass
class HasMany(Rel):
    pass


RelationsType = typing.Union[
    typing.Mapping[str, typing.Optional[Rel]],
    typing.Sequence[typing.Union[str, Rel]],
]


@dataclasses.dataclass
class Meta:
    endpoint_name: typing.Optional[str] = None
    key_attribute: str = "id"
    belongs_to: typing.Sequence[str] = ()
    has_one: typing.Sequence[HasOne] = ()
    has_many: typing.Sequence[HasMany] = ()
    nested_collections: bool = False


META_KEYS = frozenset(f.name for f in dataclasses.fields(Meta))

Tr = typing.TypeVar("Tr", bound=Rel)


def _copy_rel(rel_class: typing.Type[Tr], tpl: Rel, name: str) -> Tr:
    return rel_class(
        name=name,
        attribute_key=tpl.attribute_key,
        nested_under=tpl.nested_under,
        child=tpl.child,
    )


def _handle_relations(key: str, value: RelationsType, rel_class: typing.Type[Tr]) -> typing.List[Tr]:
    rels: typing.List[Tr] = []
    if isinstance(value, collections.abc.Mapping):
        for name, tpl in value.items():
            if tpl is None:
                rels.append(rel_class(name=name))
            elif isinstance(tpl, Rel):
                rels.append(_copy_rel(rel_class, tpl, name))
            else:
                raise InvalidDeclarationError(f"{key}: invalid declaration for {name}: {tpl!r}")
    elif isinstance(value, collections.abc.Sequence) and not isinstance(value, str):
        for item in value:
            if isinstance(item, str):
                rels.append(rel_class(name=item))
            elif isinstance(item, Rel):
                if item.name is UNSPECIFIED:
                    raise InvalidDeclarationError(f"{key} contains an unnamed declaration")
                rels.append(_copy_rel(rel_class, item, typing.cast(str, item.name)))
            else:
                raise InvalidDeclarationError(f"{key}: invalid declaration {item!r}")
    else:
        raise InvalidDeclarationError(f"{key} must be either a mapping or a sequence")
    return rels


def handle_meta(meta: typing.Optional[typing.Type]) -> Meta:
    if meta is None:
        return Meta()
    attrs = {k: v for k, v in vars(meta).items() if not k.startswith("__")}
    unknown = set(attrs) - META_KEYS
    if unknown:
        raise InvalidDeclarationError(f"unknown Meta options: {', '.join(sorted(unknown))}")

    belongs_to = attrs.get("belongs_to", ())
    if isinstance(belongs_to, str):
        belongs_to = (belongs_to,)
    if not all(isinstance(name, str) for name in belongs_to):
        raise InvalidDeclarationError("belongs_to must be a sequence of relation names")

    return Meta(
        endpoint_name=attrs.get("endpoint_name"),
        key_attribute=attrs.get("key_attribute", "id"),
        belongs_to=tuple(belongs_to),
        has_one=_handle_relations("has_one", attrs.get("has_one", ()), HasOne),
        has_many=_handle_relations("has_many", attrs.get("has_many", ()), HasMany),
        nested_collections=bool(attrs.get("nested_collections", False)),
    )


def build_descriptor(
    meta: Meta,
    resource_class: typing.Type[Resource],
    child_resolver: typing.Callable[[str], typing.Type[Resource]],
) -> ResourceDescriptor:
    builder = ResourceDescriptorBuilder(
        endpoint_name=meta.endpoint_name or resource_class.__name__.lower(),
        child_resolver=child_resolver,
        key_attribute=meta.key_attribute,
    )
    for name in meta.belongs_to:
        builder.belongs_to(name)
    for has_one in meta.has_one:
        builder.has_one(
            typing.cast(str, has_one.name),
            attribute_key=has_one.attribute_key,
            nested_under=has_one.nested_under,
            child=has_one.child,
        )
    for has_many in meta.has_many:
        builder.has_many(
            typing.cast(str, has_many.name),
            attribute_key=has_many.attribute_key,
            nested_under=has_many.nested_under,
            child=has_many.child,
        )
    builder.nested_collections(meta.nested_collections)
    return builder()


class ResourceRegistry:
    """
    A :py:class:`ResourceRegistry` is the namespace in which resource types are
    declared.  It is used as a class decorator; the inner ``Meta`` class of the
    decorated type is read once and turned into the type's
    :py:class:`ResourceDescriptor`::

        resources = ResourceRegistry()

        @resources
        class Comment(Resource):
            class Meta:
                belongs_to = ["issue"]

    Children of ``has_one`` and ``has_many`` relationships whose type is not
    given explicitly are looked up here by class name when first accessed.
    """

    name: str
    _classes: typing.Dict[str, typing.Type[Resource]]

    def lookup(self, name: str) -> typing.Type[Resource]:
        try:
            return self._classes[name]
        except KeyError:
            raise UnknownResourceTypeError(name)

    def __contains__(self, name: object) -> bool:
        return name in self._classes

    def __iter__(self) -> typing.Iterator[typing.Type[Resource]]:
        return iter(self._classes.values())

    def __len__(self) -> int:
        return len(self._classes)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    T = typing.TypeVar("T", bound=typing.Type[Resource])

    def __call__(self, resource_class: T) -> T:
        if not (isinstance(resource_class, type) and issubclass(resource_class, Resource)):
            raise InvalidDeclarationError(f"{resource_class!r} is not a Resource subclass")
        if "_descriptor" in vars(resource_class):
            raise InvalidDeclarationError(f"{resource_class.__name__} is already registered")
        class_name = resource_class.__name__
        if class_name in self._classes:
            raise InvalidDeclarationError(f"{class_name} is already declared in {self!r}")

        meta = handle_meta(getattr(resource_class, "Meta", None))
        resource_class._descriptor = build_descriptor(meta, resource_class, self.lookup)
        self._classes[class_name] = resource_class
        logger.debug("registered %s in %r: %r", class_name, self, resource_class._descriptor)
        return resource_class

    def __init__(self, name: str = "default"):
        self.name = name
        self._classes = {}
