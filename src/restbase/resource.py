import collections.abc
import json
import logging
import typing

from .attributes import AttributeStore
from .exceptions import (
    HTTPError,
    InvalidDeclarationError,
    InvalidResponseError,
    MissingRelationError,
    ResponseParseError,
    UnknownRelationshipError,
)
from .interfaces import Response, Transport
from .models import HasManyDescriptor, HasOneDescriptor, ResourceDescriptor
from .paths import PathResolver
from .relationships import HasManyProxy, resolve_has_many, resolve_has_one
from .types import JSONObject, JSONValue, MutableJSONObject
from .utils import pluralize

logger = logging.getLogger(__name__)

Tr = typing.TypeVar("Tr", bound="Resource")


class Resource:
    """
    The base class of every resource type of the remote service.

    Concrete types declare their relationships in an inner ``Meta`` class and
    are registered with a :py:class:`restbase.declarative.ResourceRegistry`,
    which turns the declarations into the type's :py:class:`ResourceDescriptor`.

    :param Transport client: The transport used for every request of the instance.
    :param Optional[MutableMapping[str, Any]] attrs: The initial attributes.
    :param bool expanded: Whether ``attrs`` reflects a complete fetch.
    :param options: For every relation the type belongs to, either the parent
                    instance under the relation name or its id under ``<relation>_id``.
                    Other options are ignored.
    :raises MissingRelationError: if a relation the type belongs to is not supplied.
    """

    _descriptor: typing.ClassVar[ResourceDescriptor]

    client: Transport
    attrs: AttributeStore
    expanded: bool
    deleted: bool
    _parents: typing.Dict[str, "Resource"]
    _parent_ids: typing.Dict[str, typing.Any]

    @classmethod
    def descriptor(cls) -> ResourceDescriptor:
        # a subclass of a registered type must be registered on its own
        descr = vars(cls).get("_descriptor")
        if descr is None:
            raise InvalidDeclarationError(f"{cls.__name__} is not registered with any registry")
        return descr

    @classmethod
    def paths(cls) -> PathResolver:
        return PathResolver(cls.descriptor())

    @classmethod
    def endpoint_name(cls) -> str:
        return cls.descriptor().endpoint_name

    @classmethod
    def key_attribute(cls) -> str:
        return cls.descriptor().key_attribute

    @classmethod
    def rest_base_path(cls, client: Transport, prefix: str = "/") -> str:
        return cls.paths().rest_base_path(client, prefix)

    @classmethod
    def parse_json(cls, body: str) -> JSONValue:
        try:
            return json.loads(body)
        except ValueError as e:
            raise ResponseParseError(body) from e

    @classmethod
    def all(cls: typing.Type[Tr], client: Transport, **options) -> typing.List[Tr]:
        """
        Lists every instance from the collection endpoint of the type.

        :param Transport client: The transport.
        :param options: The parent relations, as accepted by the constructor.
        :return: A list of unexpanded instances.
        """
        # validates the parent relations before any request is made
        url = cls(client, **options).url
        response = client.get(url)
        body = cls.parse_json(response.body or "")
        if cls.descriptor().nested_collections:
            key = pluralize(cls.endpoint_name())
            if not isinstance(body, collections.abc.Mapping) or key not in body:
                raise InvalidResponseError(response.body, f'no "{key}" in listing')
            body = body[key]
        if not isinstance(body, collections.abc.Sequence) or isinstance(body, str):
            raise InvalidResponseError(response.body, "listing is not an array")
        return [cls(client, attrs=attrs, **options) for attrs in body]

    @classmethod
    def find(cls: typing.Type[Tr], client: Transport, key: typing.Any, **options) -> Tr:
        """
        Fetches the instance identified by ``key``.
        """
        instance = cls(client, **options)
        instance.attrs[cls.key_attribute()] = key
        instance.fetch()
        return instance

    @classmethod
    def build(
        cls: typing.Type[Tr], client: Transport, attrs: MutableJSONObject, **options
    ) -> Tr:
        return cls(client, attrs=attrs, **options)

    @property
    def key_value(self) -> typing.Optional[typing.Any]:
        return self.paths().key_value(self.attrs)

    @property
    def is_new_record(self) -> bool:
        return self.key_value is None

    @property
    def path_component(self) -> str:
        return self.paths().path_component(self.attrs)

    @property
    def url(self) -> str:
        """
        :raises MissingRelationError: if a parent instance has not been saved yet.
        """
        parent_ids = {relation: self.get_parent_id(relation) for relation in self.descriptor().belongs_to}
        for relation, parent_id in parent_ids.items():
            if parent_id is None:
                raise MissingRelationError(type(self), relation)
        return self.paths().url(self.client, self.attrs, parent_ids)

    @property
    def has_errors(self) -> bool:
        return self.attrs.has("errors")

    def _check_belongs_to(self, name: str) -> None:
        if name not in self.descriptor().belongs_to:
            raise UnknownRelationshipError(type(self), name)

    def get_parent(self, name: str) -> typing.Optional["Resource"]:
        """
        Returns the parent instance of the relation ``name``, or None if only
        its id was supplied.
        """
        self._check_belongs_to(name)
        return self._parents.get(name)

    def get_parent_id(self, name: str) -> typing.Any:
        """
        Returns the id of the parent of the relation ``name``.  When the parent
        instance was supplied, its key is read at call time, so it is None until
        the parent has been saved.
        """
        self._check_belongs_to(name)
        parent = self._parents.get(name)
        if parent is not None:
            return parent.key_value
        return self._parent_ids[name]

    def related(
        self, name: str
    ) -> typing.Union[None, "Resource", HasManyProxy]:
        """
        Materializes the children of the ``has_one`` or ``has_many`` relationship ``name``
        from the current attributes.  Nothing is fetched.

        :return: A child instance or None for ``has_one``; a :py:class:`HasManyProxy` for ``has_many``.
        """
        descr = self.descriptor().get_relationship(name)
        if isinstance(descr, HasOneDescriptor):
            return resolve_has_one(self, descr)
        elif isinstance(descr, HasManyDescriptor):
            return resolve_has_many(self, descr)
        raise UnknownRelationshipError(type(self), name)

    def set_attrs(self, attrs: JSONObject, clobber: bool = True) -> None:
        self.attrs.merge(attrs, clobber)

    def set_attrs_from_response(self, response: Response) -> None:
        body = response.body
        if body is None or len(body) < 2:
            return
        json_ = self.parse_json(body)
        if not isinstance(json_, collections.abc.Mapping):
            raise InvalidResponseError(body, "not an object")
        self.set_attrs(json_)

    def fetch(self, reload: bool = False) -> None:
        """
        Fetches the attributes from the server, unless they are already expanded.

        :param bool reload: Fetch even if the instance is expanded.
        :raises HTTPError: if the server responds with an error.
        :raises ResponseParseError: if the response is not valid JSON.
        """
        if self.expanded and not reload:
            return
        response = self.client.get(self.url)
        self.set_attrs_from_response(response)
        self.expanded = True

    def save_strict(self, changes: JSONObject) -> bool:
        """
        Creates the record on the server if it has no key yet, otherwise
        updates it.  ``changes`` are merged into the attributes without
        clobbering nested objects, then the response is merged on top.  The
        instance is left unexpanded since the response may be partial.

        :raises HTTPError: if the server responds with an error.
        """
        http_method = self.client.post if self.is_new_record else self.client.put
        response = http_method(self.url, json.dumps(changes))
        self.set_attrs(changes, clobber=False)
        self.set_attrs_from_response(response)
        self.expanded = False
        return True

    def save(self, changes: JSONObject) -> bool:
        """
        Same as :py:meth:`save_strict`, except that an error response does not
        raise.  The body of the error response, which usually carries the
        validation messages, is merged into the attributes when it can be
        parsed.

        :return: True if the record was saved, False otherwise.
        """
        try:
            return self.save_strict(changes)
        except HTTPError as e:
            logger.debug("saving %s failed with status %s", self.path_component, e.status)
            try:
                self.set_attrs_from_response(e.response)
            except InvalidResponseError:
                logger.debug("could not merge the error response of %s", self.path_component, exc_info=True)
            return False

    def delete(self) -> None:
        """
        Deletes the record on the server.  The attributes are kept.

        :raises HTTPError: if the server responds with an error.
        """
        self.client.delete(self.url)
        self.deleted = True

    def to_json(self) -> str:
        return self.attrs.to_json()

    def __getitem__(self, key: str) -> JSONValue:
        return self.attrs[key]

    def __contains__(self, key: object) -> bool:
        return key in self.attrs

    def __repr__(self) -> str:
        return f"<{type(self).__name__}:{id(self)} attrs={self.attrs.data!r}>"

    def __init__(
        self,
        client: Transport,
        attrs: typing.Union[None, MutableJSONObject, AttributeStore] = None,
        expanded: bool = False,
        **options,
    ):
        self.client = client
        if isinstance(attrs, AttributeStore):
            self.attrs = attrs
        else:
            self.attrs = AttributeStore(attrs)
        self.expanded = expanded
        self.deleted = False
        self._parents = {}
        self._parent_ids = {}

        for relation in self.descriptor().belongs_to:
            parent = options.get(relation)
            if parent is not None:
                self._parents[relation] = parent
            elif options.get(f"{relation}_id") is not None:
                self._parent_ids[relation] = options[f"{relation}_id"]
            else:
                raise MissingRelationError(type(self), relation)
