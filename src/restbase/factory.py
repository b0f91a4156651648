import typing

from .interfaces import Transport
from .resource import Resource
from .types import MutableJSONObject

Tr = typing.TypeVar("Tr", bound=Resource)


class ResourceFactory(typing.Generic[Tr]):
    """
    A :py:class:`ResourceFactory` binds a resource type to a client so that
    callers do not have to pass the client around::

        issues = ResourceFactory(client, Issue)
        issue = issues.find("PROJ-1")
        new_issue = issues()

    :param Transport client: The transport handed to every instance.
    :param type resource_class: The resource type.
    """

    client: Transport
    resource_class: typing.Type[Tr]

    def all(self, **options) -> typing.List[Tr]:
        return self.resource_class.all(self.client, **options)

    def find(self, key: typing.Any, **options) -> Tr:
        return self.resource_class.find(self.client, key, **options)

    def build(self, attrs: MutableJSONObject, **options) -> Tr:
        return self.resource_class.build(self.client, attrs, **options)

    def __call__(self, **options) -> Tr:
        return self.resource_class(self.client, **options)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.resource_class.__name__})"

    def __init__(self, client: Transport, resource_class: typing.Type[Tr]):
        self.client = client
        self.resource_class = resource_class
