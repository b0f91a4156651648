import typing

from .attributes import AttributeStore
from .interfaces import Transport
from .models import ResourceDescriptor
from .types import ABSENT

SELF_LINK_ATTRIBUTE = "self"


class PathResolver:
    """
    A :py:class:`PathResolver` derives the REST paths of a resource type and of
    its instances.  It performs no I/O.

    :param ResourceDescriptor descr: The descriptor of the resource type.
    """

    descr: ResourceDescriptor

    def key_value(self, attrs: AttributeStore) -> typing.Optional[typing.Any]:
        """
        Returns the value of the key attribute, or None for a record that has
        not been saved yet.
        """
        value = attrs.get(self.descr.key_attribute)
        if value is ABSENT or value is None:
            return None
        return value

    def path_component(self, attrs: AttributeStore) -> str:
        """
        Returns the path component specific to an instance, for example
        ``/issue/123`` for the issue whose key is 123, or ``/issue`` for an
        unsaved one.
        """
        path_component = f"/{self.descr.endpoint_name}"
        key = self.key_value(attrs)
        if key is not None:
            path_component += f"/{key}"
        return path_component

    def rest_base_path(self, client: Transport, prefix: str = "/") -> str:
        return client.rest_base_path + prefix + self.descr.endpoint_name

    def collection_path(self, client: Transport, prefix: str = "/") -> str:
        return self.rest_base_path(client, prefix)

    def singular_path(self, client: Transport, key: str, prefix: str = "/") -> str:
        return self.rest_base_path(client, prefix) + "/" + key

    def prefix(self, parent_ids: typing.Mapping[str, typing.Any]) -> str:
        """
        Builds the path prefix from the parent relations in declaration order,
        e.g. ``/project/10/`` for a type that belongs to a project.
        """
        prefix = "/"
        for relation in self.descr.belongs_to:
            prefix += f"{relation}/{parent_ids[relation]}/"
        return prefix

    def url(
        self,
        client: Transport,
        attrs: AttributeStore,
        parent_ids: typing.Mapping[str, typing.Any],
    ) -> str:
        """
        Returns the URL of an instance.  A link provided by the server wins over
        the path of a keyed instance, which in turn wins over the collection
        path used to create a new record.
        """
        prefix = self.prefix(parent_ids)
        self_link = attrs.get(SELF_LINK_ATTRIBUTE)
        if self_link:
            return typing.cast(str, self_link)
        key = self.key_value(attrs)
        if key is not None:
            return self.singular_path(client, str(key), prefix)
        return self.collection_path(client, prefix)

    def __init__(self, descr: ResourceDescriptor):
        self.descr = descr
