import collections.abc
import json
import typing

from .types import ABSENT, AbsentType, JSONObject, JSONValue, MutableJSONObject

NestedUnder = typing.Union[None, str, typing.Sequence[str]]


class AttributeStore(collections.abc.MutableMapping):
    """
    An :py:class:`AttributeStore` owns the raw attributes of a single resource
    instance, as decoded from the JSON representation the server sends.

    The store wraps the dictionary it is given without copying it, so that the
    attributes of a child resource built from a nested value stay shared with
    the parent's.

    :param Optional[MutableMapping[str, Any]] data: The initial attributes.
    """

    data: MutableJSONObject

    def __getitem__(self, key: str) -> JSONValue:
        return self.data[key]

    def __setitem__(self, key: str, value: JSONValue) -> None:
        self.data[key] = value

    def __delitem__(self, key: str) -> None:
        del self.data[key]

    def __iter__(self) -> typing.Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.data!r})"

    def get(  # type: ignore[override]
        self, key: str, default: typing.Union[JSONValue, AbsentType] = ABSENT
    ) -> typing.Union[JSONValue, AbsentType]:
        """
        Returns the value stored under ``key``.  Unlike :py:meth:`dict.get`, a
        missing key yields :py:data:`ABSENT` so that it can be told apart from
        a key whose value is ``null``.
        """
        return self.data.get(key, default)

    def has(self, key: str) -> bool:
        return key in self.data

    def lookup(
        self, attribute_key: str, nested_under: NestedUnder = None
    ) -> typing.Union[JSONValue, AbsentType]:
        """
        Looks up a possibly nested attribute::

            store.lookup("foo")                  # => store["foo"]
            store.lookup("foo", "bar")           # => store["bar"]["foo"]
            store.lookup("foo", ["bar", "baz"])  # => store["bar"]["baz"]["foo"]

        :param str attribute_key: The key of the attribute.
        :param nested_under: A key, or a sequence of keys, leading to the mapping that holds the attribute.
        :return: The value, or :py:data:`ABSENT` if any key along the path is missing.
        """
        if nested_under is None:
            path: typing.Sequence[str] = ()
        elif isinstance(nested_under, str):
            path = (nested_under,)
        else:
            path = nested_under

        parent: typing.Any = self.data
        for key in path:
            if not isinstance(parent, collections.abc.Mapping) or key not in parent:
                return ABSENT
            parent = parent[key]
        if not isinstance(parent, collections.abc.Mapping):
            return ABSENT
        return parent.get(attribute_key, ABSENT)

    def merge(self, incoming: JSONObject, clobber: bool = True) -> None:
        """
        Merges ``incoming`` into the store.

        If ``clobber`` is True, every top-level key of ``incoming`` replaces
        the stored value whatever its type.  Otherwise nested mappings are
        merged recursively while any other value overwrites the stored one.

        :param Mapping[str, Any] incoming: The attributes to merge.
        :param bool clobber: Whether to perform a shallow overlay.
        """
        if clobber:
            self.data.update(incoming)
        else:
            _deep_merge(self.data, incoming)

    def to_json(self) -> str:
        return json.dumps(self.data)

    def __init__(self, data: typing.Optional[MutableJSONObject] = None):
        self.data = data if data is not None else {}


def _deep_merge(target: MutableJSONObject, incoming: JSONObject) -> None:
    for k, v in incoming.items():
        if isinstance(v, collections.abc.Mapping):
            existing = target.get(k)
            if isinstance(existing, collections.abc.MutableMapping):
                _deep_merge(existing, v)
            else:
                # nothing to merge into; take the incoming mapping as a whole
                fresh: typing.Dict[str, typing.Any] = {}
                _deep_merge(fresh, v)
                target[k] = fresh
        else:
            target[k] = v
