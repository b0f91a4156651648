import typing

JSONScalar = typing.Union[bool, int, float, str]
JSONArray = typing.Sequence[typing.Any]
JSONObject = typing.Mapping[str, typing.Any]
MutableJSONObject = typing.MutableMapping[str, typing.Any]
JSONValue = typing.Union[JSONScalar, JSONArray, JSONObject, None]


class AbsentType:
    """
    The type of :py:data:`ABSENT`, a falsy singleton that denotes a key missing
    from an attribute mapping, as opposed to a key present with a ``null`` value.
    """

    _singleton: typing.ClassVar[typing.Optional["AbsentType"]] = None

    def __bool__(self):
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __new__(cls) -> "AbsentType":
        if cls._singleton is None:
            cls._singleton = object.__new__(cls)
        return cls._singleton


ABSENT = AbsentType()
