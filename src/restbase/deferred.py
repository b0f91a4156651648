import typing

T = typing.TypeVar("T")


class Deferred(typing.Generic[T]):
    """
    A deferred object encapsulates a lazy evaluated value.
    It takes a function that yields the value for its constructor argument, and
    it behaves as a callable by which it resolves to the yielded value.

    Relationship descriptors use it to refer to child resource types that may
    be declared after the parent type.

    :param Callable[..., T] yielder: a callable that resolves the value.
    :param args: positional arguments for the yielder.
    :param kwargs: keyword arguments for the yielder.
    """

    _yielder: typing.Optional[typing.Callable[..., T]] = None
    _value_yielded: bool = False
    _value: typing.Optional[T] = None
    _args: typing.Sequence[typing.Any]
    _kwargs: typing.Mapping[str, typing.Any]

    @property
    def resolved(self) -> bool:
        return self._value_yielded

    def __init__(self, yielder: typing.Callable[..., T], *args, **kwargs) -> None:
        self._yielder = yielder
        self._args = args
        self._kwargs = kwargs

    def __call__(self) -> T:
        if not self._value_yielded:
            assert self._yielder is not None
            self._value = self._yielder(*self._args, **self._kwargs)
            self._value_yielded = True
        return typing.cast(T, self._value)

    def __repr__(self) -> str:
        if self._value_yielded:
            return f"{type(self).__name__}({self._value!r})"
        return f"{type(self).__name__}(<unresolved>)"


def resolve(value: typing.Union[T, Deferred[T]]) -> T:
    if isinstance(value, Deferred):
        return value()
    return value
