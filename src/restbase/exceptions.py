import abc
import typing


class RestBaseException(Exception, metaclass=abc.ABCMeta):
    pass


class InvalidDeclarationError(RestBaseException):
    message: str

    def __str__(self):
        return self.message

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(RestBaseException):
    """
    Raised when a resource instance is constructed with options that do not
    satisfy the declarations of its type.
    """

    @property
    @abc.abstractmethod
    def message(self) -> str:
        ...  # pragma: nocover

    def __str__(self):
        return self.message


class MissingRelationError(ConfigurationError):
    resource: typing.Type["resource.Resource"]
    relation: str

    @property
    def message(self):
        return f'required option "{self.relation}" (or "{self.relation}_id") missing for {self.resource.__name__}'

    def __init__(self, resource: typing.Type["resource.Resource"], relation: str):
        super().__init__(resource, relation)
        self.resource = resource
        self.relation = relation


class UnknownResourceTypeError(RestBaseException):
    name: str

    @property
    def message(self):
        return f'no resource known as "{self.name}"'

    def __str__(self):
        return self.message

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name


class UnknownRelationshipError(RestBaseException):
    resource: typing.Type["resource.Resource"]
    name: str

    @property
    def message(self):
        return f'no relationship "{self.name}" declared for {self.resource.__name__}'

    def __str__(self):
        return self.message

    def __init__(self, resource: typing.Type["resource.Resource"], name: str):
        super().__init__(resource, name)
        self.resource = resource
        self.name = name


class HTTPError(RestBaseException):
    """
    Raised by a transport for any non-success response.  The original response
    is kept so that callers can inspect the body the server sent along.
    """

    response: "interfaces.Response"

    @property
    def status(self) -> int:
        return self.response.status

    @property
    def body(self) -> typing.Optional[str]:
        return self.response.body

    @property
    def message(self) -> str:
        return f"HTTP {self.status}"

    def __str__(self):
        return self.message

    def __init__(self, response: "interfaces.Response"):
        super().__init__(response)
        self.response = response


class InvalidResponseError(RestBaseException):
    """
    Raised when a response body does not have the shape a resource expects.
    """

    body: typing.Optional[str]
    detail: str

    @property
    def message(self) -> str:
        return f"unexpected response body ({self.detail})"

    def __str__(self):
        return self.message

    def __init__(self, body: typing.Optional[str], detail: str = ""):
        super().__init__(body, detail)
        self.body = body
        self.detail = detail


class ResponseParseError(InvalidResponseError):
    @property
    def message(self) -> str:
        return f"malformed JSON in response body ({self.__cause__!s})"

    def __init__(self, body: str):
        super().__init__(body, "malformed JSON")


if typing.TYPE_CHECKING:
    from . import interfaces  # noqa: E402
    from . import resource  # noqa: E402
