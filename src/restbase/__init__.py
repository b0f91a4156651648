"""
A base layer that maps the resources of a REST service onto Python objects.
"""
from .attributes import AttributeStore  # noqa: F401
from .client import ClientOptions, HTTPClient, HTTPResponse  # noqa: F401
from .declarative import HasMany, HasOne, ResourceRegistry  # noqa: F401
from .exceptions import (  # noqa: F401
    ConfigurationError,
    HTTPError,
    InvalidDeclarationError,
    InvalidResponseError,
    MissingRelationError,
    ResponseParseError,
    RestBaseException,
    UnknownRelationshipError,
    UnknownResourceTypeError,
)
from .factory import ResourceFactory  # noqa: F401
from .relationships import HasManyProxy  # noqa: F401
from .resource import Resource  # noqa: F401
from .types import ABSENT  # noqa: F401
