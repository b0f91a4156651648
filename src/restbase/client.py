import dataclasses
import logging
import os
import re
import typing

import requests

from .exceptions import HTTPError
from .factory import ResourceFactory
from .interfaces import Response, Transport
from .resource import Resource

logger = logging.getLogger(__name__)

_ABSOLUTE_URL_RE = re.compile(r"^https?://", re.IGNORECASE)

DEFAULT_SITE = "http://localhost:2990"
DEFAULT_CONTEXT_PATH = "/jira"
REST_API_PATH = "/rest/api/2"


@dataclasses.dataclass
class ClientOptions:
    """
    Connection settings of an :py:class:`HTTPClient`.
    """

    site: str = DEFAULT_SITE
    context_path: str = DEFAULT_CONTEXT_PATH
    rest_base_path: typing.Optional[str] = None
    """
    Defaults to ``context_path`` followed by ``/rest/api/2``.
    """
    username: typing.Optional[str] = None
    password: typing.Optional[str] = None
    verify_ssl: bool = True
    timeout: typing.Optional[float] = None
    headers: typing.Dict[str, str] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        self.site = self.site.rstrip("/")
        if self.rest_base_path is None:
            self.rest_base_path = self.context_path + REST_API_PATH

    @classmethod
    def from_env(
        cls, prefix: str = "RESTBASE_", environ: typing.Optional[typing.Mapping[str, str]] = None
    ) -> "ClientOptions":
        """
        Reads the options from environment variables named after the fields,
        e.g. ``RESTBASE_SITE`` and ``RESTBASE_VERIFY_SSL``.  Unset variables
        leave the defaults in place.
        """
        env = os.environ if environ is None else environ
        kwargs: typing.Dict[str, typing.Any] = {}
        for name in ("site", "context_path", "rest_base_path", "username", "password"):
            value = env.get(prefix + name.upper())
            if value is not None:
                kwargs[name] = value
        verify_ssl = env.get(prefix + "VERIFY_SSL")
        if verify_ssl is not None:
            kwargs["verify_ssl"] = verify_ssl.strip().lower() not in ("0", "false", "no", "off")
        timeout = env.get(prefix + "TIMEOUT")
        if timeout:
            kwargs["timeout"] = float(timeout)
        return cls(**kwargs)


class HTTPResponse(Response):
    _body: typing.Optional[str]
    _status: int
    headers: typing.Mapping[str, str]

    @property
    def body(self) -> typing.Optional[str]:
        return self._body

    @property
    def status(self) -> int:
        return self._status

    @classmethod
    def from_requests(cls, response: requests.Response) -> "HTTPResponse":
        return cls(response.text if response.content else None, response.status_code, dict(response.headers))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._status}>"

    def __init__(
        self,
        body: typing.Optional[str],
        status: int,
        headers: typing.Optional[typing.Mapping[str, str]] = None,
    ):
        self._body = body
        self._status = status
        self.headers = headers if headers is not None else {}


class HTTPClient(Transport):
    """
    A :py:class:`Transport` backed by a :py:class:`requests.Session`.

    :param Optional[ClientOptions] options: The connection settings; defaults are used if omitted.
    :param Optional[requests.Session] session: A session to reuse.
    """

    options: ClientOptions
    session: requests.Session

    @property
    def rest_base_path(self) -> str:
        return typing.cast(str, self.options.rest_base_path)

    def resource(self, resource_class: typing.Type[Resource]) -> ResourceFactory:
        """
        Returns a :py:class:`ResourceFactory` for ``resource_class`` bound to this client.
        """
        return ResourceFactory(self, resource_class)

    def build_url(self, path: str) -> str:
        if _ABSOLUTE_URL_RE.match(path):
            return path
        return self.options.site + path

    def request(self, method: str, path: str, body: typing.Optional[str] = None) -> HTTPResponse:
        url = self.build_url(path)
        headers = {"Accept": "application/json"}
        if body is not None:
            headers["Content-Type"] = "application/json"
        logger.debug("%s %s", method, url)
        resp = self.session.request(
            method,
            url,
            data=body.encode("utf-8") if body is not None else None,
            headers=headers,
            timeout=self.options.timeout,
            verify=self.options.verify_ssl,
        )
        response = HTTPResponse.from_requests(resp)
        logger.debug("%s %s -> %d", method, url, response.status)
        if not (200 <= response.status < 300):
            logger.warning("%s %s failed with HTTP %d", method, url, response.status)
            raise HTTPError(response)
        return response

    def get(self, path: str) -> HTTPResponse:
        return self.request("GET", path)

    def delete(self, path: str) -> HTTPResponse:
        return self.request("DELETE", path)

    def post(self, path: str, body: typing.Optional[str] = None) -> HTTPResponse:
        return self.request("POST", path, body)

    def put(self, path: str, body: typing.Optional[str] = None) -> HTTPResponse:
        return self.request("PUT", path, body)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HTTPClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __init__(
        self,
        options: typing.Optional[ClientOptions] = None,
        session: typing.Optional[requests.Session] = None,
    ):
        self.options = options if options is not None else ClientOptions()
        self.session = session if session is not None else requests.Session()
        self.session.headers.update(self.options.headers)
        if self.options.username is not None:
            self.session.auth = (self.options.username, self.options.password or "")

