"""
This module contains the interface definitions of the collaborators that
resources talk to: the transport that performs HTTP requests and the proxy
that wraps the children of a ``has_many`` relationship.

"""
import abc
import typing


class Response(metaclass=abc.ABCMeta):
    """
    A :py:class:`Response` is what a :py:class:`Transport` yields for every request.
    """

    @property
    @abc.abstractmethod
    def body(self) -> typing.Optional[str]:
        """
        Returns the response body as a string, or None if the response had no body.
        """
        ...  # pragma: nocover

    @property
    @abc.abstractmethod
    def status(self) -> int:
        """
        Returns the HTTP status code of the response.
        """
        ...  # pragma: nocover


class Transport(metaclass=abc.ABCMeta):
    """
    A :py:class:`Transport` performs blocking HTTP requests on behalf of resources.

    Every verb method raises :py:class:`restbase.exceptions.HTTPError` carrying the
    response when the server answers with a non-success status.
    """

    @property
    @abc.abstractmethod
    def rest_base_path(self) -> str:
        """
        Returns the path prefix under which every resource endpoint lives,
        for example ``/jira/rest/api/2``.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def get(self, path: str) -> Response:
        """
        Issues a GET request.

        :param str path: A path below the site, or an absolute URL.
        :return: The :py:class:`Response`.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def delete(self, path: str) -> Response:
        """
        Issues a DELETE request.

        :param str path: A path below the site, or an absolute URL.
        :return: The :py:class:`Response`.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def post(self, path: str, body: typing.Optional[str] = None) -> Response:
        """
        Issues a POST request.

        :param str path: A path below the site, or an absolute URL.
        :param Optional[str] body: The serialized request body.
        :return: The :py:class:`Response`.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def put(self, path: str, body: typing.Optional[str] = None) -> Response:
        """
        Issues a PUT request.

        :param str path: A path below the site, or an absolute URL.
        :param Optional[str] body: The serialized request body.
        :return: The :py:class:`Response`.
        """
        ...  # pragma: nocover


class CollectionProxy(metaclass=abc.ABCMeta):
    """
    A :py:class:`CollectionProxy` wraps the resource instances constructed for
    a ``has_many`` relationship.
    """

    @abc.abstractmethod
    def __iter__(self) -> typing.Iterator[typing.Any]:
        ...  # pragma: nocover

    @abc.abstractmethod
    def __len__(self) -> int:
        ...  # pragma: nocover

    @abc.abstractmethod
    def refresh(self) -> "CollectionProxy":
        """
        Replaces the wrapped instances by a fresh listing from the server.

        :return: The proxy itself.
        """
        ...  # pragma: nocover
