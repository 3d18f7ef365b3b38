"""
=============================================================================
HTTP ERROR TAXONOMY
=============================================================================

Every failure that can happen while handling a connection maps to exactly
one HTTP status. Nothing here is allowed to crash the process, and nothing
is retried: the error ends the connection that produced it and nothing else.

    ┌───────────────────┬────────┬──────────────────────────────────────────┐
    │ Exception         │ Status │ Raised by                                │
    ├───────────────────┼────────┼──────────────────────────────────────────┤
    │ MalformedRequest  │  400   │ request-line parser                      │
    │ UnsafePath        │  400   │ path safety checker (traversal attempt)  │
    │ NotFound          │  404   │ static resolver (missing / unreadable)   │
    │ MethodNotAllowed  │  405   │ connection handler (anything but GET)    │
    │ InternalError     │  500   │ static resolver (stat / read failures)   │
    └───────────────────┴────────┴──────────────────────────────────────────┘

UnsafePath and NotFound stay distinct: a traversal attempt is a bad
request, a missing file is a missing file. Clients see two different
status codes and the logs see two different exception types.

=============================================================================
"""

from typing import Sequence

from .status_codes import HTTPStatus


class HTTPError(Exception):
    """
    Base class for errors that become an HTTP error response.

    Carries the status code that should be returned to the client.
    """

    status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "", status_code: HTTPStatus | None = None):
        super().__init__(message or self.__class__.__name__)
        if status_code is not None:
            self.status_code = HTTPStatus(status_code)


class MalformedRequest(HTTPError):
    """The request line could not be split into method and target."""

    status_code = HTTPStatus.BAD_REQUEST


class UnsafePath(HTTPError):
    """The path escapes, or tries to escape, the document root."""

    status_code = HTTPStatus.BAD_REQUEST


class NotFound(HTTPError):
    """No route matched and no readable file exists for the path."""

    status_code = HTTPStatus.NOT_FOUND


class MethodNotAllowed(HTTPError):
    """The method is not GET."""

    status_code = HTTPStatus.METHOD_NOT_ALLOWED

    def __init__(self, method: str, allowed: Sequence[str] = ("GET",)):
        super().__init__(f"Method not allowed: {method}")
        self.method = method
        self.allowed = list(allowed)


class InternalError(HTTPError):
    """The file was found but could not be stat'ed or read completely."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
