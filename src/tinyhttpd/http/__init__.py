"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything between "bytes arrived" and "bytes to send", with no sockets
involved:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ request.py      b"GET /hello?name=ada HTTP/1.1\r\n..."              │
    │                   → HTTPRequest(method, path, query)                │
    │ query.py        "name=ada+lovelace" → QueryParams                   │
    │ router.py       exact-match path → RouteHandler                     │
    │ mime_types.py   ".css" → "text/css"                                 │
    │ response.py     HTTPResponse → status line + headers + body bytes   │
    │ errors.py       MalformedRequest, NotFound, ... → status codes      │
    │ status_codes.py HTTPStatus enum with reason phrases                 │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .errors import (
    HTTPError,
    MalformedRequest,
    UnsafePath,
    NotFound,
    MethodNotAllowed,
    InternalError,
)
from .query import QueryParams, decode_component, encode_component
from .request import HTTPRequest, RequestParser, parse_request
from .response import (
    HTTPResponse,
    ResponseBuffer,
    ResponseBuilder,
    ok,
    bad_request,
    not_found,
    method_not_allowed,
    internal_error,
    error_response,
)
from .router import Router, Route, RouteHandler, FunctionHandler
from .status_codes import HTTPStatus
from .mime_types import get_mime_type, DEFAULT_MIME_TYPE

__all__ = [
    # Errors
    "HTTPError",
    "MalformedRequest",
    "UnsafePath",
    "NotFound",
    "MethodNotAllowed",
    "InternalError",
    # Query
    "QueryParams",
    "decode_component",
    "encode_component",
    # Request
    "HTTPRequest",
    "RequestParser",
    "parse_request",
    # Response
    "HTTPResponse",
    "ResponseBuffer",
    "ResponseBuilder",
    "ok",
    "bad_request",
    "not_found",
    "method_not_allowed",
    "internal_error",
    "error_response",
    # Routing
    "Router",
    "Route",
    "RouteHandler",
    "FunctionHandler",
    # Status codes
    "HTTPStatus",
    # MIME types
    "get_mime_type",
    "DEFAULT_MIME_TYPE",
]
