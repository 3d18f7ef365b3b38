"""
=============================================================================
HTTP RESPONSE BUILDING
=============================================================================

Every response tinyhttpd writes has the same shape:

    HTTP/1.1 200 OK\r\n                  ← status line
    Content-Type: text/html\r\n          ← from the handler / MIME table
    Content-Length: 1234\r\n             ← ALWAYS len(body), never trusted
    Connection: close\r\n                ← asserted, not negotiated
    \r\n                                 ← end of headers
    <body bytes>

There is no chunked framing and no keep-alive, so Content-Length is the
only thing that tells the client where the body ends. That is why it is
computed during serialization and cannot be set by callers.

=============================================================================
THE RESPONSE BUFFER
=============================================================================

Serialization writes into a ResponseBuffer: a byte container that owns
its storage and doubles its capacity whenever it runs out.

    capacity 1024 ──► 2048 ──► 4096 ──► ...
                     (amortized O(1) per appended byte)

The connection handler clears the buffer as soon as the bytes have been
handed to the socket, so a large static file is not kept alive any longer
than the write takes.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union
import json

from .errors import HTTPError, MethodNotAllowed
from .mime_types import get_mime_type
from .status_codes import HTTPStatus


# Framing headers owned by the serializer; producers cannot override them
_FRAMING_HEADERS = {"content-type", "content-length", "connection"}


class ResponseBuffer:
    """
    Growable byte buffer with explicit doubling growth.

    Usage:
        buffer = ResponseBuffer()
        buffer.extend(b"HTTP/1.1 200 OK\\r\\n")
        data = buffer.getvalue()
        buffer.clear()   # release the storage
    """

    def __init__(self, capacity: int = 1024):
        self._data = bytearray(max(capacity, 1))
        self._length = 0

    @property
    def capacity(self) -> int:
        """Bytes of storage currently allocated."""
        return len(self._data)

    def _reserve(self, extra: int) -> None:
        needed = self._length + extra
        capacity = len(self._data)
        if needed <= capacity:
            return

        capacity = max(capacity, 1)
        while capacity < needed:
            capacity *= 2
        self._data.extend(bytes(capacity - len(self._data)))

    def append(self, byte: int) -> None:
        """Append a single byte."""
        self._reserve(1)
        self._data[self._length] = byte
        self._length += 1

    def extend(self, data: bytes) -> None:
        """Append a run of bytes."""
        size = len(data)
        self._reserve(size)
        self._data[self._length:self._length + size] = data
        self._length += size

    def getvalue(self) -> bytes:
        """Return a copy of the bytes written so far."""
        return bytes(self._data[:self._length])

    def clear(self) -> None:
        """Drop the contents and release the backing storage."""
        self._data = bytearray()
        self._length = 0

    def __len__(self) -> int:
        return self._length


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    Handlers return one of these; the connection handler serializes it
    with write_to() (or to_bytes()) and sends the result.

        HTTPResponse(                      HTTP/1.1 200 OK
          status=HTTPStatus.OK,            Content-Type: application/json
          content_type="application/json", Content-Length: 16
          body=b'{"status": "ok"}',  ───►  Connection: close
        )
                                           {"status": "ok"}
    """

    status: HTTPStatus = HTTPStatus.OK
    content_type: str = "text/plain"
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)  # Extra headers (e.g. Allow)
    version: str = "HTTP/1.1"

    @property
    def reason(self) -> str:
        """Reason phrase for the status code ("OK", "Not Found", ...)."""
        return HTTPStatus(self.status).phrase

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {int(self.status)} {self.reason}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """
        Set an extra response header. Returns self for chaining.

        Content-Type, Content-Length and Connection are written by the
        serializer and are ignored here.
        """
        self.headers[name] = value
        return self

    def write_to(self, buffer: ResponseBuffer) -> ResponseBuffer:
        """
        Serialize the response into buffer.

        Returns:
            The same buffer, for chaining.
        """
        lines = [
            self.status_line,
            f"Content-Type: {self.content_type}",
            f"Content-Length: {len(self.body)}",
            "Connection: close",
        ]

        for name, value in self.headers.items():
            if name.lower() in _FRAMING_HEADERS:
                continue
            lines.append(f"{name}: {value}")

        # Empty line separates headers from body
        lines.append("")
        lines.append("")

        buffer.extend("\r\n".join(lines).encode("latin-1"))
        buffer.extend(self.body)
        return buffer

    def to_bytes(self) -> bytes:
        """Serialize the response to bytes ready for socket.sendall()."""
        buffer = ResponseBuffer(capacity=256 + len(self.body))
        try:
            return self.write_to(buffer).getvalue()
        finally:
            buffer.clear()


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .json({"status": "ok"})
            .build())

    Each method returns self, except build().
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._content_type = "text/plain"
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = HTTPStatus(status)
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        self._content_type = content_type
        return self

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set the response body (strings are encoded as UTF-8)."""
        if isinstance(body, str):
            self._body = body.encode("utf-8")
        else:
            self._body = body
        return self

    def text(self, text: str) -> "ResponseBuilder":
        """Plain text body, Content-Type text/plain."""
        self._content_type = "text/plain"
        return self.body(text)

    def html(self, html: str) -> "ResponseBuilder":
        """HTML body, Content-Type text/html."""
        self._content_type = "text/html"
        return self.body(html)

    def json(self, data: Any) -> "ResponseBuilder":
        """
        JSON body, Content-Type application/json.

        ensure_ascii=False keeps non-ASCII characters readable; the
        body is still UTF-8 encoded bytes.
        """
        self._content_type = "application/json"
        return self.body(json.dumps(data, ensure_ascii=False))

    def file(self, content: bytes, filename: str) -> "ResponseBuilder":
        """File body, Content-Type detected from the filename extension."""
        self._content_type = get_mime_type(filename)
        self._body = content
        return self

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            content_type=self._content_type,
            body=self._body,
            headers=dict(self._headers),
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# Error bodies are small JSON objects carrying the reason phrase only.
# They never echo paths or exception text back to the client.
#
# =============================================================================

def ok(body: Union[str, bytes, dict, list] = "", content_type: Optional[str] = None) -> HTTPResponse:
    """
    Create a 200 OK response.

    dict/list → JSON, str → text/plain (or content_type), bytes → raw.
    """
    builder = ResponseBuilder().status(HTTPStatus.OK)

    if isinstance(body, (dict, list)):
        builder.json(body)
    elif isinstance(body, str):
        builder.text(body)
    else:
        builder.body(body).content_type("application/octet-stream")

    if content_type:
        builder.content_type(content_type)

    return builder.build()


def error(status: HTTPStatus) -> HTTPResponse:
    """Create an error response with a {"error": <reason>} JSON body."""
    status = HTTPStatus(status)
    return ResponseBuilder().status(status).json({"error": status.phrase}).build()


def bad_request() -> HTTPResponse:
    return error(HTTPStatus.BAD_REQUEST)


def not_found() -> HTTPResponse:
    return error(HTTPStatus.NOT_FOUND)


def method_not_allowed(allowed_methods: list[str]) -> HTTPResponse:
    """
    Create a 405 Method Not Allowed response.

    Includes the Allow header listing valid methods (RFC 7231 requirement).
    """
    response = error(HTTPStatus.METHOD_NOT_ALLOWED)
    return response.set_header("Allow", ", ".join(allowed_methods))


def internal_error() -> HTTPResponse:
    return error(HTTPStatus.INTERNAL_SERVER_ERROR)


def error_response(exc: HTTPError) -> HTTPResponse:
    """Map an HTTPError to the response the client should see."""
    if isinstance(exc, MethodNotAllowed):
        return method_not_allowed(exc.allowed)
    return error(exc.status_code)
