"""
=============================================================================
HTTP REQUEST-LINE PARSING
=============================================================================

tinyhttpd only needs the FIRST line of a request. Headers may be present
in the buffer, but nothing downstream reads them, and GET requests carry
no body.

    GET /search?q=hello+world HTTP/1.1\r\n      ← the only line we parse
    Host: localhost:8080\r\n                    ← read, ignored
    \r\n

=============================================================================
SPLITTING THE REQUEST LINE
=============================================================================

    "GET /search?q=hello+world HTTP/1.1"
     ─┬─ ───────────┬───────── ────┬───
      │             │              │
      │             │              └── after the 2nd space: ignored
      │             └── request target: between 1st and 2nd space
      └── method: everything before the 1st space

    request target "/search?q=hello+world"
                    ───┬─── ───────┬─────
                       │           │
                     path      raw query (split on the FIRST "?")

The path is NOT percent-decoded. The safety checker looks at exactly the
characters the client sent, so "/%2e%2e/etc/passwd" stays a literal (and
harmless) filename instead of turning into "/../etc/passwd" after the
check has already passed.

=============================================================================
WHAT MAKES A REQUEST MALFORMED (→ 400)
=============================================================================

    - no line terminator inside the read buffer (truncated or garbage)
    - no space after the method, or no space after the target
    - empty method or empty target
    - method longer than max_method_length
    - target longer than max_target_length
    - path empty or not starting with "/"

=============================================================================
"""

from dataclasses import dataclass, field

from .errors import MalformedRequest
from .query import QueryParams, DEFAULT_MAX_PARAMS


DEFAULT_MAX_METHOD_LENGTH = 16
DEFAULT_MAX_TARGET_LENGTH = 2048


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed request.

    Immutable once built. Each handling thread creates its own and drops
    it when the connection closes, so nothing here is ever shared.

    Attributes:
        method:         Request method exactly as sent ("GET", "POST", ...)
        path:           Target without the query string; never empty,
                        always starts with "/"
        query:          Decoded query parameters
        raw_query:      The undecoded text after "?", or ""
        client_address: (ip, port) of the peer, for logging
    """

    method: str
    path: str
    query: QueryParams = field(default_factory=QueryParams)
    raw_query: str = ""
    client_address: tuple[str, int] = ("", 0)

    @property
    def target(self) -> str:
        """The request target as it appeared on the wire."""
        if self.raw_query:
            return f"{self.path}?{self.raw_query}"
        return self.path

    def get_query(self, name: str, default: str | None = None) -> str | None:
        """
        Get the first value of a query parameter.

        Example:
            # URL: /hello?name=ada&name=grace
            request.get_query("name")  # Returns "ada"
        """
        return self.query.get(name, default)


class RequestParser:
    """
    Parses the request line out of raw request bytes.

    Bytes are decoded as latin-1, which maps every byte to exactly one
    character, so decoding itself can never fail and nothing the client
    sent is lost before the safety checks run.
    """

    def __init__(
        self,
        max_method_length: int = DEFAULT_MAX_METHOD_LENGTH,
        max_target_length: int = DEFAULT_MAX_TARGET_LENGTH,
        max_query_params: int = DEFAULT_MAX_PARAMS,
    ):
        self.max_method_length = max_method_length
        self.max_target_length = max_target_length
        self.max_query_params = max_query_params

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Parse raw request bytes into an HTTPRequest.

        Args:
            data: Bytes read from the connection (possibly truncated).
            client_address: Peer (ip, port) for logging.

        Returns:
            Parsed HTTPRequest.

        Raises:
            MalformedRequest: If the request line cannot be split.
        """
        # ─────────────────────────────────────────────────────────────────
        # STEP 1: Isolate the request line
        # ─────────────────────────────────────────────────────────────────
        # "\r\n" is what clients send; a bare "\n" is accepted too.
        line_end = data.find(b"\n")
        if line_end == -1:
            raise MalformedRequest("No line terminator in request")

        line = data[:line_end].rstrip(b"\r").decode("latin-1")

        # ─────────────────────────────────────────────────────────────────
        # STEP 2: METHOD SP TARGET SP ...
        # ─────────────────────────────────────────────────────────────────
        method, target = self._split_request_line(line)

        # ─────────────────────────────────────────────────────────────────
        # STEP 3: Target → path + raw query
        # ─────────────────────────────────────────────────────────────────
        path, _, raw_query = target.partition("?")
        if not path.startswith("/"):
            raise MalformedRequest(f"Request target must start with '/': {path!r}")

        return HTTPRequest(
            method=method,
            path=path,
            query=QueryParams.parse(raw_query, self.max_query_params),
            raw_query=raw_query,
            client_address=client_address,
        )

    def _split_request_line(self, line: str) -> tuple[str, str]:
        method_end = line.find(" ")
        if method_end == -1:
            raise MalformedRequest("No space after method")

        method = line[:method_end]
        if not method:
            raise MalformedRequest("Empty method")
        if len(method) > self.max_method_length:
            raise MalformedRequest(f"Method too long: {len(method)} chars")

        target_start = method_end + 1
        target_end = line.find(" ", target_start)
        if target_end == -1:
            raise MalformedRequest("No space after request target")

        target = line[target_start:target_end]
        if not target:
            raise MalformedRequest("Empty request target")
        if len(target) > self.max_target_length:
            raise MalformedRequest(f"Request target too long: {len(target)} chars")

        return method, target


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
) -> HTTPRequest:
    """
    Convenience function to parse a request with default limits.

    Use RequestParser directly when the limits come from configuration.
    """
    return RequestParser().parse(data, client_address)
