"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server can put on the wire, with their reason
phrases. tinyhttpd only answers GET, never negotiates, never redirects
and never caches, so the table is small:

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  Code  │ When tinyhttpd sends it                                   │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  200   │ A route handler answered, or a static file was read       │
    │  400   │ Malformed request line, or a path that failed the safety  │
    │        │ check (path traversal attempt)                            │
    │  404   │ No route and no file under the document root              │
    │  405   │ Any method other than GET                                 │
    │  500   │ The file exists but could not be stat'ed or fully read    │
    └────────┴───────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    This enum extends IntEnum, so status codes can be used as integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200                        # Route handler or static file served

    BAD_REQUEST = 400               # Malformed request line or unsafe path
    NOT_FOUND = 404                 # Nothing matched
    METHOD_NOT_ALLOWED = 405        # Only GET is served

    INTERNAL_SERVER_ERROR = 500     # Filesystem failure after the path was accepted

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES.get(self, "Unknown")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
