"""
=============================================================================
BUILT-IN ROUTES
=============================================================================

The dynamic routes every tinyhttpd instance serves, in table order:

    GET /         Home page (HTML)
    GET /about    About page (HTML)
    GET /health   {"status": "ok", "uptime_seconds": N} (JSON)
    GET /hello    "Hello, <name>!" from ?name=..., default "world" (text)

None of these can fail. They read nothing but the request (and, for
/health, the process start time), so they are safe to call from any
number of connection threads at once.

=============================================================================
"""

import time

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder
from ..http.router import Router


HOME_PAGE = """<!DOCTYPE html>
<html>
<head>
    <title>tinyhttpd</title>
    <style>
        body { font-family: sans-serif; max-width: 720px; margin: 40px auto; padding: 0 20px; }
        code { background: #f1f1f1; padding: 2px 6px; border-radius: 4px; }
    </style>
</head>
<body>
    <h1>tinyhttpd</h1>
    <p>A small concurrent HTTP/1.1 server: dynamic routes first, static files after.</p>
    <h3>Endpoints</h3>
    <ul>
        <li><a href="/">/</a> - this page</li>
        <li><a href="/about">/about</a> - about this server</li>
        <li><a href="/health">/health</a> - health check (JSON)</li>
        <li><a href="/hello?name=world">/hello?name=world</a> - greeting</li>
    </ul>
    <p>Anything else is looked up under the document root.</p>
</body>
</html>
"""

ABOUT_PAGE = """<!DOCTYPE html>
<html>
<head>
    <title>About tinyhttpd</title>
</head>
<body>
    <h1>About</h1>
    <p>tinyhttpd answers GET requests, one thread per connection, one
    response per connection. Every response is sent with
    <code>Connection: close</code>.</p>
</body>
</html>
"""


def home(request: HTTPRequest) -> HTTPResponse:
    """Default landing page."""
    return ResponseBuilder().html(HOME_PAGE).build()


def about(request: HTTPRequest) -> HTTPResponse:
    return ResponseBuilder().html(ABOUT_PAGE).build()


def hello(request: HTTPRequest) -> HTTPResponse:
    """
    Greet whoever is named in the query string.

        GET /hello                  → Hello, world!
        GET /hello?name=Ada+Lovelace → Hello, Ada Lovelace!
    """
    name = request.get_query("name") or "world"
    return ResponseBuilder().text(f"Hello, {name}!").build()


class HealthHandler:
    """
    Health check endpoint handler.

    Answers with 200 and a small JSON object as long as the process can
    answer at all; load balancers and probes only need the status field.

        {"status": "ok", "uptime_seconds": 3600}
    """

    def __init__(self):
        self._start_time = time.monotonic()

    @property
    def uptime(self) -> float:
        """Seconds since the handler was created."""
        return time.monotonic() - self._start_time

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        return (ResponseBuilder()
            .json({"status": "ok", "uptime_seconds": int(self.uptime)})
            .build())


def default_router() -> Router:
    """
    Build the built-in route table.

    The table is returned unfrozen so callers can add their own routes;
    HTTPServer freezes it before serving.
    """
    router = Router()
    router.add_route("/", home)
    router.add_route("/about", about)
    router.add_route("/health", HealthHandler())
    router.add_route("/hello", hello)
    return router
