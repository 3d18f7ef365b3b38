"""
=============================================================================
TINYHTTPD - Minimal GET-only HTTP/1.x Server on Raw Sockets
=============================================================================

One request per connection, one thread per connection, a fixed table of
dynamic routes, and static files from a document root for everything
else.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    tinyhttpd/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m tinyhttpd)
    ├── server.py            # HTTPServer: one connection → one response
    ├── config.py            # ServerConfig dataclass
    ├── access_log.py        # Access log records, logging setup
    ├── core/                # Networking
    │   ├── cancellation.py  # CancellationToken
    │   ├── connection.py    # Connection wrapper
    │   └── socket_server.py # Accept loop, thread per connection
    ├── http/                # Protocol pieces
    │   ├── errors.py        # HTTPError taxonomy
    │   ├── query.py         # Query string decoding
    │   ├── request.py       # Request-line parsing
    │   ├── response.py      # Response framing
    │   ├── router.py        # Exact-match route table
    │   ├── status_codes.py  # HTTPStatus
    │   └── mime_types.py    # Extension → Content-Type
    └── handlers/
        ├── builtin.py       # /, /about, /health, /hello
        └── static.py        # Path safety + document root lookup

=============================================================================
QUICK START
=============================================================================

    from tinyhttpd import HTTPServer, ServerConfig
    from tinyhttpd.http import ok

    server = HTTPServer(ServerConfig(port=8080, document_root="./public"))

    @server.get("/ping")
    def ping(request):
        return ok("pong")

    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, create_app
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
