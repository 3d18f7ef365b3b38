"""
=============================================================================
HTTP SERVER (CONNECTION HANDLER)
=============================================================================

HTTPServer ties the pieces together. The SocketServer accepts sockets and
starts one thread per connection; each thread runs _process_connection():

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      ONE CONNECTION, ONE REQUEST                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   read_request()   ── None (empty/timeout/reset) ──► close, no reply │
    │        │                                                             │
    │        ▼                                                             │
    │   RequestParser    ── MalformedRequest ──────────────► 400           │
    │        │                                                             │
    │        ▼                                                             │
    │   method == GET?   ── no ─────────────────────────────► 405 + Allow  │
    │        │                                                             │
    │        ▼                                                             │
    │   Router.match()   ── hit ──► route handler ──────────► 200          │
    │        │                                                             │
    │        └── miss ──► StaticFileHandler                                │
    │                        ├── unsafe path ───────────────► 400          │
    │                        ├── no such file ──────────────► 404          │
    │                        ├── stat/read failure ─────────► 500          │
    │                        └── file bytes ────────────────► 200          │
    │                                                                      │
    │   ResponseBuffer ──► sendall() ──► clear buffer ──► close socket     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Dynamic routes are consulted BEFORE the path safety check, so the check
only guards filesystem lookups. A route path never contains "..", so the
order cannot expose a file.

Every response carries "Connection: close"; there is no keep-alive.

=============================================================================
"""

import logging
import time
from pathlib import Path
from typing import Optional

from .access_log import RequestLog, log_request, timestamp, configure_logging
from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState, CancellationToken
from .handlers import StaticFileHandler, default_router
from .http import (
    HTTPRequest, RequestParser,
    HTTPResponse, ResponseBuffer,
    HTTPError, MethodNotAllowed,
    Router,
    error_response, internal_error,
)


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Single-request-per-connection HTTP/1.x server.

    Usage:
        server = HTTPServer(ServerConfig(port=8080, document_root="./site"))

        @server.get("/ping")
        def ping(request):
            return ok("pong")

        server.run()  # Blocks until SIGINT/SIGTERM or shutdown()

    Without sockets (tests, embedding):
        server = HTTPServer()
        raw = server.handle_connection(b"GET /health HTTP/1.1\\r\\n\\r\\n")
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        router: Optional[Router] = None,
        token: Optional[CancellationToken] = None,
    ):
        """
        Args:
            config: Server configuration. Defaults are used if not provided.
            router: Route table. default_router() if not provided.
            token: Cancellation token shared with the listener.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config, token)

        self._parser = RequestParser(
            max_method_length=self.config.max_method_length,
            max_target_length=self.config.max_target_length,
            max_query_params=self.config.max_query_params,
        )

        self._router = router if router is not None else default_router()
        self._static = StaticFileHandler(self.config.document_root, self.config.index_file)

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    @property
    def router(self) -> Router:
        return self._router

    @property
    def token(self) -> CancellationToken:
        return self._socket_server.token

    @property
    def socket_server(self) -> SocketServer:
        return self._socket_server

    def route(self, path: str):
        """Register a route handler (decorator)."""
        return self._router.route(path)

    def get(self, path: str):
        """Register a GET route (decorator). Same as route(); only GET is served."""
        return self._router.get(path)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start serving (blocking).

        Freezes the route table, then runs the accept loop until the
        token is cancelled.

        Raises:
            OSError: If the listening socket cannot be bound.
        """
        configure_logging(self.config.log_level)
        self._router.freeze()

        if not Path(self.config.document_root).is_dir():
            logger.warning(
                f"Document root {self.config.document_root!r} is not a directory; "
                "static requests will return 404"
            )

        logger.info(
            f"Serving {len(self._router)} routes, static files from {self._static.root_dir}"
        )

        try:
            self._socket_server.start(self._process_connection)
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. Safe from any thread."""
        self._socket_server.shutdown()

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def handle_request(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a parsed request.

        Raises:
            HTTPError: MethodNotAllowed, UnsafePath, NotFound, InternalError.
        """
        if request.method != "GET":
            raise MethodNotAllowed(request.method)

        route = self._router.match(request.path)
        if route is not None:
            return route.handler.handle(request)

        return self._static.handle(request)

    def respond(
        self,
        raw_request: bytes,
        client_address: tuple[str, int] = ("", 0),
        conn: Optional[Connection] = None,
    ) -> tuple[HTTPResponse, Optional[HTTPRequest]]:
        """
        Turn raw request bytes into exactly one response.

        Never raises: HTTPErrors become their error response, anything
        else is logged with traceback and becomes a 500.

        Returns:
            (response, request); request is None if parsing failed.
        """
        conn_id = conn.id if conn else "-"
        request: Optional[HTTPRequest] = None

        try:
            if conn:
                conn.state = ConnectionState.PARSING
            request = self._parser.parse(raw_request, client_address)

            if conn:
                conn.state = ConnectionState.ROUTING
            response = self.handle_request(request)

        except HTTPError as e:
            logger.debug(f"[{conn_id}] {e.status_code} {e}")
            response = error_response(e)

        except Exception as e:
            logger.exception(f"[{conn_id}] Handler error: {e}")
            response = internal_error()

        return response, request

    def handle_connection(
        self,
        raw_request: bytes,
        client_address: tuple[str, int] = ("", 0),
    ) -> bytes:
        """
        Produce the exact bytes a connection carrying raw_request receives.

        Empty input models a connection whose read failed: no bytes.
        """
        if not raw_request:
            return b""

        response, _ = self.respond(raw_request, client_address)
        return response.to_bytes()

    def _process_connection(self, conn: Connection):
        """Serve one connection (runs on its own thread)."""
        started = time.perf_counter()

        with conn:
            raw_request = conn.read_request()
            if raw_request is None:
                logger.debug(f"[{conn.id}] Nothing to answer; closing")
                return

            response, request = self.respond(raw_request, conn.address, conn)

            buffer = ResponseBuffer()
            try:
                response.write_to(buffer)
                sent = conn.send_response(buffer.getvalue())
            finally:
                buffer.clear()

        if sent:
            self._log_access(conn, request, response, started)

    def _log_access(
        self,
        conn: Connection,
        request: Optional[HTTPRequest],
        response: HTTPResponse,
        started: float,
    ):
        entry = RequestLog(
            connection_id=conn.id,
            client_ip=conn.client_ip,
            method=request.method if request else "-",
            path=request.path if request else "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=(time.perf_counter() - started) * 1000,
            timestamp=timestamp(),
        )
        log_request(entry, self.config.log_format)


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    Create a server with the default route table.

    Example:
        app = create_app(ServerConfig(port=3000))
        app.run()
    """
    return HTTPServer(config)
