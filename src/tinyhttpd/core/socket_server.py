"""
=============================================================================
CONNECTION SUPERVISOR (TCP LISTENER)
=============================================================================

Owns the listening socket and the accept loop. Each accepted client gets
its own daemon thread; the supervisor never waits for those threads.

    socket() ─► setsockopt() ─► bind() ─► listen(backlog)
                                               │
                 ┌─────────────────────────────┘
                 ▼
          ┌─────────────┐   timeout (accept_timeout)   ┌──────────────┐
          │  accept()   │ ───────────────────────────► │ token        │
          │             │ ◄─────────────────────────── │ cancelled?   │
          └──────┬──────┘            no                └──────┬───────┘
                 │ client socket                              │ yes
                 ▼                                            ▼
          Connection(...)                              close listener,
          Thread(handler, conn, daemon=True).start()   restore signals

The listening socket is closed exactly once, by the thread that runs
the accept loop. shutdown() from elsewhere only cancels the token and
wakes accept() up.

=============================================================================
CONCURRENCY MODEL
=============================================================================

One thread per connection, no pool, no upper bound. The listen backlog
is the only admission control. Handler threads share nothing mutable
except the read-only route table and document root settings, so there
is nothing to lock.

    accept ─► Thread-1 ─► read ─► respond ─► close
    accept ─► Thread-2 ─► read ─► respond ─► close
    accept ─► Thread-3 ─► ...

Handler threads are daemons: when the accept loop returns, in-flight
requests are not drained, they simply die with the process.

=============================================================================
SIGNALS
=============================================================================

SIGINT (Ctrl+C) and SIGTERM (docker stop, systemd, kill) cancel the token
and wake the accept loop. Python only allows signal handlers on the main
thread, so when start() runs anywhere else (tests, embedding) signals are
left alone and the caller cancels the token itself.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable

from ..config import ServerConfig
from .cancellation import CancellationToken
from .connection import Connection


logger = logging.getLogger(__name__)


ConnectionHandler = Callable[[Connection], None]


class SocketServer:
    """
    TCP listener that hands each accepted connection to its own thread.

    Usage:
        def handle(conn: Connection):
            with conn:
                data = conn.read_request()
                ...

        server = SocketServer(config)
        server.start(handle)  # Blocks until the token is cancelled
    """

    def __init__(self, config: ServerConfig, token: Optional[CancellationToken] = None):
        """
        Args:
            config: Server configuration (host, port, backlog, timeouts).
            token: Shared cancellation token. A fresh one is created if
                   not given; either way it is exposed as .token.
        """
        self.config = config
        self.token = token or CancellationToken()

        self._socket: Optional[socket.socket] = None

        # Set once the socket is listening; tests wait on it
        self.ready = threading.Event()

        self._original_handlers: dict = {}

    @property
    def bound_address(self) -> Optional[tuple[str, int]]:
        """Actual (host, port) once listening; resolves port 0."""
        if self._socket is None:
            return None
        try:
            return self._socket.getsockname()[:2]
        except OSError:
            return None

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Rebind immediately after a restart instead of waiting out TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Responses are written in one sendall(); don't let Nagle hold the tail
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        # accept() wakes up this often to check the token
        sock.settimeout(self.config.accept_timeout)

        return sock

    # =========================================================================
    # SIGNALS
    # =========================================================================

    def _setup_signals(self):
        """Install SIGINT/SIGTERM handlers (main thread only)."""
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on the main thread; signal handlers not installed")
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        for sig in (signal.SIGTERM, signal.SIGINT):
            self._original_handlers[sig] = signal.signal(sig, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self, connection_handler: ConnectionHandler):
        """
        Bind, listen, and run the accept loop.

        Blocks until the token is cancelled.

        Args:
            connection_handler: Called on a fresh daemon thread with each
                                accepted Connection. It owns the
                                connection and must close it.

        Raises:
            OSError: If the address cannot be bound (in use, permission).
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
            self._socket.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._setup_signals()

        host, port = self.bound_address or (self.config.host, self.config.port)
        logger.info(f"Listening on {host}:{port} (backlog {self.config.backlog})")
        self.ready.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: ConnectionHandler):
        while not self.token.cancelled:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self.token.cancelled:
                    break
                # Transient (EMFILE, ECONNABORTED, ...): keep serving
                logger.error(f"Accept error: {e}")
                self.token.wait(0.1)
                continue

            conn = Connection(
                socket=client_socket,
                address=client_address[:2],
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
            )
            logger.debug(f"[{conn.id}] Accepted connection from {client_address[0]}:{client_address[1]}")

            self._spawn(connection_handler, conn)

    def _spawn(self, connection_handler: ConnectionHandler, conn: Connection):
        """Run the handler on its own daemon thread; never joined."""
        thread = threading.Thread(
            target=connection_handler,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        try:
            thread.start()
        except RuntimeError as e:
            # Out of threads: drop this client, keep accepting
            logger.error(f"[{conn.id}] Could not start handler thread: {e}")
            conn.close()

    def shutdown(self):
        """
        Stop accepting connections.

        Safe to call from a signal handler, another thread, or more than
        once. The listening socket itself is closed by the accept loop.
        """
        if not self.token.cancelled:
            logger.info("Shutting down listener...")
        self.token.cancel()

        sock = self._socket
        if sock is not None:
            try:
                # Wakes a blocked accept() on Linux without freeing the fd
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass  # Not connected/listening any more

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self.ready.clear()
        logger.info("Listener stopped")

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """Block until the token is cancelled (or timeout). Useful in tests."""
        return self.token.wait(timeout)
