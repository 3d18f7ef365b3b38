"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

A Connection wraps one accepted client socket for the single request it
will carry. There is no keep-alive: exactly one request is read, at most
one response is written, and the socket is closed.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──► READING ──► PARSING ──► ROUTING ──► RESPONDING ──► CLOSED
               │           │           │                         ▲
               │           │           └── not GET → 405 ────────┤
               │           └── malformed → 400 ──────────────────┤
               │                                                  │
               └── empty read / timeout / reset ──► FAILED ──────┘
                   (no response written)

Every path ends in CLOSED. The state is only used for logging and
debugging; nothing branches on it except close() being idempotent.

=============================================================================
READING A REQUEST
=============================================================================

TCP delivers bytes in arbitrary chunks, so reading loops until one of:

    - the header terminator (blank line) has arrived
    - buffer_size bytes are buffered (the rest is never read)
    - the client closed its side

Only the request line matters to the parser, but reading the whole header
block first means the client is not still writing when we close, which
would turn our close into a TCP reset and could destroy the response.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states."""
    NEW = "new"                # Just accepted
    READING = "reading"        # Reading request bytes
    PARSING = "parsing"        # Splitting the request line
    ROUTING = "routing"        # Dynamic route or static file lookup
    RESPONDING = "responding"  # Writing the response
    FAILED = "failed"          # Read failed; nothing will be written
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    Represents one client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique id for log correlation.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    # Configuration (passed from ServerConfig)
    buffer_size: int = 8192         # Max request bytes read
    timeout: Optional[float] = 30.0  # Socket timeout for reads and writes

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read the request bytes, up to buffer_size.

        Returns:
            The bytes read, or None if nothing could be read (peer closed
            immediately, timed out before sending anything, or reset).
            A timeout after SOME bytes arrived returns those bytes; the
            parser decides whether they are enough.
        """
        self.state = ConnectionState.READING
        data = bytearray()

        try:
            while len(data) < self.buffer_size and not _headers_complete(data):
                chunk = self.socket.recv(self.buffer_size - len(data))
                if not chunk:
                    break  # Client closed its side
                data += chunk
        except socket.timeout:
            logger.debug(f"[{self.id}] Read timeout after {len(data)} bytes")
        except OSError as e:
            logger.debug(f"[{self.id}] Read failed: {e}")
            data.clear()

        if not data:
            self.state = ConnectionState.FAILED
            return None

        return bytes(data)

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response bytes to the client.

        Uses sendall() so the whole response goes out, not just the part
        that fit in the kernel buffer.

        Returns:
            True if the send succeeded, False if the connection was lost.
        """
        self.state = ConnectionState.RESPONDING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        1. shutdown(SHUT_WR): send FIN, the client sees end-of-response
        2. drain what the client still sends (bounded), so close() does
           not answer unread data with a reset
        3. close(): release the file descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.settimeout(0.5)
            drained = 0
            while drained < self.buffer_size:
                chunk = self.socket.recv(1024)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # Includes socket.timeout; we're closing anyway

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions


def _headers_complete(data: bytearray) -> bool:
    return b"\r\n\r\n" in data or b"\n\n" in data
