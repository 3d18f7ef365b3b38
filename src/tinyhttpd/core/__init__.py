"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking layer underneath the HTTP logic:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  • Creates, binds and listens on the TCP socket                      │
    │  • Runs the accept() loop until the CancellationToken fires          │
    │  • Starts one detached daemon thread per accepted connection         │
    │  • Turns SIGINT/SIGTERM into token cancellation                      │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ one thread per client
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  • Wraps the client socket with a timeout                            │
    │  • Reads one request (bounded by buffer_size)                        │
    │  • Sends one response, then closes                                   │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     CANCELLATION TOKEN                               │
    │  • The only shared "stop" state; passed in, never global             │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .cancellation import CancellationToken
from .connection import Connection, ConnectionState
from .socket_server import SocketServer

__all__ = [
    "CancellationToken",  # Explicit shutdown signal
    "Connection",         # Wrapper for client socket - handles I/O
    "ConnectionState",    # Enum for connection lifecycle states
    "SocketServer",       # TCP listener - accepts connections
]
