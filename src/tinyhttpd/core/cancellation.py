"""
Cancellation token for the accept loop.

The supervisor checks the token after every accept attempt. Whoever wants
the server to stop (a signal handler, a test, an embedding application)
cancels the token; nobody touches a module-level flag.
"""

import threading
from typing import Optional


class CancellationToken:
    """
    One-shot, thread-safe "please stop" flag.

    Usage:
        token = CancellationToken()
        server = SocketServer(config, token)
        ...
        token.cancel()        # from any thread or a signal handler
    """

    def __init__(self):
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Request cancellation. Safe to call more than once."""
        self._event.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until cancelled or until timeout elapses.

        Returns:
            True if the token is cancelled.
        """
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"
