"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables live in one dataclass, validated once at startup. A bad
value stops the process before any socket exists, instead of surfacing
on the first request.

=============================================================================
SOURCES
=============================================================================

    defaults  ──►  environment (from_env)  ──►  CLI arguments (__main__)
                         lowest ─────────────────────► highest

    HTTP_HOST            bind address           (default 0.0.0.0)
    HTTP_PORT            listening port         (default 8080)
    HTTP_DOCUMENT_ROOT   static file directory  (default ./public)
    HTTP_INDEX_FILE      directory index file   (default index.html)
    HTTP_TIMEOUT         client socket timeout  (default 30 seconds)
    HTTP_LOG_LEVEL       DEBUG/INFO/WARNING/... (default INFO)
    HTTP_LOG_FORMAT      text or json           (default text)

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    Development:
        ServerConfig(host="127.0.0.1", document_root="./site", log_level="DEBUG")

    Tests:
        ServerConfig(host="127.0.0.1", port=0)   # let the OS pick a port
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """The IP address to bind to ("0.0.0.0" = all interfaces)."""

    port: int = 8080
    """Port to listen on. 0 asks the OS for a free port (tests only)."""

    backlog: int = 128
    """
    Accept queue depth. This is the ONLY admission control: every accepted
    connection gets its own thread, with no upper bound.
    """

    buffer_size: int = 8192
    """Maximum request bytes read per connection; anything beyond is dropped."""

    timeout: Optional[float] = 30.0
    """Client socket timeout in seconds (None = block forever)."""

    accept_timeout: float = 1.0
    """How often the accept loop wakes up to check for shutdown."""

    # ─────────────────────────────────────────────────────────────────────
    # STATIC FILES
    # ─────────────────────────────────────────────────────────────────────

    document_root: str = "public"
    """Directory static files are served from."""

    index_file: str = "index.html"
    """File served when a path names a directory."""

    # ─────────────────────────────────────────────────────────────────────
    # PARSER LIMITS
    # ─────────────────────────────────────────────────────────────────────

    max_method_length: int = 16
    max_target_length: int = 2048
    max_query_params: int = 32

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Access log format: 'text' (combined-log style) or 'json'."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        Unset variables keep their defaults. Values are converted but not
        validated here; call validate() (HTTPServer does).

        Raises:
            ValueError: If HTTP_PORT or HTTP_TIMEOUT is not a number.
        """
        defaults = cls()
        return cls(
            host=os.getenv("HTTP_HOST", defaults.host),
            port=int(os.getenv("HTTP_PORT", str(defaults.port))),
            document_root=os.getenv("HTTP_DOCUMENT_ROOT", defaults.document_root),
            index_file=os.getenv("HTTP_INDEX_FILE", defaults.index_file),
            timeout=float(os.getenv("HTTP_TIMEOUT", str(defaults.timeout))),
            log_level=os.getenv("HTTP_LOG_LEVEL", defaults.log_level),
            log_format=os.getenv("HTTP_LOG_FORMAT", defaults.log_format),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: On the first invalid value found.
        """
        if not 0 <= self.port <= 65535:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535 (0 = any free port).")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.accept_timeout <= 0:
            raise ValueError("accept_timeout must be > 0")

        if not self.index_file:
            raise ValueError("index_file must not be empty")

        for name in ("max_method_length", "max_target_length", "max_query_params"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")
