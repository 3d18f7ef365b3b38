"""
=============================================================================
TINYHTTPD CLI ENTRY POINT
=============================================================================

    # Defaults (0.0.0.0:8080, ./public)
    python -m tinyhttpd

    # Custom port (positional)
    python -m tinyhttpd 3000

    # Serve another directory, JSON access logs
    tinyhttpd 8000 --root ./site --log-format json

Settings are layered: defaults, then HTTP_* environment variables
(ServerConfig.from_env), then command-line arguments.

An invalid port ("abc", 0, 70000) makes argparse exit with status 2
before any socket exists.

=============================================================================
"""

import argparse
import logging
import sys

from . import __version__
from .config import ServerConfig, LOG_FORMATS
from .server import HTTPServer


logger = logging.getLogger(__name__)


def port_number(value: str) -> int:
    """argparse type: a TCP port in 1..65535."""
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r} (not a number)")

    if not 1 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"invalid port: {port} (must be 1-65535)")

    return port


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tinyhttpd",
        description="Minimal GET-only HTTP server: a few built-in routes plus static files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  tinyhttpd                          # 0.0.0.0:8080, files from ./public
  tinyhttpd 3000                     # Custom port
  tinyhttpd --host 127.0.0.1         # Loopback only
  tinyhttpd --root ./site            # Another document root
  tinyhttpd --log-format json        # JSON access log lines
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "port",
        nargs="?",
        type=port_number,
        default=None,
        help="Port to listen on (default: $HTTP_PORT or 8080)"
    )

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Address to bind to (default: $HTTP_HOST or 0.0.0.0)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # STATIC FILE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=None,
        help="Document root for static files (default: $HTTP_DOCUMENT_ROOT or ./public)"
    )

    parser.add_argument(
        "--index",
        default=None,
        help="File served for directory paths (default: index.html)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"tinyhttpd {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """
    Merge parsed arguments over the environment-derived configuration.

    Raises:
        ValueError: If an HTTP_* environment variable is malformed, or
                    HTTP_PORT is outside 1..65535 and no port argument
                    overrides it.
    """
    config = ServerConfig.from_env()

    # Port 0 is fine for embedders; a CLI launch needs a real port
    if args.port is None:
        try:
            port_number(str(config.port))
        except argparse.ArgumentTypeError as e:
            raise ValueError(f"HTTP_PORT: {e}") from e

    overrides = {
        "port": args.port,
        "host": args.host,
        "document_root": args.root,
        "index_file": args.index,
        "log_level": args.log_level,
        "log_format": args.log_format,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)

    return config


def main(argv=None) -> int:
    """
    CLI entry point.

    Returns:
        Process exit status (0 after a clean shutdown).
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
        server = HTTPServer(config)
    except ValueError as e:
        parser.error(str(e))

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
