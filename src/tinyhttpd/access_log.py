"""
=============================================================================
ACCESS LOGGING
=============================================================================

One log record per response written, on the "tinyhttpd.access" logger:

    text (combined-log style):
        127.0.0.1 - - [19/Oct/2026:12:00:00 +0000] "GET /health" 200 37 0.41ms [a1b2c3d4]

    json (for log aggregators):
        {"connection_id": "a1b2c3d4", "client_ip": "127.0.0.1",
         "method": "GET", "path": "/health", "status_code": 200,
         "content_length": 37, "duration_ms": 0.41, "timestamp": "..."}

A request that never parsed is logged with "-" for method and path.
Connections whose read failed write no response, so they produce no
access record (only a DEBUG line from the connection).

The "tinyhttpd.access" logger can be routed on its own:

    logging.getLogger("tinyhttpd.access").addHandler(file_handler)

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass, asdict


logger = logging.getLogger("tinyhttpd.access")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class RequestLog:
    """Structured access-log entry for one response."""

    connection_id: str
    client_ip: str
    method: str
    path: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        """Convert to a dictionary for JSON serialization."""
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        """Format as a combined-log style line."""
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms [{self.connection_id}]'
        )


def log_request(entry: RequestLog, log_format: str = "text") -> None:
    """
    Emit an access-log record.

    5xx responses are logged at WARNING so they stand out; everything
    else at INFO.
    """
    level = logging.WARNING if entry.status_code >= 500 else logging.INFO
    if not logger.isEnabledFor(level):
        return

    if log_format == "json":
        logger.log(level, json.dumps(entry.to_dict()))
    else:
        logger.log(level, entry.to_text())


def timestamp() -> str:
    """Current local time in access-log format."""
    return time.strftime("%d/%b/%Y:%H:%M:%S %z")


def configure_logging(level: str = "INFO") -> None:
    """
    Configure the root logger and the tinyhttpd logger hierarchy.

    Args:
        level: Level name; unknown names fall back to INFO.
    """
    numeric = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )

    logging.getLogger("tinyhttpd").setLevel(numeric)
