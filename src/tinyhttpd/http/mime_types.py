"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

The Content-Type of a static file comes from its extension, looked up in a
fixed table that is built once at import time and never modified:

    "/css/site.CSS"      → extension "css"  → "text/css"
    "/backup.tar.gz"     → extension "gz"   → "application/gzip"
    "/README"            → no "."           → "application/octet-stream"
    "/notes.unknownext"  → not in table     → "application/octet-stream"

Only the text after the LAST "." counts; there is no multi-part extension
handling and no content sniffing. Matching is case-insensitive.

The table is read-only after import, so every handler thread can consult
it at the same time without a lock.

=============================================================================
"""

from pathlib import Path
from types import MappingProxyType


_MIME_TYPES = {
    # Text
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "js": "text/javascript",
    "mjs": "text/javascript",
    "txt": "text/plain",
    "md": "text/markdown",
    "csv": "text/csv",
    "xml": "application/xml",
    "json": "application/json",
    "map": "application/json",     # Source maps

    # Images
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "ico": "image/x-icon",
    "webp": "image/webp",
    "avif": "image/avif",
    "bmp": "image/bmp",

    # Fonts
    "woff": "font/woff",
    "woff2": "font/woff2",
    "ttf": "font/ttf",
    "otf": "font/otf",

    # Audio / video
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "mp4": "video/mp4",
    "webm": "video/webm",

    # Documents and archives
    "pdf": "application/pdf",
    "zip": "application/zip",
    "tar": "application/x-tar",
    "gz": "application/gzip",
    "wasm": "application/wasm",
}

# Immutable view shared by every thread
MIME_TYPES = MappingProxyType(_MIME_TYPES)

# "I don't know what this is, treat it as binary"
DEFAULT_MIME_TYPE = "application/octet-stream"


def get_mime_type(path: str | Path) -> str:
    """
    Get the MIME type for a path based on the text after its last ".".

    Args:
        path: Request path or filesystem path.

    Returns:
        The MIME type string, or application/octet-stream.

    Examples:
        >>> get_mime_type("/index.html")
        'text/html'
        >>> get_mime_type("archive.tar.gz")
        'application/gzip'
        >>> get_mime_type("Makefile")
        'application/octet-stream'
    """
    _, dot, extension = str(path).rpartition(".")
    if not dot:
        return DEFAULT_MIME_TYPE
    return MIME_TYPES.get(extension.lower(), DEFAULT_MIME_TYPE)
