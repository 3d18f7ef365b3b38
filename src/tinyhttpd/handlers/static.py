"""
=============================================================================
STATIC FILE SERVING
=============================================================================

Any GET that does not match a dynamic route falls through to here and is
answered from the document root.

    Request: GET /docs/guide.html

    1. Safety check on the raw path          "/docs/guide.html"   ✓
    2. Join with the document root           /srv/www/docs/guide.html
    3. Directory? append the index file      (not a directory here)
    4. open() + fstat() + read everything    12 345 bytes
    5. Content-Type from the extension       text/html
    6. 200 OK with the whole file as body

=============================================================================
PATH SAFETY
=============================================================================

The check is coarse:

    - the path must start with "/"
    - the path must not contain ".." ANYWHERE

    "/../etc/passwd"     → rejected (traversal)
    "/a/../../secret"    → rejected (traversal)
    "/release..notes"    → rejected too, even though it is a legal name

The last case is the price of a rule that needs no path normalization to
be correct. A rejected path is a 400 (UnsafePath), never a 404: a
traversal attempt and a missing file are different outcomes.

The path is checked exactly as the client sent it; it is never
percent-decoded, so "%2e%2e" is just an odd filename that will not exist.

=============================================================================
FAILURE MAPPING
=============================================================================

    open() fails (missing, permission, is a directory)  → NotFound (404)
    fstat() fails after a successful open               → InternalError (500)
    no memory for the read buffer                       → InternalError (500)
    short read (bytes read != size from fstat)          → InternalError (500)

There is no streaming and no range support: the whole file is read into
memory before the response is built, so available memory bounds the size
of file that can be served.

=============================================================================
"""

import os
import logging
from pathlib import Path

from ..http.errors import InternalError, NotFound, UnsafePath
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder, HTTPStatus


logger = logging.getLogger(__name__)


def is_safe_path(path: str) -> bool:
    """
    Check whether a request path may be looked up on disk.

    Args:
        path: Request path, not percent-decoded.

    Returns:
        True if the path starts with "/" and contains no "..".
    """
    return path.startswith("/") and ".." not in path


class StaticFileHandler:
    """
    Serves files from a document root.

    Usage:
        static = StaticFileHandler("/srv/www", index_file="index.html")
        response = static.handle(request)   # raises NotFound, UnsafePath, ...
    """

    def __init__(self, root_dir: str | Path, index_file: str = "index.html"):
        """
        Args:
            root_dir: Directory files are served from. It does not have to
                     exist yet; lookups simply fail with NotFound until it does.
            index_file: File served when the path names a directory.
        """
        self.root_dir = Path(root_dir).resolve()
        self.index_file = index_file

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Answer a request from the filesystem.

        Raises:
            UnsafePath: The path failed the safety check.
            NotFound: No readable file for the path.
            InternalError: The file could not be stat'ed or read in full.
        """
        if not is_safe_path(request.path):
            logger.warning(f"Path traversal attempt from {request.client_address[0] or '-'}: {request.path!r}")
            raise UnsafePath(f"Unsafe path: {request.path!r}")
        return self.resolve(request.path)

    def resolve(self, path: str) -> HTTPResponse:
        """
        Map a path that already passed is_safe_path() to a 200 response.

        Args:
            path: Safe request path, e.g. "/css/site.css" or "/docs/".

        Returns:
            200 response with the full file contents.
        """
        full_path = self._filesystem_path(path)
        content = self._read_file(full_path)

        return (ResponseBuilder()
            .status(HTTPStatus.OK)
            .file(content, full_path.name)
            .build())

    def _filesystem_path(self, path: str) -> Path:
        # Leading slashes would make the join absolute and drop the root
        full_path = self.root_dir / path.lstrip("/")

        try:
            is_dir = full_path.is_dir()
        except (OSError, ValueError) as e:
            # ENAMETOOLONG, EACCES, ... : nothing we can serve
            logger.debug(f"Not found: {full_path} ({e})")
            raise NotFound(f"No file for {full_path.name!r}") from e

        if is_dir:
            return full_path / self.index_file

        # Path() drops the trailing slash; "/notes.txt/" is not a directory
        if path.endswith("/"):
            raise NotFound(f"Not a directory: {path!r}")

        return full_path

    def _read_file(self, full_path: Path) -> bytes:
        try:
            file = open(full_path, "rb")
        except (OSError, ValueError) as e:
            # ValueError: embedded NUL byte in the path
            logger.debug(f"Not found: {full_path} ({e})")
            raise NotFound(f"No file for {full_path.name!r}") from e

        with file:
            try:
                size = os.fstat(file.fileno()).st_size
            except OSError as e:
                logger.error(f"stat failed for {full_path}: {e}")
                raise InternalError("stat failed") from e

            try:
                content = file.read(size)
            except MemoryError as e:
                logger.error(f"Cannot allocate {size} bytes for {full_path}")
                raise InternalError("allocation failed") from e
            except OSError as e:
                logger.error(f"Read failed for {full_path}: {e}")
                raise InternalError("read failed") from e

        if len(content) != size:
            logger.error(f"Short read for {full_path}: {len(content)} of {size} bytes")
            raise InternalError("short read")

        return content
