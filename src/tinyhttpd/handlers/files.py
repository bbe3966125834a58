"""
=============================================================================
FILES HANDLER
=============================================================================

Reads and writes files under a configured base directory.

    GET  /files/<name>   → 200 application/octet-stream, file bytes
                           404 if the file cannot be read
    POST /files/<name>   → 201, request body written to <name>
    other verbs          → 405 (Allow: GET, POST)
    /files, /files/      → 400 (no file name)

<name> may contain "/" (e.g. /files/docs/readme.txt), so it can reach
into existing subdirectories of the base directory.

=============================================================================
PATH TRAVERSAL
=============================================================================

    GET /files/../../etc/passwd

Joined naively with base "/srv/data", that is "/etc/passwd". Every
candidate path is resolved (following ".." and symlinks) and must still
lie inside the resolved base directory; otherwise the request gets 403
and no file is touched.

    /srv/data/notes.txt          ✓ inside
    /srv/data/sub/../notes.txt   ✓ resolves to /srv/data/notes.txt
    /srv/data/../../etc/passwd   ✗ resolves to /etc/passwd → 403

=============================================================================
CONCURRENCY
=============================================================================

No locking. Two POSTs to the same name race and the last writer wins;
a GET concurrent with a POST may see a partially written file.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional

from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse, ResponseBuilder, HTTPStatus,
    bad_request, created, forbidden, method_not_allowed, not_found,
)


logger = logging.getLogger(__name__)


class FilesHandler:
    """
    Serves GET and POST for /files/<name>.

    Usage:
        files = FilesHandler("/tmp/data")
        router.add("files", files.handle)
    """

    ALLOWED_METHODS = ["GET", "POST"]

    def __init__(self, directory: str):
        """
        Args:
            directory: Base directory. Must exist.

        Raises:
            ValueError: If the directory does not exist.
        """
        self.directory = Path(directory).resolve()
        if not self.directory.is_dir():
            raise ValueError(f"Files directory does not exist: {directory}")

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        name = self._file_name(request)
        if not name:
            return bad_request()

        if request.method not in self.ALLOWED_METHODS:
            return method_not_allowed(self.ALLOWED_METHODS)

        path = self._resolve(name)
        if path is None:
            logger.warning(f"Path traversal attempt: {name!r}")
            return forbidden()

        if request.method == "GET":
            return self._read(path)

        body = request.body or b""
        if len(body) < request.content_length:
            logger.warning(
                f"Short body for {name!r}: {len(body)} of {request.content_length} bytes"
            )
        return self._write(path, body)

    # =========================================================================
    # PATH HANDLING
    # =========================================================================

    @staticmethod
    def _file_name(request: HTTPRequest) -> str:
        """
        Everything after "files/" in the path, or "" when there is nothing.

            /files/a.txt      → "a.txt"
            /files/dir/a.txt  → "dir/a.txt"
            /files            → ""
        """
        segments = request.segments
        if segments[0] != "files":
            return ""
        return "/".join(segments[1:])

    def _resolve(self, name: str) -> Optional[Path]:
        """Absolute path for name, or None if it escapes the base directory."""
        candidate = (self.directory / name).resolve()
        try:
            candidate.relative_to(self.directory)
        except ValueError:
            return None
        if candidate == self.directory:
            return None
        return candidate

    # =========================================================================
    # FILE I/O
    # =========================================================================

    def _read(self, path: Path) -> HTTPResponse:
        try:
            content = path.read_bytes()
        except OSError as e:
            # Missing file, directory, permission denied: all 404
            logger.debug(f"Cannot read {path}: {e}")
            return not_found()

        return (ResponseBuilder()
            .status(HTTPStatus.OK)
            .octet_stream(content)
            .build())

    def _write(self, path: Path, content: bytes) -> HTTPResponse:
        # OSError propagates; the dispatcher turns it into 500
        path.write_bytes(content)
        logger.info(f"Wrote {len(content)} bytes to {path}")
        return created()
