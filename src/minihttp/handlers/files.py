"""
=============================================================================
FILE HANDLER
=============================================================================

Reads and creates files directly under the served directory.

    GET  /files/<name>   → 200 application/octet-stream + file bytes
                           404 if <name> is not a regular file
    POST /files/<name>   → 201 "File created"
                           409 if <name> already exists (left untouched)

=============================================================================
PATH SAFETY
=============================================================================

The name comes straight from the URL, so "/files/../../etc/passwd" hands
us "../../etc/passwd". Every name is resolved against the served
directory and must land DIRECTLY inside it:

    served dir:  /srv/files
    note.txt           → /srv/files/note.txt       ✓ served
    ../secret          → /srv/secret               ✗ 403 Forbidden
    sub/note.txt       → /srv/files/sub/note.txt   ✗ 403 Forbidden
    link-to-etc        → /etc (symlink resolved)   ✗ 403 Forbidden

=============================================================================
CONCURRENT WRITES
=============================================================================

POST creates the file with mode "xb" (O_CREAT | O_EXCL). The existence
check and the create are one syscall, so when two clients POST the same
name at once exactly one gets 201 and the other gets 409. There is no
separate exists() check to race against.

Any other OSError (permission denied, disk full, missing served
directory) becomes 500 Internal Server Error.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional

from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse, ResponseBuilder,
    created, conflict, forbidden, internal_error, not_found,
)

logger = logging.getLogger(__name__)


class FileHandler:
    """
    GET/POST handler pair for /files/*name.

        files = FileHandler("/tmp/served")
        router.get("/files/*name")(files.get)
        router.post("/files/*name")(files.post)
    """

    def __init__(self, directory: str):
        """
        Args:
            directory: The served directory. It does not have to exist
                       yet; until it does, GETs are 404 and POSTs are 500.
        """
        self.directory = Path(directory).resolve()

        if not self.directory.is_dir():
            logger.warning(f"Served directory does not exist: {self.directory}")

    def _resolve(self, name: str) -> Optional[Path]:
        """
        Map a URL name to a path directly under the served directory.

        Returns:
            The resolved path, or None if it would escape the directory
            or is not a usable file name (e.g. contains a NUL byte).
        """
        try:
            full_path = (self.directory / name).resolve()
        except ValueError:
            logger.warning(f"Rejected invalid file name: {name!r}")
            return None

        if full_path.parent != self.directory:
            logger.warning(f"Rejected file name outside served directory: {name!r}")
            return None

        return full_path

    def get(self, request: HTTPRequest) -> HTTPResponse:
        """Send the file's bytes, or 404 if there is no such file."""
        name = request.path_params["name"]
        path = self._resolve(name)
        if path is None:
            return forbidden("Access denied")

        if not path.is_file():
            return not_found()

        try:
            content = path.read_bytes()
        except FileNotFoundError:
            # Gone between is_file() and the read
            return not_found()
        except OSError as e:
            logger.exception(f"Failed to read {path}: {e}")
            return internal_error("Failed to read file")

        return ResponseBuilder().octet_stream(content).build()

    def post(self, request: HTTPRequest) -> HTTPResponse:
        """Create the file from the request body; 409 if it exists."""
        name = request.path_params["name"]
        path = self._resolve(name)
        if path is None:
            return forbidden("Access denied")

        try:
            with open(path, "xb") as f:
                try:
                    f.write(request.body)
                except OSError:
                    path.unlink(missing_ok=True)
                    raise
        except FileExistsError:
            return conflict("File already exists")
        except OSError as e:
            logger.exception(f"Failed to write {path}: {e}")
            return internal_error("Failed to write file")

        logger.info(f"Created {path} ({len(request.body)} bytes)")
        return created("File created")
