"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Turns a raw request into a response by reading a file from the
document root.

=============================================================================
HOW A REQUEST PATH BECOMES A FILE
=============================================================================

The mapping is plain string concatenation, with the default document
appended only for directory-style paths:

    doc_root = "/tmp/www"     index_file = "index.html"

    GET /              ──►  /tmp/www/index.html
    GET /docs/         ──►  /tmp/www/docs/index.html
    GET /docs/a.txt    ──►  /tmp/www/docs/a.txt
    GET /docs          ──►  /tmp/www/docs          (no defaulting!)

A path that does not end in "/" always names a file directly, even if
it happens to be a directory on disk. Such a request gets a 404.

=============================================================================
SECURITY: STAYING INSIDE THE DOCUMENT ROOT
=============================================================================

Concatenation alone would happily follow "..":

    GET /../../etc/passwd  ──►  /tmp/www/../../etc/passwd

So a path is only resolvable if it starts with "/" and has no ".."
segment. Anything else is answered like a missing file: 404.

=============================================================================
DISPATCH
=============================================================================

    parse request line ── HTTPParseError ──► 400 / 501
            │
    resolve path ──────── None ────────────► 404
            │
    load file ─────────── directory ───────► 404
            │   └──────── other OSError ───► propagates (connection closed)
            │
         200 OK

=============================================================================
"""

import logging
import os
from typing import Optional

from ..config import DEFAULT_INDEX_FILE
from ..http.request import HTTPParseError, RequestLine, RequestParser
from ..http.response import HTTPResponse, error, not_found, ok


logger = logging.getLogger(__name__)


class PathResolver:
    """
    Maps request paths to filesystem paths under a document root.

    Usage:
        resolver = PathResolver("/tmp/www")
        resolver.build("/")       # "/tmp/www/index.html"
        resolver.resolve("/nope") # None
    """

    def __init__(self, doc_root: str, index_file: str = DEFAULT_INDEX_FILE):
        self.doc_root = doc_root
        self.index_file = index_file

    def build(self, request_path: str) -> str:
        """The filesystem path for ``request_path``, existence not checked."""
        if request_path.endswith("/"):
            return self.doc_root + request_path + self.index_file
        return self.doc_root + request_path

    def is_safe(self, request_path: str) -> bool:
        """True if the path cannot climb out of the document root."""
        if not request_path.startswith("/"):
            return False
        return ".." not in request_path.split("/")

    def resolve(self, request_path: str) -> Optional[str]:
        """
        Resolve a request path to an existing filesystem path.

        Returns:
            The resolved path, or None if it is unsafe, unusable or does
            not exist.
        """
        if not self.is_safe(request_path):
            logger.warning(f"Path traversal attempt: {request_path!r}")
            return None

        resolved = self.build(request_path)
        try:
            exists = os.access(resolved, os.F_OK)
        except ValueError:
            # Embedded NUL byte
            logger.warning(f"Unusable path: {request_path!r}")
            return None
        return resolved if exists else None


class FileLoader:
    """Reads a file into memory, bytes verbatim."""

    def load(self, path: str) -> bytes:
        """
        Read the whole file, line by line.

        Raises:
            OSError: If the file cannot be opened or read.
        """
        with open(path, "rb") as f:
            return b"".join(line for line in f)


class StaticFileHandler:
    """
    Serves files from a document root, one request at a time.

    Attributes:
        resolver: Maps request paths to files.
        loader: Reads resolved files.
    """

    def __init__(self, doc_root: str, index_file: str = DEFAULT_INDEX_FILE):
        if not os.path.isdir(doc_root):
            raise ValueError(f"Document root directory does not exist: {doc_root}")

        self.parser = RequestParser()
        self.resolver = PathResolver(doc_root, index_file)
        self.loader = FileLoader()

    def handle(self, data: bytes) -> HTTPResponse:
        """
        Produce the response for one raw request.

        Args:
            data: Request bytes as read from the socket.

        Returns:
            A 200 response carrying the file, or a header-only 400/404/501.
            Once the request line parses, it rides along as
            ``response.request``.

        Raises:
            OSError: If a resolved file cannot be read.
            DateFormatError: If the Date header cannot be produced.
        """
        try:
            request_line = self.parser.parse(data)
        except HTTPParseError as e:
            logger.warning(f"Rejected request ({e.status_code.value}): {e}")
            return error(e.status_code)

        logger.debug(f"Request: {request_line}")

        path = self.resolver.resolve(request_line.path)
        if path is None:
            logger.info(f"Not found: {request_line.path}")
            return self._answer(request_line, not_found())

        try:
            body = self.loader.load(path)
        except IsADirectoryError:
            logger.info(f"Not a file: {request_line.path}")
            return self._answer(request_line, not_found())
        return self._answer(request_line, ok(body))

    def _answer(self, request_line: RequestLine, response: HTTPResponse) -> HTTPResponse:
        response.request = request_line
        return response
