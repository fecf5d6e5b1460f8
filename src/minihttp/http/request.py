"""
=============================================================================
HTTP REQUEST CODEC
=============================================================================

Both directions of the request line live here:

    CLIENT: build_request()    URL ──► b"GET /path HTTP/1.1\r\n..."
    SERVER: RequestParser      b"GET /path HTTP/1.1\r\n..." ──► RequestLine

=============================================================================
WHAT GOES ON THE WIRE
=============================================================================

The client emits exactly three lines and an empty line, nothing more:

    GET /docs/index.html HTTP/1.1\r\n      ← Request line
    Host: example.com\r\n                  ← Required by HTTP/1.1
    Connection: close\r\n                  ← One exchange, then close
    \r\n                                   ← End of headers

No User-Agent, no Accept. The server never looks at them, and a
minimal request is easier to reason about on both ends.

=============================================================================
HOW THE SERVER READS IT
=============================================================================

Only the request line matters. Everything after the first "\r" is
ignored (headers are never consulted):

    "GET /a.html HTTP/1.1\r\nHost: x\r\n\r\n"
     ─────────────┬───────
                  │
         split on " ", empty tokens dropped
                  │
     ┌────────────┼──────────────┬──────────────┐
     ▼            ▼              ▼              ▼
   method       path          version       4th token?
   "GET"      "/a.html"      "HTTP/1.1"       (none)

The order of the checks decides the status code:

    1. fewer than 3 tokens, a 4th token, or version != HTTP/1.1 → 400
    2. method != GET                                              → 501
    3. (path resolution, done by the static handler)              → 404

A request that fails 1 is a framing error even if its method is also
wrong, so "POST / HTTP/1.0" is a 400, not a 501.

=============================================================================
"""

from dataclasses import dataclass

from .status_codes import HTTPStatus
from .url import URL


HTTP_VERSION = "HTTP/1.1"
SUPPORTED_METHOD = "GET"


class HTTPParseError(Exception):
    """
    Raised when an inbound request cannot be served.

    Carries the HTTP status the server answers with:

        400 Bad Request       - Malformed request line or wrong version
        501 Not Implemented   - Method other than GET
    """

    def __init__(self, message: str, status_code: int = HTTPStatus.BAD_REQUEST):
        super().__init__(message)
        self.status_code = HTTPStatus(status_code)


@dataclass(frozen=True)
class RequestLine:
    """
    The parsed first line of a request.

    Attributes:
        method: HTTP method ("GET").
        path: Request target, verbatim.
        version: Protocol version, always "HTTP/1.1" after a successful parse.
    """

    method: str
    path: str
    version: str = HTTP_VERSION

    def __str__(self) -> str:
        return f"{self.method} {self.path} {self.version}"


def build_request(url: URL) -> bytes:
    """
    Build the wire-format GET request for a URL.

    Args:
        url: Decomposed URL carrying host and path.

    Returns:
        The complete request, header block terminated by an empty line.
    """
    return (
        f"{SUPPORTED_METHOD} {url.path} {HTTP_VERSION}\r\n"
        f"Host: {url.host}\r\n"
        f"Connection: close\r\n"
        f"\r\n"
    ).encode("utf-8")


class RequestParser:
    """
    Parses the request line out of raw request bytes.

    The parser is stateless; one instance can be shared by the server
    for its whole lifetime.

    Usage:
        parser = RequestParser()
        try:
            line = parser.parse(data)
        except HTTPParseError as e:
            send_error(e.status_code)
    """

    def parse(self, data: bytes) -> RequestLine:
        """
        Parse and validate the request line.

        Args:
            data: Raw request bytes as received.

        Returns:
            The validated request line.

        Raises:
            HTTPParseError: 400 for framing or version errors, 501 for
                            methods other than GET.
        """
        # Path bytes that are not valid UTF-8 survive the round trip to
        # the filesystem through surrogateescape.
        text = data.decode("utf-8", errors="surrogateescape")
        first_line = text.split("\r", 1)[0]

        tokens = [token for token in first_line.split(" ") if token]

        if len(tokens) < 3:
            raise HTTPParseError(f"Invalid request line: {first_line!r}")

        method, path, version = tokens[:3]

        if len(tokens) > 3 or version != HTTP_VERSION:
            raise HTTPParseError(f"Invalid request line: {first_line!r}")

        if method != SUPPORTED_METHOD:
            raise HTTPParseError(
                f"Method not implemented: {method}",
                status_code=HTTPStatus.NOT_IMPLEMENTED,
            )

        return RequestLine(method=method, path=path, version=version)


def parse_request(data: bytes) -> RequestLine:
    """Convenience wrapper around RequestParser().parse()."""
    return RequestParser().parse(data)
