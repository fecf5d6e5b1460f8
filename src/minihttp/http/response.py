"""
=============================================================================
HTTP RESPONSE CODEC
=============================================================================

Both directions of the response:

    SERVER: HTTPResponse.head    status + headers ──► b"HTTP/1.1 200 OK\r\n..."
    CLIENT: ResponseParser       b"HTTP/1.1 200 OK\r\n..." ──► Response

=============================================================================
RESPONSE FORMAT
=============================================================================

A successful reply carries exactly four header lines:

    HTTP/1.1 200 OK\r\n                        ← Status line
    Date: Mon, 19 Oct 26 14:03:11 CEST\r\n     ← Local wall clock
    Content-Length: 6\r\n                      ← Exact body byte count
    Connection: Close\r\n                      ← One exchange only
    \r\n                                       ← End of headers
    hello\n                                    ← Body (raw file bytes)

Error replies are header-only:

    HTTP/1.1 404 Not Found\r\n
    Connection: close\r\n
    \r\n

The head and the body are sent as two separate writes, so the server
never has to copy a file into a second buffer just to prepend headers.

=============================================================================
ONE PARSE, THREE CONSUMERS
=============================================================================

The client needs three things from the same bytes: the status code (to
decide success), the reason phrase (to report failure) and the body (to
write out). They all come from one structured parse:

                         raw bytes
                             │
                     ResponseParser.parse()
                             │
                ┌────────────┴────────────┐
                ▼                         ▼
           StatusLine                  Message
      (protocol, code, reason)    (head lines, body)
                │                         │
     code != 200 ──► reason        code == 200 ──► body

The head/body boundary is the FIRST "\r\n\r\n". Only Content-Length is
ever looked up by name; every other header is kept verbatim.

=============================================================================
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .request import RequestLine
from .status_codes import HTTPStatus


HTTP_VERSION = "HTTP/1.1"
HEADER_TERMINATOR = b"\r\n\r\n"

DATE_FORMAT = "%a, %d %b %y %H:%M:%S %Z"
"""Date header layout. Two-digit year, local time zone name."""


class ProtocolError(Exception):
    """Raised when a response does not follow HTTP/1.1 framing."""


class HTTPStatusError(ProtocolError):
    """
    Raised when a well-formed response carries a status other than 200.

    Attributes:
        status: The parsed status line; ``status.reason`` is what gets
                reported to the user.
    """

    def __init__(self, status: "StatusLine"):
        super().__init__(f"{status.code} {status.reason}")
        self.status = status


class DateFormatError(RuntimeError):
    """Raised when the Date header value cannot be produced."""


# =============================================================================
# SERVER SIDE: BUILDING RESPONSES
# =============================================================================

@dataclass
class HTTPResponse:
    """
    A response to be sent back to the client.

    Headers are kept in insertion order; the wire order is part of the
    contract.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = HTTP_VERSION

    request: Optional[RequestLine] = field(default=None, compare=False)
    """The request being answered, when its request line parsed."""

    @property
    def status_line(self) -> str:
        """Example: "HTTP/1.1 200 OK"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def head(self) -> bytes:
        """Status line and header block, terminated by the empty line."""
        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")
        return "\r\n".join(lines).encode("utf-8") + b"\r\n"

    def to_bytes(self) -> bytes:
        """Head and body as one buffer."""
        return self.head + self.body


def format_http_date(dt: Optional[datetime] = None) -> str:
    """
    Format a timestamp for the Date header.

    Uses the local wall clock and the local zone name, e.g.
    "Mon, 19 Oct 26 14:03:11 CEST".

    Args:
        dt: Timestamp to format. Defaults to now, in local time.

    Raises:
        DateFormatError: If the timestamp cannot be formatted.
    """
    try:
        if dt is None:
            dt = datetime.now().astimezone()
        value = dt.strftime(DATE_FORMAT).strip()
    except (ValueError, OverflowError, OSError) as e:
        raise DateFormatError(f"Cannot format Date header: {e}") from e

    if not value:
        raise DateFormatError("Cannot format Date header: empty result")
    return value


def ok(body: bytes, date: Optional[str] = None) -> HTTPResponse:
    """
    Create a 200 OK response for a served file.

    Args:
        body: File contents.
        date: Pre-formatted Date value. Generated from the clock if omitted.
    """
    return HTTPResponse(
        status=HTTPStatus.OK,
        headers={
            "Date": date if date is not None else format_http_date(),
            "Content-Length": str(len(body)),
            "Connection": "Close",
        },
        body=body,
    )


def error(status: HTTPStatus) -> HTTPResponse:
    """Create a header-only error response that closes the connection."""
    return HTTPResponse(status=status, headers={"Connection": "close"})


def bad_request() -> HTTPResponse:
    return error(HTTPStatus.BAD_REQUEST)


def not_found() -> HTTPResponse:
    return error(HTTPStatus.NOT_FOUND)


def not_implemented() -> HTTPResponse:
    return error(HTTPStatus.NOT_IMPLEMENTED)


# =============================================================================
# CLIENT SIDE: PARSING RESPONSES
# =============================================================================

@dataclass(frozen=True)
class StatusLine:
    """
    The parsed first line of a response.

    Attributes:
        protocol: Always "HTTP/1.1" after a successful parse.
        code: Numeric status code.
        reason: Reason phrase, possibly empty.
    """

    protocol: str
    code: int
    reason: str = ""

    @property
    def is_ok(self) -> bool:
        return self.code == HTTPStatus.OK


@dataclass(frozen=True)
class Message:
    """
    A message split at the first CRLF-CRLF.

    Attributes:
        head: Everything before the boundary, verbatim.
        body: Everything after the boundary, verbatim.
        terminated: False if no boundary was found; the whole message
                    is then in ``head`` and ``body`` is empty.
    """

    head: bytes
    body: bytes = b""
    terminated: bool = True

    @property
    def lines(self) -> List[str]:
        """Head split into lines, line terminators removed."""
        text = self.head.decode("iso-8859-1")
        return [line.rstrip("\r") for line in text.split("\n")]

    @property
    def start_line(self) -> str:
        return self.lines[0]

    @property
    def header_lines(self) -> List[str]:
        """Raw header lines in wire order, start line excluded."""
        return [line for line in self.lines[1:] if line]

    def get_header(self, name: str) -> Optional[str]:
        """
        Look up a header value by case-insensitive name.

        Returns the first match, or None.
        """
        wanted = name.lower()
        for line in self.header_lines:
            key, sep, value = line.partition(":")
            if sep and key.strip().lower() == wanted:
                return value.strip()
        return None

    @classmethod
    def split(cls, data: bytes) -> "Message":
        """Split raw bytes at the first header terminator."""
        boundary = data.find(HEADER_TERMINATOR)
        if boundary == -1:
            return cls(head=data, body=b"", terminated=False)
        return cls(
            head=data[:boundary],
            body=data[boundary + len(HEADER_TERMINATOR):],
        )


@dataclass(frozen=True)
class Response:
    """A parsed response: status line plus the split message."""

    status: StatusLine
    message: Message

    @property
    def content_length(self) -> Optional[int]:
        """Declared Content-Length, or None if absent or not a number."""
        value = self.message.get_header("Content-Length")
        if value is None or not value.isdigit():
            return None
        return int(value)

    @property
    def body(self) -> bytes:
        """
        The body of a successful response.

        Raises:
            HTTPStatusError: If the status is not 200.
            ProtocolError: If the header block was never terminated.
        """
        self.raise_for_status()
        if not self.message.terminated:
            raise ProtocolError("Protocol error: missing end of headers")
        return self.message.body

    def raise_for_status(self) -> None:
        """Raise HTTPStatusError unless the status code is exactly 200."""
        if not self.status.is_ok:
            raise HTTPStatusError(self.status)


class ResponseParser:
    """
    Parses raw response bytes into a Response.

    Usage:
        response = ResponseParser().parse(data)
        response.raise_for_status()
        save(response.body)
    """

    STATUS_CODE_PATTERN = re.compile(r"[0-9]+")

    def parse(self, data: bytes) -> Response:
        """
        Parse a complete response.

        Raises:
            ProtocolError: If the first token is not "HTTP/1.1" or the
                           second token is not entirely decimal digits.
        """
        message = Message.split(data)
        return Response(status=self._parse_status_line(message.start_line), message=message)

    def _parse_status_line(self, line: str) -> StatusLine:
        parts = line.split(" ", 2)
        if len(parts) < 2:
            raise ProtocolError(f"Protocol error: invalid status line {line!r}")

        protocol, code = parts[0], parts[1]
        reason = parts[2] if len(parts) > 2 else ""

        if protocol != HTTP_VERSION:
            raise ProtocolError(f"Protocol error: unexpected protocol {protocol!r}")

        if not self.STATUS_CODE_PATTERN.fullmatch(code):
            raise ProtocolError(f"Protocol error: invalid status code {code!r}")

        return StatusLine(protocol=protocol, code=int(code), reason=reason)


def parse_response(data: bytes) -> Response:
    """Convenience wrapper around ResponseParser().parse()."""
    return ResponseParser().parse(data)
