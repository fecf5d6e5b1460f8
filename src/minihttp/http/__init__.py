"""
=============================================================================
HTTP PROTOCOL IMPLEMENTATION
=============================================================================

Wire-level HTTP/1.1 for a single GET exchange, shared by the client
and the server.

=============================================================================
MODULE COMPONENTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ URL (url.py)                                                        │
    │ ─────────────────────────────────────────────────────────────────── │
    │ "http://example.com/a.html" ──► URL(host="example.com",             │
    │                                     path="/a.html")                 │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST CODEC (request.py)                                          │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Client: build_request(url) ──► b"GET /a.html HTTP/1.1\r\n..."       │
    │ Server: RequestParser ──► RequestLine or HTTPParseError(400/501)    │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ RESPONSE CODEC (response.py)                                        │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Server: ok(body) / error(status) ──► HTTPResponse(head, body)       │
    │ Client: ResponseParser ──► Response(StatusLine, Message)            │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ STATUS CODES (status_codes.py)                                      │
    │ ─────────────────────────────────────────────────────────────────── │
    │ HTTPStatus.NOT_FOUND ──► 404, phrase="Not Found"                    │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import (
    HTTPParseError,
    RequestLine,
    RequestParser,
    build_request,
    parse_request,
)
from .response import (
    DateFormatError,
    HTTPResponse,
    HTTPStatusError,
    Message,
    ProtocolError,
    Response,
    ResponseParser,
    StatusLine,
    bad_request,
    error,
    format_http_date,
    not_found,
    not_implemented,
    ok,
    parse_response,
)
from .status_codes import HTTPStatus
from .url import URL, URLError, parse_url

__all__ = [
    # URL decomposition
    "URL",
    "URLError",
    "parse_url",

    # Request codec
    "HTTPParseError",
    "RequestLine",
    "RequestParser",
    "build_request",
    "parse_request",

    # Response codec
    "DateFormatError",
    "HTTPResponse",
    "HTTPStatusError",
    "Message",
    "ProtocolError",
    "Response",
    "ResponseParser",
    "StatusLine",
    "bad_request",
    "error",
    "format_http_date",
    "not_found",
    "not_implemented",
    "ok",
    "parse_response",

    # Status codes
    "HTTPStatus",
]
