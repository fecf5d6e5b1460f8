"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server emits and the client interprets.

=============================================================================
WHICH CODES DOES A SINGLE-GET SERVER NEED?
=============================================================================

The server only ever answers one GET per connection, so its vocabulary
is small. Each code maps to exactly one branch of the request check:

    ┌────────┬──────────────────────────────────────────────────────────┐
    │  200   │ OK: file resolved beneath the document root and read     │
    ├────────┼──────────────────────────────────────────────────────────┤
    │  400   │ Bad Request: extra token in the request line, version    │
    │        │ other than HTTP/1.1, or request too large to frame       │
    ├────────┼──────────────────────────────────────────────────────────┤
    │  404   │ Not Found: resolved path does not exist                  │
    ├────────┼──────────────────────────────────────────────────────────┤
    │  501   │ Not Implemented: any method other than GET               │
    └────────┴──────────────────────────────────────────────────────────┘

The client accepts any numeric code on the wire. Anything other than
200 is reported with its reason phrase, so the enum only needs to know
the codes we build ourselves.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    This enum extends IntEnum, so status codes compare as integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    # 2xx SUCCESS
    OK = 200

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400           # Framing error or unsupported version
    NOT_FOUND = 404             # Resolved path does not exist

    # 5xx SERVER ERRORS
    NOT_IMPLEMENTED = 501       # Method other than GET

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES.get(self, "Unknown")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
}
