"""
=============================================================================
URL DECOMPOSITION
=============================================================================

Splits an absolute HTTP URL into the two pieces a GET request needs:
the host (for address resolution and the Host header) and the path
(for the request line).

=============================================================================
HOW THE URL IS CUT
=============================================================================

The scheme is not inspected. The first 7 characters ("http://") are a
fixed prefix and everything is measured from offset 7:

    http://example.com:8080/docs/index.html
    ───────┬──────────┬────┬───────────────
           │          │    │
        offset 7      │    └── path: first "/" at or after offset 7
                      │
                      └── host ends at the first of  ; / : @ = &

A port written into the URL is NOT used. The port comes from the
caller (the -p option, default 80), which is why ":" simply terminates
the host here.

If the URL carries no "/" after the host, the path is synthesized as
"/" so the request line is always well formed.

=============================================================================
"""

from dataclasses import dataclass


SCHEME_PREFIX_LENGTH = 7
"""Length of the fixed "http://" prefix skipped before the host."""

MIN_URL_LENGTH = SCHEME_PREFIX_LENGTH + 1
"""Shortest URL that can still carry a one-character host."""

HOST_TERMINATORS = ";/:@=&"
"""Characters that end the authority component."""


class URLError(ValueError):
    """Raised when a URL cannot be decomposed into host and path."""


@dataclass(frozen=True)
class URL:
    """
    A decomposed absolute URL.

    Attributes:
        host: The authority up to the first terminator. Never empty.
        path: Everything from the first "/" after the prefix. Always
              begins with "/".
    """

    host: str
    path: str = "/"

    @property
    def is_directory(self) -> bool:
        """True if the path names a directory (ends in "/")."""
        return self.path.endswith("/")

    def filename(self, default: str = "index.html") -> str:
        """
        Name for saving the resource locally.

        The final path segment, or ``default`` when the path ends in "/".
        """
        if self.is_directory:
            return default
        return self.path.rsplit("/", 1)[1]


def parse_url(url: str) -> URL:
    """
    Decompose an absolute URL into host and path.

    Args:
        url: URL such as "http://127.0.0.1/index.html".

    Returns:
        The decomposed URL.

    Raises:
        URLError: If the URL is missing, shorter than 8 characters, or
                  has an empty host.
    """
    if not url or len(url) < MIN_URL_LENGTH:
        raise URLError("Invalid URL")

    rest = url[SCHEME_PREFIX_LENGTH:]

    host_end = len(rest)
    for index, char in enumerate(rest):
        if char in HOST_TERMINATORS:
            host_end = index
            break

    host = rest[:host_end]
    if not host:
        raise URLError(f"Invalid URL: no host in {url!r}")

    slash = rest.find("/")
    path = rest[slash:] if slash != -1 else "/"

    return URL(host=host, path=path)
