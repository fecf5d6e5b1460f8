"""
=============================================================================
CONFIGURATION
=============================================================================

Typed, validated settings for both programs.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── minihttp-server -p 3000 /srv/www                           │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── MINIHTTP_PORT=3000 minihttp-server /srv/www                │
    │                                                                      │
    │   3. Default values (in the dataclasses below)                      │
    └─────────────────────────────────────────────────────────────────────┘

Validation happens once, at startup, before any socket is opened. A bad
port or a missing directory is a usage error, never a network error.

=============================================================================
PORTS ARE STRINGS
=============================================================================

Ports are kept as numeric strings (1 to 6 digits) because that is what
getaddrinfo() takes as a service name. "8080" is validated by checking
every character is a decimal digit, not by int() (which would accept
" 80", "+80" and "8_0").

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_SERVER_PORT = "8080"
DEFAULT_CLIENT_PORT = "80"
DEFAULT_INDEX_FILE = "index.html"
MAX_PORT_LENGTH = 6
MAX_INDEX_FILE_LENGTH = 31
RECV_BUFFER_SIZE = 1512

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def is_valid_port(port: str) -> bool:
    """True for 1 to 6 ASCII decimal digits."""
    return (
        0 < len(port) <= MAX_PORT_LENGTH
        and all(char in "0123456789" for char in port)
    )


def _validate_log_level(log_level: str) -> None:
    if log_level.upper() not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {log_level}. Must be one of {', '.join(LOG_LEVELS)}.")


@dataclass
class ServerConfig:
    """
    Configuration for the file server.

    NETWORK SETTINGS
    - host, port, backlog, accept_timeout

    MESSAGE LIMITS
    - buffer_size, max_request_size

    CONTENT
    - doc_root, index_file

    LOGGING
    - log_level
    """

    doc_root: str = "."
    """Directory the served files are read from."""

    host: Optional[str] = None
    """
    Address to bind to. None binds every local IPv4 interface.
    """

    port: str = DEFAULT_SERVER_PORT

    index_file: str = DEFAULT_INDEX_FILE
    """Default document for request paths ending in "/"."""

    backlog: int = 1
    """
    Pending connections the kernel may queue. 1 keeps the server
    strictly one-client-at-a-time.
    """

    buffer_size: int = RECV_BUFFER_SIZE
    """Bytes requested per recv() call."""

    max_request_size: int = RECV_BUFFER_SIZE * 8
    """Largest request head accepted before answering 400."""

    accept_timeout: Optional[float] = 1.0
    """
    Poll interval of the listening socket, so a stop requested from
    another thread is noticed. None blocks in accept() indefinitely.
    """

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        MINIHTTP_HOST       Bind address (default: all interfaces)
        MINIHTTP_PORT       Port (default: 8080)
        MINIHTTP_DOC_ROOT   Document root (default: .)
        MINIHTTP_INDEX      Default document (default: index.html)
        MINIHTTP_LOG_LEVEL  Logging level (default: INFO)
        """
        return cls(
            host=os.getenv("MINIHTTP_HOST") or None,
            port=os.getenv("MINIHTTP_PORT", DEFAULT_SERVER_PORT),
            doc_root=os.getenv("MINIHTTP_DOC_ROOT", "."),
            index_file=os.getenv("MINIHTTP_INDEX", DEFAULT_INDEX_FILE),
            log_level=os.getenv("MINIHTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: With a message naming the bad setting.
        """
        if not is_valid_port(self.port):
            raise ValueError(f"Invalid port: {self.port!r}. Must be 1-{MAX_PORT_LENGTH} digits.")

        if not 0 < len(self.index_file) <= MAX_INDEX_FILE_LENGTH:
            raise ValueError(
                f"Invalid index file: {self.index_file!r}. "
                f"Must be 1-{MAX_INDEX_FILE_LENGTH} characters."
            )

        if not os.path.isdir(self.doc_root):
            raise ValueError(f"Invalid directory: {self.doc_root}")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.max_request_size < self.buffer_size:
            raise ValueError("max_request_size must be >= buffer_size")

        if self.accept_timeout is not None and self.accept_timeout <= 0:
            raise ValueError("accept_timeout must be > 0")

        _validate_log_level(self.log_level)


@dataclass
class ClientConfig:
    """
    Configuration for the fetching client.

    At most one of output_file / output_dir is set. With neither, the
    body goes to stdout.
    """

    port: str = DEFAULT_CLIENT_PORT

    output_file: Optional[str] = None
    """Write the body to this file."""

    output_dir: Optional[str] = None
    """Write the body into this directory, named after the URL."""

    index_file: str = DEFAULT_INDEX_FILE
    """Local filename used when the URL path ends in "/"."""

    buffer_size: int = RECV_BUFFER_SIZE

    max_message_size: int = 1024 * 1024
    """Largest response accepted; bigger ones are a protocol error."""

    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """
        Create configuration from environment variables.

        MINIHTTP_CLIENT_PORT  Port (default: 80)
        MINIHTTP_LOG_LEVEL    Logging level (default: WARNING)
        """
        return cls(
            port=os.getenv("MINIHTTP_CLIENT_PORT", DEFAULT_CLIENT_PORT),
            log_level=os.getenv("MINIHTTP_LOG_LEVEL", "WARNING"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: With a message naming the bad setting.
        """
        if not is_valid_port(self.port):
            raise ValueError(f"Invalid port: {self.port!r}. Must be 1-{MAX_PORT_LENGTH} digits.")

        if self.output_file is not None and self.output_dir is not None:
            raise ValueError("Options 'o' and 'd' can't be used together")

        if self.output_dir is not None and not os.path.isdir(self.output_dir):
            raise ValueError(f"Invalid directory: {self.output_dir}")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.max_message_size < self.buffer_size:
            raise ValueError("max_message_size must be >= buffer_size")

        _validate_log_level(self.log_level)


def setup_logging(log_level: str) -> None:
    """
    Configure logging for a program run.

    Everything goes to stderr; stdout belongs to the client's output.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )

    logging.getLogger("minihttp").setLevel(level)
