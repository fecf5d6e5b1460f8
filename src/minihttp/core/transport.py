"""
=============================================================================
TRANSPORT: RESOLVE, CONNECT, LISTEN, SEND, RECEIVE
=============================================================================

The thin layer between HTTP and the operating system's sockets. Both
programs use it; neither touches the socket module directly.

=============================================================================
ADDRESS RESOLUTION
=============================================================================

getaddrinfo() may return several candidate addresses for one host.
Both sides walk the list and keep the first one that works:

    CLIENT                                SERVER
    ──────                                ──────
    for each candidate:                   for each candidate:
        socket()                              socket()
        connect()  ── ok? ──► done            setsockopt(SO_REUSEADDR)
        close()                               bind()  ── ok? ──► done
                                              close()
    none left ──► raise last error        none left ──► raise last error
                                          listen(backlog=1)

Only IPv4 stream sockets are requested (AF_INET, SOCK_STREAM). There
is no IPv6 fallback.

A backlog of 1 means the kernel queues at most one pending connection
while the server is busy with another. Further clients are refused by
the OS, not by us.

=============================================================================
BOUNDED READS
=============================================================================

TCP is a byte stream, so "one message" is defined by the reader:

    read_until_closed()   Client: the server closes after replying,
                          so EOF marks the end of the response.

    read_head()           Server: a GET has no body, so the request
                          ends at the first "\r\n\r\n" (or EOF).

Both grow a bytearray in buffer_size chunks and stop with
MessageTooLarge once max_size is exceeded. Nothing is silently
truncated.

There are no timeouts on connect, send or recv. A peer that never
answers blocks the caller.

=============================================================================
"""

import logging
import socket
from typing import List, Optional, Tuple

from ..http.response import HEADER_TERMINATOR, ProtocolError


logger = logging.getLogger(__name__)


DEFAULT_BUFFER_SIZE = 1512
LISTEN_BACKLOG = 1

AddrInfo = Tuple[int, int, int, str, tuple]


class MessageTooLarge(ProtocolError):
    """Raised when a peer sends more than the configured maximum."""

    def __init__(self, size: int, limit: int):
        super().__init__(f"Message too large: {size} bytes exceeds limit of {limit}")
        self.size = size
        self.limit = limit


def resolve(host: Optional[str], port: str, passive: bool = False) -> List[AddrInfo]:
    """
    Resolve host and port to IPv4 stream socket candidates.

    Args:
        host: Host name or address. None with passive=True means all
              local interfaces.
        port: Numeric port string.
        passive: Resolve for bind() rather than connect().

    Raises:
        socket.gaierror: If resolution fails, including host names the
                         IDNA codec rejects (e.g. "a..b").
    """
    flags = socket.AI_PASSIVE if passive else 0
    try:
        return socket.getaddrinfo(host, port, socket.AF_INET, socket.SOCK_STREAM, 0, flags)
    except UnicodeError as e:
        raise socket.gaierror(socket.EAI_NONAME, f"Invalid host name {host!r}: {e}") from e


def open_connection(host: str, port: str) -> socket.socket:
    """
    Connect to the first reachable candidate address.

    Raises:
        OSError: The error from the last candidate if none connected.
    """
    last_error: Optional[OSError] = None

    for family, socktype, proto, _, address in resolve(host, port):
        try:
            sock = socket.socket(family, socktype, proto)
        except OSError as e:
            last_error = e
            continue

        try:
            sock.connect(address)
        except OSError as e:
            last_error = e
            sock.close()
            continue

        logger.debug(f"Connected to {address[0]}:{address[1]}")
        return sock

    raise last_error or OSError(f"No addresses to connect to for {host}:{port}")


def open_listener(
    host: Optional[str],
    port: str,
    backlog: int = LISTEN_BACKLOG,
) -> socket.socket:
    """
    Bind a listening socket on the first usable candidate address.

    SO_REUSEADDR lets a restarted server bind immediately even while
    the previous socket is still in TIME_WAIT.

    Raises:
        OSError: The error from the last candidate if none bound.
    """
    last_error: Optional[OSError] = None

    for family, socktype, proto, _, address in resolve(host, port, passive=True):
        try:
            sock = socket.socket(family, socktype, proto)
        except OSError as e:
            last_error = e
            continue

        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(address)
        except OSError as e:
            last_error = e
            sock.close()
            continue

        try:
            sock.listen(backlog)
        except OSError:
            sock.close()
            raise

        return sock

    raise last_error or OSError(f"No addresses to bind for port {port}")


def send_all(sock: socket.socket, data: bytes) -> None:
    """
    Send every byte of ``data``.

    sendall() loops internally until the kernel has taken the whole
    buffer, so a short write never leaves part of a response unsent.
    """
    if data:
        sock.sendall(data)


def read_until_closed(
    sock: socket.socket,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    max_size: int = 1024 * 1024,
) -> bytes:
    """
    Read until the peer closes its side of the connection.

    Raises:
        MessageTooLarge: If more than ``max_size`` bytes arrive.
        OSError: On receive failure.
    """
    buffer = bytearray()
    while True:
        chunk = sock.recv(buffer_size)
        if not chunk:
            break
        buffer += chunk
        if len(buffer) > max_size:
            raise MessageTooLarge(len(buffer), max_size)
    return bytes(buffer)


def read_head(
    sock: socket.socket,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    max_size: int = DEFAULT_BUFFER_SIZE * 8,
) -> bytes:
    """
    Read until the end of the header block or EOF, whichever is first.

    Raises:
        MessageTooLarge: If the header block exceeds ``max_size`` bytes.
        OSError: On receive failure.
    """
    buffer = bytearray()
    while HEADER_TERMINATOR not in buffer:
        chunk = sock.recv(buffer_size)
        if not chunk:
            break
        buffer += chunk
        if len(buffer) > max_size:
            raise MessageTooLarge(len(buffer), max_size)
    return bytes(buffer)
