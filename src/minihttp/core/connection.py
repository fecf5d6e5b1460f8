"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket for the length of one exchange.

=============================================================================
EXCHANGE LIFECYCLE
=============================================================================

Every connection carries exactly one request and one response, then
closes. The state records how far the exchange got, which is what the
server logs when something goes wrong:

    ACCEPTED ──► PARSED ──┬──► BAD_REQUEST ─────┐
                          ├──► NOT_IMPLEMENTED ─┤
                          ├──► NOT_FOUND ───────┼──► CLOSED
                          └──► SERVING ─────────┘

A failed recv or send jumps straight to CLOSED from wherever the
exchange was.

The two loop-level states (IDLE_WAITING_FOR_CONNECTION and TERMINATED)
belong to the accept loop, not to a connection, but share this enum so
the whole state machine reads in one place.

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum

from . import transport


logger = logging.getLogger(__name__)


class ExchangeState(Enum):
    """States of the accept-serve-close cycle."""

    IDLE_WAITING_FOR_CONNECTION = "idle"   # Loop blocked in accept()
    ACCEPTED = "accepted"                  # Socket accepted, nothing read yet
    PARSED = "parsed"                      # Request line read
    BAD_REQUEST = "bad_request"            # 400 being sent
    NOT_IMPLEMENTED = "not_implemented"    # 501 being sent
    NOT_FOUND = "not_found"                # 404 being sent
    SERVING = "serving"                    # 200 + file being sent
    CLOSED = "closed"                      # Socket released
    TERMINATED = "terminated"              # Loop has exited


@dataclass
class Connection:
    """
    One accepted client connection.

    Attributes:
        socket: The client socket, in blocking mode.
        address: Client's (ip, port) tuple.
        id: Short identifier for log lines.
        state: How far the exchange has progressed.
        created_at: Timestamp when the connection was accepted.

    Usage:
        with Connection(sock, address) as conn:
            data = conn.read_request()
            conn.send(head)
            conn.send(body)
        # Socket closed here, whatever happened inside
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ExchangeState = ExchangeState.ACCEPTED
    created_at: float = field(default_factory=time.time)

    buffer_size: int = transport.DEFAULT_BUFFER_SIZE
    max_request_size: int = transport.DEFAULT_BUFFER_SIZE * 8

    def __post_init__(self):
        # An accepted socket may inherit the listener's poll timeout.
        self.socket.setblocking(True)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    def read_request(self) -> bytes:
        """
        Read the request head.

        Returns:
            Everything up to and including the first blank line, or
            whatever arrived before the client closed.

        Raises:
            transport.MessageTooLarge: If the head exceeds max_request_size.
            OSError: On receive failure.
        """
        return transport.read_head(self.socket, self.buffer_size, self.max_request_size)

    def send(self, data: bytes) -> None:
        """
        Send bytes to the client.

        Raises:
            OSError: On send failure.
        """
        transport.send_all(self.socket, data)

    def close(self) -> None:
        """
        Close the connection.

        shutdown(SHUT_WR) sends FIN first so the client sees a clean
        end of stream, which is how it knows the response is complete.
        """
        if self.state == ExchangeState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ExchangeState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
