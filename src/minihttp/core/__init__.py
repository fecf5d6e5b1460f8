"""
=============================================================================
CORE NETWORKING LAYER
=============================================================================

Everything below HTTP: sockets, the accept loop and shutdown.

    transport.py       resolve / connect / listen / bounded send+recv
    connection.py      one accepted client socket, one exchange
    socket_server.py   the single-connection accept loop
    shutdown.py        SIGINT/SIGTERM handling with two flags

=============================================================================
"""

from .connection import Connection, ExchangeState
from .shutdown import ShutdownController
from .socket_server import SocketServer
from .transport import MessageTooLarge

__all__ = [
    "Connection",
    "ExchangeState",
    "MessageTooLarge",
    "ShutdownController",
    "SocketServer",
]
