"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

The accept loop. It owns the listening socket and hands each accepted
connection to a callback, one at a time.

=============================================================================
ONE CONNECTION AT A TIME
=============================================================================

There is no thread pool and no fork. The callback runs to completion
before accept() is called again:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   open_listener()      bind + listen(backlog=1)                     │
    │        │                                                             │
    │        ▼                                                             │
    │   while running:  ◄─────────────────────────────────┐               │
    │        │                                             │               │
    │        ├──► accept()          waiting = True         │               │
    │        │                      (signal here = exit)   │               │
    │        │                                             │               │
    │        ├──► Connection(...)   waiting = False        │               │
    │        │                                             │               │
    │        └──► callback(conn)    (signal here = finish, │               │
    │                                then leave the loop) ─┘               │
    │                                                                      │
    │   close listener, restore signal handlers                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

With a backlog of 1, a second client that connects while the first is
being served waits in the kernel queue; a third is refused.

=============================================================================
WHY accept() HAS A TIMEOUT
=============================================================================

Signals always reach the main thread, but request_stop() may be called
from anywhere. A short poll interval on the listening socket lets the
loop notice a cleared `running` flag without a signal:

    while running:
        try:
            accept()            # returns after accept_timeout at most
        except timeout:
            continue            # re-check running

The accepted socket is switched back to blocking mode, so the client
side of the exchange has no timeout at all.

=============================================================================
"""

import logging
import socket
import threading
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from . import transport
from .connection import Connection, ExchangeState
from .shutdown import ShutdownController


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Listening socket plus the accept loop.

    Usage:
        def handle_connection(conn: Connection):
            with conn:
                ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    def __init__(self, config: ServerConfig, controller: Optional[ShutdownController] = None):
        self.config = config
        self.controller = controller or ShutdownController()
        self.state = ExchangeState.TERMINATED
        self._socket: Optional[socket.socket] = None
        self._ready = threading.Event()

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (ip, port), or the configured one before start()."""
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host or "0.0.0.0", int(self.config.port))

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listener is bound. True if it is."""
        return self._ready.wait(timeout)

    def start(self, connection_handler: Callable[[Connection], None]) -> None:
        """
        Bind, listen and run the accept loop.

        This method BLOCKS until the controller stops the loop.

        Raises:
            OSError: If the listener cannot be opened or accept() fails.
            SystemExit: If a shutdown signal arrives while idle.
        """
        try:
            self._socket = transport.open_listener(
                self.config.host, self.config.port, self.config.backlog
            )
        except OSError as e:
            logger.error(f"Failed to bind to port {self.config.port}: {e}")
            raise

        if self.config.accept_timeout:
            self._socket.settimeout(self.config.accept_timeout)

        self.controller.install()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        logger.info("Waiting for a connection...")
        self._ready.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]) -> None:
        while self.controller.running:
            self.state = ExchangeState.IDLE_WAITING_FOR_CONNECTION

            try:
                with self.controller.accepting():
                    client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if not self.controller.running:
                    break
                logger.error(f"Accept error: {e}")
                raise

            self.state = ExchangeState.ACCEPTED
            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                max_request_size=self.config.max_request_size,
            )
            connection_handler(conn)

    def shutdown(self) -> None:
        """Stop after the current exchange. Safe to call from any thread."""
        logger.info("Shutting down socket server...")
        self.controller.request_stop()

    def _cleanup(self) -> None:
        self.controller.restore()

        if self._socket is not None:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._ready.clear()
        self.state = ExchangeState.TERMINATED
        logger.info("Socket server stopped")
