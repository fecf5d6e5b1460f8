"""
=============================================================================
FILE SERVER
=============================================================================

Ties the accept loop to the static file handler: for every accepted
connection, read one request, send one response, close.

=============================================================================
ONE EXCHANGE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   conn.read_request()            ACCEPTED ──► PARSED                 │
    │        │                                                             │
    │   handler.handle(data)           ──► BAD_REQUEST / NOT_IMPLEMENTED   │
    │        │                             NOT_FOUND / SERVING             │
    │        │                                                             │
    │   conn.send(response.head)       status line + headers               │
    │   conn.send(response.body)       file bytes (200 only)               │
    │        │                                                             │
    │   conn.close()                   ──► CLOSED                          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHAT STOPS THE SERVER, WHAT DOESN'T
=============================================================================

    Bad request line / wrong method / missing file
        └── Error response, connection closed, loop continues.

    recv() or send() fails, or the file can't be opened
        └── Logged, connection closed, loop continues. One broken
            client must not take the server down for everyone else.

    bind() / listen() / accept() fail, or no Date header can be made
        └── Fatal. The exception leaves run().

=============================================================================
"""

import logging
from typing import Optional

from .config import ServerConfig, setup_logging
from .core.connection import Connection, ExchangeState
from .core.shutdown import ShutdownController
from .core.socket_server import SocketServer
from .core.transport import MessageTooLarge
from .handlers.static import StaticFileHandler
from .http.response import HTTPResponse, bad_request
from .http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)


_STATE_FOR_STATUS = {
    HTTPStatus.OK: ExchangeState.SERVING,
    HTTPStatus.BAD_REQUEST: ExchangeState.BAD_REQUEST,
    HTTPStatus.NOT_FOUND: ExchangeState.NOT_FOUND,
    HTTPStatus.NOT_IMPLEMENTED: ExchangeState.NOT_IMPLEMENTED,
}


class HTTPServer:
    """
    Single-connection HTTP/1.1 file server.

    Usage:
        config = ServerConfig(doc_root="/tmp/www", port="8080")
        server = HTTPServer(config)
        server.run()  # Blocks until SIGINT/SIGTERM
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        controller: Optional[ShutdownController] = None,
    ):
        self.config = config or ServerConfig()
        self.config.validate()

        self.handler = StaticFileHandler(self.config.doc_root, self.config.index_file)
        self.controller = controller or ShutdownController()
        self._socket_server = SocketServer(self.config, self.controller)
        self.exchanges = 0

    @property
    def address(self):
        return self._socket_server.address

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def run(self, setup_logs: bool = True) -> None:
        """
        Serve until stopped.

        Raises:
            OSError: If the listening socket cannot be set up.
            SystemExit: If stopped by a signal while idle.
        """
        if setup_logs:
            setup_logging(self.config.log_level)

        logger.info(f"Serving {self.config.doc_root} (index: {self.config.index_file})")
        self._socket_server.start(self._handle_connection)

    def shutdown(self) -> None:
        """Stop after the current exchange."""
        self._socket_server.shutdown()

    def _handle_connection(self, conn: Connection) -> None:
        with conn:
            try:
                self._exchange(conn)
            except OSError as e:
                logger.error(
                    f"[{conn.id}] {conn.client_ip}:{conn.client_port} "
                    f"failed while {conn.state.value}: {e}"
                )
        self.exchanges += 1

    def _exchange(self, conn: Connection) -> None:
        try:
            data = conn.read_request()
        except MessageTooLarge as e:
            logger.warning(f"[{conn.id}] {e}")
            response = bad_request()
        else:
            if not data:
                logger.debug(f"[{conn.id}] Client closed without sending a request")
                return
            conn.state = ExchangeState.PARSED
            response = self.handler.handle(data)

        conn.state = _STATE_FOR_STATUS.get(response.status, ExchangeState.SERVING)
        self._send(conn, response)

        request = response.request
        target = f"{request.method} {request.path}" if request else "<unparsed>"
        logger.info(
            f"[{conn.id}] {conn.client_ip} {target} -> {int(response.status)} "
            f"({len(response.body)} bytes)"
        )

    def _send(self, conn: Connection, response: HTTPResponse) -> None:
        conn.send(response.head)
        conn.send(response.body)
