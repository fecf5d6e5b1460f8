"""
=============================================================================
FETCHING CLIENT
=============================================================================

One GET, one response, done:

    parse_url(url)
        │
    build_request(url)             b"GET /path HTTP/1.1\r\n..."
        │
    open_connection(host, port)    first resolvable IPv4 address wins
        │
    send_all(request)
        │
    read_until_closed()            server sends Connection: Close
        │
    ResponseParser.parse()         StatusLine + Message, parsed once
        │
    OutputSink.write(body)         file, directory or stdout

=============================================================================
OUTPUT MODES
=============================================================================

Exactly one is active per run:

    -o FILE    body ──► FILE
    -d DIR     body ──► DIR/<last path segment>   ("index.html" for "/")
    (neither)  body ──► stdout, followed by a newline

=============================================================================
"""

import logging
import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Optional

from .config import ClientConfig
from .core import transport
from .http.request import build_request
from .http.response import Response, ResponseParser
from .http.url import URL


logger = logging.getLogger(__name__)


class OutputMode(Enum):
    FILE = "file"
    DIRECTORY = "directory"
    STDOUT = "stdout"


@dataclass
class OutputSink:
    """
    Where a response body ends up.

    Build one with for_config(); the constructor is for tests.
    """

    mode: OutputMode = OutputMode.STDOUT
    path: Optional[str] = None

    @classmethod
    def for_config(cls, config: ClientConfig, url: URL) -> "OutputSink":
        """Pick the sink selected by the -o / -d options."""
        if config.output_file is not None:
            return cls(OutputMode.FILE, config.output_file)
        if config.output_dir is not None:
            filename = url.filename(config.index_file)
            return cls(OutputMode.DIRECTORY, os.path.join(config.output_dir, filename))
        return cls(OutputMode.STDOUT)

    def write(self, body: bytes, stdout: Optional[BinaryIO] = None) -> None:
        """
        Deliver the body.

        Raises:
            OSError: If the output file cannot be written.
        """
        if self.mode is OutputMode.STDOUT:
            out = stdout if stdout is not None else sys.stdout.buffer
            out.write(body + b"\n")
            out.flush()
            return

        with open(self.path, "wb") as f:
            f.write(body)
        logger.info(f"Saved {len(body)} bytes to {self.path}")


class HTTPClient:
    """
    Runs single GET exchanges.

    Usage:
        client = HTTPClient(ClientConfig(port="8080"))
        response = client.get(parse_url("http://127.0.0.1/"))
        response.raise_for_status()
        print(response.body)
    """

    def __init__(self, config: Optional[ClientConfig] = None):
        self.config = config or ClientConfig()
        self.parser = ResponseParser()

    def fetch(self, url: URL) -> bytes:
        """
        Connect, send the request, read the whole reply, close.

        Returns:
            The raw response bytes.

        Raises:
            OSError: On resolution, connect, send or receive failure.
            MessageTooLarge: If the reply exceeds max_message_size.
        """
        request = build_request(url)

        logger.info(f"Connecting to {url.host}:{self.config.port}...")
        sock = transport.open_connection(url.host, self.config.port)
        try:
            transport.send_all(sock, request)
            logger.debug(f"Sent {len(request)} bytes")

            data = transport.read_until_closed(
                sock, self.config.buffer_size, self.config.max_message_size
            )
            logger.debug(f"Received {len(data)} bytes")
        finally:
            sock.close()

        return data

    def get(self, url: URL) -> Response:
        """
        Fetch and parse.

        Raises:
            ProtocolError: If the status line is malformed.
            OSError: On transport failure.
        """
        return self.parser.parse(self.fetch(url))

    def download(self, url: URL, sink: Optional[OutputSink] = None) -> int:
        """
        Fetch a URL and deliver its body.

        Returns:
            Number of body bytes delivered.

        Raises:
            HTTPStatusError: If the status is not 200.
            ProtocolError: If the response is malformed.
            OSError: On transport or output failure.
        """
        response = self.get(url)
        body = response.body

        declared = response.content_length
        if declared is not None and declared != len(body):
            logger.warning(f"Content-Length {declared} does not match body of {len(body)} bytes")

        if sink is None:
            sink = OutputSink.for_config(self.config, url)
        sink.write(body)
        return len(body)
