"""
=============================================================================
MINIHTTP - One GET, One Response, One Connection
=============================================================================

A minimal HTTP/1.1 client and file server that exchange exactly one
request and one response per TCP connection, then close it.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   CLIENT                                        SERVER               │
    │                                                                      │
    │   parse_url                                     accept()             │
    │      │                                             │                 │
    │   build_request ──── GET /path HTTP/1.1 ────►   read_request         │
    │                                                    │                 │
    │                                                 RequestParser        │
    │                                                    │                 │
    │                                                 PathResolver         │
    │                                                    │                 │
    │                                                 FileLoader           │
    │                                                    │                 │
    │   ResponseParser ◄── HTTP/1.1 200 OK ───────   HTTPResponse          │
    │      │                                             │                 │
    │   OutputSink                                    close()              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE LAYOUT
=============================================================================

    minihttp/
    ├── __init__.py          This file
    ├── __main__.py          python -m minihttp {client,server}
    ├── cli.py               Argument parsing and exit codes
    ├── config.py            ServerConfig, ClientConfig, logging setup
    ├── client.py            HTTPClient, OutputSink
    ├── server.py            HTTPServer (one exchange per connection)
    ├── core/
    │   ├── transport.py     Resolve, connect, listen, bounded reads
    │   ├── connection.py    One accepted socket
    │   ├── socket_server.py Accept loop
    │   └── shutdown.py      SIGINT/SIGTERM handling
    ├── http/
    │   ├── url.py           URL decomposition
    │   ├── request.py       Request line build / parse
    │   ├── response.py      Status line + headers build / parse
    │   └── status_codes.py  200, 400, 404, 501
    └── handlers/
        └── static.py        Path resolution and file loading

=============================================================================
QUICK START
=============================================================================

    $ minihttp-server -p 8080 /tmp/www &
    $ minihttp-client -p 8080 http://127.0.0.1/
    hello

=============================================================================
"""

__version__ = "1.0.0"

from .client import HTTPClient, OutputSink
from .config import ClientConfig, ServerConfig
from .server import HTTPServer

__all__ = [
    "ClientConfig",
    "HTTPClient",
    "HTTPServer",
    "OutputSink",
    "ServerConfig",
    "__version__",
]
