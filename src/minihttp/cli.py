"""
=============================================================================
COMMAND-LINE ENTRY POINTS
=============================================================================

    minihttp-client [-p PORT] [-o FILE | -d DIR] URL
    minihttp-server [-p PORT] [-i INDEX] DOC_ROOT

Both also run as `python -m minihttp client ...` / `python -m minihttp server ...`.

=============================================================================
EXIT CODES
=============================================================================

    ┌──────┬─────────────────────────────────────────────────────────────┐
    │  0   │ Success                                                     │
    │  1   │ Usage error (checked before any network activity), or a    │
    │      │ socket / file I/O failure                                   │
    │  2   │ Client: response is not HTTP/1.1 or its status code is not │
    │      │ a number                                                    │
    │  3   │ Client: status code other than 200 (reason on stderr)      │
    └──────┴─────────────────────────────────────────────────────────────┘

argparse exits with 2 on bad arguments, which would collide with the
protocol error code, so its errors are routed through UsageError.

=============================================================================
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from . import __version__
from .client import HTTPClient
from .config import ClientConfig, ServerConfig, setup_logging
from .http.response import DateFormatError, HTTPStatusError, ProtocolError
from .http.url import URLError, parse_url
from .server import HTTPServer


logger = logging.getLogger(__name__)


EXIT_SUCCESS = 0
EXIT_USAGE = 1
EXIT_PROTOCOL = 2
EXIT_STATUS = 3
EXIT_FAILURE = 1

CLIENT_USAGE = "[-p PORT] [ -o FILE | -d DIR ] URL"
SERVER_USAGE = "[-p PORT] [-i INDEX] DOC_ROOT"


class UsageError(Exception):
    """Raised for malformed command-line input."""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


def _report_usage(prog: str, usage: str, message: object) -> int:
    print(f"Usage Error! \tProper input: {prog} {usage}\n{message}", file=sys.stderr)
    return EXIT_USAGE


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttp {__version__}",
    )


# =============================================================================
# CLIENT
# =============================================================================

def build_client_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog=prog or "minihttp-client",
        description="Fetch one file over HTTP/1.1",
    )
    parser.add_argument("--port", "-p", default=None, help="Server port (default: 80)")

    output = parser.add_mutually_exclusive_group()
    output.add_argument("--output", "-o", dest="output_file", default=None,
                        help="Write the body to FILE")
    output.add_argument("--directory", "-d", dest="output_dir", default=None,
                        help="Write the body into DIR, named after the URL")

    parser.add_argument("url", nargs="?", default=None, help="http://host/path")
    _add_common_arguments(parser)
    return parser


def client_main(argv: Optional[List[str]] = None) -> int:
    """
    Run the client. Returns the process exit code.
    """
    parser = build_client_parser()

    try:
        args = parser.parse_args(argv)

        config = ClientConfig.from_env()
        if args.port is not None:
            config.port = args.port
        config.output_file = args.output_file
        config.output_dir = args.output_dir
        if args.log_level is not None:
            config.log_level = args.log_level
        config.validate()

        url = parse_url(args.url)
    except (UsageError, URLError, ValueError) as e:
        return _report_usage(parser.prog, CLIENT_USAGE, e)

    setup_logging(config.log_level)

    try:
        HTTPClient(config).download(url)
    except HTTPStatusError as e:
        print(e.status.reason, file=sys.stderr)
        return EXIT_STATUS
    except ProtocolError as e:
        print(e, file=sys.stderr)
        return EXIT_PROTOCOL
    except OSError as e:
        logger.error(f"Request to {url.host}:{config.port} failed: {e}")
        return EXIT_FAILURE

    return EXIT_SUCCESS


# =============================================================================
# SERVER
# =============================================================================

def build_server_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog=prog or "minihttp-server",
        description="Serve files from DOC_ROOT over HTTP/1.1, one client at a time",
    )
    parser.add_argument("--port", "-p", default=None, help="Port to listen on (default: 8080)")
    parser.add_argument("--index", "-i", dest="index_file", default=None,
                        help="Default document for paths ending in / (default: index.html)")
    parser.add_argument("doc_root", nargs="?", default=None, help="Directory to serve")
    _add_common_arguments(parser)
    return parser


def server_main(argv: Optional[List[str]] = None) -> int:
    """
    Run the server until SIGINT/SIGTERM. Returns the process exit code.
    """
    parser = build_server_parser()

    try:
        args = parser.parse_args(argv)

        config = ServerConfig.from_env()
        if args.port is not None:
            config.port = args.port
        if args.index_file is not None:
            config.index_file = args.index_file
        if args.doc_root is not None:
            config.doc_root = args.doc_root
        elif "MINIHTTP_DOC_ROOT" not in os.environ:
            raise UsageError("Missing DOC_ROOT")
        if args.log_level is not None:
            config.log_level = args.log_level

        server = HTTPServer(config)
    except (UsageError, ValueError) as e:
        return _report_usage(parser.prog, SERVER_USAGE, e)

    try:
        server.run()
    except (OSError, DateFormatError) as e:
        logger.error(f"Server failed: {e}")
        return EXIT_FAILURE

    return EXIT_SUCCESS
