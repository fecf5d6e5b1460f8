"""
Entry point for ``python -m minihttp``.

    python -m minihttp server [-p PORT] [-i INDEX] DOC_ROOT
    python -m minihttp client [-p PORT] [-o FILE | -d DIR] URL
"""

import sys

from .cli import client_main, server_main


PROGRAMS = {
    "client": client_main,
    "server": server_main,
}


def main(argv=None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    if not argv or argv[0] not in PROGRAMS:
        print("Usage: python -m minihttp {client,server} [options]", file=sys.stderr)
        return 1

    return PROGRAMS[argv[0]](argv[1:])


if __name__ == "__main__":
    sys.exit(main())
