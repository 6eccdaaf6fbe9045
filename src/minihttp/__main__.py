"""
=============================================================================
CLI ENTRY POINT
=============================================================================

    minihttp                  # serve ./files on localhost:4221
    minihttp /tmp/files       # serve another directory
    python -m minihttp /tmp/files

Everything else comes from the environment (see config.py):

    MINIHTTP_PORT=8080 MINIHTTP_LOG_FORMAT=json minihttp /tmp/files

Exit status: 0 after SIGINT/SIGTERM, 1 when the port cannot be bound or
the configuration is invalid.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .app import create_app
from .config import ServerConfig


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="minihttp",
        description="Small HTTP/1.1 server: echo, user-agent and file upload/download",
    )

    parser.add_argument(
        "directory",
        nargs="?",
        default=None,
        help="Directory served under /files/ (default: $MINIHTTP_DIRECTORY or ./files)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"minihttp {__version__}",
    )

    args = parser.parse_args(argv)

    try:
        config = ServerConfig.from_env()
        if args.directory is not None:
            config.directory = args.directory
        server = create_app(config)
    except ValueError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
