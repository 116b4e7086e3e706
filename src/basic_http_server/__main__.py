"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

    basic-http-server [ROOT] [-a ADDR] [-x] [-l LEVEL] [--access-log FORMAT]

    # Serve the current directory on http://127.0.0.1:4000
    python -m basic_http_server

    # Serve ./public on all interfaces, with the development extensions
    python -m basic_http_server ./public -a 0.0.0.0:8000 -x

Startup problems (bad address, missing root, broken template) are printed
as "error: ..." and the process exits with status 1.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import ACCESS_LOG_FORMATS, DEFAULT_ADDR, DEFAULT_ROOT, LOG_LEVELS, ServerConfig
from .errors import ServerError
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="basic-http-server",
        description="A basic HTTP file server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  basic-http-server                        # Serve . on 127.0.0.1:4000
  basic-http-server ./site -a 0.0.0.0:80   # Custom root and address
  basic-http-server -x                     # Directory listings, .html lookup
        """
    )

    parser.add_argument(
        "root",
        nargs="?",
        default=DEFAULT_ROOT,
        metavar="ROOT",
        help="The root directory for serving files (default: .)"
    )

    parser.add_argument(
        "--addr", "-a",
        default=DEFAULT_ADDR,
        help=f"Sets the IP:PORT combination (default: {DEFAULT_ADDR})"
    )

    parser.add_argument(
        "-x",
        dest="use_extensions",
        action="store_true",
        help="Enable developer extensions"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        default="INFO",
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--access-log",
        choices=ACCESS_LOG_FORMATS,
        default="text",
        help="Access log line format (default: text)"
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"basic-http-server {__version__}"
    )

    return parser


def main(argv=None) -> int:
    """Parse arguments, print the configuration and serve until Ctrl+C."""
    args = build_parser().parse_args(argv)

    try:
        config = ServerConfig.from_args(
            root=args.root,
            addr=args.addr,
            use_extensions=args.use_extensions,
            log_level=args.log_level,
            access_log_format=args.access_log,
        )
        server = HTTPServer(config)
    except ServerError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(f"addr: {config.url}")
    print(f"root dir: {config.root_dir}")
    print()

    try:
        server.run()
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
