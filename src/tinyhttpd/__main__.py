"""
=============================================================================
TINYHTTPD CLI ENTRY POINT
=============================================================================

    # Defaults (localhost:4221, no files route)
    python -m tinyhttpd

    # Serve and accept files from a directory
    python -m tinyhttpd --directory /tmp/data

    # Listen on all interfaces with a read timeout
    python -m tinyhttpd --host 0.0.0.0 --timeout 30

Settings not given on the command line fall back to TINYHTTPD_*
environment variables, then to the ServerConfig defaults.

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import ServerConfig
from .middleware import LoggingMiddleware
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tinyhttpd",
        description="Small HTTP/1.1 server built on raw sockets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m tinyhttpd                          # localhost:4221
  python -m tinyhttpd --directory /tmp/data    # enable /files/
  python -m tinyhttpd --port 8080 --workers 16
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: localhost)",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 4221, 0 for any free port)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for a client's request (default: wait forever)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # FEATURE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--directory", "-d",
        default=None,
        help="Base directory for /files/ (route disabled when omitted)",
    )
    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Number of worker threads (default: 8)",
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"tinyhttpd {__version__}",
    )
    return parser


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Environment first, then any command-line overrides on top."""
    config = ServerConfig.from_env()
    for name in ("host", "port", "timeout", "directory", "workers", "log_level"):
        value = getattr(args, name)
        if value is not None:
            setattr(config, name, value)
    return config


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    try:
        config = build_config(args)
        server = HTTPServer(config)
    except ValueError as e:
        print(f"tinyhttpd: invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    server.use(LoggingMiddleware())
    server.run()


if __name__ == "__main__":
    main()
