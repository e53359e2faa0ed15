"""
=============================================================================
WSSERVER CLI ENTRY POINT
=============================================================================

    # Run with defaults (0.0.0.0:4485, ./templates)
    python -m wsserver

    # Port from the environment, as most hosting platforms set it
    PORT=8000 python -m wsserver

    # Flags override the environment
    python -m wsserver --port 3000 --workers 8 --log-level DEBUG

    # JSON access log
    python -m wsserver --log-format json

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import ServerConfig
from .http.routes import DEFAULT_TEMPLATES, RouteTable
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wsserver",
        description="Minimal HTTP/1.1 server with a from-scratch WebSocket handshake",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  PORT, HTTP_HOST, HTTP_WORKERS, HTTP_TIMEOUT,
  HTTP_TEMPLATES_DIR, HTTP_LOG_LEVEL, HTTP_LOG_FORMAT

Examples:
  python -m wsserver                      # Run with defaults
  python -m wsserver --port 3000          # Custom port
  python -m wsserver --templates ./pages  # Other template directory
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: $HTTP_HOST or 0.0.0.0)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: $PORT or 4485)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # PERFORMANCE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Maximum number of worker threads (default: $HTTP_WORKERS or 16)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT / LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--templates", "-t",
        default=None,
        help="Directory containing home.html (default: $HTTP_TEMPLATES_DIR or ./templates)"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: $HTTP_LOG_LEVEL or INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=None,
        help="Access log format (default: $HTTP_LOG_FORMAT or text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"wsserver {__version__}"
    )

    return parser


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Environment first, then any flag that was given on top."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.workers is not None:
        config.max_workers = args.workers
        config.min_workers = min(config.min_workers, args.workers)
    if args.templates is not None:
        config.templates_dir = args.templates
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_format is not None:
        config.log_format = args.log_format

    config.validate()
    return config


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
        routes = RouteTable.from_templates(config.templates_dir, DEFAULT_TEMPLATES)
    except (ValueError, FileNotFoundError) as e:
        parser.error(str(e))

    server = HTTPServer(config, routes)
    server.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
