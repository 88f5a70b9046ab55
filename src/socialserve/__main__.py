"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

    python -m socialserve                      # 127.0.0.1:8000
    python -m socialserve --port 3000
    python -m socialserve --host 0.0.0.0       # containers
    python -m socialserve --workers 8 --log-level DEBUG

Flags win over SOCIAL_* environment variables, which win over defaults:

    SOCIAL_PORT=9000 python -m socialserve              # port 9000
    SOCIAL_PORT=9000 python -m socialserve -p 3000      # port 3000

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .app import create_app
from .config import LOG_LEVELS, ServerConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="socialserve",
        description="In-memory social site served over a from-scratch HTTP/1.1 server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  socialserve                       # 127.0.0.1:8000
  socialserve --port 3000
  socialserve --host 0.0.0.0        # listen on all interfaces
  socialserve --workers 8           # 8 worker threads, up to 16
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1, or $SOCIAL_HOST)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 8000, or $SOCIAL_PORT)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # PERFORMANCE
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Worker threads at startup; the pool may grow to twice this"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING / META
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: INFO, or $SOCIAL_LOG_LEVEL)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"socialserve {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment-derived config with every given flag applied on top."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.workers is not None:
        config.min_workers = args.workers
        config.max_workers = max(args.workers * 2, config.min_workers)
    if args.log_level is not None:
        config.log_level = args.log_level

    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the server until interrupted. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        app = create_app(config)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    try:
        app.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
