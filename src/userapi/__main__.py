"""
=============================================================================
CLI ENTRY POINT
=============================================================================

    python -m userapi

    python -m userapi --port 3000

    python -m userapi --database-url postgresql://app:secret@db/users

    HTTP_PORT=3000 DATABASE_URL=sqlite:///data.db python -m userapi

Command-line flags override environment variables, which override the
ServerConfig defaults.

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import ServerConfig
from .server import UserServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="userapi",
        description="User CRUD service over a hand-rolled HTTP protocol",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m userapi                                  # Run with defaults
  python -m userapi --port 3000                      # Custom port
  python -m userapi --host 127.0.0.1                 # Localhost only
  python -m userapi -d sqlite:////var/lib/users.db   # Database location
        """
    )

    # None defaults mean "not given": the environment value is kept.
    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 0.0.0.0, env HTTP_HOST)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 8080, env HTTP_PORT)"
    )

    parser.add_argument(
        "--database-url", "-d",
        default=None,
        help="SQLAlchemy database URL (default: sqlite:///users.db, env DATABASE_URL)"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO, env HTTP_LOG_LEVEL)"
    )

    parser.add_argument(
        "--no-threads",
        action="store_true",
        help="Handle connections one at a time on the accept thread"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"userapi {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment config with any command-line overrides applied."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.database_url is not None:
        config.database_url = args.database_url
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.no_threads:
        config.threaded = False

    return config


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        server = UserServer(config)
        server.run()
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
