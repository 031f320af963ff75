"""
Command line entry point.

Flags override environment variables (and ``.env``), which override the
built-in defaults. ``--db-dsn`` / ``DB_DSN`` has no default and is required.
"""

import argparse
import sys
from typing import Any, Sequence

import uvicorn
from pydantic import ValidationError

from contactbook.config import Settings
from contactbook.main import create_app
from contactbook.shared.logging import get_logger, setup_logging

logger = get_logger("contactbook")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="contactbook", description="Run the contacts web app.")
    parser.add_argument("--port", type=int, help="The port to run the app on.")
    parser.add_argument(
        "--env",
        choices=["development", "staging", "production"],
        help="Environment (development|staging|production)",
    )
    parser.add_argument("--debug", action=argparse.BooleanOptionalAction, help="Run in debug mode")
    parser.add_argument("--verbose", action=argparse.BooleanOptionalAction, help="Provide verbose logging")
    parser.add_argument("--log-level", help="Root log level")
    parser.add_argument("--db-dsn", help="Database DSN")
    parser.add_argument("--db-max-open-conns", type=int, help="Database max open connections")
    parser.add_argument("--db-max-idle-conns", type=int, help="Database max idle connections")
    parser.add_argument(
        "--db-max-idle-time",
        help="Database max connection idle time (seconds, or ISO 8601 such as PT15M)",
    )
    return parser


def parse_overrides(argv: Sequence[str] | None = None) -> dict[str, Any]:
    """Return the flags that were actually given, keyed by settings field."""
    args = build_parser().parse_args(argv)
    return {name: value for name, value in vars(args).items() if value is not None}


def load_settings(argv: Sequence[str] | None = None) -> Settings:
    return Settings(**parse_overrides(argv))


def main(argv: Sequence[str] | None = None) -> int:
    try:
        settings = load_settings(argv)
    except ValidationError as exc:
        print(f"contactbook: invalid configuration\n{exc}", file=sys.stderr)
        return 2

    setup_logging(settings)
    logger.info("starting server", extra={"port": settings.port, "env": settings.env})

    uvicorn.run(
        create_app(settings),
        host="0.0.0.0",
        port=settings.port,
        timeout_keep_alive=60,
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
