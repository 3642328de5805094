#!/usr/bin/env python3
"""CLI for certificate generator management tasks.

Usage:
    cd api
    python -m cli <command>

Commands:
    migrate [target]     Apply database migrations (default: head)
    downgrade [target]   Revert database migrations (default: -1)
    current              Show the current migration revision
    create-tables        Create the schema directly from the models
                         (local SQLite development; skips Alembic)
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

from core.logger import configure_logging

logger = logging.getLogger(__name__)

API_DIR = Path(__file__).resolve().parent


def get_alembic_config() -> Config:
    cfg = Config(str(API_DIR / "alembic.ini"))
    # Make script_location absolute so it works from any working directory.
    cfg.set_main_option("script_location", str(API_DIR / "alembic"))
    return cfg


def cmd_migrate(target: str = "head") -> int:
    """Run database migrations."""
    logger.info("migrations.starting", extra={"target": target})
    command.upgrade(get_alembic_config(), target)
    logger.info("migrations.complete")
    return 0


def cmd_downgrade(target: str = "-1") -> int:
    logger.info("migrations.downgrading", extra={"target": target})
    command.downgrade(get_alembic_config(), target)
    return 0


def cmd_current() -> int:
    command.current(get_alembic_config())
    return 0


def cmd_create_tables() -> int:
    """Create all tables from model metadata."""
    from core.database import create_engine, create_tables, dispose_engine

    async def _run() -> None:
        engine = create_engine()
        try:
            await create_tables(engine)
        finally:
            await dispose_engine(engine)

    asyncio.run(_run())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Certificate generator CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    migrate = subparsers.add_parser("migrate", help="Run database migrations")
    migrate.add_argument(
        "target", nargs="?", default="head", help="Target revision (default: head)"
    )

    downgrade = subparsers.add_parser("downgrade", help="Revert database migrations")
    downgrade.add_argument(
        "target", nargs="?", default="-1", help="Target revision (default: -1)"
    )

    subparsers.add_parser("current", help="Show current revision")
    subparsers.add_parser(
        "create-tables",
        help="Create tables from the models without migrations",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "migrate":
        return cmd_migrate(args.target)
    elif args.command == "downgrade":
        return cmd_downgrade(args.target)
    elif args.command == "current":
        return cmd_current()
    elif args.command == "create-tables":
        return cmd_create_tables()
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
