"""CLI entry point for sqlgoose."""

import argparse
import sys
from pathlib import Path
from typing import NoReturn

from loguru import logger

from ..core.config import DBConf
from . import commands


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="sqlgoose",
        description="Versioned SQL schema migrations",
    )
    parser.add_argument("--version", action="version", version="%(prog)s 0.1.0")
    parser.add_argument(
        "--path",
        type=Path,
        default=Path("db"),
        help="Folder containing dbconf.yml and migrations/ (default: db)",
    )
    parser.add_argument("--env", default="development", help="Config environment")
    parser.add_argument("--url", help="Database URL, overrides dbconf.yml")
    parser.add_argument("--dialect", help="postgres, mysql or sqlite3")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=False)

    up_parser = subparsers.add_parser("up", help="Apply all pending migrations")
    up_parser.add_argument("--to", type=int, help="Migrate up to this version")

    subparsers.add_parser("down", help="Roll back the current version")
    subparsers.add_parser("redo", help="Re-run the current version")
    subparsers.add_parser("status", help="Show migration status")
    subparsers.add_parser("dbversion", help="Print the current database version")
    subparsers.add_parser("validate", help="Check applied scripts for drift")

    create_parser_ = subparsers.add_parser("create", help="Create a new migration")
    create_parser_.add_argument("name", help="Migration description")

    return parser


def load_config(args: argparse.Namespace) -> DBConf:
    """Build configuration from dbconf.yml, environment and flags."""
    conf_file = args.path / "dbconf.yml"
    if conf_file.exists():
        config = DBConf.from_file(conf_file, args.env)
    else:
        config = DBConf(env=args.env, migrations_dir=args.path / "migrations")
    config = DBConf.from_env(config)

    if args.url:
        config.url = args.url
    if args.dialect:
        config.dialect = args.dialect
    return config


def configure_logging(verbose: bool) -> None:
    """Send log output to stderr at INFO, or DEBUG when verbose."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format="<level>{message}</level>",
    )


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    handlers = {
        "up": commands.handle_up,
        "down": commands.handle_down,
        "redo": commands.handle_redo,
        "status": commands.handle_status,
        "dbversion": commands.handle_dbversion,
        "validate": commands.handle_validate,
        "create": commands.handle_create,
    }

    try:
        handler = handlers.get(args.command)
        if handler is None:
            parser.print_help()
        else:
            handler(args, load_config(args))

        sys.exit(0)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
