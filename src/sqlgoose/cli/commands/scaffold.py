"""Create command for sqlgoose CLI."""

from ...core.config import DBConf
from ...migrations import create_migration


def handle_create(args, config: DBConf) -> None:
    """Handle create command.

    Args:
        args: Parsed command arguments.
        config: Database configuration.
    """
    path = create_migration(args.name, config.migrations_dir)
    print(f"goose: created {path}")
