"""Up, down and redo commands for sqlgoose CLI."""

from ...core.config import DBConf
from ...migrations import Migrator


def handle_up(args, config: DBConf) -> None:
    """Handle up command.

    Args:
        args: Parsed command arguments.
        config: Database configuration.
    """
    with Migrator(config) as migrator:
        migrator.up(target=getattr(args, "to", None))


def handle_down(args, config: DBConf) -> None:
    """Handle down command."""
    with Migrator(config) as migrator:
        migrator.down()


def handle_redo(args, config: DBConf) -> None:
    """Handle redo command."""
    with Migrator(config) as migrator:
        migrator.redo()
