"""Status, dbversion and validate commands for sqlgoose CLI."""

from ...core.config import DBConf
from ...core.exceptions import ChecksumUnsupportedError
from ...migrations import Migrator


def handle_status(args, config: DBConf) -> None:
    """Handle status command.

    Args:
        args: Parsed command arguments.
        config: Database configuration.
    """
    with Migrator(config) as migrator:
        statuses = migrator.status()

    print(f"goose: status for environment '{config.env}'")
    print(f"    {'Applied':<10}{'Checksum':<10}Migration")
    print("    " + "=" * 50)
    for status in statuses:
        applied = "yes" if status.applied else "pending"
        if status.checksum_ok is None:
            checksum = "-"
        else:
            checksum = "ok" if status.checksum_ok else "CHANGED"
        print(f"    {applied:<10}{checksum:<10}{status.name}")


def handle_dbversion(args, config: DBConf) -> None:
    """Handle dbversion command."""
    with Migrator(config) as migrator:
        print(f"goose: dbversion {migrator.version()}")


def handle_validate(args, config: DBConf) -> None:
    """Handle validate command.

    Raises:
        ChecksumMismatchError: If an applied script has changed.
    """
    with Migrator(config) as migrator:
        try:
            validated = migrator.validate()
        except ChecksumUnsupportedError as e:
            print(f"goose: {e}; nothing to validate")
            return
    print(f"goose: {len(validated)} applied migration(s) match their checksums")
