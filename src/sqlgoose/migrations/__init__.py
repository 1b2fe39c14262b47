"""SQL migrations for sqlgoose.

Annotated SQL scripts are split into statements per direction and run
in one transaction each, with every apply or revert appended to the
goose_db_version table.

Example:
    from sqlgoose.migrations import run_sql_migration
    from sqlgoose.core.types import Direction

    result = run_sql_migration(conn, dialect, path, 1, Direction.UP)
"""

from .collection import Migration, collect_migrations, create_migration, num_from_filename
from .migrator import Migrator
from .runner import (
    current_version,
    ensure_version_table,
    get_db_version,
    run_sql_migration,
    validate_checksum,
)
from .splitter import SplitResult, ends_with_semicolon, split_sql_statements

__all__ = [
    "Migration",
    "Migrator",
    "SplitResult",
    "collect_migrations",
    "create_migration",
    "current_version",
    "ends_with_semicolon",
    "ensure_version_table",
    "get_db_version",
    "num_from_filename",
    "run_sql_migration",
    "split_sql_statements",
    "validate_checksum",
]
