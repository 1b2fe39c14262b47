"""Database access for sqlgoose.

This package provides:
- Database: URL-based connection management
- SqlDialect implementations for the goose_db_version table

Example:
    from sqlgoose.store import Database

    db = Database("sqlite:///app.db")
    with db.connection() as conn:
        rows = db.dialect.db_version_query(conn)
"""

from .database import Database
from .dialects import (
    DIALECTS,
    VERSION_TABLE,
    MySqlDialect,
    PostgresDialect,
    Sqlite3Dialect,
    SqlDialect,
    dialect_by_name,
    dialect_for_backend,
    sqlite_commands,
)

__all__ = [
    "Database",
    "DIALECTS",
    "VERSION_TABLE",
    "SqlDialect",
    "PostgresDialect",
    "MySqlDialect",
    "Sqlite3Dialect",
    "dialect_by_name",
    "dialect_for_backend",
    "sqlite_commands",
]
