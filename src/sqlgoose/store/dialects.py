"""SQL dialects for the goose_db_version bookkeeping table.

Each dialect supplies the handful of backend-specific statements the
migration runner needs: the table DDL, the version insert, the history
query and the checksum query. Statements use the native DB-API
placeholder style of the driver normally used for the backend.

Example:
    from sqlgoose.store.dialects import dialect_by_name

    dialect = dialect_by_name("postgres")
    cursor.execute(dialect.insert_version_sql(), (1, True, checksum))
"""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from typing import Any

from loguru import logger

from ..core.exceptions import (
    ChecksumUnsupportedError,
    DatabaseError,
    UnknownDialectError,
    VersionTableMissingError,
)
from ..core.types import VersionRow

VERSION_TABLE = "goose_db_version"

_VERSION_QUERY = f"SELECT version_id, is_applied FROM {VERSION_TABLE} ORDER BY id DESC"


class SqlDialect(ABC):
    """Backend-specific SQL for the version table."""

    name: str = ""
    has_checksum: bool = True
    placeholder: str = "%s"  # DB-API paramstyle of the usual driver

    @abstractmethod
    def create_version_table_sql(self) -> str:
        """SQL that creates the goose_db_version table."""

    @abstractmethod
    def insert_version_sql(self) -> str:
        """Parameterized INSERT of a version row.

        Parameters are (version_id, is_applied, checksum), or
        (version_id, is_applied) when the dialect stores no checksum.
        """

    def insert_version_params(
        self, version: int, is_applied: bool, checksum: str
    ) -> tuple[Any, ...]:
        """Parameters matching insert_version_sql()."""
        if self.has_checksum:
            return (version, is_applied, checksum)
        return (version, is_applied)

    def db_version_query(self, conn: Any) -> list[VersionRow]:
        """Fetch version history, newest row first.

        Any failure is taken to mean the table does not exist yet.

        Raises:
            VersionTableMissingError: If the query fails.
        """
        cursor = conn.cursor()
        try:
            cursor.execute(_VERSION_QUERY)
            rows = cursor.fetchall()
        except Exception as e:
            logger.debug(f"Version query failed on {self.name}: {e}")
            raise VersionTableMissingError(
                f"{VERSION_TABLE} does not exist: {e}"
            ) from e
        finally:
            cursor.close()
        return [VersionRow(int(version), bool(applied)) for version, applied in rows]

    @abstractmethod
    def db_checksum_query(self, conn: Any, version: int) -> str | None:
        """Fetch the checksum recorded on the newest row for a version.

        Returns:
            The stored checksum, or None if the version has no row.

        Raises:
            ChecksumUnsupportedError: If the table has no checksum column.
            DatabaseError: If the query fails.
        """

    def begin(self, conn: Any) -> None:
        """Open a transaction on a DB-API connection.

        DB-API drivers begin transactions implicitly, so this is a no-op
        unless the driver needs an explicit BEGIN.
        """

    def execute_statement(self, cursor: Any, sql: str) -> None:
        """Execute one migration statement inside the open transaction."""
        cursor.execute(sql)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


def _query_checksum(conn: Any, sql: str, version: int) -> str | None:
    """Run a checksum query and return the first column of the first row."""
    cursor = conn.cursor()
    try:
        cursor.execute(sql, (version,))
        row = cursor.fetchone()
    except Exception as e:
        raise DatabaseError(f"Checksum query for version {version} failed: {e}") from e
    finally:
        cursor.close()
    logger.debug(f"Checksum from db for version {version}: {row[0] if row else None}")
    return row[0] if row else None


def _insert_with_checksum_sql(placeholder: str) -> str:
    return (
        f"INSERT INTO {VERSION_TABLE} (version_id, is_applied, checksum) "
        f"VALUES ({placeholder}, {placeholder}, {placeholder});"
    )


def _checksum_sql(placeholder: str) -> str:
    return (
        f"SELECT checksum FROM {VERSION_TABLE} "
        f"WHERE version_id = {placeholder} ORDER BY id DESC"
    )


class PostgresDialect(SqlDialect):
    """PostgreSQL (psycopg) dialect."""

    name = "postgres"

    def create_version_table_sql(self) -> str:
        return f"""CREATE TABLE {VERSION_TABLE} (
            id serial NOT NULL,
            version_id bigint NOT NULL,
            is_applied boolean NOT NULL,
            checksum VARCHAR (50) NOT NULL,
            tstamp timestamp NULL default now(),
            PRIMARY KEY(id)
        );"""

    def insert_version_sql(self) -> str:
        return _insert_with_checksum_sql(self.placeholder)

    def db_checksum_query(self, conn: Any, version: int) -> str | None:
        return _query_checksum(conn, _checksum_sql(self.placeholder), version)


class MySqlDialect(SqlDialect):
    """MySQL (PyMySQL) dialect.

    A statement holding several commands, e.g. a StatementBegin block,
    needs the driver's multi-statement mode, which PyMySQL leaves off:

        create_engine(url, connect_args={"client_flag": CLIENT.MULTI_STATEMENTS})
    """

    name = "mysql"

    def create_version_table_sql(self) -> str:
        return f"""CREATE TABLE {VERSION_TABLE} (
            id serial NOT NULL,
            version_id bigint NOT NULL,
            is_applied boolean NOT NULL,
            checksum VARCHAR (50) NOT NULL,
            tstamp timestamp NULL default now(),
            PRIMARY KEY(id)
        );"""

    def insert_version_sql(self) -> str:
        return _insert_with_checksum_sql(self.placeholder)

    def db_checksum_query(self, conn: Any, version: int) -> str | None:
        return _query_checksum(conn, _checksum_sql(self.placeholder), version)


def sqlite_commands(sql: str) -> list[str]:
    """Split statement text into the single commands sqlite3 can execute.

    Boundaries are semicolons that complete a statement according to
    sqlite3.complete_statement, so trigger bodies and quoted or
    commented semicolons stay intact. A trailing remainder holding only
    whitespace and ``--`` comments is dropped.
    """
    commands = []
    start = 0
    for i, char in enumerate(sql):
        if char == ";" and sqlite3.complete_statement(sql[start : i + 1]):
            commands.append(sql[start : i + 1])
            start = i + 1

    rest = sql[start:]
    if any(line.strip() and not line.strip().startswith("--") for line in rest.splitlines()):
        commands.append(rest)
    return commands


class Sqlite3Dialect(SqlDialect):
    """SQLite dialect. Its version table has no checksum column."""

    name = "sqlite3"
    has_checksum = False
    placeholder = "?"

    def create_version_table_sql(self) -> str:
        return f"""CREATE TABLE {VERSION_TABLE} (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            version_id INTEGER NOT NULL,
            is_applied INTEGER NOT NULL,
            tstamp TIMESTAMP DEFAULT (datetime('now'))
        );"""

    def insert_version_sql(self) -> str:
        return f"INSERT INTO {VERSION_TABLE} (version_id, is_applied) VALUES (?, ?);"

    def db_checksum_query(self, conn: Any, version: int) -> str | None:
        raise ChecksumUnsupportedError(self.name)

    def begin(self, conn: Any) -> None:
        # sqlite3 only opens transactions implicitly before DML, so DDL
        # would otherwise run in autocommit mode.
        if not getattr(conn, "in_transaction", False):
            cursor = conn.cursor()
            try:
                cursor.execute("BEGIN")
            finally:
                cursor.close()

    def execute_statement(self, cursor: Any, sql: str) -> None:
        # cursor.execute() accepts one command per call; executescript()
        # would commit the open transaction first.
        for command in sqlite_commands(sql):
            cursor.execute(command)


DIALECTS: dict[str, type[SqlDialect]] = {
    PostgresDialect.name: PostgresDialect,
    MySqlDialect.name: MySqlDialect,
    Sqlite3Dialect.name: Sqlite3Dialect,
}

# SQLAlchemy backend names that differ from dialect names
_BACKEND_ALIASES = {
    "postgresql": "postgres",
    "sqlite": "sqlite3",
    "mariadb": "mysql",
}


def dialect_by_name(name: str) -> SqlDialect:
    """Get the dialect registered under a name.

    Args:
        name: One of "postgres", "mysql", "sqlite3".

    Raises:
        UnknownDialectError: If the name is not recognized.
    """
    try:
        return DIALECTS[name]()
    except KeyError:
        raise UnknownDialectError(name) from None


def dialect_for_backend(backend: str) -> SqlDialect:
    """Get the dialect for a SQLAlchemy backend name (e.g. "postgresql")."""
    return dialect_by_name(_BACKEND_ALIASES.get(backend, backend))
