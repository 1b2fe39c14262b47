"""Run SQL migration scripts against a DB-API connection.

Each script runs in its own transaction: every statement for the
requested direction plus the goose_db_version row are committed
together, or the transaction is rolled back and the error is raised.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any

from loguru import logger

from ..core.exceptions import (
    ChecksumMismatchError,
    FinalizeError,
    MigrationFileError,
    StatementError,
    VersionTableMissingError,
)
from ..core.types import Direction, MigrationResult, VersionRow
from ..store.dialects import SqlDialect
from ..utils.hashing import checksum
from .splitter import split_sql_statements


def run_sql_migration(
    conn: Any,
    dialect: SqlDialect,
    script: Path,
    version: int,
    direction: Direction,
) -> MigrationResult:
    """Apply or revert one SQL migration script.

    Args:
        conn: DB-API connection, owned by the caller.
        dialect: Dialect for the connection's backend.
        script: Path to the annotated SQL script.
        version: Version number recorded for the script.
        direction: Direction.UP to apply, Direction.DOWN to revert.

    Returns:
        MigrationResult describing what was executed.

    Raises:
        NoAnnotationsError: If the script has no Up/Down directives.
        MigrationFileError: If the script cannot be read as UTF-8 text.
        StatementError: If a statement fails; nothing is committed.
        FinalizeError: If recording the version or committing fails.
    """
    script = Path(script)
    data = _read_script(script, version)
    digest = checksum(data)

    # Split the same bytes that were checksummed
    split = split_sql_statements(
        io.StringIO(_decode_script(data, script, version)), direction, source=script.name
    )

    dialect.begin(conn)
    cursor = conn.cursor()
    try:
        for statement in split.statements:
            try:
                dialect.execute_statement(cursor, statement)
            except Exception as e:
                _rollback(conn)
                logger.error(f"FAIL {script.name} ({e}), quitting migration")
                raise StatementError(script, version, statement, e) from e

        try:
            cursor.execute(
                dialect.insert_version_sql(),
                dialect.insert_version_params(version, direction.is_applied, digest),
            )
            conn.commit()
        except Exception as e:
            _rollback(conn)
            logger.error(f"Error finalizing migration {script.name}: {e}")
            raise FinalizeError(script, version, e) from e
    finally:
        cursor.close()

    logger.info(f"OK    {script.name}")
    return MigrationResult(
        version=version,
        direction=direction,
        source=script,
        checksum=digest,
        statement_count=len(split.statements),
        warnings=split.warnings,
    )


def validate_checksum(conn: Any, dialect: SqlDialect, script: Path, version: int) -> str:
    """Check that a script still matches the checksum recorded for it.

    Returns:
        The current checksum, when it matches.

    Raises:
        ChecksumUnsupportedError: If the dialect stores no checksums.
        ChecksumMismatchError: If the script changed since it was recorded,
            or no checksum was recorded for the version.
        MigrationFileError: If the script cannot be read.
    """
    script = Path(script)
    actual = checksum(_read_script(script, version))
    logger.debug(f"Checksum for {script.name}: {actual}")

    expected = dialect.db_checksum_query(conn, version)
    if expected is not None:
        expected = expected.strip()
    if expected != actual:
        raise ChecksumMismatchError(script, version, expected, actual)
    return actual


def ensure_version_table(conn: Any, dialect: SqlDialect) -> list[VersionRow]:
    """Return version history, creating the table first if needed.

    A new table is seeded with an applied version 0 row.
    """
    try:
        return dialect.db_version_query(conn)
    except VersionTableMissingError:
        logger.info("Creating goose_db_version table")
        # Some backends abort the transaction after the failed query
        _rollback(conn)

    dialect.begin(conn)
    cursor = conn.cursor()
    try:
        cursor.execute(dialect.create_version_table_sql())
        cursor.execute(
            dialect.insert_version_sql(),
            dialect.insert_version_params(0, True, ""),
        )
        conn.commit()
    except Exception:
        _rollback(conn)
        raise
    finally:
        cursor.close()

    return dialect.db_version_query(conn)


def get_db_version(conn: Any, dialect: SqlDialect) -> int:
    """Get the version the database is currently at.

    History is walked newest first; a version whose newest row is a
    revert is skipped, so the result is the newest still-applied version.
    """
    rows = ensure_version_table(conn, dialect)
    # Reading leaves a transaction open on some drivers
    conn.commit()
    return current_version(rows)


def current_version(rows: list[VersionRow]) -> int:
    """Newest applied version in a newest-first history."""
    skip: set[int] = set()
    for row in rows:
        if row.version_id in skip:
            continue
        if row.is_applied:
            return row.version_id
        skip.add(row.version_id)
    return 0


def _rollback(conn: Any) -> None:
    try:
        conn.rollback()
    except Exception as e:
        logger.warning(f"Rollback failed: {e}")


def _read_script(script: Path, version: int) -> bytes:
    try:
        return script.read_bytes()
    except OSError as e:
        raise MigrationFileError(
            f"Cannot read migration {script} (version {version}): {e}"
        ) from e


def _decode_script(data: bytes, script: Path, version: int) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MigrationFileError(
            f"Migration {script} (version {version}) is not valid UTF-8: {e}"
        ) from e
