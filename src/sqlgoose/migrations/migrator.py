"""High-level migration commands over a configured database.

Example:
    from sqlgoose.core.config import DBConf
    from sqlgoose.migrations import Migrator

    with Migrator(DBConf(url="sqlite:///app.db")) as migrator:
        migrator.up()
        print(f"Database now at version {migrator.version()}")
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from ..core.config import DBConf
from ..core.exceptions import ChecksumMismatchError, ChecksumUnsupportedError, MigrationFileError
from ..core.types import Direction, MigrationResult, MigrationStatus, VersionRow
from ..store.database import Database
from .collection import Migration, collect_migrations, get_most_recent_version, get_previous_version
from .runner import ensure_version_table, get_db_version, run_sql_migration, validate_checksum


def applied_versions(rows: list[VersionRow]) -> dict[int, bool]:
    """Map each version to the state of its newest history row."""
    state: dict[int, bool] = {}
    for row in rows:
        state.setdefault(row.version_id, row.is_applied)
    return state


class Migrator:
    """Runs migrations from a directory against one database.

    Stops at the first failing migration; earlier migrations in the same
    run stay committed.
    """

    def __init__(self, conf: DBConf, database: Database | None = None):
        """Initialize with configuration.

        Args:
            conf: Database and migrations configuration.
            database: Database to use; built from conf.url when omitted.
        """
        self.conf = conf
        self.db = database or Database(conf.url, conf.dialect)

    @property
    def dialect(self):
        return self.db.dialect

    def __enter__(self) -> "Migrator":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        self.db.close()

    def version(self) -> int:
        """Current database version."""
        with self.db.connection() as conn:
            return get_db_version(conn, self.dialect)

    def up(self, target: int | None = None) -> list[MigrationResult]:
        """Apply pending migrations up to target (the newest one by default).

        Applied migrations are checked for drift first when checksum
        validation is enabled and the dialect stores checksums.

        Raises:
            ChecksumMismatchError: If an applied script has changed.
            MigrationError: If a migration fails.
        """
        if target is None:
            target = get_most_recent_version(self.conf.migrations_dir)

        results = []
        with self.db.connection() as conn:
            current = get_db_version(conn, self.dialect)
            if self.conf.validate_checksums and self.dialect.has_checksum:
                self._validate_applied(conn)

            pending = collect_migrations(self.conf.migrations_dir, current, target)
            if not pending:
                logger.info(f"No migrations to run. Current version: {current}")
                return results

            for migration in pending:
                results.append(self._run(conn, migration, Direction.UP))

        logger.info(
            f"Applied {len(results)} migration(s), "
            f"database now at version {results[-1].version}"
        )
        return results

    def down(self) -> MigrationResult | None:
        """Roll back the current version.

        Returns:
            Result of the revert, or None if the database is at version 0.
        """
        with self.db.connection() as conn:
            current = get_db_version(conn, self.dialect)
            if current == 0:
                logger.info("No migrations to roll back")
                return None

            migrations = collect_migrations(self.conf.migrations_dir, 0, current)
            migration = self._find(migrations, current)
            result = self._run(conn, migration, Direction.DOWN)

        logger.info(
            f"Rolled back {migration.name}, database now at version "
            f"{get_previous_version(migrations, current)}"
        )
        return result

    def redo(self) -> list[MigrationResult]:
        """Roll back the current version and apply it again."""
        with self.db.connection() as conn:
            current = get_db_version(conn, self.dialect)
            if current == 0:
                logger.info("No migrations to redo")
                return []

            migration = self._find(
                collect_migrations(self.conf.migrations_dir, 0, current), current
            )
            return [
                self._run(conn, migration, Direction.DOWN),
                self._run(conn, migration, Direction.UP),
            ]

    def status(self) -> list[MigrationStatus]:
        """Applied/pending state of every migration on disk."""
        statuses = []
        with self.db.connection() as conn:
            state = applied_versions(ensure_version_table(conn, self.dialect))
            conn.commit()

            check = self.conf.validate_checksums and self.dialect.has_checksum
            for migration in collect_migrations(self.conf.migrations_dir):
                applied = state.get(migration.version, False)
                checksum_ok = None
                if check and applied:
                    try:
                        validate_checksum(conn, self.dialect, migration.source, migration.version)
                        checksum_ok = True
                    except ChecksumMismatchError:
                        checksum_ok = False
                statuses.append(
                    MigrationStatus(migration.version, migration.name, applied, checksum_ok)
                )
        return statuses

    def validate(self) -> list[int]:
        """Validate checksums of all applied migrations.

        Returns:
            Versions whose checksums matched.

        Raises:
            ChecksumUnsupportedError: If the dialect stores no checksums.
            ChecksumMismatchError: On the first changed script.
        """
        if not self.dialect.has_checksum:
            raise ChecksumUnsupportedError(self.dialect.name)
        with self.db.connection() as conn:
            ensure_version_table(conn, self.dialect)
            return self._validate_applied(conn)

    def _validate_applied(self, conn: Any) -> list[int]:
        state = applied_versions(self.dialect.db_version_query(conn))
        validated = []
        for migration in collect_migrations(self.conf.migrations_dir):
            if state.get(migration.version):
                validate_checksum(conn, self.dialect, migration.source, migration.version)
                validated.append(migration.version)
        conn.commit()
        return validated

    def _run(self, conn: Any, migration: Migration, direction: Direction) -> MigrationResult:
        return run_sql_migration(
            conn, self.dialect, migration.source, migration.version, direction
        )

    @staticmethod
    def _find(migrations: list[Migration], version: int) -> Migration:
        for migration in migrations:
            if migration.version == version:
                return migration
        raise MigrationFileError(f"No migration file found for version {version}")
