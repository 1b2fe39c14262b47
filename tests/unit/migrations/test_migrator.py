"""Tests for the Migrator command layer."""

import sqlite3
from pathlib import Path
from unittest.mock import patch

import pytest

from sqlgoose.core.config import DBConf
from sqlgoose.core.exceptions import (
    ChecksumMismatchError,
    ChecksumUnsupportedError,
    MigrationFileError,
    StatementError,
)
from sqlgoose.core.types import Direction
from sqlgoose.migrations.migrator import Migrator

from conftest import table_exists


def script(table: str) -> str:
    return (
        "-- +goose Up\n"
        f"CREATE TABLE {table} (id INT);\n"
        "-- +goose Down\n"
        f"DROP TABLE {table};\n"
    )


@pytest.fixture
def three_migrations(write_script):
    for version, table in [(1, "a"), (2, "b"), (3, "c")]:
        write_script(f"{version:03d}_{table}.sql", script(table))


def tables(db_path: Path) -> set[str]:
    conn = sqlite3.connect(str(db_path))
    try:
        return {name for name in ["a", "b", "c"] if table_exists(conn, name)}
    finally:
        conn.close()


class TestMigrator:
    """Tests for Migrator."""

    def test_up_applies_all(self, db_conf: DBConf, three_migrations, test_db_path):
        with Migrator(db_conf) as migrator:
            results = migrator.up()

            assert [r.version for r in results] == [1, 2, 3]
            assert all(r.direction is Direction.UP for r in results)
            assert migrator.version() == 3

        assert tables(test_db_path) == {"a", "b", "c"}

    def test_up_is_idempotent(self, db_conf: DBConf, three_migrations):
        with Migrator(db_conf) as migrator:
            migrator.up()
            assert migrator.up() == []

    def test_up_to_target(self, db_conf: DBConf, three_migrations, test_db_path):
        with Migrator(db_conf) as migrator:
            migrator.up(target=2)
            assert migrator.version() == 2

        assert tables(test_db_path) == {"a", "b"}

    def test_down_reverts_current(self, db_conf: DBConf, three_migrations, test_db_path):
        with Migrator(db_conf) as migrator:
            migrator.up()
            result = migrator.down()

            assert result.version == 3
            assert result.direction is Direction.DOWN
            assert migrator.version() == 2

        assert tables(test_db_path) == {"a", "b"}

    def test_down_at_zero(self, db_conf: DBConf, three_migrations):
        with Migrator(db_conf) as migrator:
            assert migrator.down() is None

    def test_down_without_file(self, db_conf: DBConf, three_migrations, migrations_dir):
        with Migrator(db_conf) as migrator:
            migrator.up()
            (migrations_dir / "003_c.sql").unlink()

            with pytest.raises(MigrationFileError, match="version 3"):
                migrator.down()

    def test_redo(self, db_conf: DBConf, three_migrations, test_db_path):
        with Migrator(db_conf) as migrator:
            migrator.up()
            results = migrator.redo()

            assert [(r.version, r.direction) for r in results] == [
                (3, Direction.DOWN),
                (3, Direction.UP),
            ]
            assert migrator.version() == 3

        assert tables(test_db_path) == {"a", "b", "c"}

    def test_failure_halts_run(self, db_conf: DBConf, write_script, test_db_path):
        write_script("001_a.sql", script("a"))
        write_script("002_bad.sql", "-- +goose Up\nCREATE TABLEX b;\n")
        write_script("003_c.sql", script("c"))

        with Migrator(db_conf) as migrator:
            with pytest.raises(StatementError):
                migrator.up()

            assert migrator.version() == 1

        assert tables(test_db_path) == {"a"}

    def test_status(self, db_conf: DBConf, three_migrations):
        with Migrator(db_conf) as migrator:
            migrator.up(target=2)
            statuses = migrator.status()

        assert [(s.version, s.applied) for s in statuses] == [
            (1, True),
            (2, True),
            (3, False),
        ]
        # sqlite3 stores no checksums
        assert all(s.checksum_ok is None for s in statuses)

    def test_status_after_down(self, db_conf: DBConf, three_migrations):
        with Migrator(db_conf) as migrator:
            migrator.up()
            migrator.down()
            statuses = migrator.status()

        assert statuses[-1].applied is False

    def test_validate_unsupported_on_sqlite(self, db_conf: DBConf, three_migrations):
        with Migrator(db_conf) as migrator:
            with pytest.raises(ChecksumUnsupportedError):
                migrator.validate()


class TestMigratorChecksums:
    """Checksum validation through Migrator, with checksums enabled."""

    def test_up_validates_applied_scripts(self, db_conf: DBConf, three_migrations):
        with Migrator(db_conf) as migrator:
            migrator.up(target=1)
            with patch.object(type(migrator.dialect), "has_checksum", True), patch(
                "sqlgoose.migrations.migrator.validate_checksum"
            ) as validate:
                migrator.up(target=1)

        validate.assert_called_once()
        assert validate.call_args.args[3] == 1

    def test_up_halts_on_drift(self, db_conf: DBConf, three_migrations):
        with Migrator(db_conf) as migrator:
            migrator.up(target=1)
            drift = ChecksumMismatchError(Path("001_a.sql"), 1, "old", "new")
            with patch.object(type(migrator.dialect), "has_checksum", True), patch(
                "sqlgoose.migrations.migrator.validate_checksum", side_effect=drift
            ):
                with pytest.raises(ChecksumMismatchError):
                    migrator.up(target=1)

            assert migrator.version() == 1

    def test_validation_disabled(self, db_conf: DBConf, three_migrations):
        db_conf.validate_checksums = False
        with Migrator(db_conf) as migrator:
            migrator.up(target=1)
            with patch.object(type(migrator.dialect), "has_checksum", True), patch(
                "sqlgoose.migrations.migrator.validate_checksum"
            ) as validate:
                migrator.up(target=1)

        validate.assert_not_called()
