"""Pytest configuration and fixtures."""

import sqlite3
from pathlib import Path

import pytest

from sqlgoose.core.config import DBConf
from sqlgoose.store.dialects import Sqlite3Dialect

BASIC_SCRIPT = """\
-- +goose Up
CREATE TABLE t (id INT);

-- +goose Down
DROP TABLE t;
"""


@pytest.fixture
def test_db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path for tests."""
    return tmp_path / "test.db"


@pytest.fixture
def conn(test_db_path: Path):
    """Provide a sqlite3 connection to a temporary database."""
    connection = sqlite3.connect(str(test_db_path))
    yield connection
    connection.close()


@pytest.fixture
def dialect() -> Sqlite3Dialect:
    """Provide the sqlite3 dialect."""
    return Sqlite3Dialect()


@pytest.fixture
def migrations_dir(tmp_path: Path) -> Path:
    """Provide an empty migrations directory."""
    path = tmp_path / "migrations"
    path.mkdir()
    return path


@pytest.fixture
def write_script(migrations_dir: Path):
    """Write a migration script into the migrations directory."""

    def _write(name: str, content: str) -> Path:
        path = migrations_dir / name
        path.write_text(content)
        return path

    return _write


@pytest.fixture
def basic_script(write_script) -> Path:
    """A one-table migration at version 1."""
    return write_script("001_create_t.sql", BASIC_SCRIPT)


@pytest.fixture
def db_conf(test_db_path: Path, migrations_dir: Path) -> DBConf:
    """Provide configuration for a temporary sqlite database."""
    return DBConf(url=f"sqlite:///{test_db_path}", migrations_dir=migrations_dir)


def table_exists(connection: sqlite3.Connection, name: str) -> bool:
    """Check whether a table exists in a sqlite database."""
    row = connection.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (name,)
    ).fetchone()
    return row is not None
