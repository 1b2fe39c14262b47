"""Tests for URL-based database connections."""

from pathlib import Path

import pytest

from sqlgoose.core.exceptions import ConfigError, UnknownDialectError
from sqlgoose.store.database import Database
from sqlgoose.store.dialects import PostgresDialect, Sqlite3Dialect


class TestDatabase:
    """Tests for Database."""

    def test_infers_dialect_from_url(self, test_db_path: Path):
        db = Database(f"sqlite:///{test_db_path}")
        assert isinstance(db.dialect, Sqlite3Dialect)

    def test_infers_postgres_without_connecting(self):
        db = Database("postgresql+psycopg://user:pw@localhost/app")
        assert isinstance(db.dialect, PostgresDialect)

    def test_explicit_dialect_overrides_url(self, test_db_path: Path):
        db = Database(f"sqlite:///{test_db_path}", dialect="postgres")
        assert isinstance(db.dialect, PostgresDialect)

    def test_unknown_explicit_dialect(self, test_db_path: Path):
        with pytest.raises(UnknownDialectError):
            Database(f"sqlite:///{test_db_path}", dialect="oracle")

    def test_unknown_backend(self):
        with pytest.raises(UnknownDialectError):
            Database("mssql+pyodbc://localhost/app")

    def test_invalid_url(self):
        with pytest.raises(ConfigError):
            Database("not a url")

    def test_empty_url(self):
        with pytest.raises(ConfigError):
            Database("")

    def test_connection_yields_dbapi_connection(self, test_db_path: Path):
        db = Database(f"sqlite:///{test_db_path}")
        with db.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT 1")
            assert cursor.fetchone() == (1,)
            cursor.close()
        db.close()

        assert test_db_path.exists()

    def test_close_without_connect(self, test_db_path: Path):
        db = Database(f"sqlite:///{test_db_path}")
        db.close()  # Should not raise
