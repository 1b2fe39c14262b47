"""Database connection manager for sqlgoose."""

from contextlib import contextmanager
from typing import Any, Iterator

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from ..core.exceptions import ConfigError, DatabaseError
from .dialects import SqlDialect, dialect_by_name, dialect_for_backend


class Database:
    """Opens DB-API connections for a database URL.

    The migration runner works on raw DB-API connections so that
    dialect SQL runs with the driver's own placeholder style; SQLAlchemy
    is used for URL parsing, driver loading and pooling.
    """

    def __init__(self, url: str, dialect: str | None = None):
        """Initialize database with a URL.

        Args:
            url: SQLAlchemy database URL (e.g. "sqlite:///app.db").
            dialect: Dialect name; inferred from the URL backend when None.

        Raises:
            ConfigError: If the URL is invalid or no dialect matches.
        """
        try:
            self.url = make_url(url)
        except ArgumentError as e:
            raise ConfigError(f"Invalid database url {url!r}: {e}") from e

        if dialect:
            self.dialect: SqlDialect = dialect_by_name(dialect)
        else:
            self.dialect = dialect_for_backend(self.url.get_backend_name())
        self._engine: Engine | None = None

    @property
    def engine(self) -> Engine:
        """Lazily created SQLAlchemy engine."""
        if self._engine is None:
            try:
                self._engine = create_engine(self.url)
            except (SQLAlchemyError, ImportError) as e:
                raise DatabaseError(f"Failed to create engine: {e}") from e
        return self._engine

    def connect(self) -> Any:
        """Open a raw DB-API connection.

        Raises:
            DatabaseError: If the connection cannot be established.
        """
        try:
            conn = self.engine.raw_connection()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to connect to database: {e}") from e
        logger.debug(f"Connected to {self.url.render_as_string(hide_password=True)}")
        return conn

    @contextmanager
    def connection(self) -> Iterator[Any]:
        """Context manager yielding a DB-API connection that is closed on exit."""
        conn = self.connect()
        try:
            yield conn
        finally:
            conn.close()

    def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
