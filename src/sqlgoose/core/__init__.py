"""Core types, configuration and errors for sqlgoose."""

from .config import DBConf
from .exceptions import (
    ChecksumError,
    ChecksumMismatchError,
    ChecksumUnsupportedError,
    ConfigError,
    DatabaseError,
    FinalizeError,
    GooseError,
    MigrationError,
    MigrationFileError,
    NoAnnotationsError,
    StatementError,
    UnknownDialectError,
    VersionTableMissingError,
)
from .types import Direction, MigrationResult, MigrationStatus, VersionRow

__all__ = [
    "DBConf",
    "GooseError",
    "ConfigError",
    "UnknownDialectError",
    "DatabaseError",
    "VersionTableMissingError",
    "MigrationError",
    "MigrationFileError",
    "NoAnnotationsError",
    "StatementError",
    "FinalizeError",
    "ChecksumError",
    "ChecksumMismatchError",
    "ChecksumUnsupportedError",
    "Direction",
    "VersionRow",
    "MigrationResult",
    "MigrationStatus",
]
