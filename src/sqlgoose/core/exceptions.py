"""Custom exceptions for sqlgoose."""

from pathlib import Path


class GooseError(Exception):
    """Base exception for all sqlgoose errors."""

    pass


class ConfigError(GooseError):
    """Configuration is missing or invalid."""

    pass


class UnknownDialectError(ConfigError):
    """No dialect is registered under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No such dialect: {name!r}")


class DatabaseError(GooseError):
    """Database operation failed."""

    pass


class VersionTableMissingError(DatabaseError):
    """The goose_db_version table has not been created yet."""

    pass


class MigrationError(GooseError):
    """Migration operation failed."""

    pass


class MigrationFileError(MigrationError):
    """Migration file name or layout is invalid."""

    pass


class NoAnnotationsError(MigrationError):
    """Script has no Up/Down annotations, so nothing can be attributed."""

    def __init__(self, source: str | None = None):
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(
            f"No Up/Down annotations found{where}, so no statements were executed"
        )


class StatementError(MigrationError):
    """A migration statement failed and the transaction was rolled back."""

    def __init__(self, script: Path, version: int, statement: str, error: Exception):
        self.script = Path(script)
        self.version = version
        self.statement = statement
        self.error = error
        super().__init__(
            f"FAIL {self.script.name} (version {version}): {error}\n"
            f"Statement:\n{statement.strip()}"
        )


class FinalizeError(MigrationError):
    """Recording the version row or committing failed."""

    def __init__(self, script: Path, version: int, error: Exception):
        self.script = Path(script)
        self.version = version
        self.error = error
        super().__init__(
            f"Error finalizing migration {self.script.name} (version {version}): {error}"
        )


class ChecksumError(GooseError):
    """Checksum validation could not confirm the script content."""

    pass


class ChecksumMismatchError(ChecksumError):
    """Recorded checksum differs from the current script content."""

    def __init__(
        self, script: Path, version: int, expected: str | None, actual: str
    ):
        self.script = Path(script)
        self.version = version
        self.expected = expected
        self.actual = actual
        if expected is None:
            detail = "no checksum recorded"
        else:
            detail = f"recorded {expected}, found {actual}"
        super().__init__(
            f"Checksum mismatch for {self.script.name} (version {version}): {detail}"
        )


class ChecksumUnsupportedError(ChecksumError):
    """Dialect has no checksum column to validate against."""

    def __init__(self, dialect: str):
        self.dialect = dialect
        super().__init__(
            f"Checksum column is not present in goose_db_version for dialect {dialect!r}"
        )
