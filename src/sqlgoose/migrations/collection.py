"""Discover migration scripts on disk.

Migration files are named ``<version>_<description>.sql`` where the
version is an integer, typically a timestamp such as 20240131120000.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from loguru import logger

from ..core.exceptions import MigrationFileError

MIGRATION_TEMPLATE = """\
-- +goose Up
-- SQL in section 'Up' is executed when this migration is applied


-- +goose Down
-- SQL section 'Down' is executed when this migration is rolled back

"""


@dataclass(frozen=True, order=True)
class Migration:
    """A migration script and its version."""

    version: int
    source: Path

    @property
    def name(self) -> str:
        return self.source.name

    def __repr__(self) -> str:
        return f"Migration({self.version}, {self.name!r})"


def num_from_filename(name: str) -> int:
    """Parse the version number from a migration file name.

    Raises:
        MigrationFileError: If the name has no numeric prefix.
    """
    prefix = Path(name).name.split("_", 1)[0]
    if not prefix.isdigit():
        raise MigrationFileError(f"Migration file name must start with a version number: {name}")
    return int(prefix)


def collect_migrations(
    dirpath: Path, current: int = 0, target: int | None = None
) -> list[Migration]:
    """Collect migrations with versions in (current, target].

    Args:
        dirpath: Directory of .sql migration scripts.
        current: Exclusive lower bound.
        target: Inclusive upper bound; no bound when None.

    Returns:
        Migrations sorted by version.

    Raises:
        MigrationFileError: If the directory is missing, a file name is
            invalid, or two files share a version.
    """
    dirpath = Path(dirpath)
    if not dirpath.is_dir():
        raise MigrationFileError(f"Migrations directory not found: {dirpath}")

    seen: dict[int, Path] = {}
    for path in sorted(dirpath.glob("*.sql")):
        version = num_from_filename(path.name)
        if version in seen:
            raise MigrationFileError(
                f"Duplicate migration version {version}: {seen[version].name}, {path.name}"
            )
        seen[version] = path

    migrations = [
        Migration(version, path)
        for version, path in seen.items()
        if version > current and (target is None or version <= target)
    ]
    migrations.sort()
    logger.debug(f"Collected {len(migrations)} migration(s) from {dirpath}")
    return migrations


def get_most_recent_version(dirpath: Path) -> int:
    """Highest migration version on disk, or 0 if there are none."""
    migrations = collect_migrations(dirpath)
    return migrations[-1].version if migrations else 0


def get_previous_version(migrations: list[Migration], version: int) -> int:
    """Version of the migration preceding ``version``, or 0."""
    previous = [m.version for m in migrations if m.version < version]
    return max(previous, default=0)


def create_migration(name: str, dirpath: Path, now: datetime | None = None) -> Path:
    """Write an empty migration script.

    Args:
        name: Description used in the file name.
        dirpath: Directory to create the file in (created if missing).
        now: Timestamp for the version number; current time when None.

    Returns:
        Path of the new file.

    Raises:
        MigrationFileError: If the file already exists.
    """
    now = now or datetime.now()
    dirpath = Path(dirpath)
    dirpath.mkdir(parents=True, exist_ok=True)

    slug = "_".join(name.lower().split())
    path = dirpath / f"{now.strftime('%Y%m%d%H%M%S')}_{slug}.sql"
    if path.exists():
        raise MigrationFileError(f"Migration already exists: {path}")

    path.write_text(MIGRATION_TEMPLATE)
    logger.info(f"Created migration {path}")
    return path
