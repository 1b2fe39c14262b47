"""Type definitions for sqlgoose."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


class Direction(Enum):
    """Migration direction."""

    UP = "up"
    DOWN = "down"

    @property
    def is_applied(self) -> bool:
        """Value recorded in the is_applied column for this direction."""
        return self is Direction.UP


@dataclass(frozen=True)
class VersionRow:
    """One row of goose_db_version history, newest first when queried."""

    version_id: int
    is_applied: bool


@dataclass
class MigrationResult:
    """Outcome of running one migration script."""

    version: int
    direction: Direction
    source: Path
    checksum: str
    statement_count: int
    warnings: list[str] = field(default_factory=list)


@dataclass
class MigrationStatus:
    """Applied/pending state of one migration file."""

    version: int
    name: str
    applied: bool
    checksum_ok: Optional[bool] = None
