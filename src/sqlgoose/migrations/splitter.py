"""Split annotated SQL migration scripts into statements.

A script is divided into sections by directive comments:

    -- +goose Up
    CREATE TABLE post (id int NOT NULL, title text);

    -- +goose Down
    DROP TABLE post;

Statements end at a line whose last token (before any ``--`` comment)
ends in a semicolon. Bodies that contain semicolons of their own, such
as PL/pgSQL functions, are wrapped in ``StatementBegin``/``StatementEnd``
so only the end directive terminates them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from loguru import logger

from ..core.exceptions import NoAnnotationsError
from ..core.types import Direction

DIRECTIVE_PREFIX = "-- +goose "


class Section(Enum):
    """Script section the scanner is currently in."""

    NONE = "none"
    UP = "up"
    DOWN = "down"


@dataclass
class SplitResult:
    """Statements for one direction plus any diagnostics."""

    statements: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def ends_with_semicolon(line: str) -> bool:
    """Check whether a line ends a statement.

    Tokens from the first one starting with ``--`` onwards are a comment,
    so a semicolon inside a trailing comment does not count.
    """
    prev = ""
    for word in line.split():
        if word.startswith("--"):
            break
        prev = word
    return prev.endswith(";")


class _Scanner:
    """Line-driven state machine for one direction of a script."""

    def __init__(self, direction: Direction):
        self.direction = direction
        self.section = Section.NONE
        self.in_block = False
        self.buffer: list[str] = []
        self.up_sections = 0
        self.down_sections = 0
        self.result = SplitResult()

    @property
    def active(self) -> bool:
        return self.section.value == self.direction.value

    def feed(self, line: str) -> None:
        line = line.rstrip("\r\n")
        if line.startswith(DIRECTIVE_PREFIX):
            self._directive(line[len(DIRECTIVE_PREFIX):].strip())
            return

        if not self.active:
            return

        self.buffer.append(line + "\n")
        if not self.in_block and ends_with_semicolon(line):
            self._flush()

    def _directive(self, command: str) -> None:
        if command == "Up":
            self.section = Section.UP
            self.up_sections += 1
        elif command == "Down":
            self.section = Section.DOWN
            self.down_sections += 1
        elif command == "StatementBegin":
            if self.active:
                self.in_block = True
        elif command == "StatementEnd":
            if self.active and self.in_block:
                self.in_block = False
                self._flush()
        else:
            logger.debug(f"Ignoring unknown directive: {command!r}")

    def _flush(self) -> None:
        statement = "".join(self.buffer)
        self.buffer.clear()
        # An empty StatementBegin/StatementEnd block yields nothing to run
        if statement.strip():
            self.result.statements.append(statement)

    def finish(self, source: str | None) -> SplitResult:
        if self.up_sections == 0 and self.down_sections == 0:
            raise NoAnnotationsError(source)

        if self.in_block:
            self._warn(
                "saw '-- +goose StatementBegin' with no matching "
                "'-- +goose StatementEnd'"
            )

        remaining = "".join(self.buffer).strip()
        if remaining:
            self._warn(f"Unexpected unfinished SQL query: {remaining}. Missing a semicolon?")

        return self.result

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.result.warnings.append(message)


def split_sql_statements(
    lines: Iterable[str], direction: Direction, source: str | None = None
) -> SplitResult:
    """Split a migration script into statements for one direction.

    Args:
        lines: Script lines, e.g. an open text file.
        direction: Section to extract.
        source: Script name used in error messages.

    Returns:
        SplitResult with statements in source order and any warnings
        about an unterminated block or a trailing unfinished statement.

    Raises:
        NoAnnotationsError: If the script has no Up or Down directive.
    """
    scanner = _Scanner(direction)
    for line in lines:
        scanner.feed(line)
    return scanner.finish(source)
