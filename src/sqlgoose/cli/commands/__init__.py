"""Command implementations for sqlgoose CLI."""

from .migrate import handle_down, handle_redo, handle_up
from .scaffold import handle_create
from .status import handle_dbversion, handle_status, handle_validate

__all__ = [
    "handle_up",
    "handle_down",
    "handle_redo",
    "handle_status",
    "handle_dbversion",
    "handle_validate",
    "handle_create",
]
