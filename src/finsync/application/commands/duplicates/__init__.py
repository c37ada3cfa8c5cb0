"""Duplicate resolution commands."""

from finsync.application.commands.duplicates.auto_resolve_duplicates_command import (
    AutoResolveDuplicatesCommand,
    AutoResolveResult,
)
from finsync.application.commands.duplicates.resolve_duplicate_command import (
    DuplicateResolutionResult,
    ResolveDuplicateCommand,
    parse_action,
)

__all__ = [
    "AutoResolveDuplicatesCommand",
    "AutoResolveResult",
    "DuplicateResolutionResult",
    "ResolveDuplicateCommand",
    "parse_action",
]
