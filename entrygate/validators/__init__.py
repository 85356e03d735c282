"""Entry validation checks."""

from .base import Check, EntryContext, VerdictBuilder
from .entry import EntryValidator, default_checks, summarize
from .naming import is_valid_entry_id

__all__ = [
    "Check",
    "EntryContext",
    "EntryValidator",
    "VerdictBuilder",
    "default_checks",
    "is_valid_entry_id",
    "summarize",
]
