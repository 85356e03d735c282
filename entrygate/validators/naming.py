"""Entry directory naming convention."""

from __future__ import annotations

import re

from ..schema.metadata import KEBAB_CASE
from .base import EntryContext, VerdictBuilder

_KEBAB_CASE = re.compile(KEBAB_CASE)


def is_valid_entry_id(name: str) -> bool:
    """Return True for lowercase alphanumerics separated by single hyphens."""
    return bool(_KEBAB_CASE.fullmatch(name))


class NamingCheck:
    """Entry ids must be kebab-case."""

    name = "entry_id"
    title = "Validating entry id"
    requires_document = False

    def run(self, context: EntryContext, builder: VerdictBuilder) -> None:
        entry_id = context.directory.name
        if not is_valid_entry_id(entry_id):
            builder.error(
                self.name,
                f'Entry id "{entry_id}" does not follow the kebab-case naming convention. '
                'Use lowercase letters, numbers, and single hyphens only (e.g. "my-entry-name").',
            )
            return
        builder.success(f'Entry id "{entry_id}" follows naming conventions')
