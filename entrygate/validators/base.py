"""Core validation data structures shared by entry checks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from ..config import DocumentationConfig, LayoutConfig
from ..models import Issue, ValidationVerdict
from ..schema import SchemaRegistry


@dataclass
class EntryContext:
    """Per-entry state handed from one check to the next."""

    entry: str
    directory: Path
    registry: SchemaRegistry
    layout: LayoutConfig
    documentation: DocumentationConfig
    document: Optional[Dict[str, Any]] = None
    schema_valid: bool = False

    @property
    def metadata_path(self) -> Path:
        return self.directory / self.layout.metadata_file

    @property
    def documentation_path(self) -> Path:
        return self.directory / self.layout.documentation_file


class VerdictBuilder:
    """Accumulates issues for one entry and logs them as they are found."""

    def __init__(self, entry: str, logger: logging.Logger) -> None:
        self.entry = entry
        self._logger = logger
        self._errors: List[Issue] = []
        self._warnings: List[Issue] = []

    def error(self, field: str, message: str) -> None:
        issue = Issue(field=field, message=message)
        self._errors.append(issue)
        self._logger.error("%s", issue)

    def warning(self, field: str, message: str) -> None:
        issue = Issue(field=field, message=message)
        self._warnings.append(issue)
        self._logger.warning("%s", issue)

    def success(self, message: str) -> None:
        self._logger.info("OK %s", message)

    @property
    def error_count(self) -> int:
        return len(self._errors)

    def build(self) -> ValidationVerdict:
        return ValidationVerdict(
            entry=self.entry,
            errors=tuple(self._errors),
            warnings=tuple(self._warnings),
        )


class Check(Protocol):
    """Protocol implemented by the ordered entry checks."""

    name: str
    title: str
    requires_document: bool

    def run(self, context: EntryContext, builder: VerdictBuilder) -> None:
        """Inspect the entry and record findings on the builder."""
