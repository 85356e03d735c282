"""Full check sequence for one entry directory."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional

from ..config import DocumentationConfig, LayoutConfig
from ..logging import get_logger
from ..models import ValidationVerdict
from ..schema import SchemaRegistry
from .base import Check, EntryContext, VerdictBuilder
from .documentation import DocumentationCheck
from .files import RequiredFilesCheck
from .metadata import CrossReferenceCheck, SchemaCheck
from .naming import NamingCheck


def default_checks() -> List[Check]:
    """Return the checks in the order they must run."""
    return [
        NamingCheck(),
        RequiredFilesCheck(),
        SchemaCheck(),
        CrossReferenceCheck(),
        DocumentationCheck(),
    ]


class EntryValidator:
    """Runs every check against an entry and returns a fresh verdict."""

    def __init__(
        self,
        registry: SchemaRegistry,
        layout: LayoutConfig | None = None,
        documentation: DocumentationConfig | None = None,
        checks: Optional[Iterable[Check]] = None,
    ) -> None:
        self.registry = registry
        self.layout = layout or LayoutConfig()
        self.documentation = documentation or DocumentationConfig()
        self.checks: List[Check] = list(checks) if checks is not None else default_checks()
        self.logger = get_logger("validator")

    def validate(self, entry_dir: str | Path, entry: str | None = None) -> ValidationVerdict:
        directory = Path(entry_dir)
        entry_name = entry or directory.name or str(directory)
        builder = VerdictBuilder(entry_name, self.logger)
        context = EntryContext(
            entry=entry_name,
            directory=directory,
            registry=self.registry,
            layout=self.layout,
            documentation=self.documentation,
        )

        self.logger.info("Validating entry at %s", directory)
        for step, check in enumerate(self.checks, start=1):
            if check.requires_document and context.document is None:
                self.logger.info("Step %d: %s skipped (metadata unavailable)", step, check.title)
                continue
            self.logger.info("Step %d: %s", step, check.title)
            check.run(context, builder)

        verdict = builder.build()
        self.logger.info(
            "Entry %s: %s (%d error(s), %d warning(s))",
            entry_name,
            verdict.status.value.upper(),
            len(verdict.errors),
            len(verdict.warnings),
        )
        return verdict


def summarize(verdict: ValidationVerdict) -> str:
    """Render the numbered warning/error summary printed after a validation run."""
    if verdict.passed and not verdict.warnings:
        return f"All validations passed for {verdict.entry}. Entry is ready for review."

    lines: List[str] = []
    if verdict.warnings:
        lines.append(f"Warnings: {len(verdict.warnings)}")
        lines.extend(f"  {index}. {issue}" for index, issue in enumerate(verdict.warnings, 1))
    if verdict.errors:
        lines.append(f"Errors: {len(verdict.errors)}")
        lines.extend(f"  {index}. {issue}" for index, issue in enumerate(verdict.errors, 1))
        lines.append(f"Validation failed for {verdict.entry}. Please fix the errors above.")
    else:
        lines.append(f"Validation passed with warnings for {verdict.entry}.")
    return "\n".join(lines)
