"""Core data models shared across entrygate components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

UNKNOWN_CATEGORY = "unknown"


class Status(str, Enum):
    """Terminal state of a verdict or a pipeline run."""

    PASS = "pass"
    FAIL = "fail"


@dataclass(frozen=True)
class Issue:
    """A single field-addressed validation problem."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass(frozen=True)
class ValidationVerdict:
    """Errors and warnings accumulated for one entry."""

    entry: str
    errors: Tuple[Issue, ...] = ()
    warnings: Tuple[Issue, ...] = ()

    @property
    def status(self) -> Status:
        return Status.FAIL if self.errors else Status.PASS

    @property
    def passed(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entry": self.entry,
            "status": self.status.value,
            "errors": [{"field": i.field, "message": i.message} for i in self.errors],
            "warnings": [{"field": i.field, "message": i.message} for i in self.warnings],
        }


@dataclass(frozen=True)
class ReviewerAssignment:
    """Reviewers resolved for one entry from its metadata category."""

    entry: str
    category: str
    reviewers: Tuple[str, ...]
    label: str
    comment: str
    declared_category: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.category == UNKNOWN_CATEGORY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entry": self.entry,
            "category": self.category,
            "declared_category": self.declared_category,
            "label": self.label,
            "reviewers": list(self.reviewers),
        }


@dataclass(frozen=True)
class PipelineResult:
    """Aggregate outcome of one pipeline run."""

    verdicts: Mapping[str, ValidationVerdict] = field(default_factory=dict)
    assignments: Mapping[str, ReviewerAssignment] = field(default_factory=dict)
    reviewers: Tuple[str, ...] = ()
    report: Optional[str] = None

    @property
    def status(self) -> Status:
        if any(not verdict.passed for verdict in self.verdicts.values()):
            return Status.FAIL
        return Status.PASS

    @property
    def entries(self) -> Tuple[str, ...]:
        return tuple(self.verdicts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "entries": list(self.verdicts),
            "verdicts": {name: verdict.to_dict() for name, verdict in self.verdicts.items()},
            "assignments": {
                name: assignment.to_dict() for name, assignment in self.assignments.items()
            },
            "reviewers": list(self.reviewers),
            "report": self.report,
        }
