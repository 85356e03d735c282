"""Category to reviewer routing."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence, Tuple

from ..config import ReviewersConfig
from ..logging import get_logger
from ..models import UNKNOWN_CATEGORY, ReviewerAssignment
from ..schema.metadata import MetadataParseError, load_metadata

DEFAULT_ICON = "📦"


@dataclass(frozen=True)
class ReviewerGroup:
    """Subject-matter reviewers responsible for one category."""

    reviewers: Tuple[str, ...]
    description: str
    team: Optional[str] = None
    icon: str = DEFAULT_ICON


_DEFAULT_GROUPS: Mapping[str, ReviewerGroup] = {
    "automation": ReviewerGroup(
        reviewers=("automation-sme1", "automation-sme2"),
        description="Automation & Workflows",
        team="automation-team",
        icon="🤖",
    ),
    "observability": ReviewerGroup(
        reviewers=("observability-sme1", "observability-sme2"),
        description="Observability & Monitoring",
        team="observability-team",
        icon="👁️",
    ),
    "security": ReviewerGroup(
        reviewers=("security-sme1", "security-sme2"),
        description="Security & Compliance",
        team="security-team",
        icon="🔒",
    ),
    "monitoring": ReviewerGroup(
        reviewers=("monitoring-sme1", "monitoring-sme2"),
        description="System Monitoring",
        team="monitoring-team",
        icon="📊",
    ),
    "integration": ReviewerGroup(
        reviewers=("integration-sme1", "integration-sme2"),
        description="System Integration",
        team="integration-team",
        icon="🔗",
    ),
    "data-protection": ReviewerGroup(
        reviewers=("data-protection-sme1", "data-protection-sme2"),
        description="Data Protection & Recovery",
        team="data-protection-team",
        icon="💾",
    ),
}

_DEFAULT_FALLBACK: Tuple[str, ...] = ("pattern-maintainer1", "pattern-maintainer2")


class ReviewerTable:
    """Read-only category -> reviewer mapping with a fallback reviewer list."""

    def __init__(self, groups: Mapping[str, ReviewerGroup], fallback: Sequence[str]) -> None:
        if not fallback:
            raise ValueError("ReviewerTable requires at least one fallback reviewer")
        self._groups = MappingProxyType(dict(groups))
        self.fallback: Tuple[str, ...] = tuple(fallback)

    @classmethod
    def default(cls) -> "ReviewerTable":
        return cls(_DEFAULT_GROUPS, _DEFAULT_FALLBACK)

    @classmethod
    def from_config(cls, config: ReviewersConfig | None) -> "ReviewerTable":
        """Overlay configured groups and fallback on top of the stock table."""
        if config is None:
            return cls.default()
        groups = dict(_DEFAULT_GROUPS)
        for category, declared in config.categories.items():
            stock = groups.get(category)
            groups[category] = ReviewerGroup(
                reviewers=tuple(declared.reviewers),
                description=declared.description or (stock.description if stock else category),
                team=declared.team or (stock.team if stock else None),
                icon=declared.icon or (stock.icon if stock else DEFAULT_ICON),
            )
        return cls(groups, config.fallback or _DEFAULT_FALLBACK)

    @property
    def categories(self) -> Tuple[str, ...]:
        return tuple(self._groups)

    def get(self, category: str) -> Optional[ReviewerGroup]:
        return self._groups.get(category)

    def icon_for(self, category: str) -> str:
        group = self._groups.get(category)
        return group.icon if group else DEFAULT_ICON

    def label_for(self, category: str) -> str:
        group = self._groups.get(category)
        return group.description if group else category


class ReviewerRouter:
    """Resolves reviewer assignments from entry metadata."""

    def __init__(self, table: ReviewerTable | None = None, *, metadata_file: str = "pattern.yaml") -> None:
        self.table = table or ReviewerTable.default()
        self.metadata_file = metadata_file
        self.logger = get_logger("router")

    def route(self, entry: str, document: Optional[Mapping[str, Any]]) -> ReviewerAssignment:
        """Return the assignment for ``entry``; unusable categories route to the fallback."""
        declared = document.get("category") if document is not None else None
        if declared is None or isinstance(declared, str):
            declared_category = declared or None
        else:
            declared_category = repr(declared)

        group = self.table.get(declared) if isinstance(declared, str) and declared else None
        if group is not None:
            category = declared_category
            reviewers = group.reviewers
            label = group.description
        else:
            if declared_category:
                self.logger.warning(
                    "No reviewer mapping found for category %r (%s)", declared_category, entry
                )
            category = UNKNOWN_CATEGORY
            reviewers = self.table.fallback
            label = UNKNOWN_CATEGORY

        self.logger.info(
            "Entry: %s | Category: %s | Reviewers: %s", entry, category, ", ".join(reviewers)
        )
        return ReviewerAssignment(
            entry=entry,
            category=category,
            reviewers=tuple(reviewers),
            label=label,
            comment=_assignment_comment(entry, label, reviewers, declared_category, category),
            declared_category=declared_category,
        )

    def route_entry(self, entry_dir: str | Path, entry: str | None = None) -> ReviewerAssignment:
        """Load the entry's metadata file and route it."""
        directory = Path(entry_dir)
        entry_name = entry or directory.name or str(directory)
        try:
            document = load_metadata(directory / self.metadata_file)
        except MetadataParseError as exc:
            self.logger.error("Unable to read category for %s: %s", entry_name, exc)
            document = None
        return self.route(entry_name, document)


def _assignment_comment(
    entry: str,
    label: str,
    reviewers: Sequence[str],
    declared_category: Optional[str],
    category: str,
) -> str:
    mentions = ", ".join(f"@{reviewer}" for reviewer in reviewers)
    line = f"`{entry}` ({label}): {mentions}"
    if category == UNKNOWN_CATEGORY:
        if declared_category:
            line += f"\nCategory `{declared_category}` is not recognized; routed to fallback reviewers."
        else:
            line += "\nNo category could be read; routed to fallback reviewers."
    return line
