"""Consolidated review-assignment report."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..models import UNKNOWN_CATEGORY, ReviewerAssignment
from .reviewers import ReviewerTable

REPORT_MARKER = "<!-- entrygate:reviewer-assignments -->"

REVIEW_CHECKLIST: Sequence[str] = (
    "Entry follows repository structure and naming conventions",
    "Metadata file contains all required fields and valid data",
    "Documentation provides clear implementation guidance",
    "Architecture diagram is included and clear",
    "Code examples are correct and follow best practices",
    "Security considerations are documented",
    "Entry is categorized correctly",
)

_Group = Tuple[str, List[ReviewerAssignment]]


def group_assignments(
    assignments: Iterable[ReviewerAssignment], table: ReviewerTable
) -> List[_Group]:
    """Group assignments by resolved category in a stable order.

    Table categories come first in table order, then any other category by
    name, then ``unknown``. Entries inside a group are sorted; a repeated entry
    keeps its last assignment.
    """
    by_entry: Dict[str, ReviewerAssignment] = {}
    for assignment in assignments:
        by_entry[assignment.entry] = assignment

    grouped: Dict[str, List[ReviewerAssignment]] = {}
    for entry in sorted(by_entry):
        assignment = by_entry[entry]
        grouped.setdefault(assignment.category, []).append(assignment)

    table_order = {category: index for index, category in enumerate(table.categories)}

    def sort_key(category: str) -> Tuple[int, int, str]:
        if category == UNKNOWN_CATEGORY:
            return (2, 0, category)
        if category in table_order:
            return (0, table_order[category], category)
        return (1, 0, category)

    return [(category, grouped[category]) for category in sorted(grouped, key=sort_key)]


def aggregate_reviewers(
    assignments: Iterable[ReviewerAssignment], table: ReviewerTable
) -> List[str]:
    """Union of reviewers across groups, in order of first appearance."""
    seen: List[str] = []
    for _, members in group_assignments(assignments, table):
        for reviewer in _group_reviewers(members):
            if reviewer not in seen:
                seen.append(reviewer)
    return seen


def render_report(
    assignments: Iterable[ReviewerAssignment], table: ReviewerTable
) -> Optional[str]:
    """Render the review-assignment comment, or ``None`` when nothing was routed."""
    groups = group_assignments(assignments, table)
    if not groups:
        return None

    lines: List[str] = [
        REPORT_MARKER,
        "## 👥 Entry Review Assignments",
        "",
        "The following Subject Matter Experts (SMEs) have been identified for review:",
        "",
    ]

    for category, members in groups:
        if category == UNKNOWN_CATEGORY:
            heading = f"{table.icon_for(category)} {UNKNOWN_CATEGORY}"
        else:
            heading = f"{table.icon_for(category)} {table.label_for(category)}"
        mentions = ", ".join(f"@{reviewer}" for reviewer in _group_reviewers(members))
        lines.append(f"### {heading}")
        lines.append("")
        lines.append(f"**Reviewers:** {mentions}")
        lines.append("")
        lines.append("**Entries:**")
        for assignment in members:
            lines.append(_entry_line(assignment))
        lines.append("")

    lines.append("---")
    lines.append("")
    lines.append("### 📝 Review Checklist")
    lines.append("")
    lines.append("Please ensure the following before approving:")
    lines.append("")
    lines.extend(f"- [ ] {item}" for item in REVIEW_CHECKLIST)
    lines.append("")
    lines.append(
        "**Note:** Automated validation has already checked basic requirements. "
        "Please focus on technical accuracy, completeness, and alignment with "
        "organizational standards."
    )
    return "\n".join(lines) + "\n"


def _group_reviewers(members: Sequence[ReviewerAssignment]) -> List[str]:
    reviewers: List[str] = []
    for assignment in members:
        for reviewer in assignment.reviewers:
            if reviewer not in reviewers:
                reviewers.append(reviewer)
    return reviewers


def _entry_line(assignment: ReviewerAssignment) -> str:
    line = f"- `{assignment.entry}`"
    if assignment.category == UNKNOWN_CATEGORY:
        if assignment.declared_category:
            line += f" (unrecognized category `{assignment.declared_category}`)"
        else:
            line += " (no readable category)"
    return line
