"""Tests for the consolidated review-assignment report."""

from __future__ import annotations

import pytest

from entrygate.routing import (
    REPORT_MARKER,
    ReviewerGroup,
    ReviewerRouter,
    ReviewerTable,
    aggregate_reviewers,
    render_report,
)


@pytest.fixture
def table() -> ReviewerTable:
    return ReviewerTable(
        {
            "automation": ReviewerGroup(
                reviewers=("auto-1", "shared"), description="Automation & Workflows", icon="🤖"
            ),
            "security": ReviewerGroup(
                reviewers=("sec-1", "shared"), description="Security & Compliance", icon="🔒"
            ),
        },
        fallback=("maintainer-1",),
    )


def _assignments(table: ReviewerTable):
    router = ReviewerRouter(table)
    return [
        router.route("zeta-entry", {"category": "security"}),
        router.route("broken-entry", None),
        router.route("beta-entry", {"category": "automation"}),
        router.route("alpha-entry", {"category": "automation"}),
        router.route("odd-entry", {"category": "cooking"}),
    ]


def test_report_groups_entries_by_category(table: ReviewerTable) -> None:
    report = render_report(_assignments(table), table)

    expected = "\n".join(
        [
            REPORT_MARKER,
            "## 👥 Entry Review Assignments",
            "",
            "The following Subject Matter Experts (SMEs) have been identified for review:",
            "",
            "### 🤖 Automation & Workflows",
            "",
            "**Reviewers:** @auto-1, @shared",
            "",
            "**Entries:**",
            "- `alpha-entry`",
            "- `beta-entry`",
            "",
            "### 🔒 Security & Compliance",
            "",
            "**Reviewers:** @sec-1, @shared",
            "",
            "**Entries:**",
            "- `zeta-entry`",
            "",
            "### 📦 unknown",
            "",
            "**Reviewers:** @maintainer-1",
            "",
            "**Entries:**",
            "- `broken-entry` (no readable category)",
            "- `odd-entry` (unrecognized category `cooking`)",
            "",
            "---",
        ]
    )
    assert report is not None
    assert report.startswith(expected + "\n")
    assert "### 📝 Review Checklist" in report
    assert "- [ ] Entry is categorized correctly" in report
    assert report.endswith("alignment with organizational standards.\n")


def test_report_is_byte_identical_across_runs_and_orderings(table: ReviewerTable) -> None:
    assignments = _assignments(table)

    first = render_report(assignments, table)
    second = render_report(list(reversed(assignments)), table)

    assert first == second
    assert first == render_report(assignments, table)


def test_report_is_none_without_entries(table: ReviewerTable) -> None:
    assert render_report([], table) is None


def test_aggregate_reviewers_keeps_first_appearance_order(table: ReviewerTable) -> None:
    reviewers = aggregate_reviewers(_assignments(table), table)

    assert reviewers == ["auto-1", "shared", "sec-1", "maintainer-1"]


def test_report_names_non_string_categories(table: ReviewerTable) -> None:
    assignment = ReviewerRouter(table).route("numeric-entry", {"category": 123})

    report = render_report([assignment], table)

    assert "- `numeric-entry` (unrecognized category `123`)" in report
