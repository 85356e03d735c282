"""Tests for the metadata record schema."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

import pytest

from entrygate.schema.metadata import MetadataParseError, format_location, load_metadata
from tests._fixtures.entry_builder import minimal_metadata

REQUIRED_FIELDS = ("title", "description", "author", "category", "tags", "technologies", "use_case")


def test_minimal_record_is_valid(registry) -> None:
    assert registry.validate(minimal_metadata()) == []


def test_full_record_is_valid(registry) -> None:
    record = minimal_metadata(
        architecture_diagram="diagrams/architecture.png",
        prerequisites=["An AWS account"],
        implementation={
            "repo_url": "https://github.com/example/repo",
            "language": "python",
            "framework": "serverless",
            "code_snippets": [{"file": "implementation/handler.py", "language": "python"}],
        },
        security=["Encrypt queues at rest"],
        limitations=["Single region"],
        related_entries=["lambda-sqs-processing"],
        created_date=date(2024, 1, 15),
        last_updated="2024-02-01",
        version="1.2.0-beta.1",
        status="review",
    )

    assert registry.validate(record) == []


@pytest.mark.parametrize("field", REQUIRED_FIELDS)
def test_each_missing_required_field_is_reported_by_path(registry, field: str) -> None:
    record = minimal_metadata()
    record.pop(field)

    issues = registry.validate(record)

    assert [issue.field for issue in issues] == [field]
    assert issues[0].message == "required field is missing"


def test_removing_several_fields_reports_all_of_them(registry) -> None:
    record = minimal_metadata()
    for field in REQUIRED_FIELDS[:4]:
        record.pop(field)

    issues = registry.validate(record)

    assert len(issues) >= 4
    assert {issue.field for issue in issues} >= set(REQUIRED_FIELDS[:4])


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"author": {"name": "Dana", "email": "not-an-email"}}, "author.email"),
        ({"tags": []}, "tags"),
        ({"tags": ["Not_Kebab"]}, "tags[0]"),
        ({"tags": ["queue", "queue"]}, "tags"),
        ({"technologies": [{"name": "Lambda"}]}, "technologies[0].type"),
        ({"title": "   "}, "title"),
        ({"status": "published"}, "status"),
        ({"version": "1.0"}, "version"),
        ({"created_date": "15/01/2024"}, "created_date"),
        ({"created_date": 1699920000}, "created_date"),
        ({"last_updated": datetime(2024, 1, 15, 9, 30)}, "last_updated"),
        ({"architecture_diagram": "diagrams/a\tb.png"}, "architecture_diagram"),
        ({"implementation": {"code_snippets": [{"file": "src/a\x00.js"}]}}, "implementation.code_snippets[0].file"),
        ({"implementation": {"repo_url": "ftp://example.com"}}, "implementation.repo_url"),
        ({"implementation": {"code_snippets": [{"description": "x"}]}}, "implementation.code_snippets[0].file"),
        ({"unexpected": True}, "unexpected"),
    ],
)
def test_invalid_values_are_addressed_by_field_path(registry, overrides, field: str) -> None:
    issues = registry.validate(minimal_metadata(**overrides))

    assert field in [issue.field for issue in issues]


def test_quoted_iso_dates_are_accepted(registry) -> None:
    record = minimal_metadata(created_date="2024-01-15", last_updated=date(2024, 2, 1))

    assert registry.validate(record) == []


def test_timestamp_dates_name_the_expected_format(registry) -> None:
    issues = registry.validate(minimal_metadata(created_date=1699920000))

    assert [str(issue) for issue in issues] == ["created_date: must be an ISO date (YYYY-MM-DD)"]


def test_unknown_category_lists_allowed_values(registry) -> None:
    issues = registry.validate(minimal_metadata(category="cooking"))

    assert [issue.field for issue in issues] == ["category"]
    assert issues[0].message.startswith("must be one of: automation, observability")


def test_duplicate_tags_are_named(registry) -> None:
    issues = registry.validate(minimal_metadata(tags=["queue", "batch", "queue"]))

    assert issues[0].message == "duplicate tags: queue"


def test_format_location_renders_indices() -> None:
    assert format_location(("implementation", "code_snippets", 0, "file")) == (
        "implementation.code_snippets[0].file"
    )
    assert format_location(()) == "metadata"


def test_load_metadata_rejects_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "pattern.yaml"
    path.write_text("title: [unclosed\n", encoding="utf-8")

    with pytest.raises(MetadataParseError, match="not valid YAML"):
        load_metadata(path)


def test_load_metadata_rejects_scalars(tmp_path: Path) -> None:
    path = tmp_path / "pattern.yaml"
    path.write_text("just a string\n", encoding="utf-8")

    with pytest.raises(MetadataParseError, match="mapping at the root"):
        load_metadata(path)


def test_load_metadata_returns_mapping(tmp_path: Path) -> None:
    path = tmp_path / "pattern.yaml"
    path.write_text("title: Example\ncategory: security\n", encoding="utf-8")

    assert load_metadata(path) == {"title": "Example", "category": "security"}
