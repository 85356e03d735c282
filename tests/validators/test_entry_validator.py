"""Tests for the full entry check sequence."""

from __future__ import annotations

import logging

from entrygate.config import DocumentationConfig, LayoutConfig
from entrygate.models import Status
from entrygate.validators import EntryContext, EntryValidator, VerdictBuilder, summarize
from entrygate.validators.metadata import CrossReferenceCheck
from tests._fixtures.entry_builder import minimal_metadata


def test_happy_path_passes_without_warnings(entry_builder, registry) -> None:
    metadata = minimal_metadata(
        architecture_diagram="diagrams/architecture.png",
        implementation={
            "language": "javascript",
            "code_snippets": [{"file": "implementation/handler.js", "description": "Handler"}],
        },
    )
    directory = entry_builder.entry(
        "sample-pattern",
        metadata,
        files={
            "diagrams/architecture.png": "png",
            "implementation/handler.js": "exports.handler = async () => ({});\n",
        },
    )

    verdict = EntryValidator(registry).validate(directory)

    assert verdict.status is Status.PASS
    assert verdict.errors == ()
    assert verdict.warnings == ()


def test_minimal_record_has_no_errors(entry_builder, registry) -> None:
    directory = entry_builder.entry("minimal-entry")

    verdict = EntryValidator(registry).validate(directory)

    assert verdict.errors == ()
    assert verdict.passed


def test_malformed_metadata_is_single_error_and_skips_later_checks(entry_builder, registry) -> None:
    directory = entry_builder.entry("broken-entry", "title: [unclosed\n  - nope: {\n", readme="short")

    verdict = EntryValidator(registry).validate(directory)

    assert verdict.status is Status.FAIL
    assert len(verdict.errors) == 1
    assert verdict.errors[0].field == "metadata"
    assert "Failed to parse pattern.yaml" in verdict.errors[0].message
    # Documentation heuristics are skipped, so the short README is not reported.
    assert verdict.warnings == ()


def test_non_mapping_metadata_counts_as_parse_failure(entry_builder, registry) -> None:
    directory = entry_builder.entry("list-entry", "- just\n- a list\n")

    verdict = EntryValidator(registry).validate(directory)

    assert [issue.field for issue in verdict.errors] == ["metadata"]
    assert "mapping" in verdict.errors[0].message


def test_dangling_code_snippet_is_one_cross_reference_error(entry_builder, registry) -> None:
    metadata = minimal_metadata(
        implementation={"code_snippets": [{"file": "implementation/missing.js"}]},
    )
    directory = entry_builder.entry("dangling-entry", metadata)

    verdict = EntryValidator(registry).validate(directory)

    assert verdict.status is Status.FAIL
    assert len(verdict.errors) == 1
    assert verdict.errors[0].field == "implementation.code_snippets[0].file"
    assert "implementation/missing.js" in verdict.errors[0].message


def test_missing_diagram_fails_even_though_schema_passes(entry_builder, registry) -> None:
    metadata = minimal_metadata(architecture_diagram="diagrams/nowhere.png")
    directory = entry_builder.entry("no-diagram", metadata)

    assert registry.validate(metadata) == []
    verdict = EntryValidator(registry).validate(directory)

    assert len(verdict.errors) == 1
    assert verdict.errors[0].field == "architecture_diagram"
    assert "diagrams/nowhere.png" in verdict.errors[0].message


def test_reference_escaping_the_entry_is_rejected(entry_builder, registry) -> None:
    entry_builder.write({"outside.png": "png"})
    metadata = minimal_metadata(architecture_diagram="../outside.png")
    directory = entry_builder.entry("escaping-entry", metadata)

    verdict = EntryValidator(registry).validate(directory)

    assert [issue.field for issue in verdict.errors] == ["architecture_diagram"]
    assert "inside the entry directory" in verdict.errors[0].message


def test_required_files_are_checked_independently(entry_builder, registry) -> None:
    directory = entry_builder.entry("bare-entry", readme=None, assets=False)
    (directory / "pattern.yaml").write_text("", encoding="utf-8")

    verdict = EntryValidator(registry).validate(directory)

    messages = [issue.message for issue in verdict.errors if issue.field == "files"]
    assert messages == [
        "Required file is empty: pattern.yaml",
        "Required file missing: README.md",
        "Required directory missing: diagrams/",
    ]
    # The empty metadata file is not reported a second time by the schema check.
    assert len(verdict.errors) == 3


def test_assets_path_that_is_a_file_is_an_error(entry_builder, registry) -> None:
    directory = entry_builder.entry("file-assets", assets=False, files={"diagrams": "not a dir"})

    verdict = EntryValidator(registry).validate(directory)

    assert [issue.message for issue in verdict.errors] == ["diagrams exists but is not a directory"]


def test_schema_errors_are_all_reported(entry_builder, registry) -> None:
    metadata = minimal_metadata(category="cooking")
    for field in ("title", "description", "use_case"):
        metadata.pop(field)
    directory = entry_builder.entry("schema-entry", metadata)

    verdict = EntryValidator(registry).validate(directory)

    fields = {issue.field for issue in verdict.errors}
    assert {"title", "description", "use_case", "category"} <= fields
    assert len(verdict.errors) >= 4


def test_short_documentation_is_a_warning_only(entry_builder, registry) -> None:
    directory = entry_builder.entry("short-docs", readme="# Short\n")

    verdict = EntryValidator(registry).validate(directory)

    assert verdict.passed
    assert [issue.field for issue in verdict.warnings] == ["documentation"]
    assert "too short" in verdict.warnings[0].message


def test_missing_sections_are_listed_in_one_warning(entry_builder, registry) -> None:
    readme = "# Title\n\n## Overview\n\n" + "This entry explains a queue worker in detail. " * 5
    directory = entry_builder.entry("few-sections", readme=readme)

    verdict = EntryValidator(registry).validate(directory)

    assert verdict.passed
    assert len(verdict.warnings) == 1
    assert "Architecture, Implementation, Prerequisites" in verdict.warnings[0].message


def test_documentation_thresholds_come_from_configuration(entry_builder, registry) -> None:
    directory = entry_builder.entry("custom-docs", readme="# Overview\n")
    settings = DocumentationConfig(min_length=5, recommended_sections=["overview"])

    verdict = EntryValidator(registry, documentation=settings).validate(directory)

    assert verdict.warnings == ()


def test_errors_keep_check_order(entry_builder, registry) -> None:
    metadata = minimal_metadata(architecture_diagram="diagrams/missing.png")
    directory = entry_builder.entry("Bad_Name", metadata, readme="tiny")

    verdict = EntryValidator(registry).validate(directory)

    assert [issue.field for issue in verdict.errors] == ["entry_id", "architecture_diagram"]
    assert [issue.field for issue in verdict.warnings] == ["documentation"]


def test_references_wait_for_a_schema_clean_record(entry_builder, registry) -> None:
    metadata = minimal_metadata(architecture_diagram="diagrams/missing.png")
    metadata.pop("title")
    directory = entry_builder.entry("schema-first", metadata, readme="tiny")

    verdict = EntryValidator(registry).validate(directory)

    assert [issue.field for issue in verdict.errors] == ["title"]
    # Documentation still runs on a parsed record.
    assert [issue.field for issue in verdict.warnings] == ["documentation"]


def test_control_characters_in_a_reference_are_a_schema_error(entry_builder, registry) -> None:
    metadata = minimal_metadata(architecture_diagram="diagrams/a\x00b.png")
    directory = entry_builder.entry("nul-entry", metadata)

    verdict = EntryValidator(registry).validate(directory)

    assert verdict.status is Status.FAIL
    assert [issue.field for issue in verdict.errors] == ["architecture_diagram"]
    assert verdict.errors[0].message == "must not contain control characters"


def test_unresolvable_reference_is_reported_not_raised(entry_builder, registry) -> None:
    directory = entry_builder.entry("odd-path")
    context = EntryContext(
        entry="odd-path",
        directory=directory,
        registry=registry,
        layout=LayoutConfig(),
        documentation=DocumentationConfig(),
        document={"architecture_diagram": "diagrams/a\x00b.png"},
        schema_valid=True,
    )
    builder = VerdictBuilder("odd-path", logging.getLogger("entrygate.tests"))

    CrossReferenceCheck().run(context, builder)

    errors = builder.build().errors
    assert [issue.field for issue in errors] == ["architecture_diagram"]


def test_summarize_lists_errors_and_warnings(entry_builder, registry) -> None:
    directory = entry_builder.entry("Bad_Name", readme="tiny")

    summary = summarize(EntryValidator(registry).validate(directory))

    assert "Warnings: 1" in summary
    assert "Errors: 1" in summary
    assert "  1. entry_id:" in summary
    assert summary.endswith("Please fix the errors above.")
