"""Tests for GitHub Actions step outputs."""

from __future__ import annotations

from pathlib import Path

from entrygate.outputs import format_outputs, write_github_outputs


def test_single_line_values() -> None:
    assert format_outputs({"entry_count": 2, "changed_entries": "a b"}) == (
        "entry_count=2\nchanged_entries=a b\n"
    )


def test_multi_line_values_use_a_delimiter() -> None:
    rendered = format_outputs({"review_comment": "line one\nline two\n"})

    header, first, second, footer = rendered.rstrip("\n").split("\n")
    delimiter = header.split("<<", 1)[1]
    assert header == f"review_comment<<{delimiter}"
    assert (first, second) == ("line one", "line two")
    assert footer == delimiter


def test_write_without_target_is_a_no_op(monkeypatch) -> None:
    monkeypatch.delenv("GITHUB_OUTPUT", raising=False)

    assert write_github_outputs({"status": "pass"}) is False


def test_write_appends_to_file(tmp_path: Path) -> None:
    target = tmp_path / "out.txt"
    target.write_text("existing=1\n", encoding="utf-8")

    assert write_github_outputs({"status": "pass"}, target) is True
    assert target.read_text(encoding="utf-8") == "existing=1\nstatus=pass\n"
