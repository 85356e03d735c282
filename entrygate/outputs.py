"""GitHub Actions step outputs."""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import Mapping, Optional

GITHUB_OUTPUT_ENV = "GITHUB_OUTPUT"


def github_output_path() -> Optional[Path]:
    value = os.environ.get(GITHUB_OUTPUT_ENV, "").strip()
    return Path(value) if value else None


def format_outputs(values: Mapping[str, object]) -> str:
    """Render ``name=value`` lines; multi-line values use a heredoc delimiter."""
    lines = []
    for name, raw in values.items():
        value = "" if raw is None else str(raw)
        if "\n" in value:
            delimiter = f"ENTRYGATE_{uuid.uuid4().hex}"
            lines.append(f"{name}<<{delimiter}")
            lines.append(value.rstrip("\n"))
            lines.append(delimiter)
        else:
            lines.append(f"{name}={value}")
    return "\n".join(lines) + "\n" if lines else ""


def write_github_outputs(values: Mapping[str, object], path: Path | None = None) -> bool:
    """Append outputs to the step output file; returns False when none is configured."""
    target = path or github_output_path()
    if target is None:
        return False
    with target.open("a", encoding="utf-8") as handle:
        handle.write(format_outputs(values))
    return True
