"""Metadata parsing, schema conformance and cross-reference checks."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..schema.metadata import MetadataParseError, load_metadata
from .base import EntryContext, VerdictBuilder


class SchemaCheck:
    """Parse the metadata file and validate it against the registry schema.

    A missing or empty metadata file was already reported by the required-file
    check, so it is skipped here without a second error. Any other parse
    failure is a single error. Either way ``context.document`` stays ``None``
    and the checks that need a parsed record do not run.
    """

    name = "metadata"
    title = "Validating metadata"
    requires_document = False

    def run(self, context: EntryContext, builder: VerdictBuilder) -> None:
        path = context.metadata_path
        filename = context.layout.metadata_file
        if not path.is_file() or path.stat().st_size == 0:
            builder.success(f"Skipping schema validation; {filename} is unavailable")
            return

        try:
            document = load_metadata(path)
        except MetadataParseError as exc:
            builder.error(self.name, f"Failed to parse {filename}: {exc}")
            return

        builder.success(f"{filename} is valid YAML")
        context.document = document

        issues = context.registry.validate(document)
        for issue in issues:
            builder.error(issue.field, issue.message)
        if not issues:
            context.schema_valid = True
            builder.success(f"{filename} conforms to the metadata schema")


class CrossReferenceCheck:
    """Every path named in the metadata must be a file inside the entry.

    Runs only on a record that passed schema validation.
    """

    name = "references"
    title = "Checking referenced files"
    requires_document = True

    _LABELS = {
        "architecture_diagram": "Architecture diagram",
    }

    def run(self, context: EntryContext, builder: VerdictBuilder) -> None:
        if not context.schema_valid:
            builder.success("Skipping file references until the schema errors are fixed")
            return
        references = collect_references(context.document or {})
        if not references:
            builder.success("No file references to check")
            return

        root = context.directory.resolve()
        for field, relative in references:
            label = self._LABELS.get(field, "Code snippet file")
            try:
                target = _resolve_inside(root, relative)
            except (OSError, ValueError):
                builder.error(field, f"{label} is not a valid path: {relative!r}")
                continue
            if target is None:
                builder.error(field, f"{label} must stay inside the entry directory: {relative}")
            elif not target.is_file():
                builder.error(field, f"{label} not found: {relative}")
            else:
                builder.success(f"{label} exists: {relative}")


def collect_references(document: Dict[str, Any]) -> List[Tuple[str, str]]:
    """Return ``(field_path, relative_path)`` pairs for every file the record names."""
    references: List[Tuple[str, str]] = []
    diagram = document.get("architecture_diagram")
    if isinstance(diagram, str) and diagram.strip():
        references.append(("architecture_diagram", diagram.strip()))

    implementation = document.get("implementation")
    if isinstance(implementation, dict):
        snippets = implementation.get("code_snippets")
        if isinstance(snippets, list):
            for index, snippet in enumerate(snippets):
                if not isinstance(snippet, dict):
                    continue
                file_ref = snippet.get("file")
                if isinstance(file_ref, str) and file_ref.strip():
                    references.append(
                        (f"implementation.code_snippets[{index}].file", file_ref.strip())
                    )
    return references


def _resolve_inside(root: Path, relative: str) -> Optional[Path]:
    candidate = Path(relative)
    if candidate.is_absolute():
        return None
    resolved = (root / candidate).resolve()
    if not resolved.is_relative_to(root):
        return None
    return resolved
