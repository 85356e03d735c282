"""Documentation completeness heuristics (warnings only)."""

from __future__ import annotations

from .base import EntryContext, VerdictBuilder


class DocumentationCheck:
    name = "documentation"
    title = "Reviewing documentation"
    requires_document = True

    def run(self, context: EntryContext, builder: VerdictBuilder) -> None:
        path = context.documentation_path
        filename = context.layout.documentation_file
        if not path.is_file():
            return
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            builder.warning(self.name, f"Unable to read {filename}: {exc}")
            return

        settings = context.documentation
        if len(content) < settings.min_length:
            builder.warning(
                self.name,
                f"{filename} seems too short. Consider adding more documentation.",
            )
            return

        lowered = content.lower()
        missing = [
            section
            for section in settings.recommended_sections
            if section.lower() not in lowered
        ]
        if missing:
            builder.warning(
                self.name,
                f"{filename} is missing recommended sections: {', '.join(missing)}",
            )
            return
        builder.success(f"{filename} has adequate content")
