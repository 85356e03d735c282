"""Required file and directory checks."""

from __future__ import annotations

from .base import EntryContext, VerdictBuilder


class RequiredFilesCheck:
    """Metadata and documentation must be non-empty files; assets must be a directory."""

    name = "files"
    title = "Checking required files"
    requires_document = False

    def run(self, context: EntryContext, builder: VerdictBuilder) -> None:
        for filename in (context.layout.metadata_file, context.layout.documentation_file):
            path = context.directory / filename
            if not path.exists():
                builder.error(self.name, f"Required file missing: {filename}")
            elif not path.is_file():
                builder.error(self.name, f"{filename} exists but is not a file")
            elif path.stat().st_size == 0:
                builder.error(self.name, f"Required file is empty: {filename}")
            else:
                builder.success(f"Required file exists: {filename}")

        assets = context.layout.assets_dir
        assets_path = context.directory / assets
        if not assets_path.exists():
            builder.error(self.name, f"Required directory missing: {assets}/")
        elif not assets_path.is_dir():
            builder.error(self.name, f"{assets} exists but is not a directory")
        else:
            builder.success(f"Required directory exists: {assets}/")
