"""Fatal error taxonomy for pipeline runs.

Entry-level problems never raise; they are collected into verdicts. The
exceptions here abort a whole run and map to a distinct process exit code.
"""

from __future__ import annotations


class FatalInfrastructureError(RuntimeError):
    """Raised when the environment prevents a pipeline run from completing."""

    exit_code = 2


class RepositoryError(FatalInfrastructureError):
    """Raised when the repository root is missing or is not a Git checkout."""


class RevisionResolutionError(FatalInfrastructureError):
    """Raised when a revision cannot be resolved, even after fetching it."""

    def __init__(self, revision: str, detail: str | None = None) -> None:
        message = f"Unable to resolve revision {revision!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.revision = revision


class RegistryError(FatalInfrastructureError):
    """Raised when the category registry document is missing or malformed."""


__all__ = [
    "FatalInfrastructureError",
    "RegistryError",
    "RepositoryError",
    "RevisionResolutionError",
]
