"""Changed-entry detection between two revisions."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Set

from ..errors import RepositoryError, RevisionResolutionError
from ..logging import get_logger


@dataclass(frozen=True)
class ChangeSet:
    """Changed files between two revisions and the entries they touch."""

    base: str
    head: str
    changed_files: Sequence[str]
    entries: Sequence[str]


class ChangeDetector:
    """Maps a two-revision diff to the top-level entry directories it touches."""

    def __init__(
        self,
        runner: Callable[..., str] | None = None,
        *,
        denylist: Sequence[str] = (),
        content_root: str = "",
        remote: str = "origin",
    ) -> None:
        self._runner = runner or self._default_runner
        self.denylist = tuple(denylist)
        self.content_root = content_root.strip().strip("/")
        self.remote = remote
        self.logger = get_logger("detector")

    def detect(
        self,
        repo_path: str | Path,
        base: str,
        head: str,
        denylist: Optional[Sequence[str]] = None,
    ) -> List[str]:
        """Return the sorted entry paths changed between ``base`` and ``head``."""
        return list(self.compute(repo_path, base, head, denylist).entries)

    def compute(
        self,
        repo_path: str | Path,
        base: str,
        head: str,
        denylist: Optional[Sequence[str]] = None,
    ) -> ChangeSet:
        repo = Path(repo_path)
        if not (repo / ".git").exists():
            raise RepositoryError(f"{repo_path} is not a Git repository")

        prefixes = _normalise_prefixes(self.denylist if denylist is None else denylist)
        self._ensure_revision(repo, base)
        self._ensure_revision(repo, head)

        try:
            changed_files = self._changed_files(repo, base, head)
        except subprocess.CalledProcessError as exc:
            raise RepositoryError(f"git diff failed for {base}...{head}: {exc}") from exc
        self.logger.debug("Changed files: %s", ", ".join(changed_files) or "(none)")
        if not changed_files:
            self.logger.info("No changed files between %s and %s", base, head)
            return ChangeSet(base=base, head=head, changed_files=(), entries=())

        candidates: Set[str] = set()
        for path in changed_files:
            segment = self._entry_segment(path)
            if segment is None:
                continue
            if _is_denied(segment, prefixes):
                self.logger.debug("Skipping %s (denylisted)", path)
                continue
            candidates.add(segment)

        try:
            directories = self._directories_at(repo, head) if candidates else set()
        except subprocess.CalledProcessError as exc:
            raise RepositoryError(f"git ls-tree failed for {head}: {exc}") from exc
        entries: List[str] = []
        for segment in sorted(candidates):
            if segment not in directories:
                self.logger.debug("Skipping %s (not a directory at %s)", segment, head)
                continue
            entry = f"{self.content_root}/{segment}" if self.content_root else segment
            entries.append(entry)
            self.logger.info("Entry directory: %s", entry)

        if not entries:
            self.logger.info("No entry directories detected between %s and %s", base, head)
        return ChangeSet(base=base, head=head, changed_files=changed_files, entries=entries)

    # ------------------------------------------------------------------
    # Internals

    def _entry_segment(self, path: str) -> Optional[str]:
        normalized = path.strip().replace("\\", "/")
        if self.content_root:
            prefix = f"{self.content_root}/"
            if not normalized.startswith(prefix):
                return None
            normalized = normalized[len(prefix):]
        segment, separator, _ = normalized.partition("/")
        # A root-level file has no directory component.
        if not segment or not separator:
            return None
        return segment

    def _ensure_revision(self, repo: Path, revision: str) -> None:
        if self._resolves(repo, revision):
            return
        self.logger.info("Revision %s not available locally; fetching from %s", revision, self.remote)
        fetch_target = _fetch_refspec(revision, self.remote)
        try:
            self._run(["git", "fetch", self.remote, fetch_target, "--depth=1"], cwd=repo)
        except (subprocess.CalledProcessError, OSError) as exc:
            raise RevisionResolutionError(revision, "fetch failed") from exc
        if not self._resolves(repo, revision):
            raise RevisionResolutionError(revision)

    def _resolves(self, repo: Path, revision: str) -> bool:
        try:
            self._run(
                ["git", "rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}"],
                cwd=repo,
                capture_output=True,
            )
        except subprocess.CalledProcessError:
            return False
        return True

    def _changed_files(self, repo: Path, base: str, head: str) -> List[str]:
        output = self._run(
            ["git", "diff", "--name-only", f"{base}...{head}"],
            cwd=repo,
            capture_output=True,
        )
        files: List[str] = []
        for line in output.splitlines():
            stripped = line.strip()
            if stripped and stripped not in files:
                files.append(stripped)
        return files

    def _directories_at(self, repo: Path, head: str) -> Set[str]:
        args = ["git", "ls-tree", "-d", "--name-only", head]
        if self.content_root:
            args.extend(["--", f"{self.content_root}/"])
        output = self._run(args, cwd=repo, capture_output=True)
        directories: Set[str] = set()
        for line in output.splitlines():
            name = line.strip().rstrip("/")
            if self.content_root and name.startswith(f"{self.content_root}/"):
                name = name[len(self.content_root) + 1:]
            if name:
                directories.add(name)
        return directories

    def _run(
        self,
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        return self._runner(args, cwd=cwd, capture_output=capture_output)

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=capture_output,
        )
        return completed.stdout if capture_output else ""


def _normalise_prefixes(prefixes: Sequence[str]) -> List[str]:
    normalised: List[str] = []
    for prefix in prefixes:
        cleaned = prefix.strip().replace("\\", "/").rstrip("/")
        if cleaned and cleaned not in normalised:
            normalised.append(cleaned)
    return normalised


def _is_denied(segment: str, prefixes: Sequence[str]) -> bool:
    return any(segment.startswith(prefix) for prefix in prefixes)


def _fetch_refspec(revision: str, remote: str) -> str:
    # origin/main is fetched as main so the remote-tracking ref is updated.
    prefix = f"{remote}/"
    if revision.startswith(prefix):
        return revision[len(prefix):]
    return revision
