"""Pipeline orchestration: detect, validate and route changed entries."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Dict, List, Sequence, Tuple

from .config import GateConfig
from .git.diff import ChangeDetector
from .logging import get_logger
from .models import PipelineResult, ReviewerAssignment, Status, ValidationVerdict
from .routing import ReviewerRouter, ReviewerTable, aggregate_reviewers, render_report
from .schema import SchemaRegistry
from .validators import EntryValidator

EXIT_PASS = 0
EXIT_FAIL = 1
EXIT_FATAL = 2


class Pipeline:
    """Coordinates change detection, entry validation and reviewer routing."""

    def __init__(
        self,
        config: GateConfig,
        *,
        registry: SchemaRegistry | None = None,
        detector: ChangeDetector | None = None,
        validator: EntryValidator | None = None,
        router: ReviewerRouter | None = None,
        runner: Callable[..., str] | None = None,
    ) -> None:
        self.config = config
        self._registry = registry
        self.detector = detector or ChangeDetector(
            runner,
            denylist=config.detection.denylist,
            content_root=config.content_root,
            remote=config.detection.remote,
        )
        self._validator = validator
        self.router = router or ReviewerRouter(
            ReviewerTable.from_config(config.reviewers),
            metadata_file=config.layout.metadata_file,
        )
        self.logger = get_logger("orchestrator")

    @property
    def registry(self) -> SchemaRegistry:
        if self._registry is None:
            self._registry = SchemaRegistry.load(self.config.registry_file)
        return self._registry

    @property
    def validator(self) -> EntryValidator:
        if self._validator is None:
            self._validator = EntryValidator(
                self.registry,
                layout=self.config.layout,
                documentation=self.config.documentation,
            )
        return self._validator

    def run(self, base: str, head: str) -> PipelineResult:
        """Validate and route every entry changed between ``base`` and ``head``."""
        self.logger.info("Starting pipeline run for %s...%s", base, head)
        # Load the registry before touching git so a missing registry fails fast.
        registry = self.registry
        self.logger.debug("Using %d categories from %s", len(registry.categories), registry.source)
        entries = self.detector.detect(self.config.root, base, head)
        return self.process(entries)

    def process(self, entries: Sequence[str]) -> PipelineResult:
        """Validate and route an explicit list of entry paths."""
        if not entries:
            self.logger.info("No entries to process")
            return PipelineResult()

        validator = self.validator
        self.logger.info("Processing %d entr%s", len(entries), "y" if len(entries) == 1 else "ies")
        workers = max(1, min(self.config.workers, len(entries)))
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                outcomes = list(pool.map(lambda entry: self._process_entry(validator, entry), entries))
        else:
            outcomes = [self._process_entry(validator, entry) for entry in entries]

        verdicts: Dict[str, ValidationVerdict] = {}
        assignments: Dict[str, ReviewerAssignment] = {}
        for entry, verdict, assignment in outcomes:
            verdicts[entry] = verdict
            assignments[entry] = assignment

        table = self.router.table
        result = PipelineResult(
            verdicts=verdicts,
            assignments=assignments,
            reviewers=tuple(aggregate_reviewers(assignments.values(), table)),
            report=render_report(assignments.values(), table),
        )
        self.logger.info(
            "Pipeline finished: %s (%d failing of %d)",
            result.status.value.upper(),
            sum(1 for verdict in verdicts.values() if not verdict.passed),
            len(verdicts),
        )
        return result

    def _process_entry(
        self, validator: EntryValidator, entry: str
    ) -> Tuple[str, ValidationVerdict, ReviewerAssignment]:
        directory = self._entry_dir(entry)
        verdict = validator.validate(directory, entry=entry)
        assignment = self.router.route_entry(directory, entry=entry)
        return entry, verdict, assignment

    def _entry_dir(self, entry: str) -> Path:
        return self.config.root / entry


def exit_code_for(result: PipelineResult) -> int:
    """Map a pipeline result to the process exit code."""
    return EXIT_PASS if result.status is Status.PASS else EXIT_FAIL


def entries_from_args(values: Sequence[str]) -> List[str]:
    """Split a single space-separated argument into several entries."""
    if len(values) == 1 and " " in values[0].strip():
        return values[0].split()
    return [value for value in values if value.strip()]
