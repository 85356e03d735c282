"""CLI entrypoints for entrygate commands."""

from __future__ import annotations

import argparse
import json
import os
import subprocess
import sys
from pathlib import Path
from typing import Dict, List, Sequence

from .config import CONFIG_FILENAME, GateConfig, find_repo_root, load_config
from .errors import FatalInfrastructureError
from .git.diff import ChangeDetector
from .logging import configure_logging
from .models import PipelineResult
from .orchestrator import EXIT_FAIL, EXIT_FATAL, EXIT_PASS, Pipeline, entries_from_args, exit_code_for
from .outputs import write_github_outputs
from .routing import ReviewerRouter, ReviewerTable, aggregate_reviewers, render_report
from .schema import SchemaRegistry
from .validators import EntryValidator, summarize

# Commands whose stdout is machine-consumed log to stderr instead.
_STDOUT_LOG_COMMANDS = {"validate", "run"}


def _default_base() -> str:
    base_ref = os.environ.get("GITHUB_BASE_REF", "").strip()
    return f"origin/{base_ref or 'main'}"


def _add_common_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    def default(value: object) -> object:
        return argparse.SUPPRESS if suppress_default else value

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=default(False),
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--repo-root",
        default=default(None),
        help="Repository root (defaults to the nearest directory with .git or the category registry).",
    )
    parser.add_argument(
        "--config",
        default=default(None),
        help=f"Path to the configuration file (defaults to <repo-root>/{CONFIG_FILENAME}).",
    )
    parser.add_argument(
        "--log-file",
        default=default(None),
        help="Also write a timestamped debug log to this file.",
    )


def _add_format_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format for the command result.",
    )


def _add_github_output_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--github-output",
        action="store_true",
        help="Append step outputs to the file named by $GITHUB_OUTPUT.",
    )


def _add_revision_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--base",
        default=None,
        help="Base revision (defaults to origin/$GITHUB_BASE_REF or origin/main).",
    )
    parser.add_argument(
        "--head",
        default="HEAD",
        help="Head revision to compare against the base.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="entrygate",
        description="Detect, validate and route structured-content submissions.",
    )
    _add_common_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate one entry directory.",
    )
    _add_common_options(validate_parser, suppress_default=True)
    _add_format_option(validate_parser)
    validate_parser.add_argument("entry", help="Path to the entry directory.")

    detect_parser = subparsers.add_parser(
        "detect-changed",
        help="List entry directories changed between two revisions.",
    )
    _add_common_options(detect_parser, suppress_default=True)
    _add_revision_options(detect_parser)
    _add_format_option(detect_parser)
    _add_github_output_option(detect_parser)

    notify_parser = subparsers.add_parser(
        "notify-reviewers",
        help="Render reviewer assignments for entry directories.",
    )
    _add_common_options(notify_parser, suppress_default=True)
    _add_format_option(notify_parser)
    _add_github_output_option(notify_parser)
    notify_parser.add_argument(
        "entries",
        nargs="+",
        help="Entry directories (a single space-separated argument is also accepted).",
    )

    run_parser = subparsers.add_parser(
        "run",
        help="Detect changed entries, validate them and route reviewers.",
    )
    _add_common_options(run_parser, suppress_default=True)
    _add_revision_options(run_parser)
    _add_format_option(run_parser)
    _add_github_output_option(run_parser)

    schema_parser = subparsers.add_parser(
        "schema",
        help="Print the metadata JSON Schema with the registry's categories.",
    )
    _add_common_options(schema_parser, suppress_default=True)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for entrygate commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    output_format = getattr(args, "format", "text")
    log_to_stdout = args.command in _STDOUT_LOG_COMMANDS and output_format == "text"
    try:
        configure_logging(
            verbose=bool(args.verbose),
            stream=sys.stdout if log_to_stdout else sys.stderr,
            log_file=Path(args.log_file).expanduser() if args.log_file else None,
        )
    except OSError as exc:
        parser.exit(EXIT_FATAL, f"entrygate: cannot open log file: {exc}\n")

    handlers = {
        "validate": lambda: _run_validate(parser, args),
        "detect-changed": lambda: _run_detect(args),
        "notify-reviewers": lambda: _run_notify(args),
        "run": lambda: _run_pipeline(args),
        "schema": lambda: _run_schema(args),
    }
    try:
        return handlers[args.command]()
    except FatalInfrastructureError as exc:
        parser.exit(exc.exit_code, f"entrygate {args.command} failed: {exc}\n")
    except (OSError, subprocess.CalledProcessError) as exc:
        parser.exit(
            EXIT_FATAL,
            f"entrygate {args.command} failed: {exc}\nRun with --verbose for more details.\n",
        )
    return EXIT_FATAL  # pragma: no cover - parser.exit raises SystemExit


def _load(args: argparse.Namespace, start: Path | None = None) -> GateConfig:
    if args.repo_root:
        root = Path(args.repo_root).expanduser().resolve()
    else:
        root = find_repo_root(start or Path.cwd())
    config_path = Path(args.config).expanduser() if args.config else root / CONFIG_FILENAME
    config = load_config(config_path)
    config.root = root
    return config


def _run_validate(parser: argparse.ArgumentParser, args: argparse.Namespace) -> int:
    entry_dir = Path(args.entry).expanduser().resolve()
    if not entry_dir.exists():
        parser.exit(EXIT_FATAL, f"Error: Entry directory not found: {entry_dir}\n")
    if not entry_dir.is_dir():
        parser.exit(EXIT_FATAL, f"Error: Path is not a directory: {entry_dir}\n")

    config = _load(args, start=entry_dir)
    registry = SchemaRegistry.load(config.registry_file)
    validator = EntryValidator(
        registry,
        layout=config.layout,
        documentation=config.documentation,
    )
    verdict = validator.validate(entry_dir, entry=_entry_label(config.root, entry_dir))

    if args.format == "json":
        print(json.dumps(verdict.to_dict(), indent=2))
    else:
        print(summarize(verdict))
    return EXIT_PASS if verdict.passed else EXIT_FAIL


def _run_detect(args: argparse.Namespace) -> int:
    config = _load(args)
    detector = ChangeDetector(
        denylist=config.detection.denylist,
        content_root=config.content_root,
        remote=config.detection.remote,
    )
    entries = detector.detect(config.root, args.base or _default_base(), args.head)

    if args.format == "json":
        print(json.dumps(entries))
    else:
        print(" ".join(entries))
    if args.github_output:
        write_github_outputs(_detection_outputs(entries))
    return EXIT_PASS


def _run_notify(args: argparse.Namespace) -> int:
    config = _load(args)
    router = ReviewerRouter(
        ReviewerTable.from_config(config.reviewers),
        metadata_file=config.layout.metadata_file,
    )
    assignments = []
    for value in entries_from_args(args.entries):
        directory = Path(value).expanduser()
        if not directory.is_absolute():
            directory = Path.cwd() / directory
        assignments.append(router.route_entry(directory, entry=value.rstrip("/")))

    report = render_report(assignments, router.table)
    reviewers = aggregate_reviewers(assignments, router.table)

    if args.format == "json":
        payload = {
            "reviewers": reviewers,
            "entries": [assignment.to_dict() for assignment in assignments],
            "comment": report,
        }
        print(json.dumps(payload, indent=2))
    else:
        print(report or "No entries to route.")
    if args.github_output:
        write_github_outputs(_review_outputs(reviewers, report))
    return EXIT_PASS


def _run_pipeline(args: argparse.Namespace) -> int:
    config = _load(args)
    result = Pipeline(config).run(args.base or _default_base(), args.head)

    if args.format == "json":
        print(json.dumps(result.to_dict(), indent=2))
    else:
        _print_result(result)
    if args.github_output:
        outputs: Dict[str, object] = {}
        outputs.update(_detection_outputs(list(result.entries)))
        outputs.update(_review_outputs(list(result.reviewers), result.report))
        outputs["status"] = result.status.value
        write_github_outputs(outputs)
    return exit_code_for(result)


def _run_schema(args: argparse.Namespace) -> int:
    config = _load(args)
    registry = SchemaRegistry.load(config.registry_file)
    print(json.dumps(registry.json_schema(), indent=2))
    return EXIT_PASS


def _print_result(result: PipelineResult) -> None:
    if not result.verdicts:
        print("No entry directories changed; nothing to validate.")
        return
    for verdict in result.verdicts.values():
        print(summarize(verdict))
        print()
    if result.report:
        print(result.report)
    print(f"Overall status: {result.status.value.upper()}")


def _detection_outputs(entries: Sequence[str]) -> Dict[str, object]:
    return {
        "changed_entries": " ".join(entries),
        "entry_count": len(entries),
        "entries_json": json.dumps(list(entries)),
    }


def _review_outputs(reviewers: List[str], report: str | None) -> Dict[str, object]:
    outputs: Dict[str, object] = {
        "reviewers": json.dumps(reviewers),
        "reviewer_count": len(reviewers),
    }
    if report:
        outputs["review_comment"] = report
    return outputs


def _entry_label(root: Path, entry_dir: Path) -> str:
    try:
        return entry_dir.relative_to(root).as_posix()
    except ValueError:
        return entry_dir.name


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
