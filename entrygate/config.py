"""Configuration loading for entrygate (.entrygate.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import FatalInfrastructureError

CONFIG_FILENAME = ".entrygate.yml"
DEFAULT_REGISTRY = "categories.config.json"

DEFAULT_DENYLIST: Sequence[str] = (".github", "schemas", "pattern-template", ".")
DEFAULT_RECOMMENDED_SECTIONS: Sequence[str] = (
    "Overview",
    "Architecture",
    "Implementation",
    "Prerequisites",
)


class ConfigError(FatalInfrastructureError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class LayoutConfig:
    """File and directory names every entry must provide."""

    metadata_file: str = "pattern.yaml"
    documentation_file: str = "README.md"
    assets_dir: str = "diagrams"


@dataclass
class DocumentationConfig:
    """Thresholds for the documentation heuristics."""

    min_length: int = 100
    recommended_sections: List[str] = field(
        default_factory=lambda: list(DEFAULT_RECOMMENDED_SECTIONS)
    )


@dataclass
class DetectionConfig:
    """Change detection settings."""

    remote: str = "origin"
    denylist: List[str] = field(default_factory=lambda: list(DEFAULT_DENYLIST))


@dataclass
class CategoryReviewers:
    """Reviewer group declared for one category."""

    reviewers: List[str]
    description: Optional[str] = None
    team: Optional[str] = None
    icon: Optional[str] = None


@dataclass
class ReviewersConfig:
    """Reviewer overrides; categories omitted here fall back to the stock table."""

    fallback: List[str] = field(default_factory=list)
    categories: Dict[str, CategoryReviewers] = field(default_factory=dict)


@dataclass
class GateConfig:
    """Represents the high-level settings defined in .entrygate.yml."""

    root: Path
    content_root: str = ""
    registry_path: Optional[Path] = None
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    documentation: DocumentationConfig = field(default_factory=DocumentationConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    reviewers: Optional[ReviewersConfig] = None
    workers: int = 1

    @property
    def registry_file(self) -> Path:
        return self.registry_path or (self.root / DEFAULT_REGISTRY)


def load_config(config_path: Path) -> GateConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return GateConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    content_root = (_as_str(data.get("content_root")) or "").strip().strip("/")
    registry_str = _as_str(data.get("registry"))
    registry_path = root / registry_str if registry_str else None

    layout = LayoutConfig()
    layout_data = _as_dict(data.get("layout"))
    if layout_data:
        layout.metadata_file = _as_str(layout_data.get("metadata_file")) or layout.metadata_file
        layout.documentation_file = (
            _as_str(layout_data.get("documentation_file")) or layout.documentation_file
        )
        layout.assets_dir = _as_str(layout_data.get("assets_dir")) or layout.assets_dir

    documentation = DocumentationConfig()
    docs_data = _as_dict(data.get("documentation"))
    if docs_data:
        min_length = _as_int(docs_data.get("min_length"))
        if min_length is not None:
            if min_length < 0:
                raise ConfigError("documentation.min_length must not be negative")
            documentation.min_length = min_length
        if "recommended_sections" in docs_data:
            documentation.recommended_sections = _as_str_list(
                docs_data.get("recommended_sections")
            )

    detection = DetectionConfig()
    detection_data = _as_dict(data.get("detection"))
    if detection_data:
        detection.remote = _as_str(detection_data.get("remote")) or detection.remote
        if "denylist" in detection_data:
            detection.denylist = _as_str_list(detection_data.get("denylist"))

    reviewers = _parse_reviewers(data.get("reviewers"))

    workers = _as_int(data.get("workers"))
    if workers is not None and workers < 1:
        raise ConfigError("workers must be at least 1")

    return GateConfig(
        root=root,
        content_root=content_root,
        registry_path=registry_path,
        layout=layout,
        documentation=documentation,
        detection=detection,
        reviewers=reviewers,
        workers=workers or 1,
    )


def find_repo_root(start: Path) -> Path:
    """Walk upwards from ``start`` to the first directory that looks like the content repo."""
    current = start.expanduser().resolve()
    if current.is_file():
        current = current.parent
    for candidate in (current, *current.parents):
        if (candidate / ".git").exists():
            return candidate
        if (candidate / CONFIG_FILENAME).exists():
            return candidate
        if (candidate / DEFAULT_REGISTRY).exists():
            return candidate
    return Path.cwd()


def _parse_reviewers(value: Any) -> Optional[ReviewersConfig]:
    reviewers_data = _as_dict(value)
    if not reviewers_data:
        return None

    categories: Dict[str, CategoryReviewers] = {}
    for name, raw in _as_dict(reviewers_data.get("categories")).items():
        group = _as_dict(raw)
        members = _as_str_list(group.get("reviewers"))
        if not members:
            raise ConfigError(f"reviewers.categories.{name} must list at least one reviewer")
        categories[str(name)] = CategoryReviewers(
            reviewers=members,
            description=_as_str(group.get("description")),
            team=_as_str(group.get("team")),
            icon=_as_str(group.get("icon")),
        )

    return ReviewersConfig(
        fallback=_as_str_list(reviewers_data.get("fallback")),
        categories=categories,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []
