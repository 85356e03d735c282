"""Metadata record schema and loader for entry descriptors."""

from __future__ import annotations

import re
from datetime import date, datetime
from pathlib import Path
from typing import Annotated, Any, Dict, List, Literal, Optional, Sequence, get_args

import yaml
from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    StringConstraints,
    ValidationInfo,
    field_validator,
)
from pydantic_core import PydanticCustomError

from ..models import Issue

KEBAB_CASE = r"^[a-z0-9]+(-[a-z0-9]+)*$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
SEMVER_PATTERN = (
    r"^(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)"
    r"(-[0-9A-Za-z.-]+)?(\+[0-9A-Za-z.-]+)?$"
)
URL_PATTERN = r"^https?://\S+$"
ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

EntryStatus = Literal["draft", "review", "approved", "deprecated"]
STATUSES = get_args(EntryStatus)

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
KebabStr = Annotated[str, StringConstraints(pattern=KEBAB_CASE)]
EmailStr = Annotated[str, StringConstraints(pattern=EMAIL_PATTERN)]
SemVerStr = Annotated[str, StringConstraints(pattern=SEMVER_PATTERN)]
UrlStr = Annotated[str, StringConstraints(pattern=URL_PATTERN)]

_CONTROL_CHARACTERS = re.compile(r"[\x00-\x1f\x7f]")


def _no_control_characters(value: str) -> str:
    if _CONTROL_CHARACTERS.search(value):
        raise PydanticCustomError("control_characters", "must not contain control characters")
    return value


def _iso_date_only(value: Any) -> Any:
    # YAML already turns unquoted dates into date objects; anything else must be YYYY-MM-DD text.
    if isinstance(value, datetime):
        raise PydanticCustomError("iso_date", "must be an ISO date (YYYY-MM-DD) without a time")
    if isinstance(value, date):
        return value
    if isinstance(value, str) and re.match(ISO_DATE_PATTERN, value.strip()):
        return value.strip()
    raise PydanticCustomError("iso_date", "must be an ISO date (YYYY-MM-DD)")


PathStr = Annotated[NonBlankStr, AfterValidator(_no_control_characters)]
IsoDate = Annotated[date, BeforeValidator(_iso_date_only)]

_FRIENDLY_MESSAGES = {
    "missing": "required field is missing",
    "extra_forbidden": "unknown field",
}


class MetadataParseError(ValueError):
    """Raised when a metadata file cannot be read as a YAML mapping."""


class _Record(BaseModel):
    model_config = ConfigDict(extra="forbid")


class Author(_Record):
    name: NonBlankStr
    email: EmailStr


class Technology(_Record):
    name: NonBlankStr
    type: NonBlankStr


class CodeSnippet(_Record):
    file: PathStr
    description: Optional[str] = None
    language: Optional[str] = None


class Implementation(_Record):
    repo_url: Optional[UrlStr] = None
    language: Optional[str] = None
    framework: Optional[str] = None
    code_snippets: Optional[List[CodeSnippet]] = None


class MetadataRecord(_Record):
    """Fixed-shape descriptor every entry ships as its metadata file.

    The category set is not part of the model; callers pass it through the
    validation context (``{"categories": [...]}``) so the registry document
    stays the only source of valid values.
    """

    title: NonBlankStr
    description: NonBlankStr
    author: Author
    category: str
    tags: List[KebabStr]
    technologies: List[Technology]
    use_case: NonBlankStr

    architecture_diagram: Optional[PathStr] = None
    prerequisites: Optional[List[str]] = None
    implementation: Optional[Implementation] = None
    security: Optional[List[str]] = None
    limitations: Optional[List[str]] = None
    related_entries: Optional[List[KebabStr]] = None
    created_date: Optional[IsoDate] = None
    last_updated: Optional[IsoDate] = None
    version: Optional[SemVerStr] = None
    status: Optional[EntryStatus] = None

    @field_validator("category")
    @classmethod
    def _category_in_registry(cls, value: str, info: ValidationInfo) -> str:
        categories = (info.context or {}).get("categories")
        if categories is not None and value not in categories:
            raise PydanticCustomError(
                "unknown_category",
                "must be one of: {allowed}",
                {"allowed": ", ".join(categories)},
            )
        return value

    @field_validator("tags", "technologies")
    @classmethod
    def _not_empty(cls, value: List[Any]) -> List[Any]:
        if not value:
            raise PydanticCustomError("empty_list", "must contain at least one item")
        return value

    @field_validator("tags")
    @classmethod
    def _unique_tags(cls, value: List[str]) -> List[str]:
        duplicates = sorted({tag for tag in value if value.count(tag) > 1})
        if duplicates:
            raise PydanticCustomError(
                "duplicate_tags",
                "duplicate tags: {tags}",
                {"tags": ", ".join(duplicates)},
            )
        return value


def load_metadata(path: Path) -> Dict[str, Any]:
    """Read a metadata file and return its top-level mapping."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise MetadataParseError(f"unable to read {path.name}: {exc}") from exc
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise MetadataParseError(f"{path.name} is not valid YAML: {_squash(exc)}") from exc
    if loaded is None:
        raise MetadataParseError(f"{path.name} is empty")
    if not isinstance(loaded, dict):
        raise MetadataParseError(
            f"{path.name} must contain a mapping at the root, got {type(loaded).__name__}"
        )
    return loaded


def format_location(loc: Sequence[Any]) -> str:
    """Render a pydantic error location as ``a.b[0].c``."""
    rendered = ""
    for part in loc:
        if isinstance(part, int):
            rendered += f"[{part}]"
        elif rendered:
            rendered += f".{part}"
        else:
            rendered = str(part)
    return rendered or "metadata"


def issues_from_errors(errors: Sequence[Dict[str, Any]]) -> List[Issue]:
    """Convert ``ValidationError.errors()`` output into field-addressed issues."""
    issues: List[Issue] = []
    for error in errors:
        message = _FRIENDLY_MESSAGES.get(error.get("type", ""), error.get("msg", "invalid value"))
        issues.append(Issue(field=format_location(error.get("loc", ())), message=message))
    return issues


def _squash(exc: Exception) -> str:
    text = str(exc).strip()
    return " ".join(text.split()) if text else exc.__class__.__name__


__all__ = [
    "KEBAB_CASE",
    "STATUSES",
    "MetadataParseError",
    "MetadataRecord",
    "format_location",
    "issues_from_errors",
    "load_metadata",
]
