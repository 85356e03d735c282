"""Schema registry: the metadata schema plus the closed category set."""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from ..errors import RegistryError
from ..logging import get_logger
from ..models import Issue
from .metadata import MetadataRecord, issues_from_errors


@dataclass(frozen=True)
class Category:
    """One entry of the category registry document."""

    id: str
    name: Optional[str] = None
    description: Optional[str] = None


class SchemaRegistry:
    """Read-only provider of the metadata schema and valid category ids."""

    def __init__(self, categories: Iterable[Category], *, source: Path | None = None) -> None:
        self._categories: Tuple[Category, ...] = tuple(categories)
        if not self._categories:
            raise RegistryError("Category registry must declare at least one category")
        self._by_id: Dict[str, Category] = {c.id: c for c in self._categories}
        self.source = source
        self._schema: Dict[str, Any] | None = None

    @classmethod
    def load(cls, path: Path) -> "SchemaRegistry":
        """Load the registry document from disk."""
        logger = get_logger("registry")
        if not path.is_file():
            raise RegistryError(f"Category registry not found at {path}")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise RegistryError(f"Failed to load category registry {path.name}: {exc}") from exc
        if not isinstance(data, Mapping) or not isinstance(data.get("categories"), list):
            raise RegistryError(f"{path.name} must contain a 'categories' list")

        categories = [_parse_category(item, path) for item in data["categories"]]
        ids = [category.id for category in categories]
        duplicates = sorted({value for value in ids if ids.count(value) > 1})
        if duplicates:
            raise RegistryError(f"{path.name} declares duplicate categories: {', '.join(duplicates)}")

        logger.debug("Loaded %d categories from %s", len(categories), path)
        return cls(categories, source=path)

    @classmethod
    def from_ids(cls, ids: Iterable[str]) -> "SchemaRegistry":
        return cls(Category(id=value) for value in ids)

    @property
    def categories(self) -> Tuple[str, ...]:
        return tuple(category.id for category in self._categories)

    def describe(self, category: str) -> Optional[Category]:
        return self._by_id.get(category)

    def json_schema(self) -> Dict[str, Any]:
        """Return the metadata JSON Schema with the category enum filled in."""
        if self._schema is None:
            schema = MetadataRecord.model_json_schema()
            schema["properties"]["category"]["enum"] = list(self.categories)
            self._schema = schema
        return copy.deepcopy(self._schema)

    def validate(self, document: Mapping[str, Any]) -> List[Issue]:
        """Validate a parsed metadata mapping, reporting every violation."""
        try:
            MetadataRecord.model_validate(
                document, context={"categories": self.categories}
            )
        except ValidationError as exc:
            return issues_from_errors(exc.errors())
        return []


def _parse_category(item: Any, path: Path) -> Category:
    if isinstance(item, str) and item.strip():
        return Category(id=item.strip())
    if isinstance(item, Mapping) and isinstance(item.get("id"), str) and item["id"].strip():
        name = item.get("name")
        description = item.get("description")
        return Category(
            id=item["id"].strip(),
            name=name if isinstance(name, str) else None,
            description=description if isinstance(description, str) else None,
        )
    raise RegistryError(f"{path.name} contains an invalid category entry: {item!r}")
