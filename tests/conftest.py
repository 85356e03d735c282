from __future__ import annotations

from pathlib import Path

import pytest

from entrygate.schema import SchemaRegistry
from tests._fixtures.entry_builder import CATEGORIES, EntryBuilder


@pytest.fixture
def entry_builder(tmp_path: Path) -> EntryBuilder:
    """Provide a reusable content repository rooted at the pytest tmp_path."""
    return EntryBuilder(tmp_path)


@pytest.fixture
def registry() -> SchemaRegistry:
    return SchemaRegistry.from_ids(CATEGORIES)
