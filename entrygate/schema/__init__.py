"""Metadata schema and category registry."""

from .metadata import MetadataParseError, MetadataRecord, load_metadata
from .registry import Category, SchemaRegistry

__all__ = [
    "Category",
    "MetadataParseError",
    "MetadataRecord",
    "SchemaRegistry",
    "load_metadata",
]
