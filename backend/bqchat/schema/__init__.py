"""Schema management module.

Contains the schema summary types, the single-slot schema cache, the
warehouse-backed schema provider and prompt compaction.
"""

from .cache import FieldSummary, SchemaCache, SchemaSummary, TableSummary
from .compact import compact_schema
from .provider import SchemaProvider, SchemaSource

__all__ = [
    "FieldSummary",
    "SchemaCache",
    "SchemaSummary",
    "TableSummary",
    "compact_schema",
    "SchemaProvider",
    "SchemaSource",
]
