"""Schema compaction for prompt grounding.

The full dataset schema can be too large for a prompt. Both the SQL generator
and the suggestion generator send a compacted copy that keeps at most
``max_fields_per_table`` fields per table, in the order the warehouse reports
them.
"""

from __future__ import annotations

from typing import Any

from .cache import SchemaSummary


def compact_schema(
    schema: SchemaSummary,
    max_fields_per_table: int,
    include_types: bool = True,
) -> dict[str, Any]:
    """Build a bounded, JSON-ready summary of the schema.

    With ``include_types`` each table maps to ``{"fields": [{"name", "type"}]}``;
    without it each table maps to a plain list of field names.
    """
    limit = max(0, max_fields_per_table)
    tables: dict[str, Any] = {}
    for name, table in schema.tables.items():
        fields = table.fields[:limit]
        if include_types:
            tables[name] = {"fields": [{"name": f.name, "type": f.type} for f in fields]}
        else:
            tables[name] = [f.name for f in fields]

    out: dict[str, Any] = {"dataset": schema.dataset}
    if include_types:
        out["project"] = schema.project
    out["tables"] = tables
    return out
