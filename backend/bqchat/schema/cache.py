from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
import logging
import time
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class FieldSummary:
    name: str
    type: str
    mode: str | None = None
    description: str | None = None


@dataclass
class TableSummary:
    name: str
    fields: list[FieldSummary] = field(default_factory=list)

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]


@dataclass
class SchemaSummary:
    dataset: str
    project: str = ""
    tables: dict[str, TableSummary] = field(default_factory=dict)

    def table_names(self) -> list[str]:
        return list(self.tables.keys())

    def table_info(self, name: str) -> TableSummary | None:
        return self.tables.get(name)

    def qualified_name(self, table: str) -> str:
        return f"{self.project}.{self.dataset}.{table}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "dataset": self.dataset,
            "project": self.project,
            "tables": {name: asdict(table) for name, table in self.tables.items()},
        }


class SchemaCache:
    """Single-slot cache for the dataset schema.

    The slot is loaded lazily and considered stale after ``ttl`` seconds. When
    a refresh fails and an older schema is held, the older schema is served.
    Concurrent refreshes overwrite the slot; the last writer wins.
    """

    def __init__(
        self,
        fetch: Callable[[], SchemaSummary],
        ttl: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetch = fetch
        self.ttl = ttl
        self._clock = clock
        self._schema: Optional[SchemaSummary] = None
        self._fetched_at: float | None = None
        self.loaded_at: datetime | None = None

    @property
    def schema(self) -> SchemaSummary | None:
        return self._schema

    @property
    def is_stale(self) -> bool:
        if self._schema is None or self._fetched_at is None:
            return True
        return self._clock() - self._fetched_at >= self.ttl

    def get(self) -> SchemaSummary:
        if not self.is_stale:
            return self._schema  # type: ignore[return-value]
        return self.refresh()

    def refresh(self) -> SchemaSummary:
        try:
            schema = self._fetch()
        except Exception as exc:
            if self._schema is not None:
                logger.warning(f"Schema refresh failed, serving stale schema: {exc}")
                return self._schema
            raise
        self._schema = schema
        self._fetched_at = self._clock()
        self.loaded_at = datetime.now(timezone.utc)
        logger.info(f"Schema cached: {len(schema.tables)} tables")
        return schema

    def invalidate(self) -> None:
        self._schema = None
        self._fetched_at = None
        self.loaded_at = None
