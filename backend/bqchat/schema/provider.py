"""Dataset schema access backed by the warehouse metadata service."""

from __future__ import annotations

import logging
import time
from typing import Callable, Protocol

from ..core.exceptions import NotFoundError
from .cache import SchemaCache, SchemaSummary, TableSummary

logger = logging.getLogger(__name__)


class SchemaSource(Protocol):
    project_id: str
    dataset: str

    def list_tables(self) -> list[str]: ...

    def get_table_metadata(self, name: str) -> TableSummary: ...


class SchemaProvider:
    def __init__(
        self,
        source: SchemaSource,
        ttl: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.source = source
        self.cache = SchemaCache(self.fetch_dataset_schema, ttl=ttl, clock=clock)

    def fetch_dataset_schema(self) -> SchemaSummary:
        """Fetch metadata for every table in the dataset.

        Tables whose metadata cannot be read are skipped; a failure to list
        the tables themselves propagates.
        """
        table_names = self.source.list_tables()
        schema = SchemaSummary(dataset=self.source.dataset, project=self.source.project_id)
        for name in table_names:
            try:
                schema.tables[name] = self.source.get_table_metadata(name)
            except Exception as exc:
                logger.warning(f"Skipping table {name}: {exc}")
        logger.info(f"Fetched schema for {len(schema.tables)}/{len(table_names)} tables")
        return schema

    def get_schema(self) -> SchemaSummary:
        return self.cache.get()

    def get_table(self, name: str) -> TableSummary:
        table = self.get_schema().table_info(name)
        if table is None:
            raise NotFoundError(f"Table '{name}' not found in dataset {self.source.dataset}")
        return table

    def list_tables(self) -> list[str]:
        return self.get_schema().table_names()

    def invalidate(self) -> None:
        self.cache.invalidate()
        logger.info("Schema cache cleared")
