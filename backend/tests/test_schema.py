"""Tests for schema caching, the schema provider and compaction."""

import pytest

from bqchat.core.exceptions import NotFoundError, WarehouseError
from bqchat.schema import SchemaCache, SchemaProvider, compact_schema
from bqchat.schema.cache import FieldSummary, SchemaSummary, TableSummary

from conftest import FakeWarehouse, professores_table


class TestSchemaCache:
    """TTL and stale fallback behaviour."""

    def test_loads_lazily(self, clock):
        """Nothing is fetched until the first get."""
        calls = []
        cache = SchemaCache(lambda: calls.append(1) or SchemaSummary(dataset="d"), ttl=60, clock=clock)
        assert calls == []
        cache.get()
        assert calls == [1]

    def test_second_get_within_ttl_does_not_fetch(self, clock):
        """Repeated reads inside the TTL hit the cache."""
        calls = []
        cache = SchemaCache(lambda: calls.append(1) or SchemaSummary(dataset="d"), ttl=60, clock=clock)
        first = cache.get()
        clock.advance(59)
        second = cache.get()
        assert first is second
        assert len(calls) == 1

    def test_refetches_after_ttl(self, clock):
        """A read after the TTL refetches."""
        calls = []
        cache = SchemaCache(lambda: calls.append(1) or SchemaSummary(dataset="d"), ttl=60, clock=clock)
        cache.get()
        clock.advance(60)
        cache.get()
        assert len(calls) == 2

    def test_stale_copy_served_when_refresh_fails(self, clock):
        """A failed refresh falls back to the previous schema."""
        results = [SchemaSummary(dataset="d"), RuntimeError("boom")]

        def fetch():
            item = results.pop(0)
            if isinstance(item, Exception):
                raise item
            return item

        cache = SchemaCache(fetch, ttl=60, clock=clock)
        first = cache.get()
        clock.advance(120)
        assert cache.get() is first

    def test_first_fetch_failure_propagates(self, clock):
        """With nothing cached a fetch error is raised."""
        def fetch():
            raise RuntimeError("boom")

        cache = SchemaCache(fetch, ttl=60, clock=clock)
        with pytest.raises(RuntimeError):
            cache.get()

    def test_invalidate_forces_refetch(self, clock):
        """invalidate empties the slot."""
        calls = []
        cache = SchemaCache(lambda: calls.append(1) or SchemaSummary(dataset="d"), ttl=60, clock=clock)
        cache.get()
        cache.invalidate()
        assert cache.schema is None
        assert cache.loaded_at is None
        cache.get()
        assert len(calls) == 2


class TestSchemaProvider:
    """Schema assembly from a warehouse source."""

    def test_builds_schema_from_source(self, warehouse, clock):
        """Every listed table is described."""
        provider = SchemaProvider(warehouse, ttl=3600, clock=clock)
        schema = provider.get_schema()
        assert schema.dataset == "estagio"
        assert schema.project == "meu-projeto"
        assert schema.table_names() == ["professores"]
        assert schema.qualified_name("professores") == "meu-projeto.estagio.professores"

    def test_two_reads_one_listing(self, warehouse, clock):
        """Two reads within the TTL list tables once."""
        provider = SchemaProvider(warehouse, ttl=3600, clock=clock)
        provider.get_schema()
        provider.get_schema()
        assert warehouse.list_calls == 1

    def test_failing_table_skipped(self, clock):
        """A table whose metadata fails is left out, others are kept."""
        source = FakeWarehouse(
            tables={
                "professores": professores_table(),
                "quebrada": WarehouseError("metadata unavailable"),
            }
        )
        provider = SchemaProvider(source, ttl=3600, clock=clock)
        assert provider.list_tables() == ["professores"]

    def test_listing_failure_without_cache_propagates(self, clock):
        """A failure to list tables with no cached schema is raised."""
        source = FakeWarehouse()
        source.list_error = WarehouseError("Não foi possível listar as tabelas do dataset")
        provider = SchemaProvider(source, ttl=3600, clock=clock)
        with pytest.raises(WarehouseError):
            provider.get_schema()

    def test_get_table(self, warehouse, clock):
        """get_table returns the table summary."""
        provider = SchemaProvider(warehouse, ttl=3600, clock=clock)
        assert provider.get_table("professores").field_names()[0] == "id"

    def test_get_unknown_table(self, warehouse, clock):
        """Unknown tables raise NotFoundError."""
        provider = SchemaProvider(warehouse, ttl=3600, clock=clock)
        with pytest.raises(NotFoundError):
            provider.get_table("alunos")

    def test_invalidate(self, warehouse, clock):
        """invalidate causes the next read to list tables again."""
        provider = SchemaProvider(warehouse, ttl=3600, clock=clock)
        provider.get_schema()
        provider.invalidate()
        provider.get_schema()
        assert warehouse.list_calls == 2

    def test_to_dict(self, schema):
        """to_dict is JSON-ready and keeps field metadata."""
        data = schema.to_dict()
        fields = data["tables"]["professores"]["fields"]
        assert fields[1] == {
            "name": "nome",
            "type": "STRING",
            "mode": "NULLABLE",
            "description": "Nome completo",
        }


class TestCompactSchema:
    """Bounded schema summaries for prompts."""

    def _wide_schema(self, width):
        fields = [FieldSummary(name=f"col_{i}", type="STRING") for i in range(width)]
        return SchemaSummary(
            dataset="estagio",
            project="meu-projeto",
            tables={"largo": TableSummary(name="largo", fields=fields)},
        )

    def test_truncates_fields_in_order(self):
        """Only the first N fields are kept, in source order."""
        compact = compact_schema(self._wide_schema(30), 20)
        fields = compact["tables"]["largo"]["fields"]
        assert len(fields) == 20
        assert fields[0] == {"name": "col_0", "type": "STRING"}
        assert fields[-1]["name"] == "col_19"
        assert compact["project"] == "meu-projeto"

    def test_names_only(self):
        """Without types each table is a list of field names."""
        compact = compact_schema(self._wide_schema(10), 6, include_types=False)
        assert compact == {
            "dataset": "estagio",
            "tables": {"largo": ["col_0", "col_1", "col_2", "col_3", "col_4", "col_5"]},
        }

    def test_narrow_table_unchanged(self, schema):
        """Tables under the limit keep every field."""
        compact = compact_schema(schema, 20)
        assert len(compact["tables"]["professores"]["fields"]) == 4
