"""Shared fixtures and fakes for the test suite."""

from __future__ import annotations

import os
import sys
from dataclasses import replace
from typing import Any

import pytest

# Add backend to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from bqchat.core.config import Settings
from bqchat.schema.cache import FieldSummary, SchemaSummary, TableSummary


BASE_SETTINGS = Settings(
    gemini_api_key="test-key",
    gemini_base_url="https://gemini.test/v1beta",
    gemini_models=("gemini-2.0-flash", "gemini-1.5-flash", "gemini-pro"),
    model_cache_ttl=600.0,
    gcp_project_id="meu-projeto",
    bigquery_dataset="estagio",
    bigquery_location="southamerica-east1",
    google_credentials='{"client_email": "chat@meu-projeto.iam.gserviceaccount.com"}',
    google_application_credentials="",
    max_message_length=500,
    max_rows=100,
    request_timeout=5.0,
    query_timeout=10.0,
    schema_cache_ttl=3600.0,
    schema_max_fields=20,
    suggestion_max_fields=6,
    cors_origins=("*",),
    log_level="INFO",
    environment="test",
)


def make_settings(**overrides: Any) -> Settings:
    return replace(BASE_SETTINGS, **overrides)


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeLLM:
    """Scripted LLM: each call pops the next response (or raises it)."""

    def __init__(self, responses: list[Any] | None = None) -> None:
        self.responses = list(responses or [])
        self.calls: list[dict[str, Any]] = []

    def complete(
        self,
        prompt: str,
        system_instruction: str | None = None,
        response_mime_type: str | None = None,
        temperature: float = 0.2,
        max_output_tokens: int = 1024,
    ) -> str:
        self.calls.append(
            {
                "prompt": prompt,
                "system_instruction": system_instruction,
                "response_mime_type": response_mime_type,
            }
        )
        if not self.responses:
            raise AssertionError("Unexpected LLM call")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeWarehouse:
    """In-memory schema source and query executor."""

    def __init__(
        self,
        tables: dict[str, Any] | None = None,
        rows: list[dict[str, Any]] | None = None,
        query_error: Exception | None = None,
    ) -> None:
        self.project_id = "meu-projeto"
        self.dataset = "estagio"
        self.tables = tables if tables is not None else {}
        self.rows = rows if rows is not None else []
        self.query_error = query_error
        self.list_calls = 0
        self.list_error: Exception | None = None
        self.executed: list[str] = []

    def list_tables(self) -> list[str]:
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return list(self.tables.keys())

    def get_table_metadata(self, name: str) -> TableSummary:
        table = self.tables[name]
        if isinstance(table, Exception):
            raise table
        return table

    def execute_query(self, sql: str, location: str | None = None) -> list[dict[str, Any]]:
        self.executed.append(sql)
        if self.query_error is not None:
            raise self.query_error
        return self.rows

    def test_connection(self) -> bool:
        return True

    def service_account_email(self) -> str | None:
        return "chat@meu-projeto.iam.gserviceaccount.com"


def professores_table() -> TableSummary:
    return TableSummary(
        name="professores",
        fields=[
            FieldSummary(name="id", type="INTEGER", mode="REQUIRED"),
            FieldSummary(name="nome", type="STRING", mode="NULLABLE", description="Nome completo"),
            FieldSummary(name="estagio_concluido", type="BOOLEAN", mode="NULLABLE"),
            FieldSummary(name="nota_final", type="FLOAT", mode="NULLABLE"),
        ],
    )


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def schema() -> SchemaSummary:
    return SchemaSummary(
        dataset="estagio",
        project="meu-projeto",
        tables={"professores": professores_table()},
    )


@pytest.fixture
def warehouse() -> FakeWarehouse:
    return FakeWarehouse(tables={"professores": professores_table()})
