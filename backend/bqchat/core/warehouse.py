"""BigQuery access: dataset metadata and read-only query execution."""

from __future__ import annotations

from concurrent import futures
from datetime import date, datetime, time
from decimal import Decimal
import json
import logging
from typing import Any, Optional

from google.api_core import exceptions as google_exceptions
from google.cloud import bigquery
from google.oauth2 import service_account

from ..schema.cache import FieldSummary, TableSummary
from ..security.sql_guard import ensure_safe
from .config import Settings
from .exceptions import (
    ConfigurationError,
    QuerySyntaxError,
    TableNotFoundError,
    WarehouseError,
    WarehousePermissionError,
)

logger = logging.getLogger(__name__)


def _normalize_value(value: Any) -> Any:
    """Normalize warehouse values for JSON serialization."""
    if value is None:
        return None
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, bytes):
        # Try to decode as UTF-8, otherwise return hex representation
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return value.hex()
    if isinstance(value, dict):
        return {key: _normalize_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize_value(item) for item in value]
    return value


def translate_error(exc: Exception) -> WarehouseError:
    """Map a BigQuery failure onto a user-facing WarehouseError."""
    message = str(exc)
    if "Not found: Table" in message:
        return TableNotFoundError("Tabela não encontrada no BigQuery. Verifique o nome da tabela.")
    if "Syntax error" in message:
        return QuerySyntaxError("Erro de sintaxe na query SQL. Por favor, reformule sua pergunta.")
    if "Permission denied" in message or "Access Denied" in message:
        return WarehousePermissionError(
            "Sem permissão para acessar os dados. "
            "Verifique as credenciais e permissões da service account."
        )
    return WarehouseError(f"Erro ao consultar dados: {type(exc).__name__}")


def load_credentials(settings: Settings) -> service_account.Credentials:
    """Build service account credentials from inline JSON or a key file.

    Raises:
        ConfigurationError: If no credentials are configured or they are invalid
    """
    if settings.google_credentials:
        try:
            info = json.loads(settings.google_credentials)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse GOOGLE_CREDENTIALS: {e.msg}")
            raise ConfigurationError("GOOGLE_CREDENTIALS is not valid JSON") from e
        return service_account.Credentials.from_service_account_info(info)

    if settings.google_application_credentials:
        try:
            return service_account.Credentials.from_service_account_file(
                settings.google_application_credentials
            )
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load credentials file: {e}")
            raise ConfigurationError("GOOGLE_APPLICATION_CREDENTIALS could not be loaded") from e

    raise ConfigurationError("No Google Cloud credentials configured")


class BigQueryWarehouse:
    """Warehouse collaborator for one BigQuery dataset.

    The client is created on first use so the application can start without
    credentials; every call re-checks the configuration.
    """

    def __init__(self, settings: Settings, client: Optional[Any] = None) -> None:
        self.settings = settings
        self._client = client

    @property
    def project_id(self) -> str:
        return self.settings.gcp_project_id

    @property
    def dataset(self) -> str:
        return self.settings.bigquery_dataset

    @property
    def dataset_ref(self) -> str:
        return f"{self.project_id}.{self.dataset}"

    def client(self) -> Any:
        if self._client is not None:
            return self._client
        self.settings.require_bigquery()
        credentials = load_credentials(self.settings)
        self._client = bigquery.Client(
            project=self.project_id,
            credentials=credentials,
            location=self.settings.bigquery_location,
        )
        logger.info(f"BigQuery client initialized for project {self.project_id}")
        return self._client

    def list_tables(self) -> list[str]:
        try:
            tables = list(self.client().list_tables(self.dataset_ref))
        except google_exceptions.GoogleAPIError as e:
            logger.error(f"Failed to list tables in {self.dataset_ref}: {e}")
            raise WarehouseError("Não foi possível listar as tabelas do dataset") from e
        return [table.table_id for table in tables]

    def get_table_metadata(self, name: str) -> TableSummary:
        try:
            table = self.client().get_table(f"{self.dataset_ref}.{name}")
        except google_exceptions.GoogleAPIError as e:
            logger.error(f"Failed to read schema of table {name}: {e}")
            raise WarehouseError(f"Não foi possível obter informações da tabela {name}") from e
        return TableSummary(
            name=name,
            fields=[
                FieldSummary(
                    name=field.name,
                    type=str(field.field_type),
                    mode=field.mode,
                    description=field.description or "",
                )
                for field in table.schema
            ],
        )

    def execute_query(self, sql: str, location: str | None = None) -> list[dict[str, Any]]:
        """Run a read-only SELECT and return rows as dictionaries.

        Raises:
            UnsafeQueryError: If the statement fails the SQL guard
            WarehouseError: If BigQuery rejects or fails the query
        """
        ensure_safe(sql)
        client = self.client()
        target_location = location or self.settings.bigquery_location

        logger.info(f"Executing query (location={target_location}): {sql[:200]}")

        try:
            job = client.query(sql, location=target_location)
            result = job.result(timeout=self.settings.query_timeout)
            rows = [
                {key: _normalize_value(value) for key, value in row.items()}
                for row in result
            ]
        except (google_exceptions.GoogleAPIError, futures.TimeoutError, TimeoutError) as e:
            logger.error(f"BigQuery query failed: {e}")
            raise translate_error(e) from e

        logger.info(f"Query returned {len(rows)} rows (location: {target_location})")
        return rows

    def test_connection(self) -> bool:
        """Check that the configured dataset exists and is reachable."""
        try:
            self.client().get_dataset(self.dataset_ref)
        except google_exceptions.NotFound as e:
            raise WarehouseError(f"Dataset {self.dataset} não encontrado") from e
        except google_exceptions.GoogleAPIError as e:
            logger.error(f"BigQuery connection check failed: {e}")
            raise translate_error(e) from e
        logger.info("BigQuery connection OK")
        return True

    def service_account_email(self) -> str | None:
        if self.settings.google_credentials:
            try:
                return json.loads(self.settings.google_credentials).get("client_email")
            except (json.JSONDecodeError, AttributeError):
                return None
        credentials = getattr(self._client, "_credentials", None)
        return getattr(credentials, "service_account_email", None)
