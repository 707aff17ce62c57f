"""Application configuration loaded from environment variables."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError

load_dotenv()

DEFAULT_GEMINI_MODELS = "gemini-2.0-flash,gemini-1.5-flash,gemini-pro"


def _env_list(name: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    """Application settings."""
    # Gemini settings
    gemini_api_key: str
    gemini_base_url: str
    gemini_models: tuple[str, ...]
    model_cache_ttl: float

    # BigQuery settings
    gcp_project_id: str
    bigquery_dataset: str
    bigquery_location: str
    google_credentials: str  # Inline service account JSON
    google_application_credentials: str  # Path to a service account key file

    # Request and query limits
    max_message_length: int
    max_rows: int
    request_timeout: float
    query_timeout: float

    # Schema grounding
    schema_cache_ttl: float
    schema_max_fields: int
    suggestion_max_fields: int

    # Server
    cors_origins: tuple[str, ...]
    log_level: str
    environment: str

    @property
    def gemini_configured(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def bigquery_configured(self) -> bool:
        has_credentials = bool(self.google_credentials or self.google_application_credentials)
        return bool(self.gcp_project_id and self.bigquery_dataset and has_credentials)

    def require_gemini(self) -> None:
        """Raise ConfigurationError unless the Gemini API key is set."""
        if not self.gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY is not configured")

    def require_bigquery(self) -> None:
        """Raise ConfigurationError unless project, dataset and credentials are set."""
        missing = []
        if not self.gcp_project_id:
            missing.append("GCP_PROJECT_ID")
        if not self.bigquery_dataset:
            missing.append("BIGQUERY_DATASET")
        if not (self.google_credentials or self.google_application_credentials):
            missing.append("GOOGLE_CREDENTIALS or GOOGLE_APPLICATION_CREDENTIALS")
        if missing:
            raise ConfigurationError(f"BigQuery is not configured: missing {', '.join(missing)}")

    def missing_configuration(self) -> list[str]:
        """List configuration problems without raising (used for startup warnings)."""
        problems: list[str] = []
        for check in (self.require_gemini, self.require_bigquery):
            try:
                check()
            except ConfigurationError as exc:
                problems.append(str(exc))
        return problems


def get_settings() -> Settings:
    """Load settings from environment variables."""
    return Settings(
        # Gemini
        gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
        gemini_base_url=os.getenv(
            "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
        ).rstrip("/"),
        gemini_models=_env_list("GEMINI_MODELS", DEFAULT_GEMINI_MODELS),
        model_cache_ttl=float(os.getenv("MODEL_CACHE_TTL", "600")),

        # BigQuery
        gcp_project_id=os.getenv("GCP_PROJECT_ID", ""),
        bigquery_dataset=os.getenv("BIGQUERY_DATASET", ""),
        bigquery_location=os.getenv("BIGQUERY_LOCATION", "southamerica-east1"),
        google_credentials=os.getenv("GOOGLE_CREDENTIALS", ""),
        google_application_credentials=os.getenv("GOOGLE_APPLICATION_CREDENTIALS", ""),

        # Limits
        max_message_length=int(os.getenv("MAX_MESSAGE_LENGTH", "500")),
        max_rows=int(os.getenv("MAX_ROWS", "100")),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", "30")),
        query_timeout=float(os.getenv("QUERY_TIMEOUT", "60")),

        # Schema
        schema_cache_ttl=float(os.getenv("SCHEMA_CACHE_TTL", "3600")),
        schema_max_fields=int(os.getenv("SCHEMA_MAX_FIELDS", "20")),
        suggestion_max_fields=int(os.getenv("SUGGESTION_MAX_FIELDS", "6")),

        # Server
        cors_origins=_env_list("CORS_ORIGINS", "*"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        environment=os.getenv("ENVIRONMENT", "development"),
    )


# Singleton for caching settings
_settings_cache: Optional[Settings] = None


def get_cached_settings() -> Settings:
    """Get cached settings (loads once)."""
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = get_settings()
    return _settings_cache


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    global _settings_cache
    _settings_cache = None
