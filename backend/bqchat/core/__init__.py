"""Core infrastructure module.

Contains configuration, exceptions, wire models and the BigQuery warehouse.
"""

from .config import (
    Settings,
    get_settings,
    get_cached_settings,
    clear_settings_cache,
)
from .exceptions import (
    ConfigurationError,
    GenerationError,
    GenerationRefusal,
    LLMError,
    ModelUnavailableError,
    NotFoundError,
    QuerySyntaxError,
    TableNotFoundError,
    TransientServiceError,
    UnsafeQueryError,
    ValidationError,
    WarehouseError,
    WarehousePermissionError,
)
from .models import ChatOutcome, ChatRequest, HealthResponse, SuggestionsResponse
from .warehouse import BigQueryWarehouse, load_credentials, translate_error

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "get_cached_settings",
    "clear_settings_cache",
    # Exceptions
    "ConfigurationError",
    "GenerationError",
    "GenerationRefusal",
    "LLMError",
    "ModelUnavailableError",
    "NotFoundError",
    "QuerySyntaxError",
    "TableNotFoundError",
    "TransientServiceError",
    "UnsafeQueryError",
    "ValidationError",
    "WarehouseError",
    "WarehousePermissionError",
    # Models
    "ChatOutcome",
    "ChatRequest",
    "HealthResponse",
    "SuggestionsResponse",
    # Warehouse
    "BigQueryWarehouse",
    "load_credentials",
    "translate_error",
]
