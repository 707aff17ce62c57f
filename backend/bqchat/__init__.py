"""BigQuery chat gateway.

Answers free-text questions about a BigQuery dataset: Gemini decides whether
a question needs data, writes a read-only SELECT for it, and narrates the
rows that BigQuery returns.

Package Structure:
    core/       - Configuration, exceptions, wire models, BigQuery warehouse
    schema/     - Schema summary types, schema cache, provider, compaction
    llm/        - Gemini client, prompts, intent, SQL generation, narration
    security/   - Read-only SQL guard and input validation
    pipeline    - Orchestration of a single chat message
    main        - FastAPI application
"""

from .core.exceptions import (
    ConfigurationError,
    GenerationError,
    GenerationRefusal,
    UnsafeQueryError,
    ValidationError,
    WarehouseError,
)
from .core.models import ChatOutcome
from .pipeline import ChatPipeline
from .security.sql_guard import is_safe

__all__ = [
    "ConfigurationError",
    "GenerationError",
    "GenerationRefusal",
    "UnsafeQueryError",
    "ValidationError",
    "WarehouseError",
    "ChatOutcome",
    "ChatPipeline",
    "is_safe",
]
