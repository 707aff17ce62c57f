"""Chat pipeline: intent → schema → SQL → warehouse → narration.

``ChatPipeline.process_message`` is the only place where failures become
structured outcomes; the components it calls raise.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from .core.exceptions import (
    ConfigurationError,
    GenerationError,
    GenerationRefusal,
    TransientServiceError,
    UnsafeQueryError,
    WarehouseError,
)
from .core.models import ChatOutcome
from .schema.cache import SchemaSummary

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Erro ao processar sua pergunta com IA"
UNSAFE_QUERY_MESSAGE = "A consulta gerada não é permitida. Apenas consultas SELECT são aceitas."
NOT_CONFIGURED_MESSAGE = "O serviço de chat não está configurado corretamente."


class QueryExecutor(Protocol):
    def execute_query(self, sql: str, location: str | None = None) -> list[dict[str, Any]]: ...


class SchemaAccess(Protocol):
    def get_schema(self) -> SchemaSummary: ...


class ChatPipeline:
    def __init__(
        self,
        classifier: Any,
        generator: Any,
        executor: QueryExecutor,
        formatter: Any,
        conversation: Any,
        schema_provider: SchemaAccess,
    ) -> None:
        self.classifier = classifier
        self.generator = generator
        self.executor = executor
        self.formatter = formatter
        self.conversation = conversation
        self.schema_provider = schema_provider

    def process_message(self, question: str) -> ChatOutcome:
        try:
            return self._process(question)
        except GenerationRefusal as exc:
            logger.info(f"Question refused by SQL model: {exc}")
            return ChatOutcome.refusal(str(exc))
        except UnsafeQueryError as exc:
            logger.warning(f"Generated SQL rejected: {exc}")
            return ChatOutcome.failure(UNSAFE_QUERY_MESSAGE, error="unsafe_query")
        except WarehouseError as exc:
            logger.error(f"Warehouse error: {exc}", exc_info=exc.__cause__ is not None)
            return ChatOutcome.failure(str(exc), error=type(exc).__name__)
        except ConfigurationError as exc:
            logger.error(f"Configuration error: {exc}")
            return ChatOutcome.failure(NOT_CONFIGURED_MESSAGE, error="configuration_error")
        except Exception as exc:
            logger.exception(f"Failed to process message: {exc}")
            return ChatOutcome.failure(GENERIC_FAILURE_MESSAGE, error=_coarse_error(exc))

    def _process(self, question: str) -> ChatOutcome:
        logger.info(f"Processing message: {question[:100]}...")

        # Stage 1: Intent
        if not self.classifier.requires_lookup(question):
            answer = self.conversation.reply(question)
            logger.info("General reply complete")
            return ChatOutcome.general(answer)

        # Stage 2: Schema + SQL generation
        schema = self.schema_provider.get_schema()
        sql = self.generator.generate(question, schema)

        # Stage 3: Execution
        rows = self.executor.execute_query(sql)
        logger.info(f"Query returned {len(rows)} rows")

        # Stage 4: Narration
        answer = self.formatter.format(question, rows)

        logger.info("Data reply complete")
        return ChatOutcome.data_result(answer, sql, rows)


def _coarse_error(exc: Exception) -> str:
    """Short, non-internal description of a failure for the caller."""
    if isinstance(exc, GenerationError):
        return str(exc) or "generation_error"
    if isinstance(exc, TransientServiceError):
        return "service_unavailable"
    return "internal_error"
