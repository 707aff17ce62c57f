"""SQL query generation with schema grounding.

Flow:
1. Compact the dataset schema so the prompt stays bounded
2. Ask the model for a single BigQuery SELECT under fixed rules
3. Strip code fences, detect the refusal sentinel, enforce the row limit
4. Run the result through the SQL guard before handing it back

Only one model call is made per question; callers own any retry policy.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from ..core.exceptions import GenerationError, GenerationRefusal, LLMError
from ..schema.cache import SchemaSummary
from ..schema.compact import compact_schema
from ..security.sql_guard import apply_row_limit, ensure_safe, extract_sql
from .prompts import REFUSAL_SENTINEL, SQL_GENERATION_SYSTEM, SQL_GENERATION_USER

logger = logging.getLogger(__name__)

DEFAULT_MAX_FIELDS = 20
DEFAULT_MAX_ROWS = 100

# Stripped from a reply before the refusal check
_QUOTE_CHARS = "\"'`“” \t\r\n"

_REFUSAL_RE = re.compile(
    r"^\s*(ERRO\b|ERROR\b|I\s+cannot\s+answer|cannot\s+answer|n[ãa]o\s+[ée]\s+poss[íi]vel)",
    re.IGNORECASE,
)


def unquote_reply(text: str) -> str:
    return (text or "").strip(_QUOTE_CHARS)


def is_refusal(text: str) -> bool:
    """True when a reply starts with the model's refusal sentinel, quoted or not."""
    return bool(_REFUSAL_RE.match(unquote_reply(text)))


def build_sql_prompt(
    question: str,
    schema: SchemaSummary,
    max_fields: int = DEFAULT_MAX_FIELDS,
    max_rows: int = DEFAULT_MAX_ROWS,
) -> tuple[str, str]:
    """Return (system_instruction, user_prompt) for SQL generation."""
    small_schema = compact_schema(schema, max_fields, include_types=True)
    system = SQL_GENERATION_SYSTEM.format(
        refusal=REFUSAL_SENTINEL,
        project=schema.project,
        dataset=schema.dataset,
        max_rows=max_rows,
    )
    user = SQL_GENERATION_USER.format(
        schema=json.dumps(small_schema, ensure_ascii=False, indent=2),
        question=question,
    )
    return system, user


class SQLGenerator:
    def __init__(
        self,
        llm: Any,
        max_fields: int = DEFAULT_MAX_FIELDS,
        max_rows: int = DEFAULT_MAX_ROWS,
    ) -> None:
        self.llm = llm
        self.max_fields = max_fields
        self.max_rows = max_rows

    def generate(self, question: str, schema: SchemaSummary) -> str:
        """Generate a validated SELECT for ``question``.

        Raises:
            GenerationRefusal: The model signalled that no query is possible
            UnsafeQueryError: The candidate failed the SQL guard
            GenerationError: The model call failed or produced no SQL
        """
        logger.info(f"Generating SQL for question: {question[:100]}...")

        system, user = build_sql_prompt(question, schema, self.max_fields, self.max_rows)

        try:
            content = self.llm.complete(
                user,
                system_instruction=system,
                temperature=0.0,
                max_output_tokens=1024,
            )
        except LLMError as exc:
            logger.error(f"LLM error during SQL generation: {exc}")
            raise GenerationError("Erro ao processar sua pergunta com IA") from exc

        sql = extract_sql(content)
        logger.info(f"Generated SQL length: {len(sql)} chars")
        logger.debug(f"Generated SQL: {sql[:200]}...")

        if not sql:
            raise GenerationError("O modelo não retornou uma consulta SQL")

        if is_refusal(sql):
            logger.info("Model refused to generate SQL")
            raise GenerationRefusal(unquote_reply(sql))

        sql = apply_row_limit(sql, self.max_rows)
        return ensure_safe(sql)
