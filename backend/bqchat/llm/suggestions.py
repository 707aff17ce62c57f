"""Suggested questions generated from the dataset schema."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
from typing import Any, Union

from ..schema.cache import SchemaSummary
from ..schema.compact import compact_schema
from .client import strip_code_fences
from .prompts import SUGGESTIONS_PROMPT

logger = logging.getLogger(__name__)

DEFAULT_SUGGESTIONS = [
    "Quantos registros existem no total?",
    "Mostre os dados mais recentes",
    "Qual é a distribuição por categoria?",
    "Quais são os principais indicadores?",
]


@dataclass
class ArrayReply:
    items: list[str] = field(default_factory=list)


@dataclass
class WrappedReply:
    groups: dict[str, list[str]] = field(default_factory=dict)


SuggestionsReply = Union[ArrayReply, WrappedReply]


def _as_strings(values: Any) -> list[str]:
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, list):
        return []
    return [str(v).strip() for v in values if isinstance(v, (str, int, float)) and str(v).strip()]


def parse_suggestions_reply(text: str) -> SuggestionsReply:
    """Parse a model reply into one of the two accepted shapes.

    A JSON array becomes ArrayReply; a JSON object mapping keys to lists
    becomes WrappedReply. Anything else is kept verbatim as a single item.
    """
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        logger.warning("Suggestions reply is not JSON, returning it as a single suggestion")
        return ArrayReply([cleaned] if cleaned else [])

    if isinstance(data, list):
        return ArrayReply(_as_strings(data))
    if isinstance(data, dict):
        return WrappedReply({str(key): _as_strings(value) for key, value in data.items()})
    return ArrayReply(_as_strings(data))


def normalize_suggestions(reply: SuggestionsReply) -> list[str]:
    if isinstance(reply, ArrayReply):
        return list(reply.items)
    suggestions: list[str] = []
    for items in reply.groups.values():
        suggestions.extend(items)
    return suggestions


class SuggestionGenerator:
    def __init__(self, llm: Any, max_fields: int = 6, count: int = 4) -> None:
        self.llm = llm
        self.max_fields = max_fields
        self.count = count

    def generate(self, schema: SchemaSummary) -> list[str]:
        small_schema = compact_schema(schema, self.max_fields, include_types=False)
        prompt = SUGGESTIONS_PROMPT.format(
            count=self.count,
            schema=json.dumps(small_schema, ensure_ascii=False, indent=2),
        )
        content = self.llm.complete(
            prompt,
            response_mime_type="application/json",
            temperature=0.8,
            max_output_tokens=400,
        )
        suggestions = normalize_suggestions(parse_suggestions_reply(content))
        logger.info(f"Generated {len(suggestions)} suggestions")
        return suggestions
