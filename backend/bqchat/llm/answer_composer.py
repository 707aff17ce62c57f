"""Narration of query results."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Sequence

from .prompts import ANSWER_SYSTEM, ANSWER_USER

logger = logging.getLogger(__name__)


class SafeJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles warehouse types safely."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, (bytes, bytearray)):
            try:
                return obj.decode('utf-8')
            except UnicodeDecodeError:
                return obj.hex()
        return str(obj)

# Rows beyond this are summarized by count only
MAX_ROWS_FOR_LLM = 50


def dump_rows(rows: Sequence[dict[str, Any]]) -> str:
    """Deterministic rendering of rows, used when narration is unavailable."""
    return json.dumps(list(rows), ensure_ascii=False, indent=2, sort_keys=True, cls=SafeJSONEncoder)


class ResponseFormatter:
    """Narrates query results; never fails from the caller's point of view."""

    def __init__(self, llm: Any, max_rows_for_llm: int = MAX_ROWS_FOR_LLM) -> None:
        self.llm = llm
        self.max_rows_for_llm = max_rows_for_llm

    def format(self, question: str, rows: Sequence[dict[str, Any]]) -> str:
        truncated = len(rows) > self.max_rows_for_llm
        sample_rows = list(rows[: self.max_rows_for_llm])

        if truncated:
            logger.info(f"Truncating results from {len(rows)} to {self.max_rows_for_llm} rows for LLM")

        truncation_note = ""
        if truncated:
            truncation_note = f"\n\nNote: showing the first {self.max_rows_for_llm} of {len(rows)} rows."

        prompt = ANSWER_USER.format(
            question=question,
            data=json.dumps(sample_rows, ensure_ascii=False, indent=2, cls=SafeJSONEncoder),
            truncation_note=truncation_note,
        )

        logger.info(f"Composing answer for {len(sample_rows)} rows")

        try:
            content = self.llm.complete(
                prompt,
                system_instruction=ANSWER_SYSTEM,
                temperature=0.3,
                max_output_tokens=900,
            )
        except Exception as exc:
            logger.error(f"Answer composition failed, returning raw rows: {exc}")
            return dump_rows(rows)

        answer = content.strip()
        if not answer:
            logger.warning("Empty answer from LLM, returning raw rows")
            return dump_rows(rows)

        logger.info(f"Composed answer length: {len(answer)} chars")
        return answer
