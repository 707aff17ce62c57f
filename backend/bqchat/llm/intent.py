"""Decides whether a question needs a warehouse lookup."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Sequence

from .client import extract_json
from .prompts import INTENT_SYSTEM, INTENT_USER

logger = logging.getLogger(__name__)

# A strategy returns True/False when it can decide, or None to defer.
IntentStrategy = Callable[[str], Optional[bool]]


def parse_intent_reply(text: str) -> bool | None:
    """Read the ``requires_lookup`` flag from a JSON reply, or None."""
    data = extract_json(text)
    if not isinstance(data, dict):
        return None
    value = data.get("requires_lookup")
    if isinstance(value, bool):
        return value
    return None


class IntentClassifier:
    """Runs intent strategies in order; the first decision wins.

    When every strategy fails or defers, the question is treated as needing
    a lookup.
    """

    def __init__(self, llm: Any, strategies: Sequence[IntentStrategy] | None = None) -> None:
        self.llm = llm
        self.strategies: list[IntentStrategy] = list(strategies) if strategies is not None else [self.classify_with_llm]

    def classify_with_llm(self, question: str) -> bool | None:
        content = self.llm.complete(
            INTENT_USER.format(question=question),
            system_instruction=INTENT_SYSTEM,
            response_mime_type="application/json",
            temperature=0.0,
            max_output_tokens=50,
        )
        decision = parse_intent_reply(content)
        if decision is None:
            logger.warning(f"Could not parse intent reply: {content[:100]}")
        return decision

    def requires_lookup(self, question: str) -> bool:
        for strategy in self.strategies:
            name = getattr(strategy, "__name__", repr(strategy))
            try:
                decision = strategy(question)
            except Exception as exc:
                logger.warning(f"Intent strategy {name} failed: {exc}")
                continue
            if decision is not None:
                logger.info(f"Intent strategy {name}: requires_lookup={decision}")
                return decision
        logger.info("No intent strategy decided, assuming a lookup is needed")
        return True
