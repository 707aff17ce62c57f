"""Conversational replies for questions that need no data."""

from __future__ import annotations

import logging
from typing import Any

from .prompts import GENERAL_SYSTEM

logger = logging.getLogger(__name__)


class ConversationResponder:
    def __init__(self, llm: Any) -> None:
        self.llm = llm

    def reply(self, question: str) -> str:
        content = self.llm.complete(
            question,
            system_instruction=GENERAL_SYSTEM,
            temperature=0.7,
            max_output_tokens=600,
        )
        answer = content.strip()
        logger.info(f"General reply length: {len(answer)} chars")
        return answer
