"""Validation of incoming chat messages."""

from __future__ import annotations

import logging
import re
from typing import Any

from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)

# Maximum message length accepted by the chat endpoint
MAX_MESSAGE_LENGTH = 500

# Prompt injection markers, English and Portuguese
SUSPICIOUS_PATTERNS = [
    r"ignore\s+(previous|all|above)\s+instructions?",
    r"ignore\s+(as\s+)?instru[cç][oõ]es\s+anteriores",
    r"disregard\s+(previous|all|above)",
    r"forget\s+(everything|all)",
    r"new\s+instructions?:",
    r"system\s*:",
    r"assistant\s*:",
]

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def validate_question(message: Any, max_length: int = MAX_MESSAGE_LENGTH) -> str:
    """Validate a chat message before any LLM or warehouse call.

    Raises:
        ValidationError: If the message is not text, is blank, or is too long
    """
    if not isinstance(message, str) or not message.strip():
        raise ValidationError("Mensagem inválida ou vazia")

    if len(message) > max_length:
        raise ValidationError(f"Mensagem muito longa. Máximo {max_length} caracteres.")

    cleaned = _CONTROL_CHARS_RE.sub("", message).strip()
    if not cleaned:
        raise ValidationError("Mensagem inválida ou vazia")

    # Logged only; the message is still answered
    for pattern in SUSPICIOUS_PATTERNS:
        if re.search(pattern, cleaned, re.IGNORECASE):
            logger.warning(f"Suspicious pattern detected in user input: {pattern}")
            break

    return cleaned
