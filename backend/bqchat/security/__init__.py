"""Security and validation module.

Contains the read-only SQL guard and chat input validation.
"""

from .input_guard import MAX_MESSAGE_LENGTH, validate_question
from .sql_guard import (
    FORBIDDEN_KEYWORDS,
    apply_row_limit,
    check_sql,
    ensure_safe,
    extract_sql,
    is_safe,
)

__all__ = [
    "MAX_MESSAGE_LENGTH",
    "validate_question",
    "FORBIDDEN_KEYWORDS",
    "apply_row_limit",
    "check_sql",
    "ensure_safe",
    "extract_sql",
    "is_safe",
]
