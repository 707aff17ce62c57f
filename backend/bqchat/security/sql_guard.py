from __future__ import annotations

import logging
import re
from typing import Tuple

import sqlparse

from ..core.exceptions import UnsafeQueryError

logger = logging.getLogger(__name__)

# Matched as plain substrings of the upper-cased statement, so identifiers
# such as updated_at or created_by are rejected too.
FORBIDDEN_KEYWORDS = (
    "DROP",
    "DELETE",
    "UPDATE",
    "INSERT",
    "ALTER",
    "CREATE",
    "TRUNCATE",
    "GRANT",
    "REVOKE",
)

_LIMIT_RE = re.compile(r"\bLIMIT\s+(\d+)(\s+OFFSET\s+\d+)?\s*$", re.IGNORECASE)


def extract_sql(text: str) -> str:
    """Extract SQL from LLM response, handling markdown code blocks."""
    if not text:
        return ""
    # Try ```sql block first
    fenced = re.search(r"```sql\s*(.*?)```", text, re.IGNORECASE | re.DOTALL)
    if fenced:
        return fenced.group(1).strip()
    # Try generic ``` block
    fenced = re.search(r"```\s*(.*?)```", text, re.DOTALL)
    if fenced:
        return fenced.group(1).strip()
    # Unterminated fences
    return re.sub(r"```(?:sql)?", "", text, flags=re.IGNORECASE).strip()


def _statement_count(sql: str) -> int:
    return len([stmt for stmt in sqlparse.split(sql) if stmt.strip().rstrip(";").strip()])


def check_sql(sql: str) -> Tuple[bool, str]:
    """Validate that ``sql`` is a single read-only SELECT.

    Returns:
        Tuple of (is_safe, error_reason)
    """
    if not sql or not sql.strip():
        return False, "Empty SQL"

    upper_sql = sql.upper()

    for keyword in FORBIDDEN_KEYWORDS:
        if keyword in upper_sql:
            return False, f"Forbidden keyword: {keyword}"

    if not upper_sql.strip().startswith("SELECT"):
        return False, "Only SELECT statements are allowed"

    if _statement_count(sql) > 1:
        return False, "Multiple statements not allowed"

    return True, ""


def is_safe(sql: str) -> bool:
    ok, _ = check_sql(sql)
    return ok


def ensure_safe(sql: str) -> str:
    """Return ``sql`` unchanged or raise UnsafeQueryError."""
    ok, reason = check_sql(sql)
    if not ok:
        logger.warning(f"SQL rejected by guard: {reason}")
        raise UnsafeQueryError(reason)
    return sql


def apply_row_limit(sql: str, max_rows: int) -> str:
    """Bound the statement to ``max_rows`` rows.

    Comments are stripped first so a trailing ``-- note`` cannot hide an
    existing LIMIT. A trailing LIMIT above ``max_rows`` is lowered to it;
    otherwise a LIMIT clause is appended.
    """
    candidate = sqlparse.format(sql, strip_comments=True).strip().rstrip(";").rstrip()
    if not candidate:
        return candidate
    match = _LIMIT_RE.search(candidate)
    if match is None:
        return f"{candidate}\nLIMIT {max_rows}"
    if int(match.group(1)) > max_rows:
        logger.info(f"Clamping LIMIT {match.group(1)} to {max_rows}")
        return f"{candidate[:match.start()]}LIMIT {max_rows}{match.group(2) or ''}"
    return candidate
