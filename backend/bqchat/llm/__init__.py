"""LLM interaction module.

Contains the Gemini client, prompts, and specialized LLM operations:
- Intent classification
- SQL generation
- Answer composition
- General conversation and suggested questions
"""

from .answer_composer import MAX_ROWS_FOR_LLM, ResponseFormatter, dump_rows
from .client import GeminiClient, ModelCache, extract_json, strip_code_fences
from .conversation import ConversationResponder
from .intent import IntentClassifier, parse_intent_reply
from .prompts import REFUSAL_SENTINEL
from .sql_generator import SQLGenerator, build_sql_prompt, is_refusal
from .suggestions import (
    DEFAULT_SUGGESTIONS,
    ArrayReply,
    SuggestionGenerator,
    WrappedReply,
    normalize_suggestions,
    parse_suggestions_reply,
)

__all__ = [
    "MAX_ROWS_FOR_LLM",
    "ResponseFormatter",
    "dump_rows",
    "GeminiClient",
    "ModelCache",
    "extract_json",
    "strip_code_fences",
    "ConversationResponder",
    "IntentClassifier",
    "parse_intent_reply",
    "REFUSAL_SENTINEL",
    "SQLGenerator",
    "build_sql_prompt",
    "is_refusal",
    "DEFAULT_SUGGESTIONS",
    "ArrayReply",
    "SuggestionGenerator",
    "WrappedReply",
    "normalize_suggestions",
    "parse_suggestions_reply",
]
