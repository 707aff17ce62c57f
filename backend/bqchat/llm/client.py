"""Gemini API client for LLM interactions."""

from __future__ import annotations

import json
import logging
import re
import time
from typing import Any, Callable, Optional

import httpx

from ..core.config import Settings
from ..core.exceptions import LLMError, ModelUnavailableError

logger = logging.getLogger(__name__)

__all__ = ["GeminiClient", "ModelCache", "extract_json", "strip_code_fences"]

_FENCE_RE = re.compile(r"```[a-zA-Z]*\s*\n?|```", re.IGNORECASE)


class ModelCache:
    """Remembers the last model identifier that answered successfully.

    The remembered model is tried first until ``ttl`` seconds pass, after
    which the configured candidate order is used again.
    """

    def __init__(self, ttl: float = 600.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._model: str | None = None
        self._stored_at: float | None = None

    def get(self) -> str | None:
        if self._model is None or self._stored_at is None:
            return None
        if self._clock() - self._stored_at >= self.ttl:
            return None
        return self._model

    def remember(self, model: str) -> None:
        self._model = model
        self._stored_at = self._clock()

    def invalidate(self, model: str | None = None) -> None:
        if model is None or model == self._model:
            self._model = None
            self._stored_at = None


class GeminiClient:
    def __init__(
        self,
        settings: Settings,
        http_client: Optional[httpx.Client] = None,
        model_cache: Optional[ModelCache] = None,
    ) -> None:
        self.settings = settings
        self._http = http_client
        self.model_cache = model_cache or ModelCache(ttl=settings.model_cache_ttl)

    def _client(self) -> httpx.Client:
        if self._http is None:
            self._http = httpx.Client(timeout=self.settings.request_timeout)
        return self._http

    def candidate_models(self) -> list[str]:
        """Ordered model identifiers to try, cached good model first."""
        models: list[str] = []
        cached = self.model_cache.get()
        if cached:
            models.append(cached)
        for model in self.settings.gemini_models:
            if model not in models:
                models.append(model)
        return models

    def complete(
        self,
        prompt: str,
        system_instruction: str | None = None,
        response_mime_type: str | None = None,
        temperature: float = 0.2,
        max_output_tokens: int = 1024,
    ) -> str:
        """Generate text for ``prompt``, falling back through candidate models.

        Args:
            prompt: User prompt
            system_instruction: Optional system instruction
            response_mime_type: Optional response format hint (e.g. "application/json")
            temperature: Sampling temperature
            max_output_tokens: Maximum tokens in response

        Raises:
            ConfigurationError: If GEMINI_API_KEY is not set
            LLMError: If no candidate model produced a response
        """
        self.settings.require_gemini()

        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_output_tokens,
            },
        }
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if response_mime_type:
            payload["generationConfig"]["responseMimeType"] = response_mime_type

        models = self.candidate_models()
        if not models:
            raise LLMError("No Gemini models configured")

        last_error: ModelUnavailableError | None = None
        for model in models:
            try:
                text = self._generate(model, payload)
            except ModelUnavailableError as exc:
                logger.warning(f"Gemini model {model} unavailable, trying next candidate: {exc}")
                self.model_cache.invalidate(model)
                last_error = exc
                continue
            self.model_cache.remember(model)
            return text

        raise LLMError(f"No Gemini model available (tried: {', '.join(models)})") from last_error

    def _generate(self, model: str, payload: dict[str, Any]) -> str:
        url = f"{self.settings.gemini_base_url}/models/{model}:generateContent"
        logger.debug(f"Calling Gemini with model={model}")

        try:
            response = self._client().post(
                url,
                json=payload,
                headers={"x-goog-api-key": self.settings.gemini_api_key},
                timeout=self.settings.request_timeout,
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error(f"Gemini request timed out after {self.settings.request_timeout}s")
            raise LLMError(f"LLM request timed out after {self.settings.request_timeout}s") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            body = e.response.text[:300]
            if status == 404 or (status == 400 and "model" in body.lower()):
                raise ModelUnavailableError(model, f"HTTP {status}") from e
            logger.error(f"Gemini HTTP error: {status} - {body[:200]}")
            raise LLMError(f"LLM request failed with status {status}") from e
        except httpx.HTTPError as e:
            logger.error(f"Gemini connection error: {e}")
            raise LLMError("Failed to connect to LLM") from e

        try:
            data = response.json()
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse Gemini response as JSON: {response.text[:200]}")
            raise LLMError("LLM returned invalid JSON") from e

        if not isinstance(data, dict):
            logger.error(f"Unexpected response type: {type(data)}")
            raise LLMError("LLM response is not a dictionary")

        candidates = data.get("candidates")
        if not candidates or not isinstance(candidates, list):
            block_reason = (data.get("promptFeedback") or {}).get("blockReason")
            if block_reason:
                logger.warning(f"Gemini blocked the prompt: {block_reason}")
                raise LLMError(f"LLM blocked the prompt: {block_reason}")
            logger.error(f"Missing or invalid 'candidates' in response: {str(data)[:200]}")
            raise LLMError("LLM response missing 'candidates' array")

        candidate = candidates[0]
        if not isinstance(candidate, dict):
            logger.error(f"Unexpected candidate type: {type(candidate)}")
            raise LLMError("LLM candidate is not a dictionary")

        content = candidate.get("content")
        if not content or not isinstance(content, dict):
            logger.error(f"Missing or invalid 'content' in candidate: {candidate}")
            raise LLMError("LLM response missing content")

        parts = content.get("parts") or []
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        logger.debug(f"Gemini response length: {len(text)} chars")

        return text


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences (```json, ```sql, ```) from a reply."""
    if not text:
        return ""
    return _FENCE_RE.sub("", text).strip()


def extract_json(text: str) -> Any:
    """Extract the first JSON object or array from LLM response text.

    Returns None when no JSON value can be parsed.
    """
    if not text:
        logger.warning("Empty text passed to extract_json")
        return None

    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    starts = [pos for pos in (cleaned.find("{"), cleaned.find("[")) if pos != -1]
    if not starts:
        logger.warning(f"No JSON value found in text: {cleaned[:100]}...")
        return None

    start = min(starts)
    closing = "}" if cleaned[start] == "{" else "]"
    end = cleaned.rfind(closing)
    if end <= start:
        logger.warning(f"Unterminated JSON value in text: {cleaned[:100]}...")
        return None

    snippet = cleaned[start : end + 1]
    try:
        return json.loads(snippet)
    except json.JSONDecodeError as e:
        logger.error(f"JSON parse failed at position {e.pos}: {e.msg}")
        logger.error(f"Attempted to parse: {snippet[:200]}...")
        return None
