"""Custom exceptions for the application."""

from __future__ import annotations


class ConfigurationError(Exception):
    """Raised when a required credential or setting is missing."""

    pass


class ValidationError(Exception):
    """Raised when input validation fails."""

    pass


class NotFoundError(Exception):
    """Raised when a requested table is not part of the dataset schema."""

    pass


class TransientServiceError(Exception):
    """Raised when the LLM or the warehouse is unavailable or fails."""

    pass


class LLMError(TransientServiceError):
    """Raised when LLM returns unexpected response format or fails."""

    pass


class ModelUnavailableError(LLMError):
    """Raised when the LLM service rejects a model identifier."""

    def __init__(self, model: str, message: str = "") -> None:
        self.model = model
        super().__init__(message or f"Model '{model}' is not available")


class WarehouseError(TransientServiceError):
    """Raised when a warehouse operation fails.

    The message is safe to show to the end user; the raw error is logged
    where the failure is translated.
    """

    pass


class TableNotFoundError(WarehouseError):
    pass


class QuerySyntaxError(WarehouseError):
    pass


class WarehousePermissionError(WarehouseError):
    pass


class GenerationError(Exception):
    """Raised when SQL could not be generated for a question."""

    pass


class GenerationRefusal(GenerationError):
    """Raised when the model states that the question cannot be answered."""

    pass


class UnsafeQueryError(GenerationError):
    """Raised when a statement fails the read-only SQL guard."""

    pass
