from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

OutcomeType = Literal["general", "data", "error"]


class ChatRequest(BaseModel):
    message: Any = None


class ChatOutcome(BaseModel):
    """Structured result of one chat message.

    This is the wire contract consumed by the chat widget: ``success``,
    ``message``, ``sql``, ``data`` and ``type`` are always present, ``error``
    only when a failure carries one.
    """

    success: bool
    message: str
    sql: str | None = None
    data: list[dict[str, Any]] | None = None
    type: OutcomeType
    error: str | None = None

    @model_validator(mode="after")
    def _check_invariants(self) -> "ChatOutcome":
        if self.type == "data" and (self.sql is None or self.data is None):
            raise ValueError("data outcomes require both sql and data")
        if not self.success and self.type != "error":
            raise ValueError("failed outcomes must have type 'error'")
        return self

    @classmethod
    def general(cls, message: str) -> "ChatOutcome":
        return cls(success=True, message=message, type="general")

    @classmethod
    def data_result(cls, message: str, sql: str, rows: list[dict[str, Any]]) -> "ChatOutcome":
        return cls(success=True, message=message, sql=sql, data=rows, type="data")

    @classmethod
    def refusal(cls, message: str) -> "ChatOutcome":
        return cls(success=False, message=message, type="error")

    @classmethod
    def failure(cls, message: str, error: str) -> "ChatOutcome":
        return cls(success=False, message=message, type="error", error=error)

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump()
        if payload.get("error") is None:
            payload.pop("error", None)
        return payload


class SuggestionsResponse(BaseModel):
    success: bool = True
    suggestions: list[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    success: bool
    status: str
    timestamp: str
    service_account: str | None = None
    services: dict[str, str] = Field(default_factory=dict)
    error: str | None = None
