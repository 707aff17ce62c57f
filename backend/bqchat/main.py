from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import os
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core import (
    BigQueryWarehouse,
    ChatRequest,
    HealthResponse,
    Settings,
    SuggestionsResponse,
    ValidationError,
    get_cached_settings,
)
from .llm import (
    DEFAULT_SUGGESTIONS,
    ConversationResponder,
    GeminiClient,
    IntentClassifier,
    ResponseFormatter,
    SQLGenerator,
    SuggestionGenerator,
)
from .pipeline import ChatPipeline
from .schema import SchemaProvider
from .security import validate_question

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Process-lifetime collaborators shared by all requests."""
    settings: Settings
    warehouse: Any
    schema_provider: SchemaProvider
    llm: Any
    pipeline: ChatPipeline
    suggestions: SuggestionGenerator

    @classmethod
    def build(cls, settings: Settings, warehouse: Any = None, llm: Any = None) -> "AppContext":
        warehouse = warehouse or BigQueryWarehouse(settings)
        llm = llm or GeminiClient(settings)
        schema_provider = SchemaProvider(warehouse, ttl=settings.schema_cache_ttl)
        pipeline = ChatPipeline(
            classifier=IntentClassifier(llm),
            generator=SQLGenerator(llm, max_fields=settings.schema_max_fields, max_rows=settings.max_rows),
            executor=warehouse,
            formatter=ResponseFormatter(llm),
            conversation=ConversationResponder(llm),
            schema_provider=schema_provider,
        )
        return cls(
            settings=settings,
            warehouse=warehouse,
            schema_provider=schema_provider,
            llm=llm,
            pipeline=pipeline,
            suggestions=SuggestionGenerator(llm, max_fields=settings.suggestion_max_fields),
        )


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


router = APIRouter()


# --- Chat Endpoints ---

@router.post("/api/chat/message")
def chat_message(request: ChatRequest, ctx: AppContext = Depends(get_context)) -> JSONResponse:
    try:
        message = validate_question(request.message, ctx.settings.max_message_length)
    except ValidationError as exc:
        logger.info(f"Rejected chat message: {exc}")
        return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})

    logger.info(f"Chat request: {message[:100]}...")

    outcome = ctx.pipeline.process_message(message)
    return JSONResponse(content=outcome.to_payload())


@router.get("/api/chat/suggestions", response_model=SuggestionsResponse)
def chat_suggestions(ctx: AppContext = Depends(get_context)) -> SuggestionsResponse:
    try:
        schema = ctx.schema_provider.get_schema()
        suggestions = ctx.suggestions.generate(schema)
    except Exception as exc:
        logger.error(f"Failed to generate suggestions, using defaults: {exc}")
        suggestions = []

    return SuggestionsResponse(suggestions=suggestions or list(DEFAULT_SUGGESTIONS))


@router.get("/api/chat/schema")
def chat_schema(ctx: AppContext = Depends(get_context)) -> JSONResponse:
    try:
        schema = ctx.schema_provider.get_schema()
    except Exception as exc:
        logger.error(f"Failed to load schema: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Erro ao obter schema do banco de dados",
                "message": type(exc).__name__,
            },
        )
    return JSONResponse(content={"success": True, "schema": schema.to_dict()})


@router.get("/api/chat/health", response_model=HealthResponse)
def chat_health(ctx: AppContext = Depends(get_context)) -> JSONResponse:
    settings = ctx.settings
    try:
        ctx.warehouse.test_connection()
    except Exception as exc:
        logger.error(f"Health check failed: {exc}")
        body = HealthResponse(success=False, status="unhealthy", timestamp=_now(), error=str(exc))
        return JSONResponse(status_code=503, content=body.model_dump(exclude_none=True))

    body = HealthResponse(
        success=True,
        status="healthy",
        timestamp=_now(),
        service_account=ctx.warehouse.service_account_email(),
        services={
            "gemini": "configured" if settings.gemini_configured else "not configured",
            "bigquery": "configured" if settings.bigquery_configured else "not configured",
        },
    )
    return JSONResponse(content=body.model_dump())


@router.post("/api/chat/clear-cache")
def chat_clear_cache(ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    ctx.schema_provider.invalidate()
    return {"success": True, "message": "Cache do schema limpo com sucesso"}


@router.get("/api/health")
def health(ctx: AppContext = Depends(get_context)) -> dict[str, str]:
    return {"status": "ok", "timestamp": _now(), "environment": ctx.settings.environment}


def create_app(context: AppContext | None = None) -> FastAPI:
    ctx = context or AppContext.build(get_cached_settings())

    app = FastAPI(title="BigQuery Chat Gateway", version="0.1.0")
    app.state.context = ctx
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(ctx.settings.cors_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )
    app.include_router(router)

    @app.on_event("startup")
    def _check_configuration() -> None:
        for problem in ctx.settings.missing_configuration():
            logger.warning(f"Configuration warning: {problem}")
        logger.info(f"Chat gateway started (environment={ctx.settings.environment})")

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "3000")))
