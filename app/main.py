"""PromptCal API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ScheduleAppError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database, model client and ScheduleExtractor built once in the lifespan,
      after settings are loaded, and exposed via app.state

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Extractor injected through a dependency reading app.state: tests swap it
      with dependency_overrides instead of patching module globals
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.error_handlers import register_error_handlers
from app.api.routes import auth, health, schedules
from app.config import get_settings
from app.infrastructure.anthropic_client import ResilientAnthropicClient
from app.infrastructure.database import init_db
from app.infrastructure.observability import setup_logging
from app.services.schedule_extractor import ScheduleExtractor

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    model = ResilientAnthropicClient(
        api_key=settings.anthropic_api_key,
        model=settings.extraction_model,
        max_tokens=settings.extraction_max_tokens,
        max_retries=settings.anthropic_max_retries,
        base_delay_ms=settings.anthropic_base_delay_ms,
        max_delay_ms=settings.anthropic_max_delay_ms,
        timeout_seconds=settings.anthropic_timeout_seconds,
    )
    app.state.schedule_extractor = ScheduleExtractor(model)
    logger.info("PromptCal API started")
    yield
    logger.info("PromptCal API shutting down")
    await manager.dispose()


app = FastAPI(
    title="PromptCal API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(schedules.router)

register_error_handlers(app)


@app.get("/")
async def root():
    """Service index."""
    return {
        "service": "PromptCal API",
        "version": "1.0.0",
        "endpoints": {
            "health": "/api/v1/health/",
            "auth": "/api/v1/auth",
            "schedules": "/api/v1/schedules",
            "documentation": "/docs",
        },
    }
