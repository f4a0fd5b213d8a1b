"""FastAPI application factory for the Crisp API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import Depends, FastAPI

from .errors import register_error_handlers
from .metrics import instrument_app
from .metrics import router as metrics_router
from .routers import prompts, transcribe, waitlist
from .schemas import HealthResponse
from .settings import APISettings, get_settings

LOGGER = logging.getLogger("crisp.api")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    service = getattr(app.state, "transcript_service", None)
    if service is not None:
        await service.aclose()


def create_app() -> FastAPI:
    settings = get_settings()
    _configure_logging(settings.log_level)
    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)
    register_error_handlers(app)
    instrument_app(app)

    app.include_router(transcribe.router)
    app.include_router(waitlist.router)
    app.include_router(prompts.router)
    app.include_router(metrics_router)

    @app.get("/healthz", response_model=HealthResponse)
    async def healthz(settings: APISettings = Depends(get_settings)) -> HealthResponse:
        return HealthResponse(
            ok=True,
            provider=settings.transcription_provider,
            waitlist_store=settings.waitlist_store,
            rate_limiter="redis" if settings.redis_url else "memory",
            timestamp=datetime.now(timezone.utc),
        )

    LOGGER.info(
        "Crisp API ready (provider=%s, waitlist store=%s)",
        settings.transcription_provider,
        settings.waitlist_store,
    )
    return app


def run() -> None:
    """Serve the API with uvicorn (``crisp-api`` console script)."""
    settings = get_settings()
    uvicorn.run(
        "src.api.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
