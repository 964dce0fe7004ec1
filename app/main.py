from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import health_router, router
from app.errors import install_error_handlers
from logging_config import configure_logging
from services.seeder import seed_demo_data
from services.telemetry import build_default_service
from settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    service = build_default_service()
    if get_settings().seed_demo_data:
        seed_demo_data(service.store)
    logger.info("Telemetry service ready", extra={"event_count": service.store.count_events()})
    try:
        yield
    finally:
        build_default_service.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()
    app = FastAPI(
        title="Telemetry Slice",
        description="Multi-tenant telemetry ingestion with idempotent dedup and windowed insights.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)
    app.include_router(router)
    app.include_router(health_router)
    return app

app = create_app()
