"""FastAPI application.

Assembles the health, settings and notification routers.
"""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from notifier.api.routes.health import router as health_router
from notifier.api.routes.notifications import router as notifications_router
from notifier.api.routes.settings import router as settings_router
from notifier.core.logging import setup_logging
from notifier.core.settings import get_settings


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    yield


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(settings_router)
app.include_router(notifications_router)
