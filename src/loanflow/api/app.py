"""FastAPI application with lifespan and router mounting."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from loanflow.api.routes import health, upload
from loanflow.core.config import AppSettings
from loanflow.core.logging import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize and tear down application resources."""
    settings = getattr(app.state, "settings", None) or AppSettings()
    configure_logging(settings.log_level, json_output=settings.log_json)
    app.state.settings = settings
    yield


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="LoanFlow Servicing File Ingestion",
        version="0.1.0",
        lifespan=lifespan,
    )
    if settings is not None:
        app.state.settings = settings
    app.include_router(health.router)
    app.include_router(upload.router)
    return app
