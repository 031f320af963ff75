"""
FastAPI application factory.

Run with ``python -m contactbook`` or
``uvicorn contactbook.main:create_app --factory``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from contactbook.config import Settings, get_settings
from contactbook.contacts.router import router as contacts_router
from contactbook.pages import ping
from contactbook.pages import router as pages_router
from contactbook.shared.context import AppContext
from contactbook.shared.database import DatabaseManager
from contactbook.shared.errors import install_exception_handlers
from contactbook.shared.logging import setup_logging
from contactbook.shared.middleware import build_middleware
from contactbook.shared.templates import STATIC_DIR


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    context: AppContext = app.state.context
    settings = context.settings
    logger = context.logger
    setup_logging(settings)

    logger.info("Application starting", extra={"env": settings.env, "port": settings.port})

    await context.db.ping()
    if settings.db_auto_create:
        await context.db.create_schema()

    yield

    logger.info("Shutting down application")
    await context.db.close()
    logger.info("Application shutdown complete")


def create_app(settings: Settings | None = None, db: DatabaseManager | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    context = AppContext.build(settings, db=db)

    app = FastAPI(
        title="Contacts",
        version="0.1.0",
        lifespan=lifespan,
        middleware=build_middleware(settings),
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.context = context

    install_exception_handlers(app)

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.add_api_route("/ping", ping, methods=["GET"], include_in_schema=False)
    app.include_router(pages_router)
    app.include_router(contacts_router)

    return app
