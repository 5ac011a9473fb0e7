"""
prefstore.api.app

FastAPI app factory for the preference service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Initialize and dispose shared infrastructure (DB engine, default tree, resolution locks).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from prefstore import __version__
from prefstore.api.routers.health import router as health_router
from prefstore.api.routers.preferences import router as preferences_router
from prefstore.db.init_db import init_db
from prefstore.db.session import create_engine, create_sessionmaker
from prefstore.observability.logging import configure_logging, get_logger
from prefstore.observability.middleware import RequestContextMiddleware
from prefstore.preferences.defaults import load_default_tree
from prefstore.preferences.locks import KeyedLocks
from prefstore.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json_logs=settings.log_json,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        # Loaded once; shared read-only by every resolution.
        app.state.defaults = load_default_tree(settings.defaults_file)
        app.state.resolution_locks = KeyedLocks()

        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Prod should use Alembic migrations.
            await init_db(engine)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Preference Service",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(preferences_router)

    return app
