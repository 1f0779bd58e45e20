from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CollectorRegistry
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy.exc import SQLAlchemyError

from huddle.api.errors import storage_error_handler
from huddle.api.v1.router import router as v1_router
from huddle.core.config import Settings, settings as default_settings
from huddle.core.logging import configure_logging
from huddle.db import Database
from huddle.middleware.rate_limit import RateLimitMiddleware
from huddle.middleware.request_id import RequestIdMiddleware
from huddle.middleware.security_headers import SecurityHeadersMiddleware

logger = structlog.get_logger(__name__)


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    settings = settings or default_settings
    owns_database = database is None
    database = database or Database(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.auto_create_schema:
            app.state.database.create_all()
            logger.info("schema_ready")
        yield
        if owns_database:
            app.state.database.dispose()

    app = FastAPI(title="Huddle API", lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)

    # Starlette runs the LAST added middleware FIRST (outermost).
    # RequestId + SecurityHeaders wrap everything, CORS answers preflight,
    # RateLimit sits closest to the routes.
    app.add_middleware(RateLimitMiddleware, settings=settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware, settings=settings)
    app.add_middleware(RequestIdMiddleware)

    # Metrics live in a per-app registry
    Instrumentator(registry=CollectorRegistry()).instrument(app).expose(
        app, endpoint="/metrics", include_in_schema=False
    )

    @app.get("/")
    def root():
        return {"name": "Huddle API", "status": "ok"}

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(v1_router, prefix="/v1")
    return app


configure_logging()

app = create_app()
