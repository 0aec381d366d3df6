"""
FastAPI application for the event registration API.

``create_app`` assembles the app; process-scoped resources (database
engine, session factory, Redis-backed rate limiter) are acquired in the
lifespan handler and released on shutdown.  Run with::

    uvicorn event_registry.main:app
"""

import logging
import os
import time
from contextlib import asynccontextmanager

import redis
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import Engine

from event_registry.core.config import Settings
from event_registry.core.error_handlers import register_error_handlers
from event_registry.core.logging_config import setup_logging
from event_registry.core.rate_limit import RateLimiter
from event_registry.database.db import Base, create_db_engine, make_session_factory
from event_registry.models import registrations as _models  # noqa: F401
from event_registry.routes import events as event_routes
from event_registry.routes import health
from event_registry.routes import participants as participant_routes
from event_registry.routes import registrations as registration_routes

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    engine: Engine | None = None,
    redis_client: redis.Redis | None = None,
) -> FastAPI:
    """Build the application.

    ``engine`` and ``redis_client`` may be supplied by the caller (tests);
    resources passed in are not disposed at shutdown.
    """
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level, settings.log_file, sql_echo=settings.sql_echo)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        own_engine = engine is None
        db_engine = engine or create_db_engine(
            settings.database_url, timeout=settings.database_timeout, echo=settings.sql_echo
        )
        # In production, use migrations instead
        Base.metadata.create_all(bind=db_engine)

        own_redis = redis_client is None and settings.rate_limit_enabled
        client = redis_client
        if own_redis:
            client = redis.from_url(settings.redis_url, decode_responses=True)

        app.state.settings = settings
        app.state.engine = db_engine
        app.state.session_factory = make_session_factory(db_engine)
        app.state.rate_limiter = (
            RateLimiter(
                client,
                max_requests=settings.rate_limit_max_requests,
                window_seconds=settings.rate_limit_window_seconds,
            )
            if settings.rate_limit_enabled and client is not None
            else None
        )
        app.state.started_at = time.monotonic()
        logger.info("%s %s started (%s)", settings.project_name, settings.api_version, settings.environment)

        try:
            yield
        finally:
            if own_redis:
                client.close()
            if own_engine:
                db_engine.dispose()
            logger.info("%s stopped", settings.project_name)

    app = FastAPI(title=settings.project_name, version=settings.api_version, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    register_error_handlers(app, debug=settings.debug)

    @app.get("/", include_in_schema=False)
    def read_root():
        return {"message": f"{settings.project_name} is running", "status": "running"}

    app.include_router(event_routes.router)
    app.include_router(participant_routes.router)
    app.include_router(registration_routes.router)
    app.include_router(health.router)
    return app


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    uvicorn.run(
        "event_registry.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3001")),
    )


app = create_app()
