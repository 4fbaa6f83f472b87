"""FastAPI application entry point."""

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from saladplanner import __version__
from saladplanner.config import Settings, get_settings
from saladplanner.database import create_engine_for, create_session_factory, init_models
from saladplanner.logging_config import LoggingContext, configure_logging, get_logger
from saladplanner.routers import (
    auth_router,
    billing_router,
    participants_router,
    settings_router,
    shopping_router,
    templates_router,
)
from saladplanner.schedule.reset_scheduler import ResetScheduler, SqlResetStore
from saladplanner.services.settings import get_reset_settings

# Configure logging on module load
configure_logging(
    log_level=get_settings().log_level, environment=get_settings().environment
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    settings: Settings = app.state.settings
    logger.info("Starting Saladplanner API")

    await init_models(app.state.engine)
    async with app.state.session_factory() as db:
        await get_reset_settings(db, defaults=settings)
        await db.commit()
    logger.info("Database tables initialized")

    if settings.reset_scheduler_enabled:
        scheduler = ResetScheduler(SqlResetStore(app.state.session_factory))
        await scheduler.start()
        app.state.reset_scheduler = scheduler

    yield

    logger.info("Shutting down Saladplanner API")
    if app.state.reset_scheduler is not None:
        await app.state.reset_scheduler.shutdown()
        app.state.reset_scheduler = None
    await app.state.engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application around its own engine and settings."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Saladplanner API",
        description="Weekly group groceries: roster, recipe and scaled shopping list",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = create_engine_for(settings.database_url)
    app.state.session_factory = create_session_factory(app.state.engine)
    app.state.reset_scheduler = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        with LoggingContext(request_id=uuid.uuid4().hex):
            return await call_next(request)

    app.include_router(auth_router)
    app.include_router(participants_router)
    app.include_router(templates_router)
    app.include_router(shopping_router)
    app.include_router(settings_router)
    app.include_router(billing_router)

    @app.get("/api/health")
    async def health_check() -> dict:
        """Basic health check endpoint."""
        return {"status": "ok", "service": "saladplanner-api"}

    @app.get("/")
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "name": "Saladplanner API",
            "version": __version__,
            "docs": "/docs",
        }

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("saladplanner.main:app", host=settings.host, port=settings.port)


app = create_app()
