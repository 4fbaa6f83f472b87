"""Database configuration and session management."""

from collections.abc import AsyncIterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from saladplanner.config import Settings


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_for(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create the async engine for a database URL.

    SQLite gets foreign key enforcement on every connection so that cascades
    behave the same as on PostgreSQL. In-memory SQLite shares one connection.
    """
    kwargs: dict = {"echo": echo}
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite and ":memory:" in database_url:
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}

    engine = create_async_engine(database_url, **kwargs)
    if is_sqlite:
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory shared by requests and the reset scheduler."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create database tables if they don't exist."""
    # Models must be imported so they register on Base.metadata
    from saladplanner import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Dependency for FastAPI endpoints."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session


def get_app_settings(request: Request) -> Settings:
    """Dependency returning the settings the app was created with."""
    return request.app.state.settings
