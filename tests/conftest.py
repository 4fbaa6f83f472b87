"""Pytest configuration and shared fixtures."""

import os

# Keep the module-level app off the developer database and without a live timer
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RESET_SCHEDULER_ENABLED", "false")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from saladplanner.config import Settings
from saladplanner.database import create_engine_for, create_session_factory, init_models
from saladplanner.main import create_app
from saladplanner.plan.shopping_list import IngredientLine, TemplateSnapshot

MEMORY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# =============================================================================
# Domain Fixtures
# =============================================================================


@pytest.fixture
def salad_template():
    """Template whose quantities are given for two people."""
    return TemplateSnapshot(
        id=1,
        title="Greek Salad",
        servings=2,
        ingredients=(
            IngredientLine(name="Tomato", quantity=100, unit="g"),
            IngredientLine(name="Feta", quantity=50, unit="g"),
            IngredientLine(name="Olive Oil", quantity=1.5, unit="tbsp"),
            IngredientLine(name="Salt", quantity=0, unit=""),
        ),
    )


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def session_factory():
    """Session factory over a fresh in-memory database with all tables."""
    engine = create_engine_for(MEMORY_DATABASE_URL)
    await init_models(engine)
    yield create_session_factory(engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory):
    """A database session for service-level tests."""
    async with session_factory() as session:
        yield session


# =============================================================================
# HTTP Fixtures
# =============================================================================


@pytest.fixture
def app_settings():
    """Settings for an isolated app instance."""
    return Settings(
        database_url=MEMORY_DATABASE_URL,
        reset_scheduler_enabled=False,
        allowed_origins="http://testserver",
    )


@pytest.fixture
def client(app_settings):
    """Test client with the lifespan running, so tables exist."""
    app = create_app(app_settings)
    with TestClient(app) as test_client:
        yield test_client


def register(client: TestClient, name: str, email: str) -> dict:
    """Register an account and return its session headers plus the user."""
    response = client.post("/api/register", json={"name": name, "email": email})
    assert response.status_code == 201, response.text
    data = response.json()
    return {"headers": {"x-session-token": data["token"]}, "user": data["user"]}


@pytest.fixture
def accounts(client):
    """Registers accounts against the test client: accounts(name, email)."""
    return lambda name, email: register(client, name, email)


@pytest.fixture
def alice(accounts):
    """Logged-in account used as the acting user."""
    return accounts("Alice", "Alice@Example.com")
