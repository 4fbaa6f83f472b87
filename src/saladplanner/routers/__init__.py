"""API routers for the saladplanner application."""

from saladplanner.routers.auth import router as auth_router
from saladplanner.routers.billing import router as billing_router
from saladplanner.routers.participants import router as participants_router
from saladplanner.routers.settings import router as settings_router
from saladplanner.routers.shopping import router as shopping_router
from saladplanner.routers.templates import router as templates_router

__all__ = [
    "auth_router",
    "billing_router",
    "participants_router",
    "settings_router",
    "shopping_router",
    "templates_router",
]
