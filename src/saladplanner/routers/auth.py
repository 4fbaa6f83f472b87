"""API routes for registration, login and the current user."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from saladplanner.auth import require_user
from saladplanner.config import Settings
from saladplanner.database import get_app_settings, get_db
from saladplanner.logging_config import get_logger
from saladplanner.models import User
from saladplanner.schemas import CamelModel, UserResponse
from saladplanner.services.users import create_session, create_user, find_user_by_email

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


class RegisterRequest(CamelModel):
    """Request to create an account."""

    name: str = Field(min_length=1)
    email: str = Field(min_length=3)


class LoginRequest(CamelModel):
    """Request to log in by email."""

    email: str = Field(min_length=3)


class SessionResponse(CamelModel):
    """Account plus the issued session token."""

    user: UserResponse
    token: str
    expires_at: datetime


class MeResponse(CamelModel):
    user: UserResponse


@router.post("/register", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> SessionResponse:
    """Create an account and log it in."""
    if not request.name.strip() or not request.email.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name and email are required",
        )
    if await find_user_by_email(db, request.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already registered",
        )

    user = await create_user(db, request.name, request.email)
    session = await create_session(db, user.id, settings.session_ttl_days)
    await db.commit()

    return SessionResponse(
        user=UserResponse.model_validate(user),
        token=session.token,
        expires_at=session.expires_at,
    )


@router.post("/login", response_model=SessionResponse)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> SessionResponse:
    """Log in with the email an account was registered with."""
    user = await find_user_by_email(db, request.email)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    session = await create_session(db, user.id, settings.session_ttl_days)
    await db.commit()
    logger.info(f"User {user.id} logged in")

    return SessionResponse(
        user=UserResponse.model_validate(user),
        token=session.token,
        expires_at=session.expires_at,
    )


@router.get("/me", response_model=MeResponse)
async def me(user: User = Depends(require_user)) -> MeResponse:
    """The account behind the session token."""
    return MeResponse(user=UserResponse.model_validate(user))
