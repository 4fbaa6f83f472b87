"""Session-token authentication dependencies."""

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from saladplanner.database import get_db
from saladplanner.logging_config import user_id_ctx
from saladplanner.models import User
from saladplanner.services.users import get_session_user

SESSION_HEADER = "x-session-token"


async def get_optional_user(
    x_session_token: str | None = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Resolve the caller from the session header, if any."""
    user = await get_session_user(db, x_session_token)
    if user is not None:
        user_id_ctx.set(user.id)
    return user


async def require_user(user: User | None = Depends(get_optional_user)) -> User:
    """Reject requests without a valid session."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not logged in",
        )
    return user
