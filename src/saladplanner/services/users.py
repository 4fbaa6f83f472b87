"""User accounts and login sessions."""

import uuid
from datetime import datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from saladplanner.logging_config import get_logger
from saladplanner.models import LoginSession, User
from saladplanner.normalize.keys import normalize_email

logger = get_logger(__name__)


async def find_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Look up an account by email, ignoring case and surrounding whitespace."""
    result = await db.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, name: str, email: str) -> User:
    """Create an account. The caller checks for an existing email first."""
    user = User(name=name.strip(), email=normalize_email(email))
    db.add(user)
    await db.flush()
    logger.info(f"Registered user {user.id}")
    return user


async def create_session(
    db: AsyncSession, user_id: int, ttl_days: int, now: datetime | None = None
) -> LoginSession:
    """Issue a new session token for a user."""
    now = now or datetime.now()
    session = LoginSession(
        token=str(uuid.uuid4()),
        user_id=user_id,
        created_at=now,
        expires_at=now + timedelta(days=ttl_days),
    )
    db.add(session)
    await db.flush()
    return session


async def get_session_user(
    db: AsyncSession, token: str | None, now: datetime | None = None
) -> User | None:
    """
    Resolve a session token to its user.

    Expired sessions are deleted on lookup and resolve to None.
    """
    if not token:
        return None

    result = await db.execute(
        select(LoginSession)
        .options(selectinload(LoginSession.user))
        .where(LoginSession.token == token)
    )
    session = result.scalar_one_or_none()
    if session is None:
        return None

    if session.expires_at < (now or datetime.now()):
        await db.execute(delete(LoginSession).where(LoginSession.token == token))
        await db.commit()
        logger.info(f"Expired session for user {session.user_id} removed")
        return None

    return session.user
