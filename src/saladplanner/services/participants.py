"""Weekly participant roster."""

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from saladplanner.logging_config import get_logger
from saladplanner.models import Participant
from saladplanner.normalize.keys import normalize_email
from saladplanner.services.users import find_user_by_email

logger = get_logger(__name__)


async def list_participants(db: AsyncSession) -> list[Participant]:
    """All participants in join order."""
    result = await db.execute(
        select(Participant).order_by(Participant.created_at.asc(), Participant.id.asc())
    )
    return list(result.scalars().all())


async def count_participants(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(Participant))
    return result.scalar_one()


async def get_participant(db: AsyncSession, participant_id: int) -> Participant | None:
    return await db.get(Participant, participant_id)


async def find_participant_by_email(db: AsyncSession, email: str) -> Participant | None:
    """Participant enrolled under an email, compared case-insensitively."""
    result = await db.execute(
        select(Participant).where(Participant.email == normalize_email(email))
    )
    return result.scalars().first()


async def create_participant(
    db: AsyncSession, name: str, email: str, created_by_user_id: int | None
) -> Participant:
    """Enroll someone, linking the account registered under the same email if any."""
    normalized = normalize_email(email)
    matched_user = await find_user_by_email(db, normalized)
    participant = Participant(
        name=name.strip(),
        email=normalized,
        user_id=matched_user.id if matched_user else None,
        created_by_user_id=created_by_user_id,
    )
    db.add(participant)
    await db.commit()
    await db.refresh(participant)
    logger.info(f"Participant {participant.id} joined")
    return participant


async def update_participant(
    db: AsyncSession, participant_id: int, name: str, email: str
) -> Participant | None:
    """Edit a participant's name and email. Returns None if it doesn't exist."""
    participant = await db.get(Participant, participant_id)
    if participant is None:
        return None

    normalized = normalize_email(email)
    matched_user = await find_user_by_email(db, normalized)
    participant.name = name.strip()
    participant.email = normalized
    participant.user_id = matched_user.id if matched_user else None
    await db.commit()
    await db.refresh(participant)
    return participant


async def delete_participant(db: AsyncSession, participant_id: int) -> bool:
    """Remove one participant. Returns False if it doesn't exist."""
    result = await db.execute(delete(Participant).where(Participant.id == participant_id))
    await db.commit()
    removed = (result.rowcount or 0) > 0
    if removed:
        logger.info(f"Participant {participant_id} removed")
    return removed
