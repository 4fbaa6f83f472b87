"""API routes for the weekly participant roster."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from saladplanner.auth import require_user
from saladplanner.database import get_db
from saladplanner.logging_config import get_logger
from saladplanner.models import User
from saladplanner.normalize.keys import normalize_email
from saladplanner.schemas import CamelModel, ParticipantResponse
from saladplanner.services.participants import (
    create_participant,
    delete_participant,
    find_participant_by_email,
    list_participants,
    update_participant,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/participants", tags=["participants"])


class JoinRequest(CamelModel):
    """Join the roster. Name and email default to the caller's account."""

    name: str | None = None
    email: str | None = None


class ParticipantUpdateRequest(CamelModel):
    """Edit a participant."""

    name: str
    email: str


class ParticipantListResponse(CamelModel):
    participants: list[ParticipantResponse]


class ParticipantEnvelope(CamelModel):
    participant: ParticipantResponse


class RemovedResponse(CamelModel):
    removed_id: int


@router.get("", response_model=ParticipantListResponse)
async def get_participants(db: AsyncSession = Depends(get_db)) -> ParticipantListResponse:
    """Everyone on this week's roster, in join order."""
    participants = await list_participants(db)
    return ParticipantListResponse(
        participants=[ParticipantResponse.model_validate(p) for p in participants]
    )


@router.post("", response_model=ParticipantEnvelope, status_code=status.HTTP_201_CREATED)
async def join(
    request: JoinRequest | None = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
) -> ParticipantEnvelope:
    """Add the caller, or someone else the caller names, to the roster."""
    request = request or JoinRequest()
    name = (request.name or "").strip() or user.name
    email = normalize_email(request.email or user.email)
    if not name or not email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name and email are required",
        )

    if await find_participant_by_email(db, email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Already enrolled",
        )

    participant = await create_participant(db, name, email, created_by_user_id=user.id)
    return ParticipantEnvelope(participant=ParticipantResponse.model_validate(participant))


@router.delete("/self", response_model=RemovedResponse)
async def leave(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
) -> RemovedResponse:
    """Remove the caller from the roster."""
    participant = await find_participant_by_email(db, user.email)
    if participant is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Not enrolled",
        )

    participant_id = participant.id
    await delete_participant(db, participant_id)
    return RemovedResponse(removed_id=participant_id)


@router.put("/{participant_id}", response_model=ParticipantEnvelope)
async def edit_participant(
    participant_id: int,
    request: ParticipantUpdateRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
) -> ParticipantEnvelope:
    """Change a participant's name or email."""
    if not request.name.strip() or not request.email.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name and email are required",
        )

    duplicate = await find_participant_by_email(db, request.email)
    if duplicate is not None and duplicate.id != participant_id:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already enrolled",
        )

    participant = await update_participant(db, participant_id, request.name, request.email)
    if participant is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Participant {participant_id} not found",
        )

    return ParticipantEnvelope(participant=ParticipantResponse.model_validate(participant))


@router.delete("/{participant_id}", response_model=RemovedResponse)
async def remove_participant(
    participant_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
) -> RemovedResponse:
    """Remove any participant from the roster."""
    if not await delete_participant(db, participant_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Participant {participant_id} not found",
        )
    return RemovedResponse(removed_id=participant_id)
