"""API route for splitting the grocery bill across the roster."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from saladplanner.config import Settings
from saladplanner.database import get_app_settings, get_db
from saladplanner.plan.billing import split_cost
from saladplanner.schemas import CamelModel, ParticipantResponse
from saladplanner.services.participants import list_participants

router = APIRouter(prefix="/api", tags=["billing"])


class BillingResponse(CamelModel):
    """Per-person share of a manually entered total."""

    total: float
    currency: str
    participant_count: int
    share: float | None
    participants: list[ParticipantResponse]


@router.get("/billing", response_model=BillingResponse)
async def get_billing(
    total: Annotated[float, Query(ge=0, description="Amount paid for the groceries")] = 0.0,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> BillingResponse:
    """Divide the total evenly between everyone on the roster."""
    participants = await list_participants(db)
    split = split_cost(total, len(participants))
    return BillingResponse(
        total=split.total,
        currency=settings.currency,
        participant_count=split.participant_count,
        share=split.share,
        participants=[ParticipantResponse.model_validate(p) for p in participants],
    )
