"""API routes for the weekly reset schedule."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from saladplanner.auth import require_user
from saladplanner.database import get_db
from saladplanner.logging_config import get_logger
from saladplanner.models import ResetSettings, User
from saladplanner.schedule.arithmetic import next_trigger
from saladplanner.schedule.reset_scheduler import ResetScheduler
from saladplanner.schemas import CamelModel
from saladplanner.services.settings import (
    get_reset_settings,
    schedule_of,
    update_reset_settings,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/settings", tags=["settings"])


class ResetSettingsResponse(CamelModel):
    """Stored reset schedule and active template reference."""

    reset_day_of_week: int
    reset_hour: int
    reset_minute: int
    last_reset: datetime | None = None
    active_template_id: int | None = None


class ResetSettingsEnvelope(CamelModel):
    settings: ResetSettingsResponse
    next_reset: datetime


class ResetSettingsRequest(CamelModel):
    """New weekly trigger: day of week (0=Sunday) and 24h time."""

    reset_day_of_week: int
    reset_hour: int
    reset_minute: int


def _envelope(row: ResetSettings, next_reset: datetime) -> ResetSettingsEnvelope:
    return ResetSettingsEnvelope(
        settings=ResetSettingsResponse.model_validate(row),
        next_reset=next_reset,
    )


@router.get("/reset", response_model=ResetSettingsEnvelope)
async def get_reset_schedule(db: AsyncSession = Depends(get_db)) -> ResetSettingsEnvelope:
    """Current schedule and when the roster will next be cleared."""
    row = await get_reset_settings(db)
    return _envelope(row, next_trigger(schedule_of(row), datetime.now()))


@router.put("/reset", response_model=ResetSettingsEnvelope)
async def put_reset_schedule(
    request: ResetSettingsRequest,
    http_request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
) -> ResetSettingsEnvelope:
    """
    Change the weekly reset time and re-arm the scheduler.

    Re-arming runs the catch-up check against the new schedule, so moving
    the trigger to an instant that has already passed this week clears the
    roster right away.
    """
    if not 0 <= request.reset_day_of_week <= 6:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="resetDayOfWeek must be between 0 (Sunday) and 6 (Saturday)",
        )
    if not 0 <= request.reset_hour <= 23 or not 0 <= request.reset_minute <= 59:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="resetHour must be 0-23 and resetMinute 0-59",
        )

    row = await update_reset_settings(
        db,
        day_of_week=request.reset_day_of_week,
        hour=request.reset_hour,
        minute=request.reset_minute,
    )
    schedule = schedule_of(row)
    logger.info(f"Reset schedule changed to {schedule} by user {user.id}")

    scheduler: ResetScheduler | None = http_request.app.state.reset_scheduler
    if scheduler is not None:
        next_reset = await scheduler.reschedule(schedule)
        # Catch-up may have just written last_reset
        await db.refresh(row)
    else:
        next_reset = next_trigger(schedule, datetime.now())

    return _envelope(row, next_reset)
