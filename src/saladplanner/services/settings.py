"""Access to the singleton settings row."""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from saladplanner.config import Settings, get_settings
from saladplanner.models import ResetSettings
from saladplanner.schedule.arithmetic import ResetSchedule

SETTINGS_ROW_ID = 1


async def get_reset_settings(db: AsyncSession, defaults: Settings | None = None) -> ResetSettings:
    """Get the settings row, creating it with the configured defaults on first access."""
    row = await db.get(ResetSettings, SETTINGS_ROW_ID)
    if row is None:
        config = defaults or get_settings()
        row = ResetSettings(
            id=SETTINGS_ROW_ID,
            reset_day_of_week=config.default_reset_day_of_week,
            reset_hour=config.default_reset_hour,
            reset_minute=config.default_reset_minute,
            last_reset=None,
            active_template_id=None,
        )
        db.add(row)
        await db.flush()
    return row


async def update_reset_settings(
    db: AsyncSession,
    *,
    day_of_week: int | None = None,
    hour: int | None = None,
    minute: int | None = None,
    active_template_id: int | None = None,
    clear_active_template: bool = False,
    last_reset: datetime | None = None,
) -> ResetSettings:
    """Update the fields that were given and commit."""
    row = await get_reset_settings(db)
    if day_of_week is not None:
        row.reset_day_of_week = day_of_week
    if hour is not None:
        row.reset_hour = hour
    if minute is not None:
        row.reset_minute = minute
    if active_template_id is not None:
        row.active_template_id = active_template_id
    elif clear_active_template:
        row.active_template_id = None
    if last_reset is not None:
        row.last_reset = last_reset
    await db.commit()
    return row


def schedule_of(row: ResetSettings) -> ResetSchedule:
    """Snapshot the weekly trigger stored in the settings row."""
    return ResetSchedule(
        day_of_week=row.reset_day_of_week,
        hour=row.reset_hour,
        minute=row.reset_minute,
    )
