"""Weekly trigger arithmetic on the host's local wall clock."""

from dataclasses import dataclass
from datetime import datetime, timedelta

WEEK = timedelta(days=7)


@dataclass(frozen=True)
class ResetSchedule:
    """
    Weekly trigger: a day of week plus a 24h hour and minute.

    `day_of_week` uses 0=Sunday..6=Saturday. Values are not range-checked
    here; an out-of-range hour or minute makes `next_trigger` raise the
    ValueError that `datetime.replace` raises.
    """

    day_of_week: int = 5
    hour: int = 23
    minute: int = 59


def sunday_based_weekday(moment: datetime) -> int:
    """Weekday of `moment` with Sunday as 0 (Python uses Monday as 0)."""
    return (moment.weekday() + 1) % 7


def next_trigger(schedule: ResetSchedule, now: datetime) -> datetime:
    """
    Earliest trigger instant at or after `now`.

    A trigger falling exactly on `now` counts as already passed, so the
    result is then one week later.
    """
    candidate = now.replace(hour=schedule.hour, minute=schedule.minute, second=0, microsecond=0)
    days_ahead = (schedule.day_of_week - sunday_based_weekday(now) + 7) % 7
    if days_ahead == 0 and candidate <= now:
        days_ahead = 7
    return candidate + timedelta(days=days_ahead)


def most_recent_trigger(schedule: ResetSchedule, now: datetime) -> datetime:
    """Last instant the weekly trigger should have fired, strictly before the next one."""
    return next_trigger(schedule, now) - WEEK
