"""Weekly roster reset scheduling."""

from saladplanner.schedule.arithmetic import (
    ResetSchedule,
    most_recent_trigger,
    next_trigger,
)

__all__ = [
    "ResetSchedule",
    "most_recent_trigger",
    "next_trigger",
]
