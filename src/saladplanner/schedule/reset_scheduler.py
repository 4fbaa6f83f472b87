"""In-process scheduler that clears the participant roster once a week."""

import asyncio
import contextlib
from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from saladplanner.logging_config import LoggingContext, get_logger
from saladplanner.models import Participant
from saladplanner.schedule.arithmetic import (
    ResetSchedule,
    most_recent_trigger,
    next_trigger,
)
from saladplanner.services.settings import get_reset_settings, schedule_of

logger = get_logger(__name__)


class RosterResetStore(Protocol):
    """Persistence the scheduler needs."""

    async def load_schedule(self) -> ResetSchedule: ...

    async def load_last_reset(self) -> datetime | None: ...

    async def reset_roster(self, reset_at: datetime) -> int: ...


class SqlResetStore:
    """RosterResetStore backed by the application database."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def load_schedule(self) -> ResetSchedule:
        async with self.session_factory() as db:
            row = await get_reset_settings(db)
            await db.commit()
            return schedule_of(row)

    async def load_last_reset(self) -> datetime | None:
        async with self.session_factory() as db:
            row = await get_reset_settings(db)
            await db.commit()
            return row.last_reset

    async def reset_roster(self, reset_at: datetime) -> int:
        """Delete every participant and record the reset time in one transaction."""
        async with self.session_factory() as db:
            async with db.begin():
                result = await db.execute(delete(Participant))
                row = await get_reset_settings(db)
                row.last_reset = reset_at
            return result.rowcount or 0


class ResetScheduler:
    """
    Clears the roster at the configured weekly trigger.

    Owns exactly one pending timer on the running event loop. Every arming
    first runs a catch-up check: if the last reset is missing or older than
    the most recent trigger instant, one reset is performed immediately, no
    matter how many weeks were missed.

    Call `start()` once the event loop is running, `reschedule()` whenever
    the schedule is edited, and `shutdown()` on exit.
    """

    def __init__(
        self,
        store: RosterResetStore,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.clock = clock
        self.schedule = ResetSchedule()
        self.next_run: datetime | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._firing: asyncio.Task | None = None
        self._generation = 0
        self._lock = asyncio.Lock()

    @property
    def is_armed(self) -> bool:
        return self._timer is not None and not self._timer.cancelled()

    async def start(self) -> datetime:
        """Load the stored schedule and arm the first timer."""
        try:
            schedule = await self.store.load_schedule()
        except Exception:
            logger.exception("Could not load reset schedule, using defaults")
            schedule = None
        return await self.reschedule(schedule)

    async def reschedule(self, schedule: ResetSchedule | None = None) -> datetime:
        """
        Cancel the pending timer and arm again from scratch.

        Args:
            schedule: New weekly trigger. Keeps the current snapshot if None.

        Returns:
            The instant the next reset will fire.
        """
        async with self._lock:
            self._cancel_timer()
            if schedule is not None:
                self.schedule = schedule
            now = self.clock()
            await self._catch_up(now)
            return self._arm(now)

    async def shutdown(self) -> None:
        """Cancel the pending timer and any reset in flight."""
        self._cancel_timer()
        self._generation += 1
        if self._firing is not None and not self._firing.done():
            self._firing.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._firing
        self._firing = None
        self.next_run = None
        logger.info("Reset scheduler stopped")

    async def _catch_up(self, now: datetime) -> None:
        try:
            last_reset = await self.store.load_last_reset()
        except Exception:
            logger.exception("Could not read last reset time, skipping catch-up")
            return

        due = most_recent_trigger(self.schedule, now)
        if last_reset is None or last_reset < due:
            logger.info(f"Reset due at {due.isoformat()} was missed (last reset: {last_reset})")
            await self._reset(now)

    async def _reset(self, reset_at: datetime) -> bool:
        with LoggingContext(job="roster-reset"):
            try:
                removed = await self.store.reset_roster(reset_at)
            except Exception:
                logger.exception("Roster reset failed")
                return False
            logger.info(f"Roster cleared at {reset_at.isoformat()}, {removed} participants removed")
            return True

    def _arm(self, reference: datetime) -> datetime:
        return self._arm_at(next_trigger(self.schedule, reference))

    def _arm_at(self, next_run: datetime) -> datetime:
        self._cancel_timer()
        self._generation += 1

        # Epoch seconds, so a DST change before the trigger shifts the real delay.
        # Non-positive delays fire on the next loop iteration.
        delay = max(next_run.timestamp() - self.clock().timestamp(), 0.0)

        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(delay, self._on_timer, next_run, self._generation)
        self.next_run = next_run
        logger.info(f"Next roster reset at {next_run.isoformat()} (in {delay:.0f}s)")
        return next_run

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self, due: datetime, generation: int) -> None:
        self._timer = None
        self._firing = asyncio.get_running_loop().create_task(self._fire(due, generation))

    async def _fire(self, due: datetime, generation: int) -> None:
        async with self._lock:
            # A reschedule that got the lock first already handled this trigger
            if generation != self._generation:
                return

            now = self.clock()
            if now < due:
                # Woke before the trigger; wait for it without touching the roster
                self._arm_at(due)
                return

            await self._reset(now)

            try:
                self.schedule = await self.store.load_schedule()
            except Exception:
                logger.exception("Could not reload reset schedule, keeping the previous one")

            try:
                self._arm(now)
            except ValueError:
                logger.exception(f"Invalid reset schedule {self.schedule}, scheduler stopped")
