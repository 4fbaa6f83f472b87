"""Tests for the weekly roster reset scheduler."""

import asyncio
import time
from datetime import datetime, timedelta

import pytest
from sqlalchemy import func, select

from saladplanner.models import Participant, ResetSettings
from saladplanner.schedule.arithmetic import WEEK, ResetSchedule
from saladplanner.schedule.reset_scheduler import ResetScheduler, SqlResetStore
from saladplanner.services.participants import create_participant
from saladplanner.services.settings import get_reset_settings

FRIDAY_NIGHT = ResetSchedule(day_of_week=5, hour=23, minute=59)
# Friday 2024-01-05 23:59
TRIGGER = datetime(2024, 1, 5, 23, 59)


class FakeResetStore:
    """In-memory store recording every reset."""

    def __init__(self, schedule=FRIDAY_NIGHT, last_reset=None):
        self.schedule = schedule
        self.last_reset = last_reset
        self.reset_calls: list[datetime] = []
        self.fail_reset = False
        self.fail_load = False

    async def load_schedule(self):
        if self.fail_load:
            raise RuntimeError("store unavailable")
        return self.schedule

    async def load_last_reset(self):
        return self.last_reset

    async def reset_roster(self, reset_at):
        if self.fail_reset:
            raise RuntimeError("store unavailable")
        self.reset_calls.append(reset_at)
        self.last_reset = reset_at
        return 3


class FakeClock:
    """Clock frozen at a settable instant."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def central_european_time(monkeypatch):
    """Run with the local zone set to Central European Time."""
    monkeypatch.setenv("TZ", "CET-1CEST,M3.5.0,M10.5.0/3")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


class TestCatchUp:
    """Tests for the catch-up check that runs on every arming."""

    @pytest.mark.asyncio
    async def test_never_reset_resets_once(self):
        """Test a store without a last reset is cleared immediately."""
        store = FakeResetStore(last_reset=None)
        clock = FakeClock(datetime(2024, 1, 3, 12, 0))
        scheduler = ResetScheduler(store, clock=clock)

        next_run = await scheduler.start()
        await scheduler.shutdown()

        assert store.reset_calls == [datetime(2024, 1, 3, 12, 0)]
        assert next_run == TRIGGER

    @pytest.mark.asyncio
    async def test_many_missed_weeks_reset_once(self):
        """Test missing several triggers still performs exactly one reset."""
        store = FakeResetStore(last_reset=TRIGGER - 10 * WEEK)
        scheduler = ResetScheduler(store, clock=FakeClock(datetime(2024, 1, 3, 12, 0)))

        await scheduler.start()
        await scheduler.shutdown()

        assert len(store.reset_calls) == 1

    @pytest.mark.asyncio
    async def test_recent_reset_is_not_repeated(self):
        """Test no reset when the last one is at or after the most recent trigger."""
        store = FakeResetStore(last_reset=TRIGGER - WEEK)
        scheduler = ResetScheduler(store, clock=FakeClock(datetime(2024, 1, 3, 12, 0)))

        next_run = await scheduler.start()
        assert scheduler.is_armed
        await scheduler.shutdown()

        assert store.reset_calls == []
        assert next_run == TRIGGER

    @pytest.mark.asyncio
    async def test_reset_just_before_trigger_is_stale(self):
        """Test a reset one minute before the last trigger counts as missed."""
        store = FakeResetStore(last_reset=TRIGGER - WEEK - timedelta(minutes=1))
        scheduler = ResetScheduler(store, clock=FakeClock(datetime(2024, 1, 3, 12, 0)))

        await scheduler.start()
        await scheduler.shutdown()

        assert len(store.reset_calls) == 1

    @pytest.mark.asyncio
    async def test_moving_trigger_into_the_past_resets(self):
        """Test rescheduling to an instant already passed this week clears the roster."""
        now = datetime(2024, 1, 3, 12, 0)
        store = FakeResetStore(last_reset=TRIGGER - WEEK)
        scheduler = ResetScheduler(store, clock=FakeClock(now))
        await scheduler.start()
        assert store.reset_calls == []

        # Monday 08:00 already passed this week
        next_run = await scheduler.reschedule(ResetSchedule(day_of_week=1, hour=8, minute=0))
        await scheduler.shutdown()

        assert store.reset_calls == [now]
        assert next_run == datetime(2024, 1, 8, 8, 0)

    @pytest.mark.asyncio
    async def test_load_failure_uses_default_schedule(self):
        """Test an unreadable schedule falls back to the defaults."""
        store = FakeResetStore(last_reset=TRIGGER - WEEK)
        store.fail_load = True
        scheduler = ResetScheduler(store, clock=FakeClock(datetime(2024, 1, 3, 12, 0)))

        next_run = await scheduler.start()
        await scheduler.shutdown()

        assert scheduler.schedule == ResetSchedule()
        assert next_run == TRIGGER


class TestTimer:
    """Tests for the armed timer."""

    @pytest.mark.asyncio
    async def test_reschedule_keeps_a_single_timer(self):
        """Test rearming cancels the previously pending timer."""
        store = FakeResetStore(last_reset=TRIGGER - WEEK)
        scheduler = ResetScheduler(store, clock=FakeClock(datetime(2024, 1, 3, 12, 0)))
        await scheduler.start()
        first_timer = scheduler._timer

        await scheduler.reschedule(ResetSchedule(day_of_week=6, hour=9, minute=30))
        await scheduler.shutdown()

        assert first_timer.cancelled()
        assert scheduler.schedule == ResetSchedule(day_of_week=6, hour=9, minute=30)

    @pytest.mark.asyncio
    async def test_shutdown_disarms(self):
        """Test shutdown cancels the pending timer."""
        store = FakeResetStore(last_reset=TRIGGER - WEEK)
        scheduler = ResetScheduler(store, clock=FakeClock(datetime(2024, 1, 3, 12, 0)))
        await scheduler.start()
        timer = scheduler._timer

        await scheduler.shutdown()

        assert timer.cancelled()
        assert not scheduler.is_armed
        assert scheduler.next_run is None

    @pytest.mark.asyncio
    async def test_fires_and_rearms_a_week_later(self):
        """Test the timer resets at the trigger and arms the following week."""
        clock = FakeClock(TRIGGER - timedelta(milliseconds=50))
        store = FakeResetStore(last_reset=TRIGGER - WEEK)
        scheduler = ResetScheduler(store, clock=clock)
        await scheduler.start()
        assert store.reset_calls == []
        clock.now = TRIGGER + timedelta(seconds=2)

        await asyncio.sleep(0.3)
        assert scheduler.next_run == TRIGGER + WEEK
        await scheduler.shutdown()

        assert store.reset_calls == [TRIGGER + timedelta(seconds=2)]
        assert store.last_reset == TRIGGER + timedelta(seconds=2)

    @pytest.mark.asyncio
    async def test_early_wake_waits_for_trigger(self):
        """Test a timer waking before the trigger re-arms without resetting."""
        clock = FakeClock(TRIGGER - timedelta(milliseconds=20))
        store = FakeResetStore(last_reset=TRIGGER - WEEK)
        scheduler = ResetScheduler(store, clock=clock)
        await scheduler.start()

        await asyncio.sleep(0.1)

        assert store.reset_calls == []
        assert scheduler.next_run == TRIGGER
        assert scheduler.is_armed
        await scheduler.shutdown()

    @pytest.mark.asyncio
    async def test_delay_follows_dst_change(self, central_european_time):
        """Test the armed delay is real elapsed time across the end of summer time."""
        # Saturday 2024-10-26 12:00 CEST; clocks go back on Sunday the 27th
        clock = FakeClock(datetime(2024, 10, 26, 12, 0))
        store = FakeResetStore(last_reset=datetime(2024, 10, 25, 23, 59))
        scheduler = ResetScheduler(store, clock=clock)

        next_run = await scheduler.start()
        delay = scheduler._timer.when() - asyncio.get_running_loop().time()
        await scheduler.shutdown()

        assert next_run == datetime(2024, 11, 1, 23, 59)
        # 6 days 12:59 of wall clock plus the repeated hour
        assert delay == pytest.approx(565140, abs=5)
        assert store.reset_calls == []

    @pytest.mark.asyncio
    async def test_overdue_trigger_fires_immediately(self):
        """Test a trigger already behind the clock fires on the next loop iteration."""
        calls = iter([TRIGGER - timedelta(seconds=1)])

        def clock():
            return next(calls, TRIGGER + timedelta(seconds=1))

        store = FakeResetStore(last_reset=TRIGGER - WEEK)
        scheduler = ResetScheduler(store, clock=clock)
        next_run = await scheduler.start()
        assert next_run == TRIGGER

        await asyncio.sleep(0.05)

        assert store.reset_calls == [TRIGGER + timedelta(seconds=1)]
        assert scheduler.next_run == TRIGGER + WEEK
        assert scheduler.is_armed
        await scheduler.shutdown()

    @pytest.mark.asyncio
    async def test_failed_reset_is_logged_and_rearmed(self, caplog):
        """Test a store error does not stop the weekly cycle."""
        calls = iter([TRIGGER - timedelta(seconds=1)])

        def clock():
            return next(calls, TRIGGER + timedelta(seconds=1))

        store = FakeResetStore(last_reset=TRIGGER - WEEK)
        store.fail_reset = True
        scheduler = ResetScheduler(store, clock=clock)
        await scheduler.start()

        await asyncio.sleep(0.05)

        assert store.reset_calls == []
        assert "Roster reset failed" in caplog.text
        assert scheduler.next_run == TRIGGER + WEEK
        assert scheduler.is_armed
        await scheduler.shutdown()

    @pytest.mark.asyncio
    async def test_fire_reloads_the_schedule(self):
        """Test the next arming uses the schedule stored at fire time."""
        calls = iter([TRIGGER - timedelta(seconds=1)])

        def clock():
            return next(calls, TRIGGER + timedelta(seconds=1))

        store = FakeResetStore(last_reset=TRIGGER - WEEK)
        scheduler = ResetScheduler(store, clock=clock)
        await scheduler.start()
        store.schedule = ResetSchedule(day_of_week=0, hour=10, minute=0)

        await asyncio.sleep(0.05)

        # Sunday after Friday 2024-01-05
        assert scheduler.next_run == datetime(2024, 1, 7, 10, 0)
        await scheduler.shutdown()

    @pytest.mark.asyncio
    async def test_reload_failure_keeps_previous_schedule(self):
        """Test an unreadable schedule at fire time keeps the current one."""
        calls = iter([TRIGGER - timedelta(seconds=1)])

        def clock():
            return next(calls, TRIGGER + timedelta(seconds=1))

        store = FakeResetStore(last_reset=TRIGGER - WEEK)
        scheduler = ResetScheduler(store, clock=clock)
        await scheduler.start()
        store.fail_load = True

        await asyncio.sleep(0.05)

        assert scheduler.schedule == FRIDAY_NIGHT
        assert scheduler.next_run == TRIGGER + WEEK
        await scheduler.shutdown()


# =============================================================================
# Database-backed store
# =============================================================================


class TestSqlResetStore:
    """Tests for the SQL-backed reset store."""

    @pytest.mark.asyncio
    async def test_reset_clears_roster_and_records_time(self, session_factory):
        """Test participants are deleted and last_reset is written together."""
        async with session_factory() as db:
            await get_reset_settings(db)
            await db.commit()
            await create_participant(db, "Alice", "alice@example.com", None)
            await create_participant(db, "Bob", "bob@example.com", None)

        store = SqlResetStore(session_factory)
        removed = await store.reset_roster(TRIGGER)

        assert removed == 2
        assert await store.load_last_reset() == TRIGGER
        async with session_factory() as db:
            count = (await db.execute(select(func.count()).select_from(Participant))).scalar_one()
        assert count == 0

    @pytest.mark.asyncio
    async def test_loads_stored_schedule(self, session_factory):
        """Test the schedule comes from the settings row."""
        async with session_factory() as db:
            db.add(ResetSettings(id=1, reset_day_of_week=2, reset_hour=7, reset_minute=5))
            await db.commit()

        store = SqlResetStore(session_factory)

        assert await store.load_schedule() == ResetSchedule(day_of_week=2, hour=7, minute=5)
        assert await store.load_last_reset() is None

    @pytest.mark.asyncio
    async def test_scheduler_catches_up_against_database(self, session_factory):
        """Test a first start clears a roster that was never reset."""
        async with session_factory() as db:
            await get_reset_settings(db)
            await db.commit()
            await create_participant(db, "Alice", "alice@example.com", None)

        now = datetime(2024, 1, 3, 12, 0)
        scheduler = ResetScheduler(SqlResetStore(session_factory), clock=FakeClock(now))
        await scheduler.start()
        await scheduler.shutdown()

        async with session_factory() as db:
            row = await get_reset_settings(db)
            count = (await db.execute(select(func.count()).select_from(Participant))).scalar_one()
        assert row.last_reset == now
        assert count == 0
