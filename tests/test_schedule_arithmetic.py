"""Tests for weekly trigger arithmetic."""

from datetime import datetime, timedelta

import pytest

from saladplanner.schedule.arithmetic import (
    WEEK,
    ResetSchedule,
    most_recent_trigger,
    next_trigger,
    sunday_based_weekday,
)

# January 2024: Monday the 1st through Sunday the 7th
MONDAY = datetime(2024, 1, 1, 10, 0)
FRIDAY = datetime(2024, 1, 5)
SATURDAY = datetime(2024, 1, 6)
SUNDAY = datetime(2024, 1, 7)

FRIDAY_NIGHT = ResetSchedule(day_of_week=5, hour=23, minute=59)


class TestSundayBasedWeekday:
    """Tests for the 0=Sunday weekday mapping."""

    def test_sunday_is_zero(self):
        """Test that Sunday maps to 0."""
        assert SUNDAY.weekday() == 6
        assert sunday_based_weekday(SUNDAY) == 0

    def test_week_days(self):
        """Test Monday through Saturday map to 1..6."""
        for offset in range(6):
            assert sunday_based_weekday(MONDAY + timedelta(days=offset)) == offset + 1


class TestNextTrigger:
    """Tests for next_trigger."""

    def test_later_the_same_week(self):
        """Test a trigger later in the week is found on that day."""
        assert next_trigger(FRIDAY_NIGHT, MONDAY) == datetime(2024, 1, 5, 23, 59)

    def test_later_the_same_day(self):
        """Test a trigger later today fires today."""
        now = FRIDAY.replace(hour=23, minute=58)
        assert next_trigger(FRIDAY_NIGHT, now) == datetime(2024, 1, 5, 23, 59)

    def test_exact_trigger_instant_rolls_to_next_week(self):
        """Test that now == trigger counts as passed."""
        now = datetime(2024, 1, 5, 23, 59)
        assert next_trigger(FRIDAY_NIGHT, now) == datetime(2024, 1, 12, 23, 59)

    def test_seconds_past_trigger_roll_to_next_week(self):
        """Test the trigger minute is considered passed once seconds tick."""
        now = datetime(2024, 1, 5, 23, 59, 30)
        assert next_trigger(FRIDAY_NIGHT, now) == datetime(2024, 1, 12, 23, 59)

    def test_day_after_trigger(self):
        """Test the trigger the day after is six days away."""
        assert next_trigger(FRIDAY_NIGHT, SATURDAY) == datetime(2024, 1, 12, 23, 59)

    def test_sunday_trigger(self):
        """Test a Sunday schedule from a Saturday."""
        schedule = ResetSchedule(day_of_week=0, hour=8, minute=0)
        now = SATURDAY.replace(hour=12)
        assert next_trigger(schedule, now) == datetime(2024, 1, 7, 8, 0)

    def test_midnight_trigger_earlier_today(self):
        """Test a trigger earlier on the same weekday waits a week."""
        schedule = ResetSchedule(day_of_week=1, hour=0, minute=0)
        assert next_trigger(schedule, MONDAY) == datetime(2024, 1, 8, 0, 0)

    def test_invalid_hour_raises(self):
        """Test out-of-range times raise ValueError."""
        with pytest.raises(ValueError):
            next_trigger(ResetSchedule(day_of_week=5, hour=24, minute=0), MONDAY)

    @pytest.mark.parametrize("day_of_week", range(7))
    @pytest.mark.parametrize(
        "now",
        [
            MONDAY,
            datetime(2024, 1, 5, 23, 59),
            datetime(2024, 1, 6, 0, 0, 0, 1),
            datetime(2024, 2, 29, 12, 30, 45),
            datetime(2024, 12, 31, 23, 59, 59),
        ],
    )
    def test_result_is_within_one_week_on_the_right_day(self, day_of_week, now):
        """Test next is after now, at most a week ahead, on the configured day and time."""
        schedule = ResetSchedule(day_of_week=day_of_week, hour=7, minute=15)
        result = next_trigger(schedule, now)

        assert now < result <= now + WEEK
        assert sunday_based_weekday(result) == day_of_week
        assert (result.hour, result.minute, result.second, result.microsecond) == (7, 15, 0, 0)


class TestMostRecentTrigger:
    """Tests for most_recent_trigger."""

    def test_is_one_week_before_next(self):
        """Test the previous trigger is exactly a week before the next."""
        assert most_recent_trigger(FRIDAY_NIGHT, MONDAY) == datetime(2023, 12, 29, 23, 59)

    def test_exact_trigger_instant_is_most_recent(self):
        """Test the trigger instant itself is the most recent once reached."""
        now = datetime(2024, 1, 5, 23, 59)
        assert most_recent_trigger(FRIDAY_NIGHT, now) == now

    @pytest.mark.parametrize("offset_hours", [0, 1, 25, 100, 167])
    def test_not_after_now(self, offset_hours):
        """Test most recent <= now < next for any instant."""
        now = MONDAY + timedelta(hours=offset_hours)
        previous = most_recent_trigger(FRIDAY_NIGHT, now)

        assert previous <= now < next_trigger(FRIDAY_NIGHT, now)
        assert next_trigger(FRIDAY_NIGHT, now) - previous == WEEK
