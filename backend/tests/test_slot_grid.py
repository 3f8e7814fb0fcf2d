"""Tests for slot grid generation and time arithmetic."""

from datetime import date, datetime, timedelta, timezone

import pytest

from carwash.services.slots import BookingConfig, SlotGrid
from carwash.services.slots.config import minutes_to_time_str, time_str_to_minutes

SAST = timezone(timedelta(hours=2))


class TestGenerate:
    @pytest.mark.parametrize(
        "open_time,close_time,interval",
        [
            ("08:00", "17:00", 15),
            ("06:30", "18:00", 30),
            ("07:00", "19:00", 60),
            ("09:00", "09:45", 15),
        ],
    )
    def test_strictly_increasing_and_sized(self, open_time, close_time, interval):
        grid = SlotGrid(BookingConfig(open_time=open_time, close_time=close_time, slot_interval_minutes=interval))

        labels = grid.generate()

        expected_len = (time_str_to_minutes(close_time) - time_str_to_minutes(open_time)) // interval
        assert len(labels) == expected_len
        assert len(set(labels)) == len(labels)
        assert labels == sorted(labels)
        assert labels[0] == open_time
        assert close_time not in labels

    def test_default_window(self, grid):
        labels = grid.generate()

        assert len(labels) == 36
        assert labels[:3] == ["08:00", "08:15", "08:30"]
        assert labels[-1] == "16:45"

    def test_is_slot(self, grid):
        assert grid.is_slot("08:00")
        assert grid.is_slot("16:45")
        assert not grid.is_slot("17:00")
        assert not grid.is_slot("07:45")
        assert not grid.is_slot("09:10")
        assert not grid.is_slot("nine")


class TestArithmetic:
    @pytest.mark.parametrize(
        "minutes,expected",
        [(1, 1), (15, 1), (16, 2), (30, 2), (45, 3), (60, 4), (61, 5)],
    )
    def test_slots_for_duration(self, grid, minutes, expected):
        assert grid.slots_for_duration(minutes) == expected

    def test_consecutive_runs_past_closing(self, grid):
        assert grid.consecutive("16:30", 3) == ["16:30", "16:45", "17:00"]

    def test_slot_at_uses_reference_offset(self, grid):
        # 07:00 UTC is 09:00 SAST
        assert grid.slot_at(datetime(2030, 6, 3, 7, 0)) == "09:00"
        assert grid.slot_at(datetime(2030, 6, 3, 7, 0, tzinfo=timezone.utc)) == "09:00"

    def test_slot_at_floors_to_interval(self, grid):
        assert grid.slot_at(datetime(2030, 6, 3, 7, 14)) == "09:00"
        assert grid.slot_at(datetime(2030, 6, 3, 7, 15)) == "09:15"

    def test_booking_slots_are_grid_labels(self, grid):
        labels = set(grid.generate())
        for label in grid.generate():
            instant = grid.to_utc(date(2030, 6, 3), label)
            assert grid.slot_at(instant) == label
            assert grid.slot_at(instant) in labels


class TestTimezone:
    def test_naive_local_start_is_shifted_two_hours(self, grid):
        assert grid.local_to_utc(datetime(2030, 6, 3, 9, 0)) == datetime(2030, 6, 3, 7, 0)

    def test_aware_start_uses_its_own_offset(self, grid):
        assert grid.local_to_utc(datetime(2030, 6, 3, 9, 0, tzinfo=SAST)) == datetime(2030, 6, 3, 7, 0)
        assert grid.local_to_utc(datetime(2030, 6, 3, 9, 0, tzinfo=timezone.utc)) == datetime(2030, 6, 3, 9, 0)

    def test_day_bounds(self, grid):
        start, end = grid.day_bounds(date(2030, 6, 3))

        assert start == datetime(2030, 6, 2, 22, 0)
        assert end == datetime(2030, 6, 3, 22, 0)

    def test_today_rolls_over_at_local_midnight(self, grid):
        # 22:30 UTC is already the next day in SAST
        assert grid.today(datetime(2030, 6, 2, 22, 30, tzinfo=timezone.utc)) == date(2030, 6, 3)
        assert grid.today(datetime(2030, 6, 2, 21, 30, tzinfo=timezone.utc)) == date(2030, 6, 2)


class TestConfig:
    def test_time_helpers(self):
        assert time_str_to_minutes("09:30") == 570
        assert minutes_to_time_str(570) == "09:30"
        assert minutes_to_time_str(24 * 60 + 15) == "00:15"

    def test_rejects_interval_not_dividing_window(self):
        with pytest.raises(ValueError):
            BookingConfig(open_time="08:00", close_time="17:10", slot_interval_minutes=15)

    def test_rejects_inverted_window(self):
        with pytest.raises(ValueError):
            BookingConfig(open_time="17:00", close_time="08:00")

    def test_rejects_zero_bays(self):
        with pytest.raises(ValueError):
            BookingConfig(default_active_bays=0)

    def test_tz_is_fixed_offset(self, config):
        assert config.tz.utcoffset(None) == timedelta(minutes=120)
