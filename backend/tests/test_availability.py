"""Tests for the availability engine."""

from datetime import date, datetime, timezone

import pytest

from carwash.core.errors import NotFound
from carwash.services import blocked_slots
from carwash.services.slots import AvailabilityEngine, SettingsResolver

from conftest import FUTURE_DAY, LOCATION_ID, add_booking, seed_location

# 06:00 UTC on the day before FUTURE_DAY
BEFORE = datetime(2030, 6, 2, 6, 0, tzinfo=timezone.utc)


@pytest.fixture
def services(db):
    return seed_location(db)


@pytest.fixture
def availability(db, config):
    return AvailabilityEngine(db, config)


class TestAvailability:
    def test_empty_day_returns_full_grid(self, availability, grid, services):
        slots = availability.availability(LOCATION_ID, FUTURE_DAY, now=BEFORE)

        assert slots == grid.generate()

    def test_booking_removes_its_slots_at_capacity(self, db, availability, grid, services):
        add_booking(db, grid, services["wash"], FUTURE_DAY, "09:00")

        slots = availability.availability(LOCATION_ID, FUTURE_DAY, now=BEFORE)

        assert "09:00" not in slots
        assert "09:15" not in slots
        assert "08:45" in slots
        assert "09:30" in slots
        assert len(slots) == 34

    def test_extra_bay_keeps_slots_open(self, db, availability, grid, services):
        SettingsResolver(db).set_global(LOCATION_ID, 2)
        add_booking(db, grid, services["wash"], FUTURE_DAY, "09:00")

        assert "09:00" in availability.availability(LOCATION_ID, FUTURE_DAY, now=BEFORE)

        add_booking(db, grid, services["wash"], FUTURE_DAY, "09:00", bay_id=2)

        assert "09:00" not in availability.availability(LOCATION_ID, FUTURE_DAY, now=BEFORE)

    def test_daily_override_reduces_capacity(self, db, availability, grid, services):
        resolver = SettingsResolver(db)
        resolver.set_global(LOCATION_ID, 2)
        resolver.set_daily(LOCATION_ID, FUTURE_DAY, 1)
        add_booking(db, grid, services["wash"], FUTURE_DAY, "10:00")

        assert "10:00" not in availability.availability(LOCATION_ID, FUTURE_DAY, now=BEFORE)

    def test_past_day_is_empty(self, availability, services):
        now = datetime(2030, 6, 4, 8, 0, tzinfo=timezone.utc)

        assert availability.availability(LOCATION_ID, FUTURE_DAY, now=now) == []

    def test_today_drops_elapsed_slots(self, availability, services):
        # 07:10 UTC is 09:10 SAST
        now = datetime(2030, 6, 3, 7, 10, tzinfo=timezone.utc)

        slots = availability.availability(LOCATION_ID, FUTURE_DAY, now=now)

        assert slots[0] == "09:15"
        assert all(s > "09:10" for s in slots)

    def test_today_excludes_current_slot(self, availability, services):
        now = datetime(2030, 6, 3, 7, 0, tzinfo=timezone.utc)

        slots = availability.availability(LOCATION_ID, FUTURE_DAY, now=now)

        assert "09:00" not in slots
        assert slots[0] == "09:15"

    def test_blocked_slot_is_excluded(self, db, availability, grid, services):
        blocked_slots.toggle_blocked_slot(db, grid, LOCATION_ID, FUTURE_DAY, "11:30")

        slots = availability.availability(LOCATION_ID, FUTURE_DAY, now=BEFORE)

        assert "11:30" not in slots
        assert "11:15" in slots
        assert "11:45" in slots

    def test_bookings_on_other_days_are_ignored(self, db, availability, grid, services):
        add_booking(db, grid, services["wash"], date(2030, 6, 4), "09:00")
        add_booking(db, grid, services["wash"], date(2030, 6, 2), "09:00")

        assert "09:00" in availability.availability(LOCATION_ID, FUTURE_DAY, now=BEFORE)

    def test_bookings_at_other_locations_are_ignored(self, db, availability, grid, services):
        other = seed_location(db, location_id="sandton")
        add_booking(db, grid, other["wash"], FUTURE_DAY, "09:00", location_id="sandton")

        assert "09:00" in availability.availability(LOCATION_ID, FUTURE_DAY, now=BEFORE)

    def test_result_is_sorted_and_unique(self, db, availability, grid, services):
        add_booking(db, grid, services["valet"], FUTURE_DAY, "13:00")

        slots = availability.availability(LOCATION_ID, FUTURE_DAY, now=BEFORE)

        assert slots == sorted(set(slots))
        assert set(slots) <= set(grid.generate())

    def test_repeated_calls_are_identical(self, db, availability, grid, services):
        add_booking(db, grid, services["valet"], FUTURE_DAY, "10:00")

        first = availability.availability(LOCATION_ID, FUTURE_DAY, now=BEFORE)
        second = availability.availability(LOCATION_ID, FUTURE_DAY, now=BEFORE)

        assert first == second

    def test_service_filter_requires_every_spanned_slot(self, db, availability, grid, services):
        add_booking(db, grid, services["wash"], FUTURE_DAY, "10:00")

        slots = availability.availability(LOCATION_ID, FUTURE_DAY, now=BEFORE, service_id=services["valet"])

        # a 60 minute valet starting 09:15..09:45 would run into 10:00
        assert "09:00" in slots
        for label in ("09:15", "09:30", "09:45", "10:00", "10:15"):
            assert label not in slots
        assert "10:30" in slots

    def test_unknown_location(self, availability, services):
        with pytest.raises(NotFound):
            availability.availability("nowhere", FUTURE_DAY, now=BEFORE)

    def test_service_from_other_location(self, db, availability, services):
        other = seed_location(db, location_id="sandton")

        with pytest.raises(NotFound):
            availability.availability(LOCATION_ID, FUTURE_DAY, now=BEFORE, service_id=other["wash"])


class TestOccupancy:
    def test_counts_day_bookings(self, db, availability, grid, services):
        SettingsResolver(db).set_global(LOCATION_ID, 2)
        add_booking(db, grid, services["wash"], FUTURE_DAY, "09:00")
        add_booking(db, grid, services["valet"], FUTURE_DAY, "09:00", bay_id=2)

        occupied = availability.occupancy(LOCATION_ID, FUTURE_DAY)

        assert occupied == {"09:00": 2, "09:15": 2, "09:30": 1, "09:45": 1}

    def test_day_window_follows_reference_timezone(self, db, availability, grid, services):
        # 08:00 SAST on FUTURE_DAY is 06:00 UTC, inside the window
        add_booking(db, grid, services["wash"], FUTURE_DAY, "08:00")

        assert availability.occupancy(LOCATION_ID, FUTURE_DAY) == {"08:00": 1, "08:15": 1}
        assert availability.occupancy(LOCATION_ID, date(2030, 6, 2)) == {}
