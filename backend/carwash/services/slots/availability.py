# backend/carwash/services/slots/availability.py
"""
Bookable slots for a location on a day.

Composes:
- SettingsResolver (active bays for the date)
- SlotGrid (operating-window labels)
- OccupancyCalculator (bookings in the reference-day window)
- blocked slots
- "past" cutoff for today

Read-only and deterministic: identical inputs give identical output.
"""

from datetime import date, datetime

from sqlalchemy.orm import Session

from ...core.errors import NotFound
from ...models import Bookings, Locations, Services
from .. import blocked_slots
from .config import BookingConfig, get_booking_config
from .grid import SlotGrid
from .occupancy import OccupancyCalculator, get_service_durations
from .settings_resolver import SettingsResolver


class AvailabilityEngine:
    def __init__(self, db: Session, config: BookingConfig | None = None):
        self.db = db
        self.config = config or get_booking_config()
        self.grid = SlotGrid(self.config)
        self.settings = SettingsResolver(db, self.config)
        self.occupancy_calculator = OccupancyCalculator(self.grid)

    def availability(
        self,
        location_id: str,
        target_date: date,
        now: datetime | None = None,
        service_id: int | None = None,
    ) -> list[str]:
        """
        Ascending list of bookable "HH:MM" labels.

        With service_id, a label is kept only if every slot the service
        would span is below capacity.
        """
        require_location(self.db, location_id)
        slots_needed = 1
        if service_id is not None:
            service = require_service(self.db, location_id, service_id)
            slots_needed = self.grid.slots_for_duration(service.duration_in_minutes)

        # Step 1: no past days
        local_now = self.grid.now_local(now)
        today = local_now.date()
        if target_date < today:
            return []

        # Step 2-4: capacity, grid, occupancy
        active_bays = self.settings.resolve(location_id, target_date)
        all_slots = self.grid.generate()
        occupied = self.occupancy(location_id, target_date)

        # Step 5: administrative blocks
        blocked = set(blocked_slots.list_blocked_slots(self.db, location_id, target_date))

        # Step 6
        available = [
            s for s in all_slots
            if s not in blocked
            and all(
                occupied.get(t, 0) < active_bays
                for t in self.grid.consecutive(s, slots_needed)
            )
        ]

        # Step 7: today, drop labels at or before the current time-of-day
        if target_date == today:
            current = local_now.strftime("%H:%M")
            available = [s for s in available if s > current]

        return available

    def occupancy(self, location_id: str, target_date: date) -> dict[str, int]:
        """label -> count for bookings starting within the reference day."""
        bookings = day_bookings(self.db, self.grid, location_id, target_date)
        durations = get_service_durations(self.db, (b.service_id for b in bookings))
        return self.occupancy_calculator.compute(bookings, durations)


def day_bookings(db: Session, grid: SlotGrid, location_id: str, target_date: date) -> list[Bookings]:
    """Bookings whose start falls inside the reference-tz day, by start time."""
    day_start, day_end = grid.day_bounds(target_date)
    return (
        db.query(Bookings)
        .filter(
            Bookings.location_id == location_id,
            Bookings.start_time >= day_start,
            Bookings.start_time < day_end,
        )
        .order_by(Bookings.start_time.asc(), Bookings.bay_id.asc())
        .all()
    )


def require_location(db: Session, location_id: str) -> Locations:
    location = db.get(Locations, location_id)
    if not location or not location.is_active:
        raise NotFound(f"Location {location_id} not found")
    return location


def require_service(db: Session, location_id: str, service_id: int) -> Services:
    service = db.get(Services, service_id)
    if not service or not service.is_active or service.location_id != location_id:
        raise NotFound(f"Service {service_id} not found at this location")
    return service
