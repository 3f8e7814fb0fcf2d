# backend/carwash/services/slots/occupancy.py
"""
Per-slot occupancy from existing bookings.

A booking occupies slots_for_duration(duration) consecutive labels starting
at slot_at(start_time). Duration comes from the booking's own snapshot when
present, otherwise from its service. Trailing labels past closing time are
counted as-is.
"""

import logging
from collections import Counter
from typing import Iterable

from sqlalchemy.orm import Session

from .grid import SlotGrid

logger = logging.getLogger(__name__)


class OccupancyCalculator:
    def __init__(self, grid: SlotGrid):
        self.grid = grid

    def compute(self, bookings: Iterable, durations: dict[int, int]) -> dict[str, int]:
        """
        Args:
            bookings: objects with start_time, service_id and optional
                      duration_in_minutes
            durations: service_id -> duration in minutes

        Returns:
            label -> number of bookings covering it
        """
        occupied: Counter[str] = Counter()

        for booking in bookings:
            labels = self.booking_slots(booking, durations)
            if labels is None:
                logger.warning(
                    f"Booking {getattr(booking, 'id', None)} references missing "
                    f"service {booking.service_id}, skipped in occupancy"
                )
                continue
            occupied.update(labels)

        return dict(occupied)

    def booking_slots(self, booking, durations: dict[int, int]) -> list[str] | None:
        """Labels covered by one booking, or None if its duration is unknown."""
        duration = booking_duration(booking, durations)
        if duration is None:
            return None
        first = self.grid.slot_at(booking.start_time)
        return self.grid.consecutive(first, self.grid.slots_for_duration(duration))


def booking_duration(booking, durations: dict[int, int]) -> int | None:
    snapshot = getattr(booking, "duration_in_minutes", None)
    if snapshot:
        return snapshot
    return durations.get(booking.service_id)


def get_service_durations(db: Session, service_ids: Iterable[int]) -> dict[int, int]:
    """Durations of the given services (missing ids are simply absent)."""
    from ...models import Services

    ids = set(service_ids)
    if not ids:
        return {}

    rows = (
        db.query(Services.id, Services.duration_in_minutes)
        .filter(Services.id.in_(ids))
        .all()
    )
    return {service_id: duration for service_id, duration in rows}
