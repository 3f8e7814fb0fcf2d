# backend/carwash/services/slots/grid.py
"""
Slot grid: the ordered "HH:MM" labels of the operating window and the
slot arithmetic used by both availability and occupancy.

Every conversion goes through the same fixed reference offset and the same
interval, so a booking's occupied labels are always labels of the grid.
Stored instants are naive UTC datetimes.
"""

from datetime import date, datetime, timedelta, timezone
from math import ceil

from .config import BookingConfig, get_booking_config, minutes_to_time_str, time_str_to_minutes


class SlotGrid:
    """Slot labels and time arithmetic for one BookingConfig."""

    def __init__(self, config: BookingConfig | None = None):
        self.config = config or get_booking_config()

    @property
    def interval(self) -> int:
        return self.config.slot_interval_minutes

    # ── Labels ───────────────────────────────────────────────────────────

    def generate(self) -> list[str]:
        """Labels spanning [open, close), ascending."""
        return [
            minutes_to_time_str(t)
            for t in range(self.config.open_minutes, self.config.close_minutes, self.interval)
        ]

    def is_slot(self, label: str) -> bool:
        try:
            minutes = time_str_to_minutes(label)
        except ValueError:
            return False
        return (
            self.config.open_minutes <= minutes < self.config.close_minutes
            and (minutes - self.config.open_minutes) % self.interval == 0
        )

    def slots_for_duration(self, duration_minutes: int) -> int:
        return ceil(duration_minutes / self.interval)

    def consecutive(self, label: str, count: int) -> list[str]:
        """`count` labels starting at `label`; may run past closing time."""
        start = time_str_to_minutes(label)
        return [minutes_to_time_str(start + i * self.interval) for i in range(count)]

    def slot_at(self, instant: datetime) -> str:
        """Label of the slot containing a stored (UTC) instant."""
        local = self.to_local(instant)
        minutes = local.hour * 60 + local.minute
        offset = (minutes - self.config.open_minutes) // self.interval * self.interval
        return minutes_to_time_str(self.config.open_minutes + offset)

    # ── Timezone ─────────────────────────────────────────────────────────

    def to_local(self, instant: datetime) -> datetime:
        """UTC instant (naive means UTC) -> aware reference-tz datetime."""
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return instant.astimezone(self.config.tz)

    def local_to_utc(self, value: datetime) -> datetime:
        """
        Client-local start time -> naive UTC instant for storage.

        Naive values are read as reference-tz wall time (i.e. minus the
        fixed offset); aware values are converted by their own offset.
        """
        if value.tzinfo is None:
            value = value.replace(tzinfo=self.config.tz)
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def to_utc(self, target_date: date, label: str) -> datetime:
        """Reference-tz (date, label) -> naive UTC instant."""
        local = datetime.combine(target_date, datetime.min.time()) + timedelta(
            minutes=time_str_to_minutes(label)
        )
        return self.local_to_utc(local)

    def day_bounds(self, target_date: date) -> tuple[datetime, datetime]:
        """Half-open naive-UTC window [start, end) of a reference-tz day."""
        start = self.local_to_utc(datetime.combine(target_date, datetime.min.time()))
        return start, start + timedelta(days=1)

    def now_local(self, now: datetime | None = None) -> datetime:
        return self.to_local(now or datetime.now(timezone.utc))

    def today(self, now: datetime | None = None) -> date:
        return self.now_local(now).date()
