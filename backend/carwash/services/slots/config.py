# backend/carwash/services/slots/config.py
"""
Booking configuration for slots calculation.
"""

from dataclasses import dataclass
from datetime import timedelta, timezone
from functools import lru_cache


def time_str_to_minutes(time_str: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    hour, minute = time_str.split(":")
    return int(hour) * 60 + int(minute)


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM" (wraps past 24:00)."""
    minutes %= 24 * 60
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for the booking/slots engine.

    Attributes:
        open_time: Start of the operating window, "HH:MM" (reference tz)
        close_time: End of the operating window, exclusive
        slot_interval_minutes: Grid step in minutes
        utc_offset_minutes: Fixed reference-timezone offset (SAST = +120)
        default_active_bays: Capacity when a location has no settings at all
        points_per_free_wash: Loyalty points that convert into one free wash
    """
    open_time: str = "08:00"
    close_time: str = "17:00"
    slot_interval_minutes: int = 15
    utc_offset_minutes: int = 120
    default_active_bays: int = 1
    points_per_free_wash: int = 10

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_interval_minutes <= 0:
            raise ValueError(
                f"slot_interval_minutes must be positive, got {self.slot_interval_minutes}"
            )
        if self.open_minutes >= self.close_minutes:
            raise ValueError(
                f"open_time {self.open_time} must be before close_time {self.close_time}"
            )
        if (self.close_minutes - self.open_minutes) % self.slot_interval_minutes:
            raise ValueError("slot_interval_minutes must divide the operating window")
        if self.default_active_bays < 1:
            raise ValueError("default_active_bays must be >= 1")
        if self.points_per_free_wash < 1:
            raise ValueError("points_per_free_wash must be >= 1")

    @property
    def open_minutes(self) -> int:
        return time_str_to_minutes(self.open_time)

    @property
    def close_minutes(self) -> int:
        return time_str_to_minutes(self.close_time)

    @property
    def tz(self) -> timezone:
        """Reference timezone as a fixed offset."""
        return timezone(timedelta(minutes=self.utc_offset_minutes))


@lru_cache
def get_booking_config() -> BookingConfig:
    """Process-wide booking configuration, read once from settings."""
    from ...config import settings

    return BookingConfig(
        open_time=settings.open_time,
        close_time=settings.close_time,
        slot_interval_minutes=settings.slot_interval_minutes,
        utc_offset_minutes=settings.utc_offset_minutes,
        default_active_bays=settings.default_active_bays,
        points_per_free_wash=settings.points_per_free_wash,
    )
