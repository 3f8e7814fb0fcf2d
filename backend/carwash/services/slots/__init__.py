# backend/carwash/services/slots/__init__.py
"""
Slot engine.

Grid and capacity -> occupancy -> availability.
"""

from .config import BookingConfig, get_booking_config
from .grid import SlotGrid
from .occupancy import OccupancyCalculator
from .settings_resolver import SettingsResolver
from .availability import AvailabilityEngine

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "SlotGrid",
    "OccupancyCalculator",
    "SettingsResolver",
    "AvailabilityEngine",
]
