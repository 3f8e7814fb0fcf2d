# backend/carwash/schemas/blocked_slots.py

from datetime import date

from pydantic import Field

from .common import CamelModel


class BlockedSlotToggle(CamelModel):
    """Posting an existing (date, timeSlot) unblocks it; an absent one blocks it."""
    location_id: str = Field(min_length=1)
    date: date
    time_slot: str = Field(pattern=r"^\d{2}:\d{2}$")


class BlockedSlotToggleResponse(CamelModel):
    location_id: str
    date: date
    time_slot: str
    blocked: bool


class BlockedSlotsRead(CamelModel):
    location_id: str
    date: date
    slots: list[str]
