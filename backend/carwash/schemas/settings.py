# backend/carwash/schemas/settings.py

from datetime import date
from typing import Literal, Optional

from pydantic import Field

from .common import CamelModel


class ActiveBaysUpdate(CamelModel):
    active_bays: int = Field(..., ge=1, description="Concurrent bookings per slot (>= 1)")


class GlobalSettingsRead(CamelModel):
    location_id: str
    active_bays: int
    is_default: bool = False


class DailySettingsRead(CamelModel):
    location_id: str
    date: date
    active_bays: int
    source: Literal["daily", "global", "default"]
    override: Optional[int] = None
