# backend/carwash/schemas/catalog.py

from typing import Optional

from .common import CamelModel


class LocationRead(CamelModel):
    id: str
    name: str


class ServiceRead(CamelModel):
    id: int
    location_id: str
    name: str
    duration_in_minutes: int
    is_active: bool
    display_order: int
    price: Optional[float] = None
    description: Optional[str] = None
