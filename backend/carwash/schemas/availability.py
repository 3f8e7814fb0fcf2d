# backend/carwash/schemas/availability.py

from datetime import date

from .common import CamelModel


class AvailabilityResponse(CamelModel):
    """Bookable slots of one location/day, ascending "HH:MM" labels."""
    location_id: str
    date: date
    service_id: int | None = None
    slots: list[str]
