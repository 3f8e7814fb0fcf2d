# backend/carwash/schemas/bookings.py

from datetime import datetime
from typing import Optional

from pydantic import Field

from .common import CamelModel


class BookingCreate(CamelModel):
    """
    startTime is the client-local wall time in the reference timezone
    (e.g. "2026-10-20T09:00:00"); an explicit offset is honoured.
    """
    service_id: int
    location_id: str = Field(min_length=1)
    start_time: datetime
    payment_reference: Optional[str] = None


class FreeWashRedeem(CamelModel):
    service_id: int
    location_id: str = Field(min_length=1)
    start_time: datetime


class BookingCreated(CamelModel):
    booking_id: int
    bay_id: int
    status: str
    start_time: datetime  # UTC
    warning: Optional[str] = None


class ManagerBookingRead(CamelModel):
    id: int
    location_id: str
    user_id: str
    service_id: int
    start_time: datetime  # UTC
    status: str
    bay_id: int
    created_at: datetime
    payment_reference: Optional[str] = None

    user_name: str
    service_name: str
    start_time_local: str  # "HH:MM", reference timezone


class BookingSummary(CamelModel):
    location_id: str
    date: str
    active_bays: int
    total: int
    by_status: dict[str, int]
    by_service: dict[str, int]
    occupancy: dict[str, int]
