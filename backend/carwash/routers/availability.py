# backend/carwash/routers/availability.py
"""
Customer-facing availability.

GET /availability?date=YYYY-MM-DD&locationId=...[&serviceId=...]
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.availability import AvailabilityResponse
from ..services.slots import AvailabilityEngine, BookingConfig, get_booking_config

router = APIRouter(prefix="/availability", tags=["availability"])


@router.get("", response_model=AvailabilityResponse)
def get_availability(
    target_date: date = Query(..., alias="date"),
    location_id: str = Query(..., alias="locationId", min_length=1),
    service_id: Optional[int] = Query(None, alias="serviceId"),
    db: Session = Depends(get_db),
    config: BookingConfig = Depends(get_booking_config),
):
    """Bookable slots for a location/day; empty for past days."""
    engine = AvailabilityEngine(db, config)
    slots = engine.availability(location_id, target_date, service_id=service_id)

    return AvailabilityResponse(
        location_id=location_id,
        date=target_date,
        service_id=service_id,
        slots=slots,
    )
