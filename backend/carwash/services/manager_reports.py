# backend/carwash/services/manager_reports.py
"""
Manager views of a location's day: the booking list with user/service names
and an aggregate summary (by status, by service, per-slot occupancy).
"""

from collections import Counter
from datetime import date

from sqlalchemy.orm import Session

from ..models import Services, Users
from .slots.availability import AvailabilityEngine, day_bookings, require_location
from .slots.config import BookingConfig, get_booking_config
from .slots.grid import SlotGrid

UNKNOWN_USER = "Unknown User"
UNKNOWN_SERVICE = "Unknown Service"


def list_day_bookings(
    db: Session,
    location_id: str,
    target_date: date,
    config: BookingConfig | None = None,
) -> list[dict]:
    """Bookings of the reference-tz day ordered by start time."""
    config = config or get_booking_config()
    grid = SlotGrid(config)
    require_location(db, location_id)

    bookings = day_bookings(db, grid, location_id, target_date)
    user_names = _user_names(db, {b.user_id for b in bookings})
    service_names = _service_names(db, {b.service_id for b in bookings})

    return [
        {
            "id": b.id,
            "location_id": b.location_id,
            "user_id": b.user_id,
            "service_id": b.service_id,
            "start_time": b.start_time,
            "status": b.status,
            "bay_id": b.bay_id,
            "created_at": b.created_at,
            "payment_reference": b.payment_reference,
            "user_name": user_names.get(b.user_id) or UNKNOWN_USER,
            "service_name": service_names.get(b.service_id) or UNKNOWN_SERVICE,
            "start_time_local": grid.to_local(b.start_time).strftime("%H:%M"),
        }
        for b in bookings
    ]


def day_summary(
    db: Session,
    location_id: str,
    target_date: date,
    config: BookingConfig | None = None,
) -> dict:
    config = config or get_booking_config()
    engine = AvailabilityEngine(db, config)
    require_location(db, location_id)

    bookings = day_bookings(db, engine.grid, location_id, target_date)
    service_names = _service_names(db, {b.service_id for b in bookings})

    by_status = Counter(b.status for b in bookings)
    by_service = Counter(
        service_names.get(b.service_id) or UNKNOWN_SERVICE for b in bookings
    )

    return {
        "location_id": location_id,
        "date": target_date.isoformat(),
        "active_bays": engine.settings.resolve(location_id, target_date),
        "total": len(bookings),
        "by_status": dict(by_status),
        "by_service": dict(by_service),
        "occupancy": dict(sorted(engine.occupancy(location_id, target_date).items())),
    }


def _user_names(db: Session, user_ids: set[str]) -> dict[str, str]:
    if not user_ids:
        return {}
    rows = db.query(Users.id, Users.name).filter(Users.id.in_(user_ids)).all()
    return {user_id: name for user_id, name in rows}


def _service_names(db: Session, service_ids: set[int]) -> dict[int, str]:
    if not service_ids:
        return {}
    rows = db.query(Services.id, Services.name).filter(Services.id.in_(service_ids)).all()
    return {service_id: name for service_id, name in rows}
