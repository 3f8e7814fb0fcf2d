# backend/carwash/routers/manager.py
"""
Manager endpoints: bay capacity, blocked slots, daily bookings.

All routes require the `manager` role claim.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import require_manager
from ..database import get_db
from ..schemas.blocked_slots import (
    BlockedSlotToggle,
    BlockedSlotToggleResponse,
    BlockedSlotsRead,
)
from ..schemas.bookings import BookingSummary, ManagerBookingRead
from ..schemas.settings import ActiveBaysUpdate, DailySettingsRead, GlobalSettingsRead
from ..services import blocked_slots, manager_reports
from ..services.identity import Identity
from ..services.slots import BookingConfig, SettingsResolver, SlotGrid, get_booking_config
from ..services.slots.availability import require_location

router = APIRouter(
    prefix="/manager",
    tags=["manager"],
    dependencies=[Depends(require_manager)],
)


# ──────────────────────────────────────────────────────────────────────────────
# Settings
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/settings", response_model=GlobalSettingsRead)
def get_global_settings(
    location_id: str = Query(..., alias="locationId", min_length=1),
    db: Session = Depends(get_db),
    config: BookingConfig = Depends(get_booking_config),
):
    require_location(db, location_id)
    bays = SettingsResolver(db, config).get_global(location_id)
    if bays is None:
        return GlobalSettingsRead(
            location_id=location_id,
            active_bays=config.default_active_bays,
            is_default=True,
        )
    return GlobalSettingsRead(location_id=location_id, active_bays=bays)


@router.post("/settings", response_model=GlobalSettingsRead)
def set_global_settings(
    data: ActiveBaysUpdate,
    location_id: str = Query(..., alias="locationId", min_length=1),
    db: Session = Depends(get_db),
    config: BookingConfig = Depends(get_booking_config),
):
    require_location(db, location_id)
    row = SettingsResolver(db, config).set_global(location_id, data.active_bays)
    return GlobalSettingsRead(location_id=location_id, active_bays=row.active_bays)


@router.get("/settings/daily", response_model=DailySettingsRead)
def get_daily_settings(
    location_id: str = Query(..., alias="locationId", min_length=1),
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    config: BookingConfig = Depends(get_booking_config),
):
    """Effective capacity for the date and where it came from."""
    require_location(db, location_id)
    resolver = SettingsResolver(db, config)

    override = resolver.get_daily(location_id, target_date)
    if override is not None:
        source = "daily"
    elif resolver.get_global(location_id) is not None:
        source = "global"
    else:
        source = "default"

    return DailySettingsRead(
        location_id=location_id,
        date=target_date,
        active_bays=resolver.resolve(location_id, target_date),
        source=source,
        override=override,
    )


@router.post("/settings/daily", response_model=DailySettingsRead)
def set_daily_settings(
    data: ActiveBaysUpdate,
    location_id: str = Query(..., alias="locationId", min_length=1),
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    config: BookingConfig = Depends(get_booking_config),
):
    require_location(db, location_id)
    row = SettingsResolver(db, config).set_daily(location_id, target_date, data.active_bays)
    return DailySettingsRead(
        location_id=location_id,
        date=target_date,
        active_bays=row.active_bays,
        source="daily",
        override=row.active_bays,
    )


# ──────────────────────────────────────────────────────────────────────────────
# Blocked slots
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/blocked-slots", response_model=BlockedSlotsRead)
def get_blocked_slots(
    location_id: str = Query(..., alias="locationId", min_length=1),
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    require_location(db, location_id)
    return BlockedSlotsRead(
        location_id=location_id,
        date=target_date,
        slots=blocked_slots.list_blocked_slots(db, location_id, target_date),
    )


@router.post("/blocked-slots", response_model=BlockedSlotToggleResponse)
def toggle_blocked_slot(
    data: BlockedSlotToggle,
    manager: Identity = Depends(require_manager),
    db: Session = Depends(get_db),
    config: BookingConfig = Depends(get_booking_config),
):
    """Toggle: blocks an open slot, unblocks a blocked one."""
    require_location(db, data.location_id)
    blocked = blocked_slots.toggle_blocked_slot(
        db,
        SlotGrid(config),
        data.location_id,
        data.date,
        data.time_slot,
        created_by=manager.uid,
    )
    return BlockedSlotToggleResponse(
        location_id=data.location_id,
        date=data.date,
        time_slot=data.time_slot,
        blocked=blocked,
    )


# ──────────────────────────────────────────────────────────────────────────────
# Bookings
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/bookings", response_model=list[ManagerBookingRead])
def get_day_bookings(
    location_id: str = Query(..., alias="locationId", min_length=1),
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    config: BookingConfig = Depends(get_booking_config),
):
    return manager_reports.list_day_bookings(db, location_id, target_date, config)


@router.get("/bookings/summary", response_model=BookingSummary)
def get_day_summary(
    location_id: str = Query(..., alias="locationId", min_length=1),
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    config: BookingConfig = Depends(get_booking_config),
):
    return manager_reports.day_summary(db, location_id, target_date, config)
