# backend/carwash/services/blocked_slots.py
"""
Administrative slot blocking.

Toggle semantics: posting an existing (date, slot) key unblocks it, posting
an absent key blocks it. Concurrent toggles on one key are last-write-wins.
"""

import logging
from datetime import date

from sqlalchemy.orm import Session

from ..core.errors import ValidationError
from ..database import begin_write
from ..models import BlockedSlots
from .slots.grid import SlotGrid

logger = logging.getLogger(__name__)


def blocked_slot_key(target_date: date, time_slot: str) -> str:
    return f"{target_date.isoformat()}_{time_slot}"


def list_blocked_slots(db: Session, location_id: str, target_date: date) -> list[str]:
    """Sorted blocked labels for a location/date."""
    rows = (
        db.query(BlockedSlots.time_slot)
        .filter(
            BlockedSlots.location_id == location_id,
            BlockedSlots.date == target_date.isoformat(),
        )
        .all()
    )
    return sorted(time_slot for (time_slot,) in rows)


def toggle_blocked_slot(
    db: Session,
    grid: SlotGrid,
    location_id: str,
    target_date: date,
    time_slot: str,
    created_by: str | None = None,
) -> bool:
    """
    Block or unblock one slot.

    Returns:
        True if the slot is blocked after the call, False if it was unblocked.
    """
    if not grid.is_slot(time_slot):
        raise ValidationError(f"{time_slot} is not a bookable slot")

    begin_write(db)
    key = blocked_slot_key(target_date, time_slot)
    existing = (
        db.query(BlockedSlots)
        .filter(BlockedSlots.location_id == location_id, BlockedSlots.key == key)
        .first()
    )

    if existing:
        db.delete(existing)
        db.commit()
        logger.info(f"Slot unblocked: location={location_id} key={key}")
        return False

    db.add(BlockedSlots(
        location_id=location_id,
        key=key,
        date=target_date.isoformat(),
        time_slot=time_slot,
        created_by=created_by,
    ))
    db.commit()
    logger.info(f"Slot blocked: location={location_id} key={key} by={created_by}")
    return True
