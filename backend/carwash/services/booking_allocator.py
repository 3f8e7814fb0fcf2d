# backend/carwash/services/booking_allocator.py
"""
Booking commit protocol.

commit():
1. Convert the client-local start (reference tz) to a UTC instant and
   check it lies on the slot grid
2. Validate location and service
3. In one write transaction, with the location row locked (on SQLite the
   transaction opens with BEGIN IMMEDIATE, so concurrent commits queue):
   - resolve active bays for the date
   - count bookings at exactly this instant; >= active bays -> conflict
   - reject blocked slots and any spanned slot already at capacity
   - pick a bay, insert the booking (status=paid)
   The unique (location, start_time, bay) constraint catches any race
   left over, reported as the same conflict, as is a lock wait that times
   out.
4. Materialise the user profile and accrue a loyalty point. Failure here
   is a warning only: the paid booking stands.

redeem_free_wash() follows the same path, but debits one free wash inside
the booking transaction and stores status=free.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import BookingError, BookingFailed, SlotUnavailable, ValidationError
from ..database import begin_write, is_lock_error
from ..models import Bookings, Locations, Services
from . import blocked_slots
from .events import emit_event
from .rewards import RewardsLedger
from .slots.availability import day_bookings, require_location, require_service
from .slots.config import BookingConfig, get_booking_config
from .slots.grid import SlotGrid
from .slots.occupancy import OccupancyCalculator, get_service_durations
from .slots.settings_resolver import SettingsResolver
from .users import UserRepository

logger = logging.getLogger(__name__)

STATUS_PAID = "paid"
STATUS_FREE = "free"

REWARD_WARNING = "Booking confirmed, but loyalty points could not be updated."


@dataclass
class BookingResult:
    booking_id: int
    bay_id: int
    status: str
    start_time: datetime  # naive UTC
    warning: Optional[str] = None


class BookingAllocator:
    def __init__(
        self,
        db: Session,
        users: UserRepository,
        config: BookingConfig | None = None,
    ):
        self.db = db
        self.users = users
        self.config = config or get_booking_config()
        self.grid = SlotGrid(self.config)
        self.settings = SettingsResolver(db, self.config)
        self.occupancy = OccupancyCalculator(self.grid)
        self.ledger = RewardsLedger(db, self.config)

    # ── Paid booking ─────────────────────────────────────────────────────

    def commit(
        self,
        user_id: str,
        service_id: int,
        location_id: str,
        requested_start: datetime,
        payment_reference: Optional[str] = None,
    ) -> BookingResult:
        start_utc, target_date, label = self._resolve_start(requested_start)
        require_location(self.db, location_id)
        service = require_service(self.db, location_id, service_id)

        booking = self._in_transaction(
            lambda: self._admit_and_insert(
                location_id=location_id,
                service=service,
                start_utc=start_utc,
                target_date=target_date,
                label=label,
                user_id=user_id,
                status=STATUS_PAID,
                payment_reference=payment_reference,
            )
        )
        logger.info(
            f"Booking created: booking_id={booking.id}, user_id={user_id}, "
            f"location={location_id}, service={service.name}, "
            f"time={target_date} {label}, bay={booking.bay_id}"
        )

        warning = self._accrue_reward(user_id, location_id)

        emit_event("booking_created", {
            "booking_id": booking.id,
            "location_id": location_id,
            "user_id": user_id,
            "status": STATUS_PAID,
        })

        return BookingResult(
            booking_id=booking.id,
            bay_id=booking.bay_id,
            status=booking.status,
            start_time=booking.start_time,
            warning=warning,
        )

    # ── Free-wash redemption ─────────────────────────────────────────────

    def redeem_free_wash(
        self,
        user_id: str,
        service_id: int,
        location_id: str,
        requested_start: datetime,
    ) -> BookingResult:
        start_utc, target_date, label = self._resolve_start(requested_start)
        require_location(self.db, location_id)
        service = require_service(self.db, location_id, service_id)

        def debit_and_book() -> Bookings:
            # debit first: no balance -> nothing is written
            self.ledger.debit_free_wash(user_id, location_id)
            return self._admit_and_insert(
                location_id=location_id,
                service=service,
                start_utc=start_utc,
                target_date=target_date,
                label=label,
                user_id=user_id,
                status=STATUS_FREE,
            )

        booking = self._in_transaction(debit_and_book)
        logger.info(
            f"Free wash redeemed: booking_id={booking.id}, user_id={user_id}, "
            f"location={location_id}, time={target_date} {label}"
        )

        emit_event("free_wash_redeemed", {
            "booking_id": booking.id,
            "location_id": location_id,
            "user_id": user_id,
            "status": STATUS_FREE,
        })

        return BookingResult(
            booking_id=booking.id,
            bay_id=booking.bay_id,
            status=booking.status,
            start_time=booking.start_time,
        )

    # ── Helpers ──────────────────────────────────────────────────────────

    def _resolve_start(self, requested_start: datetime) -> tuple[datetime, date, str]:
        """-> (naive UTC instant, reference-tz date, slot label)"""
        start_utc = self.grid.local_to_utc(requested_start)
        local = self.grid.to_local(start_utc)
        label = local.strftime("%H:%M")

        if local.second or local.microsecond or not self.grid.is_slot(label):
            raise ValidationError(f"startTime {local.isoformat()} is not a bookable slot")

        return start_utc, local.date(), label

    def _in_transaction(self, work):
        """Run work() as a writer and commit; any failure rolls everything back."""
        try:
            begin_write(self.db)
            result = work()
            self.db.commit()
            return result
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Booking insert lost a race: {e.orig}")
            raise SlotUnavailable("Selected time slot is no longer available") from e
        except BookingError:
            self.db.rollback()
            raise
        except OperationalError as e:
            self.db.rollback()
            if is_lock_error(e):
                logger.warning(f"Booking lock wait timed out: {e.orig}")
                raise SlotUnavailable("Selected time slot is busy, please try again") from e
            logger.exception("Booking transaction failed")
            raise BookingFailed("Failed to create booking.") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Booking transaction failed")
            raise BookingFailed("Failed to create booking.") from e

    def _admit_and_insert(
        self,
        location_id: str,
        service: Services,
        start_utc: datetime,
        target_date: date,
        label: str,
        user_id: str,
        status: str,
        payment_reference: Optional[str] = None,
    ) -> Bookings:
        # Serialise writers per location. SQLite ignores FOR UPDATE; there
        # the transaction already holds the database write lock (BEGIN IMMEDIATE)
        self.db.query(Locations).filter(Locations.id == location_id).with_for_update().one()

        active_bays = self.settings.resolve(location_id, target_date)

        at_instant = (
            self.db.query(func.count(Bookings.id))
            .filter(Bookings.location_id == location_id, Bookings.start_time == start_utc)
            .scalar()
        )
        if at_instant >= active_bays:
            raise SlotUnavailable("Selected time slot is fully booked")

        if label in blocked_slots.list_blocked_slots(self.db, location_id, target_date):
            raise SlotUnavailable("Selected time slot is blocked")

        bay_id = self._pick_bay(location_id, target_date, label, service, active_bays)

        booking = Bookings(
            location_id=location_id,
            user_id=user_id,
            service_id=service.id,
            start_time=start_utc,
            status=status,
            bay_id=bay_id,
            duration_in_minutes=service.duration_in_minutes,
            payment_reference=payment_reference,
        )
        self.db.add(booking)
        self.db.flush()
        return booking

    def _pick_bay(
        self,
        location_id: str,
        target_date: date,
        label: str,
        service: Services,
        active_bays: int,
    ) -> int:
        """
        Lowest bay not held by any booking overlapping the new one.

        With only same-instant bookings this is count + 1. Raises if any
        spanned slot is already at capacity.
        """
        wanted = set(self.grid.consecutive(
            label, self.grid.slots_for_duration(service.duration_in_minutes)
        ))

        bookings = day_bookings(self.db, self.grid, location_id, target_date)
        durations = get_service_durations(self.db, (b.service_id for b in bookings))

        occupied = self.occupancy.compute(bookings, durations)
        if any(occupied.get(s, 0) >= active_bays for s in wanted):
            raise SlotUnavailable("Selected time overlaps a fully booked slot")

        used_bays = set()
        for b in bookings:
            labels = self.occupancy.booking_slots(b, durations)
            if labels and wanted.intersection(labels):
                used_bays.add(b.bay_id)

        for bay_id in range(1, active_bays + 1):
            if bay_id not in used_bays:
                return bay_id

        raise SlotUnavailable("No free bay for the selected time")

    def _accrue_reward(self, user_id: str, location_id: str) -> Optional[str]:
        """Profile + loyalty point; never undoes the booking."""
        try:
            self.users.get_or_create(user_id)
            begin_write(self.db)
            self.ledger.accrue_point(user_id, location_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception(
                f"Reward accrual failed for user={user_id} location={location_id}"
            )
            return REWARD_WARNING
        return None
