# backend/carwash/services/rewards.py
"""
Loyalty rewards ledger, per user and location.

- accrue_point: +1 point; reaching the threshold resets points to 0 and
  adds one free wash.
- debit_free_wash: -1 free wash, only while the balance is >= 1.

Both are single conditional UPDATE statements, so concurrent requests never
lose an update and the balance never goes negative. The caller owns the
transaction (commit/rollback).
"""

import logging

from sqlalchemy import case, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.errors import NoRewardAvailable
from ..models import Rewards
from .slots.config import BookingConfig, get_booking_config

logger = logging.getLogger(__name__)


class RewardsLedger:
    def __init__(self, db: Session, config: BookingConfig | None = None):
        self.db = db
        self.config = config or get_booking_config()

    def accrue_point(self, user_id: str, location_id: str) -> Rewards:
        self._ensure_row(user_id, location_id)

        wraps = Rewards.loyalty_points + 1 >= self.config.points_per_free_wash
        self.db.execute(
            update(Rewards)
            .where(Rewards.user_id == user_id, Rewards.location_id == location_id)
            .values(
                loyalty_points=case((wraps, 0), else_=Rewards.loyalty_points + 1),
                free_washes=Rewards.free_washes + case((wraps, 1), else_=0),
            )
            .execution_options(synchronize_session=False)
        )
        row = self._get(user_id, location_id)
        logger.info(
            f"Loyalty point accrued: user={user_id} location={location_id} "
            f"points={row.loyalty_points} free_washes={row.free_washes}"
        )
        return row

    def debit_free_wash(self, user_id: str, location_id: str) -> Rewards:
        result = self.db.execute(
            update(Rewards)
            .where(
                Rewards.user_id == user_id,
                Rewards.location_id == location_id,
                Rewards.free_washes >= 1,
            )
            .values(free_washes=Rewards.free_washes - 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NoRewardAvailable("No free wash available at this location")

        return self._get(user_id, location_id)

    def get_rewards(self, user_id: str) -> dict[str, dict[str, int]]:
        """location_id -> {"loyaltyPoints", "freeWashes"}"""
        rows = (
            self.db.query(Rewards)
            .filter(Rewards.user_id == user_id)
            .order_by(Rewards.location_id)
            .all()
        )
        return {
            r.location_id: {"loyaltyPoints": r.loyalty_points, "freeWashes": r.free_washes}
            for r in rows
        }

    def _get(self, user_id: str, location_id: str) -> Rewards:
        return (
            self.db.query(Rewards)
            .filter(Rewards.user_id == user_id, Rewards.location_id == location_id)
            .populate_existing()
            .one()
        )

    def _ensure_row(self, user_id: str, location_id: str) -> None:
        exists = (
            self.db.query(Rewards.id)
            .filter(Rewards.user_id == user_id, Rewards.location_id == location_id)
            .first()
        )
        if exists:
            return

        try:
            with self.db.begin_nested():
                self.db.add(Rewards(
                    user_id=user_id,
                    location_id=location_id,
                    loyalty_points=0,
                    free_washes=0,
                ))
        except IntegrityError:
            # created by a concurrent request; the UPDATE below applies to it
            logger.debug(f"Rewards row for user={user_id} location={location_id} already exists")
