# backend/carwash/services/slots/settings_resolver.py
"""
Effective bay capacity for a location and date.

Lookup order: daily override -> global -> BookingConfig.default_active_bays.
Both candidate rows are fetched in one query; a missing row is the signal
to fall through, never an error.
"""

from datetime import date

from sqlalchemy.orm import Session

from ...core.errors import ValidationError
from ...database import begin_write
from ...models import LocationSettings
from .config import BookingConfig, get_booking_config

GLOBAL_KEY = "global"


class SettingsResolver:
    def __init__(self, db: Session, config: BookingConfig | None = None):
        self.db = db
        self.config = config or get_booking_config()

    def resolve(self, location_id: str, target_date: date) -> int:
        daily_key = target_date.isoformat()
        rows = (
            self.db.query(LocationSettings.key, LocationSettings.active_bays)
            .filter(
                LocationSettings.location_id == location_id,
                LocationSettings.key.in_([daily_key, GLOBAL_KEY]),
            )
            .all()
        )
        by_key = {key: bays for key, bays in rows}

        if daily_key in by_key:
            return by_key[daily_key]
        if GLOBAL_KEY in by_key:
            return by_key[GLOBAL_KEY]
        return self.config.default_active_bays

    # ── Manager reads/writes ─────────────────────────────────────────────

    def get_global(self, location_id: str) -> int | None:
        return self._get(location_id, GLOBAL_KEY)

    def get_daily(self, location_id: str, target_date: date) -> int | None:
        return self._get(location_id, target_date.isoformat())

    def set_global(self, location_id: str, active_bays: int) -> LocationSettings:
        return self._upsert(location_id, GLOBAL_KEY, active_bays)

    def set_daily(self, location_id: str, target_date: date, active_bays: int) -> LocationSettings:
        return self._upsert(location_id, target_date.isoformat(), active_bays)

    def _get(self, location_id: str, key: str) -> int | None:
        row = (
            self.db.query(LocationSettings)
            .filter(LocationSettings.location_id == location_id, LocationSettings.key == key)
            .first()
        )
        return row.active_bays if row else None

    def _upsert(self, location_id: str, key: str, active_bays: int) -> LocationSettings:
        if active_bays < 1:
            raise ValidationError("activeBays must be >= 1")

        begin_write(self.db)
        row = (
            self.db.query(LocationSettings)
            .filter(LocationSettings.location_id == location_id, LocationSettings.key == key)
            .first()
        )
        if row:
            row.active_bays = active_bays
        else:
            row = LocationSettings(location_id=location_id, key=key, active_bays=active_bays)
            self.db.add(row)

        self.db.commit()
        self.db.refresh(row)
        return row
