"""
Create (or update) a location with its services and global bay capacity.

ENV:
  LOCATION_ID       e.g. "rosebank"
  LOCATION_NAME     display name
  ACTIVE_BAYS       global capacity, default 1
  SERVICES          "Name:duration[:price],..." e.g. "Basic Wash:30:120,Full Valet:60:350"
"""

import os
import sys
import pathlib

from dotenv import load_dotenv

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "backend"))

from carwash.database import SessionLocal  # noqa: E402
from carwash.models import Locations, Services  # noqa: E402
from carwash.services.slots import SettingsResolver  # noqa: E402


load_dotenv()

LOCATION_ID = os.getenv("LOCATION_ID")
LOCATION_NAME = os.getenv("LOCATION_NAME")
ACTIVE_BAYS = int(os.getenv("ACTIVE_BAYS", "1"))
SERVICES = os.getenv("SERVICES", "")

if not LOCATION_ID or not LOCATION_NAME:
    raise RuntimeError("LOCATION_ID and LOCATION_NAME must be set")


def parse_services(raw: str) -> list[tuple[str, int, float | None]]:
    result = []
    for item in filter(None, (part.strip() for part in raw.split(","))):
        parts = item.split(":")
        if len(parts) not in (2, 3):
            raise RuntimeError(f"Bad service entry: {item!r}")
        price = float(parts[2]) if len(parts) == 3 else None
        result.append((parts[0].strip(), int(parts[1]), price))
    return result


def main():
    db = SessionLocal()
    try:
        location = db.get(Locations, LOCATION_ID)
        if location is None:
            location = Locations(id=LOCATION_ID, name=LOCATION_NAME)
            db.add(location)
            print(f"[SEED] Location created: {LOCATION_ID}")
        else:
            location.name = LOCATION_NAME
            print(f"[SEED] Location exists, name updated: {LOCATION_ID}")
        db.commit()

        for order, (name, duration, price) in enumerate(parse_services(SERVICES)):
            service = (
                db.query(Services)
                .filter(Services.location_id == LOCATION_ID, Services.name == name)
                .first()
            )
            if service is None:
                service = Services(location_id=LOCATION_ID, name=name)
                db.add(service)
            service.duration_in_minutes = duration
            service.price = price
            service.display_order = order
            service.is_active = 1
            print(f"[SEED] Service {name!r}: {duration} min")
        db.commit()

        SettingsResolver(db).set_global(LOCATION_ID, ACTIVE_BAYS)
        print(f"[SEED] Global active bays: {ACTIVE_BAYS}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
