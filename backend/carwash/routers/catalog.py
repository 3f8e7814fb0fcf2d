# backend/carwash/routers/catalog.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Locations, Services
from ..schemas.catalog import LocationRead, ServiceRead
from ..services.slots.availability import require_location

router = APIRouter(tags=["catalog"])


@router.get("/locations", response_model=list[LocationRead])
def list_locations(db: Session = Depends(get_db)):
    return (
        db.query(Locations)
        .filter(Locations.is_active == 1)
        .order_by(Locations.name)
        .all()
    )


@router.get("/services", response_model=list[ServiceRead])
def list_services(
    location_id: str = Query(..., alias="locationId", min_length=1),
    db: Session = Depends(get_db),
):
    """Active services of a location in display order."""
    require_location(db, location_id)
    return (
        db.query(Services)
        .filter(Services.location_id == location_id, Services.is_active == 1)
        .order_by(Services.display_order, Services.id)
        .all()
    )
