# backend/carwash/routers/bookings.py
# No update/cancel path: bookings are immutable once created.

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import get_current_identity
from ..database import get_db
from ..schemas.bookings import BookingCreate, BookingCreated, FreeWashRedeem
from ..services.booking_allocator import BookingAllocator
from ..services.identity import Identity, IdentityProvider, get_identity_provider
from ..services.slots import BookingConfig, get_booking_config
from ..services.users import UserRepository

router = APIRouter(prefix="/bookings", tags=["bookings"])


def get_allocator(
    db: Session = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider),
    config: BookingConfig = Depends(get_booking_config),
) -> BookingAllocator:
    return BookingAllocator(db, UserRepository(db, provider), config)


@router.post("", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    identity: Identity = Depends(get_current_identity),
    allocator: BookingAllocator = Depends(get_allocator),
):
    """
    Reserve a paid slot. Payment must already be confirmed by the caller.
    409 when the slot is taken; the client should re-fetch availability.
    """
    result = allocator.commit(
        user_id=identity.uid,
        service_id=data.service_id,
        location_id=data.location_id,
        requested_start=data.start_time,
        payment_reference=data.payment_reference,
    )
    return BookingCreated.model_validate(result)


@router.post(
    "/redeem-free-wash",
    response_model=BookingCreated,
    status_code=status.HTTP_201_CREATED,
)
def redeem_free_wash(
    data: FreeWashRedeem,
    identity: Identity = Depends(get_current_identity),
    allocator: BookingAllocator = Depends(get_allocator),
):
    """Book a slot paid with one free-wash credit at this location."""
    result = allocator.redeem_free_wash(
        user_id=identity.uid,
        service_id=data.service_id,
        location_id=data.location_id,
        requested_start=data.start_time,
    )
    return BookingCreated.model_validate(result)
