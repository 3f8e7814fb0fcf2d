from .tables import (
    Base,
    BlockedSlots,
    Bookings,
    Locations,
    LocationSettings,
    Rewards,
    Services,
    Users,
)

__all__ = [
    "Base",
    "BlockedSlots",
    "Bookings",
    "Locations",
    "LocationSettings",
    "Rewards",
    "Services",
    "Users",
]
