# backend/carwash/schemas/rewards.py

from .common import CamelModel


class RewardBalance(CamelModel):
    loyalty_points: int
    free_washes: int


class RewardsRead(CamelModel):
    """Rewards of the current user keyed by location id."""
    user_id: str
    rewards: dict[str, RewardBalance]
