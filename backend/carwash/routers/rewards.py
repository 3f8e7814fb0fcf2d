# backend/carwash/routers/rewards.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_identity
from ..database import get_db
from ..schemas.rewards import RewardsRead
from ..services.identity import Identity
from ..services.rewards import RewardsLedger

router = APIRouter(prefix="/rewards", tags=["rewards"])


@router.get("", response_model=RewardsRead)
def get_my_rewards(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Loyalty points and free washes of the current user, per location."""
    rewards = RewardsLedger(db).get_rewards(identity.uid)
    return RewardsRead(user_id=identity.uid, rewards=rewards)
