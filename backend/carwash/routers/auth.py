# backend/carwash/routers/auth.py
"""
Account endpoints. Identity itself lives in the external provider; these
only create accounts there and mirror the profile locally.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import require_manager
from ..database import get_db
from ..schemas.auth import AssignRoleRequest, SignupRequest, UserRead
from ..services.identity import (
    ROLE_CUSTOMER,
    Identity,
    IdentityProvider,
    get_identity_provider,
)
from ..services.users import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def signup(
    data: SignupRequest,
    db: Session = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider),
):
    created = provider.create_user(data.email, data.password, data.name)
    provider.set_role(created.uid, ROLE_CUSTOMER)

    user = UserRepository(db, provider).upsert(
        created.uid, name=data.name, email=data.email, role=ROLE_CUSTOMER
    )
    logger.info(f"Signed up user_id={user.id}")
    return user


@router.post("/assign-manager-role", response_model=UserRead)
def assign_role(
    data: AssignRoleRequest,
    manager: Identity = Depends(require_manager),
    db: Session = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider),
):
    """Set the role claim of another account (managers only)."""
    provider.set_role(data.uid, data.role)
    details = provider.get_user(data.uid)

    user = UserRepository(db, provider).upsert(
        data.uid, name=details.name, email=details.email, role=data.role
    )
    logger.info(f"Role {data.role} assigned to user_id={data.uid} by {manager.uid}")
    return user
