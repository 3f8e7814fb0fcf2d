# backend/carwash/auth.py
"""
Request authentication.

The bearer credential is verified by the external identity provider; its
subject and role claim are trusted verbatim.
"""

from typing import Optional

from fastapi import Depends, Header

from .core.errors import AuthError
from .services.identity import (
    ROLE_MANAGER,
    Identity,
    IdentityProvider,
    get_identity_provider,
)


def get_current_identity(
    authorization: Optional[str] = Header(None),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> Identity:
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthError("Unauthorized: No token provided.")

    token = authorization.split("Bearer ", 1)[1].strip()
    if not token:
        raise AuthError("Unauthorized: No token provided.")

    return provider.verify_token(token)


def require_manager(identity: Identity = Depends(get_current_identity)) -> Identity:
    if identity.role != ROLE_MANAGER:
        raise AuthError("Forbidden: User is not a manager.", status_code=403)
    return identity
