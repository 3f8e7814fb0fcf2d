"""
backend/carwash/services/identity.py

Client for the external identity provider.

Handles:
- bearer token verification (subject + role claim)
- profile lookup used when a user profile is materialised lazily
- account creation and role assignment
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import httpx

from ..config import settings
from ..core.errors import AccountExists, AuthError, NotFound, UpstreamFailure, ValidationError

logger = logging.getLogger(__name__)

ROLE_CUSTOMER = "customer"
ROLE_MANAGER = "manager"


@dataclass(frozen=True)
class Identity:
    uid: str
    role: str = ROLE_CUSTOMER
    email: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_payload(cls, data: dict) -> "Identity":
        return cls(
            uid=str(data["uid"]),
            role=data.get("role") or ROLE_CUSTOMER,
            email=data.get("email"),
            name=data.get("name") or data.get("displayName"),
        )


class IdentityProvider:
    """Thin synchronous HTTP client; every call has a fixed timeout."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ):
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def verify_token(self, token: str) -> Identity:
        resp = self._request("POST", "/v1/tokens:verify", json={"token": token})
        if resp.status_code in (400, 401, 403):
            raise AuthError("Unauthorized: Invalid token.")
        self._raise_for_status(resp)
        return Identity.from_payload(resp.json())

    def get_user(self, uid: str) -> Identity:
        resp = self._request("GET", f"/v1/users/{uid}")
        if resp.status_code == 404:
            raise NotFound(f"User {uid} not found")
        self._raise_for_status(resp)
        return Identity.from_payload(resp.json())

    def create_user(self, email: str, password: str, name: str) -> Identity:
        resp = self._request(
            "POST",
            "/v1/users",
            json={"email": email, "password": password, "name": name},
        )
        if resp.status_code == 409:
            raise AccountExists(_error_message(resp) or "Account already exists")
        if resp.status_code == 400:
            raise ValidationError(_error_message(resp) or "Could not create account")
        self._raise_for_status(resp)
        return Identity.from_payload(resp.json())

    def set_role(self, uid: str, role: str) -> None:
        resp = self._request("POST", f"/v1/users/{uid}/claims", json={"role": role})
        if resp.status_code == 404:
            raise NotFound(f"User {uid} not found")
        self._raise_for_status(resp)

    def close(self) -> None:
        self._client.close()

    # ── Internals ────────────────────────────────────────────────────────

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Identity provider {method} {path} failed: {e}")
            raise UpstreamFailure("Identity provider unavailable") from e

    @staticmethod
    def _raise_for_status(resp: httpx.Response) -> None:
        if resp.status_code >= 400:
            logger.error(
                f"Identity provider returned {resp.status_code} for "
                f"{resp.request.method} {resp.request.url.path}"
            )
            raise UpstreamFailure("Identity provider error")


def _error_message(resp: httpx.Response) -> Optional[str]:
    try:
        data = resp.json()
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    return data.get("error") or data.get("detail")


@lru_cache
def get_identity_provider() -> IdentityProvider:
    """Process-wide identity provider client (FastAPI dependency)."""
    return IdentityProvider(
        base_url=settings.identity_api_url,
        api_key=settings.identity_api_key,
        timeout=settings.identity_timeout_seconds,
    )
