# backend/carwash/schemas/auth.py

from typing import Literal, Optional

from pydantic import Field, field_validator

from .common import CamelModel


class SignupRequest(CamelModel):
    email: str
    password: str = Field(min_length=6)
    name: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("Invalid email address")
        return v


class AssignRoleRequest(CamelModel):
    uid: str = Field(min_length=1)
    role: Literal["customer", "manager"] = "manager"


class UserRead(CamelModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: str
