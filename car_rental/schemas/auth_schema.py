from pydantic import BaseModel, ConfigDict, EmailStr
from typing import Optional

from car_rental.enums.user_role import UserRole
from .base_schema import CamelModel


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    tenant: str


class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    password: str
    tenant: str


class SessionIdentity(CamelModel):
    """Claims carried by a session token, validated on every decode."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    email: str
    name: str
    tenant_id: int
    tenant: str
    role: UserRole


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    identity: SessionIdentity


class UserMinimumResponse(CamelModel):
    id: int
    name: str
    email: str
    role: Optional[UserRole] = None
