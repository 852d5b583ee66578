from fastapi import Depends, HTTPException, Request
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from passlib.context import CryptContext
from pydantic import ValidationError
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from car_rental.config import Settings
from car_rental.enums.user_role import UserRole
from car_rental.schemas.auth_schema import SessionIdentity

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password):
    return pwd_context.hash(password)


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    identity: SessionIdentity, settings: Settings, expires_delta: Optional[timedelta] = None
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {
        "sub": str(identity.user_id),
        "email": identity.email,
        "name": identity.name,
        "tenant_id": identity.tenant_id,
        "tenant": identity.tenant,
        "role": identity.role.value,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> Optional[SessionIdentity]:
    """Return the identity carried by ``token``, or None when it is invalid or expired."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return SessionIdentity(
            user_id=payload.get("sub"),
            email=payload.get("email"),
            name=payload.get("name"),
            tenant_id=payload.get("tenant_id"),
            tenant=payload.get("tenant"),
            role=payload.get("role"),
        )
    except (JWTError, ValidationError) as e:
        logger.debug("Rejected session token: %s", e)
        return None


def extract_token(request: Request, settings: Settings) -> Optional[str]:
    authorization = request.headers.get("Authorization")
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials:
            return credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def get_settings_from_app(request: Request) -> Settings:
    return request.app.state.settings


def get_optional_identity(
    request: Request,
    _bearer: Optional[str] = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings_from_app),
) -> Optional[SessionIdentity]:
    token = extract_token(request, settings)
    if not token:
        return None
    return decode_access_token(token, settings)


def get_current_identity(
    identity: Optional[SessionIdentity] = Depends(get_optional_identity),
) -> SessionIdentity:
    if identity is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return identity


def admin_required(identity: SessionIdentity = Depends(get_current_identity)) -> SessionIdentity:
    """Dependency to ensure the session was issued to a tenant admin"""
    if identity.role != UserRole.ADMIN:
        raise HTTPException(status_code=403, detail="Only tenant admins can access this endpoint")
    return identity

