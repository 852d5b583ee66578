import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from car_rental.config import Settings
from car_rental.database.init import get_db
from car_rental.exceptions import AuthenticationError, CarRentalError, TenantNotFound
from car_rental.schemas.auth_schema import (
    LoginRequest,
    RegisterRequest,
    SessionIdentity,
    TokenResponse,
)
from car_rental.services.auth_service import authenticate, register_customer
from car_rental.utils.dependencies import (
    create_access_token,
    get_current_identity,
    get_settings_from_app,
)
from car_rental.responses.success import created_response, data_response, success_response
from car_rental.responses.error import (
    error_response,
    internal_server_error,
    unauthorized_error,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])
page_router = APIRouter(tags=["Auth"])


def _session_response(identity: SessionIdentity, settings: Settings, created: bool = False):
    token = create_access_token(identity, settings)
    payload = TokenResponse(access_token=token, identity=identity)
    response = created_response(payload) if created else data_response(payload)
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
    )
    return response


def _login_failure(e: AuthenticationError, settings: Settings):
    # The tenant list is public, everything else collapses unless verbose errors are on
    if settings.AUTH_VERBOSE_ERRORS or isinstance(e, TenantNotFound):
        return unauthorized_error(e.message)
    return unauthorized_error("Invalid credentials")


@router.post("/login", response_model=TokenResponse)
def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_from_app),
):
    try:
        identity = authenticate(db, credentials.tenant, credentials.email, credentials.password)
    except AuthenticationError as e:
        logger.info(
            "Failed login for %s on tenant %s: %s", credentials.email, credentials.tenant, e.message
        )
        return _login_failure(e, settings)
    except Exception:
        logger.exception("Login failed")
        return internal_server_error("Failed to sign in")

    return _session_response(identity, settings)


@router.post("/register", response_model=TokenResponse, status_code=201)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_from_app),
):
    """Create a customer account inside a tenant and sign it in."""
    try:
        identity = register_customer(db, payload)
    except CarRentalError as e:
        return error_response(e)
    except Exception:
        logger.exception("Failed to register user")
        return internal_server_error("Failed to register user")

    return _session_response(identity, settings, created=True)


@router.post("/logout")
def logout(settings: Settings = Depends(get_settings_from_app)):
    response = success_response("Signed out")
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response


@router.get("/session", response_model=SessionIdentity)
def get_session(identity: SessionIdentity = Depends(get_current_identity)):
    return data_response(identity)


@page_router.get("/auth/login")
def login_page(callbackUrl: Optional[str] = None):
    """Landing target of the dashboard redirect."""
    return success_response(
        "Sign in with POST /api/auth/login",
        data={"callbackUrl": callbackUrl or "/dashboard"},
    )
