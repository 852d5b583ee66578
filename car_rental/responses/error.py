from fastapi import status
from .base import build_response
from car_rental.exceptions import (
    CarRentalError,
    Conflict,
    Forbidden,
    InvalidRequest,
    NotFound,
    Unauthenticated,
)


def bad_request_error(error: str = "Bad request"):
    return build_response(
        status.HTTP_400_BAD_REQUEST,
        "failure",
        error="bad_request",
        message=error,
    )


def conflict_error(error: str = "Resource already exists"):
    # Conflicts are client errors on this API: taken domains, booked cars
    return build_response(
        status.HTTP_400_BAD_REQUEST,
        "failure",
        error="conflict",
        message=error,
    )


def not_found_error(error: str = "Resource not found"):
    return build_response(
        status.HTTP_404_NOT_FOUND,
        "failure",
        error="not_found",
        message=error,
    )


def unauthorized_error(error: str = "Invalid credentials"):
    return build_response(
        status.HTTP_401_UNAUTHORIZED,
        "failure",
        error="unauthorized",
        message=error,
    )


def internal_server_error(error: str = "Internal server error"):
    return build_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "failure",
        error="internal_server_error",
        message=error,
    )


def forbidden_error(error: str = "Access denied"):
    return build_response(
        status.HTTP_403_FORBIDDEN,
        "failure",
        error="forbidden",
        message=error,
    )


def error_response(exc: CarRentalError):
    """Translate a service error into its HTTP response."""
    if isinstance(exc, Unauthenticated):
        return unauthorized_error(exc.message)
    if isinstance(exc, Forbidden):
        return forbidden_error(exc.message)
    if isinstance(exc, NotFound):
        return not_found_error(exc.message)
    if isinstance(exc, Conflict):
        return conflict_error(exc.message)
    if isinstance(exc, InvalidRequest):
        return bad_request_error(exc.message)
    return bad_request_error(exc.message)


def http_error(status_code: int, message: str = None):
    """Envelope for HTTPExceptions raised by dependencies and routing."""
    helpers = {
        status.HTTP_400_BAD_REQUEST: bad_request_error,
        status.HTTP_401_UNAUTHORIZED: unauthorized_error,
        status.HTTP_403_FORBIDDEN: forbidden_error,
        status.HTTP_404_NOT_FOUND: not_found_error,
    }
    if status_code in helpers:
        return helpers[status_code](message) if message else helpers[status_code]()
    return build_response(status_code, "failure", error="http_error", message=message)
