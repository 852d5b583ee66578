import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from car_rental.database.init import get_db
from car_rental.exceptions import CarRentalError
from car_rental.schemas.auth_schema import SessionIdentity
from car_rental.schemas.booking_schema import BookingResponse
from car_rental.services.booking_service import BookingService
from car_rental.utils.dependencies import get_current_identity, get_optional_identity
from car_rental.responses.success import created_response, data_response
from car_rental.responses.error import error_response, internal_server_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["Bookings"])
booking_service = BookingService()


@router.post("", response_model=BookingResponse, status_code=201)
def create_booking(
    payload: Optional[Dict[str, Any]] = Body(None),
    db: Session = Depends(get_db),
    identity: Optional[SessionIdentity] = Depends(get_optional_identity),
):
    """
    Reserve a car for the authenticated user.
    Body: {carId, startDate, endDate, totalPrice}. It is validated after the session check.
    """
    try:
        booking = booking_service.create_booking(db, identity, payload or {})
        return created_response(BookingResponse.model_validate(booking))
    except CarRentalError as e:
        logger.info("Booking rejected: %s", e.message)
        return error_response(e)
    except Exception:
        logger.exception("Failed to create booking")
        return internal_server_error("Failed to create booking")


@router.get("", response_model=List[BookingResponse])
def list_bookings(
    db: Session = Depends(get_db),
    identity: SessionIdentity = Depends(get_current_identity),
):
    """
    Returns the caller's own bookings, plus all bookings of the tenants
    where the caller is an admin.
    """
    try:
        bookings = booking_service.list_bookings(db, identity)
        return data_response([BookingResponse.model_validate(b) for b in bookings])
    except Exception:
        logger.exception("Failed to fetch bookings")
        return internal_server_error("Failed to fetch bookings")


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    identity: SessionIdentity = Depends(get_current_identity),
):
    try:
        booking = booking_service.get_booking(db, identity, booking_id)
        return data_response(BookingResponse.model_validate(booking))
    except CarRentalError as e:
        return error_response(e)
    except Exception:
        logger.exception("Failed to fetch booking %s", booking_id)
        return internal_server_error("Failed to fetch booking")


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    identity: SessionIdentity = Depends(get_current_identity),
):
    """Cancel a confirmed booking. Open to the renter and to admins of the booking's tenant."""
    try:
        booking = booking_service.cancel_booking(db, identity, booking_id)
        return data_response(BookingResponse.model_validate(booking))
    except CarRentalError as e:
        return error_response(e)
    except Exception:
        logger.exception("Failed to cancel booking %s", booking_id)
        return internal_server_error("Failed to cancel booking")
