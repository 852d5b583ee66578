import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from car_rental.database.init import get_db
from car_rental.exceptions import CarRentalError
from car_rental.schemas.auth_schema import SessionIdentity
from car_rental.schemas.user_schema import UserResponse
from car_rental.services.auth_service import get_user_detail
from car_rental.utils.dependencies import get_current_identity
from car_rental.responses.success import data_response
from car_rental.responses.error import error_response, internal_server_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    identity: SessionIdentity = Depends(get_current_identity),
):
    """A user with their tenant memberships. Visible to the user and to admins of a shared tenant."""
    try:
        user = get_user_detail(db, identity, user_id)
        return data_response(UserResponse.model_validate(user))
    except CarRentalError as e:
        return error_response(e)
    except Exception:
        logger.exception("Failed to fetch user %s", user_id)
        return internal_server_error("Failed to fetch user")
