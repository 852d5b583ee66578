import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from car_rental.database.init import get_db
from car_rental.exceptions import CarRentalError
from car_rental.schemas.auth_schema import SessionIdentity
from car_rental.schemas.car_schema import CarCreate, CarResponse
from car_rental.services.car_service import CarService
from car_rental.utils.dependencies import admin_required
from car_rental.responses.success import created_response, data_response
from car_rental.responses.error import error_response, internal_server_error, not_found_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cars", tags=["Cars"])
car_service = CarService()


@router.get("", response_model=List[CarResponse])
def list_cars(db: Session = Depends(get_db)):
    try:
        cars = car_service.list_cars(db)
        return data_response([CarResponse.model_validate(c) for c in cars])
    except Exception:
        logger.exception("Failed to fetch cars")
        return internal_server_error("Failed to fetch cars")


@router.get("/{car_id}", response_model=CarResponse)
def get_car(car_id: int, db: Session = Depends(get_db)):
    try:
        car = car_service.get_car(db, car_id)
        if not car:
            return not_found_error("Car not found")
        return data_response(CarResponse.model_validate(car))
    except Exception:
        logger.exception("Failed to fetch car %s", car_id)
        return internal_server_error("Failed to fetch car")


@router.post("", response_model=CarResponse, status_code=201)
def create_car(
    payload: CarCreate,
    db: Session = Depends(get_db),
    identity: SessionIdentity = Depends(admin_required),
):
    """Add a car to the fleet of the admin's tenant."""
    try:
        car = car_service.create_car(db, identity, payload)
        return created_response(CarResponse.model_validate(car))
    except CarRentalError as e:
        return error_response(e)
    except Exception:
        logger.exception("Failed to create car")
        return internal_server_error("Failed to create car")
