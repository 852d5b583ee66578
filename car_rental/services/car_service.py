import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from car_rental.database.models.car_model import Car
from car_rental.exceptions import Conflict
from car_rental.schemas.auth_schema import SessionIdentity
from car_rental.schemas.car_schema import CarCreate
from car_rental.services.base_service import BaseService

logger = logging.getLogger(__name__)


class CarService(BaseService):
    def __init__(self):
        super().__init__(Car)

    def get_car(self, db: Session, car_id: int) -> Optional[Car]:
        return db.query(Car).options(joinedload(Car.tenant)).filter(Car.id == car_id).first()

    def list_cars(self, db: Session) -> List[Car]:
        """All cars of every tenant, owning tenant loaded."""
        return db.query(Car).options(joinedload(Car.tenant)).order_by(Car.id).all()

    def create_car(self, db: Session, identity: SessionIdentity, payload: CarCreate) -> Car:
        """Add a car to the fleet of the admin's session tenant."""
        existing = db.query(Car).filter(Car.license_plate == payload.license_plate).first()
        if existing:
            raise Conflict(f"A car with license plate {payload.license_plate} already exists")
        try:
            car = self.create(db, payload, tenant_id=identity.tenant_id, available=True)
        except IntegrityError:
            db.rollback()
            raise Conflict(f"A car with license plate {payload.license_plate} already exists")
        logger.info("Tenant %s added car %s (%s)", identity.tenant, car.id, car.license_plate)
        return self.get_car(db, car.id)
