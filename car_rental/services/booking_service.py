import logging
from datetime import date
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError
from sqlalchemy import or_, update
from sqlalchemy.orm import Session, joinedload

from car_rental.database.models.booking_model import Booking
from car_rental.database.models.car_model import Car
from car_rental.enums.booking_status import BookingStatus
from car_rental.exceptions import (
    CarUnavailable,
    DateConflict,
    InvalidRequest,
    NotFound,
    Unauthenticated,
)
from car_rental.schemas.auth_schema import SessionIdentity
from car_rental.schemas.booking_schema import BookingCreate
from car_rental.services.auth_service import administered_tenant_ids
from car_rental.services.base_service import BaseService

logger = logging.getLogger(__name__)

PRICE_TOLERANCE = 0.01


def rental_days(start_date: date, end_date: date) -> int:
    return (end_date - start_date).days


class BookingService(BaseService):
    def __init__(self):
        super().__init__(Booking)

    def has_overlap(self, db: Session, car_id: int, start_date: date, end_date: date) -> bool:
        """True if a confirmed booking of the car shares at least one day with [start_date, end_date]."""
        query = db.query(Booking.id).filter(
            Booking.car_id == car_id,
            Booking.status == BookingStatus.CONFIRMED.value,
            Booking.start_date <= end_date,
            Booking.end_date >= start_date,
        )
        return query.first() is not None

    def parse_request(self, payload: Dict[str, Any]) -> BookingCreate:
        try:
            return BookingCreate.model_validate(payload)
        except ValidationError as e:
            raise InvalidRequest.from_errors(e.errors())

    def quote(self, car: Car, start_date: date, end_date: date) -> float:
        return round(car.daily_rate * rental_days(start_date, end_date), 2)

    def create_booking(
        self,
        db: Session,
        identity: Optional[SessionIdentity],
        booking_in: Union[BookingCreate, Dict[str, Any]],
    ) -> Booking:
        """Reserve a car for the session user.

        The availability claim, the overlap check and the insert form one
        transaction. The car row is claimed with a conditional update before
        anything else is written, so concurrent reservations of the same car
        serialize on that row and all but one see it as unavailable.
        """
        if identity is None:
            raise Unauthenticated()

        if not isinstance(booking_in, BookingCreate):
            booking_in = self.parse_request(booking_in)

        if (
            booking_in.car_id is None
            or booking_in.start_date is None
            or booking_in.end_date is None
            or booking_in.total_price is None
        ):
            raise InvalidRequest("Missing required fields")

        start_date, end_date = booking_in.start_date, booking_in.end_date
        if rental_days(start_date, end_date) <= 0:
            raise InvalidRequest("End date must be after start date")

        car = db.query(Car).filter(Car.id == booking_in.car_id).first()
        if not car:
            raise InvalidRequest("Invalid user or car")

        if not car.available:
            raise CarUnavailable()

        total_price = self.quote(car, start_date, end_date)
        if abs(total_price - booking_in.total_price) > PRICE_TOLERANCE:
            logger.warning(
                "Rejected booking of car %s: claimed total %.2f, computed %.2f",
                car.id,
                booking_in.total_price,
                total_price,
            )
            raise InvalidRequest("Total price does not match the car's daily rate")

        try:
            claimed = db.execute(
                update(Car)
                .where(Car.id == car.id, Car.available == True)  # noqa: E712
                .values(available=False)
                .execution_options(synchronize_session=False)
            )
            if claimed.rowcount != 1:
                raise CarUnavailable()

            if self.has_overlap(db, car.id, start_date, end_date):
                raise DateConflict()

            booking = Booking(
                user_id=identity.user_id,
                car_id=car.id,
                tenant_id=car.tenant_id,
                start_date=start_date,
                end_date=end_date,
                total_price=total_price,
                status=BookingStatus.CONFIRMED.value,
            )
            db.add(booking)
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(booking)
        logger.info(
            "User %s booked car %s from %s to %s (booking %s)",
            identity.user_id,
            car.id,
            start_date,
            end_date,
            booking.id,
        )
        return booking

    def list_bookings(self, db: Session, identity: SessionIdentity) -> List[Booking]:
        """Bookings rented by the caller plus every booking of the tenants they administer."""
        condition = Booking.user_id == identity.user_id
        admin_tenants = administered_tenant_ids(db, identity.user_id)
        if admin_tenants:
            condition = or_(condition, Booking.tenant_id.in_(admin_tenants))

        return (
            db.query(Booking)
            .options(joinedload(Booking.car), joinedload(Booking.user))
            .filter(condition)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .all()
        )

    def get_booking(self, db: Session, identity: SessionIdentity, booking_id: int) -> Booking:
        booking = (
            db.query(Booking)
            .options(joinedload(Booking.car), joinedload(Booking.user))
            .filter(Booking.id == booking_id)
            .first()
        )
        # Bookings the caller may not see are reported as missing
        if not booking or not self.can_access(db, identity, booking):
            raise NotFound(f"Booking {booking_id} not found")
        return booking

    def can_access(self, db: Session, identity: SessionIdentity, booking: Booking) -> bool:
        if booking.user_id == identity.user_id:
            return True
        return booking.tenant_id in administered_tenant_ids(db, identity.user_id)

    def cancel_booking(self, db: Session, identity: SessionIdentity, booking_id: int) -> Booking:
        """Cancel a confirmed booking and release the car once nothing else holds it."""
        booking = self.get_booking(db, identity, booking_id)
        if booking.status != BookingStatus.CONFIRMED.value:
            raise InvalidRequest("Only confirmed bookings can be cancelled")

        try:
            booking.status = BookingStatus.CANCELLED.value
            db.flush()
            still_held = (
                db.query(Booking.id)
                .filter(
                    Booking.car_id == booking.car_id,
                    Booking.status == BookingStatus.CONFIRMED.value,
                )
                .first()
            )
            if still_held is None:
                db.query(Car).filter(Car.id == booking.car_id).update(
                    {Car.available: True}, synchronize_session=False
                )
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(booking)
        logger.info("User %s cancelled booking %s", identity.user_id, booking.id)
        return booking
