from concurrent.futures import ThreadPoolExecutor
from datetime import date
import threading

import pytest

from car_rental.database.init import Base, create_db_engine, create_session_factory
from car_rental.database.models import Booking, Car, Tenant, User
from car_rental.enums.booking_status import BookingStatus
from car_rental.enums.user_role import UserRole
from car_rental.exceptions import (
    CarUnavailable,
    Conflict,
    DateConflict,
    InvalidRequest,
    NotFound,
    Unauthenticated,
)
from car_rental.schemas.auth_schema import SessionIdentity
from car_rental.schemas.booking_schema import BookingCreate
from car_rental.seed import seed
from car_rental.services.booking_service import BookingService

service = BookingService()


def booking_request(car, start, end, total=None):
    days = (end - start).days
    return BookingCreate(
        car_id=car.id,
        start_date=start,
        end_date=end,
        total_price=total if total is not None else car.daily_rate * days,
    )


def confirmed_pairs_overlap(bookings):
    confirmed = [b for b in bookings if b.status == BookingStatus.CONFIRMED.value]
    for i, a in enumerate(confirmed):
        for b in confirmed[i + 1:]:
            if a.car_id == b.car_id and a.start_date <= b.end_date and b.start_date <= a.end_date:
                return True
    return False


class TestCreateBooking:
    def test_creates_confirmed_booking_and_blocks_car(self, db_session, customer_identity, city_car):
        booking = service.create_booking(
            db_session,
            customer_identity,
            booking_request(city_car, date(2025, 6, 1), date(2025, 6, 5)),
        )

        assert booking.status == BookingStatus.CONFIRMED.value
        assert booking.tenant_id == city_car.tenant_id
        assert booking.user_id == customer_identity.user_id
        assert booking.total_price == 200.0

        db_session.refresh(city_car)
        assert city_car.available is False

    def test_requires_a_session(self, db_session, city_car):
        with pytest.raises(Unauthenticated):
            service.create_booking(
                db_session, None, booking_request(city_car, date(2025, 6, 1), date(2025, 6, 5))
            )

    @pytest.mark.parametrize("missing", ["car_id", "start_date", "end_date", "total_price"])
    def test_missing_field_is_invalid(self, db_session, customer_identity, city_car, missing):
        payload = booking_request(city_car, date(2025, 6, 1), date(2025, 6, 5))
        setattr(payload, missing, None)

        with pytest.raises(InvalidRequest):
            service.create_booking(db_session, customer_identity, payload)

    @pytest.mark.parametrize(
        "start, end",
        [
            (date(2025, 6, 5), date(2025, 6, 5)),
            (date(2025, 6, 5), date(2025, 6, 1)),
        ],
    )
    def test_empty_or_inverted_range_never_reaches_availability_check(
        self, db_session, customer_identity, city_car, monkeypatch, start, end
    ):
        def fail(*args, **kwargs):
            raise AssertionError("availability check must not run")

        monkeypatch.setattr(service, "has_overlap", fail)
        payload = BookingCreate(car_id=city_car.id, start_date=start, end_date=end, total_price=50.0)

        with pytest.raises(InvalidRequest):
            service.create_booking(db_session, customer_identity, payload)

    def test_raw_payload_is_validated_after_the_session(self, db_session, customer_identity, city_car):
        payload = {"carId": city_car.id, "startDate": "2025-06-01", "endDate": "not-a-date", "totalPrice": 50.0}

        with pytest.raises(Unauthenticated):
            service.create_booking(db_session, None, payload)
        with pytest.raises(InvalidRequest, match="endDate"):
            service.create_booking(db_session, customer_identity, payload)

    def test_raw_payload_books_like_a_schema(self, db_session, customer_identity, city_car):
        payload = {"carId": city_car.id, "startDate": "2025-06-01", "endDate": "2025-06-03", "totalPrice": 100.0}

        booking = service.create_booking(db_session, customer_identity, payload)

        assert booking.start_date == date(2025, 6, 1)
        assert booking.total_price == 100.0

    def test_unknown_car_is_invalid(self, db_session, customer_identity):
        payload = BookingCreate(
            car_id=9999, start_date=date(2025, 6, 1), end_date=date(2025, 6, 2), total_price=50.0
        )
        with pytest.raises(InvalidRequest):
            service.create_booking(db_session, customer_identity, payload)

    def test_boundary_overlap_is_a_conflict(self, db_session, customer_identity, city_car):
        service.create_booking(
            db_session, customer_identity, booking_request(city_car, date(2025, 6, 1), date(2025, 6, 5))
        )

        with pytest.raises(Conflict):
            service.create_booking(
                db_session,
                customer_identity,
                booking_request(city_car, date(2025, 6, 4), date(2025, 6, 10)),
            )

        bookings = db_session.query(Booking).all()
        assert len(bookings) == 1

    def test_booking_inside_an_existing_one_is_rejected(self, db_session, customer_identity, city_car):
        service.create_booking(
            db_session, customer_identity, booking_request(city_car, date(2025, 6, 1), date(2025, 6, 10))
        )

        with pytest.raises(Conflict):
            service.create_booking(
                db_session,
                customer_identity,
                booking_request(city_car, date(2025, 6, 3), date(2025, 6, 5)),
            )

    def test_date_conflict_when_car_flag_is_still_set(self, db_session, customer, customer_identity, city_car):
        # A confirmed booking exists while the car is still flagged available
        db_session.add(
            Booking(
                user_id=customer.id,
                car_id=city_car.id,
                tenant_id=city_car.tenant_id,
                start_date=date(2025, 6, 1),
                end_date=date(2025, 6, 10),
                total_price=500.0,
                status=BookingStatus.CONFIRMED.value,
            )
        )
        db_session.commit()

        with pytest.raises(DateConflict):
            service.create_booking(
                db_session,
                customer_identity,
                booking_request(city_car, date(2025, 6, 3), date(2025, 6, 5)),
            )

        db_session.refresh(city_car)
        assert city_car.available is True
        assert db_session.query(Booking).count() == 1

    def test_unavailable_car_is_rejected(self, db_session, customer_identity, city_car):
        city_car.available = False
        db_session.commit()

        with pytest.raises(CarUnavailable):
            service.create_booking(
                db_session,
                customer_identity,
                booking_request(city_car, date(2025, 7, 1), date(2025, 7, 3)),
            )

    def test_price_is_recomputed_on_the_server(self, db_session, customer_identity, city_car):
        with pytest.raises(InvalidRequest):
            service.create_booking(
                db_session,
                customer_identity,
                booking_request(city_car, date(2025, 6, 1), date(2025, 6, 5), total=1.0),
            )

        db_session.refresh(city_car)
        assert city_car.available is True
        assert db_session.query(Booking).count() == 0


class TestListBookings:
    def test_renter_sees_only_own_bookings(
        self, db_session, customer_identity, premium_admin_identity, city_car, city_car_2
    ):
        mine = service.create_booking(
            db_session, customer_identity, booking_request(city_car, date(2025, 6, 1), date(2025, 6, 3))
        )
        service.create_booking(
            db_session,
            premium_admin_identity,
            booking_request(city_car_2, date(2025, 6, 1), date(2025, 6, 3)),
        )

        listed = service.list_bookings(db_session, customer_identity)

        assert [b.id for b in listed] == [mine.id]

    def test_tenant_admin_sees_bookings_of_administered_tenants(
        self,
        db_session,
        customer_identity,
        city_admin_identity,
        premium_admin_identity,
        city_car,
        city_car_2,
    ):
        customer_booking = service.create_booking(
            db_session, customer_identity, booking_request(city_car, date(2025, 6, 1), date(2025, 6, 3))
        )
        premium_admin_booking = service.create_booking(
            db_session,
            premium_admin_identity,
            booking_request(city_car_2, date(2025, 6, 1), date(2025, 6, 3)),
        )

        city_view = {b.id for b in service.list_bookings(db_session, city_admin_identity)}
        premium_view = {b.id for b in service.list_bookings(db_session, premium_admin_identity)}

        # City administers both bookings; premium only rented one of them
        assert city_view == {customer_booking.id, premium_admin_booking.id}
        assert premium_view == {premium_admin_booking.id}

    def test_user_id_matching_a_tenant_id_does_not_leak_bookings(
        self, db_session, customer, customer_identity, premium_admin_identity
    ):
        # Provision tenants until one shares the customer's numeric id
        tenant = None
        while tenant is None or tenant.id < customer.id:
            tenant = Tenant(domain=f"agency{db_session.query(Tenant).count()}", name="Agency")
            db_session.add(tenant)
            db_session.flush()
        assert tenant.id == customer.id
        car = Car(
            brand="Fiat",
            model="Panda",
            year=2022,
            color="Red",
            license_plate="AGENCY-1",
            daily_rate=30.0,
            tenant_id=tenant.id,
        )
        db_session.add(car)
        db_session.commit()

        service.create_booking(
            db_session, premium_admin_identity, booking_request(car, date(2025, 6, 1), date(2025, 6, 3))
        )

        assert service.list_bookings(db_session, customer_identity) == []


class TestCancelBooking:
    def test_cancel_releases_the_car(self, db_session, customer_identity, city_car):
        booking = service.create_booking(
            db_session, customer_identity, booking_request(city_car, date(2025, 6, 1), date(2025, 6, 3))
        )

        cancelled = service.cancel_booking(db_session, customer_identity, booking.id)

        assert cancelled.status == BookingStatus.CANCELLED.value
        db_session.refresh(city_car)
        assert city_car.available is True

    def test_cancel_twice_is_invalid(self, db_session, customer_identity, city_car):
        booking = service.create_booking(
            db_session, customer_identity, booking_request(city_car, date(2025, 6, 1), date(2025, 6, 3))
        )
        service.cancel_booking(db_session, customer_identity, booking.id)

        with pytest.raises(InvalidRequest):
            service.cancel_booking(db_session, customer_identity, booking.id)

    def test_admin_of_another_tenant_cannot_see_booking(
        self, db_session, customer_identity, premium_admin_identity, city_car
    ):
        booking = service.create_booking(
            db_session, customer_identity, booking_request(city_car, date(2025, 6, 1), date(2025, 6, 3))
        )

        with pytest.raises(NotFound):
            service.cancel_booking(db_session, premium_admin_identity, booking.id)


def test_concurrent_reservations_never_double_book(tmp_path):
    """Several threads race for the same car; exactly one reservation survives."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'race.db'}")
    Base.metadata.create_all(bind=engine)
    session_factory = create_session_factory(engine)

    setup = session_factory()
    seed(setup)
    tenant = setup.query(Tenant).filter_by(domain="city").one()
    car = setup.query(Car).filter_by(license_plate="CITY-1234").one()
    car_id, rate = car.id, car.daily_rate
    renters = []
    for i in range(6):
        user = User(name=f"Renter {i}", email=f"renter{i}@mail.com", hashed_password="x")
        setup.add(user)
        setup.flush()
        renters.append(
            SessionIdentity(
                user_id=user.id,
                email=user.email,
                name=user.name,
                tenant_id=tenant.id,
                tenant=tenant.domain,
                role=UserRole.USER,
            )
        )
    setup.commit()
    setup.close()

    ranges = [
        (date(2025, 6, 1), date(2025, 6, 5)),
        (date(2025, 6, 4), date(2025, 6, 10)),
        (date(2025, 6, 3), date(2025, 6, 4)),
    ]
    barrier = threading.Barrier(len(renters))

    def reserve(index):
        start, end = ranges[index % len(ranges)]
        payload = BookingCreate(
            car_id=car_id, start_date=start, end_date=end, total_price=rate * (end - start).days
        )
        db = session_factory()
        try:
            barrier.wait()
            service.create_booking(db, renters[index], payload)
            return "booked"
        except Conflict:
            return "conflict"
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=len(renters)) as pool:
        outcomes = list(pool.map(reserve, range(len(renters))))

    assert outcomes.count("booked") == 1
    assert outcomes.count("conflict") == len(renters) - 1

    check = session_factory()
    try:
        bookings = check.query(Booking).all()
        assert len(bookings) == 1
        assert not confirmed_pairs_overlap(bookings)
        assert check.get(Car, car_id).available is False
    finally:
        check.close()
        engine.dispose()
