"""Seed the database with two demo tenants, their admins and a few cars."""

import logging

from sqlalchemy.orm import Session

from car_rental.config import get_settings
from car_rental.database import models  # noqa: F401
from car_rental.database.init import Base, create_db_engine, create_session_factory
from car_rental.database.models import Car, Tenant, TenantMembership, User
from car_rental.enums.user_role import UserRole
from car_rental.utils.dependencies import hash_password

logger = logging.getLogger(__name__)

TENANTS = [
    {
        "name": "Premium Cars",
        "domain": "premium",
        "description": "Luxury car rentals for special occasions",
    },
    {
        "name": "City Rentals",
        "domain": "city",
        "description": "Affordable city cars for daily use",
    },
]

ADMIN_PASSWORD = "admin123"


def seed(db: Session) -> None:
    """Create the demo data. Rows that already exist are left untouched."""
    for tenant_data in TENANTS:
        tenant = db.query(Tenant).filter(Tenant.domain == tenant_data["domain"]).first()
        if tenant is None:
            tenant = Tenant(**tenant_data)
            db.add(tenant)
            db.flush()

        admin_email = f"admin@{tenant.domain}.com"
        admin = db.query(User).filter(User.email == admin_email).first()
        if admin is None:
            admin = User(
                email=admin_email,
                name="Admin",
                hashed_password=hash_password(ADMIN_PASSWORD),
                role=UserRole.ADMIN.value,
            )
            db.add(admin)
            db.add(TenantMembership(user=admin, tenant=tenant, role=UserRole.ADMIN.value))
            db.flush()

        cars = [
            {
                "brand": "Toyota",
                "model": "Camry",
                "year": 2023,
                "color": "Silver",
                "license_plate": f"{tenant.domain.upper()}-1234",
                "daily_rate": 50.0,
            },
            {
                "brand": "Honda",
                "model": "Civic",
                "year": 2023,
                "color": "Black",
                "license_plate": f"{tenant.domain.upper()}-5678",
                "daily_rate": 45.0,
            },
        ]
        for car_data in cars:
            exists = db.query(Car).filter(Car.license_plate == car_data["license_plate"]).first()
            if exists is None:
                db.add(Car(tenant_id=tenant.id, available=True, **car_data))

        db.commit()
        logger.info("Created tenant: %s with admin: %s", tenant.name, admin.email)


def main():
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    engine = create_db_engine(settings.DATABASE_URL)
    Base.metadata.create_all(bind=engine)
    db = create_session_factory(engine)()
    try:
        seed(db)
        logger.info("Seeding completed successfully!")
    except Exception:
        logger.exception("Error seeding database")
        db.rollback()
        raise SystemExit(1)
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    main()
