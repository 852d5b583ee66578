"""
Shared pytest fixtures.

- An application built on an in-memory SQLite database (StaticPool), one per test
- The demo data of ``car_rental.seed`` (tenants "premium" and "city", their
  admins and two cars each) plus a customer of "city"
- Helpers to mint session tokens without going through the login endpoint
"""

from typing import Dict, Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from car_rental.config import Settings
from car_rental.database.init import Base
from car_rental.database.models import Car, Tenant, TenantMembership, User
from car_rental.enums.user_role import UserRole
from car_rental.main import create_app
from car_rental.schemas.auth_schema import SessionIdentity
from car_rental.seed import seed
from car_rental.utils.dependencies import create_access_token, hash_password

CUSTOMER_PASSWORD = "secret123"


# =============================================================================
# APPLICATION / DATABASE
# =============================================================================

@pytest.fixture
def settings() -> Settings:
    return Settings(
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret-key",
        ACCESS_TOKEN_EXPIRE_MINUTES=15,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def app(settings: Settings) -> Generator[FastAPI, None, None]:
    app = create_app(settings)
    Base.metadata.create_all(bind=app.state.engine)
    yield app
    Base.metadata.drop_all(bind=app.state.engine)
    app.state.engine.dispose()


@pytest.fixture
def db_session(app: FastAPI) -> Generator[Session, None, None]:
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# MODEL FIXTURES
# =============================================================================

@pytest.fixture
def seeded(db_session: Session) -> None:
    seed(db_session)


@pytest.fixture
def city(db_session: Session, seeded) -> Tenant:
    return db_session.query(Tenant).filter_by(domain="city").one()


@pytest.fixture
def premium(db_session: Session, seeded) -> Tenant:
    return db_session.query(Tenant).filter_by(domain="premium").one()


@pytest.fixture
def city_admin(db_session: Session, seeded) -> User:
    return db_session.query(User).filter_by(email="admin@city.com").one()


@pytest.fixture
def premium_admin(db_session: Session, seeded) -> User:
    return db_session.query(User).filter_by(email="admin@premium.com").one()


@pytest.fixture
def city_car(db_session: Session, city: Tenant) -> Car:
    """Toyota Camry at 50.0 per day."""
    return db_session.query(Car).filter_by(license_plate="CITY-1234").one()


@pytest.fixture
def city_car_2(db_session: Session, city: Tenant) -> Car:
    """Honda Civic at 45.0 per day."""
    return db_session.query(Car).filter_by(license_plate="CITY-5678").one()


@pytest.fixture
def customer(db_session: Session, city: Tenant) -> User:
    user = User(
        name="Jane Doe",
        email="jane@mail.com",
        hashed_password=hash_password(CUSTOMER_PASSWORD),
        role=UserRole.USER.value,
    )
    db_session.add(user)
    db_session.add(TenantMembership(user=user, tenant=city, role=UserRole.USER.value))
    db_session.commit()
    db_session.refresh(user)
    return user


# =============================================================================
# SESSION HELPERS
# =============================================================================

def make_identity(user: User, tenant: Tenant, role: UserRole) -> SessionIdentity:
    return SessionIdentity(
        user_id=user.id,
        email=user.email,
        name=user.name,
        tenant_id=tenant.id,
        tenant=tenant.domain,
        role=role,
    )


@pytest.fixture
def customer_identity(customer: User, city: Tenant) -> SessionIdentity:
    return make_identity(customer, city, UserRole.USER)


@pytest.fixture
def city_admin_identity(city_admin: User, city: Tenant) -> SessionIdentity:
    return make_identity(city_admin, city, UserRole.ADMIN)


@pytest.fixture
def premium_admin_identity(premium_admin: User, premium: Tenant) -> SessionIdentity:
    return make_identity(premium_admin, premium, UserRole.ADMIN)


@pytest.fixture
def auth_headers(settings: Settings):
    def _headers(identity: SessionIdentity) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(identity, settings)}"}

    return _headers
