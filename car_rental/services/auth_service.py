import logging
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from car_rental.database.models.membership_model import TenantMembership
from car_rental.database.models.user_model import User
from car_rental.enums.user_role import UserRole
from car_rental.exceptions import (
    Conflict,
    Forbidden,
    InvalidPassword,
    NotFound,
    NotMemberOfTenant,
    TenantNotFound,
    UserNotFound,
)
from car_rental.schemas.auth_schema import RegisterRequest, SessionIdentity
from car_rental.services.tenant_service import get_tenant_by_domain
from car_rental.utils.dependencies import hash_password, verify_password

logger = logging.getLogger(__name__)


def get_user_by_email(email: str, db: Session) -> Optional[User]:
    return db.query(User).filter_by(email=email).first()


def get_membership(db: Session, user_id: int, tenant_id: int) -> Optional[TenantMembership]:
    return (
        db.query(TenantMembership)
        .filter(TenantMembership.user_id == user_id, TenantMembership.tenant_id == tenant_id)
        .first()
    )


def authenticate(db: Session, tenant_domain: str, email: str, password: str) -> SessionIdentity:
    """Verify a (tenant, email, password) triple and build the session identity.

    Raises one :class:`AuthenticationError` subclass per failure cause; the
    caller decides how much of that cause to reveal.
    """
    tenant = get_tenant_by_domain(db, tenant_domain)
    if not tenant:
        raise TenantNotFound()

    user = get_user_by_email(email, db)
    if not user:
        raise UserNotFound()

    membership = get_membership(db, user.id, tenant.id)
    if not membership:
        raise NotMemberOfTenant()

    if not verify_password(password, user.hashed_password):
        raise InvalidPassword()

    return SessionIdentity(
        user_id=user.id,
        email=user.email,
        name=user.name,
        tenant_id=tenant.id,
        tenant=tenant.domain,
        role=membership.role,
    )


def register_customer(db: Session, payload: RegisterRequest) -> SessionIdentity:
    """Create a customer account with a USER membership in the given tenant."""
    tenant = get_tenant_by_domain(db, payload.tenant)
    if not tenant:
        raise TenantNotFound()

    if get_user_by_email(payload.email, db):
        raise Conflict("User already exists")

    user = User(
        name=payload.name,
        email=payload.email,
        hashed_password=hash_password(payload.password),
        role=UserRole.USER.value,
    )
    db.add(user)
    db.add(TenantMembership(user=user, tenant=tenant, role=UserRole.USER.value))
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s in tenant %s", user.email, tenant.domain)

    return SessionIdentity(
        user_id=user.id,
        email=user.email,
        name=user.name,
        tenant_id=tenant.id,
        tenant=tenant.domain,
        role=UserRole.USER,
    )


def administered_tenant_ids(db: Session, user_id: int) -> list:
    rows = (
        db.query(TenantMembership.tenant_id)
        .filter(
            TenantMembership.user_id == user_id,
            TenantMembership.role == UserRole.ADMIN.value,
        )
        .all()
    )
    return [row.tenant_id for row in rows]


def get_user_detail(db: Session, identity: SessionIdentity, user_id: int) -> User:
    """A user may read their own record; tenant admins may read their members."""
    user = (
        db.query(User)
        .options(joinedload(User.memberships).joinedload(TenantMembership.tenant))
        .filter(User.id == user_id)
        .first()
    )
    if not user:
        raise NotFound(f"No user found with id {user_id}")

    if user.id == identity.user_id:
        return user

    admin_of = set(administered_tenant_ids(db, identity.user_id))
    if admin_of.intersection(m.tenant_id for m in user.memberships):
        return user

    raise Forbidden("Not authorized to view this user")
