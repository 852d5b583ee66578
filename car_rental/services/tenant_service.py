import logging
import re
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from car_rental.database.models.membership_model import TenantMembership
from car_rental.database.models.tenant_model import Tenant
from car_rental.database.models.user_model import User
from car_rental.enums.user_role import UserRole
from car_rental.exceptions import Conflict, InvalidRequest
from car_rental.schemas.tenant_schema import TenantCreate
from car_rental.utils.dependencies import hash_password

logger = logging.getLogger(__name__)

DOMAIN_LABEL = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")


def strip_port(host: str) -> str:
    return host.rsplit(":", 1)[0] if host and ":" in host else (host or "")


def is_dev_host(host: Optional[str], dev_hosts: List[str]) -> bool:
    hostname = strip_port((host or "").strip()).lower()
    return hostname in dev_hosts


def extract_tenant_domain(host: Optional[str]) -> Optional[str]:
    """Leftmost label of the host, e.g. ``acme`` for ``acme.example.com:8000``."""
    hostname = strip_port((host or "").strip()).lower()
    label = hostname.split(".")[0]
    return label or None


def get_tenant_by_domain(db: Session, domain: str) -> Optional[Tenant]:
    return db.query(Tenant).filter(Tenant.domain == domain).first()


def list_tenants(db: Session) -> List[Tenant]:
    return db.query(Tenant).order_by(Tenant.name).all()


def create_tenant(db: Session, payload: TenantCreate) -> Tenant:
    """Create a tenant together with its first admin user in one transaction."""
    if not payload.name or not payload.domain or not payload.admin_email or not payload.admin_password:
        raise InvalidRequest("Missing required fields")

    domain = payload.domain.strip().lower()
    if not DOMAIN_LABEL.match(domain):
        raise InvalidRequest("Tenant domain must be a single lowercase hostname label")

    if get_tenant_by_domain(db, domain):
        raise Conflict("Tenant domain already exists")

    if db.query(User).filter(User.email == payload.admin_email).first():
        raise Conflict("Admin email is already registered")

    tenant = Tenant(name=payload.name, domain=domain, description=payload.description)
    admin = User(
        email=payload.admin_email,
        name="Admin",
        hashed_password=hash_password(payload.admin_password),
        role=UserRole.ADMIN.value,
    )
    db.add_all([tenant, admin])
    db.add(TenantMembership(user=admin, tenant=tenant, role=UserRole.ADMIN.value))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Tenant creation for %s lost a uniqueness race", domain)
        raise Conflict("Tenant domain already exists")

    db.refresh(tenant)
    logger.info("Created tenant %s (id=%s) with admin %s", domain, tenant.id, admin.email)
    return tenant
