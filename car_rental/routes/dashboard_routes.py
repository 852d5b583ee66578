import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from car_rental.database.init import get_db
from car_rental.schemas.auth_schema import SessionIdentity
from car_rental.schemas.dashboard_schema import DashboardOverview
from car_rental.services.dashboard_service import DashboardService
from car_rental.services.tenant_service import get_tenant_by_domain
from car_rental.utils.dependencies import get_current_identity
from car_rental.responses.success import data_response
from car_rental.responses.error import internal_server_error, not_found_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardOverview)
def get_overview(
    request: Request,
    db: Session = Depends(get_db),
    identity: SessionIdentity = Depends(get_current_identity),
):
    """
    Overview of the rental business of the current tenant.
    On a development host no tenant is routed, so the session's tenant is used.
    """
    domain = getattr(request.state, "tenant", None) or identity.tenant
    try:
        tenant = get_tenant_by_domain(db, domain)
        if not tenant:
            return not_found_error("Tenant not found")
        overview = DashboardService(db).get_overview(tenant)
        return data_response(DashboardOverview.model_validate(overview))
    except Exception:
        logger.exception("Failed to build dashboard for tenant %s", domain)
        return internal_server_error("Failed to load dashboard")
