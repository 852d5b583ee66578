import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from car_rental.database.init import get_db
from car_rental.exceptions import CarRentalError
from car_rental.schemas.tenant_schema import TenantCreate, TenantResponse
from car_rental.services import tenant_service
from car_rental.responses.success import created_response, data_response
from car_rental.responses.error import error_response, internal_server_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tenants", tags=["Tenants"])


@router.post("", response_model=TenantResponse, status_code=201)
def create_tenant(payload: TenantCreate, db: Session = Depends(get_db)):
    """Provision a tenant and its first admin user."""
    try:
        tenant = tenant_service.create_tenant(db, payload)
        return created_response(
            TenantResponse.model_validate(tenant), message="Tenant created successfully"
        )
    except CarRentalError as e:
        logger.info("Tenant creation rejected: %s", e.message)
        return error_response(e)
    except Exception:
        logger.exception("Error creating tenant")
        return internal_server_error("Failed to create tenant")


@router.get("", response_model=List[TenantResponse])
def list_tenants(db: Session = Depends(get_db)):
    try:
        tenants = tenant_service.list_tenants(db)
        return data_response([TenantResponse.model_validate(t) for t in tenants])
    except Exception:
        logger.exception("Error fetching tenants")
        return internal_server_error("Failed to fetch tenants")
