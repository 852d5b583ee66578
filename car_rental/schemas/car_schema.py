from pydantic import Field

from .base_schema import CamelModel
from .tenant_schema import TenantResponse


class CarCreate(CamelModel):
    brand: str
    model: str
    year: int = Field(ge=1900, le=2100)
    color: str
    license_plate: str
    daily_rate: float = Field(gt=0)


class CarResponse(CamelModel):
    id: int
    brand: str
    model: str
    year: int
    color: str
    license_plate: str
    daily_rate: float
    available: bool
    tenant_id: int
    tenant: TenantResponse


class CarMinimumResponse(CamelModel):
    id: int
    brand: str
    model: str
    year: int
    license_plate: str
