from typing import Optional

from .base_schema import CamelModel


class TenantCreate(CamelModel):
    # Presence is checked by the service so a missing field answers 400
    name: Optional[str] = None
    domain: Optional[str] = None
    description: Optional[str] = None
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None


class TenantResponse(CamelModel):
    id: int
    name: str
    domain: str
    description: Optional[str] = None
