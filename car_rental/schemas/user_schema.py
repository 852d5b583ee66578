from datetime import datetime
from typing import List, Optional

from car_rental.enums.user_role import UserRole
from .base_schema import CamelModel
from .tenant_schema import TenantResponse


class MembershipResponse(CamelModel):
    id: int
    role: UserRole
    tenant: TenantResponse


class UserResponse(CamelModel):
    id: int
    name: str
    email: str
    role: UserRole
    created_at: Optional[datetime] = None
    memberships: List[MembershipResponse] = []
