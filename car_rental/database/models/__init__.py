from .tenant_model import Tenant
from .user_model import User
from .membership_model import TenantMembership
from .car_model import Car
from .booking_model import Booking

__all__ = ["Tenant", "User", "TenantMembership", "Car", "Booking"]
