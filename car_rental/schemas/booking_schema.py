from datetime import date, datetime
from typing import Optional

from car_rental.enums.booking_status import BookingStatus
from .auth_schema import UserMinimumResponse
from .base_schema import CamelModel
from .car_schema import CarMinimumResponse


class BookingCreate(CamelModel):
    car_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_price: Optional[float] = None


class BookingResponse(CamelModel):
    id: int
    user_id: int
    car_id: int
    tenant_id: int
    start_date: date
    end_date: date
    total_price: float
    status: BookingStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
    car: Optional[CarMinimumResponse] = None
    user: Optional[UserMinimumResponse] = None
