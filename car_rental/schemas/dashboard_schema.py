from datetime import date
from typing import List

from .base_schema import CamelModel


class RecentBooking(CamelModel):
    id: int
    customer: str
    car: str
    start_date: date
    end_date: date
    status: str


class DashboardOverview(CamelModel):
    tenant: str
    total_cars: int = 0
    active_rentals: int = 0
    total_customers: int = 0
    revenue: float = 0.0
    recent_bookings: List[RecentBooking] = []
