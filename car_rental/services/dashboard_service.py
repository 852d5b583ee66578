from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from car_rental.database.models.booking_model import Booking
from car_rental.database.models.car_model import Car
from car_rental.database.models.tenant_model import Tenant
from car_rental.enums.booking_status import BookingStatus


class DashboardService:
    def __init__(self, db: Session):
        self.db = db

    def get_overview(self, tenant: Tenant, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Overview of a tenant's rental business.

        Args:
            tenant: The tenant whose fleet and bookings are summarised
            today: Reference day for active rentals, defaults to the current date

        Returns:
            Dict matching DashboardOverview
        """
        today = today or date.today()

        total_cars = self.db.query(func.count(Car.id)).filter(Car.tenant_id == tenant.id).scalar()

        active_rentals = (
            self.db.query(func.count(Booking.id))
            .filter(
                Booking.tenant_id == tenant.id,
                Booking.status == BookingStatus.CONFIRMED.value,
                Booking.start_date <= today,
                Booking.end_date >= today,
            )
            .scalar()
        )

        total_customers = (
            self.db.query(func.count(func.distinct(Booking.user_id)))
            .filter(Booking.tenant_id == tenant.id)
            .scalar()
        )

        revenue = (
            self.db.query(func.coalesce(func.sum(Booking.total_price), 0.0))
            .filter(
                Booking.tenant_id == tenant.id,
                Booking.status.in_(
                    [BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value]
                ),
            )
            .scalar()
        )

        recent = (
            self.db.query(Booking)
            .options(joinedload(Booking.car), joinedload(Booking.user))
            .filter(Booking.tenant_id == tenant.id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .limit(5)
            .all()
        )

        return {
            "tenant": tenant.domain,
            "total_cars": total_cars or 0,
            "active_rentals": active_rentals or 0,
            "total_customers": total_customers or 0,
            "revenue": round(float(revenue or 0.0), 2),
            "recent_bookings": [
                {
                    "id": b.id,
                    "customer": b.user.name,
                    "car": f"{b.car.brand} {b.car.model}",
                    "start_date": b.start_date,
                    "end_date": b.end_date,
                    "status": b.status,
                }
                for b in recent
            ],
        }
