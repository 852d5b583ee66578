from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from car_rental.database.init import Base
from car_rental.enums.booking_status import BookingStatus


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (Index("ix_bookings_car_status", "car_id", "status"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    car_id = Column(Integer, ForeignKey("cars.id"), nullable=False)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    total_price = Column(Float, nullable=False)
    status = Column(String(20), default=BookingStatus.CONFIRMED.value, nullable=False)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, onupdate=lambda: datetime.now(timezone.utc), nullable=True)

    user = relationship("User", back_populates="bookings")
    car = relationship("Car", back_populates="bookings")
    tenant = relationship("Tenant", back_populates="bookings")
