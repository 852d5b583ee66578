from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship

from car_rental.database.init import Base


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True, index=True)
    domain = Column(String(63), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    memberships = relationship("TenantMembership", back_populates="tenant", cascade="all, delete-orphan")
    cars = relationship("Car", back_populates="tenant", cascade="all, delete-orphan")
    bookings = relationship("Booking", back_populates="tenant")
