"""
Vehicle model for database.
"""
import uuid

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from garageops.database import Base


class Vehicle(Base):
    """Customer vehicle database model."""

    __tablename__ = "customer_vehicles"
    __table_args__ = (
        UniqueConstraint("garage_id", "license_plate", name="uq_vehicle_garage_plate"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    garage_id = Column(String(36), nullable=False, index=True)
    customer_id = Column(String(36), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    make = Column(String, nullable=False)
    model = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    license_plate = Column(String, nullable=False, index=True)
    vin = Column(String, nullable=True)
    color = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    customer = relationship("Customer", back_populates="vehicles")
