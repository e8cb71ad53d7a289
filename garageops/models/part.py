"""
Job card part line model for database.
"""
import uuid
from decimal import Decimal

from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from garageops.database import Base, enum_values, utcnow
import enum


class PartStatus(str, enum.Enum):
    """Part line status enumeration."""
    ALLOCATED = "allocated"
    ORDERED = "ordered"
    RECEIVED = "received"
    USED = "used"
    RETURNED = "returned"
    CANCELLED = "cancelled"


class JobCardPart(Base):
    """A part allocated to a job card."""

    __tablename__ = "job_card_parts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    job_card_id = Column(String(36), ForeignKey("job_cards.id", ondelete="CASCADE"), nullable=False, index=True)
    part_id = Column(String(36), nullable=True)
    part_name = Column(String, nullable=False)
    part_number = Column(String, nullable=True)
    manufacturer = Column(String, nullable=True)
    status = Column(SQLEnum(PartStatus, values_callable=enum_values), default=PartStatus.ALLOCATED, nullable=False)
    quantity_allocated = Column(Integer, default=0, nullable=False)
    quantity_used = Column(Integer, default=0, nullable=False)
    quantity_returned = Column(Integer, default=0, nullable=False)
    unit_price = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    total_price = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    source = Column(String, default="inventory", nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    job_card = relationship("JobCard", back_populates="parts")
