"""
Job card and status history models for database.
"""
import uuid
from decimal import Decimal

from sqlalchemy import (
    Column, Integer, String, Text, Numeric, Date, DateTime, ForeignKey,
    UniqueConstraint, Enum as SQLEnum,
)
from sqlalchemy.orm import relationship
from garageops.database import Base, enum_values, utcnow
import enum


class JobCardStatus(str, enum.Enum):
    """Job card lifecycle status. Spellings match the persisted values."""
    DRAFT = "draft"
    QUEUED = "queued"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    PARTS_WAITING = "parts_waiting"
    QUALITY_CHECK = "quality_check"
    READY = "ready"
    DELIVERED = "delivered"
    INVOICED = "invoiced"
    CLOSED = "closed"
    CANCELLED = "cancelled"


class JobType(str, enum.Enum):
    """Job type enumeration."""
    ROUTINE = "routine"
    REPAIR = "repair"
    MAINTENANCE = "maintenance"
    CUSTOM = "custom"
    DIAGNOSTIC = "diagnostic"


class Priority(str, enum.Enum):
    """Priority shared by job cards and checklist items."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class JobCard(Base):
    """Job card (work order) database model."""

    __tablename__ = "job_cards"
    __table_args__ = (
        UniqueConstraint("garage_id", "job_card_number", name="uq_job_card_garage_number"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    job_card_number = Column(String(16), nullable=False, index=True)
    garage_id = Column(String(36), nullable=False, index=True)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    vehicle_id = Column(String(36), ForeignKey("customer_vehicles.id"), nullable=False, index=True)
    job_type = Column(SQLEnum(JobType, values_callable=enum_values), nullable=False)
    priority = Column(SQLEnum(Priority, values_callable=enum_values), default=Priority.MEDIUM, nullable=False)
    status = Column(SQLEnum(JobCardStatus, values_callable=enum_values), default=JobCardStatus.DRAFT, nullable=False)

    customer_complaint = Column(Text, nullable=True)
    work_requested = Column(Text, nullable=True)
    customer_notes = Column(Text, nullable=True)
    current_mileage = Column(Integer, nullable=True)
    reported_issue = Column(Text, nullable=True)

    promised_date = Column(Date, nullable=True)
    promised_time = Column(String(8), nullable=True)
    actual_start_date = Column(DateTime(timezone=True), nullable=True)
    actual_completion_date = Column(DateTime(timezone=True), nullable=True)
    lead_mechanic_id = Column(String(36), ForeignKey("employees.id"), nullable=True)

    # Derived from checklist items and part lines, see services.progress
    labor_hours = Column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    labor_cost = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    parts_cost = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    total_cost = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    total_checklist_items = Column(Integer, default=0, nullable=False)
    completed_checklist_items = Column(Integer, default=0, nullable=False)
    progress_percentage = Column(Integer, default=0, nullable=False)

    internal_notes = Column(Text, nullable=True)
    mechanic_notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    checklist_items = relationship(
        "ChecklistItem",
        back_populates="job_card",
        cascade="all, delete-orphan",
        order_by="ChecklistItem.display_order",
    )
    parts = relationship("JobCardPart", back_populates="job_card", cascade="all, delete-orphan")
    status_history = relationship(
        "JobCardStatusHistory",
        back_populates="job_card",
        cascade="all, delete-orphan",
        order_by="JobCardStatusHistory.changed_at",
    )


class JobCardStatusHistory(Base):
    """Append-only record of job card status changes."""

    __tablename__ = "job_card_status_history"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    job_card_id = Column(String(36), ForeignKey("job_cards.id", ondelete="CASCADE"), nullable=False, index=True)
    old_status = Column(SQLEnum(JobCardStatus, values_callable=enum_values), nullable=True)
    new_status = Column(SQLEnum(JobCardStatus, values_callable=enum_values), nullable=False)
    changed_by = Column(String, nullable=False)
    change_reason = Column(Text, nullable=True)
    changed_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    job_card = relationship("JobCard", back_populates="status_history")
