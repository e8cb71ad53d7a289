"""
Checklist item and time entry models for database.
"""
import uuid
from decimal import Decimal

from sqlalchemy import (
    Boolean, Column, Integer, String, Text, Numeric, DateTime, ForeignKey, JSON,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship
from garageops.database import Base, enum_values, utcnow
from garageops.models.job_card import Priority
import enum


class ChecklistItemStatus(str, enum.Enum):
    """Checklist item status enumeration."""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class ChecklistItem(Base):
    """
    A discrete task within a job card's scope of work.

    Subtasks are stored as an ordered JSON list on the item itself; there is no
    separate subtask table.
    """

    __tablename__ = "job_card_checklist_items"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    job_card_id = Column(String(36), ForeignKey("job_cards.id", ondelete="CASCADE"), nullable=False, index=True)
    mechanic_id = Column(String(36), ForeignKey("employees.id"), nullable=True)
    item_name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=True)
    status = Column(SQLEnum(ChecklistItemStatus, values_callable=enum_values), default=ChecklistItemStatus.PENDING, nullable=False)
    priority = Column(SQLEnum(Priority, values_callable=enum_values), default=Priority.MEDIUM, nullable=False)
    estimated_minutes = Column(Integer, default=0, nullable=False)
    actual_minutes = Column(Integer, default=0, nullable=False)
    labor_rate = Column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    labor_cost = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    display_order = Column(Integer, default=0, nullable=False)

    is_timer_running = Column(Boolean, default=False, nullable=False)
    timer_started_at = Column(DateTime(timezone=True), nullable=True)
    total_time_spent = Column(Integer, default=0, nullable=False)  # seconds

    mechanic_notes = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    subtasks = Column(JSON, default=list, nullable=False)

    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    job_card = relationship("JobCard", back_populates="checklist_items")
    time_entries = relationship("TimeEntry", back_populates="checklist_item", cascade="all, delete-orphan")


class TimeEntry(Base):
    """One started/stopped timer interval on a checklist item."""

    __tablename__ = "job_card_time_entries"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    checklist_item_id = Column(
        String(36), ForeignKey("job_card_checklist_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    mechanic_id = Column(String(36), nullable=False)
    started_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    stopped_at = Column(DateTime(timezone=True), nullable=True)
    duration_seconds = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    checklist_item = relationship("ChecklistItem", back_populates="time_entries")
