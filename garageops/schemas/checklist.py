"""
Pydantic schemas for checklist items, subtasks and time entries.
"""
from pydantic import Field, StringConstraints
from datetime import datetime
from decimal import Decimal
from typing import Annotated, ClassVar, Optional

from garageops.models.checklist import ChecklistItemStatus
from garageops.models.job_card import Priority
from garageops.schemas.common import CamelModel, Money, PatchModel

RequiredName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
NonNegativeInt = Annotated[int, Field(ge=0, strict=True)]


class Subtask(CamelModel):
    """A finer-grained step embedded in a checklist item."""
    id: str
    name: str
    description: Optional[str] = None
    completed: bool = False
    estimated_minutes: int = 0
    display_order: int = 0


class SubtaskCreate(CamelModel):
    """Schema for adding a subtask."""
    name: RequiredName
    description: Optional[str] = None
    estimated_minutes: NonNegativeInt = 0
    display_order: NonNegativeInt = 0


class SubtaskUpdate(PatchModel):
    """Schema for updating a subtask."""
    not_nullable: ClassVar[frozenset[str]] = frozenset(
        {"name", "completed", "estimated_minutes", "display_order"}
    )

    name: Optional[RequiredName] = None
    description: Optional[str] = None
    completed: Optional[bool] = None
    estimated_minutes: Optional[NonNegativeInt] = None
    display_order: Optional[NonNegativeInt] = None


class ChecklistItemCreate(CamelModel):
    """Schema for creating a checklist item."""
    item_name: RequiredName
    mechanic_id: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    status: ChecklistItemStatus = ChecklistItemStatus.PENDING
    priority: Priority = Priority.MEDIUM
    estimated_minutes: NonNegativeInt = 0
    labor_rate: Decimal = Field(default=Decimal("0"), ge=0)
    display_order: NonNegativeInt = 0
    notes: Optional[str] = None
    subtasks: list[SubtaskCreate] = Field(default_factory=list)


class ChecklistItemUpdate(PatchModel):
    """Schema for updating a checklist item. Only fields sent are written."""
    not_nullable: ClassVar[frozenset[str]] = frozenset(
        {"item_name", "status", "priority", "estimated_minutes", "actual_minutes", "labor_rate", "display_order"}
    )

    item_name: Optional[RequiredName] = None
    mechanic_id: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    status: Optional[ChecklistItemStatus] = None
    priority: Optional[Priority] = None
    estimated_minutes: Optional[NonNegativeInt] = None
    actual_minutes: Optional[NonNegativeInt] = None
    labor_rate: Optional[Decimal] = Field(default=None, ge=0)
    display_order: Optional[NonNegativeInt] = None
    mechanic_notes: Optional[str] = None
    notes: Optional[str] = None


class ChecklistItem(CamelModel):
    """Schema for checklist item responses."""
    id: str
    job_card_id: str
    mechanic_id: Optional[str] = None
    item_name: str
    description: Optional[str] = None
    category: Optional[str] = None
    status: ChecklistItemStatus
    priority: Priority
    estimated_minutes: int
    actual_minutes: int
    labor_rate: Money
    labor_cost: Money
    display_order: int
    is_timer_running: bool
    timer_started_at: Optional[datetime] = None
    total_time_spent: int
    mechanic_notes: Optional[str] = None
    notes: Optional[str] = None
    subtasks: list[Subtask] = Field(default_factory=list)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ChecklistItemResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
    checklist_item: ChecklistItem


class ChecklistItemListResponse(CamelModel):
    success: bool = True
    checklist_items: list[ChecklistItem]
    count: int


class SubtaskResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
    subtask: Optional[Subtask] = None
    checklist_item: ChecklistItem


class TimerStart(CamelModel):
    """Schema for starting a timer on a checklist item."""
    mechanic_id: str = Field(min_length=1)
    notes: Optional[str] = None


class TimeEntry(CamelModel):
    """Schema for time entry responses."""
    id: str
    checklist_item_id: str
    mechanic_id: str
    started_at: datetime
    stopped_at: Optional[datetime] = None
    duration_seconds: Optional[int] = None
    notes: Optional[str] = None


class TimeEntryResponse(CamelModel):
    success: bool = True
    time_entry: TimeEntry
    checklist_item: ChecklistItem


class TimeEntryListResponse(CamelModel):
    success: bool = True
    time_entries: list[TimeEntry]
    count: int
