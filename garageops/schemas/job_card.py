"""
Pydantic schemas for job cards and status history.
"""
from pydantic import Field
from datetime import date, datetime
from typing import ClassVar, Optional

from garageops.models.job_card import JobCardStatus, JobType, Priority
from garageops.schemas.checklist import ChecklistItem, ChecklistItemCreate
from garageops.schemas.common import CamelModel, Money, PatchModel
from garageops.schemas.part import JobCardPart


class JobCardBase(CamelModel):
    """Fields a caller may supply on a job card."""
    customer_id: str = Field(min_length=1)
    vehicle_id: str = Field(min_length=1)
    job_type: JobType
    priority: Priority
    customer_complaint: Optional[str] = None
    work_requested: Optional[str] = None
    customer_notes: Optional[str] = None
    current_mileage: Optional[int] = Field(default=None, ge=0)
    reported_issue: Optional[str] = None
    promised_date: Optional[date] = None
    promised_time: Optional[str] = None
    lead_mechanic_id: Optional[str] = None
    internal_notes: Optional[str] = None


class JobCardCreate(JobCardBase):
    """Schema for creating a job card with optional initial checklist items."""
    garage_id: str = Field(min_length=1)
    checklist_items: list[ChecklistItemCreate] = Field(default_factory=list)


class JobCardUpdate(PatchModel):
    """
    Schema for updating a job card.

    Status is deliberately absent: status changes go through the status
    endpoint so they are attributed and recorded in the history.
    """
    not_nullable: ClassVar[frozenset[str]] = frozenset({"customer_id", "vehicle_id", "job_type", "priority"})

    customer_id: Optional[str] = Field(default=None, min_length=1)
    vehicle_id: Optional[str] = Field(default=None, min_length=1)
    job_type: Optional[JobType] = None
    priority: Optional[Priority] = None
    customer_complaint: Optional[str] = None
    work_requested: Optional[str] = None
    customer_notes: Optional[str] = None
    current_mileage: Optional[int] = Field(default=None, ge=0)
    reported_issue: Optional[str] = None
    promised_date: Optional[date] = None
    promised_time: Optional[str] = None
    lead_mechanic_id: Optional[str] = None
    internal_notes: Optional[str] = None
    mechanic_notes: Optional[str] = None


class JobCard(JobCardBase):
    """Schema for job card responses."""
    id: str
    job_card_number: str
    garage_id: str
    status: JobCardStatus
    actual_start_date: Optional[datetime] = None
    actual_completion_date: Optional[datetime] = None
    labor_hours: Money
    labor_cost: Money
    parts_cost: Money
    total_cost: Money
    total_checklist_items: int
    completed_checklist_items: int
    progress_percentage: int
    mechanic_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class JobCardDetail(JobCard):
    """Job card with its checklist items and part lines."""
    checklist_items: list[ChecklistItem] = Field(default_factory=list)
    parts: list[JobCardPart] = Field(default_factory=list)


class JobCardFilters(CamelModel):
    """Optional filters for listing job cards."""
    status: Optional[JobCardStatus] = None
    mechanic_id: Optional[str] = None
    customer_id: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    search: Optional[str] = None


class JobCardResponse(CamelModel):
    success: bool = True
    job_card: JobCard


class JobCardDetailResponse(CamelModel):
    success: bool = True
    job_card: JobCardDetail


class JobCardListResponse(CamelModel):
    success: bool = True
    job_cards: list[JobCard]
    count: int


class StatusUpdate(CamelModel):
    """Schema for a status change. The acting user is mandatory."""
    status: JobCardStatus
    user_id: str = Field(min_length=1)
    reason: Optional[str] = None


class StatusChange(CamelModel):
    id: str
    job_card_number: str
    previous_status: JobCardStatus
    new_status: JobCardStatus
    updated_at: datetime


class StatusUpdateResponse(CamelModel):
    success: bool = True
    message: str = "Status updated successfully"
    data: StatusChange


class StatusHistoryEntry(CamelModel):
    """Schema for status history responses."""
    id: str
    job_card_id: str
    old_status: Optional[JobCardStatus] = None
    new_status: JobCardStatus
    changed_by: str
    change_reason: Optional[str] = None
    changed_at: datetime


class StatusHistoryResponse(CamelModel):
    success: bool = True
    history: list[StatusHistoryEntry]
    count: int
