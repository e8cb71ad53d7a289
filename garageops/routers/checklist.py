"""
Checklist item, subtask and timer routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from garageops.auth import get_current_active_employee
from garageops.database import get_db
from garageops.models.employee import Employee
from garageops.schemas.checklist import (
    ChecklistItem, ChecklistItemCreate, ChecklistItemListResponse, ChecklistItemResponse, ChecklistItemUpdate,
    Subtask, SubtaskCreate, SubtaskResponse, SubtaskUpdate,
    TimeEntry, TimeEntryListResponse, TimeEntryResponse, TimerStart,
)
from garageops.schemas.common import SuccessResponse
from garageops.routers.job_cards import get_garage_job_card
from garageops.services import checklist as service
from garageops.services import time_tracking

router = APIRouter(
    prefix="/job-cards/{job_card_id}/checklist",
    tags=["checklist"],
    dependencies=[Depends(get_garage_job_card)],
)


@router.get("", response_model=ChecklistItemListResponse)
async def list_checklist_items(
    job_card_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """List a job card's checklist items in display order."""
    items = await service.list_checklist_items(db, job_card_id)
    return ChecklistItemListResponse(
        checklist_items=[ChecklistItem.model_validate(item) for item in items],
        count=len(items),
    )


@router.post("", response_model=ChecklistItemResponse, status_code=status.HTTP_201_CREATED)
async def create_checklist_item(
    job_card_id: str,
    checklist_item: ChecklistItemCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """Add a checklist item to a job card."""
    item = await service.create_checklist_item(db, job_card_id, checklist_item)
    return ChecklistItemResponse(
        message="Checklist item created successfully",
        checklist_item=ChecklistItem.model_validate(item),
    )


@router.get("/{checklist_item_id}", response_model=ChecklistItemResponse)
async def get_checklist_item(
    job_card_id: str,
    checklist_item_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    item = await service.get_checklist_item_or_404(db, job_card_id, checklist_item_id)
    return ChecklistItemResponse(checklist_item=ChecklistItem.model_validate(item))


@router.patch("/{checklist_item_id}", response_model=ChecklistItemResponse)
async def update_checklist_item(
    job_card_id: str,
    checklist_item_id: str,
    checklist_item_update: ChecklistItemUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """Update only the fields sent in the request."""
    item = await service.update_checklist_item(db, job_card_id, checklist_item_id, checklist_item_update)
    return ChecklistItemResponse(
        message="Checklist item updated successfully",
        checklist_item=ChecklistItem.model_validate(item),
    )


@router.delete("/{checklist_item_id}", response_model=SuccessResponse)
async def delete_checklist_item(
    job_card_id: str,
    checklist_item_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    await service.delete_checklist_item(db, job_card_id, checklist_item_id)
    return SuccessResponse(message="Checklist item deleted successfully")


@router.post(
    "/{checklist_item_id}/subtasks",
    response_model=SubtaskResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_subtask(
    job_card_id: str,
    checklist_item_id: str,
    subtask: SubtaskCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """Append a subtask to a checklist item."""
    created, item = await service.add_subtask(db, job_card_id, checklist_item_id, subtask)
    return SubtaskResponse(
        message="Subtask added successfully",
        subtask=Subtask.model_validate(created),
        checklist_item=ChecklistItem.model_validate(item),
    )


@router.patch("/{checklist_item_id}/subtasks/{subtask_id}", response_model=SubtaskResponse)
async def update_subtask(
    job_card_id: str,
    checklist_item_id: str,
    subtask_id: str,
    subtask_update: SubtaskUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    updated, item = await service.update_subtask(db, job_card_id, checklist_item_id, subtask_id, subtask_update)
    return SubtaskResponse(
        message="Subtask updated successfully",
        subtask=Subtask.model_validate(updated),
        checklist_item=ChecklistItem.model_validate(item),
    )


@router.post("/{checklist_item_id}/subtasks/{subtask_id}/toggle", response_model=SubtaskResponse)
async def toggle_subtask(
    job_card_id: str,
    checklist_item_id: str,
    subtask_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """Flip a subtask between done and not done."""
    toggled, item = await service.toggle_subtask(db, job_card_id, checklist_item_id, subtask_id)
    return SubtaskResponse(
        message="Subtask updated successfully",
        subtask=Subtask.model_validate(toggled),
        checklist_item=ChecklistItem.model_validate(item),
    )


@router.delete("/{checklist_item_id}/subtasks/{subtask_id}", response_model=SubtaskResponse)
async def delete_subtask(
    job_card_id: str,
    checklist_item_id: str,
    subtask_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    item = await service.delete_subtask(db, job_card_id, checklist_item_id, subtask_id)
    return SubtaskResponse(
        message="Subtask deleted successfully",
        checklist_item=ChecklistItem.model_validate(item),
    )


@router.post("/{checklist_item_id}/timer/start", response_model=TimeEntryResponse)
async def start_timer(
    job_card_id: str,
    checklist_item_id: str,
    timer: TimerStart,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """Start timing work on a checklist item."""
    entry, item = await time_tracking.start_timer(
        db, job_card_id, checklist_item_id, timer.mechanic_id, timer.notes
    )
    return TimeEntryResponse(
        time_entry=TimeEntry.model_validate(entry),
        checklist_item=ChecklistItem.model_validate(item),
    )


@router.post("/{checklist_item_id}/timer/stop", response_model=TimeEntryResponse)
async def stop_timer(
    job_card_id: str,
    checklist_item_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """Stop the running timer on a checklist item."""
    entry, item = await time_tracking.stop_timer(db, job_card_id, checklist_item_id)
    return TimeEntryResponse(
        time_entry=TimeEntry.model_validate(entry),
        checklist_item=ChecklistItem.model_validate(item),
    )


@router.get("/{checklist_item_id}/time-entries", response_model=TimeEntryListResponse)
async def list_time_entries(
    job_card_id: str,
    checklist_item_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    entries = await time_tracking.list_time_entries(db, job_card_id, checklist_item_id)
    return TimeEntryListResponse(
        time_entries=[TimeEntry.model_validate(entry) for entry in entries],
        count=len(entries),
    )
