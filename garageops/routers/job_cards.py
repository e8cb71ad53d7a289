"""
Job card routes.
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from garageops.auth import get_current_active_employee, resolve_garage_id
from garageops.database import get_db
from garageops.models.employee import Employee
from garageops.models.job_card import JobCard as JobCardModel, JobCardStatus
from garageops.schemas.checklist import ChecklistItem
from garageops.schemas.common import SuccessResponse
from garageops.schemas.job_card import (
    JobCard, JobCardCreate, JobCardDetail, JobCardDetailResponse, JobCardFilters,
    JobCardListResponse, JobCardResponse, JobCardUpdate, StatusChange,
    StatusHistoryEntry, StatusHistoryResponse, StatusUpdate, StatusUpdateResponse,
)
from garageops.schemas.part import JobCardPart
from garageops.services import job_cards as service

router = APIRouter(prefix="/job-cards", tags=["job-cards"])


async def get_garage_job_card(
    job_card_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
) -> JobCardModel:
    """The job card in the path, provided it belongs to the caller's garage."""
    return await service.get_job_card_or_404(db, job_card_id, current_user.garage_id)


@router.post("", response_model=JobCardResponse, status_code=status.HTTP_201_CREATED)
async def create_job_card(
    job_card: JobCardCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """Create a job card; its number is assigned by the server."""
    resolve_garage_id(job_card.garage_id, current_user)
    created = await service.create_job_card(db, job_card)
    return JobCardResponse(job_card=JobCard.model_validate(created))


@router.get("", response_model=JobCardListResponse)
async def list_job_cards(
    garage_id: Optional[str] = Query(default=None, alias="garageId"),
    job_status: Optional[JobCardStatus] = Query(default=None, alias="status"),
    mechanic_id: Optional[str] = Query(default=None, alias="mechanicId"),
    customer_id: Optional[str] = Query(default=None, alias="customerId"),
    date_from: Optional[datetime] = Query(default=None, alias="dateFrom"),
    date_to: Optional[datetime] = Query(default=None, alias="dateTo"),
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """List a garage's job cards, newest first."""
    filters = JobCardFilters(
        status=job_status,
        mechanic_id=mechanic_id,
        customer_id=customer_id,
        date_from=date_from,
        date_to=date_to,
        search=search,
    )
    job_cards = await service.list_job_cards(db, resolve_garage_id(garage_id, current_user), filters)
    return JobCardListResponse(
        job_cards=[JobCard.model_validate(job_card) for job_card in job_cards],
        count=len(job_cards),
    )


@router.get(
    "/{job_card_id}",
    response_model=JobCardDetailResponse,
    dependencies=[Depends(get_garage_job_card)],
)
async def get_job_card(
    job_card_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """Get a job card with its checklist items and parts."""
    job_card, items, parts = await service.get_job_card_detail(db, job_card_id)
    detail = JobCardDetail(
        **JobCard.model_validate(job_card).model_dump(),
        checklist_items=[ChecklistItem.model_validate(item) for item in items],
        parts=[JobCardPart.model_validate(part) for part in parts],
    )
    return JobCardDetailResponse(job_card=detail)


@router.patch(
    "/{job_card_id}",
    response_model=JobCardResponse,
    dependencies=[Depends(get_garage_job_card)],
)
async def update_job_card(
    job_card_id: str,
    job_card_update: JobCardUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """Update a job card. Use the status endpoint to change its status."""
    job_card = await service.update_job_card(db, job_card_id, job_card_update)
    return JobCardResponse(job_card=JobCard.model_validate(job_card))


@router.delete(
    "/{job_card_id}",
    response_model=SuccessResponse,
    dependencies=[Depends(get_garage_job_card)],
)
async def delete_job_card(
    job_card_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """Soft delete a job card."""
    await service.delete_job_card(db, job_card_id)
    return SuccessResponse(message="Job card deleted successfully")


@router.patch(
    "/{job_card_id}/status",
    response_model=StatusUpdateResponse,
    dependencies=[Depends(get_garage_job_card)],
)
async def update_job_card_status(
    job_card_id: str,
    update: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """Change a job card's status and record it in the history."""
    job_card, previous_status = await service.update_job_card_status(
        db, job_card_id, update.status, update.user_id, update.reason
    )
    return StatusUpdateResponse(
        data=StatusChange(
            id=job_card.id,
            job_card_number=job_card.job_card_number,
            previous_status=previous_status,
            new_status=job_card.status,
            updated_at=job_card.updated_at,
        )
    )


@router.get(
    "/{job_card_id}/status-history",
    response_model=StatusHistoryResponse,
    dependencies=[Depends(get_garage_job_card)],
)
async def get_status_history(
    job_card_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """Status changes of a job card, oldest first."""
    history = await service.get_status_history(db, job_card_id)
    return StatusHistoryResponse(
        history=[StatusHistoryEntry.model_validate(entry) for entry in history],
        count=len(history),
    )
