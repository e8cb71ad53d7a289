"""
Job card part line routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from garageops.auth import get_current_active_employee
from garageops.database import get_db
from garageops.models.employee import Employee
from garageops.schemas.common import SuccessResponse
from garageops.schemas.part import (
    JobCardPart, JobCardPartCreate, JobCardPartListResponse, JobCardPartResponse, JobCardPartUpdate,
)
from garageops.routers.job_cards import get_garage_job_card
from garageops.services import parts as service

router = APIRouter(
    prefix="/job-cards/{job_card_id}/parts",
    tags=["parts"],
    dependencies=[Depends(get_garage_job_card)],
)


@router.get("", response_model=JobCardPartListResponse)
async def list_parts(
    job_card_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """List the parts allocated to a job card."""
    parts = await service.list_parts(db, job_card_id)
    return JobCardPartListResponse(parts=[JobCardPart.model_validate(part) for part in parts], count=len(parts))


@router.post("", response_model=JobCardPartResponse, status_code=status.HTTP_201_CREATED)
async def add_part(
    job_card_id: str,
    part: JobCardPartCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """Allocate a part to a job card."""
    created = await service.add_part(db, job_card_id, part)
    return JobCardPartResponse(part=JobCardPart.model_validate(created))


@router.patch("/{part_line_id}", response_model=JobCardPartResponse)
async def update_part(
    job_card_id: str,
    part_line_id: str,
    part_update: JobCardPartUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    updated = await service.update_part(db, job_card_id, part_line_id, part_update)
    return JobCardPartResponse(part=JobCardPart.model_validate(updated))


@router.delete("/{part_line_id}", response_model=SuccessResponse)
async def delete_part(
    job_card_id: str,
    part_line_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    await service.delete_part(db, job_card_id, part_line_id)
    return SuccessResponse(message="Part removed from job card")
