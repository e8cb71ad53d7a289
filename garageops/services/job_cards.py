"""
Job card lifecycle: creation with numbering, updates, status changes and soft
deletion.
"""
import logging
import uuid
from datetime import date
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from garageops.database import commit_or_raise, utcnow
from garageops.exceptions import JobCardNumberExhaustedError, NotFoundError, PersistenceError, ValidationError
from garageops.models import (
    ChecklistItem, ChecklistItemStatus, Customer, Employee, JobCard, JobCardPart,
    JobCardStatus, JobCardStatusHistory, Vehicle,
)
from garageops.schemas.checklist import ChecklistItemCreate
from garageops.schemas.job_card import JobCardCreate, JobCardFilters, JobCardUpdate
from garageops.services.numbering import MAX_ATTEMPTS, generate_job_card_number, job_card_number_exists
from garageops.services.progress import calculate_item_labor_cost, recalculate_job_card_totals

logger = logging.getLogger(__name__)

# Status -> timestamp column stamped when a job card enters that status
STATUS_TIMESTAMPS = {
    JobCardStatus.QUEUED: "actual_start_date",
    JobCardStatus.IN_PROGRESS: "actual_start_date",
    JobCardStatus.READY: "actual_completion_date",
    JobCardStatus.DELIVERED: "actual_completion_date",
}


async def get_job_card_or_404(db: AsyncSession, job_card_id: str, garage_id: Optional[str] = None) -> JobCard:
    """
    Load a live (not soft-deleted) job card or raise NotFoundError.

    With ``garage_id`` a card owned by another garage is treated as missing.
    """
    query = select(JobCard).where(JobCard.id == job_card_id, JobCard.deleted_at.is_(None))
    if garage_id is not None:
        query = query.where(JobCard.garage_id == garage_id)
    job_card = (await db.execute(query)).scalar_one_or_none()
    if job_card is None:
        raise NotFoundError("Job card not found")
    return job_card


async def ensure_employee(db: AsyncSession, garage_id: str, employee_id: str):
    """Mechanics assigned to job cards and checklist items must work at the garage."""
    result = await db.execute(
        select(Employee.id).where(Employee.id == employee_id, Employee.garage_id == garage_id)
    )
    if result.scalar_one_or_none() is None:
        raise NotFoundError("Employee not found")


async def ensure_customer_and_vehicle(db: AsyncSession, garage_id: str, customer_id: str, vehicle_id: str):
    """Existence checks that must pass before a job card references them."""
    customer = (
        await db.execute(select(Customer).where(Customer.id == customer_id, Customer.garage_id == garage_id))
    ).scalar_one_or_none()
    if customer is None:
        raise NotFoundError("Customer not found")

    vehicle = (
        await db.execute(select(Vehicle).where(Vehicle.id == vehicle_id, Vehicle.garage_id == garage_id))
    ).scalar_one_or_none()
    if vehicle is None:
        raise NotFoundError("Vehicle not found")
    if vehicle.customer_id != customer_id:
        raise ValidationError("Vehicle does not belong to this customer")


def build_checklist_item(job_card: JobCard, data: ChecklistItemCreate) -> ChecklistItem:
    """Map a create schema onto a new checklist item owned by ``job_card``."""
    item = ChecklistItem(
        job_card_id=job_card.id,
        mechanic_id=data.mechanic_id or job_card.lead_mechanic_id,
        item_name=data.item_name,
        description=data.description,
        category=data.category,
        status=data.status,
        priority=data.priority,
        estimated_minutes=data.estimated_minutes,
        actual_minutes=0,
        labor_rate=data.labor_rate,
        display_order=data.display_order,
        notes=data.notes,
        subtasks=[
            {
                "id": str(uuid.uuid4()),
                "name": subtask.name,
                "description": subtask.description,
                "completed": False,
                "estimatedMinutes": subtask.estimated_minutes,
                "displayOrder": subtask.display_order,
            }
            for subtask in data.subtasks
        ],
    )
    if data.status == ChecklistItemStatus.IN_PROGRESS:
        item.started_at = utcnow()
    elif data.status == ChecklistItemStatus.COMPLETED:
        item.completed_at = utcnow()
    item.labor_cost = calculate_item_labor_cost(item)
    return item


async def create_job_card(db: AsyncSession, data: JobCardCreate, today: Optional[date] = None) -> JobCard:
    """
    Create a job card, its initial checklist items and its number.

    Every attempt proposes a number and commits the whole job card in one
    transaction. If the commit loses a race for the number, the unique
    constraint rejects it and the attempt is repeated with a fresh number.
    """
    await ensure_customer_and_vehicle(db, data.garage_id, data.customer_id, data.vehicle_id)
    mechanic_ids = {data.lead_mechanic_id, *(item.mechanic_id for item in data.checklist_items)}
    for mechanic_id in sorted(filter(None, mechanic_ids)):
        await ensure_employee(db, data.garage_id, mechanic_id)

    fields = data.model_dump(exclude={"checklist_items"})
    last_number = None

    for attempt in range(1, MAX_ATTEMPTS + 1):
        job_card_number = await generate_job_card_number(db, data.garage_id, today=today)
        last_number = job_card_number

        job_card = JobCard(
            id=str(uuid.uuid4()),
            job_card_number=job_card_number,
            status=JobCardStatus.DRAFT,
            **fields,
        )
        db.add(job_card)
        for item_data in data.checklist_items:
            db.add(build_checklist_item(job_card, item_data))

        try:
            await recalculate_job_card_totals(db, job_card)
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            if not await job_card_number_exists(db, data.garage_id, job_card_number):
                logger.exception("Error creating job card")
                raise PersistenceError("Failed to create job card", details=str(exc.orig or exc)) from exc
            logger.warning(
                "Job card number %s was taken concurrently, retrying (attempt %d/%d)",
                job_card_number, attempt, MAX_ATTEMPTS,
            )
            continue
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.exception("Error creating job card")
            raise PersistenceError("Failed to create job card", details=str(getattr(exc, "orig", None) or exc)) from exc

        await db.refresh(job_card)
        logger.info("Job card %s created for garage %s", job_card.job_card_number, job_card.garage_id)
        return job_card

    raise JobCardNumberExhaustedError(
        f"Failed to generate unique job card number after {MAX_ATTEMPTS} attempts",
        details=f"Last candidate {last_number} was already taken",
    )


async def list_job_cards(db: AsyncSession, garage_id: str, filters: Optional[JobCardFilters] = None) -> list[JobCard]:
    """Live job cards for a garage, newest first."""
    filters = filters or JobCardFilters()
    query = select(JobCard).where(JobCard.garage_id == garage_id, JobCard.deleted_at.is_(None))

    if filters.status:
        query = query.where(JobCard.status == filters.status)
    if filters.mechanic_id:
        query = query.where(JobCard.lead_mechanic_id == filters.mechanic_id)
    if filters.customer_id:
        query = query.where(JobCard.customer_id == filters.customer_id)
    if filters.date_from:
        query = query.where(JobCard.created_at >= filters.date_from)
    if filters.date_to:
        query = query.where(JobCard.created_at <= filters.date_to)
    if filters.search:
        pattern = f"%{filters.search}%"
        query = query.where(
            or_(
                JobCard.job_card_number.ilike(pattern),
                JobCard.customer_complaint.ilike(pattern),
                JobCard.work_requested.ilike(pattern),
            )
        )

    result = await db.execute(query.order_by(JobCard.created_at.desc()))
    return list(result.scalars().all())


async def get_job_card_detail(db: AsyncSession, job_card_id: str) -> tuple[JobCard, list[ChecklistItem], list[JobCardPart]]:
    """A job card with its live checklist items and part lines."""
    job_card = await get_job_card_or_404(db, job_card_id)

    items = (
        await db.execute(
            select(ChecklistItem)
            .where(ChecklistItem.job_card_id == job_card_id, ChecklistItem.deleted_at.is_(None))
            .order_by(ChecklistItem.display_order, ChecklistItem.created_at)
        )
    ).scalars().all()

    parts = (
        await db.execute(
            select(JobCardPart)
            .where(JobCardPart.job_card_id == job_card_id, JobCardPart.deleted_at.is_(None))
            .order_by(JobCardPart.created_at.desc())
        )
    ).scalars().all()

    return job_card, list(items), list(parts)


async def update_job_card(db: AsyncSession, job_card_id: str, patch: JobCardUpdate) -> JobCard:
    """Apply a partial update. Fields absent from the request are untouched."""
    job_card = await get_job_card_or_404(db, job_card_id)
    changes = patch.changes()

    customer_id = changes.get("customer_id", job_card.customer_id)
    vehicle_id = changes.get("vehicle_id", job_card.vehicle_id)
    if "customer_id" in changes or "vehicle_id" in changes:
        await ensure_customer_and_vehicle(db, job_card.garage_id, customer_id, vehicle_id)
    if changes.get("lead_mechanic_id"):
        await ensure_employee(db, job_card.garage_id, changes["lead_mechanic_id"])

    for field, value in changes.items():
        setattr(job_card, field, value)

    await commit_or_raise(db, "Failed to update job card")
    await db.refresh(job_card)
    return job_card


async def update_job_card_status(
    db: AsyncSession,
    job_card_id: str,
    status: JobCardStatus,
    user_id: Optional[str],
    reason: Optional[str] = None,
) -> tuple[JobCard, JobCardStatus]:
    """
    Change a job card's status and record who did it.

    The history row and the new status are committed together; if either
    write fails neither is kept. Costs and progress are not touched.

    Returns the updated job card and its previous status.
    """
    if not user_id or not user_id.strip():
        raise ValidationError("Validation failed", details=[{"field": "userId", "message": "User ID is required"}])

    job_card = await get_job_card_or_404(db, job_card_id)
    previous_status = job_card.status
    now = utcnow()

    db.add(
        JobCardStatusHistory(
            job_card_id=job_card.id,
            old_status=previous_status,
            new_status=status,
            changed_by=user_id,
            change_reason=reason or None,
            changed_at=now,
        )
    )
    job_card.status = status
    job_card.updated_at = now

    timestamp_field = STATUS_TIMESTAMPS.get(status)
    if timestamp_field == "actual_start_date" and job_card.actual_start_date is None:
        job_card.actual_start_date = now
    elif timestamp_field == "actual_completion_date":
        job_card.actual_completion_date = now

    await commit_or_raise(db, "Failed to update status")
    await db.refresh(job_card)

    logger.info(
        "Job card %s status updated: %s -> %s by %s",
        job_card.job_card_number, previous_status.value, status.value, user_id,
    )
    return job_card, previous_status


async def get_status_history(db: AsyncSession, job_card_id: str) -> list[JobCardStatusHistory]:
    """Status changes of a job card, oldest first."""
    await get_job_card_or_404(db, job_card_id)
    result = await db.execute(
        select(JobCardStatusHistory)
        .where(JobCardStatusHistory.job_card_id == job_card_id)
        .order_by(JobCardStatusHistory.changed_at)
    )
    return list(result.scalars().all())


async def delete_job_card(db: AsyncSession, job_card_id: str):
    """Soft delete: the row stays, stamped with ``deleted_at``."""
    job_card = await get_job_card_or_404(db, job_card_id)
    job_card.deleted_at = utcnow()
    await commit_or_raise(db, "Failed to delete job card")
    logger.info("Job card %s deleted", job_card.job_card_number)
