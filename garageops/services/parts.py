"""
Part lines allocated to job cards.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from garageops.database import commit_or_raise, utcnow
from garageops.exceptions import NotFoundError
from garageops.models import InventoryPart, JobCardPart
from garageops.schemas.part import JobCardPartCreate, JobCardPartUpdate
from garageops.services.job_cards import get_job_card_or_404
from garageops.services.progress import calculate_part_total, recalculate_job_card_totals

logger = logging.getLogger(__name__)


async def get_part_or_404(db: AsyncSession, job_card_id: str, part_line_id: str) -> JobCardPart:
    result = await db.execute(
        select(JobCardPart).where(
            JobCardPart.id == part_line_id,
            JobCardPart.job_card_id == job_card_id,
            JobCardPart.deleted_at.is_(None),
        )
    )
    part = result.scalar_one_or_none()
    if part is None:
        raise NotFoundError("Part line not found")
    return part


async def list_parts(db: AsyncSession, job_card_id: str) -> list[JobCardPart]:
    await get_job_card_or_404(db, job_card_id)
    result = await db.execute(
        select(JobCardPart)
        .where(JobCardPart.job_card_id == job_card_id, JobCardPart.deleted_at.is_(None))
        .order_by(JobCardPart.created_at.desc())
    )
    return list(result.scalars().all())


async def get_inventory_part(db: AsyncSession, garage_id: str, part_id: str) -> InventoryPart:
    result = await db.execute(
        select(InventoryPart).where(InventoryPart.id == part_id, InventoryPart.garage_id == garage_id)
    )
    inventory_part = result.scalar_one_or_none()
    if inventory_part is None:
        raise NotFoundError("Part not found")
    return inventory_part


async def add_part(db: AsyncSession, job_card_id: str, data: JobCardPartCreate) -> JobCardPart:
    """
    Allocate a part to a job card and re-cost the card.

    A line that names an inventory ``partId`` must point at one of the
    garage's parts. Number, make and selling price fill in from the
    inventory when the request leaves them out.
    """
    job_card = await get_job_card_or_404(db, job_card_id)

    fields = data.model_dump()
    if data.part_id:
        inventory_part = await get_inventory_part(db, job_card.garage_id, data.part_id)
        fields["part_number"] = data.part_number or inventory_part.part_number
        fields["manufacturer"] = data.manufacturer or inventory_part.make
        if "unit_price" not in data.model_fields_set:
            fields["unit_price"] = inventory_part.selling_price

    part = JobCardPart(job_card_id=job_card.id, **fields)
    part.total_price = calculate_part_total(part)
    db.add(part)
    await recalculate_job_card_totals(db, job_card)

    await commit_or_raise(db, "Failed to add part")
    await db.refresh(part)
    logger.info("Part %s added to job card %s", part.part_name, job_card.job_card_number)
    return part


async def update_part(
    db: AsyncSession, job_card_id: str, part_line_id: str, patch: JobCardPartUpdate
) -> JobCardPart:
    job_card = await get_job_card_or_404(db, job_card_id)
    part = await get_part_or_404(db, job_card_id, part_line_id)

    for field, value in patch.changes().items():
        setattr(part, field, value)
    part.total_price = calculate_part_total(part)
    await recalculate_job_card_totals(db, job_card)

    await commit_or_raise(db, "Failed to update part")
    await db.refresh(part)
    return part


async def delete_part(db: AsyncSession, job_card_id: str, part_line_id: str):
    """Soft delete a part line; it stops counting toward the parts cost."""
    job_card = await get_job_card_or_404(db, job_card_id)
    part = await get_part_or_404(db, job_card_id, part_line_id)

    part.deleted_at = utcnow()
    await recalculate_job_card_totals(db, job_card)
    await commit_or_raise(db, "Failed to delete part")
    logger.info("Part line %s removed from job card %s", part_line_id, job_card.job_card_number)
