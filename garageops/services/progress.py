"""
Derived job card aggregates.

Counters and costs on a job card are denormalized copies of what its checklist
items and part lines say. They are always recounted from the rows, never
patched incrementally, so a missed update cannot drift them permanently.
"""
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from garageops.models import ChecklistItem, ChecklistItemStatus, JobCard, JobCardPart, PartStatus

CENTS = Decimal("0.01")

# Part lines in these states no longer cost the customer anything
INACTIVE_PART_STATUSES = (PartStatus.RETURNED, PartStatus.CANCELLED)


def calculate_progress(completed: int, total: int) -> int:
    """
    Percentage of completed checklist items, rounded half up.

    >>> calculate_progress(3, 4)
    75
    >>> calculate_progress(0, 0)
    0
    """
    if total < 0 or completed < 0 or completed > total:
        raise ValueError(f"invalid checklist counters: completed={completed}, total={total}")
    if total == 0:
        return 0
    # Integer form of round(completed / total * 100) with halves rounded up
    return (completed * 200 + total) // (total * 2)


def billable_minutes(item: ChecklistItem) -> int:
    """Actual minutes once work has been logged, the estimate before that."""
    actual = item.actual_minutes or 0
    return actual if actual > 0 else (item.estimated_minutes or 0)


def calculate_item_labor_cost(item: ChecklistItem) -> Decimal:
    """Labor cost of one checklist item at its hourly rate."""
    rate = Decimal(item.labor_rate or 0)
    return (Decimal(billable_minutes(item)) * rate / Decimal(60)).quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_part_total(part: JobCardPart) -> Decimal:
    """Line total: used quantity once known, allocated quantity before that."""
    quantity = part.quantity_used if part.quantity_used else part.quantity_allocated
    return (Decimal(part.unit_price or 0) * Decimal(quantity or 0)).quantize(CENTS, rounding=ROUND_HALF_UP)


async def recalculate_job_card_totals(db: AsyncSession, job_card: JobCard) -> JobCard:
    """
    Recount checklist and part aggregates for a job card.

    Pending changes in the session are flushed first so the counts include
    them. The caller commits.
    """
    await db.flush()

    items = (
        await db.execute(
            select(ChecklistItem).where(
                ChecklistItem.job_card_id == job_card.id,
                ChecklistItem.deleted_at.is_(None),
            )
        )
    ).scalars().all()

    total = len(items)
    completed = sum(1 for item in items if item.status == ChecklistItemStatus.COMPLETED)
    labor_cost = sum((Decimal(item.labor_cost or 0) for item in items), Decimal("0"))
    labor_minutes = sum(billable_minutes(item) for item in items)

    parts_cost = (
        await db.execute(
            select(func.coalesce(func.sum(JobCardPart.total_price), 0)).where(
                JobCardPart.job_card_id == job_card.id,
                JobCardPart.deleted_at.is_(None),
                JobCardPart.status.notin_(INACTIVE_PART_STATUSES),
            )
        )
    ).scalar_one()
    parts_cost = Decimal(parts_cost).quantize(CENTS, rounding=ROUND_HALF_UP)

    job_card.total_checklist_items = total
    job_card.completed_checklist_items = completed
    job_card.progress_percentage = calculate_progress(completed, total)
    job_card.labor_hours = (Decimal(labor_minutes) / Decimal(60)).quantize(CENTS, rounding=ROUND_HALF_UP)
    job_card.labor_cost = labor_cost.quantize(CENTS, rounding=ROUND_HALF_UP)
    job_card.parts_cost = parts_cost
    job_card.total_cost = job_card.labor_cost + parts_cost
    return job_card
