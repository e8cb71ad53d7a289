"""
Checklist items and their embedded subtasks.

Subtasks live as a JSON list on the checklist item. Every change rewrites the
whole list (read, modify, write back); there is no per-subtask row to update.
"""
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from garageops.database import commit_or_raise, utcnow
from garageops.exceptions import NotFoundError
from garageops.models import ChecklistItem, ChecklistItemStatus, JobCard
from garageops.schemas.checklist import ChecklistItemCreate, ChecklistItemUpdate, SubtaskCreate, SubtaskUpdate
from garageops.services.job_cards import build_checklist_item, ensure_employee, get_job_card_or_404
from garageops.services.progress import calculate_item_labor_cost, recalculate_job_card_totals

logger = logging.getLogger(__name__)

# SubtaskUpdate field -> key used inside the stored subtask documents
SUBTASK_KEYS = {
    "name": "name",
    "description": "description",
    "completed": "completed",
    "estimated_minutes": "estimatedMinutes",
    "display_order": "displayOrder",
}


async def get_checklist_item_or_404(db: AsyncSession, job_card_id: str, checklist_item_id: str) -> ChecklistItem:
    """Load a live checklist item that belongs to the given job card."""
    result = await db.execute(
        select(ChecklistItem)
        .join(JobCard, JobCard.id == ChecklistItem.job_card_id)
        .where(
            ChecklistItem.id == checklist_item_id,
            ChecklistItem.job_card_id == job_card_id,
            ChecklistItem.deleted_at.is_(None),
            JobCard.deleted_at.is_(None),
        )
    )
    item = result.scalar_one_or_none()
    if item is None:
        raise NotFoundError("Checklist item not found")
    return item


async def list_checklist_items(db: AsyncSession, job_card_id: str) -> list[ChecklistItem]:
    await get_job_card_or_404(db, job_card_id)
    result = await db.execute(
        select(ChecklistItem)
        .where(ChecklistItem.job_card_id == job_card_id, ChecklistItem.deleted_at.is_(None))
        .order_by(ChecklistItem.display_order, ChecklistItem.created_at)
    )
    return list(result.scalars().all())


async def _refresh_parent_totals(db: AsyncSession, job_card_id: str):
    job_card = await db.get(JobCard, job_card_id)
    if job_card is not None:
        await recalculate_job_card_totals(db, job_card)


async def create_checklist_item(db: AsyncSession, job_card_id: str, data: ChecklistItemCreate) -> ChecklistItem:
    """
    Add a checklist item to a job card.

    The parent's counters are recounted in the same transaction as the
    insert, so readers never see the item without the matching total.
    """
    job_card = await get_job_card_or_404(db, job_card_id)
    if data.mechanic_id:
        await ensure_employee(db, job_card.garage_id, data.mechanic_id)

    item = build_checklist_item(job_card, data)
    db.add(item)
    await recalculate_job_card_totals(db, job_card)

    await commit_or_raise(db, "Failed to create checklist item")
    await db.refresh(item)
    logger.info("Checklist item %s created for job card %s", item.id, job_card.job_card_number)
    return item


def apply_status_timestamps(item: ChecklistItem, status: ChecklistItemStatus):
    """Stamp or clear ``started_at``/``completed_at`` for a status change."""
    now = utcnow()
    if status == ChecklistItemStatus.PENDING:
        item.started_at = None
    elif status == ChecklistItemStatus.IN_PROGRESS and item.started_at is None:
        item.started_at = now

    if status != ChecklistItemStatus.COMPLETED:
        item.completed_at = None
    elif item.completed_at is None:
        item.completed_at = now


async def update_checklist_item(
    db: AsyncSession, job_card_id: str, checklist_item_id: str, patch: ChecklistItemUpdate
) -> ChecklistItem:
    """Partial update of a checklist item; untouched fields keep their values."""
    item = await get_checklist_item_or_404(db, job_card_id, checklist_item_id)
    changes = patch.changes()

    if changes.get("mechanic_id"):
        job_card = await get_job_card_or_404(db, job_card_id)
        await ensure_employee(db, job_card.garage_id, changes["mechanic_id"])
    if "status" in changes:
        apply_status_timestamps(item, changes["status"])

    for field, value in changes.items():
        setattr(item, field, value)

    item.labor_cost = calculate_item_labor_cost(item)
    await _refresh_parent_totals(db, job_card_id)

    await commit_or_raise(db, "Failed to update checklist item")
    await db.refresh(item)
    return item


async def delete_checklist_item(db: AsyncSession, job_card_id: str, checklist_item_id: str):
    """Soft delete a checklist item and recount the parent."""
    item = await get_checklist_item_or_404(db, job_card_id, checklist_item_id)
    item.deleted_at = utcnow()
    await _refresh_parent_totals(db, job_card_id)
    await commit_or_raise(db, "Failed to delete checklist item")


async def _save_subtasks(db: AsyncSession, item: ChecklistItem, subtasks: list[dict], message: str) -> ChecklistItem:
    # Assigning a new list is what marks the JSON column dirty
    item.subtasks = subtasks
    item.updated_at = utcnow()
    await commit_or_raise(db, message)
    await db.refresh(item)
    return item


def _find_subtask(item: ChecklistItem, subtask_id: str) -> int:
    for index, subtask in enumerate(item.subtasks or []):
        if subtask.get("id") == subtask_id:
            return index
    raise NotFoundError("Subtask not found")


async def add_subtask(
    db: AsyncSession, job_card_id: str, checklist_item_id: str, data: SubtaskCreate
) -> tuple[dict, ChecklistItem]:
    """Append a new, not yet completed subtask. Returns (subtask, item)."""
    item = await get_checklist_item_or_404(db, job_card_id, checklist_item_id)

    subtask = {
        "id": str(uuid.uuid4()),
        "name": data.name,
        "description": data.description,
        "completed": False,
        "estimatedMinutes": data.estimated_minutes,
        "displayOrder": data.display_order,
    }
    item = await _save_subtasks(db, item, [*(item.subtasks or []), subtask], "Failed to add subtask")
    logger.info("Added subtask %s to checklist item %s", subtask["id"], checklist_item_id)
    return subtask, item


async def update_subtask(
    db: AsyncSession, job_card_id: str, checklist_item_id: str, subtask_id: str, patch: SubtaskUpdate
) -> tuple[dict, ChecklistItem]:
    item = await get_checklist_item_or_404(db, job_card_id, checklist_item_id)
    index = _find_subtask(item, subtask_id)

    subtasks = [dict(subtask) for subtask in item.subtasks]
    for field, value in patch.changes().items():
        subtasks[index][SUBTASK_KEYS[field]] = value

    item = await _save_subtasks(db, item, subtasks, "Failed to update subtask")
    return subtasks[index], item


async def toggle_subtask(
    db: AsyncSession, job_card_id: str, checklist_item_id: str, subtask_id: str
) -> tuple[dict, ChecklistItem]:
    """Flip a subtask's ``completed`` flag."""
    item = await get_checklist_item_or_404(db, job_card_id, checklist_item_id)
    index = _find_subtask(item, subtask_id)

    subtasks = [dict(subtask) for subtask in item.subtasks]
    subtasks[index]["completed"] = not subtasks[index].get("completed", False)

    item = await _save_subtasks(db, item, subtasks, "Failed to update subtask")
    return subtasks[index], item


async def delete_subtask(
    db: AsyncSession, job_card_id: str, checklist_item_id: str, subtask_id: str
) -> ChecklistItem:
    item = await get_checklist_item_or_404(db, job_card_id, checklist_item_id)
    _find_subtask(item, subtask_id)

    subtasks = [subtask for subtask in item.subtasks if subtask.get("id") != subtask_id]
    item = await _save_subtasks(db, item, subtasks, "Failed to delete subtask")
    logger.info("Deleted subtask %s from checklist item %s", subtask_id, checklist_item_id)
    return item

