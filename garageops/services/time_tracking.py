"""
Timers on checklist items.

Each start/stop pair becomes one ``TimeEntry``. Stopping a timer folds the
interval into the item's ``total_time_spent`` and re-derives
``actual_minutes`` from it.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from garageops.database import commit_or_raise, utcnow
from garageops.exceptions import NotFoundError
from garageops.models import ChecklistItem, JobCard, TimeEntry
from garageops.services.checklist import get_checklist_item_or_404
from garageops.services.progress import calculate_item_labor_cost, recalculate_job_card_totals

logger = logging.getLogger(__name__)


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def _open_entry(db: AsyncSession, checklist_item_id: str) -> Optional[TimeEntry]:
    result = await db.execute(
        select(TimeEntry)
        .where(TimeEntry.checklist_item_id == checklist_item_id, TimeEntry.stopped_at.is_(None))
        .order_by(TimeEntry.started_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _close_entry(db: AsyncSession, item: ChecklistItem, entry: TimeEntry) -> TimeEntry:
    now = utcnow()
    duration = max(0, int((now - _aware(entry.started_at)).total_seconds()))

    entry.stopped_at = now
    entry.duration_seconds = duration

    item.total_time_spent = (item.total_time_spent or 0) + duration
    item.actual_minutes = item.total_time_spent // 60
    item.is_timer_running = False
    item.timer_started_at = None
    item.labor_cost = calculate_item_labor_cost(item)

    job_card = await db.get(JobCard, item.job_card_id)
    await recalculate_job_card_totals(db, job_card)
    return entry


async def start_timer(
    db: AsyncSession, job_card_id: str, checklist_item_id: str, mechanic_id: str, notes: Optional[str] = None
) -> tuple[TimeEntry, ChecklistItem]:
    """
    Start timing work on a checklist item.

    A timer that is already running on the item is stopped first, so an item
    never has more than one open entry.
    """
    item = await get_checklist_item_or_404(db, job_card_id, checklist_item_id)

    running = await _open_entry(db, item.id)
    if running is not None:
        await _close_entry(db, item, running)

    now = utcnow()
    entry = TimeEntry(checklist_item_id=item.id, mechanic_id=mechanic_id, started_at=now, notes=notes)
    db.add(entry)

    item.is_timer_running = True
    item.timer_started_at = now

    await commit_or_raise(db, "Failed to start timer")
    await db.refresh(entry)
    await db.refresh(item)
    logger.info("Timer started on checklist item %s by %s", item.id, mechanic_id)
    return entry, item


async def stop_timer(db: AsyncSession, job_card_id: str, checklist_item_id: str) -> tuple[TimeEntry, ChecklistItem]:
    """Stop the running timer and accumulate its duration."""
    item = await get_checklist_item_or_404(db, job_card_id, checklist_item_id)

    entry = await _open_entry(db, item.id)
    if entry is None:
        raise NotFoundError("No running timer for this checklist item")

    await _close_entry(db, item, entry)

    await commit_or_raise(db, "Failed to stop timer")
    await db.refresh(entry)
    await db.refresh(item)
    logger.info("Timer stopped on checklist item %s after %ss", item.id, entry.duration_seconds)
    return entry, item


async def list_time_entries(db: AsyncSession, job_card_id: str, checklist_item_id: str) -> list[TimeEntry]:
    await get_checklist_item_or_404(db, job_card_id, checklist_item_id)
    result = await db.execute(
        select(TimeEntry)
        .where(TimeEntry.checklist_item_id == checklist_item_id)
        .order_by(TimeEntry.started_at)
    )
    return list(result.scalars().all())
