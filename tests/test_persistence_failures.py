import unittest
from unittest.mock import AsyncMock, patch

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from garageops.exceptions import PersistenceError
from garageops.models import JobCardStatus, JobType, Priority
from garageops.schemas.checklist import ChecklistItemCreate, SubtaskCreate
from garageops.schemas.job_card import JobCardCreate
from garageops.services import checklist
from garageops.services.job_cards import create_job_card, get_job_card_or_404, get_status_history, update_job_card_status

from tests.helpers import GARAGE_ID, TODAY, DatabaseTestCase


def failing_commit():
    return patch.object(AsyncSession, "commit", AsyncMock(side_effect=SQLAlchemyError("connection lost")))


class TestFailedCommits(DatabaseTestCase):

    async def asyncSetUp(self):
        await super().asyncSetUp()
        customer_id, vehicle_id = await self.seed_customer_and_vehicle()
        job_card = await create_job_card(
            self.db,
            JobCardCreate(
                garage_id=GARAGE_ID,
                customer_id=customer_id,
                vehicle_id=vehicle_id,
                job_type=JobType.REPAIR,
                priority=Priority.HIGH,
            ),
            today=TODAY,
        )
        self.job_card_id = job_card.id
        item = await checklist.create_checklist_item(
            self.db,
            self.job_card_id,
            ChecklistItemCreate(item_name="Service brakes", subtasks=[SubtaskCreate(name="Remove wheel")]),
        )
        self.item_id = item.id

    async def stored_status(self):
        async with self.session_factory() as session:
            job_card = await get_job_card_or_404(session, self.job_card_id)
            history = await get_status_history(session, self.job_card_id)
            return job_card.status, len(history)

    async def stored_subtask_names(self):
        async with self.session_factory() as session:
            item = await checklist.get_checklist_item_or_404(session, self.job_card_id, self.item_id)
            return [subtask["name"] for subtask in item.subtasks]

    async def test_status_update_keeps_nothing(self):
        with failing_commit(), self.assertLogs("garageops.database", level="ERROR"):
            with self.assertRaises(PersistenceError) as ctx:
                await update_job_card_status(self.db, self.job_card_id, JobCardStatus.QUEUED, "employee-1")

        self.assertEqual(ctx.exception.message, "Failed to update status")
        self.assertEqual(ctx.exception.details, "connection lost")
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(await self.stored_status(), (JobCardStatus.DRAFT, 0))

    async def test_status_update_succeeds_after_a_failure(self):
        with failing_commit(), self.assertLogs("garageops.database", level="ERROR"):
            with self.assertRaises(PersistenceError):
                await update_job_card_status(self.db, self.job_card_id, JobCardStatus.QUEUED, "employee-1")

        job_card, previous = await update_job_card_status(self.db, self.job_card_id, JobCardStatus.QUEUED, "employee-1")
        self.assertEqual(previous, JobCardStatus.DRAFT)
        self.assertEqual(job_card.status, JobCardStatus.QUEUED)
        self.assertEqual(await self.stored_status(), (JobCardStatus.QUEUED, 1))

    async def test_add_subtask_keeps_list(self):
        with failing_commit(), self.assertLogs("garageops.database", level="ERROR"):
            with self.assertRaises(PersistenceError) as ctx:
                await checklist.add_subtask(self.db, self.job_card_id, self.item_id, SubtaskCreate(name="Swap pads"))

        self.assertEqual(ctx.exception.message, "Failed to add subtask")
        self.assertEqual(ctx.exception.details, "connection lost")
        self.assertEqual(await self.stored_subtask_names(), ["Remove wheel"])


if __name__ == "__main__":
    unittest.main()
