import unittest
from unittest.mock import AsyncMock, patch

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tests.helpers import ApiTestCase


class TestChecklistApi(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.job_card = self.create_job_card()
        self.checklist_url = f"{self.api}/job-cards/{self.job_card['id']}/checklist"

    def job_card_counters(self):
        job_card = self.client.get(f"{self.api}/job-cards/{self.job_card['id']}").json()["jobCard"]
        return (
            job_card["totalChecklistItems"],
            job_card["completedChecklistItems"],
            job_card["progressPercentage"],
        )

    def test_create_defaults(self):
        item = self.create_checklist_item(self.job_card["id"])

        self.assertEqual(item["status"], "pending")
        self.assertEqual(item["priority"], "medium")
        self.assertEqual(item["estimatedMinutes"], 0)
        self.assertEqual(item["laborRate"], 0)
        self.assertEqual(item["displayOrder"], 0)
        self.assertEqual(item["subtasks"], [])
        self.assertEqual(self.job_card_counters(), (1, 0, 0))

    def test_create_requires_item_name(self):
        response = self.client.post(self.checklist_url, json={"itemName": "   "})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["details"][0]["field"], "itemName")
        self.assertEqual(self.job_card_counters(), (0, 0, 0))

    def test_create_on_unknown_job_card(self):
        response = self.client.post(f"{self.api}/job-cards/missing/checklist", json={"itemName": "Wash"})
        self.assertEqual(response.status_code, 404)

    def test_partial_update(self):
        item = self.create_checklist_item(self.job_card["id"], description="Front and rear", estimatedMinutes=20)

        response = self.client.patch(f"{self.checklist_url}/{item['id']}", json={"status": "completed"})
        self.assertEqual(response.status_code, 200)
        updated = response.json()["checklistItem"]
        self.assertEqual(updated["status"], "completed")
        self.assertEqual(updated["description"], "Front and rear")
        self.assertEqual(updated["estimatedMinutes"], 20)
        self.assertIsNotNone(updated["completedAt"])
        self.assertEqual(self.job_card_counters(), (1, 1, 100))

    def test_update_rejects_negative_minutes(self):
        item = self.create_checklist_item(self.job_card["id"])
        response = self.client.patch(f"{self.checklist_url}/{item['id']}", json={"estimatedMinutes": -5})
        self.assertEqual(response.status_code, 400)

    def test_reopening_clears_completed_at(self):
        item = self.create_checklist_item(self.job_card["id"], status="in-progress")
        self.client.patch(f"{self.checklist_url}/{item['id']}", json={"status": "completed"})

        response = self.client.patch(f"{self.checklist_url}/{item['id']}", json={"status": "in-progress"})
        reopened = response.json()["checklistItem"]
        self.assertIsNone(reopened["completedAt"])
        self.assertIsNotNone(reopened["startedAt"])
        self.assertEqual(self.job_card_counters(), (1, 0, 0))

    def test_mechanic_must_exist(self):
        response = self.client.post(self.checklist_url, json={"itemName": "Wash", "mechanicId": "nobody"})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "Employee not found")
        self.assertEqual(self.job_card_counters(), (0, 0, 0))

        item = self.create_checklist_item(self.job_card["id"])
        response = self.client.patch(f"{self.checklist_url}/{item['id']}", json={"mechanicId": "nobody"})
        self.assertEqual(response.status_code, 404)

    def test_assign_mechanic(self):
        mechanic = self.create_employee("mech.ray")
        item = self.create_checklist_item(self.job_card["id"], mechanicId=mechanic["id"])
        self.assertEqual(item["mechanicId"], mechanic["id"])

        response = self.client.patch(f"{self.checklist_url}/{item['id']}", json={"mechanicId": None})
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()["checklistItem"]["mechanicId"])

    def test_list_and_delete(self):
        first = self.create_checklist_item(self.job_card["id"], itemName="Oil")
        self.create_checklist_item(self.job_card["id"], itemName="Filter")

        response = self.client.delete(f"{self.checklist_url}/{first['id']}")
        self.assertEqual(response.status_code, 200)

        body = self.client.get(self.checklist_url).json()
        self.assertEqual(body["count"], 1)
        self.assertEqual(body["checklistItems"][0]["itemName"], "Filter")
        self.assertEqual(self.job_card_counters(), (1, 0, 0))
        self.assertEqual(self.client.get(f"{self.checklist_url}/{first['id']}").status_code, 404)


class TestSubtaskApi(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.job_card = self.create_job_card()
        self.item = self.create_checklist_item(self.job_card["id"])
        self.item_url = f"{self.api}/job-cards/{self.job_card['id']}/checklist/{self.item['id']}"

    def subtasks(self):
        return self.client.get(self.item_url).json()["checklistItem"]["subtasks"]

    def add_subtask(self, **payload):
        return self.client.post(f"{self.item_url}/subtasks", json=payload)

    def test_add_subtasks(self):
        for name in ("Remove wheel", "Swap pads", "Torque caliper bolts"):
            response = self.add_subtask(name=name)
            self.assertEqual(response.status_code, 201)
            subtask = response.json()["subtask"]
            self.assertFalse(subtask["completed"])
            self.assertEqual(subtask["estimatedMinutes"], 0)
            self.assertEqual(subtask["displayOrder"], 0)

        subtasks = self.subtasks()
        self.assertEqual(len(subtasks), 3)
        self.assertEqual(len({subtask["id"] for subtask in subtasks}), 3)
        self.assertEqual([subtask["name"] for subtask in subtasks], ["Remove wheel", "Swap pads", "Torque caliper bolts"])

    def test_empty_name_leaves_list_unchanged(self):
        self.add_subtask(name="Remove wheel")

        response = self.add_subtask(name="")
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["error"], "Validation failed")
        self.assertEqual(body["details"][0]["field"], "name")

        self.assertEqual([subtask["name"] for subtask in self.subtasks()], ["Remove wheel"])

    def test_rejects_negative_or_fractional_minutes(self):
        self.assertEqual(self.add_subtask(name="Bleed", estimatedMinutes=-1).status_code, 400)
        self.assertEqual(self.add_subtask(name="Bleed", estimatedMinutes=1.5).status_code, 400)
        self.assertEqual(self.subtasks(), [])

    def test_add_to_unknown_item(self):
        response = self.client.post(
            f"{self.api}/job-cards/{self.job_card['id']}/checklist/missing/subtasks",
            json={"name": "Remove wheel"},
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "Checklist item not found")

    def test_toggle_update_and_delete(self):
        subtask = self.add_subtask(name="Remove wheel").json()["subtask"]
        subtask_url = f"{self.item_url}/subtasks/{subtask['id']}"

        toggled = self.client.post(f"{subtask_url}/toggle").json()["subtask"]
        self.assertTrue(toggled["completed"])
        toggled = self.client.post(f"{subtask_url}/toggle").json()["subtask"]
        self.assertFalse(toggled["completed"])

        response = self.client.patch(subtask_url, json={"name": "Remove front wheel", "estimatedMinutes": 10})
        self.assertEqual(response.status_code, 200)
        updated = response.json()["subtask"]
        self.assertEqual(updated["name"], "Remove front wheel")
        self.assertEqual(updated["estimatedMinutes"], 10)
        self.assertFalse(updated["completed"])

        self.assertEqual(self.client.delete(subtask_url).status_code, 200)
        self.assertEqual(self.subtasks(), [])
        self.assertEqual(self.client.delete(subtask_url).status_code, 404)

    def test_failed_save_returns_error_envelope(self):
        self.add_subtask(name="Remove wheel")

        with patch.object(AsyncSession, "commit", AsyncMock(side_effect=SQLAlchemyError("connection lost"))):
            response = self.add_subtask(name="Swap pads")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Failed to add subtask", "details": "connection lost"})
        self.assertEqual([subtask["name"] for subtask in self.subtasks()], ["Remove wheel"])

    def test_toggle_unknown_subtask(self):
        response = self.client.post(f"{self.item_url}/subtasks/missing/toggle")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "Subtask not found")


class TestTimerApi(ApiTestCase):

    def test_timer_round_trip(self):
        job_card = self.create_job_card()
        item = self.create_checklist_item(job_card["id"])
        item_url = f"{self.api}/job-cards/{job_card['id']}/checklist/{item['id']}"

        self.assertEqual(self.client.post(f"{item_url}/timer/stop").status_code, 404)

        response = self.client.post(f"{item_url}/timer/start", json={"mechanicId": "mechanic-1"})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["checklistItem"]["isTimerRunning"])

        response = self.client.post(f"{item_url}/timer/stop")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertFalse(body["checklistItem"]["isTimerRunning"])
        self.assertIsNotNone(body["timeEntry"]["stoppedAt"])

        entries = self.client.get(f"{item_url}/time-entries").json()
        self.assertEqual(entries["count"], 1)
        self.assertEqual(entries["timeEntries"][0]["mechanicId"], "mechanic-1")


if __name__ == "__main__":
    unittest.main()
