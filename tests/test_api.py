import unittest

from fastapi.testclient import TestClient

from api_main import app
from app.sync import ChangeFeed, CoordinatorRegistry, SqlRemoteStore

from tests.test_store import memory_session_factory


class HabitApiTests(unittest.TestCase):
    def setUp(self):
        store = SqlRemoteStore(session_factory=memory_session_factory(), feed=ChangeFeed())
        app.state.registry = CoordinatorRegistry(store=store, debounce_ms=10)
        self.addCleanup(setattr, app.state, "registry", None)

        self.client = TestClient(app)
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)

    def create_habit(self, **payload):
        body = {"name": "Read", "month_goal": 20, "created_at": "2024-03-01T08:00:00"}
        body.update(payload)
        response = self.client.post("/v1/habits/u1", json=body)
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()

    def test_health(self):
        self.assertEqual(self.client.get("/health/live").json(), {"status": "alive"})

    def test_create_and_list(self):
        first = self.create_habit()
        second = self.create_habit(name="Run", frequency={"kind": "weekdays"})

        self.assertEqual(first["priority"], 1)
        self.assertEqual(second["frequency_label"], "Weekdays")
        items = self.client.get("/v1/habits/u1").json()["items"]
        self.assertEqual([h["name"] for h in items], ["Read", "Run"])
        self.assertEqual(self.client.get("/v1/habits/u2").json()["items"], [])

    def test_validation_and_missing_habits(self):
        response = self.client.post("/v1/habits/u1", json={"name": "  "})
        self.assertEqual(response.status_code, 400)

        response = self.client.patch("/v1/habits/u1/missing", json={"name": "x"})
        self.assertEqual(response.status_code, 404)

        habit = self.create_habit()
        response = self.client.post("/v1/logs/u1/toggle", json={"habit_id": habit["id"], "date": "March 10"})
        self.assertEqual(response.status_code, 400)

    def test_toggle_round_trip(self):
        habit = self.create_habit()
        payload = {"habit_id": habit["id"], "date": "2024-03-10"}

        done = self.client.post("/v1/logs/u1/toggle", json=payload).json()
        self.assertTrue(done["completed"])
        self.assertEqual(done["log"]["date"], "2024-03-10")
        logs = self.client.get("/v1/logs/u1", params={"date": "2024-03-10"}).json()["items"]
        self.assertEqual(len(logs), 1)

        undone = self.client.post("/v1/logs/u1/toggle", json=payload).json()
        self.assertFalse(undone["completed"])
        self.assertIsNone(undone["log"])

    def test_quantity_logging(self):
        habit = self.create_habit(name="Water", target_value=8, unit="glasses")
        payload = {"habit_id": habit["id"], "date": "2024-03-11", "value": 3}

        self.client.post("/v1/logs/u1/value", json=payload)
        added = self.client.post("/v1/logs/u1/value", json=payload).json()
        self.assertEqual(added["log"]["value"], 6)

        due = self.client.get("/v1/analytics/u1/due", params={"date": "2024-03-11"}).json()
        self.assertEqual(due["items"][0]["value"], 6)
        self.assertFalse(due["items"][0]["completed"])
        self.assertEqual((due["completed"], due["scheduled"]), (0, 1))

        cleared = self.client.put("/v1/logs/u1/value", json={**payload, "value": 0}).json()
        self.assertIsNone(cleared["log"])

    def test_archive_skip_and_delete(self):
        habit = self.create_habit()
        url = f"/v1/habits/u1/{habit['id']}"

        archived = self.client.post(f"{url}/archive").json()
        self.assertIsNotNone(archived["archived_at"])
        active = self.client.get("/v1/habits/u1", params={"include_archived": False}).json()
        self.assertEqual(active["items"], [])
        self.assertIsNone(self.client.post(f"{url}/resume").json()["archived_at"])

        skipped = self.client.post(f"{url}/skip", json={"date": "2024-03-12"}).json()
        self.assertEqual(skipped, {"date": "2024-03-12", "skipped": True})

        self.assertEqual(self.client.delete(url).json(), {"ok": True})
        self.assertEqual(self.client.get("/v1/habits/u1").json()["items"], [])

    def test_goals_and_categories(self):
        habit = self.create_habit(created_at="2024-03-10T08:00:00", category="Growth")
        self.client.post("/v1/logs/u1/toggle", json={"habit_id": habit["id"], "date": "2024-03-10"})

        goals = self.client.get("/v1/analytics/u1/goals", params={"month": "2024-03", "day": 12}).json()
        [item] = goals["items"]
        self.assertEqual((item["goal"], item["completed"]), (15, 1))
        self.assertEqual(item["pacing"]["expected"], 2)
        self.assertEqual(item["pacing"]["message"], "Slightly behind")

        categories = self.client.get("/v1/analytics/u1/categories", params={"month": "2024-03"}).json()
        self.assertEqual(categories["items"][0]["category"], "Growth")
        self.assertEqual(categories["items"][0]["remaining"], 14)

        self.assertEqual(self.client.get("/v1/analytics/u1/goals", params={"month": "March"}).status_code, 400)

    def test_streaks_and_badges(self):
        habit = self.create_habit()
        self.client.post("/v1/logs/u1/toggle", json={"habit_id": habit["id"], "date": "2024-03-10"})

        streaks = self.client.get("/v1/analytics/u1/streaks").json()
        self.assertEqual(streaks["items"][0]["longest"], 1)
        self.assertEqual(streaks["best"]["habit_id"], habit["id"])

        badges = {b["id"]: b for b in self.client.get("/v1/analytics/u1/badges").json()["items"]}
        self.assertEqual(len(badges), 6)
        self.assertTrue(badges["first_step"]["earned"])
        self.assertEqual(badges["dedicated"]["progress"], 2)


if __name__ == "__main__":
    unittest.main()
