import unittest
from datetime import datetime

from app.analytics import (
    active_window,
    category_breakdown,
    daily_completion,
    dynamic_goal,
    goal_pacing,
    is_day_complete,
    monthly_progress,
)
from app.analytics.goals import percent
from app.schemas import Frequency

from tests.fakes import make_habit, make_logs

MARCH = "2024-03-01"


class PercentTests(unittest.TestCase):
    def test_rounds_half_up(self):
        self.assertEqual(percent(1, 2), 50)
        self.assertEqual(percent(1, 3), 33)
        self.assertEqual(percent(2, 3), 67)
        self.assertEqual(percent(1, 8), 13)

    def test_zero_whole(self):
        self.assertEqual(percent(5, 0), 0)


class DynamicGoalTests(unittest.TestCase):
    def test_created_mid_month_is_prorated_up(self):
        habit = make_habit(month_goal=20, created_at=datetime(2024, 3, 10, 9, 0))
        self.assertEqual(active_window(habit, MARCH), (10, 31))
        self.assertEqual(dynamic_goal(habit, MARCH), 15)

    def test_created_on_last_day_gets_at_least_one(self):
        habit = make_habit(month_goal=30, created_at=datetime(2024, 4, 30, 23, 0))
        self.assertEqual(dynamic_goal(habit, "2024-04-01"), 1)

    def test_whole_month_keeps_goal(self):
        habit = make_habit(month_goal=20)
        self.assertEqual(dynamic_goal(habit, MARCH), 20)

    def test_archived_mid_month(self):
        habit = make_habit(month_goal=20, archived_at=datetime(2024, 3, 15))
        self.assertEqual(active_window(habit, MARCH), (1, 15))
        self.assertEqual(dynamic_goal(habit, MARCH), 10)

    def test_inactive_month(self):
        future = make_habit(month_goal=20, created_at=datetime(2024, 4, 2))
        gone = make_habit(month_goal=20, archived_at=datetime(2024, 2, 20))
        self.assertEqual(dynamic_goal(future, MARCH), 0)
        self.assertEqual(dynamic_goal(gone, MARCH), 0)

    def test_zero_goal(self):
        self.assertEqual(dynamic_goal(make_habit(month_goal=0), MARCH), 0)


class GoalPacingTests(unittest.TestCase):
    def setUp(self):
        self.habit = make_habit(month_goal=31)

    def pace(self, completed, day=10):
        return goal_pacing(self.habit, completed, day, MARCH)

    def test_expected_is_linear(self):
        self.assertEqual(self.pace(0).expected, 10)

    def test_statuses(self):
        self.assertEqual((self.pace(31).status, self.pace(31).message), ("ahead", "Goal Met"))
        self.assertEqual(self.pace(12).message, "Ahead of pace")
        self.assertEqual(self.pace(11).message, "On track")
        self.assertEqual(self.pace(10).status, "on_track")
        self.assertEqual(self.pace(9).message, "Slightly behind")
        self.assertEqual(self.pace(5).message, "Slightly behind")
        self.assertEqual(self.pace(4).message, "Far behind")
        self.assertEqual(self.pace(4).status, "behind")

    def test_no_goal(self):
        pacing = goal_pacing(make_habit(month_goal=0), 0, 10, MARCH)
        self.assertEqual((pacing.status, pacing.message), ("on_track", "No goal this month"))


class ProgressTests(unittest.TestCase):
    def test_monthly_progress_counts_only_the_month(self):
        habit = make_habit(month_goal=10)
        logs = make_logs("h1", "2024-02-29", "2024-03-01", "2024-03-31")
        progress = monthly_progress(habit, logs, MARCH)
        self.assertEqual((progress.completed, progress.goal, progress.percentage), (2, 10, 20))

    def test_category_breakdown(self):
        walk = make_habit("walk", category="Health & Fitness", month_goal=10)
        swim = make_habit("swim", category="Health & Fitness", month_goal=20)
        save = make_habit("save", category="Finance", month_goal=4)
        logs = make_logs("walk", "2024-03-01", "2024-03-02") + make_logs("swim", "2024-03-03") + make_logs(
            "save", "2024-03-01", "2024-03-02", "2024-03-03", "2024-03-04", "2024-03-05"
        )

        result = {item.category: item for item in category_breakdown([walk, swim, save], logs, MARCH)}
        health = result["Health & Fitness"]
        self.assertEqual((health.goal, health.progress, health.remaining, health.percentage), (30, 3, 27, 10))
        self.assertEqual(result["Finance"].remaining, 0)

    def test_quantity_needs_target_for_completion(self):
        habit = make_habit(target_value=8)
        partial, full = make_logs("h1", "2024-03-10", value=2)[0], make_logs("h1", "2024-03-10", value=8)[0]
        self.assertFalse(is_day_complete(habit, partial))
        self.assertTrue(is_day_complete(habit, full))
        self.assertFalse(is_day_complete(habit, None))

    def test_daily_completion(self):
        daily = make_habit("daily")
        workdays = make_habit("workdays", frequency=Frequency(kind="weekdays"))
        weekends = make_habit("weekends", frequency=Frequency(kind="weekends"))
        water = make_habit("water", target_value=8)
        logs = make_logs("daily", "2024-03-11") + make_logs("water", "2024-03-11", value=2)

        self.assertEqual(daily_completion([daily, workdays, weekends, water], logs, "2024-03-11"), (1, 3))


if __name__ == "__main__":
    unittest.main()
