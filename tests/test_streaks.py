import unittest
from datetime import date

from app.analytics import best_streak, longest_streak, streak
from app.dates import MONDAY
from app.schemas import Frequency

from tests.fakes import make_habit, make_logs

TODAY = date(2024, 3, 10)


class DailyStreakTests(unittest.TestCase):
    def test_run_ending_today(self):
        habit = make_habit()
        logs = make_logs("h1", "2024-03-08", "2024-03-09", "2024-03-10")
        self.assertEqual(streak(habit, logs, TODAY), 3)

    def test_grace_day_counts_yesterday_only(self):
        habit = make_habit()
        logs = make_logs("h1", "2024-03-09", "2024-03-07")
        self.assertEqual(streak(habit, logs, TODAY), 1)

    def test_two_missed_days_break_the_streak(self):
        habit = make_habit()
        logs = make_logs("h1", "2024-03-07", "2024-03-08")
        self.assertEqual(streak(habit, logs, TODAY), 0)

    def test_skip_dates_fill_gaps(self):
        habit = make_habit(skip_dates=["2024-03-08"])
        logs = make_logs("h1", "2024-03-07", "2024-03-09")
        self.assertEqual(streak(habit, logs, TODAY), 3)

    def test_skip_date_never_lowers_the_streak(self):
        logs = make_logs("h1", "2024-03-06", "2024-03-07", "2024-03-09", "2024-03-10")
        before = streak(make_habit(), logs, TODAY)
        after = streak(make_habit(skip_dates=["2024-03-08"]), logs, TODAY)

        self.assertEqual((before, after), (2, 5))
        self.assertGreaterEqual(after, before)

    def test_other_habits_logs_are_ignored(self):
        habit = make_habit()
        logs = make_logs("h2", "2024-03-09", "2024-03-10")
        self.assertEqual(streak(habit, logs, TODAY), 0)

    def test_repeated_calls_agree(self):
        habit = make_habit()
        logs = make_logs("h1", "2024-03-09", "2024-03-10")
        self.assertEqual(streak(habit, logs, TODAY), streak(habit, logs, TODAY))

    def test_partial_quantity_still_counts(self):
        habit = make_habit(target_value=8, unit="glasses")
        logs = make_logs("h1", "2024-03-09", "2024-03-10", value=2)
        self.assertEqual(streak(habit, logs, TODAY), 2)


class WeeklyStreakTests(unittest.TestCase):
    def setUp(self):
        self.habit = make_habit(type="weekly", frequency=Frequency(kind="weekly", times_per_week=2))
        self.today = date(2024, 3, 13)

    def test_open_week_does_not_reset(self):
        logs = make_logs("h1", "2024-03-05", "2024-02-27", "2024-02-20")
        self.assertEqual(streak(self.habit, logs, self.today), 3)

    def test_current_week_adds_one(self):
        logs = make_logs("h1", "2024-03-12", "2024-03-05", "2024-02-27", "2024-02-20")
        self.assertEqual(streak(self.habit, logs, self.today), 4)

    def test_missing_week_stops_the_walk(self):
        logs = make_logs("h1", "2024-03-05", "2024-02-20")
        self.assertEqual(streak(self.habit, logs, self.today), 1)

    def test_week_start_moves_the_boundary(self):
        # Sunday 2024-03-10 opens the current week, or closes the previous Monday-based one
        logs = make_logs("h1", "2024-03-10")
        self.assertEqual(streak(self.habit, logs, self.today, first_weekday=MONDAY), 1)
        self.assertEqual(streak(self.habit, logs, self.today), 1)

    def test_weekly_frequency_alone_selects_weekly_cadence(self):
        habit = make_habit(frequency=Frequency(kind="weekly", times_per_week=1))
        self.assertEqual(habit.streak_cadence, "weekly")


class LongestStreakTests(unittest.TestCase):
    def test_longest_run_in_history(self):
        habit = make_habit()
        logs = make_logs("h1", "2024-03-01", "2024-03-02", "2024-03-03", "2024-03-05", "2024-03-06")
        self.assertEqual(longest_streak(habit, logs), 3)

    def test_best_streak_picks_the_top_habit(self):
        reading = make_habit("reading")
        running = make_habit("running")
        logs = make_logs("reading", "2024-03-01", "2024-03-02") + make_logs(
            "running", "2024-03-01", "2024-03-02", "2024-03-03"
        )
        best = best_streak([reading, running], logs)
        self.assertEqual(best[0].id, "running")
        self.assertEqual(best[1], 3)

    def test_best_streak_without_logs(self):
        self.assertIsNone(best_streak([make_habit()], []))


if __name__ == "__main__":
    unittest.main()
