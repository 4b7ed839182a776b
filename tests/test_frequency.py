import unittest
from datetime import date, datetime

from app.analytics import frequency
from app.dates import MONDAY, weekday_index, week_start
from app.schemas import Frequency

from tests.fakes import make_habit


class WeekdayIndexTests(unittest.TestCase):
    def test_sunday_is_zero(self):
        self.assertEqual(weekday_index(date(2024, 3, 10)), 0)
        self.assertEqual(weekday_index(date(2024, 3, 16)), 6)

    def test_week_start_follows_first_weekday(self):
        wednesday = date(2024, 3, 13)
        self.assertEqual(week_start(wednesday), date(2024, 3, 10))
        self.assertEqual(week_start(wednesday, MONDAY), date(2024, 3, 11))


class IsDueTests(unittest.TestCase):
    def test_daily_is_due_every_day(self):
        habit = make_habit()
        for day in ("2024-03-10", "2024-03-11", "2024-03-16"):
            self.assertTrue(frequency.is_due(habit, day))

    def test_weekdays_and_weekends(self):
        weekdays = make_habit(frequency=Frequency(kind="weekdays"))
        weekends = make_habit(frequency=Frequency(kind="weekends"))

        self.assertTrue(frequency.is_due(weekdays, date(2024, 3, 11)))
        self.assertFalse(frequency.is_due(weekdays, date(2024, 3, 10)))
        self.assertTrue(frequency.is_due(weekends, date(2024, 3, 9)))
        self.assertFalse(frequency.is_due(weekends, date(2024, 3, 13)))

    def test_custom_days_use_sunday_based_indices(self):
        habit = make_habit(frequency=Frequency(kind="custom", custom_days=[3, 1, 3]))
        self.assertEqual(habit.frequency.custom_days, [1, 3])
        self.assertTrue(frequency.is_due(habit, "2024-03-13"))
        self.assertFalse(frequency.is_due(habit, "2024-03-12"))

    def test_weekly_quota_is_always_due(self):
        habit = make_habit(frequency=Frequency(kind="weekly", times_per_week=3))
        self.assertTrue(all(frequency.is_due(habit, d) for d in ("2024-03-10", "2024-03-12", "2024-03-16")))

    def test_not_due_before_creation(self):
        habit = make_habit(created_at=datetime(2024, 3, 10, 21, 30))
        self.assertFalse(frequency.is_due(habit, "2024-03-09"))
        self.assertTrue(frequency.is_due(habit, "2024-03-10"))

    def test_off_day_is_the_inverse_of_due(self):
        habit = make_habit(frequency=Frequency(kind="weekdays"))
        self.assertTrue(frequency.is_off_day(habit, "2024-03-10"))
        self.assertFalse(frequency.is_off_day(habit, "2024-03-11"))
        self.assertTrue(frequency.is_off_day(make_habit(created_at=datetime(2024, 4, 1)), "2024-03-11"))

    def test_archive_state_is_ignored(self):
        habit = make_habit(archived_at=datetime(2024, 2, 1))
        self.assertTrue(frequency.is_due(habit, "2024-03-10"))


class ScheduledDaysTests(unittest.TestCase):
    def test_weekdays_in_a_past_month(self):
        habit = make_habit(frequency=Frequency(kind="weekdays"))
        self.assertEqual(frequency.scheduled_days_in_month(habit, "2024-03-01", today=date(2024, 5, 1)), 21)

    def test_current_month_stops_at_today(self):
        habit = make_habit()
        self.assertEqual(frequency.scheduled_days_in_month(habit, "2024-03-01", today=date(2024, 3, 10)), 10)

    def test_week_count_for_custom_schedule(self):
        habit = make_habit(frequency=Frequency(kind="custom", custom_days=[0, 6]))
        self.assertEqual(frequency.scheduled_days_in_week(habit, "2024-03-13"), 2)

    def test_visible_habits_hide_archived_and_future(self):
        live = make_habit("live")
        archived = make_habit("archived", archived_at=datetime(2024, 3, 5))
        future = make_habit("future", created_at=datetime(2024, 4, 1))

        visible = frequency.visible_habits([live, archived, future], "2024-03-10")
        self.assertEqual([h.id for h in visible], ["live"])
        visible = frequency.visible_habits([live, archived, future], "2024-03-05")
        self.assertEqual([h.id for h in visible], ["live", "archived"])

    def test_frequency_labels(self):
        self.assertEqual(Frequency().label(), "Every day")
        self.assertEqual(Frequency(kind="weekly", times_per_week=3).label(), "3x per week")
        self.assertEqual(Frequency(kind="custom", custom_days=[1, 5]).label(), "Mon, Fri")


if __name__ == "__main__":
    unittest.main()
