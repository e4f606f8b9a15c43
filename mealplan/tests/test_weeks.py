import unittest
from datetime import date, datetime, timedelta

from mealplan.domain.errors import InvalidReference
from mealplan.logic.dates.weeks import (
    add_days, canonical_key, monday_of, month_grid, parse_key, shift_month, week_dates, week_label,
)


class TestMondayOf(unittest.TestCase):

    def test_monday_of_is_monday_and_idempotent(self):
        start = date(2023, 12, 1)
        for offset in range(0, 120):
            d = start + timedelta(days=offset)
            m = monday_of(d)
            self.assertEqual(m.isoweekday(), 1, f"{d} -> {m} is not a Monday")
            self.assertEqual(monday_of(m), m)
            self.assertTrue(0 <= (d - m).days <= 6)

    def test_sunday_belongs_to_previous_monday(self):
        self.assertEqual(monday_of(date(2024, 1, 7)), date(2024, 1, 1))

    def test_crosses_year_boundary(self):
        self.assertEqual(monday_of(date(2021, 1, 1)), date(2020, 12, 28))

    def test_accepts_datetime_and_key(self):
        self.assertEqual(monday_of(datetime(2024, 1, 3, 18, 30)), date(2024, 1, 1))
        self.assertEqual(monday_of("2024-01-03"), date(2024, 1, 1))


class TestKeys(unittest.TestCase):

    def test_canonical_key_is_zero_padded(self):
        self.assertEqual(canonical_key(date(2024, 3, 5)), "2024-03-05")

    def test_keys_sort_like_dates(self):
        days = [date(2023, 12, 31), date(2024, 1, 1), date(2024, 10, 2), date(2024, 2, 9)]
        self.assertEqual(sorted(canonical_key(d) for d in days), [canonical_key(d) for d in sorted(days)])

    def test_parse_key_round_trip(self):
        self.assertEqual(parse_key("2024-02-29"), date(2024, 2, 29))
        self.assertEqual(canonical_key(parse_key("2024-02-29")), "2024-02-29")

    def test_parse_key_rejects_bad_input(self):
        for bad in ("2023-02-29", "2024-13-01", "2024-1-5", "05.01.2024", "", None, "2024-01-01T00:00"):
            with self.assertRaises(InvalidReference, msg=repr(bad)):
                parse_key(bad)

    def test_add_days_crosses_month_and_year(self):
        self.assertEqual(add_days(date(2024, 2, 28), 2), date(2024, 3, 1))
        self.assertEqual(add_days(date(2023, 12, 30), 3), date(2024, 1, 2))
        self.assertEqual(add_days(date(2024, 1, 1), -7), date(2023, 12, 25))


class TestMonthGrid(unittest.TestCase):

    def test_month_starting_on_monday_has_no_leading_padding(self):
        grid = month_grid(2024, 1)
        self.assertEqual(grid[0].date, date(2024, 1, 1))
        self.assertTrue(grid[0].in_current_month)
        self.assertEqual(len(grid), 35)
        self.assertEqual(grid[-1].date, date(2024, 2, 4))
        self.assertFalse(grid[-1].in_current_month)

    def test_exact_four_week_month(self):
        grid = month_grid(2021, 2)
        self.assertEqual(len(grid), 28)
        self.assertTrue(all(c.in_current_month for c in grid))

    def test_padding_from_previous_month(self):
        grid = month_grid(2024, 3)
        self.assertEqual([c.key for c in grid[:4]], ["2024-02-26", "2024-02-27", "2024-02-28", "2024-02-29"])
        self.assertFalse(any(c.in_current_month for c in grid[:4]))
        self.assertEqual(grid[4].date, date(2024, 3, 1))
        self.assertEqual(grid[-1].date, date(2024, 3, 31))

    def test_grid_shape_for_a_whole_year(self):
        for month in range(1, 13):
            grid = month_grid(2025, month)
            self.assertEqual(len(grid) % 7, 0)
            self.assertEqual(grid[0].date.isoweekday(), 1)
            in_month = [c for c in grid if c.in_current_month]
            self.assertEqual(in_month[0].date, date(2025, month, 1))
            for a, b in zip(grid, grid[1:]):
                self.assertEqual(b.date - a.date, timedelta(days=1))

    def test_invalid_month(self):
        with self.assertRaises(InvalidReference):
            month_grid(2024, 13)


class TestWeekHelpers(unittest.TestCase):

    def test_week_dates(self):
        dates = week_dates(date(2024, 1, 4))
        self.assertEqual(len(dates), 7)
        self.assertEqual(dates[0], date(2024, 1, 1))
        self.assertEqual(dates[-1], date(2024, 1, 7))

    def test_week_label(self):
        self.assertEqual(week_label(date(2024, 1, 1)), "1 sty — 7 sty")
        self.assertEqual(week_label(date(2024, 12, 30)), "30 gru — 5 sty")

    def test_shift_month(self):
        self.assertEqual(shift_month(2024, 1, -1), (2023, 12))
        self.assertEqual(shift_month(2024, 12, 1), (2025, 1))
        self.assertEqual(shift_month(2024, 5, 0), (2024, 5))
        self.assertEqual(shift_month(2024, 5, 14), (2025, 7))


if __name__ == '__main__':
    unittest.main()
