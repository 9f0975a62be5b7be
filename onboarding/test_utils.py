"""
Unit tests for date and formatting utilities.
"""

import unittest
from datetime import date, datetime

from onboarding.utils import (
    TIME_OF_DAY_PATTERN, calculate_age, format_currency, format_date,
    format_file_size, format_percentage, is_under_age, parse_date
)


class TestParseDate(unittest.TestCase):
    """Test date parsing."""

    def test_iso_date(self):
        self.assertEqual(parse_date('2025-06-01'), date(2025, 6, 1))

    def test_iso_timestamp(self):
        self.assertEqual(parse_date('2025-06-01T10:30:00Z'), date(2025, 6, 1))

    def test_date_and_datetime(self):
        self.assertEqual(parse_date(date(2025, 6, 1)), date(2025, 6, 1))
        self.assertEqual(parse_date(datetime(2025, 6, 1, 9, 0)), date(2025, 6, 1))

    def test_invalid(self):
        self.assertIsNone(parse_date('01/06/2025'))
        self.assertIsNone(parse_date(''))
        self.assertIsNone(parse_date(None))
        self.assertIsNone(parse_date(20250601))


class TestCalculateAge(unittest.TestCase):
    """Age must be calendar-correct, not a plain year difference."""

    def test_birthday_not_yet_reached(self):
        self.assertEqual(calculate_age('2007-12-31', date(2025, 6, 1)), 17)

    def test_on_birthday(self):
        self.assertEqual(calculate_age('2007-06-01', date(2025, 6, 1)), 18)

    def test_day_before_birthday(self):
        self.assertEqual(calculate_age('2007-06-02', date(2025, 6, 1)), 17)

    def test_leap_day_birthday(self):
        self.assertEqual(calculate_age('2004-02-29', date(2025, 2, 28)), 20)
        self.assertEqual(calculate_age('2004-02-29', date(2025, 3, 1)), 21)

    def test_unparseable(self):
        self.assertIsNone(calculate_age('not-a-date', date(2025, 6, 1)))

    def test_is_under_age(self):
        today = date(2025, 6, 2)
        self.assertTrue(is_under_age('2004-07-01', 21, today))
        self.assertFalse(is_under_age('2004-06-02', 21, today))
        self.assertFalse(is_under_age(None, 21, today))


class TestTimeOfDay(unittest.TestCase):

    def test_valid_times(self):
        for value in ('00:00', '09:30', '17:00', '23:59'):
            self.assertIsNotNone(TIME_OF_DAY_PATTERN.match(value), value)

    def test_invalid_times(self):
        for value in ('24:00', '9:00', '12:60', '0900', 'noon'):
            self.assertIsNone(TIME_OF_DAY_PATTERN.match(value), value)


class TestFormatting(unittest.TestCase):

    def test_format_date(self):
        self.assertEqual(format_date('2025-06-16'), '16 June 2025')
        self.assertEqual(format_date(None), '')

    def test_format_currency(self):
        self.assertEqual(format_currency(95000), '$95,000')
        self.assertEqual(format_currency(72.5), '$72.50')

    def test_format_percentage(self):
        self.assertEqual(format_percentage(60), '60%')

    def test_non_finite_values_shown_as_given(self):
        self.assertEqual(format_currency(float('inf')), 'inf')
        self.assertEqual(format_currency('nan'), 'nan')
        self.assertEqual(format_percentage(float('inf')), 'inf')
        self.assertEqual(format_file_size(float('inf')), '')

    def test_format_file_size(self):
        self.assertEqual(format_file_size(512 * 1024), '512.0 KB')
        self.assertEqual(format_file_size(3 * 1024 * 1024), '3.0 MB')


if __name__ == '__main__':
    unittest.main()
