import unittest

from engine.formatting import (
    format_date,
    format_duration,
    format_number,
    format_size,
    ordinal_suffix,
    seconds_to_clock,
)


class FormattingTests(unittest.TestCase):
    def test_format_duration(self):
        self.assertEqual(format_duration("1:02:03"), "1h 02m 03s")
        self.assertEqual(format_duration("4:05"), "4m 05s")
        self.assertEqual(format_duration(""), "Unknown")
        self.assertEqual(format_duration(None), "Unknown")
        self.assertEqual(format_duration("Unknown"), "Unknown")
        self.assertEqual(format_duration("42"), "42")

    def test_format_number(self):
        self.assertEqual(format_number("1234567"), "1,234,567")
        self.assertEqual(format_number(1000), "1,000")
        self.assertEqual(format_number("12"), "12")
        self.assertEqual(format_number("abc"), "Unknown")
        self.assertEqual(format_number("-5"), "Unknown")
        self.assertEqual(format_number(None), "Unknown")

    def test_format_date(self):
        formatted = format_date("20250115")
        self.assertEqual(formatted, "Wed, 15th Jan 2025")
        self.assertIn("15th", formatted)
        self.assertIn("Jan", formatted)
        self.assertIn("2025", formatted)
        self.assertEqual(format_date("20240301"), "Fri, 1st Mar 2024")
        self.assertEqual(format_date("bad"), "Unknown")
        self.assertEqual(format_date("20251340"), "Unknown")
        self.assertEqual(format_date(""), "Unknown")

    def test_ordinal_suffix(self):
        expected = {1: "st", 2: "nd", 3: "rd", 4: "th", 11: "th", 12: "th", 13: "th",
                    21: "st", 22: "nd", 23: "rd", 30: "th", 31: "st"}
        for day, suffix in expected.items():
            self.assertEqual(ordinal_suffix(day), suffix, day)

    def test_seconds_to_clock(self):
        self.assertEqual(seconds_to_clock(3723), "1:02:03")
        self.assertEqual(seconds_to_clock(245), "4:05")
        self.assertIsNone(seconds_to_clock(None))

    def test_format_size(self):
        self.assertEqual(format_size(None), "N/A")
        self.assertEqual(format_size(512), "512B")
        self.assertEqual(format_size(2048), "2.0K")
        self.assertEqual(format_size(3 * 1024 * 1024), "3.0M")
