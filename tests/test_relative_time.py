from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

from social_sentiment.relative_time import relative_label

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def _ago(**kwargs: float) -> datetime:
    return NOW - timedelta(**kwargs)


class TestRelativeLabel(unittest.TestCase):
    def test_under_a_minute(self) -> None:
        self.assertEqual(relative_label(NOW, NOW), "less than a minute ago")
        self.assertEqual(relative_label(_ago(seconds=29), NOW), "less than a minute ago")
        self.assertEqual(relative_label(_ago(seconds=30), NOW), "1 minute ago")

    def test_minutes_and_hours(self) -> None:
        self.assertEqual(relative_label(_ago(minutes=5), NOW), "5 minutes ago")
        self.assertEqual(relative_label(_ago(minutes=44), NOW), "44 minutes ago")
        self.assertEqual(relative_label(_ago(minutes=45), NOW), "about 1 hour ago")
        self.assertEqual(relative_label(_ago(hours=3), NOW), "about 3 hours ago")
        self.assertEqual(relative_label(_ago(hours=23), NOW), "about 23 hours ago")

    def test_days(self) -> None:
        self.assertEqual(relative_label(_ago(days=1), NOW), "1 day ago")
        self.assertEqual(relative_label(_ago(hours=42), NOW), "2 days ago")
        self.assertEqual(relative_label(_ago(days=10), NOW), "10 days ago")

    def test_months(self) -> None:
        self.assertEqual(relative_label(_ago(days=30), NOW), "about 1 month ago")
        self.assertEqual(relative_label(_ago(days=45), NOW), "about 2 months ago")
        self.assertEqual(relative_label(_ago(days=90), NOW), "3 months ago")

    def test_years(self) -> None:
        self.assertEqual(relative_label(datetime(2023, 6, 1, 12, tzinfo=timezone.utc), NOW), "about 1 year ago")
        self.assertEqual(relative_label(datetime(2022, 1, 1, 12, tzinfo=timezone.utc), NOW), "over 2 years ago")
        self.assertEqual(relative_label(datetime(2021, 9, 1, 12, tzinfo=timezone.utc), NOW), "almost 3 years ago")

    def test_years_count_overflowing_month_ends_as_full(self) -> None:
        self.assertEqual(
            relative_label(
                datetime(2023, 2, 28, 13, tzinfo=timezone.utc),
                datetime(2024, 5, 31, 12, tzinfo=timezone.utc),
            ),
            "over 1 year ago",
        )
        self.assertEqual(
            relative_label(
                datetime(2022, 11, 30, 12, tzinfo=timezone.utc),
                datetime(2024, 2, 28, 12, tzinfo=timezone.utc),
            ),
            "over 1 year ago",
        )
        self.assertEqual(
            relative_label(
                datetime(2022, 12, 15, 12, tzinfo=timezone.utc),
                datetime(2024, 3, 10, 12, tzinfo=timezone.utc),
            ),
            "about 1 year ago",
        )

    def test_future_instants(self) -> None:
        self.assertEqual(relative_label(NOW + timedelta(hours=2), NOW), "in about 2 hours")
        self.assertEqual(relative_label(NOW + timedelta(minutes=10), NOW), "in 10 minutes")

    def test_naive_datetimes_are_utc(self) -> None:
        naive = datetime(2024, 6, 1, 11, 0, 0)
        self.assertEqual(relative_label(naive, NOW), "about 1 hour ago")

    def test_other_timezones_are_normalized(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        when = datetime(2024, 6, 1, 13, 55, 0, tzinfo=plus_two)  # 11:55 UTC
        self.assertEqual(relative_label(when, NOW), "5 minutes ago")


if __name__ == "__main__":
    unittest.main()
