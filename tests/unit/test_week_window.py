"""Unit tests for the Sunday-Saturday week window."""

from datetime import date, datetime, timezone

import pytest

from earnings_api.utils.helpers import week_window


class TestWeekWindow:

    def test_sunday_starts_the_week(self):
        now = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
        assert week_window(now) == (date(2026, 10, 18), date(2026, 10, 24))

    @pytest.mark.parametrize("day", [19, 21, 24])
    def test_rest_of_week_maps_to_same_window(self, day):
        now = datetime(2026, 10, day, 9, 30, tzinfo=timezone.utc)
        assert week_window(now) == (date(2026, 10, 18), date(2026, 10, 24))

    def test_saturday_night_utc_is_sunday_in_kolkata(self):
        now = datetime(2026, 10, 17, 20, 0, tzinfo=timezone.utc)

        assert week_window(now, "UTC") == (date(2026, 10, 11), date(2026, 10, 17))
        assert week_window(now, "Asia/Kolkata") == (date(2026, 10, 18), date(2026, 10, 24))

    def test_naive_datetime_is_treated_as_utc(self):
        naive = datetime(2026, 10, 17, 20, 0)
        aware = naive.replace(tzinfo=timezone.utc)
        assert week_window(naive, "Asia/Kolkata") == week_window(aware, "Asia/Kolkata")

    def test_window_spans_seven_days(self):
        start, end = week_window(datetime(2026, 12, 31, tzinfo=timezone.utc))
        assert (end - start).days == 6
        assert start.weekday() == 6
