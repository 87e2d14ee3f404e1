"""Tests for dt_utils date/time helpers."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

from freezegun import freeze_time
import pytest

from gymverse.utils import dt_utils


class TestTimezoneConfig:
    """Tests for the reference timezone."""

    def test_set_and_get(self) -> None:
        """The configured timezone is returned."""
        tz = ZoneInfo("Europe/Amsterdam")
        dt_utils.set_default_timezone(tz)

        assert dt_utils.get_default_timezone() is tz

    @freeze_time("2026-03-18 23:30:00")
    def test_today_local_follows_timezone(self) -> None:
        """Late UTC evening is already tomorrow further east."""
        assert dt_utils.dt_today_local() == date(2026, 3, 18)

        dt_utils.set_default_timezone(ZoneInfo("Europe/Amsterdam"))

        assert dt_utils.dt_today_local() == date(2026, 3, 19)


class TestParsing:
    """Tests for dt_parse and friends."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("2026-03-18T06:30:00Z", datetime(2026, 3, 18, 6, 30, tzinfo=UTC)),
            ("2026-03-18T06:30:00+00:00", datetime(2026, 3, 18, 6, 30, tzinfo=UTC)),
            ("2026-03-18", datetime(2026, 3, 18, tzinfo=UTC)),
            ("03/18/2026", datetime(2026, 3, 18, tzinfo=UTC)),
            (date(2026, 3, 18), datetime(2026, 3, 18, tzinfo=UTC)),
        ],
    )
    def test_parse_accepted_inputs(self, value, expected: datetime) -> None:
        """Strings and dates become aware datetimes."""
        parsed = dt_utils.dt_parse(value)

        assert parsed == expected
        assert parsed is not None and parsed.tzinfo is not None

    @pytest.mark.parametrize("value", [None, "", "yesterday-ish", 42])
    def test_parse_rejects(self, value) -> None:
        """Unparseable input gives None."""
        assert dt_utils.dt_parse(value) is None

    def test_naive_input_uses_reference_timezone(self) -> None:
        """Naive datetimes are interpreted in the reference timezone."""
        tz = ZoneInfo("America/New_York")
        dt_utils.set_default_timezone(tz)

        parsed = dt_utils.dt_parse("2026-03-18T08:00:00")

        assert parsed == datetime(2026, 3, 18, 12, 0, tzinfo=UTC)

    def test_to_local_date(self) -> None:
        """Timestamps project onto the reference-timezone date."""
        dt_utils.set_default_timezone(ZoneInfo("Asia/Tokyo"))

        assert dt_utils.dt_to_local_date("2026-03-18T20:00:00Z") == date(2026, 3, 19)
        assert dt_utils.dt_to_local_date(date(2026, 3, 18)) == date(2026, 3, 18)
        assert dt_utils.dt_to_local_date("garbage") is None

    def test_format_iso_is_utc(self) -> None:
        """ISO output is always UTC."""
        value = datetime(2026, 3, 18, 8, 0, tzinfo=ZoneInfo("America/New_York"))

        assert dt_utils.dt_format_iso(value) == "2026-03-18T12:00:00+00:00"
        assert dt_utils.dt_format_iso(None) is None

    def test_naive_conversion_is_consistent(self) -> None:
        """as_local and as_utc read a naive datetime the same way."""
        dt_utils.set_default_timezone(ZoneInfo("Asia/Tokyo"))
        naive = datetime(2026, 3, 18, 20, 0)

        local = dt_utils.as_local(naive)

        assert local == dt_utils.as_utc(naive)
        assert local.date() == date(2026, 3, 18)
        assert local.hour == 20


class TestCalendarMath:
    """Tests for calendar arithmetic."""

    @pytest.mark.parametrize(
        ("base", "months", "expected"),
        [
            (date(2026, 3, 31), -1, date(2026, 2, 28)),
            (date(2026, 1, 15), -2, date(2025, 11, 15)),
            (date(2024, 1, 31), 1, date(2024, 2, 29)),
        ],
    )
    def test_add_months(self, base: date, months: int, expected: date) -> None:
        """Month steps clamp to the last valid day."""
        assert dt_utils.dt_add_months(base, months) == expected

    @pytest.mark.parametrize(
        ("day", "sunday"),
        [
            (date(2026, 3, 15), date(2026, 3, 15)),
            (date(2026, 3, 18), date(2026, 3, 15)),
            (date(2026, 3, 21), date(2026, 3, 15)),
        ],
    )
    def test_start_of_week(self, day: date, sunday: date) -> None:
        """Weeks start on Sunday."""
        assert dt_utils.dt_start_of_week(day) == sunday

    def test_days_in_month(self) -> None:
        """Leap years are honoured."""
        assert dt_utils.dt_days_in_month(date(2024, 2, 10)) == 29
        assert dt_utils.dt_days_in_month(date(2026, 2, 10)) == 28

    def test_days_until_rounds_up(self) -> None:
        """Partial days count as a whole day."""
        now = datetime(2026, 3, 18, 12, 0, tzinfo=UTC)

        assert dt_utils.dt_days_until(now + timedelta(hours=1), now) == 1
        assert dt_utils.dt_days_until(now + timedelta(days=2), now) == 2
        assert dt_utils.dt_days_until(now - timedelta(days=2), now) == 0

    def test_span_and_hours(self) -> None:
        """Spans round up; hours are signed."""
        start = datetime(2026, 3, 1, tzinfo=UTC)
        end = datetime(2026, 3, 3, 6, tzinfo=UTC)

        assert dt_utils.dt_span_days(start, end) == 3
        assert dt_utils.dt_span_days(end, start) == 0
        assert dt_utils.dt_hours_between(start, end) == 54.0
        assert dt_utils.dt_hours_between(end, start) == -54.0
