# File: utils/dt_utils.py
"""Date and time utilities for GymVerse.

Pure Python date/time functions used by the progression engines.
Uses standard library datetime and zoneinfo plus python-dateutil.

Functions:
    - set_default_timezone / get_default_timezone: Reference timezone config
    - dt_today_local: Get today's date in the reference timezone
    - dt_now_utc: Get current datetime in UTC
    - as_utc / as_local: Timezone conversion
    - dt_parse_date: Parse date strings
    - dt_parse: Normalize str/date/datetime inputs to aware datetimes
    - dt_to_local_date: Project a timestamp onto a reference-timezone date
    - dt_format_iso: Format a datetime as ISO 8601
    - dt_add_months: Month arithmetic (relativedelta)
    - dt_start_of_week: Sunday that starts the week of a date
    - dt_days_in_month: Number of days in a date's month
    - dt_days_until: Whole days (rounded up) until a target datetime
    - dt_span_days: Whole days (rounded up) between two datetimes
    - dt_hours_between: Elapsed hours between two datetimes
"""

from __future__ import annotations

import calendar
from datetime import UTC, date, datetime, timedelta
import logging
import math
from zoneinfo import ZoneInfo

from dateutil import parser as dt_parser
from dateutil.relativedelta import relativedelta

# Module-level logger
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants
# ==============================================================================

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

SECONDS_PER_DAY = 86400
SECONDS_PER_HOUR = 3600

# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the reference timezone used to group sessions into calendar days.

    Args:
        tz: ZoneInfo object representing the reference timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current reference timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in ``tz`` (defaults to the reference timezone)."""
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


# ==============================================================================
# Timezone Conversion
# ==============================================================================


def as_utc(dt_obj: datetime) -> datetime:
    """Convert a datetime to UTC.

    Naive datetimes are assumed to be in the reference timezone.
    """
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=DEFAULT_TIME_ZONE)
    return dt_obj.astimezone(UTC)


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to the reference timezone.

    Naive datetimes are assumed to be in the reference timezone, as in
    as_utc and dt_parse.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=DEFAULT_TIME_ZONE)
    return dt_obj.astimezone(tz_info)


# ==============================================================================
# Date/Time Parsing
# ==============================================================================


def dt_parse_date(date_str: str | None) -> date | None:
    """Parse a plain date string (ISO, US or slash-separated ISO order).

    Returns None for anything else, including non-string input.
    """
    if not date_str or not isinstance(date_str, str):
        return None

    try:
        return date.fromisoformat(date_str)
    except ValueError:
        pass

    for fmt in ("%m/%d/%Y", "%Y/%m/%d"):
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue

    return None


def dt_parse(
    dt_input: str | date | datetime | None,
    default_tzinfo: ZoneInfo | None = None,
) -> datetime | None:
    """Normalize string, date or datetime input to a timezone-aware datetime.

    Strings are parsed with ``dateutil.parser.isoparse`` so trailing ``Z``
    and reduced-precision forms are accepted. Dates become midnight.

    Args:
        dt_input: String, date or datetime to normalize, or None
        default_tzinfo: Timezone to apply if the input is naive
                        (defaults to DEFAULT_TIME_ZONE)

    Returns:
        Aware datetime, or None if the input could not be parsed.

    Example:
        >>> dt_parse("2025-04-15T06:30:00Z")
        datetime.datetime(2025, 4, 15, 6, 30, tzinfo=tzutc())
    """
    if not dt_input:
        return None

    tz_info = default_tzinfo or DEFAULT_TIME_ZONE
    result: datetime | None = None

    if isinstance(dt_input, str):
        try:
            result = dt_parser.isoparse(dt_input)
        except (ValueError, OverflowError):
            parsed_date = dt_parse_date(dt_input)
            if parsed_date is None:
                _LOGGER.debug("Unparseable datetime input: %s", dt_input)
                return None
            result = datetime.combine(parsed_date, datetime.min.time())

    elif isinstance(dt_input, datetime):
        result = dt_input

    elif isinstance(dt_input, date):
        result = datetime.combine(dt_input, datetime.min.time())

    else:
        _LOGGER.debug("Unsupported datetime input type: %s", type(dt_input))
        return None

    if result.tzinfo is None:
        result = result.replace(tzinfo=tz_info)

    return result


def dt_to_local_date(
    dt_input: str | date | datetime | None, tz: ZoneInfo | None = None
) -> date | None:
    """Project a timestamp onto its calendar date in the reference timezone.

    Plain ``date`` inputs are returned unchanged.
    """
    if isinstance(dt_input, date) and not isinstance(dt_input, datetime):
        return dt_input
    parsed = dt_parse(dt_input)
    if parsed is None:
        return None
    return as_local(parsed, tz).date()


# ==============================================================================
# Date/Time Formatting
# ==============================================================================


def dt_format_iso(dt_obj: datetime | None) -> str | None:
    """Format a datetime as an ISO 8601 string in UTC."""
    if dt_obj is None:
        return None
    return as_utc(dt_obj).isoformat()


# ==============================================================================
# Calendar Arithmetic
# ==============================================================================


def dt_add_months(base: date, months: int) -> date:
    """Add (or subtract) calendar months, clamping to the last valid day.

    Example:
        dt_add_months(date(2025, 3, 31), -1) → date(2025, 2, 28)
    """
    return base + relativedelta(months=months)


def dt_start_of_week(day: date) -> date:
    """Return the Sunday that starts the week containing ``day``."""
    # weekday(): Monday=0 .. Sunday=6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def dt_days_in_month(day: date) -> int:
    """Return the number of days in the month containing ``day``."""
    return calendar.monthrange(day.year, day.month)[1]


def dt_days_until(target: datetime, now: datetime | None = None) -> int:
    """Return whole days until ``target``, rounded up, never negative.

    Args:
        target: Target datetime (naive values use the reference timezone)
        now: Reference instant (defaults to current UTC time)

    Returns:
        ceil((target - now) / 1 day) clamped at zero.
    """
    now_utc = as_utc(now) if now is not None else dt_now_utc()
    seconds = (as_utc(target) - now_utc).total_seconds()
    return max(0, math.ceil(seconds / SECONDS_PER_DAY))


def dt_span_days(start: datetime, end: datetime) -> int:
    """Return ceil((end - start) / 1 day); zero when end is not after start."""
    seconds = (as_utc(end) - as_utc(start)).total_seconds()
    return max(0, math.ceil(seconds / SECONDS_PER_DAY))


def dt_hours_between(start: datetime, end: datetime) -> float:
    """Return the signed number of hours from ``start`` to ``end``."""
    return (as_utc(end) - as_utc(start)).total_seconds() / SECONDS_PER_HOUR
