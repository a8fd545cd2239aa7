# File: utils/dt_utils.py
"""Date and time utilities for Abhyasa.

Pure Python date/time functions with ZERO I/O and no engine imports.
All functions here can be unit tested without any fixtures.

⚠️ DIRECTIVE 1 - UTILS PURITY: only the standard library and dateutil.
   The system clock is read ONLY by dt_today_local, which the engines call
   at their outermost boundary when no reference date is given.

Functions:
    - set_default_timezone / get_default_timezone: Configure the local timezone
    - dt_today_local: Get today's date in local timezone
    - as_local: Convert a datetime to the local timezone
    - dt_parse_date: Parse date strings
    - dt_parse: Normalize datetime inputs to aware datetimes
    - dt_to_day: Normalize any date/timestamp input to a local calendar day
    - dt_day_key: Format a calendar day as a log key (YYYY-MM-DD)
    - dt_iter_days: Iterate calendar days (inclusive) one day at a time
    - dt_start_of_week / dt_end_of_week: Sunday..Saturday week bounds
    - dt_start_of_month / dt_end_of_month: Calendar month bounds
    - dt_weekday_number: Weekday with 0=Sunday..6=Saturday
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date, datetime, timedelta
import logging
from zoneinfo import ZoneInfo

# Third-party date utilities
from dateutil.relativedelta import SA, SU, relativedelta
from dateutil.rrule import DAILY, rrule

# Module-level logger
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

# Log keys are ISO calendar days
DAY_KEY_FORMAT = "%Y-%m-%d"


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this once at application start with the user's timezone so that
    timestamps are normalized to the user's calendar day.

    Args:
        tz: ZoneInfo object representing the default timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`.

    Args:
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Today's date in the specified timezone.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone.

    Naive datetimes are assumed to already be local wall-clock time and
    are only tagged with the timezone.

    Args:
        dt_obj: Datetime object
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Datetime in local timezone
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        return dt_obj.replace(tzinfo=tz_info)
    return dt_obj.astimezone(tz_info)


# ==============================================================================
# Date/Time Parsing
# ==============================================================================


def dt_parse_date(date_str: str | None) -> date | None:
    """Safely parse a date string into a `datetime.date`.

    Accepts formats:
    - "2025-04-07" (ISO format)
    - "04/07/2025" (US format)
    - "2025/04/07"

    Args:
        date_str: Date string to parse, or None

    Returns:
        datetime.date or None if parsing fails.
    """
    if not date_str or not isinstance(date_str, str):
        return None

    try:
        return date.fromisoformat(date_str.strip())
    except ValueError:
        pass

    for fmt in ("%m/%d/%Y", "%Y/%m/%d"):
        try:
            return datetime.strptime(date_str.strip(), fmt).date()
        except ValueError:
            continue

    return None


def dt_parse(
    dt_input: str | date | datetime | None,
    default_tzinfo: ZoneInfo | None = None,
) -> datetime | None:
    """Normalize various datetime input formats to an aware datetime.

    Args:
        dt_input: String, date or datetime to normalize, or None
        default_tzinfo: Timezone to use if the input is naive
                        (defaults to DEFAULT_TIME_ZONE if None)

    Returns:
        Timezone-aware datetime, or None if the input could not be parsed.

    Example:
        >>> dt_parse("2025-04-15")
        datetime.datetime(2025, 4, 15, 0, 0, tzinfo=ZoneInfo('UTC'))
    """
    if not dt_input:
        return None

    tz_info = default_tzinfo or DEFAULT_TIME_ZONE
    result: datetime | None = None

    if isinstance(dt_input, str):
        try:
            result = datetime.fromisoformat(dt_input.strip())
        except ValueError:
            parsed_date = dt_parse_date(dt_input)
            if parsed_date is None:
                _LOGGER.debug("dt_parse: Unparseable datetime string %r", dt_input)
                return None
            result = datetime.combine(parsed_date, datetime.min.time())
    elif isinstance(dt_input, datetime):
        result = dt_input
    elif isinstance(dt_input, date):
        result = datetime.combine(dt_input, datetime.min.time())
    else:
        _LOGGER.debug("dt_parse: Unsupported input type %s", type(dt_input))
        return None

    if result.tzinfo is None:
        result = result.replace(tzinfo=tz_info)
    return result


def dt_to_day(
    dt_input: str | date | datetime | None,
    tz: ZoneInfo | None = None,
) -> date | None:
    """Normalize a date or timestamp to the local calendar day.

    The time of day is discarded (midnight normalization). Plain day strings
    ("2025-04-07") and `date` objects are taken as-is, never shifted across
    timezones. Aware timestamps are converted to the local timezone first so
    that "2025-04-07T23:30:00-05:00" stays on the user's 7th.

    Args:
        dt_input: Day string, timestamp string, date or datetime
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        The calendar day, or None if the input could not be parsed.
    """
    if dt_input is None or dt_input == "":
        return None

    if isinstance(dt_input, datetime):
        return as_local(dt_input, tz).date()
    if isinstance(dt_input, date):
        return dt_input

    if isinstance(dt_input, str):
        # Day keys are the common case for logs
        parsed_day = dt_parse_date(dt_input)
        if parsed_day is not None:
            return parsed_day
        parsed = dt_parse(dt_input, default_tzinfo=tz)
        return as_local(parsed, tz).date() if parsed else None

    return None


def dt_day_key(day: date | datetime) -> str:
    """Format a calendar day as a log key (YYYY-MM-DD)."""
    if isinstance(day, datetime):
        day = day.date()
    return day.strftime(DAY_KEY_FORMAT)


# ==============================================================================
# Calendar Arithmetic
# ==============================================================================


def dt_iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from start to end inclusive.

    Uses an rrule DAILY recurrence so the walk never skips or repeats a day,
    including across DST transitions. Yields nothing when end < start.
    """
    if end < start:
        return
    rule = rrule(
        DAILY,
        dtstart=datetime.combine(start, datetime.min.time()),
        until=datetime.combine(end, datetime.min.time()),
    )
    for occurrence in rule:
        yield occurrence.date()


def dt_iter_days_backward(end: date, start: date) -> Iterator[date]:
    """Yield every calendar day from end back to start inclusive."""
    current = end
    while current >= start:
        yield current
        current -= timedelta(days=1)


def dt_weekday_number(day: date) -> int:
    """Return the weekday with 0=Sunday..6=Saturday.

    Python's `date.weekday()` is Monday-based; stored habit schedules use the
    Sunday-based numbering.
    """
    return (day.weekday() + 1) % 7


def dt_start_of_week(day: date) -> date:
    """Return the Sunday on or before the given day."""
    return day + relativedelta(weekday=SU(-1))


def dt_end_of_week(day: date) -> date:
    """Return the Saturday on or after the given day."""
    return day + relativedelta(weekday=SA(+1))


def dt_start_of_month(day: date) -> date:
    """Return the first day of the day's calendar month."""
    return day + relativedelta(day=1)


def dt_end_of_month(day: date) -> date:
    """Return the last day of the day's calendar month (clamped by relativedelta)."""
    return day + relativedelta(day=31)
