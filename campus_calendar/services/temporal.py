"""Date-precision value model and wall-clock conversions.

An event's "when" is either an exact instant range or an approximate month. Month values
still need a concrete range for storage and sorting; that range is a fixed placeholder on
the 15th of the month (00:00:00 to 23:59:59 UTC) and carries no timing meaning.
"""
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Optional, Union

import pytz

from campus_calendar.config import settings
from campus_calendar.models.event import DatePrecision

MONTH_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")
HOUR_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
PLACEHOLDER_DAY = 15


@dataclass(frozen=True)
class ExactRange:
    start: datetime
    end: datetime

    precision = DatePrecision.exact


@dataclass(frozen=True)
class ApproximateMonth:
    month: str  # YYYY-MM

    precision = DatePrecision.month


TimeValue = Union[ExactRange, ApproximateMonth]


def parse_month(value: str) -> tuple[int, int]:
    """Return (year, month) for a 'YYYY-MM' token or raise ValueError."""
    match = MONTH_PATTERN.match(value or "")
    if not match:
        raise ValueError(f"Invalid month '{value}', expected YYYY-MM")
    return int(match.group(1)), int(match.group(2))


def month_placeholder(month: str) -> tuple[datetime, datetime]:
    """Storage/sort range for a month-precision event. Pure function of the token."""
    year, mon = parse_month(month)
    start = datetime(year, mon, PLACEHOLDER_DAY, 0, 0, 0, tzinfo=timezone.utc)
    end = datetime(year, mon, PLACEHOLDER_DAY, 23, 59, 59, tzinfo=timezone.utc)
    return start, end


def resolve(value: TimeValue) -> tuple[datetime, datetime]:
    """Concrete (start, end) in UTC for either precision."""
    if isinstance(value, ApproximateMonth):
        return month_placeholder(value.month)
    return as_utc(value.start), as_utc(value.end)


def time_value_of(event) -> TimeValue:
    """Read the precision-tagged value back from a stored event."""
    if event.date_precision == DatePrecision.month and event.approximate_month:
        return ApproximateMonth(event.approximate_month)
    return ExactRange(as_utc(event.start_time), as_utc(event.end_time))


def sort_key(value: TimeValue) -> tuple[datetime, int]:
    """Anchor start first; exact before month when anchors tie."""
    start, _ = resolve(value)
    return start, 0 if isinstance(value, ExactRange) else 1


def calendar_tz():
    return pytz.timezone(settings.CALENDAR_TIMEZONE)


def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Stored instants are UTC; SQLite hands them back naive."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_wall_clock(dt: datetime) -> datetime:
    """Naive local wall-clock time in the calendar zone.

    Naive input is taken to be wall-clock already.
    """
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(calendar_tz()).replace(tzinfo=None)


def from_wall_clock(naive: datetime) -> datetime:
    """Attach the calendar zone to a wall-clock time and convert to UTC."""
    return calendar_tz().localize(naive).astimezone(timezone.utc)


def to_stored_instant(dt: Optional[datetime]) -> Optional[datetime]:
    """UTC instant for storage or comparison; naive input is calendar wall-clock time."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return from_wall_clock(dt)
    return as_utc(dt)


def combine_date_hour(day: date, hour: str) -> datetime:
    """Wall-clock datetime for the date + 'HH:MM' form encoding."""
    match = HOUR_PATTERN.match(hour or "")
    if not match:
        raise ValueError(f"Invalid hour '{hour}', expected HH:MM")
    return datetime.combine(day, time(int(match.group(1)), int(match.group(2))))


def format_date_label(value: TimeValue) -> str:
    if isinstance(value, ApproximateMonth):
        year, mon = parse_month(value.month)
        return f"{year}年{mon}月（日期待定）"
    local = to_wall_clock(as_utc(value.start))
    return f"{local.year}年{local.month}月{local.day}日 {local:%H:%M}"
