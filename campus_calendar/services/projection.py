"""Read-side projection of stored events into calendar/list entries."""
import enum
from datetime import datetime, time
from typing import Optional

from campus_calendar.models.event import DatePrecision
from campus_calendar.schemas.event import CalendarEventOut, CalendarExtendedProps
from campus_calendar.services import catalog
from campus_calendar.services.fields import load_attendees, primary_token
from campus_calendar.services.temporal import (
    ApproximateMonth,
    format_date_label,
    resolve,
    sort_key,
    time_value_of,
    to_wall_clock,
)

UNCERTAIN_CLASS = "event-uncertain event-uncertain-month"


class CalendarView(str, enum.Enum):
    day = "day"
    week = "week"
    month = "month"
    year = "year"
    list = "list"


# Month-precision events would show a fake time slot in these
TIME_GRID_VIEWS = frozenset({CalendarView.day, CalendarView.week})


def parse_view(name: str) -> CalendarView:
    """Accept plain names and FullCalendar view types (timeGridWeek, dayGridMonth, ...)."""
    lowered = (name or "").strip().lower()
    try:
        return CalendarView(lowered)
    except ValueError:
        pass
    if "year" in lowered:
        return CalendarView.year
    if "month" in lowered:
        return CalendarView.month
    if "week" in lowered:
        return CalendarView.week
    if "day" in lowered:
        return CalendarView.day
    if "list" in lowered:
        return CalendarView.list
    raise ValueError(f"Unknown calendar view '{name}'")


def visible_in_view(precision: DatePrecision, view: CalendarView) -> bool:
    if precision == DatePrecision.month:
        return view not in TIME_GRID_VIEWS
    return True


def is_all_day(start: datetime, end: datetime) -> bool:
    """Starts at midnight and ends at 23:59 the same day or at a later midnight.

    Evaluated on calendar wall-clock time.
    """
    start = to_wall_clock(start)
    end = to_wall_clock(end)
    if start.time() != time(0, 0, 0):
        return False
    if end.date() == start.date() and (end.hour, end.minute) == (23, 59):
        return True
    return end.date() > start.date() and end.time() == time(0, 0, 0)


def project(event) -> CalendarEventOut:
    value = time_value_of(event)
    start, end = resolve(value)
    month_precision = isinstance(value, ApproximateMonth)
    primary_type = primary_token(event.event_type)

    return CalendarEventOut(
        id=str(event.id),
        title=event.title,
        start=start,
        end=end,
        all_day=False if month_precision else is_all_day(start, end),
        background_color=catalog.event_type_color(primary_type),
        class_name=UNCERTAIN_CLASS if month_precision else "",
        date_precision=value.precision.value,
        approximate_month=value.month if month_precision else None,
        date_label=format_date_label(value),
        extended_props=CalendarExtendedProps(
            content=event.content,
            image_url=event.image_url,
            link=event.link,
            location=event.location,
            organizer=event.organizer,
            organization_type=getattr(event.organization_type, "value", event.organization_type),
            event_type=event.event_type,
            event_type_label=catalog.event_type_label(primary_type),
            tags=event.tags or "",
            recurrence_rule=getattr(event.recurrence_rule, "value", event.recurrence_rule),
            recurrence_group_id=event.recurrence_group_id,
            required_attendees=load_attendees(event.required_attendees),
            creator_id=event.creator_id,
        ),
    )


def display_sort_key(event) -> tuple:
    anchor, rank = sort_key(time_value_of(event))
    return anchor, rank, event.id


def project_for_view(events, view: Optional[CalendarView] = None) -> list[CalendarEventOut]:
    """Project events visible in ``view`` (all events when no view is given), in display order."""
    visible = [
        e for e in events
        if view is None or visible_in_view(time_value_of(e).precision, view)
    ]
    return [project(e) for e in sorted(visible, key=display_sort_key)]
