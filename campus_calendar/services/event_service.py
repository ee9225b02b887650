"""Core event service — create/update/delete flows over the repository.

Responsibilities:
- Precision resolution: month events get the placeholder range, exact events are
  converted from calendar wall-clock to UTC
- Recurrence fan-out: a recurring create stores one row per instance, sequentially,
  linked by a recurrence group; rows stay independent afterwards
- Derived fields: organization_type from the first organizer
- Read side: filtered, projected, view-aware calendar listings
"""
import logging
from typing import Any, Optional

from fastapi import HTTPException, status

from campus_calendar.config import settings
from campus_calendar.models.event import DatePrecision, Event, RecurrenceRule
from campus_calendar.repositories.event_repository import EventRepository
from campus_calendar.schemas.event import CalendarEventOut, EventPayload, TagCount
from campus_calendar.services.catalog import organization_type_for
from campus_calendar.services.event_query import EventFilter, PrecisionClause
from campus_calendar.services.fields import dump_attendees, primary_token
from campus_calendar.services.projection import CalendarView, project_for_view, visible_in_view
from campus_calendar.services.recurrence import RecurrenceLimitExceeded, expand
from campus_calendar.services.temporal import (
    from_wall_clock,
    month_placeholder,
    to_stored_instant,
    to_wall_clock,
)

logger = logging.getLogger(__name__)


def _event_fields(payload: EventPayload) -> dict[str, Any]:
    """Every non-temporal column, shared by all instances of a series."""
    attendees = [a.model_dump() for a in payload.required_attendees or []]
    return {
        "title": payload.title,
        "content": payload.content,
        "image_url": payload.image_url,
        "link": payload.link,
        "location": payload.location,
        "organizer": payload.organizer,
        "organization_type": organization_type_for(primary_token(payload.organizer)),
        "event_type": payload.event_type,
        "tags": payload.tags,
        "recurrence_rule": payload.recurrence_rule,
        "recurrence_end_date": to_stored_instant(payload.recurrence_end_date),
        "date_precision": payload.date_precision,
        "approximate_month": payload.approximate_month,
        "required_attendees": dump_attendees(attendees),
    }


def _time_fields(payload: EventPayload) -> dict[str, Any]:
    if payload.date_precision == DatePrecision.month:
        start, end = month_placeholder(payload.approximate_month)
    else:
        start, end = to_stored_instant(payload.start_time), to_stored_instant(payload.end_time)
    return {"start_time": start, "end_time": end}


def create_event(
    repo: EventRepository,
    payload: EventPayload,
    creator_id: Optional[int] = None,
) -> tuple[list[Event], Optional[int]]:
    """Create an event, fanning out into one row per occurrence when recurring.

    Returns the created rows (seed first) and the recurrence group id, if any. Instances
    are persisted one by one; a failure part-way leaves the earlier rows in place.
    """
    fields = _event_fields(payload)
    fields["creator_id"] = creator_id

    if payload.recurrence_rule == RecurrenceRule.none:
        event = repo.create({**fields, **_time_fields(payload)})
        logger.info("Created event '%s' (%s) by creator %s", event.title, event.id, creator_id)
        return [event], None

    try:
        instances = expand(
            to_wall_clock(payload.start_time),
            to_wall_clock(payload.end_time),
            payload.recurrence_rule,
            until=to_wall_clock(payload.recurrence_end_date),
            max_instances=settings.MAX_RECURRENCE_INSTANCES,
        )
    except RecurrenceLimitExceeded as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"field": "recurrenceEndDate", "message": str(e)},
        )

    group = repo.create_group(payload.recurrence_rule, fields["recurrence_end_date"])
    created = []
    for index, (start, end) in enumerate(instances):
        created.append(repo.create({
            **fields,
            "start_time": from_wall_clock(start),
            "end_time": from_wall_clock(end),
            "recurrence_group_id": group.id,
            "recurrence_index": index,
        }))

    logger.info(
        "Created recurring event '%s' (%s rule, group %s): %d occurrences",
        payload.title, payload.recurrence_rule.value, group.id, len(created),
    )
    return created, group.id


def update_event(repo: EventRepository, event_id: int, payload: EventPayload) -> Optional[Event]:
    """Replace an event's fields. Siblings in its recurrence group are left alone."""
    event = repo.update(event_id, {**_event_fields(payload), **_time_fields(payload)})
    if event:
        logger.info("Updated event %s", event_id)
    return event


def delete_event(repo: EventRepository, event_id: int) -> bool:
    found = repo.delete(event_id)
    if found:
        logger.info("Deleted event %s", event_id)
    return found


def get_event(repo: EventRepository, event_id: int) -> Optional[Event]:
    return repo.find_by_id(event_id)


def list_calendar(
    repo: EventRepository,
    event_filter: EventFilter,
    view: Optional[CalendarView] = None,
    skip: int = 0,
    limit: Optional[int] = None,
) -> list[CalendarEventOut]:
    """Filtered events projected for the given calendar view.

    Precision visibility is part of the query so paging counts only entries the view shows.
    """
    if view is not None and not visible_in_view(DatePrecision.month, view):
        event_filter = EventFilter([*event_filter.clauses, PrecisionClause(DatePrecision.exact)])
    events = repo.query_by_filter(event_filter, skip=skip, limit=limit or settings.DEFAULT_PAGE_LIMIT)
    return project_for_view(events, view)


def get_series(repo: EventRepository, group_id: int) -> list[Event]:
    return repo.find_by_group(group_id)


def delete_series(repo: EventRepository, group_id: int) -> Optional[int]:
    return repo.delete_group(group_id)


def list_organizers(repo: EventRepository) -> list[str]:
    return repo.distinct_organizers()


def list_tags(repo: EventRepository) -> list[TagCount]:
    """Tags with usage counts, most used first."""
    counts = repo.all_tags_with_frequency()
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [TagCount(name=name, count=count) for name, count in ordered]
