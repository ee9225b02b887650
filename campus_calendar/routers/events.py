"""Event API routes — delegates to event_service."""
import logging
from datetime import datetime
from typing import Optional, Union
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from campus_calendar.config import settings
from campus_calendar.database import get_db
from campus_calendar.repositories.event_repository import SqlEventRepository
from campus_calendar.schemas.event import (
    CalendarEventOut,
    EventCreate,
    EventOut,
    EventSeriesOut,
    EventUpdate,
    TagCount,
)
from campus_calendar.services import event_service
from campus_calendar.services.event_query import UNSET, build_filter
from campus_calendar.services.identity import get_current_user_id
from campus_calendar.services.projection import parse_view

logger = logging.getLogger(__name__)
router = APIRouter()


def get_repository(db: Session = Depends(get_db)) -> SqlEventRepository:
    return SqlEventRepository(db)


@router.get("/", response_model=list[CalendarEventOut])
def list_events(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    event_type: Optional[str] = Query(None, alias="eventType"),
    organizer: Optional[str] = Query(None),
    tags: Optional[str] = Query(None),
    my_events: bool = Query(False, alias="myEvents"),
    view: Optional[str] = Query(None, description="day, week, month, year, list or a FullCalendar view type"),
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1, le=settings.MAX_PAGE_LIMIT),
    current_user_id: Optional[int] = Depends(get_current_user_id),
    repo: SqlEventRepository = Depends(get_repository),
):
    """List events for calendar/list views with optional filters."""
    try:
        calendar_view = parse_view(view) if view else None
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    # Anonymous callers asking for "my events" get the unfiltered list
    creator_id = current_user_id if my_events and current_user_id is not None else UNSET
    event_filter = build_filter(
        start_date=start_date,
        end_date=end_date,
        event_type=event_type,
        organizer=organizer,
        tags=tags,
        creator_id=creator_id,
    )
    return event_service.list_calendar(repo, event_filter, view=calendar_view, skip=skip, limit=limit)


@router.post("/", response_model=Union[EventSeriesOut, EventOut], status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    current_user_id: Optional[int] = Depends(get_current_user_id),
    repo: SqlEventRepository = Depends(get_repository),
):
    """Create an event; recurring events come back as the whole series."""
    events, group_id = event_service.create_event(repo, payload, creator_id=current_user_id)
    if group_id is None:
        return EventOut.model_validate(events[0])
    return EventSeriesOut(
        events=[EventOut.model_validate(e) for e in events],
        count=len(events),
        recurrence_group_id=group_id,
    )


@router.get("/organizers", response_model=list[str])
def list_organizers(repo: SqlEventRepository = Depends(get_repository)):
    """Every organizer name used by at least one event."""
    return event_service.list_organizers(repo)


@router.get("/tags", response_model=list[TagCount])
def list_tags(repo: SqlEventRepository = Depends(get_repository)):
    """Tags with the number of events carrying each, most used first."""
    return event_service.list_tags(repo)


@router.get("/series/{group_id}", response_model=EventSeriesOut)
def get_series(group_id: int, repo: SqlEventRepository = Depends(get_repository)):
    """All events created together by one recurring create."""
    events = event_service.get_series(repo, group_id)
    if not events:
        raise HTTPException(status_code=404, detail="Recurrence series not found")
    return EventSeriesOut(
        events=[EventOut.model_validate(e) for e in events],
        count=len(events),
        recurrence_group_id=group_id,
    )


@router.delete("/series/{group_id}")
def delete_series(group_id: int, repo: SqlEventRepository = Depends(get_repository)):
    """Delete every remaining event of a recurrence series."""
    deleted = event_service.delete_series(repo, group_id)
    if deleted is None:
        raise HTTPException(status_code=404, detail="Recurrence series not found")
    return {"success": True, "deleted": deleted}


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: int, repo: SqlEventRepository = Depends(get_repository)):
    """Fetch a single event by ID."""
    event = event_service.get_event(repo, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.put("/{event_id}", response_model=EventOut)
def update_event(event_id: int, payload: EventUpdate, repo: SqlEventRepository = Depends(get_repository)):
    """Replace an event's fields (only this occurrence)."""
    event = event_service.update_event(repo, event_id, payload)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.delete("/{event_id}")
def delete_event(event_id: int, repo: SqlEventRepository = Depends(get_repository)):
    """Hard-delete a single event (only this occurrence)."""
    if not event_service.delete_event(repo, event_id):
        raise HTTPException(status_code=404, detail="Event not found")
    return {"success": True}
