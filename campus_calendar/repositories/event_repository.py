"""Event persistence: the storage contract and its SQLAlchemy implementation."""
import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from sqlalchemy import and_
from sqlalchemy.orm import Session

from campus_calendar.models.event import Event, RecurrenceGroup, RecurrenceRule
from campus_calendar.services.event_query import EventFilter
from campus_calendar.services.fields import extract_tags, split_list

logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = ("id", "created_at", "creator_id")


class EventRepository(Protocol):
    """What the scheduling core needs from storage. Each call is atomic on its own."""

    def create(self, fields: dict[str, Any]) -> Event:
        ...

    def find_by_id(self, event_id: int) -> Optional[Event]:
        ...

    def update(self, event_id: int, fields: dict[str, Any]) -> Optional[Event]:
        """Apply the given fields; None when the event does not exist."""
        ...

    def delete(self, event_id: int) -> bool:
        ...

    def query_by_filter(self, event_filter: EventFilter, skip: int, limit: int) -> list[Event]:
        """Matching events ordered by start_time ascending."""
        ...

    def distinct_organizers(self) -> list[str]:
        ...

    def all_tags_with_frequency(self) -> dict[str, int]:
        ...

    def create_group(self, rule: RecurrenceRule, end_date: datetime) -> RecurrenceGroup:
        ...

    def find_by_group(self, group_id: int) -> list[Event]:
        ...

    def delete_group(self, group_id: int) -> Optional[int]:
        """Remove the group and its remaining events; None when the group does not exist."""
        ...


class SqlEventRepository:
    """EventRepository over a SQLAlchemy session; every write commits immediately."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, fields: dict[str, Any]) -> Event:
        event = Event(**fields)
        self.db.add(event)
        self.db.commit()
        self.db.refresh(event)
        return event

    def find_by_id(self, event_id: int) -> Optional[Event]:
        return self.db.query(Event).filter(Event.id == event_id).first()

    def update(self, event_id: int, fields: dict[str, Any]) -> Optional[Event]:
        event = self.find_by_id(event_id)
        if not event:
            return None
        for field, value in fields.items():
            if hasattr(event, field) and field not in IMMUTABLE_FIELDS:
                setattr(event, field, value)
        event.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(event)
        return event

    def delete(self, event_id: int) -> bool:
        deleted = self.db.query(Event).filter(Event.id == event_id).delete(synchronize_session=False)
        self.db.commit()
        return deleted > 0

    def query_by_filter(self, event_filter: EventFilter, skip: int = 0, limit: int = 100) -> list[Event]:
        query = self.db.query(Event)
        conditions = event_filter.conditions()
        if conditions:
            query = query.filter(and_(*conditions))
        return query.order_by(Event.start_time, Event.id).offset(skip).limit(limit).all()

    def distinct_organizers(self) -> list[str]:
        rows = self.db.query(Event.organizer).filter(Event.organizer.isnot(None)).distinct().all()
        names = {name for (organizer,) in rows for name in split_list(organizer)}
        return sorted(names)

    def all_tags_with_frequency(self) -> dict[str, int]:
        counts: Counter = Counter()
        for (tags,) in self.db.query(Event.tags).all():
            counts.update(set(extract_tags(tags)))
        return dict(counts)

    def create_group(self, rule: RecurrenceRule, end_date: datetime) -> RecurrenceGroup:
        group = RecurrenceGroup(rule=rule, end_date=end_date)
        self.db.add(group)
        self.db.commit()
        self.db.refresh(group)
        return group

    def find_by_group(self, group_id: int) -> list[Event]:
        return (
            self.db.query(Event)
            .filter(Event.recurrence_group_id == group_id)
            .order_by(Event.recurrence_index, Event.start_time)
            .all()
        )

    def delete_group(self, group_id: int) -> Optional[int]:
        groups = self.db.query(RecurrenceGroup).filter(RecurrenceGroup.id == group_id)
        if not groups.count():
            return None
        deleted = (
            self.db.query(Event)
            .filter(Event.recurrence_group_id == group_id)
            .delete(synchronize_session=False)
        )
        groups.delete(synchronize_session=False)
        self.db.commit()
        logger.info("Deleted recurrence group %s with %d events", group_id, deleted)
        return deleted
