"""Event query composition.

A filter is a set of independently optional clauses joined with AND:

- TimeRangeClause       start_time >= start AND end_time <= end (either side optional)
- TypeWhitelistClause   event_type contains ANY listed token
- OrganizerWhitelistClause  organizer contains ANY listed token
- TagAllClause          tags contains EVERY listed token
- CreatorClause         creator_id == id, or IS NULL when id is None
- PrecisionClause       date_precision == precision (calendar views that hide month events)

Token matching is substring containment against the stored delimited text, so a tag "AI"
also matches a stored "#AI二期#". Each clause renders both a SQLAlchemy condition (for the
repository) and a Python predicate over a loaded event.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Union

from sqlalchemy import and_, or_, true

from campus_calendar.models.event import DatePrecision, Event
from campus_calendar.services.fields import split_list
from campus_calendar.services.temporal import as_utc, to_stored_instant

UNSET: Any = object()


def _contains(value: Optional[str], token: str) -> bool:
    return bool(value) and token in value


@dataclass(frozen=True)
class TimeRangeClause:
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def condition(self):
        parts = []
        if self.start is not None:
            parts.append(Event.start_time >= to_stored_instant(self.start))
        if self.end is not None:
            parts.append(Event.end_time <= to_stored_instant(self.end))
        return and_(*parts) if parts else true()

    def matches(self, event) -> bool:
        if self.start is not None and as_utc(event.start_time) < to_stored_instant(self.start):
            return False
        if self.end is not None and as_utc(event.end_time) > to_stored_instant(self.end):
            return False
        return True


@dataclass(frozen=True)
class TypeWhitelistClause:
    tokens: tuple[str, ...]

    def condition(self):
        return or_(*[Event.event_type.contains(t, autoescape=True) for t in self.tokens])

    def matches(self, event) -> bool:
        return any(_contains(event.event_type, t) for t in self.tokens)


@dataclass(frozen=True)
class OrganizerWhitelistClause:
    tokens: tuple[str, ...]

    def condition(self):
        return or_(*[Event.organizer.contains(t, autoescape=True) for t in self.tokens])

    def matches(self, event) -> bool:
        return any(_contains(event.organizer, t) for t in self.tokens)


@dataclass(frozen=True)
class TagAllClause:
    tokens: tuple[str, ...]

    def condition(self):
        return and_(*[Event.tags.contains(t, autoescape=True) for t in self.tokens])

    def matches(self, event) -> bool:
        return all(_contains(event.tags, t) for t in self.tokens)


@dataclass(frozen=True)
class CreatorClause:
    creator_id: Optional[int]

    def condition(self):
        if self.creator_id is None:
            return Event.creator_id.is_(None)
        return Event.creator_id == self.creator_id

    def matches(self, event) -> bool:
        return event.creator_id == self.creator_id


@dataclass(frozen=True)
class PrecisionClause:
    precision: DatePrecision

    def condition(self):
        return Event.date_precision == self.precision

    def matches(self, event) -> bool:
        return event.date_precision == self.precision


FilterClause = Union[
    TimeRangeClause, TypeWhitelistClause, OrganizerWhitelistClause, TagAllClause, CreatorClause,
    PrecisionClause,
]


@dataclass
class EventFilter:
    clauses: list[FilterClause] = field(default_factory=list)

    def conditions(self) -> list:
        return [clause.condition() for clause in self.clauses]

    def matches(self, event) -> bool:
        return all(clause.matches(event) for clause in self.clauses)


class EventFilterBuilder:
    """Collects clauses; parameters left empty add nothing."""

    def __init__(self):
        self._clauses: list[FilterClause] = []

    def time_range(self, start: Optional[datetime] = None, end: Optional[datetime] = None):
        if start is not None or end is not None:
            self._clauses.append(TimeRangeClause(start, end))
        return self

    def event_types(self, raw: Optional[str]):
        tokens = tuple(split_list(raw))
        if tokens:
            self._clauses.append(TypeWhitelistClause(tokens))
        return self

    def organizers(self, raw: Optional[str]):
        tokens = tuple(split_list(raw))
        if tokens:
            self._clauses.append(OrganizerWhitelistClause(tokens))
        return self

    def tags(self, raw: Optional[str]):
        tokens = tuple(split_list(raw))
        if tokens:
            self._clauses.append(TagAllClause(tokens))
        return self

    def creator(self, creator_id: Optional[int] = UNSET):
        """None filters for unattributed events; leaving it UNSET adds no clause."""
        if creator_id is not UNSET:
            self._clauses.append(CreatorClause(creator_id))
        return self

    def precision(self, precision: Optional[DatePrecision]):
        if precision is not None:
            self._clauses.append(PrecisionClause(precision))
        return self

    def build(self) -> EventFilter:
        return EventFilter(list(self._clauses))


def build_filter(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    event_type: Optional[str] = None,
    organizer: Optional[str] = None,
    tags: Optional[str] = None,
    creator_id: Optional[int] = UNSET,
) -> EventFilter:
    return (
        EventFilterBuilder()
        .time_range(start_date, end_date)
        .event_types(event_type)
        .organizers(organizer)
        .tags(tags)
        .creator(creator_id)
        .build()
    )
