"""Pydantic schemas for Events.

Bodies use camelCase on the wire; snake_case is accepted on input too.
"""
from __future__ import annotations
from datetime import date as date_type, datetime
from typing import Optional, Any
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from campus_calendar.models.event import DatePrecision, RecurrenceRule
from campus_calendar.services import catalog
from campus_calendar.services.fields import normalize_tags, split_list, load_attendees
from campus_calendar.services.recurrence import coerce_rule
from campus_calendar.services.temporal import (
    as_utc,
    combine_date_hour,
    parse_month,
    to_wall_clock,
    HOUR_PATTERN,
)

CAMEL = {"alias_generator": to_camel, "populate_by_name": True}


def _check_http_url(value: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Malformed URL '{value}'")
    return value


class AttendeeRef(BaseModel):
    """A directory record: external user id + display name."""

    userid: str
    name: str


class EventPayload(BaseModel):
    """Create/update body. Exact events give startTime/endTime or date+startHour+endHour."""

    title: str = Field(..., min_length=1, max_length=255)
    content: Optional[str] = None
    image_url: Optional[str] = None
    link: Optional[str] = None
    location: Optional[str] = Field(None, max_length=255)
    organizer: Optional[str] = None
    event_type: Optional[str] = None
    tags: str = ""
    date_precision: DatePrecision = DatePrecision.exact
    approximate_month: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    date: Optional[date_type] = None
    start_hour: Optional[str] = None
    end_hour: Optional[str] = None
    recurrence_rule: RecurrenceRule = RecurrenceRule.none
    recurrence_end_date: Optional[datetime] = None
    required_attendees: Optional[list[AttendeeRef]] = None

    model_config = {**CAMEL}

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title must not be empty")
        return v.strip()

    @field_validator("content", "image_url", "link", "location", "organizer", "event_type",
                     "approximate_month", "start_hour", "end_hour", mode="before")
    @classmethod
    def _empty_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("link")
    @classmethod
    def _valid_link(cls, v: Optional[str]) -> Optional[str]:
        return _check_http_url(v) if v else v

    @field_validator("image_url")
    @classmethod
    def _valid_image_url(cls, v: Optional[str]) -> Optional[str]:
        # Uploaded posters are served from a relative path
        if v and not v.startswith("/"):
            _check_http_url(v)
        return v

    @field_validator("organizer")
    @classmethod
    def _canonical_organizer(cls, v: Optional[str]) -> Optional[str]:
        tokens = split_list(v)
        return ",".join(tokens) if tokens else None

    @field_validator("event_type")
    @classmethod
    def _known_event_type(cls, v: Optional[str]) -> Optional[str]:
        tokens = split_list(v)
        if not tokens:
            return None
        if len(tokens) > 1:
            raise ValueError("At most one event type may be given")
        if tokens[0] not in catalog.EVENT_TYPES:
            raise ValueError(f"Unknown event type '{tokens[0]}'")
        return tokens[0]

    @field_validator("tags", mode="before")
    @classmethod
    def _canonical_tags(cls, v: Any) -> str:
        return normalize_tags(v or "")

    @field_validator("approximate_month")
    @classmethod
    def _valid_month(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            parse_month(v)
        return v

    @field_validator("start_hour", "end_hour")
    @classmethod
    def _valid_hour(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not HOUR_PATTERN.match(v):
            raise ValueError(f"Invalid hour '{v}', expected HH:MM")
        return v

    @field_validator("recurrence_rule", mode="before")
    @classmethod
    def _lenient_rule(cls, v: Any) -> RecurrenceRule:
        return coerce_rule(v or RecurrenceRule.none)

    @model_validator(mode="after")
    def _check_precision_fields(self) -> "EventPayload":
        if self.date_precision == DatePrecision.month:
            if not self.approximate_month:
                raise ValueError("approximateMonth is required when datePrecision is 'month'")
            if self.recurrence_rule != RecurrenceRule.none:
                raise ValueError("recurrenceRule is only supported for exact-date events")
        else:
            if self.approximate_month:
                raise ValueError("approximateMonth is only allowed when datePrecision is 'month'")
            if self.date and self.start_hour and self.end_hour:
                self.start_time = combine_date_hour(self.date, self.start_hour)
                self.end_time = combine_date_hour(self.date, self.end_hour)
            if self.start_time is None or self.end_time is None:
                raise ValueError("startTime and endTime (or date, startHour and endHour) are required")
            if to_wall_clock(self.end_time) < to_wall_clock(self.start_time):
                raise ValueError("endTime must not be before startTime")

        if self.recurrence_rule == RecurrenceRule.none:
            self.recurrence_end_date = None
        elif self.recurrence_end_date is None:
            raise ValueError("recurrenceEndDate is required when recurrenceRule is not 'none'")
        return self


class EventCreate(EventPayload):
    pass


class EventUpdate(EventPayload):
    """Full replace of an event's fields; recurrence values are stored, not re-expanded."""


class EventOut(BaseModel):
    id: int
    title: str
    content: Optional[str] = None
    image_url: Optional[str] = None
    link: Optional[str] = None
    start_time: datetime
    end_time: datetime
    location: Optional[str] = None
    organizer: Optional[str] = None
    organization_type: str
    event_type: Optional[str] = None
    tags: str = ""
    recurrence_rule: str
    recurrence_end_date: Optional[datetime] = None
    date_precision: str
    approximate_month: Optional[str] = None
    required_attendees: list[AttendeeRef] = []
    creator_id: Optional[int] = None
    recurrence_group_id: Optional[int] = None
    recurrence_index: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {**CAMEL, "from_attributes": True}

    @field_validator("start_time", "end_time", "recurrence_end_date", "created_at", "updated_at")
    @classmethod
    def _utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)

    @field_validator("required_attendees", mode="before")
    @classmethod
    def _parse_attendees(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return load_attendees(v)
        return v

    @field_validator("organization_type", "recurrence_rule", "date_precision", mode="before")
    @classmethod
    def _enum_value(cls, v: Any) -> Any:
        return getattr(v, "value", v)


class EventSeriesOut(BaseModel):
    events: list[EventOut]
    count: int
    recurrence_group_id: Optional[int] = None

    model_config = {**CAMEL}


class CalendarExtendedProps(BaseModel):
    content: Optional[str] = None
    image_url: Optional[str] = None
    link: Optional[str] = None
    location: Optional[str] = None
    organizer: Optional[str] = None
    organization_type: str
    event_type: Optional[str] = None
    event_type_label: Optional[str] = None
    tags: str = ""
    recurrence_rule: str
    recurrence_group_id: Optional[int] = None
    required_attendees: list[AttendeeRef] = []
    creator_id: Optional[int] = None

    model_config = {**CAMEL}


class CalendarEventOut(BaseModel):
    """View-ready entry for calendar and list front ends."""

    id: str
    title: str
    start: datetime
    end: datetime
    all_day: bool
    background_color: str
    class_name: str
    date_precision: str
    approximate_month: Optional[str] = None
    date_label: str
    extended_props: CalendarExtendedProps

    model_config = {**CAMEL}


class TagCount(BaseModel):
    name: str
    count: int
