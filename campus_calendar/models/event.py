"""Event and RecurrenceGroup ORM models."""
import enum
from sqlalchemy import Column, String, Text, DateTime, Integer, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from campus_calendar.database import Base


class DatePrecision(str, enum.Enum):
    exact = "exact"
    month = "month"


class RecurrenceRule(str, enum.Enum):
    none = "none"
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"


class OrganizationType(str, enum.Enum):
    center = "center"
    club = "club"
    other = "other"


class RecurrenceGroup(Base):
    """One record per recurring create; its events reference it by id + index."""

    __tablename__ = "recurrence_groups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    rule = Column(SAEnum(RecurrenceRule), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    events = relationship("Event", back_populates="recurrence_group", order_by="Event.recurrence_index")


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    link = Column(Text, nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=False, index=True)
    end_time = Column(DateTime(timezone=True), nullable=False)
    location = Column(String(255), nullable=True)
    organizer = Column(Text, nullable=True)  # comma-joined names
    organization_type = Column(SAEnum(OrganizationType), nullable=False, default=OrganizationType.other)
    event_type = Column(Text, nullable=True)
    tags = Column(Text, nullable=False, default="")  # "#a# #b#"
    recurrence_rule = Column(SAEnum(RecurrenceRule), nullable=False, default=RecurrenceRule.none)
    recurrence_end_date = Column(DateTime(timezone=True), nullable=True)
    date_precision = Column(SAEnum(DatePrecision), nullable=False, default=DatePrecision.exact)
    approximate_month = Column(String(7), nullable=True)  # YYYY-MM
    required_attendees = Column(Text, nullable=True)  # JSON list of {userid, name}
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    recurrence_group_id = Column(Integer, ForeignKey("recurrence_groups.id"), nullable=True, index=True)
    recurrence_index = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    recurrence_group = relationship("RecurrenceGroup", back_populates="events")
