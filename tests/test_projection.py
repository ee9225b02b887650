"""Tests for the calendar/list projection."""
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from campus_calendar.config import settings
from campus_calendar.models.event import DatePrecision, OrganizationType, RecurrenceRule
from campus_calendar.services import catalog
from campus_calendar.services.projection import (
    UNCERTAIN_CLASS,
    CalendarView,
    is_all_day,
    parse_view,
    project,
    project_for_view,
    visible_in_view,
)


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def _event(id=1, **overrides):
    values = {
        "id": id,
        "title": "Lecture",
        "content": None,
        "image_url": None,
        "link": None,
        "location": "A101",
        "organizer": "科学研究中心",
        "organization_type": OrganizationType.center,
        "event_type": "academic_research",
        "tags": "#讲座#",
        "recurrence_rule": RecurrenceRule.none,
        "recurrence_group_id": None,
        "required_attendees": None,
        "creator_id": None,
        "date_precision": DatePrecision.exact,
        "approximate_month": None,
        "start_time": _utc(2026, 7, 15, 9, 0),
        "end_time": _utc(2026, 7, 15, 10, 0),
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def _month_event(id=2, month="2026-07"):
    return _event(
        id=id,
        date_precision=DatePrecision.month,
        approximate_month=month,
        start_time=_utc(2026, 7, 15, 0, 0),
        end_time=_utc(2026, 7, 15, 23, 59, 59),
    )


class TestAllDay:

    def test_midnight_to_2359(self):
        assert is_all_day(_utc(2026, 3, 2, 0, 0), _utc(2026, 3, 2, 23, 59))

    def test_midnight_to_next_midnight(self):
        assert is_all_day(_utc(2026, 3, 2, 0, 0), _utc(2026, 3, 4, 0, 0))

    def test_timed_event(self):
        assert not is_all_day(_utc(2026, 3, 2, 9, 0), _utc(2026, 3, 2, 23, 59))
        assert not is_all_day(_utc(2026, 3, 2, 0, 0), _utc(2026, 3, 2, 18, 0))

    def test_evaluated_in_calendar_zone(self, monkeypatch):
        monkeypatch.setattr(settings, "CALENDAR_TIMEZONE", "Asia/Shanghai")
        # 00:00-23:59 Shanghai time
        assert is_all_day(_utc(2026, 3, 1, 16, 0), _utc(2026, 3, 2, 15, 59))
        assert not is_all_day(_utc(2026, 3, 2, 0, 0), _utc(2026, 3, 2, 23, 59))


class TestViews:

    @pytest.mark.parametrize("name,expected", [
        ("month", CalendarView.month),
        ("dayGridMonth", CalendarView.month),
        ("timeGridWeek", CalendarView.week),
        ("timeGridDay", CalendarView.day),
        ("multiMonthYear", CalendarView.year),
        ("listWeek", CalendarView.week),
        ("list", CalendarView.list),
    ])
    def test_parse_view(self, name, expected):
        assert parse_view(name) == expected

    def test_unknown_view(self):
        with pytest.raises(ValueError):
            parse_view("agenda")

    def test_month_precision_hidden_in_time_grids(self):
        assert visible_in_view(DatePrecision.month, CalendarView.month)
        assert visible_in_view(DatePrecision.month, CalendarView.year)
        assert not visible_in_view(DatePrecision.month, CalendarView.week)
        assert not visible_in_view(DatePrecision.month, CalendarView.day)
        assert visible_in_view(DatePrecision.exact, CalendarView.day)

    def test_project_for_view_filters(self):
        events = [_event(), _month_event()]
        assert [e.id for e in project_for_view(events, CalendarView.week)] == ["1"]
        assert [e.id for e in project_for_view(events, CalendarView.month)] == ["2", "1"]
        assert len(project_for_view(events)) == 2


class TestProjectedEntry:

    def test_exact_entry(self):
        entry = project(_event())
        assert entry.id == "1"
        assert entry.all_day is False
        assert entry.class_name == ""
        assert entry.date_precision == "exact"
        assert entry.background_color == catalog.EVENT_TYPES["academic_research"]["color"]
        assert entry.extended_props.event_type_label == "学术研究"
        assert entry.extended_props.organization_type == "center"

    def test_month_entry(self):
        entry = project(_month_event())
        assert entry.start == _utc(2026, 7, 15, 0, 0, 0)
        assert entry.end == _utc(2026, 7, 15, 23, 59, 59)
        assert entry.all_day is False
        assert entry.class_name == UNCERTAIN_CLASS
        assert entry.approximate_month == "2026-07"
        assert entry.date_label == "2026年7月（日期待定）"

    def test_default_color(self):
        entry = project(_event(event_type=None))
        assert entry.background_color == catalog.EVENT_TYPES[catalog.DEFAULT_EVENT_TYPE]["color"]
        assert entry.extended_props.event_type_label is None

    def test_display_order(self):
        """Same anchor: exact before month; then by id."""
        events = [
            _month_event(id=5),
            _event(id=4, start_time=_utc(2026, 7, 15, 0, 0), end_time=_utc(2026, 7, 15, 1, 0)),
            _event(id=3, start_time=_utc(2026, 7, 15, 0, 0), end_time=_utc(2026, 7, 15, 2, 0)),
            _event(id=1, start_time=_utc(2026, 7, 1, 9, 0), end_time=_utc(2026, 7, 1, 10, 0)),
        ]
        assert [e.id for e in project_for_view(events)] == ["1", "3", "4", "5"]

    def test_attendees_and_naive_storage(self):
        entry = project(_event(
            start_time=datetime(2026, 7, 15, 9, 0),
            end_time=datetime(2026, 7, 15, 10, 0),
            required_attendees='[{"userid": "u1", "name": "张三"}]',
        ))
        assert entry.start == _utc(2026, 7, 15, 9, 0)
        assert entry.extended_props.required_attendees[0].name == "张三"
