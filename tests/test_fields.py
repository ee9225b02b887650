"""Tests for the delimited text fields and the static catalog."""
import pytest

from campus_calendar.models.event import OrganizationType
from campus_calendar.services import catalog
from campus_calendar.services.fields import (
    dump_attendees,
    extract_tags,
    load_attendees,
    normalize_tags,
    primary_token,
    split_list,
)


class TestTags:

    def test_normalize_wraps_and_joins(self):
        assert normalize_tags("讲座 #直播#") == "#讲座# #直播#"

    def test_normalize_dedupes(self):
        assert normalize_tags("#讲座# 讲座 #直播#") == "#讲座# #直播#"

    def test_normalize_empty(self):
        assert normalize_tags("") == ""
        assert normalize_tags("  ## ") == ""

    def test_tag_length_limit(self):
        assert normalize_tags("a" * 20) == f"#{'a' * 20}#"
        with pytest.raises(ValueError):
            normalize_tags("a" * 21)

    def test_extract(self):
        assert extract_tags("#讲座# #直播# #外事活动#") == ["#讲座#", "#直播#", "#外事活动#"]
        assert extract_tags(None) == []


class TestLists:

    def test_split_trims_and_drops_empty(self):
        assert split_list(" 科学研究中心, ,学生俱乐部 ") == ["科学研究中心", "学生俱乐部"]
        assert split_list(None) == []

    def test_primary_token(self):
        assert primary_token("科学研究中心,学生俱乐部") == "科学研究中心"
        assert primary_token("") is None

    def test_attendees_round_trip(self):
        stored = dump_attendees([{"userid": "u1", "name": "张三"}])
        assert "张三" in stored
        assert load_attendees(stored) == [{"userid": "u1", "name": "张三"}]
        assert dump_attendees([]) is None

    def test_unreadable_attendees(self):
        assert load_attendees("not json") == []
        assert load_attendees('{"userid": "u1"}') == []


class TestCatalog:

    def test_organization_type(self):
        assert catalog.organization_type_for("科学研究中心") == OrganizationType.center
        assert catalog.organization_type_for("学生俱乐部") == OrganizationType.club
        assert catalog.organization_type_for("校友会") == OrganizationType.other
        assert catalog.organization_type_for(None) == OrganizationType.other

    def test_unknown_type_uses_default_color(self):
        default_color = catalog.EVENT_TYPES[catalog.DEFAULT_EVENT_TYPE]["color"]
        assert catalog.event_type_color(None) == default_color
        assert catalog.event_type_color("mystery") == default_color
        assert catalog.event_type_color("academic_research") == "#3b82f6"

    def test_labels(self):
        assert catalog.event_type_label("administration") == "行政管理"
        assert catalog.event_type_label("mystery") is None
        assert catalog.EVENT_TYPE_BY_LABEL["重要截止"] == "important_deadlines"

    def test_catalog_read_only(self):
        with pytest.raises(TypeError):
            catalog.EVENT_TYPES["new_type"] = {}
