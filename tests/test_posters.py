"""Tests for poster analysis: reply parsing, form merging and the API route."""
import json
from types import SimpleNamespace

import pytest

from campus_calendar.config import settings
from campus_calendar.services import poster_analysis
from campus_calendar.services.poster_analysis import (
    PosterAnalysisError,
    analyze_poster,
    merge_suggestions,
    normalize_extraction,
    parse_model_reply,
)


class _StubCompletions:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _stub_client(reply=None, error=None):
    completions = _StubCompletions(reply, error)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


MODEL_REPLY = {
    "title": "人工智能前沿讲座",
    "content": "邀请知名学者分享",
    "date": "2026-03-15",
    "startTime": "14:00",
    "endTime": "16:00",
    "location": "报告厅",
    "organizers": ["科学研究中心", "学生俱乐部"],
    "eventType": "学术研究",
    "tags": ["#讲座#", "直播"],
    "link": None,
    "datePrecision": "exact",
}


class TestNormalizeExtraction:

    def test_exact_reply(self):
        result = normalize_extraction(MODEL_REPLY)
        assert result["title"] == "人工智能前沿讲座"
        assert result["date"] == "2026-03-15"
        assert result["startHour"] == "14:00"
        assert result["endHour"] == "16:00"
        assert result["organizer"] == "科学研究中心,学生俱乐部"
        assert result["eventType"] == "academic_research"
        assert result["tags"] == "#讲座# #直播#"
        assert result["datePrecision"] == "exact"
        assert result["approximateMonth"] is None

    def test_month_only_date(self):
        result = normalize_extraction({"date": "2026-07", "datePrecision": "exact"})
        assert result["datePrecision"] == "month"
        assert result["approximateMonth"] == "2026-07"
        assert result["date"] is None

    def test_month_precision_without_month_falls_back(self):
        result = normalize_extraction({"date": None, "datePrecision": "month"})
        assert result["datePrecision"] == "exact"

    def test_malformed_values_dropped(self):
        result = normalize_extraction({
            "date": "March 15", "startTime": "2pm", "eventType": "聚会", "tags": ["#" + "长" * 30 + "#"],
        })
        assert result["date"] is None
        assert result["startHour"] is None
        assert result["eventType"] is None
        assert result["tags"] == ""

    def test_deadline_label_alias(self):
        assert normalize_extraction({"eventType": "重要截止"})["eventType"] == "important_deadlines"


class TestParseReply:

    def test_json_inside_prose(self):
        reply = "以下是提取结果：\n```json\n" + json.dumps({"title": "x"}) + "\n```"
        assert parse_model_reply(reply) == {"title": "x"}

    def test_garbage_reply(self):
        with pytest.raises(PosterAnalysisError):
            parse_model_reply("no json here")


class TestMergeSuggestions:

    def test_fills_only_empty_fields(self):
        current = {"title": "我的标题", "location": "", "content": None}
        merged = merge_suggestions(current, {"title": "海报标题", "location": "报告厅", "content": "介绍"})
        assert merged["title"] == "我的标题"
        assert merged["location"] == "报告厅"
        assert merged["content"] == "介绍"

    def test_timing_moves_as_unit(self):
        suggestion = {"date": "2026-03-15", "startHour": "14:00", "endHour": "16:00", "datePrecision": "exact"}
        merged = merge_suggestions({"startHour": "09:00"}, suggestion)
        assert merged == {"startHour": "09:00"}
        assert merge_suggestions({}, suggestion) == suggestion

    def test_tags_unioned(self):
        merged = merge_suggestions({"tags": "#讲座#"}, {"tags": "#讲座# #直播#"})
        assert merged["tags"] == "#讲座# #直播#"

    def test_current_not_mutated(self):
        current = {"title": ""}
        merge_suggestions(current, {"title": "海报标题"})
        assert current == {"title": ""}


class TestAnalyzePoster:

    def test_uses_client_reply(self):
        client, completions = _stub_client(json.dumps(MODEL_REPLY, ensure_ascii=False))
        result = analyze_poster("https://example.edu/poster.png", client=client)
        assert result["eventType"] == "academic_research"
        call = completions.calls[0]
        assert call["model"] == settings.VISION_MODEL
        assert call["messages"][0]["content"][0]["image_url"]["url"] == "https://example.edu/poster.png"

    def test_local_poster_inlined(self, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "POSTERS_DIR", str(tmp_path))
        (tmp_path / "p1.png").write_bytes(b"\x89PNG")
        client, completions = _stub_client(json.dumps({"title": "x"}))
        analyze_poster("/api/posters/p1.png", client=client)
        url = completions.calls[0]["messages"][0]["content"][0]["image_url"]["url"]
        assert url.startswith("data:image/png;base64,")

    def test_service_error_returns_none(self):
        client, _ = _stub_client(error=RuntimeError("upstream down"))
        assert analyze_poster("https://example.edu/poster.png", client=client) is None

    def test_no_api_key_returns_none(self, monkeypatch):
        monkeypatch.setattr(settings, "OPENAI_API_KEY", "")
        assert analyze_poster("https://example.edu/poster.png") is None


class TestPosterRoute:
    """POST /api/posters/analyze"""

    def test_success_merges(self, client, monkeypatch):
        monkeypatch.setattr(poster_analysis, "analyze_poster",
                            lambda image_url: {"title": "海报标题", "location": "报告厅"})
        resp = client.post("/api/posters/analyze", json={
            "imageUrl": "/api/posters/p1.png",
            "current": {"title": "我的标题"},
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["merged"] == {"title": "我的标题", "location": "报告厅"}

    def test_unavailable_returns_current(self, client, monkeypatch):
        monkeypatch.setattr(poster_analysis, "analyze_poster", lambda image_url: None)
        resp = client.post("/api/posters/analyze", json={
            "imageUrl": "/api/posters/p1.png",
            "current": {"title": "我的标题"},
        })
        assert resp.status_code == 200
        assert resp.json() == {"success": False, "suggestions": None, "merged": {"title": "我的标题"}}

    def test_missing_image_rejected(self, client):
        assert client.post("/api/posters/analyze", json={"current": {}}).status_code == 422
