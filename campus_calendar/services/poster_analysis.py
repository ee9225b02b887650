"""Poster image understanding — suggests event fields from an uploaded poster.

Calls a vision model through an OpenAI-compatible chat endpoint. The result is only a
suggestion for a form the user has not submitted yet: nothing here validates or stores
it, and merge_suggestions never overwrites a field the user already filled in.

Poster uploads are handled by the upload collaborator, not this service: it writes files
into POSTERS_DIR and serves them as /api/posters/<filename>. Image URLs with that prefix
are read from POSTERS_DIR and sent inline, since the vision endpoint cannot reach them;
any other URL is passed to the model as-is.
"""
import base64
import json
import logging
import mimetypes
import os
import re
from typing import Any, Optional

from openai import OpenAI

from campus_calendar.config import settings
from campus_calendar.services.catalog import EVENT_TYPE_BY_LABEL
from campus_calendar.services.fields import join_list, normalize_tags
from campus_calendar.services.temporal import MONTH_PATTERN, HOUR_PATTERN

logger = logging.getLogger(__name__)

LOCAL_POSTER_PREFIX = "/api/posters/"
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

TIMING_FIELDS = ("date", "startHour", "endHour", "datePrecision", "approximateMonth")
TIMING_INPUTS = ("date", "startHour", "endHour", "startTime", "endTime", "approximateMonth")

PROMPT = """请分析这张活动海报或图片，提取以下信息（如果图片中没有某些信息，请返回 null）：

1. 活动标题
2. 活动内容/描述
3. 活动日期（YYYY-MM-DD格式，如果只有月份返回 YYYY-MM）
4. 开始时间（HH:MM格式，24小时制）
5. 结束时间（HH:MM格式，24小时制）
6. 活动地点
7. 主办方/发起者（可能是多个）
8. 活动类型（从以下选择最匹配的：学术研究、教学培训、学生活动、产学研合作、行政管理、重要节点）
9. 相关标签（用 # 包裹，例如：#讲座# #直播#）
10. 活动链接/报名链接

请以 JSON 格式返回：
{"title": "...", "content": "...", "date": "2024-03-15", "startTime": "14:00", "endTime": "16:00",
 "location": "...", "organizers": ["..."], "eventType": "学术研究", "tags": ["#讲座#"],
 "link": "https://...", "datePrecision": "exact"}

如果只能确定月份，请设置 datePrecision 为 "month"，date 设为 YYYY-MM 格式。"""


class PosterAnalysisError(Exception):
    """The vision service could not produce a usable extraction."""


def _image_reference(image_url: str) -> str:
    """Inline locally stored posters as a data URL; remote URLs pass through."""
    if not image_url.startswith(LOCAL_POSTER_PREFIX):
        return image_url
    filename = os.path.basename(image_url[len(LOCAL_POSTER_PREFIX):])
    path = os.path.join(settings.POSTERS_DIR, filename)
    with open(path, "rb") as f:
        encoded = base64.b64encode(f.read()).decode("ascii")
    mime = mimetypes.guess_type(filename)[0] or "image/jpeg"
    return f"data:{mime};base64,{encoded}"


def _as_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, list):
        return [str(v) for v in value if v]
    return [str(value)]


def normalize_extraction(raw: dict[str, Any]) -> dict[str, Any]:
    """Map the model's JSON onto form field names and value formats."""
    date_value = raw.get("date") or None
    precision = raw.get("datePrecision") or "exact"
    approximate_month = None
    if date_value and MONTH_PATTERN.match(date_value):
        precision, approximate_month, date_value = "month", date_value, None
    elif date_value and not DATE_PATTERN.match(date_value):
        date_value = None
    if precision == "month" and not approximate_month:
        precision = "exact"

    tags = []
    for tag in _as_list(raw.get("tags")):
        try:
            tags.append(normalize_tags(tag))
        except ValueError:
            logger.info("Dropping suggested tag %r (too long)", tag)

    start_hour = raw.get("startTime") or None
    end_hour = raw.get("endTime") or None
    return {
        "title": raw.get("title") or None,
        "content": raw.get("content") or None,
        "date": date_value,
        "startHour": start_hour if start_hour and HOUR_PATTERN.match(start_hour) else None,
        "endHour": end_hour if end_hour and HOUR_PATTERN.match(end_hour) else None,
        "location": raw.get("location") or None,
        "organizer": join_list(_as_list(raw.get("organizers"))),
        "eventType": EVENT_TYPE_BY_LABEL.get(raw.get("eventType") or ""),
        "tags": normalize_tags(" ".join(t for t in tags if t)),
        "link": raw.get("link") or None,
        "datePrecision": precision,
        "approximateMonth": approximate_month,
    }


def parse_model_reply(content: str) -> dict[str, Any]:
    match = JSON_OBJECT.search(content or "")
    try:
        parsed = json.loads(match.group(0) if match else content)
    except (json.JSONDecodeError, TypeError) as e:
        raise PosterAnalysisError(f"Unparseable model reply: {e}") from e
    if not isinstance(parsed, dict):
        raise PosterAnalysisError("Model reply is not a JSON object")
    return parsed


def analyze_poster(image_url: str, client: Optional[OpenAI] = None) -> Optional[dict[str, Any]]:
    """Suggested field values for a poster, or None when the service is unavailable."""
    if client is None:
        if not settings.OPENAI_API_KEY:
            logger.warning("Vision API key not configured — skipping poster analysis")
            return None
        client = OpenAI(api_key=settings.OPENAI_API_KEY, base_url=settings.OPENAI_BASE_URL)

    try:
        response = client.chat.completions.create(
            model=settings.VISION_MODEL,
            messages=[{
                "role": "user",
                "content": [
                    {"type": "image_url", "image_url": {"url": _image_reference(image_url)}},
                    {"type": "text", "text": PROMPT},
                ],
            }],
            max_tokens=1000,
            temperature=0.1,
        )
        reply = response.choices[0].message.content
        return normalize_extraction(parse_model_reply(reply))
    except Exception as e:
        logger.warning("Poster analysis failed for %s: %s", image_url, e)
        return None


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def merge_suggestions(current: dict[str, Any], suggestion: dict[str, Any]) -> dict[str, Any]:
    """Fill empty form fields from a suggestion; filled fields win. Tags are unioned.

    Date/time fields move as one unit: if the user entered any timing, none of the
    suggested timing is applied.
    """
    merged = dict(current)
    timing_filled = any(not _is_empty(current.get(f)) for f in TIMING_INPUTS)
    for field, value in suggestion.items():
        if _is_empty(value) or field == "tags":
            continue
        if field in TIMING_FIELDS:
            if not timing_filled:
                merged[field] = value
        elif _is_empty(merged.get(field)):
            merged[field] = value
    if suggestion.get("tags"):
        try:
            merged["tags"] = normalize_tags(f"{current.get('tags') or ''} {suggestion['tags']}")
        except ValueError:
            merged["tags"] = current.get("tags") or suggestion["tags"]
    return merged
