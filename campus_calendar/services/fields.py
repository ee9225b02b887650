"""Parsing for the delimited text columns (organizer, event_type, tags, required_attendees).

Storage keeps these as plain strings and the query composer matches by substring, so every
split/join rule lives here and nowhere else.
"""
import json
import logging
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)

MAX_TAG_LENGTH = 20
TAG_PATTERN = re.compile(r"#[^#]+#")


def split_list(value: Optional[str]) -> list[str]:
    """Split a comma-joined value into trimmed, non-empty tokens."""
    if not value:
        return []
    return [token.strip() for token in value.split(",") if token.strip()]


def join_list(tokens: list[str]) -> Optional[str]:
    cleaned = [t.strip() for t in tokens if t and t.strip()]
    return ",".join(cleaned) if cleaned else None


def primary_token(value: Optional[str]) -> Optional[str]:
    tokens = split_list(value)
    return tokens[0] if tokens else None


def normalize_tags(raw: Optional[str]) -> str:
    """Canonicalize user tag input to '#a# #b#'.

    Tokens are whitespace separated and may or may not carry the '#' wrapping.
    Raises ValueError when a tag's content exceeds MAX_TAG_LENGTH characters.
    """
    if not raw:
        return ""
    seen: list[str] = []
    for part in raw.split():
        content = part.strip("#")
        if not content:
            continue
        if len(content) > MAX_TAG_LENGTH:
            raise ValueError(f"Tag '{content}' exceeds {MAX_TAG_LENGTH} characters")
        tag = f"#{content}#"
        if tag not in seen:
            seen.append(tag)
    return " ".join(seen)


def extract_tags(stored: Optional[str]) -> list[str]:
    """All '#tag#' tokens of a stored tag string, in order."""
    if not stored:
        return []
    return TAG_PATTERN.findall(stored)


def dump_attendees(attendees: Optional[list[dict[str, Any]]]) -> Optional[str]:
    if not attendees:
        return None
    return json.dumps(
        [{"userid": a["userid"], "name": a["name"]} for a in attendees],
        ensure_ascii=False,
    )


def load_attendees(stored: Optional[str]) -> list[dict[str, Any]]:
    if not stored:
        return []
    try:
        parsed = json.loads(stored)
    except json.JSONDecodeError:
        logger.warning("Unreadable required_attendees value: %r", stored[:80])
        return []
    return parsed if isinstance(parsed, list) else []
