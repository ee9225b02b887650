"""Static lookup tables: organizer buckets and event-type categories.

Loaded once at import time and never mutated. Bump CATALOG_VERSION when a table changes
so clients caching labels or colors can tell.
"""
from types import MappingProxyType
from typing import Optional

from campus_calendar.models.event import OrganizationType

CATALOG_VERSION = 1

CENTERS = frozenset({
    "教科人管理中心",
    "科学研究中心",
    "产业发展中心",
    "智能创新中心",
    "行政管理中心",
    "党建思政与监督中心",
    "战略中心",
})

STUDENT_CLUB = "学生俱乐部"

ORGANIZER_OPTIONS = tuple(sorted(CENTERS)) + (STUDENT_CLUB, "其他")

EVENT_TYPES = MappingProxyType({
    "academic_research": MappingProxyType({
        "label": "学术研究",
        "color": "#3b82f6",
        "description": "科研项目、学术讲座、研讨会、论文答辩等学术活动",
    }),
    "teaching_training": MappingProxyType({
        "label": "教学培训",
        "color": "#22c55e",
        "description": "课程培训、技能工作坊、教学活动、在线课程等",
    }),
    "student_activities": MappingProxyType({
        "label": "学生活动",
        "color": "#f59e0b",
        "description": "社团活动、文体比赛、学生聚会、校园文化活动等",
    }),
    "industry_academia": MappingProxyType({
        "label": "产学研合作",
        "color": "#a855f7",
        "description": "企业合作项目、实习宣讲、产业对接、校企联合活动等",
    }),
    "administration": MappingProxyType({
        "label": "行政管理",
        "color": "#6b7280",
        "description": "部门会议、行政通知、制度培训、管理例会等",
    }),
    "important_deadlines": MappingProxyType({
        "label": "重要节点",
        "color": "#ef4444",
        "description": "项目截止、报名截止、材料提交、重要节点提醒等",
    }),
})

DEFAULT_EVENT_TYPE = "student_activities"

# Labels the image-understanding prompt may answer with
EVENT_TYPE_BY_LABEL = MappingProxyType({
    **{info["label"]: key for key, info in EVENT_TYPES.items()},
    "重要截止": "important_deadlines",
})


def organization_type_for(primary_organizer: Optional[str]) -> OrganizationType:
    """Bucket an organizer name; an empty organizer list means 'other'."""
    if not primary_organizer:
        return OrganizationType.other
    if primary_organizer in CENTERS:
        return OrganizationType.center
    if primary_organizer == STUDENT_CLUB:
        return OrganizationType.club
    return OrganizationType.other


def category_key(event_type: Optional[str]) -> str:
    """Category used for color/label; unknown or empty types fall back to the default."""
    if event_type and event_type in EVENT_TYPES:
        return event_type
    return DEFAULT_EVENT_TYPE


def event_type_color(event_type: Optional[str]) -> str:
    return EVENT_TYPES[category_key(event_type)]["color"]


def event_type_label(event_type: Optional[str]) -> Optional[str]:
    if not event_type or event_type not in EVENT_TYPES:
        return None
    return EVENT_TYPES[event_type]["label"]
