"""Current-user resolution and directory lookup.

Authentication happens upstream; requests arrive with the signed-in user's id in the
X-User-Id header. Lookups that fail leave the caller anonymous rather than failing the
request.
"""
import logging
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campus_calendar.database import get_db
from campus_calendar.models.user import User

logger = logging.getLogger(__name__)


def resolve_user_id(db: Session, user_id: Optional[int]) -> Optional[int]:
    if user_id is None:
        return None
    try:
        user = db.query(User).filter(User.id == user_id).first()
    except SQLAlchemyError as e:
        logger.warning("Identity lookup failed for user %s: %s", user_id, e)
        db.rollback()
        return None
    return user.id if user else None


def get_current_user_id(
    x_user_id: Optional[int] = Header(None),
    db: Session = Depends(get_db),
) -> Optional[int]:
    """FastAPI dependency: the caller's user id, or None when anonymous."""
    return resolve_user_id(db, x_user_id)


def search_directory(db: Session, search: Optional[str] = None, limit: int = 50) -> list[dict]:
    """Directory records {userid, name} for picking required attendees.

    Matches name or external id, case-insensitively. An unreachable directory yields [].
    """
    try:
        query = db.query(User)
        if search and search.strip():
            term = f"%{search.strip()}%"
            query = query.filter(or_(User.name.ilike(term), User.external_user_id.ilike(term)))
        users = query.order_by(User.name).limit(limit).all()
    except SQLAlchemyError as e:
        logger.warning("Directory search failed: %s", e)
        db.rollback()
        return []
    return [{"userid": u.external_user_id, "name": u.name} for u in users]
