"""User API routes."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from campus_calendar.database import get_db
from campus_calendar.models.user import User
from campus_calendar.schemas.event import AttendeeRef
from campus_calendar.schemas.user import UserCreate, UserOut
from campus_calendar.services.identity import search_directory

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def upsert_user(payload: UserCreate, db: Session = Depends(get_db)):
    """Record a signed-in directory user, refreshing the profile if already known."""
    user = db.query(User).filter(User.external_user_id == payload.external_user_id).first()
    if user:
        for field, value in payload.model_dump().items():
            setattr(user, field, value)
    else:
        user = User(**payload.model_dump())
        db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Stored user %s (%s)", user.id, user.external_user_id)
    return user


@router.get("/", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db)):
    """List all users."""
    return db.query(User).order_by(User.id).all()


@router.get("/directory", response_model=list[AttendeeRef])
def directory(search: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """Directory records usable as required attendees."""
    return search_directory(db, search)


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, db: Session = Depends(get_db)):
    """Fetch a single user by ID."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
