"""User ORM model — directory-backed identity records."""
from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from campus_calendar.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    external_user_id = Column(String(255), nullable=False, unique=True)  # directory userid
    union_id = Column(String(255), nullable=True)
    name = Column(String(255), nullable=False)
    avatar = Column(Text, nullable=True)
    email = Column(String(255), nullable=True)
    mobile = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
