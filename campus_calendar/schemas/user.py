"""Pydantic schemas for Users."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class UserCreate(BaseModel):
    """Directory record as delivered by the identity provider on sign-in."""

    external_user_id: str = Field(..., min_length=1)
    union_id: Optional[str] = None
    name: str = Field(..., min_length=1)
    avatar: Optional[str] = None
    email: Optional[str] = None
    mobile: Optional[str] = None

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class UserOut(BaseModel):
    id: int
    external_user_id: str
    name: str
    avatar: Optional[str] = None
    email: Optional[str] = None
    mobile: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "from_attributes": True}
