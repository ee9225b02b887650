"""Pydantic schemas for poster analysis."""
from typing import Any, Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class PosterAnalysisRequest(BaseModel):
    image_url: str = Field(..., min_length=1)
    current: dict[str, Any] = {}  # form values the user already entered

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class PosterAnalysisOut(BaseModel):
    success: bool
    suggestions: Optional[dict[str, Any]] = None
    merged: dict[str, Any] = {}
