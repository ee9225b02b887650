"""Poster analysis route — suggests form values from an uploaded poster."""
import logging
from fastapi import APIRouter

from campus_calendar.schemas.poster import PosterAnalysisOut, PosterAnalysisRequest
from campus_calendar.services import poster_analysis

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/analyze", response_model=PosterAnalysisOut)
def analyze(payload: PosterAnalysisRequest):
    """Run image understanding on a poster and merge the result into the form values.

    When the service is unavailable the form values come back unchanged.
    """
    suggestions = poster_analysis.analyze_poster(payload.image_url)
    if suggestions is None:
        return PosterAnalysisOut(success=False, merged=payload.current)
    return PosterAnalysisOut(
        success=True,
        suggestions=suggestions,
        merged=poster_analysis.merge_suggestions(payload.current, suggestions),
    )
