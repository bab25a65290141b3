from typing import Any, Dict, List, Optional
from datetime import date, timedelta
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError
import logging

from showfinder.api.deps import get_orchestrator
from showfinder.config import get_settings
from showfinder.schemas.api import ParseRequest, ParseResponse
from showfinder.schemas.show import Coordinate, SearchQuery, SearchResultPage
from showfinder.services.error_handling import ResolutionFailure, SearchUnavailable
from showfinder.services.field_parser import parse_show_text
from showfinder.services.show_search import RadiusSearchOrchestrator
from showfinder.utils.deduplication import calculate_quality_score

logger = logging.getLogger(__name__)
router = APIRouter()

def _date_window(start_date: Optional[date], end_date: Optional[date]) -> Optional[tuple]:
    if start_date is None and end_date is None:
        return None
    window_days = get_settings().DEFAULT_WINDOW_DAYS
    if start_date is None:
        start_date = min(date.today(), end_date)
    if end_date is None:
        end_date = start_date + timedelta(days=window_days)
    return start_date, end_date

@router.get("/nearby", response_model=SearchResultPage)
def search_nearby_shows(
    latitude: Optional[float] = Query(None, description="Origin latitude"),
    longitude: Optional[float] = Query(None, description="Origin longitude"),
    zip_code: Optional[str] = Query(None, description="ZIP code or address used when no coordinates are given"),
    radius_miles: Optional[float] = Query(None, gt=0),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    max_entry_fee: Optional[float] = Query(None, ge=0),
    categories: Optional[List[str]] = Query(None),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    allow_degraded: bool = False,
    orchestrator: RadiusSearchOrchestrator = Depends(get_orchestrator)
) -> SearchResultPage:
    """
    Find upcoming shows near a point or ZIP code.

    Returns:
        One page of results ordered by start date, then distance
    """
    params: Dict[str, Any] = {
        'radius_miles': radius_miles,
        'date_window': _date_window(start_date, end_date),
        'max_entry_fee': max_entry_fee,
        'categories': categories,
        'page': page,
        'page_size': page_size,
        'allow_degraded': allow_degraded
    }
    params = {key: value for key, value in params.items() if value is not None}

    try:
        if latitude is not None and longitude is not None:
            query = SearchQuery(origin=Coordinate(latitude=latitude, longitude=longitude), **params)
            return orchestrator.search(query)
        if zip_code:
            return orchestrator.search_near(zip_code, **params)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ResolutionFailure as e:
        raise HTTPException(status_code=422, detail=str(e))
    except SearchUnavailable as e:
        logger.error(f"Nearby search unavailable: {str(e)}")
        raise HTTPException(status_code=503, detail=str(e))

    raise HTTPException(
        status_code=422,
        detail="Provide latitude and longitude, or a zip_code"
    )

@router.post("/parse", response_model=ParseResponse)
def parse_show(request: ParseRequest) -> ParseResponse:
    """Extract structured fields from one line of scraped show text."""
    parsed = parse_show_text(request.text)
    record = parsed.to_record()
    return ParseResponse(
        parsed=parsed,
        record=record,
        quality=calculate_quality_score(record)
    )
