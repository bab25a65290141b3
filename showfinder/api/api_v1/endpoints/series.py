from typing import List
from fastapi import APIRouter, HTTPException
import logging

from showfinder.schemas.api import DuplicateRequest, ShowPairRequest
from showfinder.schemas.show import DuplicateCandidate, RecurrencePrediction, SeriesCandidatePair
from showfinder.services.series_detection import compare_for_series, predict_from_pair, predict_next
from showfinder.utils.deduplication import find_duplicate_submissions

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("/compare", response_model=SeriesCandidatePair)
def compare_shows(request: ShowPairRequest) -> SeriesCandidatePair:
    """Score two shows for membership in the same recurring series."""
    return compare_for_series(request.first, request.second)

@router.post("/predict", response_model=RecurrencePrediction)
def predict_next_show(request: ShowPairRequest) -> RecurrencePrediction:
    """
    Predict the next occurrence of a series from two occurrences.

    Responds 422 when the dates cannot define an interval, or when
    require_same_series is set and the pair scores below the threshold.
    """
    try:
        if request.require_same_series:
            return predict_from_pair(compare_for_series(request.first, request.second))
        return predict_next(request.first, request.second)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

@router.post("/duplicates", response_model=List[DuplicateCandidate])
def find_duplicates(request: DuplicateRequest) -> List[DuplicateCandidate]:
    """Scan submissions pairwise for likely duplicates."""
    return find_duplicate_submissions(
        request.shows,
        threshold=request.threshold,
        max_results=request.max_results
    )
