"""
Series detection and recurrence prediction.

Two show records belong to the same series when enough of the signals below
agree. Scores are additive and capped at 100:

    venue name match      30
    address match         30
    within 0.1 mile       20
    monthly/weekday date  10
    identical hours       10
"""

import logging
from datetime import timedelta
from typing import Optional

from showfinder.schemas.show import RecurrencePrediction, SeriesCandidatePair, ShowRecord
from showfinder.services.location_services import is_same_building

logger = logging.getLogger(__name__)

VENUE_WEIGHT = 30
ADDRESS_WEIGHT = 30
PROXIMITY_WEIGHT = 20
DATE_PATTERN_WEIGHT = 10
TIME_PATTERN_WEIGHT = 10

SERIES_CONFIDENCE_THRESHOLD = 60

MONTHLY_MIN_DAYS = 28
MONTHLY_MAX_DAYS = 35

def _same_text(value1: Optional[str], value2: Optional[str]) -> bool:
    """Exact match after trimming; absent or blank values never match."""
    if not value1 or not value2:
        return False
    value1, value2 = value1.strip(), value2.strip()
    return bool(value1) and value1 == value2

def is_date_pattern(show1: ShowRecord, show2: ShowRecord) -> bool:
    """True for a roughly monthly gap or two shows on the same weekday."""
    if show1.start_date is None or show2.start_date is None:
        return False
    gap = abs((show2.start_date - show1.start_date).days)
    if MONTHLY_MIN_DAYS <= gap <= MONTHLY_MAX_DAYS:
        return True
    return show1.start_date.weekday() == show2.start_date.weekday()

def compare_for_series(show1: ShowRecord, show2: ShowRecord) -> SeriesCandidatePair:
    """
    Score how likely two shows are occurrences of the same recurring series.

    Args:
        show1: First show
        show2: Second show

    Returns:
        SeriesCandidatePair with the individual signals and the 0-100 score
    """
    venue_match = _same_text(show1.venue_name, show2.venue_name)
    address_match = _same_text(show1.address, show2.address)
    proximity_match = (
        show1.coordinates is not None
        and show2.coordinates is not None
        and is_same_building(show1.coordinates, show2.coordinates)
    )
    date_pattern_match = is_date_pattern(show1, show2)
    time_pattern_match = _same_text(show1.hours, show2.hours)

    score = 0
    if venue_match:
        score += VENUE_WEIGHT
    if address_match:
        score += ADDRESS_WEIGHT
    if proximity_match:
        score += PROXIMITY_WEIGHT
    if date_pattern_match:
        score += DATE_PATTERN_WEIGHT
    if time_pattern_match:
        score += TIME_PATTERN_WEIGHT
    score = min(score, 100)

    logger.debug(
        f"Series comparison {show1.id or show1.name!r} vs {show2.id or show2.name!r}: "
        f"venue={venue_match} address={address_match} proximity={proximity_match} "
        f"date={date_pattern_match} time={time_pattern_match} score={score}"
    )

    return SeriesCandidatePair(
        first=show1,
        second=show2,
        venue_match=venue_match,
        address_match=address_match,
        proximity_match=proximity_match,
        date_pattern_match=date_pattern_match,
        time_pattern_match=time_pattern_match,
        confidence_score=score,
        is_same_series=score >= SERIES_CONFIDENCE_THRESHOLD
    )

def predict_next(show1: ShowRecord, show2: ShowRecord) -> RecurrencePrediction:
    """
    Extrapolate the next occurrence from two occurrences of a series.

    The later date plus the interval between the two.

    Raises:
        ValueError: if either date is missing or both fall on the same day
    """
    if show1.start_date is None or show2.start_date is None:
        raise ValueError("Both shows need a start date to predict the next occurrence")

    interval = abs((show2.start_date - show1.start_date).days)
    if interval == 0:
        raise ValueError("Shows on the same date do not define a recurrence interval")

    base = max(show1.start_date, show2.start_date)
    return RecurrencePrediction(
        series_id=show1.series_id or show2.series_id,
        predicted_next_date=base + timedelta(days=interval),
        interval_days=interval
    )

def predict_from_pair(pair: SeriesCandidatePair) -> RecurrencePrediction:
    """Predict the next occurrence for a pair already judged to be one series."""
    if not pair.is_same_series:
        raise ValueError(
            f"Confidence {pair.confidence_score} is below {SERIES_CONFIDENCE_THRESHOLD}; "
            f"shows are not the same series"
        )
    return predict_next(pair.first, pair.second)
