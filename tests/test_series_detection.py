import pytest
from datetime import date

from showfinder.schemas.show import Coordinate, ShowRecord
from showfinder.scripts.analyze_series import SAMPLE_SHOWS, analyze_series
from showfinder.services.series_detection import (
    SERIES_CONFIDENCE_THRESHOLD,
    compare_for_series,
    is_date_pattern,
    predict_from_pair,
    predict_next
)

def test_monthly_show_scores_full_confidence(august_show, september_show):
    pair = compare_for_series(august_show, september_show)

    assert pair.venue_match
    assert pair.address_match
    assert pair.proximity_match
    assert pair.date_pattern_match
    assert pair.time_pattern_match
    assert pair.confidence_score == 100
    assert pair.is_same_series

def test_predict_next_occurrence(august_show, september_show):
    prediction = predict_next(august_show, september_show)

    assert prediction.interval_days == 35
    assert prediction.predicted_next_date == date(2025, 10, 11)

def test_predict_next_is_order_independent(august_show, september_show):
    assert predict_next(september_show, august_show) == predict_next(august_show, september_show)

def test_compare_is_symmetric(august_show, september_show):
    forward = compare_for_series(august_show, september_show)
    backward = compare_for_series(september_show, august_show)

    assert forward.confidence_score == backward.confidence_score
    assert forward.is_same_series == backward.is_same_series

def test_venue_and_proximity_only_scores_50(august_show):
    other = august_show.model_copy(update={
        'address': None,
        'hours': "10am-4pm",
        'start_date': date(2025, 8, 14)  # Thursday, 12 days later
    })

    pair = compare_for_series(august_show, other)

    assert pair.confidence_score == 50
    assert not pair.is_same_series

def test_threshold_is_inclusive(august_show):
    other = august_show.model_copy(update={
        'hours': "10am-4pm",
        'coordinates': None,
        'start_date': date(2025, 8, 14)
    })

    pair = compare_for_series(august_show, other)

    assert pair.confidence_score == SERIES_CONFIDENCE_THRESHOLD == 60
    assert pair.is_same_series

def test_venue_address_and_hours_score_70(august_show):
    other = august_show.model_copy(update={
        'coordinates': None,
        'start_date': date(2025, 8, 14)
    })

    assert compare_for_series(august_show, other).confidence_score == 70

def test_missing_values_never_match():
    first = ShowRecord(name="A", start_date=date(2025, 8, 2))
    second = ShowRecord(name="B", start_date=date(2025, 8, 20))

    pair = compare_for_series(first, second)

    assert not pair.venue_match
    assert not pair.address_match
    assert not pair.proximity_match
    assert not pair.time_pattern_match
    assert pair.confidence_score == 0

def test_string_matches_ignore_surrounding_whitespace(august_show):
    other = august_show.model_copy(update={'venue_name': "  LaQuinta Inn "})

    assert compare_for_series(august_show, other).venue_match

def test_distant_coordinates_do_not_match(august_show):
    other = august_show.model_copy(update={
        'coordinates': Coordinate(latitude=41.8781, longitude=-87.6298)
    })

    assert not compare_for_series(august_show, other).proximity_match

@pytest.mark.parametrize("first,second,expected", [
    (date(2025, 8, 2), date(2025, 8, 30), True),    # 28 days
    (date(2025, 8, 2), date(2025, 9, 6), True),     # 35 days
    (date(2025, 8, 2), date(2025, 9, 10), False),   # 39 days, Saturday vs Wednesday
    (date(2025, 8, 2), date(2025, 8, 9), True),     # same weekday
    (date(2025, 8, 2), date(2025, 8, 5), False),
])
def test_is_date_pattern(first, second, expected):
    assert is_date_pattern(ShowRecord(start_date=first), ShowRecord(start_date=second)) is expected

def test_predict_next_requires_distinct_dates(august_show):
    with pytest.raises(ValueError):
        predict_next(august_show, august_show)

def test_predict_next_requires_dates(august_show):
    with pytest.raises(ValueError):
        predict_next(august_show, ShowRecord(name="Undated"))

def test_predict_from_pair_requires_series(august_show):
    stranger = ShowRecord(name="Elsewhere", start_date=date(2025, 8, 5))
    pair = compare_for_series(august_show, stranger)

    with pytest.raises(ValueError):
        predict_from_pair(pair)

def test_predict_from_pair_carries_series_id(august_show, september_show):
    first = august_show.model_copy(update={'series_id': "indy-laquinta"})

    prediction = predict_from_pair(compare_for_series(first, september_show))

    assert prediction.series_id == "indy-laquinta"

def test_analyze_sample_lines():
    result = analyze_series(*SAMPLE_SHOWS, date_window=(date(2025, 1, 1), date(2025, 12, 31)))

    pair = result['pair']
    assert pair.venue_match
    assert pair.address_match
    assert pair.date_pattern_match
    assert pair.time_pattern_match
    # Parsed text carries no coordinates
    assert not pair.proximity_match
    assert pair.confidence_score == 80
    assert result['prediction'].predicted_next_date == date(2025, 10, 11)
