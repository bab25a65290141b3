#!/usr/bin/env python3

import argparse
import logging
from datetime import date, timedelta
from typing import Any, Dict, Optional, Tuple

from showfinder.services.field_parser import parse_show_text
from showfinder.services.series_detection import compare_for_series, predict_next
from showfinder.services.show_search import resolve_record_dates

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

SAMPLE_SHOWS = (
    "Aug 2nd – Indianapolis, LaQuinta Inn – 5120 Victory Drive (8-2)",
    "Sept 6th – Indianapolis, LaQuinta Inn – 5120 Victory Drive (8-2)",
)

def analyze_series(
    text1: str,
    text2: str,
    date_window: Optional[Tuple[date, date]] = None
) -> Dict[str, Any]:
    """
    Parse two scraped show lines and decide whether they are one series.

    Args:
        text1: First show line
        text2: Second show line
        date_window: Window used to pick a year for dates scraped without one

    Returns:
        Dictionary with the parsed records, the comparison and, for a series, the predicted next date
    """
    first = resolve_record_dates(parse_show_text(text1).to_record(id="1"), date_window)
    second = resolve_record_dates(parse_show_text(text2).to_record(id="2"), date_window)

    pair = compare_for_series(first, second)
    result: Dict[str, Any] = {
        'first': first,
        'second': second,
        'pair': pair,
        'prediction': None
    }

    if pair.is_same_series:
        try:
            result['prediction'] = predict_next(first, second)
        except ValueError as e:
            logger.warning(f"Cannot predict next occurrence: {str(e)}")

    return result

def main():
    parser = argparse.ArgumentParser(description="Check whether two show listings belong to one series")
    parser.add_argument('shows', nargs='*', help="Two show lines (defaults to a built-in sample)")
    parser.add_argument('--year', type=int, help="Year for dates scraped without one")
    args = parser.parse_args()

    if args.shows and len(args.shows) != 2:
        parser.error("provide exactly two show lines")
    text1, text2 = args.shows or SAMPLE_SHOWS

    window = None
    if args.year:
        window = (date(args.year, 1, 1), date(args.year, 12, 31))
    else:
        today = date.today()
        window = (today - timedelta(days=180), today + timedelta(days=185))

    result = analyze_series(text1, text2, window)
    pair = result['pair']

    logger.info("=== Show Series Analysis ===\n")
    for label, record in (('Show 1', result['first']), ('Show 2', result['second'])):
        logger.info(f"{label}:")
        logger.info(f"  Date: {record.start_date}")
        logger.info(f"  Venue: {record.venue_name}")
        logger.info(f"  Address: {record.address}")
        logger.info(f"  City: {record.city}")
        logger.info(f"  Hours: {record.hours}")

    logger.info("\nSignals:")
    logger.info(f"  Venue match: {pair.venue_match}")
    logger.info(f"  Address match: {pair.address_match}")
    logger.info(f"  Same building: {pair.proximity_match}")
    logger.info(f"  Date pattern: {pair.date_pattern_match}")
    logger.info(f"  Same hours: {pair.time_pattern_match}")
    logger.info(f"\nConfidence: {pair.confidence_score}/100")
    logger.info(f"Same series: {pair.is_same_series}")

    prediction = result['prediction']
    if prediction:
        logger.info(
            f"Next show expected {prediction.predicted_next_date} "
            f"(every {prediction.interval_days} days)"
        )

if __name__ == "__main__":
    main()
