#!/usr/bin/env python3
"""
Report shows whose stored coordinates are missing, unreadable or suspicious.

Nothing is modified; the report is for manual correction.
"""

import logging
from collections import Counter
from typing import Dict, List, Tuple

from sqlalchemy.orm import Session

from showfinder.database import SessionLocal, ShowModel
from showfinder.services.location_services import classify_coordinate_source, find_suspicious_reason

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

def check_show_coordinates(db: Session) -> Tuple[Dict[str, int], List[Tuple[int, str, str]]]:
    """
    Inspect the coordinates of every show.

    Returns:
        (counts per outcome, list of (show id, title, problem))
    """
    stats: Counter = Counter()
    problems: List[Tuple[int, str, str]] = []

    for show in db.query(ShowModel).order_by(ShowModel.id).all():
        stats['total'] += 1
        source = classify_coordinate_source(show.to_dict())
        if source is None:
            stats['missing'] += 1
            problems.append((show.id, show.title, "coordinates missing or unreadable"))
            continue

        stats[source.kind] += 1
        reason = find_suspicious_reason(source.to_coordinate())
        if reason:
            stats['suspicious'] += 1
            problems.append((show.id, show.title, reason))
        else:
            stats['valid'] += 1

    return dict(stats), problems

def main():
    db = SessionLocal()
    try:
        stats, problems = check_show_coordinates(db)

        logger.info("=== Show Coordinate Check ===\n")
        logger.info(f"Total shows: {stats.get('total', 0)}")
        logger.info(f"Valid: {stats.get('valid', 0)}")
        logger.info(f"Suspicious: {stats.get('suspicious', 0)}")
        logger.info(f"Missing: {stats.get('missing', 0)}")
        for kind in ('explicit', 'nested', 'wkt'):
            logger.info(f"  stored as {kind}: {stats.get(kind, 0)}")

        if problems:
            logger.info("\nShows needing attention:")
            for show_id, title, problem in problems:
                logger.info(f"  [{show_id}] {title}: {problem}")
    finally:
        db.close()

if __name__ == "__main__":
    main()
