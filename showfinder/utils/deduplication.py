"""
Utility functions for detecting duplicate show submissions and scoring their quality.
"""

from typing import List, Optional, Sequence
import logging

from showfinder.schemas.show import DuplicateCandidate, QualityScore, ShowRecord

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.6

# Same-name submissions this many days apart are still one show
MAX_DATE_DRIFT_DAYS = 1

HTML_MARKERS = ('<', '&nbsp;', '&amp;')

def calculate_name_similarity(name1: Optional[str], name2: Optional[str]) -> float:
    """
    Calculate similarity between two show names.

    Args:
        name1: First show name
        name2: Second show name

    Returns:
        Jaccard similarity of the lower-cased word sets, 1.0 for an exact match
    """
    if not name1 or not name2:
        return 0.0

    n1 = name1.lower()
    n2 = name2.lower()
    if n1 == n2:
        return 1.0

    set1 = set(n1.split())
    set2 = set(n2.split())

    intersection = len(set1 & set2)
    union = len(set1 | set2)

    return intersection / union if union > 0 else 0.0

def _same_name(show1: ShowRecord, show2: ShowRecord) -> bool:
    return bool(show1.name and show2.name and show1.name.lower() == show2.name.lower())

def _same_date(show1: ShowRecord, show2: ShowRecord) -> bool:
    return show1.start_date is not None and show1.start_date == show2.start_date

def _compatible_state(state1: Optional[str], state2: Optional[str]) -> bool:
    return not state1 or not state2 or state1.lower() == state2.lower()

def check_duplicate(
    show1: ShowRecord,
    show2: ShowRecord,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD
) -> Optional[DuplicateCandidate]:
    """
    Decide whether two submissions describe the same show.

    Rules are tried in order and the first that applies wins:
        same name, same date                      -> 1.0
        similar name, same date                   -> name similarity
        same name, dates at most one day apart    -> 0.9
        similar name, same city, compatible state -> name similarity

    Args:
        show1: First submission
        show2: Second submission
        threshold: Name similarity must exceed this to count as "similar"

    Returns:
        DuplicateCandidate, or None when no rule applies
    """
    if not show1.name or not show2.name:
        return None

    similarity = calculate_name_similarity(show1.name, show2.name)
    same_name = _same_name(show1, show2)
    match = None

    if same_name and _same_date(show1, show2):
        match = (1.0, "same name and date")
    elif similarity > threshold and _same_date(show1, show2):
        match = (similarity, "similar name and same date")
    elif (
        same_name
        and show1.start_date is not None
        and show2.start_date is not None
        and abs((show1.start_date - show2.start_date).days) <= MAX_DATE_DRIFT_DAYS
    ):
        match = (0.9, "same name and adjacent dates")
    elif (
        similarity > threshold
        and show1.city and show2.city
        and show1.city.lower() == show2.city.lower()
        and _compatible_state(show1.state, show2.state)
    ):
        match = (similarity, "similar name and same location")

    if match is None:
        return None

    score, reason = match
    return DuplicateCandidate(
        first_id=show1.id,
        second_id=show2.id,
        first_name=show1.name,
        second_name=show2.name,
        similarity=score,
        reason=reason
    )

def find_duplicate_submissions(
    shows: Sequence[ShowRecord],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    max_results: Optional[int] = None
) -> List[DuplicateCandidate]:
    """
    Find potential duplicate submissions.

    Args:
        shows: Submissions to compare pairwise
        threshold: Minimum name similarity threshold
        max_results: Optional cap on the number of candidates returned

    Returns:
        Duplicate candidates sorted by similarity descending
    """
    duplicates = []

    for i in range(len(shows)):
        for j in range(i + 1, len(shows)):
            candidate = check_duplicate(shows[i], shows[j], threshold)
            if candidate is not None:
                duplicates.append(candidate)

    duplicates.sort(key=lambda d: d.similarity, reverse=True)
    logger.info(f"Found {len(duplicates)} potential duplicate pair(s) among {len(shows)} submission(s)")

    if max_results is not None:
        return duplicates[:max_results]
    return duplicates

def calculate_quality_score(show: ShowRecord) -> QualityScore:
    """
    Score a scraped submission for review, starting at 100 and deducting per issue.

    Args:
        show: Submission to score

    Returns:
        QualityScore with the issues found and a recommended review action for each
    """
    issues = []
    recommendations = []
    score = 100

    if not show.name:
        issues.append('Missing name')
        recommendations.append('Reject with TITLE_MISSING feedback')
        score -= 30

    if show.start_date is None and show.partial_date is None:
        issues.append('Missing start date')
        recommendations.append('Reject with DATE_FORMAT feedback')
        score -= 30
    elif show.start_date is None:
        issues.append('Date format issues')
        recommendations.append('Consider DATE_FORMAT feedback')

    if not show.city:
        issues.append('Missing city')
        recommendations.append('Reject with CITY_MISSING feedback')
        score -= 20

    if not show.venue_name and not show.address:
        issues.append('Missing venue and address')
        recommendations.append('Reject with VENUE_MISSING feedback')
        score -= 20

    if show.state and len(show.state) > 2:
        issues.append('State not in 2-letter format')
        recommendations.append('Approve with STATE_FULL feedback')
        score -= 5

    if show.description and any(marker in show.description for marker in HTML_MARKERS):
        issues.append('HTML artifacts in description')
        recommendations.append('Edit or approve with EXTRA_HTML feedback')
        score -= 5

    return QualityScore(score=score, issues=issues, recommendations=recommendations)
