"""
Radius search orchestration.

The orchestrator walks an ordered chain of search strategies and stops at the
first one that answers without a transport error (an empty answer counts).
Results from non-degraded strategies are always re-verified here with the
Haversine distance, because upstream radius filtering has been wrong before.
"""

import logging
from datetime import date, timedelta
from typing import Any, List, Optional, Sequence, Tuple

from showfinder.schemas.show import (
    PartialDate,
    SearchQuery,
    SearchResultPage,
    ShowRecord,
    ShowStatus
)
from showfinder.services.error_handling import (
    SearchUnavailable,
    StrategyTransportFailure
)
from showfinder.services.geocoding import CoordinateResolver
from showfinder.services.location_services import calculate_distance, find_suspicious_reason
from showfinder.services.search_strategies import SearchStrategy, default_strategies
from showfinder.services.show_store import ShowStore, matches_categories, matches_features
from showfinder.utils.pagination import paginate

logger = logging.getLogger(__name__)

class RadiusSearchOrchestrator:
    """Runs the search fallback chain and owns pagination."""

    def __init__(
        self,
        strategies: Sequence[SearchStrategy],
        resolver: Optional[CoordinateResolver] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            strategies: Strategies in the order they should be attempted
            resolver: Resolver used by search_near for ZIP/address origins
        """
        self.strategies = list(strategies)
        self.resolver = resolver

    @classmethod
    def from_store(
        cls,
        store: ShowStore,
        resolver: Optional[CoordinateResolver] = None
    ) -> 'RadiusSearchOrchestrator':
        return cls(default_strategies(store), resolver=resolver)

    def search(self, query: SearchQuery) -> SearchResultPage:
        """
        Find shows within query.radius_miles of query.origin.

        Args:
            query: Search parameters

        Returns:
            SearchResultPage; `degraded` is set when the emergency strategy answered

        Raises:
            SearchUnavailable: if every attempted strategy failed
        """
        reason = find_suspicious_reason(query.origin)
        if reason:
            logger.warning(f"Suspicious search origin {query.origin}: {reason}")

        failures: List[StrategyTransportFailure] = []
        for strategy in self.strategies:
            if strategy.degraded and not query.allow_degraded:
                logger.info(f"Skipping degraded strategy {strategy.name}; caller did not opt in")
                continue

            try:
                records = strategy.execute(query)
            except StrategyTransportFailure as e:
                failures.append(e)
                continue

            if strategy.degraded:
                logger.warning(
                    f"Serving DEGRADED results from {strategy.name}: "
                    f"{len(records)} show(s) without distance filtering"
                )
                results = sort_results(annotate_distances(records, query))
                return paginate(
                    results, query.page, query.page_size,
                    degraded=True, strategy=strategy.name
                )

            results = sort_results(verify_results(records, query))
            return paginate(results, query.page, query.page_size, strategy=strategy.name)

        logger.error(f"All search strategies failed for origin {query.origin}")
        raise SearchUnavailable(failures)

    def search_near(self, location: str, **query_params: Any) -> SearchResultPage:
        """
        Resolve a ZIP code or address, then search around it.

        Raises:
            ResolutionFailure: if the location cannot be resolved
            SearchUnavailable: if every attempted strategy failed
        """
        if self.resolver is None:
            raise ValueError("search_near requires a CoordinateResolver")
        resolved = self.resolver.resolve(location)
        if resolved.is_fallback:
            logger.warning(f"Searching around DEBUG fallback location for '{location}'")
        return self.search(SearchQuery(origin=resolved.coordinate, **query_params))

def annotate_distances(records: Sequence[ShowRecord], query: SearchQuery) -> List[ShowRecord]:
    """Attach distance_miles where coordinates are known; nothing is dropped."""
    return [
        record.model_copy(update={
            'distance_miles': calculate_distance(query.origin, record.coordinates)
            if record.coordinates else None
        })
        for record in records
    ]

def verify_results(records: Sequence[ShowRecord], query: SearchQuery) -> List[ShowRecord]:
    """
    Client-side verification of a strategy's results.

    Drops shows without coordinates or beyond the radius, then re-applies the
    status, date window and facet filters the store may not have applied.
    """
    verified: List[ShowRecord] = []
    missing_coordinates = 0
    outside_radius = 0

    for record in records:
        if record.coordinates is None:
            missing_coordinates += 1
            continue

        distance = calculate_distance(query.origin, record.coordinates)
        if distance > query.radius_miles:
            outside_radius += 1
            continue

        if not _passes_filters(record, query):
            continue

        verified.append(record.model_copy(update={'distance_miles': distance}))

    if outside_radius:
        logger.warning(
            f"Dropped {outside_radius} show(s) outside the {query.radius_miles} mile radius "
            f"returned by the store"
        )
    if missing_coordinates:
        logger.debug(f"Dropped {missing_coordinates} show(s) without coordinates")

    return verified

def _passes_filters(record: ShowRecord, query: SearchQuery) -> bool:
    if record.status != ShowStatus.ACTIVE.value:
        return False
    if not overlaps_window(record, query.date_window):
        return False
    if query.max_entry_fee is not None and (
        record.entry_fee is None or record.entry_fee > query.max_entry_fee
    ):
        return False
    return (
        matches_categories(record.categories, query.categories)
        and matches_features(record.features, query.features)
    )

def overlaps_window(record: ShowRecord, date_window: Tuple[date, date]) -> bool:
    start, end = date_window
    if record.start_date is None:
        return False
    return record.last_date >= start and record.start_date <= end

def sort_results(records: Sequence[ShowRecord]) -> List[ShowRecord]:
    """Order by start date, then by distance."""
    return sorted(
        records,
        key=lambda r: (
            r.start_date or date.max,
            r.distance_miles if r.distance_miles is not None else float('inf')
        )
    )

def resolve_partial_date(partial: PartialDate, date_window: Tuple[date, date]) -> date:
    """
    Pick the year for a month/day scraped without one.

    Prefers an occurrence inside the window; otherwise the first occurrence
    on or after the window start.
    """
    start, end = date_window
    candidates = []
    for year in range(start.year, max(end.year, start.year + 1) + 4):
        try:
            candidates.append(partial.with_year(year))
        except ValueError:
            # Feb 29 outside a leap year
            continue

    for candidate in candidates:
        if start <= candidate <= end:
            return candidate
    for candidate in candidates:
        if candidate >= start:
            return candidate
    raise ValueError(f"Cannot resolve {partial.month}/{partial.day} against {start}..{end}")

def resolve_record_dates(
    record: ShowRecord,
    date_window: Optional[Tuple[date, date]] = None
) -> ShowRecord:
    """Fill start_date from partial_date using the search date window."""
    if record.start_date is not None or record.partial_date is None:
        return record
    if date_window is None:
        today = date.today()
        date_window = (today, today + timedelta(days=365))
    resolved = resolve_partial_date(record.partial_date, date_window)
    return record.model_copy(update={'start_date': resolved})
