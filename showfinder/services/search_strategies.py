"""
Search strategies making up the radius search fallback chain.

Every strategy wraps one event store query behind the same interface,
`execute(query) -> List[ShowRecord]`, so the orchestrator can compose them
declaratively and each one can be tested alone.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from showfinder.config import get_settings
from showfinder.schemas.show import SearchQuery, ShowRecord
from showfinder.services.error_handling import StrategyTransportFailure
from showfinder.services.location_services import normalize_coordinates
from showfinder.services.show_store import ShowStore

logger = logging.getLogger(__name__)

# Failures that mean "the backend call broke", as opposed to a bug in our code
TRANSPORT_ERRORS = (SQLAlchemyError, ConnectionError, TimeoutError)

def to_show_record(row: Dict[str, Any]) -> ShowRecord:
    """Build a ShowRecord from a store row, normalizing its coordinates."""
    data = dict(row)
    data['coordinates'] = normalize_coordinates(row)
    data.pop('latitude', None)
    data.pop('longitude', None)
    data.pop('distance_miles', None)
    if 'name' not in data and 'title' in data:
        data['name'] = data.pop('title')
    return ShowRecord.model_validate(data)

class SearchStrategy(ABC):
    """One member of the fallback chain."""

    name: str = "strategy"

    # Degraded strategies skip distance verification and must be opted into
    degraded: bool = False

    def __init__(self, store: ShowStore):
        self.store = store

    def execute(self, query: SearchQuery) -> List[ShowRecord]:
        """
        Run the strategy's store query.

        Raises:
            StrategyTransportFailure: if the backend call failed
        """
        try:
            rows = self.fetch(query)
        except TRANSPORT_ERRORS as e:
            logger.warning(f"{self.name} search failed: {str(e)}")
            raise StrategyTransportFailure(self.name, e) from e

        records = [to_show_record(row) for row in rows]
        logger.info(f"{self.name} search returned {len(records)} show(s)")
        return records

    @abstractmethod
    def fetch(self, query: SearchQuery) -> List[Dict[str, Any]]:
        """Call the event store."""

class NearbyStrategy(SearchStrategy):
    """Radius, date window and status filtered query."""

    name = "nearby"

    def fetch(self, query: SearchQuery) -> List[Dict[str, Any]]:
        return self.store.search_nearby(query.origin, query.radius_miles, query.date_window)

class FilteredStrategy(SearchStrategy):
    """Radius query with entry fee, category and feature facets."""

    name = "filtered"

    def fetch(self, query: SearchQuery) -> List[Dict[str, Any]]:
        return self.store.search_filtered(
            query.origin,
            query.radius_miles,
            query.date_window,
            max_entry_fee=query.max_entry_fee,
            categories=query.categories,
            features=query.features
        )

class RadiusOnlyStrategy(SearchStrategy):
    """Center point and radius only; date and status are applied by the caller."""

    name = "radius_only"

    def fetch(self, query: SearchQuery) -> List[Dict[str, Any]]:
        return self.store.search_radius_only(query.origin, query.radius_miles)

class EmergencyStrategy(SearchStrategy):
    """Every upcoming show, with no distance constraint at all."""

    name = "emergency"
    degraded = True

    def __init__(
        self,
        store: ShowStore,
        limit: Optional[int] = None,
        today: Optional[Callable[[], date]] = None
    ):
        super().__init__(store)
        self.limit = limit or get_settings().EMERGENCY_RESULT_LIMIT
        self.today = today or date.today

    def fetch(self, query: SearchQuery) -> List[Dict[str, Any]]:
        return self.store.search_all_upcoming(self.today(), self.limit)

def default_strategies(store: ShowStore) -> List[SearchStrategy]:
    """The standard chain, in the order it is attempted."""
    return [
        NearbyStrategy(store),
        FilteredStrategy(store),
        RadiusOnlyStrategy(store),
        EmergencyStrategy(store)
    ]
