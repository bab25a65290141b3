"""
Error taxonomy for location resolution and radius search.

Recoverable failures (ResolutionFailure, StrategyTransportFailure) drive the
fallback and abort decisions of the search orchestrator. SearchUnavailable is
terminal: every attempted strategy failed.

Degraded results, parse ambiguities and suspicious coordinates are not
exceptions; see SearchResultPage.degraded, ParsedShow.missing_fields and
location_services.find_suspicious_reason.
"""

from typing import List, Optional

class ShowFinderError(Exception):
    """Base class for all show finder errors."""

class ResolutionFailure(ShowFinderError):
    """No coordinates could be obtained for a location."""

    def __init__(self, location: str, reason: str, original_error: Optional[Exception] = None):
        super().__init__(f"Could not resolve '{location}': {reason}")
        self.location = location
        self.reason = reason
        self.original_error = original_error

class StrategyTransportFailure(ShowFinderError):
    """A search strategy's backend call failed."""

    def __init__(self, strategy: str, original_error: Optional[Exception] = None):
        detail = str(original_error) if original_error else "unknown error"
        super().__init__(f"Search strategy '{strategy}' failed: {detail}")
        self.strategy = strategy
        self.original_error = original_error

class SearchUnavailable(ShowFinderError):
    """Every attempted search strategy failed."""

    def __init__(self, failures: List[StrategyTransportFailure]):
        attempted = ", ".join(f.strategy for f in failures) or "none"
        super().__init__(f"Show search unavailable; failed strategies: {attempted}")
        self.failures = failures
