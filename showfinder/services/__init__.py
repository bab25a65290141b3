"""Service package initialization."""

from .error_handling import (
    ShowFinderError,
    ResolutionFailure,
    StrategyTransportFailure,
    SearchUnavailable
)
from .geocoding import CoordinateResolver
from .show_search import RadiusSearchOrchestrator

__all__ = [
    'ShowFinderError',
    'ResolutionFailure',
    'StrategyTransportFailure',
    'SearchUnavailable',
    'CoordinateResolver',
    'RadiusSearchOrchestrator'
]
