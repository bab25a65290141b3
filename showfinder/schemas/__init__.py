"""Schema exports."""

from showfinder.schemas.show import (
    ShowStatus,
    Coordinate,
    ExplicitCoordinates,
    NestedPoint,
    WktPoint,
    CoordinateSource,
    PartialDate,
    ShowRecord,
    SearchQuery,
    SearchResultPage,
    SeriesCandidatePair,
    RecurrencePrediction,
    ZipCodeData,
    ResolvedLocation,
    DuplicateCandidate,
    QualityScore,
    default_date_window
)

__all__ = [
    'ShowStatus',
    'Coordinate',
    'ExplicitCoordinates',
    'NestedPoint',
    'WktPoint',
    'CoordinateSource',
    'PartialDate',
    'ShowRecord',
    'SearchQuery',
    'SearchResultPage',
    'SeriesCandidatePair',
    'RecurrencePrediction',
    'ZipCodeData',
    'ResolvedLocation',
    'DuplicateCandidate',
    'QualityScore',
    'default_date_window'
]
