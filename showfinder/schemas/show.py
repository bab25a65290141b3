"""
Show schema definitions.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union
from datetime import date, datetime, timedelta
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from showfinder.config import get_settings

class ShowStatus(str, Enum):
    """Lifecycle states of a show row in the event store."""
    ACTIVE = "ACTIVE"
    PENDING = "PENDING"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"

class Coordinate(BaseModel):
    """A latitude/longitude pair in decimal degrees."""
    latitude: float
    longitude: float

    model_config = ConfigDict(frozen=True)

    @property
    def in_range(self) -> bool:
        return -90.0 <= self.latitude <= 90.0 and -180.0 <= self.longitude <= 180.0

class ExplicitCoordinates(BaseModel):
    """Separate numeric latitude/longitude columns."""
    kind: Literal["explicit"] = "explicit"
    latitude: float
    longitude: float

    def to_coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)

class NestedPoint(BaseModel):
    """Geography point as stored by PostGIS/GeoJSON: [longitude, latitude]."""
    kind: Literal["nested"] = "nested"
    coordinates: List[float] = Field(min_length=2)

    def to_coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.coordinates[1], longitude=self.coordinates[0])

class WktPoint(BaseModel):
    """Well-known-text point, e.g. POINT(-86.08 39.70)."""
    kind: Literal["wkt"] = "wkt"
    longitude: float
    latitude: float

    def to_coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)

CoordinateSource = Annotated[
    Union[ExplicitCoordinates, NestedPoint, WktPoint],
    Field(discriminator="kind")
]

class PartialDate(BaseModel):
    """A month/day pair scraped without a year."""
    month: int = Field(ge=1, le=12)
    day: int = Field(ge=1, le=31)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode='after')
    def validate_day_of_month(self) -> 'PartialDate':
        # 2000 is a leap year, so Feb 29 passes
        date(2000, self.month, self.day)
        return self

    def with_year(self, year: int) -> date:
        """Raises ValueError when the day does not exist in that year."""
        return date(year, self.month, self.day)

def _coerce_date(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and 'T' in value:
        return value.split('T', 1)[0]
    return value

class ShowRecord(BaseModel):
    """A single show occurrence as read from the event store or parsed from text."""
    id: Optional[str] = None
    name: Optional[str] = None
    venue_name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    partial_date: Optional[PartialDate] = None
    coordinates: Optional[Coordinate] = None
    hours: Optional[str] = None
    entry_fee: Optional[float] = None
    description: Optional[str] = None
    source_url: Optional[str] = None
    status: str = ShowStatus.ACTIVE.value
    series_id: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    features: Dict[str, Any] = Field(default_factory=dict)

    # Annotated by the search orchestrator
    distance_miles: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator('id', 'series_id', 'zip_code', mode='before')
    @classmethod
    def stringify_identifiers(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def coerce_dates(cls, v: Any) -> Any:
        return _coerce_date(v)

    @field_validator('categories', mode='before')
    @classmethod
    def default_categories(cls, v: Any) -> Any:
        return v or []

    @field_validator('features', mode='before')
    @classmethod
    def default_features(cls, v: Any) -> Any:
        return v or {}

    @property
    def last_date(self) -> Optional[date]:
        """Last day the show runs (end date, or start date for one-day shows)."""
        return self.end_date or self.start_date

def _default_radius() -> float:
    return get_settings().DEFAULT_RADIUS_MILES

def _default_page_size() -> int:
    return get_settings().DEFAULT_PAGE_SIZE

def default_date_window() -> Tuple[date, date]:
    """Today through the configured number of days ahead."""
    today = date.today()
    return today, today + timedelta(days=get_settings().DEFAULT_WINDOW_DAYS)

class SearchQuery(BaseModel):
    """Parameters for a radius search."""
    origin: Coordinate
    radius_miles: float = Field(default_factory=_default_radius, gt=0)
    date_window: Tuple[date, date] = Field(default_factory=default_date_window)
    max_entry_fee: Optional[float] = Field(default=None, ge=0)
    categories: Optional[List[str]] = None
    features: Optional[Dict[str, Any]] = None
    page: int = Field(default=1, ge=1, description="Page number (1-based)")
    page_size: int = Field(default_factory=_default_page_size, ge=1)
    allow_degraded: bool = Field(
        default=False,
        description="Permit the unfiltered emergency strategy as a last resort"
    )

    @field_validator('page_size')
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        max_size = get_settings().MAX_PAGE_SIZE
        if v > max_size:
            raise ValueError(f'page_size must be at most {max_size}')
        return v

    @model_validator(mode='after')
    def validate_date_window(self) -> 'SearchQuery':
        start, end = self.date_window
        if start > end:
            raise ValueError('date_window start must not be after its end')
        return self

    @property
    def offset(self) -> int:
        """Calculate offset based on page and page_size."""
        return (self.page - 1) * self.page_size

class SearchResultPage(BaseModel):
    """One page of a radius search."""
    items: List[ShowRecord] = Field(default_factory=list)
    total_count: int = 0
    page: int = 1
    page_size: int = 20
    has_more: bool = False
    degraded: bool = False
    strategy: str = ""

    @property
    def total_pages(self) -> int:
        return (self.total_count + self.page_size - 1) // self.page_size

class SeriesCandidatePair(BaseModel):
    """Outcome of comparing two shows for membership in the same series."""
    first: ShowRecord
    second: ShowRecord
    venue_match: bool
    address_match: bool
    proximity_match: bool
    date_pattern_match: bool
    time_pattern_match: bool
    confidence_score: int = Field(ge=0, le=100)
    is_same_series: bool

    model_config = ConfigDict(frozen=True)

class RecurrencePrediction(BaseModel):
    """Next expected occurrence of a series."""
    series_id: Optional[str] = None
    predicted_next_date: date
    interval_days: int

class ZipCodeData(BaseModel):
    """Row of the local ZIP code reference table."""
    zip_code: str
    city: Optional[str] = None
    state: Optional[str] = None
    coordinate: Coordinate

    model_config = ConfigDict(from_attributes=True)

class ResolvedLocation(BaseModel):
    """A location string resolved to coordinates."""
    query: str
    coordinate: Coordinate
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    display_name: Optional[str] = None
    source: Literal["table", "geocoder", "fallback"]
    is_fallback: bool = False

class DuplicateCandidate(BaseModel):
    """Two submissions that look like the same show."""
    first_id: Optional[str] = None
    second_id: Optional[str] = None
    first_name: Optional[str] = None
    second_name: Optional[str] = None
    similarity: float = Field(ge=0.0, le=1.0)
    reason: str

class QualityScore(BaseModel):
    """Review score for a scraped submission."""
    score: int
    issues: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
