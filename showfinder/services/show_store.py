"""
Event store queries backing the radius search strategies.

Each query returns raw row dictionaries. Rows may carry their location as
explicit latitude/longitude columns, as a nested GeoJSON point, or both;
consumers must pass them through the coordinate normalizer.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple
from sqlalchemy import and_, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from showfinder.database.models import ShowModel, ZipCodeModel
from showfinder.schemas.show import Coordinate, ShowRecord, ShowStatus, ZipCodeData
from showfinder.services.location_services import bounding_box, coordinate_to_payload, longitude_ranges

logger = logging.getLogger(__name__)

DateWindow = Tuple[date, date]

class ShowStore(Protocol):
    """Queries the radius search strategies rely on."""

    def search_nearby(
        self,
        origin: Coordinate,
        radius_miles: float,
        date_window: DateWindow
    ) -> List[Dict[str, Any]]:
        ...

    def search_filtered(
        self,
        origin: Coordinate,
        radius_miles: float,
        date_window: DateWindow,
        max_entry_fee: Optional[float] = None,
        categories: Optional[Sequence[str]] = None,
        features: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        ...

    def search_radius_only(self, origin: Coordinate, radius_miles: float) -> List[Dict[str, Any]]:
        ...

    def search_all_upcoming(self, today: date, limit: int) -> List[Dict[str, Any]]:
        ...

def matches_categories(row_categories: Optional[Sequence[str]], wanted: Optional[Sequence[str]]) -> bool:
    """True when no categories are requested or the show shares at least one."""
    if not wanted:
        return True
    return bool(set(row_categories or []) & set(wanted))

def matches_features(row_features: Optional[Dict[str, Any]], wanted: Optional[Dict[str, Any]]) -> bool:
    """True when every requested feature flag is present with the same value."""
    if not wanted:
        return True
    row_features = row_features or {}
    return all(row_features.get(key) == value for key, value in wanted.items())

class SQLAlchemyShowStore:
    """ShowStore backed by the `shows` table."""

    def __init__(self, db: Session):
        self.db = db

    def search_nearby(
        self,
        origin: Coordinate,
        radius_miles: float,
        date_window: DateWindow
    ) -> List[Dict[str, Any]]:
        """Active shows overlapping the date window inside the radius box."""
        query = self._active().filter(
            self._within_box(origin, radius_miles),
            self._overlaps(date_window)
        )
        return self._rows(query)

    def search_filtered(
        self,
        origin: Coordinate,
        radius_miles: float,
        date_window: DateWindow,
        max_entry_fee: Optional[float] = None,
        categories: Optional[Sequence[str]] = None,
        features: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Nearby search with entry fee, category and feature facets."""
        query = self._active().filter(
            self._within_box(origin, radius_miles),
            self._overlaps(date_window)
        )
        if max_entry_fee is not None:
            query = query.filter(ShowModel.entry_fee <= max_entry_fee)

        # JSON facets are evaluated on the fetched rows for portability
        return [
            row for row in self._rows(query)
            if matches_categories(row['categories'], categories)
            and matches_features(row['features'], features)
        ]

    def search_radius_only(self, origin: Coordinate, radius_miles: float) -> List[Dict[str, Any]]:
        """Every show inside the radius box regardless of date or status."""
        query = self.db.query(ShowModel).filter(self._within_box(origin, radius_miles))
        return self._rows(query.order_by(ShowModel.start_date))

    def search_all_upcoming(self, today: date, limit: int) -> List[Dict[str, Any]]:
        """Active shows that have not ended yet, with no location constraint."""
        query = self._active().filter(
            func.coalesce(ShowModel.end_date, ShowModel.start_date) >= today
        ).limit(limit)
        return self._rows(query)

    def add_show(self, record: ShowRecord) -> ShowModel:
        """Insert a show record; returns the persisted model."""
        show = ShowModel(
            title=record.name or "Card Show",
            description=record.description,
            venue_name=record.venue_name,
            address=record.address,
            city=record.city,
            state=record.state,
            zip_code=record.zip_code,
            start_date=record.start_date,
            end_date=record.end_date,
            hours=record.hours,
            entry_fee=record.entry_fee,
            status=record.status,
            series_id=record.series_id,
            source_url=record.source_url,
            categories=record.categories,
            features=record.features,
            **coordinate_to_payload(record.coordinates)
        )
        self.db.add(show)
        self.db.commit()
        self.db.refresh(show)
        return show

    def _active(self) -> Query:
        return self.db.query(ShowModel).filter(
            ShowModel.status == ShowStatus.ACTIVE.value
        ).order_by(ShowModel.start_date)

    @staticmethod
    def _within_box(origin: Coordinate, radius_miles: float):
        min_lat, max_lat, min_lng, max_lng = bounding_box(origin, radius_miles)
        return or_(
            and_(
                ShowModel.latitude.between(min_lat, max_lat),
                or_(*(
                    ShowModel.longitude.between(low, high)
                    for low, high in longitude_ranges(min_lng, max_lng)
                ))
            ),
            # Rows with only the nested point are checked client-side
            ShowModel.latitude.is_(None)
        )

    @staticmethod
    def _overlaps(date_window: DateWindow):
        start, end = date_window
        return and_(
            func.coalesce(ShowModel.end_date, ShowModel.start_date) >= start,
            ShowModel.start_date <= end
        )

    @staticmethod
    def _rows(query: Query) -> List[Dict[str, Any]]:
        return [show.to_dict() for show in query.all()]

class SQLAlchemyZipCodeTable:
    """ZIP reference table stored in `zip_codes`."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, zip_code: str) -> Optional[ZipCodeData]:
        row = self.db.get(ZipCodeModel, zip_code)
        if row is None:
            return None
        return ZipCodeData(
            zip_code=row.zip_code,
            city=row.city,
            state=row.state,
            coordinate=Coordinate(latitude=row.latitude, longitude=row.longitude)
        )

    def save(self, data: ZipCodeData) -> None:
        try:
            self.db.merge(ZipCodeModel(
                zip_code=data.zip_code,
                city=data.city,
                state=data.state,
                latitude=data.coordinate.latitude,
                longitude=data.coordinate.longitude
            ))
            self.db.commit()
        except SQLAlchemyError:
            # The session is shared with the search queries
            self.db.rollback()
            raise
        logger.info(f"Stored ZIP {data.zip_code} in reference table")
