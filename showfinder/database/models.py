"""Database models for the application."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional
from sqlalchemy import Date, DateTime, Float, Index, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from showfinder.database.base import Base

__all__ = ['Base', 'ShowModel', 'ZipCodeModel']

class ShowModel(Base):
    """A show occurrence.

    Location is stored twice for historical reasons: explicit latitude/longitude
    columns and a GeoJSON-style point in `coordinates` ({"type": "Point",
    "coordinates": [lng, lat]}). Older rows may only carry one of them.
    """
    __tablename__ = "shows"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    venue_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)
    zip_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    hours: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    entry_fee: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="ACTIVE")
    series_id: Mapped[Optional[str]] = mapped_column(String, nullable=True, index=True)
    source_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    coordinates: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    categories: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    features: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('ix_shows_status_dates', 'status', 'start_date', 'end_date'),
        Index('ix_shows_lat_lng', 'latitude', 'longitude'),
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert show to the row payload returned by store queries."""
        return {
            'id': self.id,
            'name': self.title,
            'description': self.description,
            'venue_name': self.venue_name,
            'address': self.address,
            'city': self.city,
            'state': self.state,
            'zip_code': self.zip_code,
            'start_date': self.start_date,
            'end_date': self.end_date,
            'hours': self.hours,
            'entry_fee': self.entry_fee,
            'status': self.status,
            'series_id': self.series_id,
            'source_url': self.source_url,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'coordinates': self.coordinates,
            'categories': self.categories or [],
            'features': self.features or {}
        }

class ZipCodeModel(Base):
    """ZIP code reference data."""
    __tablename__ = "zip_codes"

    zip_code: Mapped[str] = mapped_column(String(5), primary_key=True)
    city: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
