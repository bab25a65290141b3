"""
Resolve ZIP codes and free-text addresses to coordinates.

Lookups go to the local ZIP reference table first and fall back to a single
Nominatim request. There are no retries: a timeout or empty answer surfaces
as ResolutionFailure so callers can decide what to do next.
"""

import logging
import re
from typing import Any, Dict, Iterable, Optional, Protocol

from geopy.exc import GeopyError
from geopy.geocoders import Nominatim
from sqlalchemy.exc import SQLAlchemyError

from showfinder.config import Settings, get_settings
from showfinder.schemas.show import Coordinate, ResolvedLocation, ZipCodeData
from showfinder.services.error_handling import ResolutionFailure
from showfinder.utils.us_states import to_state_code

logger = logging.getLogger(__name__)

ZIP_CODE_PATTERN = re.compile(r'^\s*(\d{5})(?:-\d{4})?\s*$')

# Returned only when GEOCODER_DEBUG_FALLBACK is enabled
FALLBACK_LOCATION = {
    'latitude': 39.7025564,
    'longitude': -86.0803286,
    'postal_code': '46203',
    'city': 'Indianapolis',
    'state': 'IN',
    'display_name': 'DEBUG FALLBACK - 5120 Victory Drive, Indianapolis, IN 46203, USA'
}

class ZipCodeTable(Protocol):
    """Local ZIP code reference data."""

    def get(self, zip_code: str) -> Optional[ZipCodeData]:
        ...

class InMemoryZipCodeTable:
    """ZIP table held in a dictionary; handy for fixtures and small deployments."""

    def __init__(self, rows: Optional[Iterable[ZipCodeData]] = None):
        self._rows: Dict[str, ZipCodeData] = {}
        for row in rows or []:
            self.save(row)

    def get(self, zip_code: str) -> Optional[ZipCodeData]:
        return self._rows.get(zip_code)

    def save(self, row: ZipCodeData) -> None:
        self._rows[row.zip_code] = row

    def __len__(self) -> int:
        return len(self._rows)

def extract_zip_code(value: str) -> Optional[str]:
    """Return the five-digit ZIP if value is a ZIP code, else None."""
    match = ZIP_CODE_PATTERN.match(value or '')
    return match.group(1) if match else None

class CoordinateResolver:
    """Turns a ZIP code or address into a ResolvedLocation."""

    def __init__(
        self,
        zip_table: Optional[ZipCodeTable] = None,
        geolocator: Optional[Any] = None,
        debug_fallback: Optional[bool] = None,
        settings: Optional[Settings] = None
    ):
        """
        Initialize the resolver.

        Args:
            zip_table: Local ZIP reference table (consulted first)
            geolocator: geopy geocoder; a Nominatim client is built when omitted
            debug_fallback: Return a labelled fallback location instead of failing
            settings: Settings override
        """
        self.settings = settings or get_settings()
        self.zip_table = zip_table
        self.geolocator = geolocator or Nominatim(
            user_agent=self.settings.GEOCODER_USER_AGENT,
            timeout=self.settings.GEOCODER_TIMEOUT,
            domain=self.settings.GEOCODER_DOMAIN
        )
        self.debug_fallback = (
            self.settings.GEOCODER_DEBUG_FALLBACK if debug_fallback is None else debug_fallback
        )

    def resolve(self, zip_or_address: str) -> ResolvedLocation:
        """
        Resolve a ZIP code or address.

        Args:
            zip_or_address: Five-digit ZIP code or free-text address

        Returns:
            ResolvedLocation

        Raises:
            ResolutionFailure: if no coordinates can be obtained
        """
        query = (zip_or_address or '').strip()
        if not query:
            raise ResolutionFailure(zip_or_address or '', "empty location")

        zip_code = extract_zip_code(query)
        if zip_code:
            local = self.lookup_zip(zip_code)
            if local:
                return local

        try:
            resolved = self.geocode(f"{zip_code}, USA" if zip_code else query, original_query=query)
        except ResolutionFailure as e:
            if self.debug_fallback:
                logger.warning(f"Using DEBUG fallback coordinates for '{query}': {e.reason}")
                return self._fallback(query)
            raise

        if zip_code:
            self._remember_zip(zip_code, resolved)
        return resolved

    def lookup_zip(self, zip_code: str) -> Optional[ResolvedLocation]:
        """Look a ZIP code up in the local table."""
        if self.zip_table is None:
            return None
        row = self.zip_table.get(zip_code)
        if row is None:
            logger.debug(f"ZIP {zip_code} not in local table")
            return None
        return ResolvedLocation(
            query=zip_code,
            coordinate=row.coordinate,
            city=row.city,
            state=row.state,
            postal_code=row.zip_code,
            source="table"
        )

    def geocode(self, address: str, original_query: Optional[str] = None) -> ResolvedLocation:
        """
        Make a single geocoding request and parse the first candidate.

        Raises:
            ResolutionFailure: on timeout, service error, empty or malformed response
        """
        query = original_query or address
        try:
            location = self.geolocator.geocode(
                address,
                exactly_one=True,
                addressdetails=True,
                timeout=self.settings.GEOCODER_TIMEOUT
            )
        except GeopyError as e:
            logger.error(f"Geocoding request failed for '{address}': {str(e)}")
            raise ResolutionFailure(query, f"geocoding request failed: {e}", e) from e

        if location is None:
            logger.warning(f"No geocoding results for '{address}'")
            raise ResolutionFailure(query, "no geocoding results")

        try:
            raw = location.raw
            details = raw.get('address') or {}
            coordinate = Coordinate(latitude=float(raw['lat']), longitude=float(raw['lon']))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed geocoding response for '{address}': {str(e)}")
            raise ResolutionFailure(query, "malformed geocoding response", e) from e

        state = to_state_code((details.get('ISO3166-2-lvl4') or '').split('-')[-1]) \
            or to_state_code(details.get('state'))

        return ResolvedLocation(
            query=query,
            coordinate=coordinate,
            city=details.get('city') or details.get('town') or details.get('village'),
            state=state,
            postal_code=details.get('postcode'),
            display_name=raw.get('display_name'),
            source="geocoder"
        )

    def _remember_zip(self, zip_code: str, resolved: ResolvedLocation) -> None:
        save = getattr(self.zip_table, 'save', None)
        if save is None:
            return
        try:
            save(ZipCodeData(
                zip_code=zip_code,
                city=resolved.city,
                state=resolved.state,
                coordinate=resolved.coordinate
            ))
        except SQLAlchemyError as e:
            logger.error(f"Could not store geocoded ZIP {zip_code}: {str(e)}")

    def _fallback(self, query: str) -> ResolvedLocation:
        return ResolvedLocation(
            query=query,
            coordinate=Coordinate(
                latitude=FALLBACK_LOCATION['latitude'],
                longitude=FALLBACK_LOCATION['longitude']
            ),
            city=FALLBACK_LOCATION['city'],
            state=FALLBACK_LOCATION['state'],
            postal_code=FALLBACK_LOCATION['postal_code'],
            display_name=FALLBACK_LOCATION['display_name'],
            source="fallback",
            is_fallback=True
        )
