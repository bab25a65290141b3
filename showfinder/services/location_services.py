import logging
import math
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote

from pydantic import ValidationError

from showfinder.config import get_settings
from showfinder.schemas.show import (
    Coordinate,
    CoordinateSource,
    ExplicitCoordinates,
    NestedPoint,
    WktPoint
)

logger = logging.getLogger(__name__)

EARTH_RADIUS_MILES = 3958.8
MILES_PER_DEGREE_LAT = 69.0

# Two shows closer than this are treated as the same building
SAME_BUILDING_MILES = 0.1

_WKT_POINT = re.compile(
    r'POINT\s*\(\s*([+-]?\d+(?:\.\d+)?)\s+([+-]?\d+(?:\.\d+)?)\s*\)',
    re.IGNORECASE
)

def calculate_distance(point1: Coordinate, point2: Coordinate) -> float:
    """
    Calculate great-circle distance between two coordinates using the Haversine formula.

    Args:
        point1: First coordinate
        point2: Second coordinate

    Returns:
        Distance in miles
    """
    lat1 = math.radians(point1.latitude)
    lon1 = math.radians(point1.longitude)
    lat2 = math.radians(point2.latitude)
    lon2 = math.radians(point2.longitude)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_MILES * c

def is_same_building(point1: Coordinate, point2: Coordinate) -> bool:
    return calculate_distance(point1, point2) < SAME_BUILDING_MILES

def bounding_box(origin: Coordinate, radius_miles: float) -> Tuple[float, float, float, float]:
    """
    Latitude/longitude box that contains every point within radius_miles of origin.

    Used as a cheap server-side pre-filter; callers still need an exact
    distance check since the box corners lie outside the circle.

    Returns:
        (min_lat, max_lat, min_lng, max_lng)
    """
    lat_delta = radius_miles / MILES_PER_DEGREE_LAT
    cos_lat = max(math.cos(math.radians(origin.latitude)), 0.01)
    lng_delta = min(radius_miles / (MILES_PER_DEGREE_LAT * cos_lat), 180.0)
    return (
        origin.latitude - lat_delta,
        origin.latitude + lat_delta,
        origin.longitude - lng_delta,
        origin.longitude + lng_delta
    )

def longitude_ranges(min_lng: float, max_lng: float) -> List[Tuple[float, float]]:
    """
    Split a longitude span into ranges inside [-180, 180].

    A span that crosses the antimeridian becomes two ranges, one on each side.
    """
    if max_lng - min_lng >= 360.0:
        return [(-180.0, 180.0)]
    if min_lng < -180.0:
        return [(min_lng + 360.0, 180.0), (-180.0, max_lng)]
    if max_lng > 180.0:
        return [(min_lng, 180.0), (-180.0, max_lng - 360.0)]
    return [(min_lng, max_lng)]

def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number

def classify_coordinate_source(payload: Any) -> Optional[CoordinateSource]:
    """
    Identify which storage shape a location payload uses.

    Explicit latitude/longitude columns win over the nested geography point,
    which wins over WKT text. Returns None when no usable shape is present.
    """
    if payload is None:
        return None

    if isinstance(payload, str):
        match = _WKT_POINT.search(payload)
        if match:
            return WktPoint(longitude=float(match.group(1)), latitude=float(match.group(2)))
        return None

    if not isinstance(payload, Mapping):
        return None

    lat = _to_float(payload.get('latitude', payload.get('lat')))
    lng = _to_float(payload.get('longitude', payload.get('lng', payload.get('lon'))))
    if lat is not None and lng is not None:
        return ExplicitCoordinates(latitude=lat, longitude=lng)

    nested = payload.get('coordinates')
    if isinstance(nested, Mapping):
        # {"coordinates": {"type": "Point", "coordinates": [lng, lat]}}
        return classify_coordinate_source(nested)
    if isinstance(nested, str):
        return classify_coordinate_source(nested)
    if isinstance(nested, (list, tuple)):
        if len(nested) < 2:
            return None
        lng, lat = _to_float(nested[0]), _to_float(nested[1])
        if lat is None or lng is None:
            return None
        try:
            return NestedPoint(coordinates=[lng, lat])
        except ValidationError:
            return None

    return None

def normalize_coordinates(payload: Any) -> Optional[Coordinate]:
    """
    Extract a canonical Coordinate from a heterogeneous location payload.

    Accepted shapes:
        {"latitude": 39.76, "longitude": -86.15} (also lat/lng)
        {"coordinates": [-86.15, 39.76]}  longitude first
        "POINT(-86.15 39.76)"

    Suspicious results are logged but returned unchanged.

    Returns:
        Coordinate, or None if the payload holds no usable shape
    """
    source = classify_coordinate_source(payload)
    if source is None:
        return None

    coordinate = source.to_coordinate()
    reason = find_suspicious_reason(coordinate)
    if reason:
        logger.warning(f"Suspicious coordinates from {source.kind} payload {coordinate}: {reason}")
    return coordinate

def find_suspicious_reason(coordinate: Coordinate) -> Optional[str]:
    """
    Explain why a coordinate looks wrong, or return None if it looks plausible.

    Out-of-range values and values outside the expected service region are
    reported; both usually mean latitude and longitude were swapped.
    """
    if not coordinate.in_range:
        return "latitude/longitude out of range, values may be swapped"

    settings = get_settings()
    in_region = (
        settings.EXPECTED_REGION_MIN_LAT <= coordinate.latitude <= settings.EXPECTED_REGION_MAX_LAT and
        settings.EXPECTED_REGION_MIN_LNG <= coordinate.longitude <= settings.EXPECTED_REGION_MAX_LNG
    )
    if not in_region:
        swapped = Coordinate(latitude=coordinate.longitude, longitude=coordinate.latitude)
        swapped_in_region = (
            swapped.in_range and
            settings.EXPECTED_REGION_MIN_LAT <= swapped.latitude <= settings.EXPECTED_REGION_MAX_LAT and
            settings.EXPECTED_REGION_MIN_LNG <= swapped.longitude <= settings.EXPECTED_REGION_MAX_LNG
        )
        if swapped_in_region:
            return "outside expected region; latitude and longitude appear swapped"
        return "outside expected region"

    return None

def is_suspicious_coordinate(coordinate: Coordinate) -> bool:
    return find_suspicious_reason(coordinate) is not None

def format_coordinates(coordinate: Coordinate) -> str:
    """Format coordinates as "lat,lng" with six decimals."""
    return f"{coordinate.latitude:.6f},{coordinate.longitude:.6f}"

def get_directions_url(destination: Coordinate, label: Optional[str] = None) -> str:
    """Google Maps directions URL usable on both iOS and Android."""
    point = format_coordinates(destination)
    query = f"{label}@{point}" if label else point
    return f"https://www.google.com/maps/dir/?api=1&destination={quote(query, safe='@,')}"

def coordinate_to_payload(coordinate: Optional[Coordinate]) -> Dict[str, Any]:
    """Store both representations, the way the shows table does."""
    if coordinate is None:
        return {'latitude': None, 'longitude': None, 'coordinates': None}
    return {
        'latitude': coordinate.latitude,
        'longitude': coordinate.longitude,
        'coordinates': {
            'type': 'Point',
            'coordinates': [coordinate.longitude, coordinate.latitude]
        }
    }
