"""
Geodesic helpers and coordinate keys.

Coordinates are ``(longitude, latitude)`` pairs in WGS84 degrees, the
order GeoJSON uses.
"""

import math
from typing import Tuple

Coordinate = Tuple[float, float]

EARTH_RADIUS_KM = 6371.0
DEFAULT_PRECISION = 3


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """
    Great-circle distance between two coordinates.

    Args:
        a: First (lon, lat) pair
        b: Second (lon, lat) pair

    Returns:
        Distance in kilometers on a sphere of mean Earth radius.
        Non-numeric components propagate as NaN.
    """
    lon1, lat1 = a
    lon2, lat2 = b
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def coord_key(coord: Coordinate, precision: int = DEFAULT_PRECISION) -> str:
    """
    Canonical vertex key for a coordinate.

    Both components are rounded to ``precision`` decimals, so coordinates
    closer than the rounding step share a key. Landings that collide this
    way are deduplicated on purpose.
    """
    lon, lat = coord
    return f"{lon:.{precision}f},{lat:.{precision}f}"


def as_coordinate(value) -> Coordinate:
    """Normalize a GeoJSON position (list, possibly with altitude) to (lon, lat)."""
    return (float(value[0]), float(value[1]))
