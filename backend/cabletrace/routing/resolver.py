"""
Nearest-landing resolution.
"""

from dataclasses import dataclass
from typing import Mapping, Optional

from .geo import Coordinate, haversine_km


@dataclass(frozen=True)
class NearestLanding:
    """Closest landing key to a point and its great-circle distance."""

    key: str
    distance_km: float


def nearest_landing(
    point: Coordinate,
    candidates: Mapping[str, Coordinate],
    max_distance_km: Optional[float] = None,
) -> Optional[NearestLanding]:
    """
    Find the candidate landing closest to ``point``.

    Every candidate is scanned; on exact ties the first one in iteration
    order wins.

    Args:
        point: (lon, lat) to resolve
        candidates: Mapping of coordinate key to true landing coordinate
        max_distance_km: When given, only landings strictly closer than this
            qualify (graph construction). When omitted the closest landing is
            returned however far away it is (route planning).

    Returns:
        NearestLanding, or None if there are no (qualifying) candidates
    """
    best_key = None
    best_distance = float("inf")
    for key, coordinate in candidates.items():
        distance = haversine_km(point, coordinate)
        if distance < best_distance and (max_distance_km is None or distance < max_distance_km):
            best_key = key
            best_distance = distance

    if best_key is None:
        return None
    return NearestLanding(key=best_key, distance_km=best_distance)
