"""
Loading of the submarine cable and landing point datasets.

Both datasets are GeoJSON FeatureCollections: landings are Point features,
cables are LineString or MultiLineString features. Every feature carries a
``name`` property.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple

from .geo import Coordinate, as_coordinate
from ..errors import DataUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Landing:
    """A point where a submarine cable reaches shore."""

    name: str
    coordinate: Coordinate


@dataclass(frozen=True)
class Cable:
    """A named cable route, multi-part geometry flattened into one sequence."""

    name: str
    coordinates: Tuple[Coordinate, ...]


def flatten_geometry(geometry: Dict[str, Any]) -> Tuple[Coordinate, ...]:
    """
    Flatten a line geometry into one ordered coordinate sequence.

    MultiLineString parts are concatenated in order. Any other geometry
    type yields an empty sequence.
    """
    if not isinstance(geometry, dict):
        return ()
    geom_type = geometry.get("type")
    coordinates = geometry.get("coordinates") or []
    if geom_type == "LineString":
        return tuple(as_coordinate(c) for c in coordinates)
    if geom_type == "MultiLineString":
        return tuple(as_coordinate(c) for part in coordinates for c in part)
    return ()


def _features(collection: Dict[str, Any], label: str) -> List[Dict[str, Any]]:
    if not isinstance(collection, dict) or not isinstance(collection.get("features"), list):
        raise DataUnavailable(f"{label} dataset is not a GeoJSON FeatureCollection")
    return collection["features"]


def _name(feature: Dict[str, Any]) -> str:
    properties = feature.get("properties")
    if not isinstance(properties, dict):
        return ""
    return str(properties.get("name") or "")


def landings_from_geojson(collection: Dict[str, Any]) -> List[Landing]:
    """Parse landing Point features. Features without a usable point are skipped."""
    landings = []
    for feature in _features(collection, "Landing"):
        if not isinstance(feature, dict):
            logger.warning(f"Skipping landing feature that is not an object: {feature!r}")
            continue
        geometry = feature.get("geometry")
        if not isinstance(geometry, dict) or geometry.get("type") != "Point":
            logger.warning(f"Skipping landing '{_name(feature)}' without a Point geometry")
            continue
        try:
            coordinate = as_coordinate(geometry["coordinates"])
        except (KeyError, IndexError, TypeError, ValueError):
            logger.warning(f"Skipping landing '{_name(feature)}' with invalid coordinates")
            continue
        landings.append(Landing(name=_name(feature), coordinate=coordinate))
    return landings


def cables_from_geojson(collection: Dict[str, Any]) -> List[Cable]:
    """Parse cable line features. Geometry problems yield an empty cable, dropped later."""
    cables = []
    for feature in _features(collection, "Cable"):
        if not isinstance(feature, dict):
            logger.warning(f"Skipping cable feature that is not an object: {feature!r}")
            continue
        geometry = feature.get("geometry") or {}
        if not isinstance(geometry, dict):
            logger.warning(f"Skipping cable '{_name(feature)}' without a geometry object")
            continue
        try:
            coordinates = flatten_geometry(geometry)
        except (AttributeError, IndexError, KeyError, TypeError, ValueError):
            logger.warning(f"Skipping cable '{_name(feature)}' with invalid geometry")
            continue
        cables.append(Cable(name=_name(feature), coordinates=coordinates))
    return cables


def _read_geojson(path: str, label: str) -> Dict[str, Any]:
    try:
        with open(Path(path), "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise DataUnavailable(f"Failed to load {label} dataset from {path}: {e}") from e


def load_landings(path: str) -> List[Landing]:
    """
    Load landing points from a GeoJSON file.

    Raises:
        DataUnavailable: If the file is missing, unreadable or not a FeatureCollection
    """
    landings = landings_from_geojson(_read_geojson(path, "landing"))
    logger.info(f"Loaded {len(landings)} landing(s) from {path}")
    return landings


def load_cables(path: str) -> List[Cable]:
    """
    Load cable routes from a GeoJSON file.

    Raises:
        DataUnavailable: If the file is missing, unreadable or not a FeatureCollection
    """
    cables = cables_from_geojson(_read_geojson(path, "cable"))
    logger.info(f"Loaded {len(cables)} cable(s) from {path}")
    return cables
