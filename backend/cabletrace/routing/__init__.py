"""
Cable-path routing: geodesy, dataset loading, graph building, path search
and per-hop-pair route planning.
"""

from .geo import Coordinate, coord_key, haversine_km
from .datasets import Cable, Landing, load_cables, load_landings
from .graph import CableGraph, Edge, build_cable_graph
from .resolver import NearestLanding, nearest_landing
from .pathfinder import find_path
from .planner import (
    FallbackReason,
    PairDecision,
    PairPlan,
    RoutePlanner,
    RouteSegment,
    SegmentKind,
    collect_segments,
)

__all__ = [
    "Coordinate",
    "coord_key",
    "haversine_km",
    "Cable",
    "Landing",
    "load_cables",
    "load_landings",
    "CableGraph",
    "Edge",
    "build_cable_graph",
    "NearestLanding",
    "nearest_landing",
    "find_path",
    "FallbackReason",
    "PairDecision",
    "PairPlan",
    "RoutePlanner",
    "RouteSegment",
    "SegmentKind",
    "collect_segments",
]
