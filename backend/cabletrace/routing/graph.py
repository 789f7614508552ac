"""
Cable graph construction.

Landings become vertices keyed by their rounded coordinate. Each cable whose
two ends lie near two distinct landings contributes one edge per direction,
carrying the cable geometry oriented from source to target landing.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .datasets import Cable, Landing
from .geo import Coordinate, DEFAULT_PRECISION, coord_key
from .resolver import nearest_landing

logger = logging.getLogger(__name__)

DEFAULT_PROXIMITY_THRESHOLD_KM = 50.0


@dataclass(frozen=True)
class Edge:
    """Directed cable edge from one landing key to another."""

    to: str
    cable_name: str
    geometry: Tuple[Coordinate, ...]


@dataclass
class CableGraph:
    """Adjacency of landings connected by cables, plus the key lookup table.

    Attributes:
        adjacency: Landing key -> outgoing edges, in cable insertion order.
            Only landings that end at least one cable appear as keys.
        coord_map: Landing key -> true (unrounded) coordinate for every
            known landing, connected or not.
        landing_names: Landing key -> landing name.
        cable_count: Number of cables offered to the builder.
        dropped_cables: Cables that did not resolve to two distinct landings.
        precision: Decimal places used for coordinate keys.
    """

    adjacency: Dict[str, List[Edge]] = field(default_factory=dict)
    coord_map: Dict[str, Coordinate] = field(default_factory=dict)
    landing_names: Dict[str, str] = field(default_factory=dict)
    cable_count: int = 0
    dropped_cables: int = 0
    precision: int = DEFAULT_PRECISION

    def edges(self, key: str) -> List[Edge]:
        """Outgoing edges of a landing key (empty for unknown keys)."""
        return self.adjacency.get(key, [])

    def coordinate(self, key: str) -> Optional[Coordinate]:
        return self.coord_map.get(key)

    @property
    def edge_count(self) -> int:
        return sum(len(edges) for edges in self.adjacency.values())

    @property
    def is_empty(self) -> bool:
        """True when no landing or no cable edge is available for routing."""
        return not self.coord_map or not self.adjacency


def build_cable_graph(
    cables: Iterable[Cable],
    landings: Iterable[Landing],
    proximity_threshold_km: float = DEFAULT_PROXIMITY_THRESHOLD_KM,
    precision: int = DEFAULT_PRECISION,
) -> CableGraph:
    """
    Build the landing graph from cable and landing datasets.

    Args:
        cables: Cable routes with flattened geometry
        landings: Landing points; later landings overwrite earlier ones
            that round to the same key
        proximity_threshold_km: Max distance between a cable end and a landing
        precision: Decimal places for coordinate keys

    Returns:
        CableGraph. Cables with fewer than two points, with an end far from
        every landing, or with both ends on the same landing are dropped
        without error.
    """
    graph = CableGraph(precision=precision)

    for landing in landings:
        key = coord_key(landing.coordinate, precision)
        graph.coord_map[key] = landing.coordinate
        graph.landing_names[key] = landing.name

    for cable in cables:
        graph.cable_count += 1
        coordinates = tuple(cable.coordinates)
        if len(coordinates) < 2:
            graph.dropped_cables += 1
            continue

        start = nearest_landing(coordinates[0], graph.coord_map, proximity_threshold_km)
        end = nearest_landing(coordinates[-1], graph.coord_map, proximity_threshold_km)
        if start is None or end is None or start.key == end.key:
            graph.dropped_cables += 1
            logger.debug(f"Dropping cable '{cable.name}': no distinct landings at both ends")
            continue

        graph.adjacency.setdefault(start.key, []).append(
            Edge(to=end.key, cable_name=cable.name, geometry=coordinates)
        )
        graph.adjacency.setdefault(end.key, []).append(
            Edge(to=start.key, cable_name=cable.name, geometry=coordinates[::-1])
        )

    logger.info(
        f"Built cable graph: {len(graph.adjacency)} connected landing(s), "
        f"{graph.edge_count} edge(s), {graph.dropped_cables}/{graph.cable_count} cable(s) dropped"
    )
    return graph
