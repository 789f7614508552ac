"""
Route planning between consecutive traceroute hops.

For each consecutive hop pair the planner decides whether the leg can be
drawn along submarine cables (hop -> nearest landing -> cable path ->
nearest landing -> hop) or must fall back to a straight line. Every
decision is recorded on a PairPlan so callers and tests can inspect the
reason, not only the geometry.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .geo import Coordinate
from .graph import CableGraph
from .pathfinder import DEFAULT_SEARCH_LIMIT, find_path
from .resolver import NearestLanding, nearest_landing
from ..schemas.hop import Hop

logger = logging.getLogger(__name__)


class PairDecision(str, enum.Enum):
    """How one hop pair was routed.

    Attributes:
        CABLE_ROUTED: Drawn through landings along a cable path
        DIRECT_FALLBACK: Drawn (at least partly) as straight lines
        NO_COORDINATES: A hop has no location, nothing drawn
    """

    CABLE_ROUTED = "cable_routed"
    DIRECT_FALLBACK = "direct_fallback"
    NO_COORDINATES = "no_coordinates"


class FallbackReason(str, enum.Enum):
    """Why a pair was not cable routed."""

    DATA_UNAVAILABLE = "data_unavailable"  # no cable network loaded
    RESOLUTION_FAILED = "resolution_failed"  # no landing found for a hop
    LANDING_UNKNOWN = "landing_unknown"  # resolved key missing from coord map
    PATH_NOT_FOUND = "path_not_found"  # landings not connected by cables


class SegmentKind(str, enum.Enum):
    ACCESS = "access"  # hop -> landing
    CABLE = "cable"  # landing -> landing along a cable edge
    DIRECT = "direct"  # straight fallback line
    EGRESS = "egress"  # landing -> hop


@dataclass(frozen=True)
class RouteSegment:
    """One animatable leg: an ordered sequence of at least two coordinates."""

    coordinates: Tuple[Coordinate, ...]
    kind: SegmentKind
    cable_name: Optional[str] = None


@dataclass
class PairPlan:
    """Routing outcome for one consecutive hop pair."""

    index: int
    source: Hop
    target: Hop
    decision: PairDecision
    reason: Optional[FallbackReason] = None
    segments: List[RouteSegment] = field(default_factory=list)
    source_landing: Optional[NearestLanding] = None
    target_landing: Optional[NearestLanding] = None
    path: Optional[List[str]] = None
    cables: List[str] = field(default_factory=list)

    def describe(self) -> str:
        """Diagnostic trace of the decision, for logs and the session panel."""
        text = f"pair {self.index} hop {self.source.hop}->{self.target.hop}: {self.decision.value}"
        if self.reason:
            text += f" ({self.reason.value})"
        if self.source_landing:
            text += f", start landing {self.source_landing.key} at {self.source_landing.distance_km:.1f} km"
        if self.target_landing:
            text += f", end landing {self.target_landing.key} at {self.target_landing.distance_km:.1f} km"
        if self.path is not None:
            text += f", path of {len(self.path)} landing(s)"
        if self.cables:
            text += f" via {', '.join(self.cables)}"
        return text + f", {len(self.segments)} segment(s)"


class RoutePlanner:
    """Plan animation segments over a read-only cable graph.

    The graph may be shared by any number of planners; a planner built with
    no graph (or an empty one) routes every pair as a direct line.
    """

    def __init__(self, network: Optional[CableGraph] = None, search_limit: int = DEFAULT_SEARCH_LIMIT):
        self.network = network
        self.search_limit = search_limit

    @property
    def fallback_mode(self) -> bool:
        return self.network is None or self.network.is_empty

    def plan_pair(self, source: Hop, target: Hop, index: int = 0) -> PairPlan:
        """
        Route one hop pair.

        Args:
            source: Earlier hop
            target: Next hop
            index: Position of the pair in the route, for diagnostics

        Returns:
            PairPlan; its segments are empty only for NO_COORDINATES
        """
        plan = PairPlan(index=index, source=source, target=target, decision=PairDecision.NO_COORDINATES)
        a, b = source.coordinate, target.coordinate
        if a is None or b is None:
            return self._log(plan)

        if self.fallback_mode:
            return self._log(self._direct(plan, a, b, FallbackReason.DATA_UNAVAILABLE))

        coord_map = self.network.coord_map
        plan.source_landing = nearest_landing(a, coord_map)
        plan.target_landing = nearest_landing(b, coord_map)
        if plan.source_landing is None or plan.target_landing is None:
            return self._log(self._direct(plan, a, b, FallbackReason.RESOLUTION_FAILED))

        landing_a = coord_map.get(plan.source_landing.key)
        landing_b = coord_map.get(plan.target_landing.key)
        if landing_a is None or landing_b is None:
            return self._log(self._direct(plan, a, b, FallbackReason.LANDING_UNKNOWN))

        plan.segments.append(RouteSegment((a, landing_a), SegmentKind.ACCESS))

        plan.path = find_path(
            self.network.adjacency,
            plan.source_landing.key,
            plan.target_landing.key,
            self.search_limit,
        )
        if plan.path is None:
            plan.decision = PairDecision.DIRECT_FALLBACK
            plan.reason = FallbackReason.PATH_NOT_FOUND
            plan.segments.append(RouteSegment((landing_a, landing_b), SegmentKind.DIRECT))
        else:
            plan.decision = PairDecision.CABLE_ROUTED
            for here, there in zip(plan.path, plan.path[1:]):
                edge = next(e for e in self.network.edges(here) if e.to == there)
                plan.cables.append(edge.cable_name)
                plan.segments.append(RouteSegment(edge.geometry, SegmentKind.CABLE, edge.cable_name))

        plan.segments.append(RouteSegment((landing_b, b), SegmentKind.EGRESS))
        return self._log(plan)

    def plan_route(self, hops: Sequence[Hop]) -> Iterator[PairPlan]:
        """Yield one PairPlan per consecutive hop pair, in order."""
        for index, (source, target) in enumerate(zip(hops, hops[1:])):
            yield self.plan_pair(source, target, index)

    def segments(self, hops: Sequence[Hop]) -> Iterator[RouteSegment]:
        """Yield the route's segments incrementally, pair by pair."""
        for plan in self.plan_route(hops):
            yield from plan.segments

    @staticmethod
    def _direct(plan: PairPlan, a: Coordinate, b: Coordinate, reason: FallbackReason) -> PairPlan:
        plan.decision = PairDecision.DIRECT_FALLBACK
        plan.reason = reason
        plan.segments = [RouteSegment((a, b), SegmentKind.DIRECT)]
        return plan

    @staticmethod
    def _log(plan: PairPlan) -> PairPlan:
        logger.debug(plan.describe())
        return plan


def collect_segments(plans: Iterable[PairPlan]) -> List[RouteSegment]:
    """Flatten plans into the ordered segment list the animation driver plays."""
    return [segment for plan in plans for segment in plan.segments]
