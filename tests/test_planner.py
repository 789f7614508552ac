"""
Unit tests for per-hop-pair route planning.
"""
import pytest

from cabletrace.routing import (
    CableGraph,
    Cable,
    Edge,
    FallbackReason,
    Landing,
    PairDecision,
    RoutePlanner,
    SegmentKind,
    build_cable_graph,
    coord_key,
    find_path,
    haversine_km,
)
from cabletrace.routing.resolver import NearestLanding

from conftest import FORTALEZA, LISBON, NEW_YORK, SINGAPORE


def _kinds(plan):
    return [segment.kind for segment in plan.segments]


class TestCableRouting:
    """Test suite for pairs routed along cables."""

    def test_two_landings_single_cable(self, make_hop):
        """Test the three-segment route between two landings ~5000 km apart."""
        west, east = (-30.0, 0.0), (15.0, 0.0)
        assert haversine_km(west, east) == pytest.approx(5004, rel=0.01)
        geometry = (west, (-10.0, 2.0), (5.0, -1.0), east)
        graph = build_cable_graph([Cable("Equator", geometry)], [Landing("W", west), Landing("E", east)])

        plan = RoutePlanner(graph).plan_pair(make_hop(1, west), make_hop(2, east))

        assert plan.decision == PairDecision.CABLE_ROUTED
        assert plan.reason is None
        assert plan.path == [coord_key(west), coord_key(east)]
        assert find_path(graph.adjacency, coord_key(west), coord_key(east)) == plan.path
        assert _kinds(plan) == [SegmentKind.ACCESS, SegmentKind.CABLE, SegmentKind.EGRESS]
        assert plan.segments[0].coordinates == (west, west)
        assert plan.segments[1].coordinates == geometry
        assert plan.segments[1].cable_name == "Equator"
        assert plan.segments[2].coordinates == (east, east)

    def test_hops_near_landings(self, cable_graph, sample_cables, make_hop):
        """Test access and egress legs from hop to true landing coordinates."""
        porto, boston = (-8.6, 41.15), (-71.06, 42.36)
        plan = RoutePlanner(cable_graph).plan_pair(make_hop(1, porto), make_hop(2, boston))

        assert plan.decision == PairDecision.CABLE_ROUTED
        assert plan.cables == ["Atlantic-1"]
        assert plan.segments[0].coordinates == (porto, LISBON)
        assert plan.segments[1].coordinates == sample_cables[0].coordinates
        assert plan.segments[2].coordinates == (NEW_YORK, boston)
        assert plan.source_landing.key == coord_key(LISBON)
        assert plan.target_landing.key == coord_key(NEW_YORK)

    def test_multi_cable_path_orients_geometry(self, cable_graph, sample_cables, make_hop):
        """Test a two-cable path with the first cable walked backwards."""
        plan = RoutePlanner(cable_graph).plan_pair(make_hop(1, NEW_YORK), make_hop(2, FORTALEZA))

        assert plan.path == [coord_key(NEW_YORK), coord_key(LISBON), coord_key(FORTALEZA)]
        assert plan.cables == ["Atlantic-1", "South-1"]
        assert _kinds(plan) == [SegmentKind.ACCESS, SegmentKind.CABLE, SegmentKind.CABLE, SegmentKind.EGRESS]
        assert plan.segments[1].coordinates == sample_cables[0].coordinates[::-1]
        assert plan.segments[2].coordinates == sample_cables[1].coordinates

    def test_same_landing_both_hops(self, cable_graph, make_hop):
        """Test that two hops at one landing route through a single-landing path."""
        plan = RoutePlanner(cable_graph).plan_pair(make_hop(1, (-9.2, 38.7)), make_hop(2, (-9.1, 38.75)))

        assert plan.decision == PairDecision.CABLE_ROUTED
        assert plan.path == [coord_key(LISBON)]
        assert _kinds(plan) == [SegmentKind.ACCESS, SegmentKind.EGRESS]

    def test_segments_have_two_points(self, cable_graph, make_hop):
        """Test that every emitted segment is drawable."""
        hops = [make_hop(1, NEW_YORK), make_hop(2, FORTALEZA), make_hop(3, SINGAPORE)]
        for segment in RoutePlanner(cable_graph).segments(hops):
            assert len(segment.coordinates) >= 2


class TestFallbacks:
    """Test suite for direct-line fallbacks and skipped pairs."""

    def test_no_network(self, make_hop):
        """Test that a planner without datasets draws one direct line."""
        planner = RoutePlanner(None)
        plan = planner.plan_pair(make_hop(1, LISBON), make_hop(2, NEW_YORK))

        assert planner.fallback_mode
        assert plan.decision == PairDecision.DIRECT_FALLBACK
        assert plan.reason == FallbackReason.DATA_UNAVAILABLE
        assert _kinds(plan) == [SegmentKind.DIRECT]
        assert plan.segments[0].coordinates == (LISBON, NEW_YORK)

    def test_empty_cable_dataset(self, sample_landings, make_hop):
        """Test that with landings but no cables every pair is one direct segment."""
        planner = RoutePlanner(build_cable_graph([], sample_landings))
        hops = [make_hop(1, LISBON), make_hop(2, NEW_YORK), make_hop(3, FORTALEZA)]
        plans = list(planner.plan_route(hops))

        assert len(plans) == 2
        for plan in plans:
            assert plan.reason == FallbackReason.DATA_UNAVAILABLE
            assert len(plan.segments) == 1
            assert plan.segments[0].kind == SegmentKind.DIRECT

    def test_path_not_found(self, cable_graph, make_hop):
        """Test that unconnected landings fall back to a landing-to-landing line."""
        plan = RoutePlanner(cable_graph).plan_pair(make_hop(1, (103.8, 1.3)), make_hop(2, LISBON))

        assert plan.decision == PairDecision.DIRECT_FALLBACK
        assert plan.reason == FallbackReason.PATH_NOT_FOUND
        assert plan.path is None
        assert _kinds(plan) == [SegmentKind.ACCESS, SegmentKind.DIRECT, SegmentKind.EGRESS]
        assert plan.segments[1].coordinates == (SINGAPORE, LISBON)

    def test_resolution_failed(self, make_hop):
        """Test that a hop with no resolvable landing draws a direct line."""
        nowhere = (float("nan"), float("nan"))
        graph = CableGraph(
            adjacency={"x": [Edge(to="y", cable_name="c", geometry=())]},
            coord_map={"x": nowhere},
        )
        plan = RoutePlanner(graph).plan_pair(make_hop(1, LISBON), make_hop(2, NEW_YORK))

        assert plan.reason == FallbackReason.RESOLUTION_FAILED
        assert _kinds(plan) == [SegmentKind.DIRECT]

    def test_landing_unknown(self, cable_graph, make_hop, mocker):
        """Test that a resolved key absent from the coordinate map draws a direct line."""
        mocker.patch(
            "cabletrace.routing.planner.nearest_landing",
            return_value=NearestLanding(key="0.000,0.000", distance_km=1.0),
        )
        plan = RoutePlanner(cable_graph).plan_pair(make_hop(1, LISBON), make_hop(2, NEW_YORK))

        assert plan.reason == FallbackReason.LANDING_UNKNOWN
        assert plan.segments[0].coordinates == (LISBON, NEW_YORK)

    def test_missing_coordinates_skip_pair(self, cable_graph, make_hop):
        """Test that a hop without location skips its pairs but not later ones."""
        hops = [
            make_hop(1, LISBON),
            make_hop(2, error="geo lookup failed"),
            make_hop(3, NEW_YORK),
            make_hop(4, FORTALEZA),
        ]
        plans = list(RoutePlanner(cable_graph).plan_route(hops))

        assert [plan.decision for plan in plans] == [
            PairDecision.NO_COORDINATES,
            PairDecision.NO_COORDINATES,
            PairDecision.CABLE_ROUTED,
        ]
        assert plans[0].segments == [] and plans[1].segments == []
        assert plans[2].path == [coord_key(NEW_YORK), coord_key(LISBON), coord_key(FORTALEZA)]

    def test_single_hop_route(self, cable_graph, make_hop):
        """Test that one hop forms no pair."""
        assert list(RoutePlanner(cable_graph).plan_route([make_hop(1, LISBON)])) == []


class TestPairPlanDescribe:
    """Test suite for the per-pair diagnostic trace."""

    def test_describe_cable_route(self, cable_graph, make_hop):
        """Test that the description names decision, landings and cables."""
        plan = RoutePlanner(cable_graph).plan_pair(make_hop(1, LISBON), make_hop(2, NEW_YORK), index=3)
        text = plan.describe()

        assert text.startswith("pair 3 hop 1->2: cable_routed")
        assert coord_key(LISBON) in text
        assert "via Atlantic-1" in text
        assert text.endswith("3 segment(s)")

    def test_describe_fallback(self, make_hop):
        """Test that the description names the fallback reason."""
        plan = RoutePlanner(None).plan_pair(make_hop(1, LISBON), make_hop(2, NEW_YORK))
        assert "direct_fallback (data_unavailable)" in plan.describe()
