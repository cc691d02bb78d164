"""Tests for time-optimal path finding.

Tests: find_route, find_route_with_diagnostics, shortest_times_from,
find_nearest_node, feature-level helpers
"""

import numpy as np
import pytest

from conftest import make_area, make_run
from skiresort_navigator.generators.graph_builder import build_navigation_graph
from skiresort_navigator.model.diagnostics import UnreachableReason
from skiresort_navigator.model.edge import EdgeType
from skiresort_navigator.model.navigation_graph import NavigationGraph
from skiresort_navigator.routing.path_finder import (
    find_edge_path,
    find_nearest_node,
    find_route,
    find_route_between_features,
    find_route_from_location,
    find_route_with_diagnostics,
    get_destinations,
    shortest_times_from,
)


class TestFindRoute:
    """Dijkstra on travel time."""

    def test_fastest_run_to_valley(self, resort_graph) -> None:
        """From the top station the steep Black Wall beats the long Panorama."""
        route = find_route(graph=resort_graph, from_node_id="lift-L1-end", to_node_id="lift-L1-start")

        assert route is not None
        assert [s.label for s in route.segments] == ["Black Wall"]
        assert route.segments[0].type == EdgeType.RUN
        assert 320 < route.total_time_s < 345
        assert route.total_elevation_loss_m == pytest.approx(800.0)
        assert route.total_elevation_gain_m == 0.0
        assert route.edge_ids == ("walk-lift-L1-end-run-R2-start", "edge-run-R2", "walk-run-R2-end-lift-L1-start")

    def test_loop_ride_down_and_up(self, loop_graph) -> None:
        """Without the walk across the summit, getting back up means skiing down and riding up."""
        graph = loop_graph.without_edges(["walk-run-R1-start-lift-L1-end"])
        route = find_route(graph=graph, from_node_id="run-R1-start", to_node_id="lift-L1-end")

        assert [s.label for s in route.segments] == ["Panorama", "Express"]
        assert [s.type for s in route.segments] == [EdgeType.RUN, EdgeType.LIFT]
        assert route.total_elevation_gain_m == pytest.approx(200.0)
        assert route.total_elevation_loss_m == pytest.approx(200.0)

    def test_short_gap_walked(self) -> None:
        """Two runs 30m apart are joined by a single flat walk."""
        area = make_area(
            runs=[
                make_run("R1", [[7.0, 46.010, 2200.0], [7.0, 46.000, 2000.0]]),
                make_run("R2", [[7.0, 46.00027, 2000.0], [7.0, 45.990, 1800.0]]),
            ],
            lifts=[],
        )
        graph = build_navigation_graph(ski_area=area)
        route = find_route(graph=graph, from_node_id="run-R1-end", to_node_id="run-R2-start")

        assert len(route.segments) == 1
        walk = route.segments[0]
        assert walk.type == EdgeType.WALK
        assert walk.label == "Walk to destination"
        assert walk.distance_m == pytest.approx(30.0, abs=1.0)
        assert walk.time_s == pytest.approx(125.0, abs=5.0)

        back = find_route(graph=graph, from_node_id="run-R2-start", to_node_id="run-R1-end")
        assert [s.type for s in back.segments] == [EdgeType.WALK]
        assert back.total_distance_m == pytest.approx(walk.distance_m)

    def test_deterministic(self, resort_graph) -> None:
        first = find_route(graph=resort_graph, from_node_id="lift-L1-end", to_node_id="lift-L1-start")
        second = find_route(graph=resort_graph, from_node_id="lift-L1-end", to_node_id="lift-L1-start")
        assert first == second

    def test_route_to_itself_is_empty(self, loop_graph) -> None:
        route = find_route(graph=loop_graph, from_node_id="run-R1-start", to_node_id="run-R1-start")

        assert route.segments == ()
        assert (route.start_node_id, route.end_node_id) == ("run-R1-start", "run-R1-start")
        assert route.total_time_s == 0
        assert route.total_distance_m == 0
        assert find_edge_path(graph=loop_graph, from_node_id="run-R1-start", to_node_id="run-R1-start") == []

    def test_unknown_node_gives_none(self, resort_graph) -> None:
        assert find_route(graph=resort_graph, from_node_id="lift-L1-end", to_node_id="nowhere") is None
        assert find_route(graph=resort_graph, from_node_id="nowhere", to_node_id="lift-L1-end") is None

    def test_unreachable_gives_none(self, loop_graph) -> None:
        """Without the lift nothing leads back up from the valley."""
        assert find_edge_path(graph=loop_graph, from_node_id="lift-L1-end", to_node_id="run-R1-end") is not None
        assert find_route(graph=loop_graph.without_edges(["edge-lift-L1"]), from_node_id="run-R1-end", to_node_id="lift-L1-end") is None

    def test_route_times_match_edge_times(self, resort_graph) -> None:
        route = find_route(graph=resort_graph, from_node_id="lift-L1-end", to_node_id="lift-L1-start")
        expected = sum(resort_graph.edges[edge_id].time_s for edge_id in route.edge_ids)
        assert route.total_time_s == pytest.approx(expected)


class TestShortestTimes:
    def test_triangle_inequality(self, resort_graph) -> None:
        """Shortest times never improve by routing through an intermediate node."""
        node_ids = resort_graph.routing_matrix().node_ids
        table = np.array([shortest_times_from(graph=resort_graph, node_id=node_id) for node_id in node_ids])
        for a in range(len(node_ids)):
            for b in range(len(node_ids)):
                for c in range(len(node_ids)):
                    if np.isfinite(table[a, b]) and np.isfinite(table[b, c]):
                        assert table[a, c] <= table[a, b] + table[b, c] + 1e-6

    def test_reverse_times(self, loop_graph) -> None:
        index = loop_graph.routing_matrix().index
        forward = shortest_times_from(graph=loop_graph, node_id="run-R1-start")
        backward = shortest_times_from(graph=loop_graph, node_id="run-R1-end", reverse=True)
        assert backward[index["run-R1-start"]] == pytest.approx(forward[index["run-R1-end"]])


class TestDiagnosticsResult:
    def test_found_route_has_no_diagnostics(self, resort_graph) -> None:
        result = find_route_with_diagnostics(graph=resort_graph, from_node_id="lift-L1-end", to_node_id="lift-L1-start")
        assert result.found
        assert result.diagnostics is None

    def test_route_to_itself_is_found(self, loop_graph) -> None:
        result = find_route_with_diagnostics(graph=loop_graph, from_node_id="run-R1-start", to_node_id="run-R1-start")

        assert result.found
        assert result.route.total_time_s == 0
        assert result.diagnostics is None

    def test_missing_start_is_diagnosed(self, resort_graph) -> None:
        result = find_route_with_diagnostics(graph=resort_graph, from_node_id="nowhere", to_node_id="lift-L1-start")
        assert not result.found
        assert result.diagnostics.reason == UnreachableReason.NO_START_NODE
        assert not result.diagnostics.start_node_exists


class TestNearestNode:
    def test_nearest_node(self, resort_graph) -> None:
        node = find_nearest_node(graph=resort_graph, lat=46.0001, lng=7.0)
        assert node.id in {"run-R1-end", "run-R2-end", "lift-L1-start"}

    def test_elevation_breaks_horizontal_tie(self, resort_graph) -> None:
        """Midway between two run starts, the one at matching elevation wins."""
        node = find_nearest_node(graph=resort_graph, lat=46.02, lng=7.00025, elevation=2295.0)
        assert node.id == "run-R2-start"

    def test_max_distance(self, resort_graph) -> None:
        assert find_nearest_node(graph=resort_graph, lat=46.1, lng=7.0, max_distance_m=500) is None
        assert find_nearest_node(graph=resort_graph, lat=46.1, lng=7.0) is not None

    def test_empty_graph(self) -> None:
        assert find_nearest_node(graph=NavigationGraph(), lat=46.0, lng=7.0) is None


class TestFeatureRouting:
    def test_destinations_sorted_by_name(self, resort_graph) -> None:
        destinations = get_destinations(graph=resort_graph)

        assert [d.name for d in destinations] == ["Black Wall", "Panorama", "Valley Gondola"]
        gondola = destinations[2]
        assert (gondola.type, gondola.node_id, gondola.lift_type) == ("lift", "lift-L1-start", "gondola")
        assert destinations[0].difficulty == "advanced"

    def test_route_between_features(self, resort_graph) -> None:
        result = find_route_between_features(graph=resort_graph, from_feature=("lift", "L1"), to_feature=("run", "R2"))

        assert result.found
        assert result.route.start_node_id == "lift-L1-end"
        assert result.route.end_node_id == "run-R2-start"

    def test_route_between_unknown_features(self, resort_graph) -> None:
        result = find_route_between_features(graph=resort_graph, from_feature=("lift", "X"), to_feature=("run", "R2"))
        assert result.diagnostics.reason == UnreachableReason.NO_START_NODE

    def test_route_from_location_snaps_to_departure(self, resort_graph) -> None:
        """Just below the top station the closest departure point is the Panorama start."""
        result = find_route_from_location(graph=resort_graph, lat=46.0195, lng=7.0, to_node_id="lift-L1-start")

        assert result.route.start_node_id == "run-R1-start"
        assert result.route.segments[0].label == "Black Wall"

    def test_route_from_far_location(self, resort_graph) -> None:
        assert find_route_from_location(graph=resort_graph, lat=46.2, lng=7.0, to_node_id="lift-L1-start") is None
