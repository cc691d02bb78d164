"""Tests for POI and map point injection into working copies."""

import pytest

from skiresort_navigator.model.node import NodeKind
from skiresort_navigator.routing.path_finder import find_route
from skiresort_navigator.routing.point_injection import (
    add_map_point_to_graph,
    add_poi_node_to_graph,
    estimate_elevation,
)


class TestPoiInjection:
    def test_frozen_graph_rejected(self, resort_graph) -> None:
        with pytest.raises(ValueError, match="read-only"):
            add_poi_node_to_graph(graph=resort_graph, poi_id="T2", lat=46.0198, lng=7.0002)

    def test_poi_connected_both_ways(self, resort_graph) -> None:
        working = resort_graph.working_copy()
        node_id = add_poi_node_to_graph(graph=working, poi_id="T2", lat=46.0198, lng=7.0002, name="Summit WC")

        assert node_id == "poi-T2"
        node = working.nodes[node_id]
        assert node.kind == NodeKind.POI
        assert node.elevation == 2300.0
        assert "walk-run-R1-start-poi-T2" in working.edges
        assert "walk-poi-T2-run-R1-start" in working.edges
        assert working.edges["walk-run-R2-start-poi-T2"].name == "Walk to Summit WC"
        assert working.get_stats()["walk"] == resort_graph.get_stats()["walk"] + 6

    def test_injection_is_idempotent(self, resort_graph) -> None:
        working = resort_graph.working_copy()
        add_poi_node_to_graph(graph=working, poi_id="T2", lat=46.0198, lng=7.0002)
        edges = working.get_stats()["edges"]

        assert add_poi_node_to_graph(graph=working, poi_id="T2", lat=46.0198, lng=7.0002) == "poi-T2"
        assert working.get_stats()["edges"] == edges

    def test_base_graph_untouched(self, resort_graph) -> None:
        before = resort_graph.get_stats()
        working = resort_graph.working_copy()
        add_poi_node_to_graph(graph=working, poi_id="T2", lat=46.0198, lng=7.0002)

        assert "poi-T2" not in resort_graph.nodes
        assert resort_graph.get_stats() == before

    def test_estimate_elevation(self, resort_graph) -> None:
        assert estimate_elevation(graph=resort_graph, lat=46.0001, lng=7.0) == 1500.0


class TestMapPointInjection:
    def test_point_on_run_splits_edge(self, resort_graph) -> None:
        """A click halfway down Black Wall splits it into two halves."""
        working = resort_graph.working_copy()
        node_id = add_map_point_to_graph(graph=working, point_id="m1", lat=46.010, lng=7.00025)

        node = working.nodes[node_id]
        assert node_id == "mappoint-m1"
        assert node.kind == NodeKind.MAP_POINT
        assert node.feature_id == "R2"
        assert node.elevation == pytest.approx(1897.5, abs=5.0)

        original = working.edges["edge-run-R2"]
        head = working.edges["edge-run-R2-to-split"]
        tail = working.edges["edge-run-R2-from-split"]
        assert head.time_s + tail.time_s == pytest.approx(original.time_s)
        assert (head.to_node_id, tail.from_node_id) == (node_id, node_id)
        assert "edge-run-R2" not in {edge.id for edge in working.active_edges()}
        assert "edge-run-R2" in {edge.id for edge in resort_graph.active_edges()}

    def test_route_from_split_point(self, resort_graph) -> None:
        working = resort_graph.working_copy()
        node_id = add_map_point_to_graph(graph=working, point_id="m1", lat=46.010, lng=7.00025)
        route = find_route(graph=working, from_node_id=node_id, to_node_id="lift-L1-start")

        assert [s.label for s in route.segments] == ["Black Wall"]
        assert route.total_time_s == pytest.approx(working.edges["edge-run-R2-from-split"].time_s, abs=0.01)

    def test_point_away_from_runs_walks_to_nodes(self, resort_graph) -> None:
        """~190m east of the valley station: no run within snapping range, walk instead."""
        working = resort_graph.working_copy()
        node_id = add_map_point_to_graph(graph=working, point_id="m2", lat=46.0, lng=7.0025)

        assert working.nodes[node_id].elevation == 1500.0
        assert "walk-mappoint-m2-lift-L1-start" in working.edges
        route = find_route(graph=working, from_node_id=node_id, to_node_id="lift-L1-end")
        assert [s.type.value for s in route.segments] == ["walk", "lift"]

    def test_far_point_connects_to_nothing(self, resort_graph) -> None:
        working = resort_graph.working_copy()
        node_id = add_map_point_to_graph(graph=working, point_id="far", lat=46.05, lng=7.05)

        assert working.outgoing_edges(node_id=node_id) == []
        assert find_route(graph=working, from_node_id=node_id, to_node_id="lift-L1-start") is None

    def test_same_point_id_reused(self, resort_graph) -> None:
        working = resort_graph.working_copy()
        first = add_map_point_to_graph(graph=working, point_id="m1", lat=46.010, lng=7.00025)
        assert add_map_point_to_graph(graph=working, point_id="m1", lat=46.010, lng=7.00025) == first
