"""Tests for unreachable-route diagnostics."""

import pytest

from conftest import make_area, make_run
from skiresort_navigator.generators.graph_builder import build_navigation_graph
from skiresort_navigator.model.diagnostics import (
    DifferentStartHint,
    ElevationGapHint,
    MissingNodeHint,
    RegionMismatchHint,
    TooFarToWalkHint,
    UnreachableReason,
    WalkingGapHint,
)
from skiresort_navigator.routing.route_diagnostics import diagnose_unreachable


def _hint_types(diagnostics) -> set[type]:
    return {type(hint) for hint in diagnostics.hints}


class TestDiagnoseUnreachable:
    def test_missing_nodes(self, resort_graph) -> None:
        diagnostics = diagnose_unreachable(graph=resort_graph, from_node_id="lift-L1-end", to_node_id="nowhere")

        assert diagnostics.reason == UnreachableReason.NO_END_NODE
        assert diagnostics.start_node_exists
        assert not diagnostics.end_node_exists
        assert MissingNodeHint(node_id="nowhere", role="Destination") in diagnostics.hints
        assert DifferentStartHint() in diagnostics.hints

    def test_missing_start_takes_precedence(self, resort_graph) -> None:
        diagnostics = diagnose_unreachable(graph=resort_graph, from_node_id="x", to_node_id="y")
        assert diagnostics.reason == UnreachableReason.NO_START_NODE
        assert diagnostics.suggestions[0] == "Start point x is not part of the navigation network."

    def test_different_region_with_elevation_gap(self) -> None:
        """Run B starts 400m east and 150m above the end of run A: beyond any connector."""
        area = make_area(
            runs=[
                make_run("A", [[7.0, 46.010, 2300.0], [7.0, 46.000, 2000.0]], name="North Run", sub_region_name="North"),
                make_run("B", [[7.0052, 46.000, 2150.0], [7.0052, 45.990, 1900.0]], name="South Run", sub_region_name="South"),
            ],
            lifts=[],
        )
        graph = build_navigation_graph(ski_area=area)
        diagnostics = diagnose_unreachable(graph=graph, from_node_id="run-A-end", to_node_id="run-B-start", ski_area=area)

        assert diagnostics.reason == UnreachableReason.DIFFERENT_REGION
        assert (diagnostics.origin_region, diagnostics.destination_region) == ("North", "South")
        assert diagnostics.nearest_reachable_node_id == "run-A-end"
        assert diagnostics.nearest_reachable_distance_m == pytest.approx(400.0, abs=10.0)
        assert diagnostics.elevation_gap_m == pytest.approx(150.0)
        assert {RegionMismatchHint, ElevationGapHint, WalkingGapHint} <= _hint_types(diagnostics)
        assert "Would require 150m climb on foot." in diagnostics.suggestions

    def test_same_region_is_plain_unreachable(self) -> None:
        area = make_area(
            runs=[
                make_run("A", [[7.0, 46.010, 2300.0], [7.0, 46.000, 2000.0]]),
                make_run("B", [[7.0052, 46.000, 2150.0], [7.0052, 45.990, 1900.0]]),
            ],
            lifts=[],
        )
        graph = build_navigation_graph(ski_area=area)
        diagnostics = diagnose_unreachable(graph=graph, from_node_id="run-A-end", to_node_id="run-B-start", ski_area=area)

        assert diagnostics.reason == UnreachableReason.UNREACHABLE
        assert diagnostics.nearest_approach_node_id == "run-B-start"
        assert RegionMismatchHint not in _hint_types(diagnostics)

    def test_too_far_to_walk(self) -> None:
        area = make_area(
            runs=[
                make_run("A", [[7.0, 46.010, 2300.0], [7.0, 46.000, 2000.0]]),
                make_run("B", [[7.0, 45.955, 2000.0], [7.0, 45.945, 1800.0]]),
            ],
            lifts=[],
        )
        graph = build_navigation_graph(ski_area=area)
        diagnostics = diagnose_unreachable(graph=graph, from_node_id="run-A-start", to_node_id="run-B-start")

        assert diagnostics.reason == UnreachableReason.TOO_FAR_TO_WALK
        assert diagnostics.nearest_reachable_node_id == "run-A-end"
        assert diagnostics.nearest_reachable_distance_m > 4900
        assert TooFarToWalkHint in _hint_types(diagnostics)
        assert diagnostics.elevation_gap_m == pytest.approx(0.0)

    def test_to_dict_is_json_ready(self, resort_graph) -> None:
        data = diagnose_unreachable(graph=resort_graph, from_node_id="x", to_node_id="lift-L1-start").to_dict()
        assert data["reason"] == "no_start_node"
        assert data["blocked_edge_ids"] == []
        assert isinstance(data["suggestions"], list)
