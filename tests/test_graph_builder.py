"""Tests for graph construction from ski area data.

Tests: GraphBuilder, BuildOptions, normalization helpers
"""

import pytest

from conftest import make_area, make_lift, make_run
from skiresort_navigator.constants import ConnectionConfig, LiftConfig, SpeedConfig
from skiresort_navigator.generators.graph_builder import (
    BuildOptions,
    GraphBuilder,
    build_navigation_graph,
    normalize_difficulty,
    normalize_lift_type,
    walking_speed,
)
from skiresort_navigator.model.edge import EdgeType
from skiresort_navigator.model.node import NodeKind
from skiresort_navigator.model.ski_area import RunData

# =============================================================================
# NORMALIZATION
# =============================================================================


class TestNormalization:
    """Raw OpenSkiMap values mapped onto canonical difficulties and lift types."""

    @pytest.mark.parametrize(
        "raw,expected",
        [("easy", "easy"), (" Advanced ", "advanced"), ("double black", None), ("", None), (None, None)],
    )
    def test_normalize_difficulty(self, raw, expected) -> None:
        assert normalize_difficulty(difficulty=raw) == expected

    @pytest.mark.parametrize(
        "raw,expected",
        [("Chairlift", "chair_lift"), ("gondola", "gondola"), ("T_BAR", "t-bar"), ("hovercraft", "hovercraft"), ("", None)],
    )
    def test_normalize_lift_type(self, raw, expected) -> None:
        assert normalize_lift_type(lift_type=raw) == expected

    def test_walking_speed_by_gradient(self) -> None:
        assert walking_speed(elevation_diff_m=None) == SpeedConfig.WALK_FLAT
        assert walking_speed(elevation_diff_m=3.0) == SpeedConfig.WALK_FLAT
        assert walking_speed(elevation_diff_m=10.0) == SpeedConfig.WALK_UPHILL
        assert walking_speed(elevation_diff_m=-10.0) == SpeedConfig.WALK_DOWNHILL


# =============================================================================
# FEATURE EDGES
# =============================================================================


class TestFeatureEdges:
    """One edge per run (downhill) and per lift (uphill)."""

    def test_node_and_edge_ids(self, loop_graph) -> None:
        assert set(loop_graph.nodes) == {"run-R1-start", "run-R1-end", "lift-L1-start", "lift-L1-end"}
        assert loop_graph.nodes["run-R1-start"].kind == NodeKind.RUN_START
        assert loop_graph.nodes["lift-L1-end"].kind == NodeKind.LIFT_END
        assert "edge-run-R1" in loop_graph.edges
        assert "edge-lift-L1" in loop_graph.edges

    def test_resort_graph_stats(self, resort_graph) -> None:
        """Six endpoints, two runs, one lift and six two-way walk connectors."""
        stats = resort_graph.get_stats()
        assert stats == {"nodes": 6, "edges": 15, "run": 2, "lift": 1, "walk": 12}

    def test_graph_is_frozen(self, resort_graph) -> None:
        assert resort_graph.is_frozen
        resort_graph.validate()

    def test_run_edge_goes_downhill(self, loop_graph) -> None:
        edge = loop_graph.edges["edge-run-R1"]
        assert edge.type == EdgeType.RUN
        assert edge.from_node_id == "run-R1-start"
        assert edge.elevation_change_m == pytest.approx(-200.0)
        assert edge.time_s == pytest.approx(edge.distance_m / SpeedConfig.SKIING_SPEEDS["intermediate"])

    def test_uphill_drawn_run_is_reversed(self) -> None:
        area = make_area(runs=[make_run("R9", [[7.0, 46.000, 2000.0], [7.0, 46.010, 2200.0]])], lifts=[])
        graph = build_navigation_graph(ski_area=area)

        assert graph.nodes["run-R9-start"].elevation == 2200.0
        assert graph.nodes["run-R9-end"].elevation == 2000.0
        assert graph.edges["edge-run-R9"].coordinates[0] == (7.0, 46.010, 2200.0)

    def test_polygon_run_uses_highest_and_lowest_vertex(self) -> None:
        polygon = {
            "type": "Polygon",
            "coordinates": [
                [[7.0, 46.010, 2200.0], [7.001, 46.005, 2100.0], [7.0, 46.000, 2000.0], [7.0, 46.010, 2200.0]]
            ],
        }
        area = make_area(runs=[RunData(id="P1", name="Bowl", difficulty="expert", geometry=polygon)], lifts=[])
        graph = build_navigation_graph(ski_area=area)

        assert graph.nodes["run-P1-start"].elevation == 2200.0
        assert graph.nodes["run-P1-end"].elevation == 2000.0

    def test_unrated_run_uses_default_speed(self) -> None:
        area = make_area(runs=[make_run("U1", [[7.0, 46.01, 2200.0], [7.0, 46.0, 2000.0]], difficulty=None)], lifts=[])
        edge = build_navigation_graph(ski_area=area).edges["edge-run-U1"]
        assert edge.difficulty is None
        assert edge.time_s == pytest.approx(edge.distance_m / SpeedConfig.UNRATED_SKIING_SPEED)

    def test_lift_time_includes_queue(self, loop_graph) -> None:
        edge = loop_graph.edges["edge-lift-L1"]
        assert edge.type == EdgeType.LIFT
        assert edge.lift_type == "chair_lift"
        assert edge.time_s == pytest.approx(edge.distance_m / SpeedConfig.LIFT_SPEEDS["chair_lift"] + LiftConfig.QUEUE_TIME_S)

    def test_live_lift_duration_overrides_estimate(self, loop_area) -> None:
        options = BuildOptions(lift_durations_min={"L1": 4.0}, lift_queue_time_s=60)
        graph = build_navigation_graph(ski_area=loop_area, options=options)
        assert graph.edges["edge-lift-L1"].time_s == pytest.approx(4 * 60 + 60)

    def test_missing_elevation_is_none(self) -> None:
        area = make_area(runs=[make_run("F1", [[7.0, 46.01], [7.0, 46.0]])], lifts=[])
        graph = build_navigation_graph(ski_area=area)

        assert graph.nodes["run-F1-start"].elevation is None
        assert not graph.nodes["run-F1-start"].has_elevation
        assert graph.edges["edge-run-F1"].elevation_change_m is None

    def test_degenerate_features_are_skipped(self) -> None:
        area = make_area(
            runs=[
                make_run("OK", [[7.0, 46.01, 2200.0], [7.0, 46.0, 2000.0]]),
                make_run("ONE", [[7.0, 46.01, 2200.0]]),
            ],
            lifts=[make_lift("BAD", [[7.0, 46.0, 2000.0]])],
        )
        area.runs.append(RunData(id="PT", name=None, difficulty=None, geometry={"type": "Point"}))
        builder = GraphBuilder()
        graph = builder.build(ski_area=area)

        assert builder.skipped_features == ["run ONE", "run PT", "lift BAD"]
        assert "run-OK-start" in graph.nodes
        assert "run-ONE-start" not in graph.nodes

    def test_duplicate_feature_ids_are_skipped(self) -> None:
        run = make_run("D1", [[7.0, 46.01, 2200.0], [7.0, 46.0, 2000.0]])
        builder = GraphBuilder()
        graph = builder.build(ski_area=make_area(runs=[run, run], lifts=[]))

        assert graph.get_stats()["run"] == 1
        assert builder.skipped_features == ["run D1"]

    def test_uphill_walk_edges_optional(self, loop_area) -> None:
        plain = build_navigation_graph(ski_area=loop_area)
        uphill = build_navigation_graph(ski_area=loop_area, options=BuildOptions(allow_uphill_runs=True))

        assert "edge-run-R1-uphill" not in plain.edges
        edge = uphill.edges["edge-run-R1-uphill"]
        assert edge.type == EdgeType.WALK
        assert (edge.from_node_id, edge.to_node_id) == ("run-R1-end", "run-R1-start")
        assert edge.elevation_change_m == pytest.approx(200.0)


# =============================================================================
# WALK CONNECTORS
# =============================================================================


class TestWalkConnectors:
    """Nearby endpoints of different features are joined by walks in both directions."""

    def test_connectors_are_two_way(self, resort_graph) -> None:
        walks = {(e.from_node_id, e.to_node_id) for e in resort_graph.active_edges() if e.is_walk}
        assert len(walks) == 12
        assert all((to_id, from_id) in walks for from_id, to_id in walks)

    def test_top_station_reachable_on_foot(self, resort_graph) -> None:
        incoming = sorted(e.id for e in resort_graph.active_edges() if e.to_node_id == "lift-L1-end")
        assert incoming == ["edge-lift-L1", "walk-run-R1-start-lift-L1-end", "walk-run-R2-start-lift-L1-end"]

    def test_top_station_connects_to_nearby_run(self, resort_graph) -> None:
        edge = resort_graph.edges["walk-lift-L1-end-run-R2-start"]
        assert edge.type == EdgeType.WALK
        assert 35 < edge.distance_m < 45
        assert edge.time_s == pytest.approx(edge.distance_m / SpeedConfig.WALK_DOWNHILL * ConnectionConfig.WALKING_TIME_PENALTY)

    def test_walking_speed_follows_direction(self, resort_graph) -> None:
        """The 5m step up to the top station is walked uphill, the way down gently downhill."""
        down = resort_graph.edges["walk-lift-L1-end-run-R2-start"]
        up = resort_graph.edges["walk-run-R2-start-lift-L1-end"]

        assert up.distance_m == pytest.approx(down.distance_m)
        assert up.elevation_change_m == pytest.approx(5.0)
        assert up.time_s == pytest.approx(up.distance_m / SpeedConfig.WALK_UPHILL * ConnectionConfig.WALKING_TIME_PENALTY)
        assert up.coordinates == tuple(reversed(down.coordinates))

    def test_shared_endpoint_gets_zero_length_walk(self, resort_graph) -> None:
        edge = resort_graph.edges["walk-run-R2-end-lift-L1-start"]
        assert edge.distance_m == pytest.approx(0.0, abs=1e-6)
        assert "walk-lift-L1-start-run-R2-end" in resort_graph.edges

    def test_run_ends_linked_both_ways(self) -> None:
        """Two runs finishing 30m apart can be walked between in either direction."""
        area = make_area(
            runs=[
                make_run("R1", [[7.0, 46.010, 2200.0], [7.0, 46.000, 2000.0]]),
                make_run("R2", [[7.001, 46.010, 2200.0], [7.0, 46.00027, 2000.0]]),
            ],
            lifts=[],
        )
        graph = build_navigation_graph(ski_area=area)

        assert graph.has_edge_between(from_node_id="run-R1-end", to_node_id="run-R2-end")
        assert graph.has_edge_between(from_node_id="run-R2-end", to_node_id="run-R1-end")

    def test_walk_without_elevation_is_flat(self) -> None:
        area = make_area(
            runs=[make_run("F1", [[7.0, 46.010], [7.0, 46.000]]), make_run("F2", [[7.0, 46.00027], [7.0, 45.990]])],
            lifts=[],
        )
        edge = build_navigation_graph(ski_area=area).edges["walk-run-F1-end-run-F2-start"]

        assert edge.elevation_change_m is None
        assert edge.time_s == pytest.approx(edge.distance_m / SpeedConfig.WALK_FLAT * ConnectionConfig.WALKING_TIME_PENALTY)

    def test_same_feature_never_linked(self) -> None:
        """A 100m run has both endpoints within walking range but gets no walk."""
        area = make_area(runs=[make_run("S", [[7.0, 46.0009, 2020.0], [7.0, 46.000, 2000.0]])], lifts=[])
        graph = build_navigation_graph(ski_area=area)
        assert not any(edge.is_walk for edge in graph.active_edges())

    def test_large_elevation_step_not_connected(self) -> None:
        """A run starting 60m above a lift's top station 40m away needs no walk."""
        area = make_area(
            runs=[make_run("R1", [[7.0005, 46.010, 2260.0], [7.0005, 46.000, 2000.0]])],
            lifts=[make_lift("L1", [[7.0, 45.990, 1800.0], [7.0, 46.010, 2200.0]])],
        )
        graph = build_navigation_graph(ski_area=area)
        assert "walk-lift-L1-end-run-R1-start" not in graph.edges
        assert "walk-run-R1-start-lift-L1-end" not in graph.edges

    def test_extended_connector_bridges_gap(self) -> None:
        """A run ending ~300m from a lift's bottom station gets penalized long walks both ways."""
        area = make_area(
            runs=[make_run("RA", [[7.0, 46.010, 2300.0], [7.0, 46.000, 2000.0]])],
            lifts=[make_lift("LB", [[7.0039, 46.000, 2010.0], [7.0039, 46.010, 2400.0]])],
        )
        graph = build_navigation_graph(ski_area=area)
        edge = graph.edges["extwalk-run-RA-end-lift-LB-start"]
        back = graph.edges["extwalk-lift-LB-start-run-RA-end"]

        assert 250 < edge.distance_m < 350
        assert edge.time_s == pytest.approx(
            edge.distance_m / SpeedConfig.WALK_UPHILL * ConnectionConfig.EXTENDED_WALKING_TIME_PENALTY
        )
        assert back.time_s == pytest.approx(
            back.distance_m / SpeedConfig.WALK_DOWNHILL * ConnectionConfig.EXTENDED_WALKING_TIME_PENALTY
        )
        assert "walk-run-RA-end-lift-LB-start" not in graph.edges

    def test_extended_connector_needs_arrival_and_departure(self) -> None:
        """Two run ends ~300m apart are too far for a regular walk and never get a long one."""
        area = make_area(
            runs=[
                make_run("RA", [[7.0, 46.010, 2300.0], [7.0, 46.000, 2000.0]]),
                make_run("RB", [[7.0039, 46.010, 2300.0], [7.0039, 46.000, 2000.0]]),
            ],
            lifts=[],
        )
        graph = build_navigation_graph(ski_area=area)
        assert not any(edge.is_walk for edge in graph.active_edges())

    def test_extended_connectors_can_be_disabled(self) -> None:
        area = make_area(
            runs=[make_run("RA", [[7.0, 46.010, 2300.0], [7.0, 46.000, 2000.0]])],
            lifts=[make_lift("LB", [[7.0039, 46.000, 2010.0], [7.0039, 46.010, 2400.0]])],
        )
        graph = build_navigation_graph(ski_area=area, options=BuildOptions(extended_connections=False))
        assert not any(edge.is_walk for edge in graph.active_edges())


class TestBuildOptions:
    def test_rejects_negative_queue(self) -> None:
        with pytest.raises(ValueError, match="lift_queue_time_s"):
            BuildOptions(lift_queue_time_s=-1)

    def test_rejects_non_positive_radius(self) -> None:
        with pytest.raises(ValueError, match="connection_distance_m"):
            BuildOptions(connection_distance_m=0)

    def test_cache_key_reflects_options(self) -> None:
        assert BuildOptions().cache_key() == BuildOptions().cache_key()
        assert BuildOptions().cache_key() != BuildOptions(allow_uphill_runs=True).cache_key()
        assert BuildOptions(lift_durations_min={"a": 1, "b": 2}).cache_key() == BuildOptions(
            lift_durations_min={"b": 2, "a": 1}
        ).cache_key()
