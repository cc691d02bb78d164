"""Graph Builder - Converts a ski area's runs and lifts into a navigation graph.

Builds the directed, time-weighted graph used by the path finder:
- Runs: start/end nodes with one downhill edge (polygons reduced to a centerline)
- Lifts: bottom/top nodes with one uphill edge (ride time plus queue time)
- Two-way walk connectors between nearby endpoints (regular and extended radius)
- Optional reverse "walk up" edges for runs

Degenerate features are skipped and logged; the build never fails because of
a single malformed feature.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import numpy as np

from skiresort_navigator.constants import ConnectionConfig, LiftConfig, SpeedConfig
from skiresort_navigator.core.geo_calculator import Coordinate, GeoCalculator
from skiresort_navigator.model.edge import Edge, EdgeType
from skiresort_navigator.model.navigation_graph import NavigationGraph
from skiresort_navigator.model.node import Node, NodeKind
from skiresort_navigator.model.ski_area import LiftData, RunData, SkiAreaDetails

logger = logging.getLogger(__name__)


# =============================================================================
# Normalization Helpers
# =============================================================================


def normalize_difficulty(difficulty: Optional[str]) -> Optional[str]:
    """Canonical difficulty, or None for unrated / unknown ratings."""
    if difficulty is None:
        return None
    value = difficulty.strip().lower()
    if value in SpeedConfig.SKIING_SPEEDS:
        return value
    if value:
        logger.debug(f"Unknown run difficulty '{difficulty}', treating run as unrated")
    return None


def normalize_lift_type(lift_type: Optional[str]) -> Optional[str]:
    """Canonical lift type; unknown types are kept lower-cased."""
    if lift_type is None:
        return None
    value = lift_type.strip().lower()
    if not value:
        return None
    return LiftConfig.TYPE_ALIASES.get(value, value)


def skiing_speed(difficulty: Optional[str]) -> float:
    return SpeedConfig.SKIING_SPEEDS.get(difficulty or "", SpeedConfig.UNRATED_SKIING_SPEED)


def lift_speed(lift_type: Optional[str]) -> float:
    return SpeedConfig.LIFT_SPEEDS.get(lift_type or "", SpeedConfig.UNKNOWN_LIFT_SPEED)


def walking_speed(elevation_diff_m: Optional[float]) -> float:
    """Walking speed for a signed elevation change (unknown counts as flat)."""
    if elevation_diff_m is None or abs(elevation_diff_m) < SpeedConfig.FLAT_ELEVATION_DIFF_M:
        return SpeedConfig.WALK_FLAT
    if elevation_diff_m > 0:
        return SpeedConfig.WALK_UPHILL
    return SpeedConfig.WALK_DOWNHILL


def make_walk_edge(
    edge_id: str,
    from_node: Node,
    to_node: Node,
    penalty: float,
    name: Optional[str] = None,
    feature_id: Optional[str] = None,
) -> Edge:
    """Walk edge between two nodes with gradient-dependent speed and time penalty."""
    horizontal = GeoCalculator.haversine_distance_m(
        lat1=from_node.lat, lon1=from_node.lng, lat2=to_node.lat, lon2=to_node.lng
    )
    elevation_change = from_node.elevation_diff_to(other=to_node)
    distance = GeoCalculator.distance_3d_m(horizontal_m=horizontal, elevation_diff_m=elevation_change or 0.0)
    return Edge(
        id=edge_id,
        from_node_id=from_node.id,
        to_node_id=to_node.id,
        type=EdgeType.WALK,
        distance_m=distance,
        time_s=distance / walking_speed(elevation_diff_m=elevation_change) * penalty,
        elevation_change_m=elevation_change,
        name=name,
        feature_id=feature_id,
        coordinates=(from_node.coordinate, to_node.coordinate),
    )


def _to_coordinate(position: Any) -> Optional[Coordinate]:
    if position is None or len(position) < 2:
        return None
    if len(position) > 2 and position[2] is not None:
        return (float(position[0]), float(position[1]), float(position[2]))
    return (float(position[0]), float(position[1]))


def _elevation(coordinate: Coordinate) -> Optional[float]:
    return coordinate[2] if len(coordinate) > 2 else None


# =============================================================================
# Build Options
# =============================================================================


@dataclass(frozen=True)
class BuildOptions:
    """Graph construction options.

    Attributes:
        lift_durations_min: Live ride durations per lift ID (minutes), replacing
            the speed-based estimate
        lift_queue_time_s: Boarding wait added to every lift edge
        allow_uphill_runs: Add reverse walk-up edges for runs
        connection_distance_m: Radius for regular walk connectors
        extended_connections: Add long-range connectors for gaps in the network
    """

    lift_durations_min: Mapping[str, float] = field(default_factory=dict)
    lift_queue_time_s: float = LiftConfig.QUEUE_TIME_S
    allow_uphill_runs: bool = False
    connection_distance_m: float = ConnectionConfig.MAX_CONNECTION_DISTANCE_M
    extended_connections: bool = True

    def __post_init__(self) -> None:
        if self.lift_queue_time_s < 0:
            raise ValueError(f"lift_queue_time_s must be >= 0, got {self.lift_queue_time_s}")
        if self.connection_distance_m <= 0:
            raise ValueError(f"connection_distance_m must be > 0, got {self.connection_distance_m}")

    def cache_key(self) -> tuple:
        """Hashable representation for graph caching."""
        return (
            tuple(sorted(self.lift_durations_min.items())),
            self.lift_queue_time_s,
            self.allow_uphill_runs,
            self.connection_distance_m,
            self.extended_connections,
        )


# =============================================================================
# Graph Builder
# =============================================================================


class GraphBuilder:
    """Builds a NavigationGraph from a ski area.

    Algorithm:
    1. One downhill edge per run (first -> last coordinate, reversed when drawn uphill)
    2. One uphill edge per lift (bottom -> top station)
    3. Two-way walk connectors between endpoints within the connection radius
    4. Two-way extended connectors between an arrival and a departure point further away

    Connectors never join two endpoints of the same run or lift, never climb or
    drop more than the elevation limit, and never duplicate an existing edge.
    Walking speed follows the gradient of each direction.

    Example:
        graph = GraphBuilder(options=BuildOptions()).build(ski_area=ski_area)
    """

    def __init__(self, options: Optional[BuildOptions] = None) -> None:
        self.options = options or BuildOptions()
        self.skipped_features: list[str] = []

    def build(self, ski_area: SkiAreaDetails) -> NavigationGraph:
        graph = NavigationGraph()
        self.skipped_features = []

        for run in ski_area.runs:
            self._add_run(graph=graph, run=run)
        for lift in ski_area.lifts:
            self._add_lift(graph=graph, lift=lift)

        walk_count = self._add_connectors(graph=graph)

        if self.skipped_features:
            logger.warning(
                f"Skipped {len(self.skipped_features)} degenerate features in {ski_area.name}: "
                f"{', '.join(self.skipped_features[:10])}"
            )
        stats = graph.get_stats()
        logger.info(
            f"Built navigation graph for {ski_area.name}: {stats['nodes']} nodes, "
            f"{stats['run']} runs, {stats['lift']} lifts, {walk_count} walk connectors"
        )
        return graph.freeze()

    # =========================================================================
    # Feature Edges
    # =========================================================================

    def _run_coordinates(self, run: RunData) -> Optional[list[Coordinate]]:
        geometry = run.geometry or {}
        geometry_type = geometry.get("type")
        raw = geometry.get("coordinates") or []

        if geometry_type == "LineString":
            coords = [c for c in (_to_coordinate(p) for p in raw) if c is not None]
        elif geometry_type == "Polygon":
            ring = [c for c in (_to_coordinate(p) for p in (raw[0] if raw else [])) if c is not None]
            coords = self._polygon_centerline(ring=ring)
        else:
            return None

        if len(coords) < 2:
            return None

        start_elevation = _elevation(coords[0])
        end_elevation = _elevation(coords[-1])
        if start_elevation is not None and end_elevation is not None and start_elevation < end_elevation:
            coords.reverse()
        return coords

    @staticmethod
    def _polygon_centerline(ring: list[Coordinate]) -> list[Coordinate]:
        """Reduce an area run to a line from its highest to its lowest vertex."""
        with_elevation = [c for c in ring if _elevation(c) is not None]
        if len(with_elevation) < 2:
            return []
        highest = max(with_elevation, key=lambda c: c[2])
        lowest = min(with_elevation, key=lambda c: c[2])
        if highest == lowest:
            return []
        return [highest, lowest]

    def _add_run(self, graph: NavigationGraph, run: RunData) -> None:
        coords = self._run_coordinates(run=run)
        start_id, end_id = f"run-{run.id}-start", f"run-{run.id}-end"
        if coords is None or start_id in graph.nodes:
            self.skipped_features.append(f"run {run.id}")
            return

        difficulty = normalize_difficulty(difficulty=run.difficulty)
        start = Node(
            id=start_id,
            lat=coords[0][1],
            lng=coords[0][0],
            elevation=_elevation(coords[0]),
            kind=NodeKind.RUN_START,
            feature_id=run.id,
            feature_name=run.name,
        )
        end = Node(
            id=end_id,
            lat=coords[-1][1],
            lng=coords[-1][0],
            elevation=_elevation(coords[-1]),
            kind=NodeKind.RUN_END,
            feature_id=run.id,
            feature_name=run.name,
        )
        graph.add_node(node=start)
        graph.add_node(node=end)

        distance = GeoCalculator.path_length_m(coordinates=coords)
        elevation_change = start.elevation_diff_to(other=end)
        graph.add_edge(
            edge=Edge(
                id=f"edge-run-{run.id}",
                from_node_id=start.id,
                to_node_id=end.id,
                type=EdgeType.RUN,
                distance_m=distance,
                time_s=distance / skiing_speed(difficulty=difficulty),
                elevation_change_m=elevation_change,
                difficulty=difficulty,
                name=run.name,
                feature_id=run.id,
                coordinates=tuple(coords),
            )
        )

        if self.options.allow_uphill_runs:
            graph.add_edge(
                edge=Edge(
                    id=f"edge-run-{run.id}-uphill",
                    from_node_id=end.id,
                    to_node_id=start.id,
                    type=EdgeType.WALK,
                    distance_m=distance,
                    time_s=distance / SpeedConfig.WALK_UPHILL * ConnectionConfig.WALKING_TIME_PENALTY,
                    elevation_change_m=-elevation_change if elevation_change is not None else None,
                    name=run.name,
                    feature_id=run.id,
                    coordinates=tuple(reversed(coords)),
                )
            )

    def _add_lift(self, graph: NavigationGraph, lift: LiftData) -> None:
        geometry = lift.geometry or {}
        start_id, end_id = f"lift-{lift.id}-start", f"lift-{lift.id}-end"
        coords = []
        if geometry.get("type") == "LineString":
            coords = [c for c in (_to_coordinate(p) for p in geometry.get("coordinates") or []) if c is not None]
        if len(coords) < 2 or start_id in graph.nodes:
            self.skipped_features.append(f"lift {lift.id}")
            return

        lift_type = normalize_lift_type(lift_type=lift.lift_type)
        bottom = Node(
            id=start_id,
            lat=coords[0][1],
            lng=coords[0][0],
            elevation=_elevation(coords[0]),
            kind=NodeKind.LIFT_START,
            feature_id=lift.id,
            feature_name=lift.name,
        )
        top = Node(
            id=end_id,
            lat=coords[-1][1],
            lng=coords[-1][0],
            elevation=_elevation(coords[-1]),
            kind=NodeKind.LIFT_END,
            feature_id=lift.id,
            feature_name=lift.name,
        )
        graph.add_node(node=bottom)
        graph.add_node(node=top)

        distance = GeoCalculator.path_length_m(coordinates=coords)
        live_minutes = self.options.lift_durations_min.get(lift.id)
        if live_minutes is not None and live_minutes > 0:
            ride_time = live_minutes * 60
        else:
            ride_time = distance / lift_speed(lift_type=lift_type)

        graph.add_edge(
            edge=Edge(
                id=f"edge-lift-{lift.id}",
                from_node_id=bottom.id,
                to_node_id=top.id,
                type=EdgeType.LIFT,
                distance_m=distance,
                time_s=ride_time + self.options.lift_queue_time_s,
                elevation_change_m=bottom.elevation_diff_to(other=top),
                lift_type=lift_type,
                name=lift.name,
                feature_id=lift.id,
                coordinates=tuple(coords),
            )
        )

    # =========================================================================
    # Walk Connectors
    # =========================================================================

    @staticmethod
    def _same_feature(a: Node, b: Node) -> bool:
        a_is_run = a.kind in (NodeKind.RUN_START, NodeKind.RUN_END)
        b_is_run = b.kind in (NodeKind.RUN_START, NodeKind.RUN_END)
        return a.feature_id == b.feature_id and a_is_run == b_is_run

    @staticmethod
    def _joins_arrival_to_departure(a: Node, b: Node) -> bool:
        """Whether one node ends a run or ride and the other starts one."""
        return (a.kind.is_arrival and b.kind.is_departure) or (a.kind.is_departure and b.kind.is_arrival)

    @staticmethod
    def _add_walk_pair(graph: NavigationGraph, a: Node, b: Node, prefix: str, penalty: float) -> int:
        added = 0
        for source, target in ((a, b), (b, a)):
            if graph.has_edge_between(from_node_id=source.id, to_node_id=target.id):
                continue
            graph.add_edge(
                edge=make_walk_edge(
                    edge_id=f"{prefix}-{source.id}-{target.id}",
                    from_node=source,
                    to_node=target,
                    penalty=penalty,
                )
            )
            added += 1
        return added

    def _add_connectors(self, graph: NavigationGraph) -> int:
        """Add two-way walk edges between nearby endpoints. Returns the number added."""
        endpoints = [n for n in graph.nodes.values() if n.kind.is_departure or n.kind.is_arrival]
        if len(endpoints) < 2:
            return 0

        lats = np.array([n.lat for n in endpoints], dtype=np.float64)
        lngs = np.array([n.lng for n in endpoints], dtype=np.float64)
        regular_limit = self.options.connection_distance_m
        search_limit = (
            max(regular_limit, ConnectionConfig.EXTENDED_CONNECTION_DISTANCE_M)
            if self.options.extended_connections
            else regular_limit
        )

        added = 0
        for i, a in enumerate(endpoints):
            distances = GeoCalculator.haversine_distances_m(lat=a.lat, lon=a.lng, lats=lats, lons=lngs)
            for j in np.nonzero(distances <= search_limit)[0]:
                if j <= i:
                    continue
                b = endpoints[j]
                if self._same_feature(a=a, b=b):
                    continue

                elevation_diff = a.elevation_diff_to(other=b)
                if distances[j] <= regular_limit:
                    if elevation_diff is not None and abs(elevation_diff) > ConnectionConfig.MAX_WALK_ELEVATION_DIFF_M:
                        continue
                    added += self._add_walk_pair(
                        graph=graph, a=a, b=b, prefix="walk", penalty=ConnectionConfig.WALKING_TIME_PENALTY
                    )
                else:
                    if not self._joins_arrival_to_departure(a=a, b=b):
                        continue
                    if elevation_diff is not None and abs(elevation_diff) > ConnectionConfig.EXTENDED_MAX_ELEVATION_DIFF_M:
                        continue
                    added += self._add_walk_pair(
                        graph=graph, a=a, b=b, prefix="extwalk", penalty=ConnectionConfig.EXTENDED_WALKING_TIME_PENALTY
                    )
        return added


def build_navigation_graph(ski_area: SkiAreaDetails, options: Optional[BuildOptions] = None) -> NavigationGraph:
    """Build the frozen navigation graph of a ski area."""
    return GraphBuilder(options=options).build(ski_area=ski_area)
