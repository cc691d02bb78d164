"""Path Finder - Time-optimal routes over the navigation graph.

Provides:
- find_route: Dijkstra on edge travel time (SciPy sparse-graph implementation)
- find_route_with_diagnostics: Same, with a structured explanation on failure
- find_nearest_node: Vectorized snapping of free map points onto the graph
- get_destinations / find_route_between_features / find_route_from_location:
  Feature-level conveniences used by the route viewer

Travel time, not distance, is optimized: lifts, runs and walks move at very
different speeds. Unreachable destinations are returned as None, never raised.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy.sparse.csgraph import dijkstra

from skiresort_navigator.constants import RoutingConfig
from skiresort_navigator.core.geo_calculator import GeoCalculator
from skiresort_navigator.model.diagnostics import RouteDiagnostics
from skiresort_navigator.model.edge import Edge
from skiresort_navigator.model.navigation_graph import NavigationGraph
from skiresort_navigator.model.node import Node, NodeKind
from skiresort_navigator.model.route import Route
from skiresort_navigator.model.ski_area import SkiAreaDetails
from skiresort_navigator.routing.route_optimizer import build_route, optimize_route

logger = logging.getLogger(__name__)

# SciPy marks "no predecessor" with this value
NO_PREDECESSOR = -9999


@dataclass(frozen=True)
class RouteResult:
    """Route plus diagnostics (diagnostics only set when route is None)."""

    route: Optional[Route]
    diagnostics: Optional[RouteDiagnostics] = None

    @property
    def found(self) -> bool:
        return self.route is not None


@dataclass(frozen=True)
class Destination:
    """A named run or lift that can be routed to."""

    feature_id: str
    name: str
    type: str  # "run" or "lift"
    node_id: str
    difficulty: Optional[str] = None
    lift_type: Optional[str] = None


# =============================================================================
# Shortest Path
# =============================================================================


def shortest_times_from(graph: NavigationGraph, node_id: str, reverse: bool = False) -> np.ndarray:
    """Travel times from node_id to every node (or to node_id with reverse=True).

    Unreachable nodes have time inf. Order follows graph.routing_matrix().node_ids.
    """
    compiled = graph.routing_matrix()
    matrix = compiled.matrix.T.tocsr() if reverse else compiled.matrix
    return dijkstra(matrix, directed=True, indices=compiled.index[node_id])


def find_edge_path(graph: NavigationGraph, from_node_id: str, to_node_id: str) -> Optional[list[Edge]]:
    """Fastest sequence of edges between two nodes, None if unreachable.

    A node reaches itself through the empty path.
    """
    if from_node_id not in graph.nodes or to_node_id not in graph.nodes:
        return None
    if from_node_id == to_node_id:
        return []

    compiled = graph.routing_matrix()
    source = compiled.index[from_node_id]
    target = compiled.index[to_node_id]
    times, predecessors = dijkstra(compiled.matrix, directed=True, indices=source, return_predecessors=True)
    if not np.isfinite(times[target]):
        return None

    edges: list[Edge] = []
    current = target
    while current != source:
        previous = predecessors[current]
        if previous == NO_PREDECESSOR:
            return None
        edges.append(graph.edges[compiled.pair_edges[(int(previous), int(current))]])
        current = previous
    edges.reverse()
    return edges


def find_route(
    graph: NavigationGraph,
    from_node_id: str,
    to_node_id: str,
    ski_area: Optional[SkiAreaDetails] = None,
) -> Optional[Route]:
    """Fastest route between two nodes.

    Args:
        graph: Navigation graph (base graph, working copy or filtered view)
        from_node_id: Origin node
        to_node_id: Destination node
        ski_area: Optional ski area for name resolution in the optimizer

    Returns:
        Optimized Route, or None if the destination is unreachable. Routing
        a node to itself gives a Route without segments.
    """
    edges = find_edge_path(graph=graph, from_node_id=from_node_id, to_node_id=to_node_id)
    if edges is None:
        logger.debug(f"No route from {from_node_id} to {to_node_id}")
        return None
    if not edges:
        return build_route(segments=[], start_node_id=from_node_id, end_node_id=to_node_id)
    return optimize_route(path=edges, ski_area=ski_area)


def find_route_with_diagnostics(
    graph: NavigationGraph,
    from_node_id: str,
    to_node_id: str,
    ski_area: Optional[SkiAreaDetails] = None,
) -> RouteResult:
    """Fastest route, or diagnostics explaining why none exists."""
    # Deferred import: route_diagnostics depends on this module
    from skiresort_navigator.routing.route_diagnostics import diagnose_unreachable

    route = find_route(graph=graph, from_node_id=from_node_id, to_node_id=to_node_id, ski_area=ski_area)
    if route is not None:
        return RouteResult(route=route)

    diagnostics = diagnose_unreachable(
        graph=graph, from_node_id=from_node_id, to_node_id=to_node_id, ski_area=ski_area
    )
    logger.info(f"No route {from_node_id} -> {to_node_id}: {diagnostics.reason.value}")
    return RouteResult(route=None, diagnostics=diagnostics)


# =============================================================================
# Node Lookup
# =============================================================================


def find_nearest_node(
    graph: NavigationGraph,
    lat: float,
    lng: float,
    elevation: Optional[float] = None,
    max_distance_m: Optional[float] = None,
) -> Optional[Node]:
    """Nearest graph node to a point.

    Args:
        graph: Navigation graph
        lat: Query latitude
        lng: Query longitude
        elevation: Optional query elevation; when given, the distance includes
            the elevation difference to nodes with known elevation
        max_distance_m: Reject matches further away than this

    Returns:
        Nearest Node, or None for an empty graph or no node within the limit.
    """
    arrays = graph.node_arrays()
    if not arrays.node_ids:
        return None

    distances = GeoCalculator.haversine_distances_m(lat=lat, lon=lng, lats=arrays.lats, lons=arrays.lngs)
    if elevation is not None:
        dz = np.nan_to_num(arrays.elevations - elevation, nan=0.0)
        distances = np.sqrt(distances**2 + dz**2)

    best = int(np.argmin(distances))
    if max_distance_m is not None and distances[best] > max_distance_m:
        logger.debug(f"No node within {max_distance_m}m of ({lat:.5f}, {lng:.5f})")
        return None
    return graph.nodes[arrays.node_ids[best]]


# =============================================================================
# Feature-Level Routing
# =============================================================================


def get_destinations(graph: NavigationGraph) -> list[Destination]:
    """Named runs and lifts, each with the node a route should aim for (its start)."""
    destinations: dict[tuple[str, str], Destination] = {}
    for edge in graph.active_edges():
        if edge.is_walk or not edge.name or edge.feature_id is None:
            continue
        key = (edge.type.value, edge.feature_id)
        if key in destinations:
            continue
        destinations[key] = Destination(
            feature_id=edge.feature_id,
            name=edge.name,
            type=edge.type.value,
            node_id=edge.from_node_id,
            difficulty=edge.difficulty,
            lift_type=edge.lift_type,
        )
    return sorted(destinations.values(), key=lambda d: (d.name.lower(), d.type))


def _feature_node_id(graph: NavigationGraph, feature_type: str, feature_id: str, end: str) -> Optional[str]:
    node_id = f"{feature_type}-{feature_id}-{end}"
    return node_id if node_id in graph.nodes else None


def find_route_between_features(
    graph: NavigationGraph,
    from_feature: tuple[str, str],
    to_feature: tuple[str, str],
    ski_area: Optional[SkiAreaDetails] = None,
) -> RouteResult:
    """Route from the end of one run/lift to the start of another.

    Args:
        from_feature: (type, feature_id), e.g. ("lift", "42")
        to_feature: (type, feature_id)
    """
    from_node_id = _feature_node_id(graph=graph, feature_type=from_feature[0], feature_id=from_feature[1], end="end")
    to_node_id = _feature_node_id(graph=graph, feature_type=to_feature[0], feature_id=to_feature[1], end="start")
    return find_route_with_diagnostics(
        graph=graph,
        from_node_id=from_node_id or f"{from_feature[0]}-{from_feature[1]}-end",
        to_node_id=to_node_id or f"{to_feature[0]}-{to_feature[1]}-start",
        ski_area=ski_area,
    )


def find_route_from_location(
    graph: NavigationGraph,
    lat: float,
    lng: float,
    to_node_id: str,
    ski_area: Optional[SkiAreaDetails] = None,
    max_distance_m: float = RoutingConfig.SNAP_DISTANCE_M,
) -> Optional[RouteResult]:
    """Route from a free location, snapped to the nearest departure point.

    Returns None when the location is outside the network.
    """
    arrays = graph.node_arrays()
    departures = [
        i for i, node_id in enumerate(arrays.node_ids) if graph.nodes[node_id].kind != NodeKind.LIFT_END
    ]
    if not departures:
        return None

    index = np.array(departures)
    distances = GeoCalculator.haversine_distances_m(lat=lat, lon=lng, lats=arrays.lats[index], lons=arrays.lngs[index])
    best = int(np.argmin(distances))
    if distances[best] > max_distance_m:
        logger.info(f"Location ({lat:.5f}, {lng:.5f}) is {distances[best]:.0f}m from the network")
        return None
    start_id = arrays.node_ids[index[best]]
    return find_route_with_diagnostics(graph=graph, from_node_id=start_id, to_node_id=to_node_id, ski_area=ski_area)
