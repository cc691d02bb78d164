"""Point injection - Add ad-hoc POIs and clicked map points to a working copy.

Injection only ever touches a working copy (NavigationGraph.working_copy());
frozen base graphs raise ValueError so the cached graph stays read-only.

- add_poi_node_to_graph: POI node with walk edges to nearby nodes
- add_map_point_to_graph: Free point snapped onto a nearby run (splitting it)
  or, away from runs, connected by walks
"""

import logging
from typing import Optional

import numpy as np

from skiresort_navigator.constants import PoiConfig
from skiresort_navigator.core.geo_calculator import Coordinate, GeoCalculator
from skiresort_navigator.generators.graph_builder import make_walk_edge
from skiresort_navigator.model.edge import Edge
from skiresort_navigator.model.navigation_graph import NavigationGraph
from skiresort_navigator.model.node import Node, NodeKind

logger = logging.getLogger(__name__)


def _require_working_copy(graph: NavigationGraph) -> None:
    if graph.is_frozen:
        raise ValueError("Cannot inject points into a read-only graph; call working_copy() first")


def estimate_elevation(graph: NavigationGraph, lat: float, lng: float) -> Optional[float]:
    """Elevation of the nearest node that has one."""
    arrays = graph.node_arrays()
    mask = np.isfinite(arrays.elevations)
    if not mask.any():
        return None
    distances = GeoCalculator.haversine_distances_m(lat=lat, lon=lng, lats=arrays.lats, lons=arrays.lngs)
    best = int(np.argmin(np.where(mask, distances, np.inf)))
    return float(arrays.elevations[best])


def _nodes_within(
    graph: NavigationGraph,
    node: Node,
    radius_m: float,
    max_elevation_diff_m: Optional[float] = None,
) -> list[Node]:
    arrays = graph.node_arrays()
    distances = GeoCalculator.haversine_distances_m(lat=node.lat, lon=node.lng, lats=arrays.lats, lons=arrays.lngs)
    nearby = []
    for i in np.nonzero(distances <= radius_m)[0]:
        other = graph.nodes[arrays.node_ids[i]]
        if other.id == node.id:
            continue
        diff = node.elevation_diff_to(other=other)
        if max_elevation_diff_m is not None and diff is not None and abs(diff) > max_elevation_diff_m:
            continue
        nearby.append(other)
    return nearby


def _connect_both_ways(
    graph: NavigationGraph,
    node: Node,
    others: list[Node],
    penalty: float,
    label: Optional[str] = None,
) -> int:
    for other in others:
        graph.add_edge(
            edge=make_walk_edge(
                edge_id=f"walk-{other.id}-{node.id}",
                from_node=other,
                to_node=node,
                penalty=penalty,
                name=f"Walk to {label}" if label else None,
            )
        )
        graph.add_edge(
            edge=make_walk_edge(
                edge_id=f"walk-{node.id}-{other.id}",
                from_node=node,
                to_node=other,
                penalty=penalty,
                name=f"Walk from {label}" if label else None,
            )
        )
    return len(others)


# =============================================================================
# POI Injection
# =============================================================================


def add_poi_node_to_graph(
    graph: NavigationGraph,
    poi_id: str,
    lat: float,
    lng: float,
    name: Optional[str] = None,
) -> str:
    """Add a POI node plus walk edges to nodes within PoiConfig.POI_CONNECTION_DISTANCE_M.

    Args:
        graph: Working copy to modify
        poi_id: POI identifier
        lat: POI latitude
        lng: POI longitude
        name: Display name used for the walk edges

    Returns:
        ID of the POI node ("poi-<poi_id>"); an existing node is reused.
    """
    _require_working_copy(graph=graph)
    node_id = f"poi-{poi_id}"
    if node_id in graph.nodes:
        return node_id

    node = Node(
        id=node_id,
        lat=lat,
        lng=lng,
        elevation=estimate_elevation(graph=graph, lat=lat, lng=lng),
        kind=NodeKind.POI,
        feature_id=str(poi_id),
        feature_name=name,
    )
    nearby = _nodes_within(
        graph=graph,
        node=node,
        radius_m=PoiConfig.POI_CONNECTION_DISTANCE_M,
        max_elevation_diff_m=PoiConfig.POI_MAX_ELEVATION_DIFF_M,
    )
    graph.add_node(node=node)
    connected = _connect_both_ways(
        graph=graph, node=node, others=nearby, penalty=PoiConfig.POI_WALKING_PENALTY, label=name or "POI"
    )
    if connected == 0:
        logger.warning(f"POI {poi_id} has no graph node within {PoiConfig.POI_CONNECTION_DISTANCE_M}m")
    return node_id


# =============================================================================
# Map Point Injection
# =============================================================================


def _closest_run_position(
    graph: NavigationGraph, lat: float, lng: float
) -> Optional[tuple[Edge, int, float, float, Optional[float], float]]:
    """Closest point on any routable run.

    Returns (edge, segment_index, lng, lat, elevation, distance_m) or None.
    """
    best = None
    for edge in graph.active_edges():
        if not edge.is_run or len(edge.coordinates) < 2:
            continue
        for i, (start, end) in enumerate(zip(edge.coordinates, edge.coordinates[1:])):
            snap_lng, snap_lat, snap_elevation, _ = GeoCalculator.closest_point_on_segment(
                lon=lng, lat=lat, start=start, end=end
            )
            distance = GeoCalculator.haversine_distance_m(lat1=lat, lon1=lng, lat2=snap_lat, lon2=snap_lng)
            if best is None or distance < best[5]:
                best = (edge, i, snap_lng, snap_lat, snap_elevation, distance)
    return best


def _split_run(graph: NavigationGraph, edge: Edge, segment_index: int, node: Node) -> None:
    """Replace a run edge by two halves meeting at node."""
    head: tuple[Coordinate, ...] = edge.coordinates[: segment_index + 1] + (node.coordinate,)
    tail: tuple[Coordinate, ...] = (node.coordinate,) + edge.coordinates[segment_index + 1 :]
    head_length = GeoCalculator.path_length_m(coordinates=head)
    tail_length = GeoCalculator.path_length_m(coordinates=tail)
    total = head_length + tail_length
    head_share = head_length / total if total > 0 else 0.5

    start = graph.nodes[edge.from_node_id]
    end = graph.nodes[edge.to_node_id]
    halves = (
        (f"{edge.id}-to-split", start, node, head, head_length, edge.time_s * head_share),
        (f"{edge.id}-from-split", node, end, tail, tail_length, edge.time_s * (1 - head_share)),
    )
    graph.disable_edge(edge_id=edge.id)
    for edge_id, from_node, to_node, coords, length, time in halves:
        graph.add_edge(
            edge=Edge(
                id=edge_id,
                from_node_id=from_node.id,
                to_node_id=to_node.id,
                type=edge.type,
                distance_m=length,
                time_s=time,
                elevation_change_m=from_node.elevation_diff_to(other=to_node),
                difficulty=edge.difficulty,
                name=edge.name,
                feature_id=edge.feature_id,
                coordinates=coords,
            )
        )


def add_map_point_to_graph(
    graph: NavigationGraph,
    point_id: str,
    lat: float,
    lng: float,
) -> str:
    """Add a clicked map point to a working copy.

    Within PoiConfig.MAP_POINT_RUN_SNAP_M of a run the point snaps onto the run,
    splitting its edge, and connects by walks to nodes within
    MAP_POINT_CONNECTION_DISTANCE_M. Otherwise it connects by walks to nodes
    within MAP_POINT_FALLBACK_DISTANCE_M.

    Returns:
        ID of the map point node ("mappoint-<point_id>").
    """
    _require_working_copy(graph=graph)
    node_id = f"mappoint-{point_id}"
    if node_id in graph.nodes:
        return node_id

    closest = _closest_run_position(graph=graph, lat=lat, lng=lng)
    if closest is not None and closest[5] <= PoiConfig.MAP_POINT_RUN_SNAP_M:
        edge, segment_index, snap_lng, snap_lat, snap_elevation, distance = closest
        node = Node(
            id=node_id,
            lat=snap_lat,
            lng=snap_lng,
            elevation=snap_elevation,
            kind=NodeKind.MAP_POINT,
            feature_id=edge.feature_id,
            feature_name=edge.name,
        )
        nearby = _nodes_within(graph=graph, node=node, radius_m=PoiConfig.MAP_POINT_CONNECTION_DISTANCE_M)
        graph.add_node(node=node)
        _split_run(graph=graph, edge=edge, segment_index=segment_index, node=node)
        logger.debug(f"Snapped map point {point_id} onto {edge.id} ({distance:.0f}m away)")
    else:
        node = Node(
            id=node_id,
            lat=lat,
            lng=lng,
            elevation=estimate_elevation(graph=graph, lat=lat, lng=lng),
            kind=NodeKind.MAP_POINT,
        )
        nearby = _nodes_within(graph=graph, node=node, radius_m=PoiConfig.MAP_POINT_FALLBACK_DISTANCE_M)
        graph.add_node(node=node)

    _connect_both_ways(graph=graph, node=node, others=nearby, penalty=PoiConfig.MAP_POINT_WALKING_PENALTY)
    return node_id
