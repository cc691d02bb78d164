"""Route diagnostics - Explain why a destination is unreachable.

Computes, for a failed query:
- The node reachable from the origin that gets closest to the destination
- The node that can reach the destination that lies closest to the origin
- The elevation gap between destination and nearest reachable node
- Sub-region names of both endpoints
- Edges a filtered graph excludes but the unfiltered route would need
and derives ranked suggestions from them.
"""

import logging
from typing import Optional

import numpy as np

from skiresort_navigator.constants import ConnectionConfig, RoutingConfig
from skiresort_navigator.core.geo_calculator import GeoCalculator
from skiresort_navigator.model.diagnostics import (
    BlockedByFilterHint,
    DifferentStartHint,
    ElevationGapHint,
    MissingNodeHint,
    RegionMismatchHint,
    RelaxFiltersHint,
    RouteDiagnostics,
    RoutingHint,
    TooFarToWalkHint,
    UnreachableReason,
    WalkingGapHint,
)
from skiresort_navigator.model.edge import Edge
from skiresort_navigator.model.navigation_graph import NavigationGraph
from skiresort_navigator.model.node import Node
from skiresort_navigator.model.ski_area import SkiAreaDetails
from skiresort_navigator.routing.path_finder import find_edge_path, shortest_times_from

logger = logging.getLogger(__name__)


def _nearest_within(
    graph: NavigationGraph, mask: np.ndarray, target: Node
) -> tuple[Optional[Node], Optional[float]]:
    """Node among mask closest to target, with its distance."""
    if not mask.any():
        return None, None
    arrays = graph.node_arrays()
    distances = GeoCalculator.haversine_distances_m(lat=target.lat, lon=target.lng, lats=arrays.lats, lons=arrays.lngs)
    distances = np.where(mask, distances, np.inf)
    best = int(np.argmin(distances))
    return graph.nodes[arrays.node_ids[best]], float(distances[best])


def find_blocked_edges(graph: NavigationGraph, from_node_id: str, to_node_id: str) -> list[Edge]:
    """Edges of the unfiltered fastest route that the filtered graph excludes."""
    unfiltered = graph.unfiltered
    if unfiltered is None or from_node_id not in unfiltered.nodes or to_node_id not in unfiltered.nodes:
        return []
    path = find_edge_path(graph=unfiltered, from_node_id=from_node_id, to_node_id=to_node_id)
    if path is None:
        return []
    active = {edge_id for edge_ids in graph.adjacency.values() for edge_id in edge_ids}
    return [edge for edge in path if edge.id not in active]


def _feature_label(edge: Edge) -> str:
    if edge.name:
        return f'{edge.type.value} "{edge.name}"'
    detail = edge.lift_type or edge.difficulty or edge.type.value
    return f"{detail} {edge.type.value} {edge.feature_id or edge.id}"


def _region(ski_area: Optional[SkiAreaDetails], node: Node) -> Optional[str]:
    if ski_area is None:
        return None
    return ski_area.region_name_at(lat=node.lat, lng=node.lng, feature_id=node.feature_id)


def diagnose_unreachable(
    graph: NavigationGraph,
    from_node_id: str,
    to_node_id: str,
    ski_area: Optional[SkiAreaDetails] = None,
) -> RouteDiagnostics:
    """Explain why no route exists between two nodes."""
    start = graph.get_node(from_node_id)
    end = graph.get_node(to_node_id)
    if start is None or end is None:
        hints: list[RoutingHint] = [DifferentStartHint()]
        if start is None:
            hints.append(MissingNodeHint(node_id=from_node_id, role="Start"))
        if end is None:
            hints.append(MissingNodeHint(node_id=to_node_id, role="Destination"))
        return RouteDiagnostics(
            reason=UnreachableReason.NO_START_NODE if start is None else UnreachableReason.NO_END_NODE,
            start_node_exists=start is not None,
            end_node_exists=end is not None,
            hints=tuple(hints),
        )

    forward = shortest_times_from(graph=graph, node_id=from_node_id)
    backward = shortest_times_from(graph=graph, node_id=to_node_id, reverse=True)
    nearest, nearest_distance = _nearest_within(graph=graph, mask=np.isfinite(forward), target=end)
    approach, approach_distance = _nearest_within(graph=graph, mask=np.isfinite(backward), target=start)

    elevation_gap = None
    if nearest is not None and nearest.elevation is not None and end.elevation is not None:
        elevation_gap = end.elevation - nearest.elevation

    origin_region = _region(ski_area=ski_area, node=start)
    destination_region = _region(ski_area=ski_area, node=end)
    regions_differ = origin_region is not None and destination_region is not None and origin_region != destination_region

    blocked = find_blocked_edges(graph=graph, from_node_id=from_node_id, to_node_id=to_node_id)
    too_far = nearest_distance is not None and nearest_distance > RoutingConfig.TOO_FAR_TO_WALK_M

    hints = []
    if blocked:
        reason = UnreachableReason.BLOCKED_BY_FILTERS
        labels = tuple(dict.fromkeys(_feature_label(edge=edge) for edge in blocked))
        hints.append(BlockedByFilterHint(feature_names=labels))
    elif too_far:
        reason = UnreachableReason.TOO_FAR_TO_WALK
    elif regions_differ:
        reason = UnreachableReason.DIFFERENT_REGION
    else:
        reason = UnreachableReason.UNREACHABLE

    if too_far:
        hints.append(TooFarToWalkHint(distance_m=nearest_distance))
    elif nearest_distance:
        hints.append(WalkingGapHint(distance_m=nearest_distance))
    if regions_differ:
        hints.append(RegionMismatchHint(origin_region=origin_region, destination_region=destination_region))
    if elevation_gap is not None and abs(elevation_gap) > ConnectionConfig.MAX_WALK_ELEVATION_DIFF_M:
        hints.append(ElevationGapHint(gap_m=elevation_gap))
    hints.append(DifferentStartHint())
    if blocked or graph.unfiltered is not None:
        hints.append(RelaxFiltersHint())

    diagnostics = RouteDiagnostics(
        reason=reason,
        nearest_reachable_node_id=nearest.id if nearest is not None else None,
        nearest_reachable_distance_m=nearest_distance,
        nearest_approach_node_id=approach.id if approach is not None else None,
        nearest_approach_distance_m=approach_distance,
        elevation_gap_m=elevation_gap,
        origin_region=origin_region,
        destination_region=destination_region,
        blocked_edge_ids=tuple(edge.id for edge in blocked),
        hints=tuple(hints),
    )
    logger.debug(f"Diagnostics {from_node_id} -> {to_node_id}: {diagnostics}")
    return diagnostics
