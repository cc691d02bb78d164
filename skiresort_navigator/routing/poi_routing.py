"""POI routing helper - Nearest toilet and a route to it.

Nearest is measured in a straight line from the query point, restricted to
POIs close enough to the network to be reachable. This approximates, but does
not guarantee, the shortest routed distance.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from skiresort_navigator.constants import PoiConfig
from skiresort_navigator.core.geo_calculator import GeoCalculator
from skiresort_navigator.model.navigation_graph import NavigationGraph
from skiresort_navigator.model.ski_area import POIData, SkiAreaDetails
from skiresort_navigator.routing.path_finder import RouteResult, find_nearest_node, find_route_with_diagnostics
from skiresort_navigator.routing.point_injection import add_map_point_to_graph, add_poi_node_to_graph

logger = logging.getLogger(__name__)


def _near_network(graph: NavigationGraph, poi: POIData) -> bool:
    node = find_nearest_node(
        graph=graph,
        lat=poi.latitude,
        lng=poi.longitude,
        max_distance_m=PoiConfig.TOILET_MAX_GRAPH_DISTANCE_M,
    )
    return node is not None


def find_nearest_poi(
    from_lat: float,
    from_lng: float,
    graph: NavigationGraph,
    pois: Sequence[POIData],
    poi_type: str,
) -> Optional[POIData]:
    """Closest POI of a type that lies near the navigation graph."""
    if poi_type not in PoiConfig.TYPES:
        raise ValueError(f"Unknown POI type '{poi_type}', expected one of {PoiConfig.TYPES}")

    candidates = [p for p in pois if p.type == poi_type and _near_network(graph=graph, poi=p)]
    if not candidates:
        return None

    distances = GeoCalculator.haversine_distances_m(
        lat=from_lat,
        lon=from_lng,
        lats=np.array([p.latitude for p in candidates]),
        lons=np.array([p.longitude for p in candidates]),
    )
    return candidates[int(np.argmin(distances))]


def find_nearest_toilet(
    from_lat: float,
    from_lng: float,
    graph: NavigationGraph,
    pois: Sequence[POIData],
) -> Optional[POIData]:
    """Closest toilet by straight-line distance, None if none is near the network."""
    return find_nearest_poi(from_lat=from_lat, from_lng=from_lng, graph=graph, pois=pois, poi_type="toilet")


def route_to_nearest_toilet(
    graph: NavigationGraph,
    from_lat: float,
    from_lng: float,
    pois: Sequence[POIData],
    from_node_id: Optional[str] = None,
    ski_area: Optional[SkiAreaDetails] = None,
) -> Optional[tuple[POIData, RouteResult]]:
    """Route to the nearest toilet on a throwaway working copy.

    Args:
        graph: Base graph (left untouched)
        from_lat: Current latitude
        from_lng: Current longitude
        pois: Candidate POIs
        from_node_id: Start node; when None the position is injected as a map point
        ski_area: Optional ski area for diagnostics and names

    Returns:
        (toilet, result) or None when no toilet is near the network.
    """
    toilet = find_nearest_toilet(from_lat=from_lat, from_lng=from_lng, graph=graph, pois=pois)
    if toilet is None:
        logger.info(f"No toilet near the network for ({from_lat:.5f}, {from_lng:.5f})")
        return None

    working = graph.working_copy()
    target_id = add_poi_node_to_graph(
        graph=working, poi_id=toilet.id, lat=toilet.latitude, lng=toilet.longitude, name=toilet.name or "Toilet"
    )
    if from_node_id is None:
        from_node_id = add_map_point_to_graph(graph=working, point_id="current", lat=from_lat, lng=from_lng)
    result = find_route_with_diagnostics(
        graph=working, from_node_id=from_node_id, to_node_id=target_id, ski_area=ski_area
    )
    return toilet, result
