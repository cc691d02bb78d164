"""Routing algorithms over the navigation graph.

- path_finder: Shortest routes, nearest node, feature-level routing
- route_diagnostics: Explanations for unreachable destinations
- alternatives: k alternative routes (strategy interface)
- route_optimizer: Segment merging and labeling
- point_injection: POI and map point injection into working copies
- poi_routing: Nearest toilet helper
- status_routing: Routing around closed lifts and runs
- sun_exposure: Sun exposure analysis and sunniest-route choice
- graph_cache: Caller-owned graph cache
- planner: Request/response facade
"""

from skiresort_navigator.routing.alternatives import (
    AlternativeRouteStrategy,
    EdgeExclusionStrategy,
    find_alternative_routes,
)
from skiresort_navigator.routing.graph_cache import GraphCache
from skiresort_navigator.routing.path_finder import (
    Destination,
    RouteResult,
    find_nearest_node,
    find_route,
    find_route_between_features,
    find_route_from_location,
    find_route_with_diagnostics,
    get_destinations,
)
from skiresort_navigator.routing.planner import (
    PointResolutionError,
    RoutePlan,
    RoutePlanner,
    RoutePoint,
    RouteRequest,
    SkiAreaNotFoundError,
    SunRoutingOptions,
)
from skiresort_navigator.routing.poi_routing import find_nearest_toilet, route_to_nearest_toilet
from skiresort_navigator.routing.point_injection import add_map_point_to_graph, add_poi_node_to_graph
from skiresort_navigator.routing.route_optimizer import optimize_route
from skiresort_navigator.routing.status_routing import (
    StatusAwareResult,
    build_status_aware_graph,
    find_status_aware_route,
)
from skiresort_navigator.routing.sun_exposure import (
    SunnyRouteChoice,
    analyze_route_sun_exposure,
    find_sunniest_route,
    is_bad_weather_for_sun_routing,
)

__all__ = [
    # Path finder
    "find_route",
    "find_route_with_diagnostics",
    "find_nearest_node",
    "find_route_between_features",
    "find_route_from_location",
    "get_destinations",
    "RouteResult",
    "Destination",
    # Alternatives
    "AlternativeRouteStrategy",
    "EdgeExclusionStrategy",
    "find_alternative_routes",
    # Optimizer
    "optimize_route",
    # Injection and POIs
    "add_poi_node_to_graph",
    "add_map_point_to_graph",
    "find_nearest_toilet",
    "route_to_nearest_toilet",
    # Status
    "StatusAwareResult",
    "build_status_aware_graph",
    "find_status_aware_route",
    # Sun
    "SunnyRouteChoice",
    "analyze_route_sun_exposure",
    "find_sunniest_route",
    "is_bad_weather_for_sun_routing",
    # Cache and planner
    "GraphCache",
    "RoutePlanner",
    "RouteRequest",
    "RoutePoint",
    "RoutePlan",
    "SunRoutingOptions",
    "SkiAreaNotFoundError",
    "PointResolutionError",
]
