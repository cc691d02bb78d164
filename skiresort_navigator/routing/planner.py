"""RoutePlanner - Request/response facade over the navigation core.

Maps a route request (ski area, origin, destination, filters, optional sun
routing) onto graph lookup, point resolution, path finding and sun
analysis, and returns a JSON-ready plan.

Errors:
- SkiAreaNotFoundError (HTTP 404): unknown ski area ID
- PointResolutionError (HTTP 422): origin/destination outside the network
An unreachable destination is not an error: the plan carries route=None
plus diagnostics.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from skiresort_navigator.constants import RoutingConfig
from skiresort_navigator.core.sun_position import SunPositionFn
from skiresort_navigator.generators.graph_builder import BuildOptions
from skiresort_navigator.generators.graph_filter import RouteFilter, filter_graph
from skiresort_navigator.model.diagnostics import RouteDiagnostics
from skiresort_navigator.model.navigation_graph import NavigationGraph
from skiresort_navigator.model.route import Route
from skiresort_navigator.model.ski_area import HourlyWeather, SkiAreaDetails
from skiresort_navigator.model.sun_analysis import SunAnalysis
from skiresort_navigator.routing.alternatives import find_alternative_routes
from skiresort_navigator.routing.graph_cache import GraphCache
from skiresort_navigator.routing.path_finder import find_nearest_node, find_route_with_diagnostics
from skiresort_navigator.routing.point_injection import add_map_point_to_graph
from skiresort_navigator.routing.sun_exposure import find_sunniest_route

logger = logging.getLogger(__name__)


class SkiAreaNotFoundError(LookupError):
    """The requested ski area does not exist."""

    http_status = 404


class PointResolutionError(ValueError):
    """An origin or destination cannot be resolved to a graph node."""

    http_status = 422


# =============================================================================
# Request / Response
# =============================================================================


@dataclass(frozen=True)
class RoutePoint:
    """A route endpoint: an existing node ID or a free map position."""

    node_id: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None

    def __post_init__(self) -> None:
        if self.node_id is None and (self.lat is None or self.lng is None):
            raise ValueError("RoutePoint needs a node_id or both lat and lng")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RoutePoint":
        if data.get("nodeId"):
            return cls(node_id=data["nodeId"])
        return cls(lat=float(data["lat"]), lng=float(data["lng"]))


@dataclass(frozen=True)
class SunRoutingOptions:
    """Trade up to tolerance_minutes of travel time for more sun."""

    start_time: datetime
    tolerance_minutes: float = 10.0
    alternatives: int = RoutingConfig.ALTERNATIVE_COUNT

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SunRoutingOptions":
        return cls(
            start_time=datetime.fromisoformat(data["startTime"]),
            tolerance_minutes=float(data.get("toleranceMinutes", 10.0)),
        )


@dataclass(frozen=True)
class RouteRequest:
    ski_area_id: str
    origin: RoutePoint
    destination: RoutePoint
    filters: RouteFilter = field(default_factory=RouteFilter)
    sun_routing: Optional[SunRoutingOptions] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RouteRequest":
        sun = data.get("sunRouting")
        return cls(
            ski_area_id=str(data["skiAreaId"]),
            origin=RoutePoint.from_dict(data["origin"]),
            destination=RoutePoint.from_dict(data["destination"]),
            filters=RouteFilter.from_dict(data.get("filters")),
            sun_routing=SunRoutingOptions.from_dict(sun) if sun else None,
        )


@dataclass(frozen=True)
class RoutePlan:
    """Planner response."""

    route: Optional[Route]
    diagnostics: Optional[RouteDiagnostics] = None
    sun_analysis: Optional[SunAnalysis] = None
    alternatives_considered: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "route": self.route.to_dict() if self.route is not None else None,
            "diagnostics": self.diagnostics.to_dict() if self.diagnostics is not None else None,
            "sun_analysis": self.sun_analysis.to_dict() if self.sun_analysis is not None else None,
            "alternatives_considered": self.alternatives_considered,
        }


# =============================================================================
# Planner
# =============================================================================


class RoutePlanner:
    """Plans routes for requests against cached ski area graphs.

    Args:
        ski_area_loader: Returns the ski area for an ID, or None if unknown
        graph_cache: Cache of built graphs (a private one if omitted)
        weather_loader: Returns hourly weather for a ski area (optional)
        sun_position: Sun position function (astral if omitted)
        build_options: Graph build options
    """

    def __init__(
        self,
        ski_area_loader: Callable[[str], Optional[SkiAreaDetails]],
        graph_cache: Optional[GraphCache] = None,
        weather_loader: Optional[Callable[[SkiAreaDetails], Sequence[HourlyWeather]]] = None,
        sun_position: Optional[SunPositionFn] = None,
        build_options: Optional[BuildOptions] = None,
    ) -> None:
        self.ski_area_loader = ski_area_loader
        self.graph_cache = graph_cache if graph_cache is not None else GraphCache()
        self.weather_loader = weather_loader
        self.sun_position = sun_position
        self.build_options = build_options

    def _resolve(self, graph: NavigationGraph, point: RoutePoint, role: str) -> str:
        if point.node_id is not None:
            if point.node_id not in graph.nodes:
                raise PointResolutionError(f"Unknown {role} node {point.node_id}")
            return point.node_id

        nearest = find_nearest_node(
            graph=graph, lat=point.lat, lng=point.lng, max_distance_m=RoutingConfig.SNAP_DISTANCE_M
        )
        if nearest is None:
            raise PointResolutionError(
                f"The {role} ({point.lat:.5f}, {point.lng:.5f}) is outside the ski area network"
            )
        return add_map_point_to_graph(graph=graph, point_id=role, lat=point.lat, lng=point.lng)

    def plan(self, request: RouteRequest) -> RoutePlan:
        """Plan a route for a request.

        Raises:
            SkiAreaNotFoundError: Unknown ski area
            PointResolutionError: Origin or destination cannot be resolved
        """
        ski_area = self.ski_area_loader(request.ski_area_id)
        if ski_area is None:
            raise SkiAreaNotFoundError(f"Ski area {request.ski_area_id} not found")

        working = self.graph_cache.get(ski_area=ski_area, options=self.build_options).working_copy()
        origin_id = self._resolve(graph=working, point=request.origin, role="origin")
        destination_id = self._resolve(graph=working, point=request.destination, role="destination")
        graph = filter_graph(graph=working, route_filter=request.filters)

        result = find_route_with_diagnostics(
            graph=graph, from_node_id=origin_id, to_node_id=destination_id, ski_area=ski_area
        )
        if result.route is None or request.sun_routing is None:
            return RoutePlan(route=result.route, diagnostics=result.diagnostics)

        sun = request.sun_routing
        base = result.route
        budget = (base.total_time_s + sun.tolerance_minutes * 60) / base.total_time_s if base.total_time_s > 0 else 1.0
        alternatives = find_alternative_routes(
            graph=graph,
            from_node_id=origin_id,
            to_node_id=destination_id,
            k=sun.alternatives,
            time_budget_multiplier=max(1.0, budget),
            ski_area=ski_area,
        )
        weather = self.weather_loader(ski_area) if self.weather_loader is not None else None
        choice = find_sunniest_route(
            base_route=base,
            alternative_routes=alternatives[1:],
            tolerance_minutes=sun.tolerance_minutes,
            start_time=sun.start_time,
            ski_area=ski_area,
            hourly_weather=weather,
            sun_position=self.sun_position,
        )
        logger.info(
            f"Planned route in {ski_area.name}: {len(alternatives)} candidates, "
            f"{choice.analysis.sun_percentage:.0f}% sun"
        )
        return RoutePlan(
            route=choice.route,
            sun_analysis=choice.analysis,
            alternatives_considered=len(alternatives),
        )
