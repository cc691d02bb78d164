"""Status-aware routing - Avoid closed lifts and runs closing before arrival.

Routing happens on a filtered view without closed features (and those closing
within a buffer). The found route is then replayed along its timeline: any
lift or run reached at or after its closing time minus the buffer is excluded
too and the search repeats. If no compliant route exists, the unrestricted
route is returned with a warning rather than nothing.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from skiresort_navigator.constants import StatusConfig
from skiresort_navigator.model.diagnostics import RouteDiagnostics
from skiresort_navigator.model.edge import Edge
from skiresort_navigator.model.navigation_graph import NavigationGraph
from skiresort_navigator.model.resort_status import FeatureStatus, ResortStatus
from skiresort_navigator.model.route import Route
from skiresort_navigator.model.ski_area import SkiAreaDetails, as_utc
from skiresort_navigator.routing.path_finder import find_route, find_route_with_diagnostics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusAwareResult:
    """Route honoring live status, with user-facing warnings."""

    route: Optional[Route]
    warnings: tuple[str, ...] = ()
    avoided_feature_keys: tuple[str, ...] = ()
    diagnostics: Optional[RouteDiagnostics] = None


def _status_of(status: ResortStatus, edge: Edge) -> Optional[FeatureStatus]:
    if edge.is_walk or edge.feature_id is None:
        return None
    return status.status_for(feature_type=edge.type.value, feature_id=edge.feature_id)


def _minutes_left(feature: FeatureStatus, at: datetime) -> Optional[float]:
    if feature.closing_time is None:
        return None
    return (as_utc(feature.closing_time) - as_utc(at)).total_seconds() / 60


def unavailable_feature_keys(
    graph: NavigationGraph,
    status: ResortStatus,
    now: datetime,
    closing_buffer_minutes: float = StatusConfig.CLOSING_BUFFER_MIN,
) -> set[str]:
    """Feature keys of lifts/runs that are closed or close within the buffer."""
    keys = set()
    for edge in graph.edges.values():
        feature = _status_of(status=status, edge=edge)
        if feature is None:
            continue
        minutes = _minutes_left(feature=feature, at=now)
        if not feature.is_open or (minutes is not None and minutes <= closing_buffer_minutes):
            keys.add(edge.feature_key)
    return keys


def build_status_aware_graph(
    graph: NavigationGraph,
    status: ResortStatus,
    now: datetime,
    closing_buffer_minutes: float = StatusConfig.CLOSING_BUFFER_MIN,
    extra_excluded: Optional[set[str]] = None,
) -> NavigationGraph:
    """Read-only view without closed and soon-closing features."""
    excluded = unavailable_feature_keys(
        graph=graph, status=status, now=now, closing_buffer_minutes=closing_buffer_minutes
    ) | (extra_excluded or set())
    return graph.filtered(keep=lambda edge: edge.feature_key not in excluded)


def _walk_timeline(graph: NavigationGraph, route: Route, now: datetime):
    """Yield (edge, arrival time at the edge start) along the route."""
    elapsed = 0.0
    for edge_id in route.edge_ids:
        edge = graph.edges[edge_id]
        yield edge, now + timedelta(seconds=elapsed)
        elapsed += edge.time_s


def closing_violations(
    graph: NavigationGraph,
    route: Route,
    status: ResortStatus,
    now: datetime,
    closing_buffer_minutes: float = StatusConfig.CLOSING_BUFFER_MIN,
) -> set[str]:
    """Feature keys reached at or after closing time minus the buffer."""
    violations = set()
    for edge, arrival in _walk_timeline(graph=graph, route=route, now=now):
        feature = _status_of(status=status, edge=edge)
        if feature is None:
            continue
        minutes = _minutes_left(feature=feature, at=arrival)
        if not feature.is_open or (minutes is not None and minutes <= closing_buffer_minutes):
            violations.add(edge.feature_key)
    return violations


def closing_warnings(graph: NavigationGraph, route: Route, status: ResortStatus, now: datetime) -> list[str]:
    """Warnings for features on the route that close soon after the skier gets there."""
    warnings: dict[str, str] = {}
    for edge, arrival in _walk_timeline(graph=graph, route=route, now=now):
        feature = _status_of(status=status, edge=edge)
        if feature is None or edge.feature_key in warnings:
            continue
        label = edge.name or f"{edge.type.value.capitalize()} {edge.feature_id}"
        if not feature.is_open:
            warnings[edge.feature_key] = f"{label} is currently closed"
            continue
        minutes = _minutes_left(feature=feature, at=arrival)
        if minutes is not None and minutes <= StatusConfig.CLOSING_WARNING_MIN:
            warnings[edge.feature_key] = f"{label} closes in {max(0, round(minutes))} minutes"
    return list(warnings.values())


def find_status_aware_route(
    graph: NavigationGraph,
    from_node_id: str,
    to_node_id: str,
    status: ResortStatus,
    now: datetime,
    ski_area: Optional[SkiAreaDetails] = None,
    closing_buffer_minutes: float = StatusConfig.CLOSING_BUFFER_MIN,
) -> StatusAwareResult:
    """Fastest route using only features that are open when the skier reaches them."""
    extra: set[str] = set()
    diagnostics = None
    while True:
        view = build_status_aware_graph(
            graph=graph, status=status, now=now, closing_buffer_minutes=closing_buffer_minutes, extra_excluded=extra
        )
        result = find_route_with_diagnostics(
            graph=view, from_node_id=from_node_id, to_node_id=to_node_id, ski_area=ski_area
        )
        if result.route is None:
            diagnostics = result.diagnostics
            break

        violations = closing_violations(
            graph=graph, route=result.route, status=status, now=now, closing_buffer_minutes=closing_buffer_minutes
        )
        new_violations = violations - extra
        if not new_violations:
            avoided = unavailable_feature_keys(
                graph=graph, status=status, now=now, closing_buffer_minutes=closing_buffer_minutes
            ) | extra
            return StatusAwareResult(
                route=result.route,
                warnings=tuple(closing_warnings(graph=graph, route=result.route, status=status, now=now)),
                avoided_feature_keys=tuple(sorted(avoided)),
            )
        logger.debug(f"Route reaches {sorted(new_violations)} after closing, retrying without them")
        extra |= new_violations

    fallback = find_route(graph=graph, from_node_id=from_node_id, to_node_id=to_node_id, ski_area=ski_area)
    if fallback is None:
        return StatusAwareResult(route=None, warnings=("No route available",), diagnostics=diagnostics)

    warnings = ["Some lifts or runs on this route may be closed"]
    warnings.extend(closing_warnings(graph=graph, route=fallback, status=status, now=now))
    logger.info(f"No fully open route {from_node_id} -> {to_node_id}, returning unrestricted route")
    return StatusAwareResult(route=fallback, warnings=tuple(warnings), diagnostics=diagnostics)
