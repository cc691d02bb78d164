"""Alternative routes - A few materially different routes within a time budget.

Strategy objects implement the search so the heuristic can be swapped
(e.g. for Yen's exact k-shortest paths) behind the same interface:
- AlternativeRouteStrategy: Abstract interface
- EdgeExclusionStrategy: Iterative Dijkstra, blocking one feature of a known
  route at a time (approximate, not guaranteed to find the k best)
"""

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Optional

from skiresort_navigator.constants import RoutingConfig
from skiresort_navigator.model.navigation_graph import NavigationGraph
from skiresort_navigator.model.route import Route
from skiresort_navigator.model.ski_area import SkiAreaDetails
from skiresort_navigator.routing.path_finder import find_route

logger = logging.getLogger(__name__)


def edge_overlap(a: Route, b: Route) -> float:
    """Share of the smaller route's edges that the other route also uses (0-1)."""
    edges_a, edges_b = set(a.edge_ids), set(b.edge_ids)
    smaller = min(len(edges_a), len(edges_b))
    if smaller == 0:
        return 1.0
    return len(edges_a & edges_b) / smaller


class AlternativeRouteStrategy(ABC):
    """Finds up to k routes between two nodes, fastest first."""

    @abstractmethod
    def find(
        self,
        graph: NavigationGraph,
        from_node_id: str,
        to_node_id: str,
        k: int,
        time_budget_multiplier: float,
        ski_area: Optional[SkiAreaDetails] = None,
    ) -> list[Route]:
        """Return distinct routes whose time is within budget × fastest time."""


class EdgeExclusionStrategy(AlternativeRouteStrategy):
    """k-shortest-paths heuristic by iterative feature exclusion.

    Starting from the fastest route, each run/lift of a found route
    (at least min_blockable_m long; walks individually) is blocked in turn
    and the search is repeated. A new route is kept when it fits the time
    budget and shares at most max_overlap of its edges with every kept route.
    Blocked sets accumulate, so alternatives of alternatives are explored
    breadth-first.
    """

    def __init__(
        self,
        min_blockable_m: float = RoutingConfig.MIN_BLOCKABLE_SEGMENT_M,
        max_overlap: float = RoutingConfig.MAX_EDGE_OVERLAP,
        max_searches_per_route: int = RoutingConfig.MAX_SEARCHES_PER_ROUTE,
    ) -> None:
        self.min_blockable_m = min_blockable_m
        self.max_overlap = max_overlap
        self.max_searches_per_route = max_searches_per_route

    def _blockable_keys(self, graph: NavigationGraph, route: Route) -> list[str]:
        keys: list[str] = []
        for edge_id in route.edge_ids:
            edge = graph.edges[edge_id]
            if edge.distance_m < self.min_blockable_m:
                continue
            if edge.feature_key not in keys:
                keys.append(edge.feature_key)
        return keys

    def _is_distinct(self, candidate: Route, accepted: list[Route]) -> bool:
        return all(edge_overlap(a=candidate, b=route) <= self.max_overlap for route in accepted)

    def find(
        self,
        graph: NavigationGraph,
        from_node_id: str,
        to_node_id: str,
        k: int,
        time_budget_multiplier: float,
        ski_area: Optional[SkiAreaDetails] = None,
    ) -> list[Route]:
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")
        if time_budget_multiplier < 1:
            raise ValueError(f"time_budget_multiplier must be >= 1, got {time_budget_multiplier}")

        fastest = find_route(graph=graph, from_node_id=from_node_id, to_node_id=to_node_id, ski_area=ski_area)
        if fastest is None:
            return []

        max_time = fastest.total_time_s * time_budget_multiplier
        accepted = [fastest]
        tried: set[frozenset[str]] = set()
        queue: deque[tuple[Route, frozenset[str]]] = deque([(fastest, frozenset())])
        searches = 0
        max_searches = self.max_searches_per_route * k

        while queue and len(accepted) < k and searches < max_searches:
            route, blocked = queue.popleft()
            for key in self._blockable_keys(graph=graph, route=route):
                candidate_blocked = blocked | {key}
                if candidate_blocked in tried:
                    continue
                tried.add(candidate_blocked)
                searches += 1

                excluded = {edge.id for feature in candidate_blocked for edge in graph.edges_of_feature(feature)}
                view = graph.without_edges(edge_ids=excluded)
                candidate = find_route(graph=view, from_node_id=from_node_id, to_node_id=to_node_id, ski_area=ski_area)
                if candidate is None or candidate.total_time_s > max_time:
                    continue
                if not self._is_distinct(candidate=candidate, accepted=accepted):
                    continue

                accepted.append(candidate)
                queue.append((candidate, candidate_blocked))
                if len(accepted) >= k or searches >= max_searches:
                    break

        logger.debug(f"Found {len(accepted)} routes {from_node_id} -> {to_node_id} after {searches} searches")
        return accepted


def find_alternative_routes(
    graph: NavigationGraph,
    from_node_id: str,
    to_node_id: str,
    k: int = RoutingConfig.ALTERNATIVE_COUNT,
    time_budget_multiplier: float = RoutingConfig.TIME_BUDGET_MULTIPLIER,
    ski_area: Optional[SkiAreaDetails] = None,
    strategy: Optional[AlternativeRouteStrategy] = None,
) -> list[Route]:
    """Up to k distinct routes within time_budget_multiplier × fastest time, fastest first."""
    strategy = strategy or EdgeExclusionStrategy()
    return strategy.find(
        graph=graph,
        from_node_id=from_node_id,
        to_node_id=to_node_id,
        k=k,
        time_budget_multiplier=time_budget_multiplier,
        ski_area=ski_area,
    )
