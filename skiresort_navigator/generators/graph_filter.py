"""Route filters - Restrict routing to allowed run difficulties and lift types.

Filtering never mutates the base graph: it returns a read-only view whose
adjacency omits disallowed edges. Nodes stay in place (dead ends at worst)
and walk connectors are always kept.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from skiresort_navigator.constants import SpeedConfig
from skiresort_navigator.generators.graph_builder import normalize_difficulty, normalize_lift_type
from skiresort_navigator.model.edge import Edge
from skiresort_navigator.model.navigation_graph import NavigationGraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteFilter:
    """Allowed difficulties and lift types.

    Attributes:
        allowed_difficulties: Run difficulties to allow (None = all)
        allowed_lift_types: Lift types to allow (None = all)
        include_unrated_runs: Allow runs without a difficulty rating
    """

    allowed_difficulties: Optional[frozenset[str]] = None
    allowed_lift_types: Optional[frozenset[str]] = None
    include_unrated_runs: bool = True

    def __post_init__(self) -> None:
        if self.allowed_difficulties is not None:
            unknown = set(self.allowed_difficulties) - set(SpeedConfig.DIFFICULTIES)
            if unknown:
                raise ValueError(f"Unknown difficulties {sorted(unknown)}; expected {SpeedConfig.DIFFICULTIES}")
        if self.allowed_lift_types is not None:
            unknown = set(self.allowed_lift_types) - set(SpeedConfig.LIFT_TYPES)
            if unknown:
                raise ValueError(f"Unknown lift types {sorted(unknown)}; expected {SpeedConfig.LIFT_TYPES}")

    @classmethod
    def create(
        cls,
        difficulties: Optional[Iterable[str]] = None,
        lift_types: Optional[Iterable[str]] = None,
        include_unrated_runs: bool = True,
    ) -> "RouteFilter":
        """Create a filter from raw (possibly aliased) values."""
        return cls(
            allowed_difficulties=(
                frozenset(d for d in (normalize_difficulty(difficulty=x) for x in difficulties) if d)
                if difficulties is not None
                else None
            ),
            allowed_lift_types=(
                frozenset(t for t in (normalize_lift_type(lift_type=x) for x in lift_types) if t)
                if lift_types is not None
                else None
            ),
            include_unrated_runs=include_unrated_runs,
        )

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "RouteFilter":
        data = data or {}
        return cls.create(
            difficulties=data.get("difficulties"),
            lift_types=data.get("liftTypes"),
            include_unrated_runs=data.get("includeUnrated", True),
        )

    @property
    def is_unrestricted(self) -> bool:
        return self.allowed_difficulties is None and self.allowed_lift_types is None and self.include_unrated_runs

    def allows(self, edge: Edge) -> bool:
        if edge.is_run:
            if edge.difficulty is None:
                return self.include_unrated_runs
            return self.allowed_difficulties is None or edge.difficulty in self.allowed_difficulties
        if edge.is_lift:
            if self.allowed_lift_types is None:
                return True
            return edge.lift_type in self.allowed_lift_types
        return True


def filter_graph(graph: NavigationGraph, route_filter: Optional[RouteFilter]) -> NavigationGraph:
    """Read-only view of graph restricted to the filter (graph itself if unrestricted)."""
    if route_filter is None or route_filter.is_unrestricted:
        return graph
    view = graph.filtered(keep=route_filter.allows)
    before, after = graph.get_stats()["edges"], view.get_stats()["edges"]
    logger.debug(f"Route filter removed {before - after} of {before} edges")
    return view
