"""Route diagnostics - Why no route could be found and what to try instead.

Resort networks drawn from community data are frequently disconnected, so
a missing route is an expected outcome. Diagnostics turn it into data:
- UnreachableReason: Classification of the failure
- RoutingHint subclasses: Ranked, human-readable suggestions
- RouteDiagnostics: Distances, elevation gap, sub-regions, blocked edges
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Optional


class UnreachableReason(str, Enum):
    """Classification of a routing failure."""

    NO_START_NODE = "no_start_node"
    NO_END_NODE = "no_end_node"
    BLOCKED_BY_FILTERS = "blocked_by_filters"
    TOO_FAR_TO_WALK = "too_far_to_walk"
    DIFFERENT_REGION = "different_region"
    UNREACHABLE = "unreachable"


@dataclass(frozen=True)
class RoutingHint(ABC):
    """Abstract base class for routing suggestions.

    Subclasses store specific parameters and compute message as property.
    Lower rank is shown first.
    """

    rank: ClassVar[int] = 100

    @property
    @abstractmethod
    def message(self) -> str:
        """Human-readable suggestion."""

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class MissingNodeHint(RoutingHint):
    """Origin or destination is not part of the network."""

    node_id: str
    role: str  # "Start" or "Destination"
    rank: ClassVar[int] = 0

    @property
    def message(self) -> str:
        return f"{self.role} point {self.node_id} is not part of the navigation network."


@dataclass(frozen=True)
class BlockedByFilterHint(RoutingHint):
    """A route exists, but only through edges the active filters exclude."""

    feature_names: tuple[str, ...]
    rank: ClassVar[int] = 1

    @property
    def message(self) -> str:
        names = ", ".join(self.feature_names)
        return f"The only route uses {names}, which your route options exclude. Allow it to find a route."


@dataclass(frozen=True)
class TooFarToWalkHint(RoutingHint):
    distance_m: float
    rank: ClassVar[int] = 2

    @property
    def message(self) -> str:
        return f"The nearest reachable point is {self.distance_m:.0f}m away - too far to walk."


@dataclass(frozen=True)
class RegionMismatchHint(RoutingHint):
    origin_region: str
    destination_region: str
    rank: ClassVar[int] = 3

    @property
    def message(self) -> str:
        return (
            f'Destination "{self.destination_region}" may not be directly connected to '
            f'"{self.origin_region}". Crossing regions may require a closed connector.'
        )


@dataclass(frozen=True)
class ElevationGapHint(RoutingHint):
    """Signed gap: positive means the destination lies above the reachable network."""

    gap_m: float
    rank: ClassVar[int] = 4

    @property
    def message(self) -> str:
        direction = "climb" if self.gap_m > 0 else "descent"
        return f"Would require {abs(self.gap_m):.0f}m {direction} on foot."


@dataclass(frozen=True)
class WalkingGapHint(RoutingHint):
    distance_m: float
    rank: ClassVar[int] = 5

    @property
    def message(self) -> str:
        return f"There's a {self.distance_m:.0f}m gap that might require walking."


@dataclass(frozen=True)
class DifferentStartHint(RoutingHint):
    rank: ClassVar[int] = 6

    @property
    def message(self) -> str:
        return "Check if the destination is accessible from a different starting point."


@dataclass(frozen=True)
class RelaxFiltersHint(RoutingHint):
    rank: ClassVar[int] = 7

    @property
    def message(self) -> str:
        return "Try adjusting route options to allow more lift types or slope difficulties."


@dataclass(frozen=True)
class RouteDiagnostics:
    """Structured explanation of a routing failure.

    Attributes:
        reason: Failure classification
        start_node_exists: Origin is a graph node
        end_node_exists: Destination is a graph node
        nearest_reachable_node_id: Node reachable from the origin closest to the destination
        nearest_reachable_distance_m: Its distance to the destination
        nearest_approach_node_id: Node that can reach the destination closest to the origin
        nearest_approach_distance_m: Its distance to the origin
        elevation_gap_m: Destination elevation minus nearest reachable node elevation
        origin_region: Sub-region name of the origin
        destination_region: Sub-region name of the destination
        blocked_edge_ids: Edges the unfiltered route needs but the filters exclude
        hints: Suggestions, unsorted
    """

    reason: UnreachableReason
    start_node_exists: bool = True
    end_node_exists: bool = True
    nearest_reachable_node_id: Optional[str] = None
    nearest_reachable_distance_m: Optional[float] = None
    nearest_approach_node_id: Optional[str] = None
    nearest_approach_distance_m: Optional[float] = None
    elevation_gap_m: Optional[float] = None
    origin_region: Optional[str] = None
    destination_region: Optional[str] = None
    blocked_edge_ids: tuple[str, ...] = ()
    hints: tuple[RoutingHint, ...] = field(default=(), repr=False)

    @property
    def suggestions(self) -> list[str]:
        """Hint messages, most actionable first."""
        return [hint.message for hint in sorted(self.hints, key=lambda hint: hint.rank)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "reason": self.reason.value,
            "start_node_exists": self.start_node_exists,
            "end_node_exists": self.end_node_exists,
            "nearest_reachable_node_id": self.nearest_reachable_node_id,
            "nearest_reachable_distance_m": self.nearest_reachable_distance_m,
            "nearest_approach_node_id": self.nearest_approach_node_id,
            "nearest_approach_distance_m": self.nearest_approach_distance_m,
            "elevation_gap_m": self.elevation_gap_m,
            "origin_region": self.origin_region,
            "destination_region": self.destination_region,
            "blocked_edge_ids": list(self.blocked_edge_ids),
            "suggestions": self.suggestions,
        }
