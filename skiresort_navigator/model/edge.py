"""Edge - Directed, weighted connection between two nodes.

Travel mode decides speed: runs are skied downhill, lifts ride uphill and
walk edges close gaps the drawn network leaves open.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from skiresort_navigator.core.geo_calculator import Coordinate


class EdgeType(str, Enum):
    """Travel mode of an edge."""

    RUN = "run"
    LIFT = "lift"
    WALK = "walk"


@dataclass(frozen=True)
class Edge:
    """A directed edge of the navigation graph.

    Attributes:
        id: Stable identifier (e.g. "edge-run-42", "walk-run-1-end-lift-2-start")
        from_node_id: Source node
        to_node_id: Target node
        type: Travel mode
        distance_m: Length in meters
        time_s: Travel time in seconds (the optimized cost)
        elevation_change_m: Target minus source elevation, None when unknown
        difficulty: Run difficulty (runs only)
        lift_type: Normalized lift type (lifts only)
        name: Display name of the underlying feature
        feature_id: ID of the run/lift the edge belongs to
        coordinates: Geometry for rendering and sun sampling
    """

    id: str
    from_node_id: str
    to_node_id: str
    type: EdgeType
    distance_m: float
    time_s: float
    elevation_change_m: Optional[float] = None
    difficulty: Optional[str] = None
    lift_type: Optional[str] = None
    name: Optional[str] = None
    feature_id: Optional[str] = None
    coordinates: tuple[Coordinate, ...] = field(default=(), repr=False)

    def __post_init__(self) -> None:
        if self.distance_m < 0:
            raise ValueError(f"Edge {self.id} has negative distance {self.distance_m}")
        if self.time_s < 0:
            raise ValueError(f"Edge {self.id} has negative time {self.time_s}")

    @property
    def is_run(self) -> bool:
        return self.type == EdgeType.RUN

    @property
    def is_lift(self) -> bool:
        return self.type == EdgeType.LIFT

    @property
    def is_walk(self) -> bool:
        return self.type == EdgeType.WALK

    @property
    def feature_key(self) -> str:
        """Key used to block a whole feature (all edges of one run or lift).

        Walks are blocked individually since they share no feature.
        """
        if self.is_walk or self.feature_id is None:
            return self.id
        return f"{self.type.value}:{self.feature_id}"
