"""Route - Result of a navigation query.

A Route is an ordered list of display segments (merged runs, lift rides
and walks) with aggregated totals. Routes are transient: recomputed per
request and never persisted.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from skiresort_navigator.core.geo_calculator import Coordinate
from skiresort_navigator.model.edge import EdgeType


@dataclass(frozen=True)
class RouteSegment:
    """One display unit of a route.

    Attributes:
        type: Travel mode
        name: Feature name (None for unnamed runs and walks)
        label: Display label ("Panorama", "Connection to Panorama", ...)
        difficulty: Run difficulty (runs only)
        lift_type: Lift type (lifts only)
        distance_m: Length in meters
        time_s: Travel time in seconds
        elevation_change_m: Signed elevation change, None when unknown
        coordinates: Concatenated geometry of the merged edges
        feature_id: Run/lift ID when the segment covers a single feature
        edge_ids: Graph edges merged into this segment
    """

    type: EdgeType
    name: Optional[str]
    label: str
    distance_m: float
    time_s: float
    elevation_change_m: Optional[float]
    difficulty: Optional[str] = None
    lift_type: Optional[str] = None
    coordinates: tuple[Coordinate, ...] = field(default=(), repr=False)
    feature_id: Optional[str] = None
    edge_ids: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        data["coordinates"] = [list(c) for c in self.coordinates]
        data["edge_ids"] = list(self.edge_ids)
        return data


@dataclass(frozen=True)
class Route:
    """An optimized route between two graph nodes."""

    segments: tuple[RouteSegment, ...]
    start_node_id: str
    end_node_id: str
    total_distance_m: float
    total_time_s: float
    total_elevation_gain_m: float
    total_elevation_loss_m: float

    @property
    def edge_ids(self) -> tuple[str, ...]:
        """All graph edges of the route in travel order."""
        return tuple(edge_id for segment in self.segments for edge_id in segment.edge_ids)

    @property
    def coordinates(self) -> list[Coordinate]:
        """Full route geometry without duplicated joint positions."""
        coords: list[Coordinate] = []
        for segment in self.segments:
            for coord in segment.coordinates:
                if not coords or coords[-1] != coord:
                    coords.append(coord)
        return coords

    def to_dict(self) -> dict[str, Any]:
        return {
            "segments": [s.to_dict() for s in self.segments],
            "start_node_id": self.start_node_id,
            "end_node_id": self.end_node_id,
            "total_distance_m": self.total_distance_m,
            "total_time_s": self.total_time_s,
            "total_elevation_gain_m": self.total_elevation_gain_m,
            "total_elevation_loss_m": self.total_elevation_loss_m,
        }

    def __repr__(self) -> str:
        return (
            f"Route({self.start_node_id} -> {self.end_node_id}, {len(self.segments)} segments, "
            f"{self.total_distance_m:.0f}m, {self.total_time_s:.0f}s)"
        )
