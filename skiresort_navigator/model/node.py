"""Node - Routable point in the navigation graph.

Nodes are run/lift endpoints, injected POIs or snapped map points.
They are created during graph construction (or injection into a working
copy) and never change afterwards.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class NodeKind(str, Enum):
    """Role of a node in the network."""

    RUN_START = "run_start"
    RUN_END = "run_end"
    LIFT_START = "lift_start"  # Bottom station
    LIFT_END = "lift_end"  # Top station
    POI = "poi"
    MAP_POINT = "map_point"

    @property
    def is_departure(self) -> bool:
        """Whether a run can be started or a lift boarded here."""
        return self in (NodeKind.RUN_START, NodeKind.LIFT_START)

    @property
    def is_arrival(self) -> bool:
        """Whether this is where a run or lift ride ends."""
        return self in (NodeKind.RUN_END, NodeKind.LIFT_END)


@dataclass(frozen=True)
class Node:
    """A routable point.

    Attributes:
        id: Stable identifier (e.g. "run-42-start", "lift-7-end", "poi-3")
        lat: Latitude in decimal degrees
        lng: Longitude in decimal degrees
        elevation: Meters above sea level, None if the source has no Z value
        kind: Role of the node
        feature_id: ID of the run/lift/POI the node belongs to
        feature_name: Display name of that feature

    Example:
        node = Node(id="run-R1-start", lat=46.0, lng=7.0, elevation=2000.0, kind=NodeKind.RUN_START)
    """

    id: str
    lat: float
    lng: float
    elevation: Optional[float]
    kind: NodeKind
    feature_id: Optional[str] = None
    feature_name: Optional[str] = None

    @property
    def has_elevation(self) -> bool:
        return self.elevation is not None

    @property
    def coordinate(self) -> tuple[float, ...]:
        """GeoJSON position (lng, lat[, elevation])."""
        if self.elevation is None:
            return (self.lng, self.lat)
        return (self.lng, self.lat, self.elevation)

    def elevation_diff_to(self, other: "Node") -> Optional[float]:
        """Signed elevation change from this node to other, None if either is unknown."""
        if self.elevation is None or other.elevation is None:
            return None
        return other.elevation - self.elevation

    def __repr__(self) -> str:
        return f"Node({self.id}, {self.lat:.5f}, {self.lng:.5f}, {self.elevation})"
