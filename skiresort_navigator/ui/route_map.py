"""RouteMapRenderer - Pydeck map of the ski area and the current route.

Layers (back to front):
- Runs as PathLayer, colored by difficulty
- Lifts as PathLayer
- Route overlay, thicker and highlighted
- Origin/destination markers as ScatterplotLayer

Pydeck conventions: [lng, lat] coordinate order, RGBA color lists.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import pydeck as pdk

from skiresort_navigator.constants import MapConfig, StyleConfig
from skiresort_navigator.model.edge import Edge, EdgeType
from skiresort_navigator.model.navigation_graph import NavigationGraph
from skiresort_navigator.model.node import Node
from skiresort_navigator.model.route import Route

logger = logging.getLogger(__name__)


def hex_to_rgba(hex_color: str, alpha: int = 255) -> list[int]:
    """Convert "#RRGGBB" to a pydeck [R, G, B, A] list."""
    value = hex_color.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected #RRGGBB color, got {hex_color!r}")
    return [int(value[i : i + 2], 16) for i in (0, 2, 4)] + [alpha]


def run_color(difficulty: Optional[str]) -> str:
    return StyleConfig.RUN_COLORS.get(difficulty, StyleConfig.UNRATED_RUN_COLOR)


@dataclass
class LayerCollection:
    """Pydeck layers with fixed z-ordering."""

    runs: list[pdk.Layer] = field(default_factory=list)
    lifts: list[pdk.Layer] = field(default_factory=list)
    route: list[pdk.Layer] = field(default_factory=list)
    markers: list[pdk.Layer] = field(default_factory=list)

    def get_ordered_layers(self) -> list[pdk.Layer]:
        return self.runs + self.lifts + self.route + self.markers


class RouteMapRenderer:
    """Renders a navigation graph and an optional route.

    Example:
        renderer = RouteMapRenderer(graph=graph, center_lat=area.latitude, center_lng=area.longitude)
        st.pydeck_chart(renderer.render(route=route))
    """

    def __init__(
        self,
        graph: NavigationGraph,
        center_lat: float,
        center_lng: float,
        zoom: int = MapConfig.DEFAULT_ZOOM,
    ) -> None:
        self.graph = graph
        self.center_lat = center_lat
        self.center_lng = center_lng
        self.zoom = zoom

    def get_view_state(self, route: Optional[Route] = None) -> pdk.ViewState:
        """View centered on the route if given, otherwise on the ski area."""
        if route is not None and route.coordinates:
            lngs = [c[0] for c in route.coordinates]
            lats = [c[1] for c in route.coordinates]
            return pdk.ViewState(
                latitude=(min(lats) + max(lats)) / 2,
                longitude=(min(lngs) + max(lngs)) / 2,
                zoom=MapConfig.ROUTE_ZOOM,
            )
        return pdk.ViewState(latitude=self.center_lat, longitude=self.center_lng, zoom=self.zoom)

    def render(
        self,
        route: Optional[Route] = None,
        origin: Optional[Node] = None,
        destination: Optional[Node] = None,
    ) -> pdk.Deck:
        layers = LayerCollection()
        layers.runs.append(self._create_feature_layer(edge_type=EdgeType.RUN))
        layers.lifts.append(self._create_feature_layer(edge_type=EdgeType.LIFT))
        if route is not None:
            layers.route.append(self._create_route_layer(route=route))
        markers = [node for node in (origin, destination) if node is not None]
        if markers:
            layers.markers.append(self._create_marker_layer(nodes=markers))

        return pdk.Deck(
            map_style=None,
            initial_view_state=self.get_view_state(route=route),
            layers=layers.get_ordered_layers(),
            tooltip={"html": "<b>{name}</b>"},
        )

    # =========================================================================
    # LAYERS
    # =========================================================================

    @staticmethod
    def _edge_path(edge: Edge) -> list[list[float]]:
        return [[c[0], c[1]] for c in edge.coordinates]

    def feature_data(self, edge_type: EdgeType) -> list[dict]:
        """Layer rows for all active run or lift edges."""
        rows = []
        for edge in self.graph.active_edges():
            if edge.type != edge_type or len(edge.coordinates) < 2:
                continue
            color = run_color(edge.difficulty) if edge.is_run else StyleConfig.LIFT_COLOR
            rows.append(
                {
                    "id": edge.id,
                    "name": edge.name or edge_type.value.capitalize(),
                    "path": self._edge_path(edge=edge),
                    "color": hex_to_rgba(hex_color=color, alpha=200),
                }
            )
        return rows

    def _create_feature_layer(self, edge_type: EdgeType) -> pdk.Layer:
        return pdk.Layer(
            "PathLayer",
            self.feature_data(edge_type=edge_type),
            get_path="path",
            get_color="color",
            get_width=4 if edge_type == EdgeType.RUN else 3,
            width_min_pixels=2,
            pickable=True,
            id=f"{edge_type.value}s",
        )

    @staticmethod
    def route_data(route: Route) -> list[dict]:
        """Layer rows for each route segment."""
        rows = []
        for segment in route.segments:
            if len(segment.coordinates) < 2:
                continue
            color = StyleConfig.WALK_COLOR if segment.type == EdgeType.WALK else StyleConfig.ROUTE_COLOR
            rows.append(
                {
                    "name": segment.label,
                    "path": [[c[0], c[1]] for c in segment.coordinates],
                    "color": hex_to_rgba(hex_color=color),
                }
            )
        return rows

    def _create_route_layer(self, route: Route) -> pdk.Layer:
        return pdk.Layer(
            "PathLayer",
            self.route_data(route=route),
            get_path="path",
            get_color="color",
            get_width=10,
            width_min_pixels=5,
            pickable=True,
            id="route",
        )

    @staticmethod
    def _create_marker_layer(nodes: list[Node]) -> pdk.Layer:
        data = [
            {"name": node.feature_name or node.id, "position": [node.lng, node.lat]}
            for node in nodes
        ]
        return pdk.Layer(
            "ScatterplotLayer",
            data,
            get_position="position",
            get_radius=30,
            get_fill_color=[255, 255, 255, 230],
            get_line_color=[0, 0, 0, 255],
            stroked=True,
            line_width_min_pixels=2,
            pickable=True,
            id="markers",
        )
