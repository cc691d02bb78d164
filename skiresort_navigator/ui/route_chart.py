"""RouteChart - Plotly charts for a computed route.

Renders:
- Elevation profile along the route, one trace per segment colored by type
- Sun distribution over the journey as a bar chart
"""

import logging
from typing import Optional

import plotly.graph_objects as go

from skiresort_navigator.constants import ChartConfig, StyleConfig
from skiresort_navigator.core.formatting import format_distance, format_duration
from skiresort_navigator.core.geo_calculator import GeoCalculator
from skiresort_navigator.model.edge import EdgeType
from skiresort_navigator.model.route import Route, RouteSegment
from skiresort_navigator.model.sun_analysis import SunAnalysis

logger = logging.getLogger(__name__)


def _segment_color(segment: RouteSegment) -> str:
    if segment.type == EdgeType.LIFT:
        return StyleConfig.LIFT_COLOR
    if segment.type == EdgeType.WALK:
        return StyleConfig.WALK_COLOR
    return StyleConfig.RUN_COLORS.get(segment.difficulty, StyleConfig.UNRATED_RUN_COLOR)


def profile_points(route: Route) -> list[tuple[float, float, RouteSegment]]:
    """(cumulative distance, elevation, segment) for every coordinate with elevation."""
    points = []
    distance = 0.0
    previous = None
    for segment in route.segments:
        for coord in segment.coordinates:
            if previous is not None:
                distance += GeoCalculator.haversine_distance_m(
                    lat1=previous[1], lon1=previous[0], lat2=coord[1], lon2=coord[0]
                )
            previous = coord
            if len(coord) > 2 and coord[2] is not None:
                points.append((distance, coord[2], segment))
    return points


class RouteChart:
    """Renders route charts using Plotly.

    Example:
        chart = RouteChart()
        st.plotly_chart(chart.render_profile(route=route))
    """

    def __init__(self, width: int = ChartConfig.DEFAULT_WIDTH, height: int = ChartConfig.PROFILE_HEIGHT) -> None:
        self.width = width
        self.height = height

    def render_profile(self, route: Route, title: Optional[str] = None) -> go.Figure:
        """Elevation profile of a route.

        Raises:
            ValueError: If the route has no elevation data
        """
        points = profile_points(route=route)
        if not points:
            raise ValueError("Route must have elevation data to render a profile")

        elevations = [p[1] for p in points]
        min_elev, max_elev = min(elevations), max(elevations)
        padding = max(
            (max_elev - min_elev) * ChartConfig.ELEVATION_PADDING_FACTOR,
            ChartConfig.ELEVATION_PADDING_MIN_M,
        )

        fig = go.Figure()
        for segment in route.segments:
            seg_points = [p for p in points if p[2] is segment]
            if not seg_points:
                continue
            fig.add_trace(
                go.Scatter(
                    x=[p[0] for p in seg_points],
                    y=[p[1] for p in seg_points],
                    mode="lines",
                    line=dict(color=_segment_color(segment=segment), width=3),
                    name=f"{StyleConfig.SEGMENT_ICONS[segment.type.value]} {segment.label}",
                    hovertemplate="Distance: %{x:.0f}m<br>Elevation: %{y:.0f}m<extra></extra>",
                )
            )

        title = title or (
            f"{format_distance(route.total_distance_m)} | {format_duration(route.total_time_s)} | "
            f"+{route.total_elevation_gain_m:.0f}m / -{route.total_elevation_loss_m:.0f}m"
        )
        fig.update_layout(
            title=dict(text=title, x=0.5),
            xaxis=dict(title="Distance (m)", showgrid=True, gridcolor="rgba(200, 200, 200, 0.3)"),
            yaxis=dict(
                title="Elevation (m)",
                showgrid=True,
                gridcolor="rgba(200, 200, 200, 0.3)",
                range=[min_elev - padding, max_elev + padding],
            ),
            showlegend=True,
            width=self.width,
            height=self.height,
            margin=dict(l=50, r=30, t=50, b=50),
            plot_bgcolor="white",
        )
        return fig

    def render_sun_distribution(self, analysis: SunAnalysis) -> go.Figure:
        """Bar chart of sun exposure per time bucket."""
        buckets = analysis.sun_distribution
        fig = go.Figure(
            go.Bar(
                x=[b.time_of_day for b in buckets],
                y=[b.sun_percentage for b in buckets],
                marker_color=[
                    StyleConfig.SUN_COLOR if b.sun_percentage >= 50 else StyleConfig.SHADE_COLOR for b in buckets
                ],
                hovertemplate="%{x}: %{y:.0f}% sun<extra></extra>",
            )
        )
        title = f"Sun: {analysis.sun_percentage:.0f}%"
        if analysis.is_bad_weather:
            title += " (bad weather)"
        elif not analysis.is_reliable:
            title += " (estimate)"
        fig.update_layout(
            title=dict(text=title, x=0.5),
            xaxis=dict(title="Time of day"),
            yaxis=dict(title="Sun (%)", range=[0, 100]),
            showlegend=False,
            width=self.width,
            height=ChartConfig.SUN_HEIGHT,
            margin=dict(l=50, r=30, t=50, b=50),
            plot_bgcolor="white",
        )
        return fig
