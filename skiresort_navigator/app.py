"""Ski Resort Navigator - Interactive route viewer.

Load a ski area JSON export, pick a start and a destination, and get the
fastest route down with a map, an elevation profile and the sun exposure
of the journey.

Run: streamlit run skiresort_navigator/app.py
"""

import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Optional

import streamlit as st

from skiresort_navigator.constants import AppConfig, SpeedConfig
from skiresort_navigator.core.formatting import format_distance, format_duration
from skiresort_navigator.generators.graph_filter import RouteFilter, filter_graph
from skiresort_navigator.model.navigation_graph import NavigationGraph
from skiresort_navigator.model.ski_area import SkiAreaDetails
from skiresort_navigator.routing.graph_cache import GraphCache
from skiresort_navigator.routing.path_finder import Destination, find_route_with_diagnostics, get_destinations
from skiresort_navigator.routing.sun_exposure import analyze_route_sun_exposure
from skiresort_navigator.ui import NavigationContext, NavigationStateMachine, RouteChart, RouteMapRenderer

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# =============================================================================
# SESSION STATE
# =============================================================================


def init_session_state() -> None:
    """Initialize graph cache and state machine."""
    if "graph_cache" not in st.session_state:
        st.session_state.graph_cache = GraphCache()
    if "state_machine" not in st.session_state:
        context = NavigationContext()
        st.session_state.state_machine = NavigationStateMachine(context=context)
        st.session_state.context = context


def reset_ui_state() -> None:
    """Fresh state machine after an error; the graph cache is kept."""
    logger.info("Resetting UI state due to error recovery")
    context = NavigationContext()
    st.session_state.state_machine = NavigationStateMachine(context=context)
    st.session_state.context = context


def load_ski_area() -> Optional[SkiAreaDetails]:
    uploaded = st.sidebar.file_uploader("Ski area JSON", type=["json"])
    if uploaded is None:
        return st.session_state.get("ski_area")
    ski_area = SkiAreaDetails.from_dict(json.loads(uploaded.getvalue()))
    if st.session_state.get("ski_area") is None or st.session_state.ski_area.id != ski_area.id:
        reset_ui_state()
    st.session_state.ski_area = ski_area
    return ski_area


# =============================================================================
# SIDEBAR
# =============================================================================


def _destination_label(destination: Destination) -> str:
    detail = destination.difficulty or destination.lift_type or ""
    return f"{destination.name} ({destination.type}{', ' + detail if detail else ''})"


def render_filters() -> RouteFilter:
    st.sidebar.subheader("Route options")
    difficulties = st.sidebar.multiselect(
        "Run difficulties", options=SpeedConfig.DIFFICULTIES, default=SpeedConfig.DIFFICULTIES
    )
    lift_types = st.sidebar.multiselect("Lift types", options=SpeedConfig.LIFT_TYPES, default=SpeedConfig.LIFT_TYPES)
    include_unrated = st.sidebar.checkbox("Include unrated runs", value=True)
    return RouteFilter.create(difficulties=difficulties, lift_types=lift_types, include_unrated_runs=include_unrated)


def render_route_controls(
    sm: NavigationStateMachine, graph: NavigationGraph, ski_area: SkiAreaDetails, route_filter: RouteFilter
) -> None:
    destinations = get_destinations(graph=graph)
    if not destinations:
        st.warning("This ski area has no routable runs or lifts.")
        return
    labels = {_destination_label(destination=d): d for d in destinations}

    origin_label = st.selectbox("Start", options=list(labels))
    if st.button("Set start"):
        origin = labels[origin_label]
        sm.try_transition("select_origin", node_id=origin.node_id, label=origin.name)

    if sm.origin_selected.is_active:
        destination_label = st.selectbox("Destination", options=list(labels))
        if st.button("Find route", type="primary"):
            destination = labels[destination_label]
            result = find_route_with_diagnostics(
                graph=filter_graph(graph=graph, route_filter=route_filter),
                from_node_id=sm.context.selection.origin_node_id,
                to_node_id=destination.node_id,
                ski_area=ski_area,
            )
            if result.route is None:
                sm.try_transition("fail_route", destination_node_id=destination.node_id, diagnostics=result.diagnostics)
            else:
                analysis = analyze_route_sun_exposure(
                    route=result.route, start_time=datetime.now(timezone.utc), ski_area=ski_area
                )
                sm.try_transition(
                    "show_route", destination_node_id=destination.node_id, route=result.route, sun_analysis=analysis
                )

    if not sm.is_idle and st.button("Start over"):
        sm.try_transition("start_over")


# =============================================================================
# RESULTS
# =============================================================================


def render_result(ctx: NavigationContext) -> None:
    route = ctx.result.route
    if route is not None:
        st.metric("Travel time", format_duration(route.total_time_s))
        st.caption(
            f"{format_distance(route.total_distance_m)} | +{route.total_elevation_gain_m:.0f}m "
            f"/ -{route.total_elevation_loss_m:.0f}m"
        )
        for segment in route.segments:
            st.write(f"- {segment.label}: {format_distance(segment.distance_m)}, {format_duration(segment.time_s)}")
    elif ctx.result.diagnostics is not None:
        st.error("No route found")
        for suggestion in ctx.result.diagnostics.suggestions:
            st.write(f"- {suggestion}")
    elif ctx.message:
        st.info(ctx.message)


def render_charts(ctx: NavigationContext) -> None:
    route = ctx.result.route
    if route is None:
        return
    chart = RouteChart()
    try:
        st.plotly_chart(chart.render_profile(route=route), key="route_profile")
    except ValueError:
        st.caption("No elevation data for this route.")
    if ctx.result.sun_analysis is not None and ctx.result.sun_analysis.sun_distribution:
        st.plotly_chart(chart.render_sun_distribution(analysis=ctx.result.sun_analysis), key="route_sun")


# =============================================================================
# MAIN
# =============================================================================


def main() -> None:
    """Application entry point."""
    st.set_page_config(page_title=AppConfig.TITLE, page_icon=AppConfig.ICON, layout=AppConfig.LAYOUT)
    init_session_state()
    st.title(AppConfig.TITLE)

    ski_area = load_ski_area()
    if ski_area is None:
        st.info("Upload a ski area JSON file to start.")
        return

    try:
        _run_app_ui(ski_area=ski_area)
    except Exception as e:
        error_msg = f"{type(e).__name__}: {e}"
        logger.error(f"[UI] UI error caught: {error_msg}\n{traceback.format_exc()}")
        st.error(f"Something went wrong: {error_msg}")
        reset_ui_state()
        if st.button("Reset and Continue", type="primary"):
            st.rerun()


def _run_app_ui(ski_area: SkiAreaDetails) -> None:
    sm: NavigationStateMachine = st.session_state.state_machine
    ctx: NavigationContext = st.session_state.context
    graph = st.session_state.graph_cache.get(ski_area=ski_area)
    logger.info(f"[MAIN] Render cycle: state={sm.get_state_name()}, graph={graph!r}")

    route_filter = render_filters()
    col_map, col_ctrl = st.columns([3, 1])
    with col_ctrl:
        render_route_controls(sm=sm, graph=graph, ski_area=ski_area, route_filter=route_filter)
        render_result(ctx=ctx)
    with col_map:
        renderer = RouteMapRenderer(graph=graph, center_lat=ski_area.latitude, center_lng=ski_area.longitude)
        origin = graph.get_node(ctx.selection.origin_node_id) if ctx.selection.origin_node_id else None
        destination = (
            graph.get_node(ctx.selection.destination_node_id) if ctx.selection.destination_node_id else None
        )
        st.pydeck_chart(renderer.render(route=ctx.result.route, origin=origin, destination=destination))
    render_charts(ctx=ctx)


if __name__ == "__main__":
    main()
