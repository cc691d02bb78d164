"""UI components for the Streamlit route viewer.

- NavigationStateMachine / NavigationContext: Viewer workflow
- RouteMapRenderer: Pydeck map of runs, lifts and the route
- RouteChart: Plotly elevation profile and sun distribution
"""

from skiresort_navigator.ui.route_chart import RouteChart
from skiresort_navigator.ui.route_map import RouteMapRenderer, hex_to_rgba
from skiresort_navigator.ui.state_machine import NavigationContext, NavigationStateMachine

__all__ = [
    # State machine
    "NavigationContext",
    "NavigationStateMachine",
    # Rendering
    "RouteMapRenderer",
    "RouteChart",
    "hex_to_rgba",
]
