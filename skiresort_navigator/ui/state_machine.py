"""State machine for the route viewer UI.

Uses python-statemachine with the context object as model:
- Clear state definitions
- before_* hooks that store transition payloads in the context
- Entry hooks that reset stale results

States:
    IDLE: Nothing selected
    ORIGIN_SELECTED: Origin chosen, waiting for a destination
    ROUTE_SHOWN: A route is displayed
    ROUTE_FAILED: Destination unreachable, diagnostics displayed

Transitions:
    IDLE -> ORIGIN_SELECTED: select_origin
    ORIGIN_SELECTED -> ROUTE_SHOWN: show_route
    ORIGIN_SELECTED -> ROUTE_FAILED: fail_route
    ROUTE_SHOWN / ROUTE_FAILED -> ORIGIN_SELECTED: select_origin (start over)
    any -> IDLE: start_over
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from skiresort_navigator.model.diagnostics import RouteDiagnostics
from skiresort_navigator.model.route import Route
from skiresort_navigator.model.sun_analysis import SunAnalysis

logger = logging.getLogger(__name__)


@dataclass
class SelectionContext:
    """Chosen origin and destination nodes."""

    origin_node_id: str | None = None
    destination_node_id: str | None = None

    def clear(self) -> None:
        self.origin_node_id = None
        self.destination_node_id = None


@dataclass
class ResultContext:
    """Last routing result."""

    route: Route | None = None
    diagnostics: RouteDiagnostics | None = None
    sun_analysis: SunAnalysis | None = None

    def clear(self) -> None:
        self.route = None
        self.diagnostics = None
        self.sun_analysis = None


@dataclass
class NavigationContext:
    """Shared model for NavigationStateMachine.

    The 'state' field is managed by python-statemachine.
    """

    state: str | None = None
    selection: SelectionContext = field(default_factory=SelectionContext)
    result: ResultContext = field(default_factory=ResultContext)
    message: str = ""

    def __repr__(self) -> str:
        return (
            f"NavigationContext(state={self.state}, origin={self.selection.origin_node_id}, "
            f"destination={self.selection.destination_node_id}, has_route={self.result.route is not None})"
        )


class NavigationStateMachine(StateMachine):
    """Route viewer workflow. See module docstring for transitions."""

    idle = State("Idle", initial=True)
    origin_selected = State("OriginSelected")
    route_shown = State("RouteShown")
    route_failed = State("RouteFailed")

    select_origin = idle.to(origin_selected) | route_shown.to(origin_selected) | route_failed.to(origin_selected)
    show_route = origin_selected.to(route_shown)
    fail_route = origin_selected.to(route_failed)
    start_over = origin_selected.to(idle) | route_shown.to(idle) | route_failed.to(idle)

    @property
    def is_idle(self) -> bool:
        return self.idle.is_active

    @property
    def has_route(self) -> bool:
        return self.route_shown.is_active

    # ==========================================================================
    # Entry Hooks
    # ==========================================================================

    def on_enter_idle(self) -> None:
        self.context.selection.clear()
        self.context.result.clear()
        self.context.message = ""

    def on_enter_origin_selected(self) -> None:
        self.context.result.clear()
        self.context.selection.destination_node_id = None

    # ==========================================================================
    # Transition Actions (before_* hooks)
    # ==========================================================================

    def before_select_origin(self, node_id: str, label: str | None = None) -> None:
        self.context.selection.origin_node_id = node_id
        self.context.message = f"Start: {label or node_id}. Now pick a destination."

    def before_show_route(
        self,
        destination_node_id: str,
        route: Route,
        sun_analysis: SunAnalysis | None = None,
    ) -> None:
        self.context.selection.destination_node_id = destination_node_id
        self.context.result.route = route
        self.context.result.sun_analysis = sun_analysis
        self.context.message = ""

    def before_fail_route(self, destination_node_id: str, diagnostics: RouteDiagnostics | None) -> None:
        self.context.selection.destination_node_id = destination_node_id
        self.context.result.diagnostics = diagnostics
        self.context.message = "No route found."

    # ==========================================================================
    # Initialization
    # ==========================================================================

    def __init__(self, context: NavigationContext | None = None, start_value: str | None = None) -> None:
        """Initialize with model pattern.

        Args:
            context: Shared context/model (creates new if None)
            start_value: Optional initial state value (for restoring state)
        """
        model = context or NavigationContext()
        super().__init__(model=model, start_value=start_value)

    @property
    def context(self) -> NavigationContext:
        return self.model

    def get_state_name(self) -> str:
        return self.current_state.name

    def try_transition(self, event: str, **kwargs: Any) -> bool:
        """Attempt a transition, returning success/failure."""
        try:
            self.send(event, **kwargs)
        except TransitionNotAllowed:
            logger.warning(f"Transition '{event}' not allowed from {self.get_state_name()}")
            return False
        logger.info(f"[STATE] {event} -> {self.get_state_name()}")
        return True

    def __repr__(self) -> str:
        return f"NavigationStateMachine(state={self.get_state_name()}, model={self.context!r})"
