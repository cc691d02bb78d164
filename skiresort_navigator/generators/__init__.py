"""Graph generation for on-mountain navigation.

- GraphBuilder / build_navigation_graph: Runs and lifts to a routing graph
- RouteFilter / filter_graph: Difficulty and lift-type restricted views
"""

from skiresort_navigator.generators.graph_builder import (
    BuildOptions,
    GraphBuilder,
    build_navigation_graph,
    normalize_difficulty,
    normalize_lift_type,
)
from skiresort_navigator.generators.graph_filter import RouteFilter, filter_graph

__all__ = [
    "BuildOptions",
    "GraphBuilder",
    "build_navigation_graph",
    "normalize_difficulty",
    "normalize_lift_type",
    "RouteFilter",
    "filter_graph",
]
