"""Data model classes for on-mountain navigation.

Separates input data (what the resort looks like) from routing topology:
- SkiAreaDetails, RunData, LiftData, SubRegion, POIData, HourlyWeather: Inputs
- Node / Edge: Immutable routing atoms
- NavigationGraph: Directed graph with working copies and filtered views
- Route / RouteSegment: Optimized query results
- RouteDiagnostics / RoutingHint: Explanations when no route exists
- SunAnalysis: Sun exposure of a route
- ResortStatus / FeatureStatus: Live lift and run status
"""

from skiresort_navigator.model.diagnostics import (
    BlockedByFilterHint,
    DifferentStartHint,
    ElevationGapHint,
    MissingNodeHint,
    RegionMismatchHint,
    RelaxFiltersHint,
    RouteDiagnostics,
    RoutingHint,
    TooFarToWalkHint,
    UnreachableReason,
    WalkingGapHint,
)
from skiresort_navigator.model.edge import Edge, EdgeType
from skiresort_navigator.model.navigation_graph import NavigationGraph, NodeArrays, RoutingMatrix
from skiresort_navigator.model.node import Node, NodeKind
from skiresort_navigator.model.resort_status import FeatureStatus, ResortStatus
from skiresort_navigator.model.route import Route, RouteSegment
from skiresort_navigator.model.ski_area import (
    HourlyWeather,
    LiftData,
    POIData,
    RegionBounds,
    RunData,
    SkiAreaDetails,
    SubRegion,
)
from skiresort_navigator.model.sun_analysis import SunAnalysis, SunDistributionBucket

__all__ = [
    # Inputs
    "SkiAreaDetails",
    "RunData",
    "LiftData",
    "SubRegion",
    "RegionBounds",
    "POIData",
    "HourlyWeather",
    # Graph
    "Node",
    "NodeKind",
    "Edge",
    "EdgeType",
    "NavigationGraph",
    "RoutingMatrix",
    "NodeArrays",
    # Results
    "Route",
    "RouteSegment",
    "RouteDiagnostics",
    "UnreachableReason",
    "RoutingHint",
    "MissingNodeHint",
    "BlockedByFilterHint",
    "TooFarToWalkHint",
    "RegionMismatchHint",
    "ElevationGapHint",
    "WalkingGapHint",
    "DifferentStartHint",
    "RelaxFiltersHint",
    "SunAnalysis",
    "SunDistributionBucket",
    # Status
    "ResortStatus",
    "FeatureStatus",
]
