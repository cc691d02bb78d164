"""Route Optimizer - Turns a raw edge path into a readable route.

Processing steps (each idempotent, so optimizing an optimized route is a no-op):
1. Consecutive walks merge into one walk
2. Walks shorter than OptimizerConfig.MIN_WALK_SEGMENT_M fold into the next
   segment (the previous one at the end of the route)
3. Consecutive segments of the same type and name merge; unnamed runs
   additionally need the same difficulty
4. Unnamed segments are labeled after the next named feature
   ("Connection to Panorama", "Walk to Gondola Express")

Totals are sums over segments, so elevation gain minus loss telescopes to
the elevation difference between the first and last node.
"""

import logging
from dataclasses import replace
from typing import Optional, Sequence, Union

from skiresort_navigator.constants import OptimizerConfig
from skiresort_navigator.model.edge import Edge, EdgeType
from skiresort_navigator.model.route import Route, RouteSegment
from skiresort_navigator.model.ski_area import SkiAreaDetails

logger = logging.getLogger(__name__)


def _add_optional(a: Optional[float], b: Optional[float]) -> Optional[float]:
    if a is None and b is None:
        return None
    return (a or 0.0) + (b or 0.0)


def _join_coordinates(first: tuple, second: tuple) -> tuple:
    if first and second and first[-1] == second[0]:
        return first + second[1:]
    return first + second


def _segment_from_edge(edge: Edge, ski_area: Optional[SkiAreaDetails]) -> RouteSegment:
    name = edge.name
    if name is None and ski_area is not None and not edge.is_walk:
        name = ski_area.feature_name(feature_id=edge.feature_id)
    return RouteSegment(
        type=edge.type,
        name=name,
        label=name or "",
        distance_m=edge.distance_m,
        time_s=edge.time_s,
        elevation_change_m=edge.elevation_change_m,
        difficulty=edge.difficulty,
        lift_type=edge.lift_type,
        coordinates=edge.coordinates,
        feature_id=edge.feature_id,
        edge_ids=(edge.id,),
    )


def _absorb(base: RouteSegment, other: RouteSegment, other_first: bool) -> RouteSegment:
    """Extend base with other's travel, keeping base's identity (type, name, ...)."""
    first, second = (other, base) if other_first else (base, other)
    return replace(
        base,
        distance_m=base.distance_m + other.distance_m,
        time_s=base.time_s + other.time_s,
        elevation_change_m=_add_optional(base.elevation_change_m, other.elevation_change_m),
        coordinates=_join_coordinates(first.coordinates, second.coordinates),
        edge_ids=first.edge_ids + second.edge_ids,
        feature_id=base.feature_id if base.feature_id == other.feature_id or other.type == EdgeType.WALK else None,
    )


# =============================================================================
# Optimization Steps
# =============================================================================


def _merge_walks(segments: list[RouteSegment]) -> list[RouteSegment]:
    merged: list[RouteSegment] = []
    for segment in segments:
        if merged and merged[-1].type == EdgeType.WALK and segment.type == EdgeType.WALK:
            previous = merged[-1]
            combined = _absorb(base=previous, other=segment, other_first=False)
            merged[-1] = replace(combined, name=segment.name or previous.name, feature_id=None)
        else:
            merged.append(segment)
    return merged


def _fold_short_walks(segments: list[RouteSegment]) -> list[RouteSegment]:
    if len(segments) < 2:
        return segments

    result: list[RouteSegment] = []
    pending: Optional[RouteSegment] = None
    for segment in segments:
        if segment.type == EdgeType.WALK and segment.distance_m < OptimizerConfig.MIN_WALK_SEGMENT_M:
            pending = segment if pending is None else _absorb(base=pending, other=segment, other_first=False)
            continue
        if pending is not None:
            segment = _absorb(base=segment, other=pending, other_first=True)
            pending = None
        result.append(segment)

    if pending is not None:
        if result:
            result[-1] = _absorb(base=result[-1], other=pending, other_first=False)
        else:
            result.append(pending)
    return result


def _can_merge(a: RouteSegment, b: RouteSegment) -> bool:
    if a.type != b.type or a.type == EdgeType.WALK:
        return False
    if a.name is not None or b.name is not None:
        return a.name == b.name
    return a.type == EdgeType.RUN and a.difficulty == b.difficulty


def _merge_same_features(segments: list[RouteSegment]) -> list[RouteSegment]:
    merged: list[RouteSegment] = []
    for segment in segments:
        if merged and _can_merge(a=merged[-1], b=segment):
            merged[-1] = _absorb(base=merged[-1], other=segment, other_first=False)
        else:
            merged.append(segment)
    return merged


def _label_segments(segments: list[RouteSegment]) -> list[RouteSegment]:
    labeled: list[RouteSegment] = []
    for i, segment in enumerate(segments):
        if segment.name:
            labeled.append(replace(segment, label=segment.name))
            continue

        target = next((s.name for s in segments[i + 1 :] if s.name), None) or "destination"
        prefix = {EdgeType.WALK: "Walk to", EdgeType.LIFT: "Lift to"}.get(segment.type, "Connection to")
        labeled.append(replace(segment, label=f"{prefix} {target}"))
    return labeled


# =============================================================================
# Public API
# =============================================================================


def build_route(segments: Sequence[RouteSegment], start_node_id: str, end_node_id: str) -> Route:
    """Assemble a Route with totals summed over its segments."""
    gain = sum(s.elevation_change_m for s in segments if s.elevation_change_m and s.elevation_change_m > 0)
    loss = sum(-s.elevation_change_m for s in segments if s.elevation_change_m and s.elevation_change_m < 0)
    return Route(
        segments=tuple(segments),
        start_node_id=start_node_id,
        end_node_id=end_node_id,
        total_distance_m=sum(s.distance_m for s in segments),
        total_time_s=sum(s.time_s for s in segments),
        total_elevation_gain_m=gain,
        total_elevation_loss_m=loss,
    )


def optimize_route(path: Union[Sequence[Edge], Route], ski_area: Optional[SkiAreaDetails] = None) -> Route:
    """Merge a raw edge path (or re-optimize a route) into display segments.

    Args:
        path: Edges in travel order, or an already optimized Route
        ski_area: Optional ski area used to resolve names missing on edges

    Returns:
        Route with merged, labeled segments and totals.
    """
    if isinstance(path, Route):
        segments = list(path.segments)
        start_node_id, end_node_id = path.start_node_id, path.end_node_id
    else:
        if not path:
            raise ValueError("Cannot optimize an empty path")
        segments = [_segment_from_edge(edge=edge, ski_area=ski_area) for edge in path]
        start_node_id, end_node_id = path[0].from_node_id, path[-1].to_node_id

    raw_count = len(segments)
    segments = _merge_walks(segments=segments)
    segments = _fold_short_walks(segments=segments)
    segments = _merge_same_features(segments=segments)
    segments = _label_segments(segments=segments)

    logger.debug(f"Optimized route {start_node_id} -> {end_node_id}: {raw_count} -> {len(segments)} segments")
    return build_route(segments=segments, start_node_id=start_node_id, end_node_id=end_node_id)
