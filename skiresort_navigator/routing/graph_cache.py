"""GraphCache - Explicit, caller-owned cache of built navigation graphs.

Graphs are keyed by ski area ID and versioned by a fingerprint of the
area's runs/lifts plus the build options, so a data change triggers a
rebuild on the next lookup. Cached graphs are frozen and safe to share
between concurrent readers.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from skiresort_navigator.constants import CacheConfig
from skiresort_navigator.generators.graph_builder import BuildOptions, build_navigation_graph
from skiresort_navigator.model.navigation_graph import NavigationGraph
from skiresort_navigator.model.ski_area import SkiAreaDetails

logger = logging.getLogger(__name__)

GraphBuilderFn = Callable[[SkiAreaDetails, Optional[BuildOptions]], NavigationGraph]


@dataclass(frozen=True)
class CacheEntry:
    """A cached graph with its version key and build timestamp."""

    graph: NavigationGraph
    version: tuple
    built_at: float


class GraphCache:
    """Per-ski-area graph cache with explicit invalidation.

    Example:
        cache = GraphCache()
        graph = cache.get(ski_area=area)          # builds once
        graph = cache.get(ski_area=area)          # cached
        cache.invalidate(ski_area_id=area.id)     # next get rebuilds
    """

    def __init__(
        self,
        builder: GraphBuilderFn = build_navigation_graph,
        ttl_s: Optional[float] = CacheConfig.DEFAULT_TTL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._builder = builder
        self.ttl_s = ttl_s
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    @staticmethod
    def version_key(ski_area: SkiAreaDetails, options: Optional[BuildOptions]) -> tuple:
        return (ski_area.fingerprint(), (options or BuildOptions()).cache_key())

    def _is_fresh(self, entry: CacheEntry, version: tuple) -> bool:
        if entry.version != version:
            return False
        return self.ttl_s is None or self._clock() - entry.built_at < self.ttl_s

    def get(self, ski_area: SkiAreaDetails, options: Optional[BuildOptions] = None) -> NavigationGraph:
        """Cached graph for the ski area, rebuilt when data, options or age require it."""
        version = self.version_key(ski_area=ski_area, options=options)
        entry = self._entries.get(ski_area.id)
        if entry is not None and self._is_fresh(entry=entry, version=version):
            return entry.graph
        return self._build(ski_area=ski_area, options=options, version=version)

    def rebuild(self, ski_area: SkiAreaDetails, options: Optional[BuildOptions] = None) -> NavigationGraph:
        """Force a rebuild regardless of the cached version."""
        return self._build(
            ski_area=ski_area, options=options, version=self.version_key(ski_area=ski_area, options=options)
        )

    def _build(self, ski_area: SkiAreaDetails, options: Optional[BuildOptions], version: tuple) -> NavigationGraph:
        graph = self._builder(ski_area, options)
        graph.freeze()
        self._entries[ski_area.id] = CacheEntry(graph=graph, version=version, built_at=self._clock())
        logger.info(f"Cached navigation graph for ski area {ski_area.id}")
        return graph

    def invalidate(self, ski_area_id: Optional[str] = None) -> None:
        """Drop one ski area's graph, or all graphs when ski_area_id is None."""
        if ski_area_id is None:
            self._entries.clear()
        else:
            self._entries.pop(ski_area_id, None)

    def __contains__(self, ski_area_id: str) -> bool:
        return ski_area_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
