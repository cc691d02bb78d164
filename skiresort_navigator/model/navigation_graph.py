"""NavigationGraph - Directed routing graph over runs, lifts and walks.

Owns the node and edge tables plus the outgoing adjacency and provides:
- Mutation while building (add_node, add_edge, disable_edge) until frozen
- Copy-on-write working copies for per-request POI / map point injection
- Filtered views (subset adjacency over shared node/edge tables)
- Cached sparse-matrix and coordinate-array forms for scipy/numpy routing

Node and Edge objects are immutable and shared between the base graph,
its working copies and views. A working copy overlays the base tables with
collections.ChainMap and clones only the adjacency map, so the cached base
graph is never touched.
"""

import logging
from collections import ChainMap
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, MutableMapping, Optional

import numpy as np
from scipy.sparse import csr_matrix

from skiresort_navigator.constants import RoutingConfig
from skiresort_navigator.model.edge import Edge, EdgeType
from skiresort_navigator.model.node import Node

logger = logging.getLogger(__name__)


# =============================================================================
# Derived Representations
# =============================================================================


@dataclass(frozen=True)
class RoutingMatrix:
    """Sparse travel-time matrix of a graph.

    Attributes:
        node_ids: Node ID for each matrix index
        index: Matrix index for each node ID
        matrix: CSR matrix, entry (i, j) = fastest edge time from i to j
        pair_edges: Edge ID chosen for each (i, j) pair
    """

    node_ids: tuple[str, ...]
    index: dict[str, int]
    matrix: csr_matrix
    pair_edges: dict[tuple[int, int], str]


@dataclass(frozen=True)
class NodeArrays:
    """Node coordinates as numpy arrays for vectorized nearest-node queries.

    Unknown elevations are stored as NaN.
    """

    node_ids: tuple[str, ...]
    lats: np.ndarray
    lngs: np.ndarray
    elevations: np.ndarray


class NavigationGraph:
    """Directed, time-weighted routing graph of one ski area.

    Example:
        graph = NavigationGraph()
        graph.add_node(node=start)
        graph.add_node(node=end)
        graph.add_edge(edge=run_edge)
        graph.freeze()
        copy = graph.working_copy()  # Safe to extend per request
    """

    def __init__(
        self,
        nodes: Optional[MutableMapping[str, Node]] = None,
        edges: Optional[MutableMapping[str, Edge]] = None,
        adjacency: Optional[dict[str, tuple[str, ...]]] = None,
        unfiltered: Optional["NavigationGraph"] = None,
    ) -> None:
        self.nodes: MutableMapping[str, Node] = nodes if nodes is not None else {}
        self.edges: MutableMapping[str, Edge] = edges if edges is not None else {}
        self.adjacency: dict[str, tuple[str, ...]] = adjacency if adjacency is not None else {}
        self.unfiltered = unfiltered
        self.generation = 0
        self._frozen = False
        self._matrix_cache: Optional[tuple[int, RoutingMatrix]] = None
        self._arrays_cache: Optional[tuple[int, NodeArrays]] = None

    # =========================================================================
    # Mutation
    # =========================================================================

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "NavigationGraph":
        """Make the graph read-only. Returns self for chaining."""
        self._frozen = True
        return self

    def _check_mutable(self) -> None:
        if self._frozen:
            raise ValueError("Graph is read-only; use working_copy() before adding nodes or edges")

    def add_node(self, node: Node) -> None:
        self._check_mutable()
        if node.id in self.nodes:
            raise ValueError(f"Duplicate node ID {node.id}")
        self.nodes[node.id] = node
        self.adjacency.setdefault(node.id, ())
        self.generation += 1

    def add_edge(self, edge: Edge) -> None:
        """Add a directed edge whose endpoints already exist."""
        self._check_mutable()
        if edge.id in self.edges:
            raise ValueError(f"Duplicate edge ID {edge.id}")
        for node_id in (edge.from_node_id, edge.to_node_id):
            if node_id not in self.nodes:
                raise ValueError(f"Edge {edge.id} references unknown node {node_id}")
        self.edges[edge.id] = edge
        self.adjacency[edge.from_node_id] = self.adjacency.get(edge.from_node_id, ()) + (edge.id,)
        self.generation += 1

    def disable_edge(self, edge_id: str) -> None:
        """Remove an edge from routing while keeping it in the edge table.

        Used when a run edge is replaced by two split halves.
        """
        self._check_mutable()
        edge = self.edges[edge_id]
        self.adjacency[edge.from_node_id] = tuple(e for e in self.adjacency[edge.from_node_id] if e != edge_id)
        self.generation += 1

    # =========================================================================
    # Copies and Views
    # =========================================================================

    def working_copy(self) -> "NavigationGraph":
        """Mutable copy-on-write overlay of this graph.

        New nodes/edges land in the overlay; the shared tables stay untouched.
        """
        copy = NavigationGraph(
            nodes=ChainMap({}, self.nodes),
            edges=ChainMap({}, self.edges),
            adjacency=dict(self.adjacency),
            unfiltered=self.unfiltered,
        )
        logger.debug(f"Created working copy of graph with {len(self.nodes)} nodes")
        return copy

    def filtered(self, keep: Callable[[Edge], bool]) -> "NavigationGraph":
        """Read-only view whose adjacency only lists edges accepted by keep.

        Nodes and edge tables are shared; dropped edges stay in the table so
        diagnostics can still name them.
        """
        adjacency = {
            node_id: tuple(edge_id for edge_id in edge_ids if keep(self.edges[edge_id]))
            for node_id, edge_ids in self.adjacency.items()
        }
        view = NavigationGraph(
            nodes=self.nodes,
            edges=self.edges,
            adjacency=adjacency,
            unfiltered=self.unfiltered or self,
        )
        return view.freeze()

    def without_edges(self, edge_ids: Iterable[str]) -> "NavigationGraph":
        """Read-only view with the given edges removed from routing."""
        excluded = frozenset(edge_ids)
        view = self.filtered(keep=lambda edge: edge.id not in excluded)
        # Exclusion views are routing scratch space, not user-facing filters
        view.unfiltered = self.unfiltered
        return view

    # =========================================================================
    # Query Operations
    # =========================================================================

    def get_node(self, node_id: str) -> Optional[Node]:
        return self.nodes.get(node_id)

    def outgoing_edges(self, node_id: str) -> list[Edge]:
        return [self.edges[edge_id] for edge_id in self.adjacency.get(node_id, ())]

    def active_edges(self) -> Iterator[Edge]:
        """All edges that are currently routable."""
        for edge_ids in self.adjacency.values():
            for edge_id in edge_ids:
                yield self.edges[edge_id]

    def has_edge_between(self, from_node_id: str, to_node_id: str) -> bool:
        return any(edge.to_node_id == to_node_id for edge in self.outgoing_edges(node_id=from_node_id))

    def edges_of_feature(self, feature_key: str) -> list[Edge]:
        return [edge for edge in self.edges.values() if edge.feature_key == feature_key]

    def get_stats(self) -> dict[str, int]:
        counts = {edge_type.value: 0 for edge_type in EdgeType}
        for edge in self.active_edges():
            counts[edge.type.value] += 1
        return {"nodes": len(self.nodes), "edges": sum(counts.values()), **counts}

    def validate(self) -> None:
        """Check structural invariants; raises ValueError on the first violation."""
        for edge in self.edges.values():
            if edge.from_node_id not in self.nodes or edge.to_node_id not in self.nodes:
                raise ValueError(f"Edge {edge.id} references a missing node")
        for node_id, edge_ids in self.adjacency.items():
            for edge_id in edge_ids:
                if self.edges[edge_id].from_node_id != node_id:
                    raise ValueError(f"Edge {edge_id} listed under wrong source node {node_id}")

    # =========================================================================
    # Cached Numeric Forms
    # =========================================================================

    def routing_matrix(self) -> RoutingMatrix:
        """Sparse time matrix for scipy.sparse.csgraph, cached per generation.

        Parallel edges collapse to the fastest one; on equal time the edge
        listed first in the adjacency wins. Zero times are clamped to
        RoutingConfig.MIN_EDGE_COST_S because CSR matrices drop explicit zeros.
        """
        if self._matrix_cache is not None and self._matrix_cache[0] == self.generation:
            return self._matrix_cache[1]

        node_ids = tuple(self.nodes.keys())
        index = {node_id: i for i, node_id in enumerate(node_ids)}
        best: dict[tuple[int, int], tuple[float, str]] = {}
        for node_id in node_ids:
            i = index[node_id]
            for edge in self.outgoing_edges(node_id=node_id):
                j = index[edge.to_node_id]
                if i == j:
                    continue
                cost = max(edge.time_s, RoutingConfig.MIN_EDGE_COST_S)
                current = best.get((i, j))
                if current is None or cost < current[0]:
                    best[(i, j)] = (cost, edge.id)

        rows = [pair[0] for pair in best]
        cols = [pair[1] for pair in best]
        data = [value[0] for value in best.values()]
        matrix = csr_matrix((data, (rows, cols)), shape=(len(node_ids), len(node_ids)), dtype=np.float64)

        compiled = RoutingMatrix(
            node_ids=node_ids,
            index=index,
            matrix=matrix,
            pair_edges={pair: value[1] for pair, value in best.items()},
        )
        self._matrix_cache = (self.generation, compiled)
        return compiled

    def node_arrays(self) -> NodeArrays:
        """Node coordinates as arrays, cached per generation."""
        if self._arrays_cache is not None and self._arrays_cache[0] == self.generation:
            return self._arrays_cache[1]

        nodes = list(self.nodes.values())
        arrays = NodeArrays(
            node_ids=tuple(node.id for node in nodes),
            lats=np.array([node.lat for node in nodes], dtype=np.float64),
            lngs=np.array([node.lng for node in nodes], dtype=np.float64),
            elevations=np.array(
                [node.elevation if node.elevation is not None else np.nan for node in nodes],
                dtype=np.float64,
            ),
        )
        self._arrays_cache = (self.generation, arrays)
        return arrays

    def __repr__(self) -> str:
        stats = self.get_stats()
        return f"NavigationGraph(nodes={stats['nodes']}, edges={stats['edges']}, frozen={self._frozen})"
