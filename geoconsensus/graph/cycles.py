"""
Cycle detection and acyclic-orientation counting.

Detection is an iterative depth-first traversal that keeps the current path
(the recursion stack) as a set; a neighbor already on the path, other than
the vertex we arrived from, closes a cycle. Traversal uses the graph's
adjacency index, so a full pass is O(V + E).

Counting acyclic orientations is exponential in the edge count. Exhaustive
enumeration is capped by MAX_EXHAUSTIVE_EDGES and refuses larger graphs up
front; graphs above MAX_EXHAUSTIVE_VERTICES are estimated by sampling.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from geoconsensus.errors import InputError, SizeLimitExceeded
from geoconsensus.graph.structures import Graph, Vertex

logger = logging.getLogger(__name__)

MAX_EXHAUSTIVE_VERTICES = 10
MAX_EXHAUSTIVE_EDGES = 20
MAX_SIMPLE_CYCLE_VERTICES = 20
DEFAULT_SAMPLE_SIZE = 1000


@dataclass
class CycleDetectionResult:
    """Cycles found by a DFS pass plus the acyclic-orientation count."""
    has_cycle: bool
    cycles: List[List[Vertex]] = field(default_factory=list)
    acyclic_orientations: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_cycle": self.has_cycle,
            "cycles": [list(c) for c in self.cycles],
            "acyclic_orientations": self.acyclic_orientations,
        }


def _dfs_cycles(graph: Graph, stop_at_first: bool) -> List[List[Vertex]]:
    visited = set()
    cycles: List[List[Vertex]] = []

    for root in graph.vertices:
        if root in visited:
            continue
        visited.add(root)
        path: List[Vertex] = [root]
        on_path = {root}
        # Frames are (vertex, parent, next neighbor position)
        stack: List[Tuple[Vertex, Optional[Vertex], int]] = [(root, None, 0)]

        while stack:
            vertex, parent, pos = stack[-1]
            neighbors = graph.adjacent(vertex)
            if pos == len(neighbors):
                stack.pop()
                path.pop()
                on_path.discard(vertex)
                continue

            stack[-1] = (vertex, parent, pos + 1)
            nxt = neighbors[pos]
            if nxt == parent:
                continue
            if nxt in on_path:
                cycles.append(path[path.index(nxt):])
                if stop_at_first:
                    return cycles
            elif nxt not in visited:
                visited.add(nxt)
                on_path.add(nxt)
                path.append(nxt)
                stack.append((nxt, vertex, 0))

    return cycles


def has_cycle(graph: Graph) -> bool:
    """True if the undirected graph contains any cycle."""
    return bool(_dfs_cycles(graph, stop_at_first=True))


def exhaustive_count_feasible(graph: Graph) -> bool:
    """True if the graph is within both exhaustive-enumeration ceilings."""
    return (
        graph.vertex_count <= MAX_EXHAUSTIVE_VERTICES
        and graph.edge_count <= MAX_EXHAUSTIVE_EDGES
    )


def detect_cycles(
    graph: Graph,
    count_orientations: Optional[bool] = None,
) -> CycleDetectionResult:
    """
    Report the cycles closed by DFS back edges.

    Each back edge yields one cycle, so the list is a cycle basis of the
    graph, not every simple cycle (see find_all_simple_cycles).

    By default the acyclic-orientation count is attached only when the
    graph is small enough to enumerate exhaustively; pass
    count_orientations to force it on or off.
    """
    cycles = _dfs_cycles(graph, stop_at_first=False)
    if count_orientations is None:
        count_orientations = exhaustive_count_feasible(graph)
    orientations = count_acyclic_orientations(graph) if count_orientations else None
    return CycleDetectionResult(
        has_cycle=bool(cycles),
        cycles=cycles,
        acyclic_orientations=orientations,
    )


def find_all_simple_cycles(
    graph: Graph,
    max_vertices: int = MAX_SIMPLE_CYCLE_VERTICES,
) -> List[List[Vertex]]:
    """
    Every simple cycle of length >= 3, each listed exactly once.

    A cycle is reported starting from its lowest-indexed vertex, in the
    direction whose second vertex has the lower index.
    """
    n = graph.vertex_count
    if n > max_vertices:
        raise SizeLimitExceeded("Simple cycle enumeration", max_vertices, n)

    idx = graph.index_of
    found: List[List[Vertex]] = []

    for start in graph.vertices:
        s = idx(start)
        path = [start]
        on_path = {start}
        stack = [iter(graph.adjacent(start))]
        while stack:
            advanced = False
            for nxt in stack[-1]:
                if nxt == start:
                    if len(path) >= 3 and idx(path[1]) < idx(path[-1]):
                        found.append(list(path))
                    continue
                if idx(nxt) < s or nxt in on_path:
                    continue
                path.append(nxt)
                on_path.add(nxt)
                stack.append(iter(graph.adjacent(nxt)))
                advanced = True
                break
            if not advanced:
                stack.pop()
                on_path.discard(path.pop())

    return found


def _orientation_is_acyclic(n: int, edges: Sequence[Tuple[int, int]], flips: Sequence[int]) -> bool:
    """Kahn's algorithm on the directed graph induced by one orientation."""
    out_edges: List[List[int]] = [[] for _ in range(n)]
    indegree = [0] * n
    for (i, j), flip in zip(edges, flips):
        src, dst = (j, i) if flip else (i, j)
        out_edges[src].append(dst)
        indegree[dst] += 1

    ready = [v for v in range(n) if indegree[v] == 0]
    removed = 0
    while ready:
        v = ready.pop()
        removed += 1
        for w in out_edges[v]:
            indegree[w] -= 1
            if indegree[w] == 0:
                ready.append(w)
    return removed == n


def _count_exhaustive(graph: Graph, max_edges: int) -> int:
    m = graph.edge_count
    if m > max_edges:
        raise SizeLimitExceeded("Exhaustive orientation count", max_edges, m, unit="edges")

    n = graph.vertex_count
    edges = graph.indexed_edges()
    count = 0
    for mask in range(1 << m):
        flips = [(mask >> k) & 1 for k in range(m)]
        if _orientation_is_acyclic(n, edges, flips):
            count += 1
    return count


def _count_sampled(graph: Graph, sample_size: int, seed: Optional[int]) -> int:
    m = graph.edge_count
    n = graph.vertex_count
    if m == 0:
        return 1
    total = 1 << m
    samples = min(sample_size, total)
    rng = np.random.default_rng(seed)
    edges = graph.indexed_edges()

    acyclic = 0
    for _ in range(samples):
        flips = rng.integers(0, 2, size=m)
        if _orientation_is_acyclic(n, edges, flips):
            acyclic += 1

    # round(acyclic / samples * 2^m) in integer arithmetic
    return (2 * acyclic * total + samples) // (2 * samples)


def count_acyclic_orientations(
    graph: Graph,
    mode: str = "auto",
    max_vertices: int = MAX_EXHAUSTIVE_VERTICES,
    max_edges: int = MAX_EXHAUSTIVE_EDGES,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    seed: Optional[int] = 0,
) -> int:
    """
    Count orientations of the edges that leave no directed cycle.

    Args:
        graph: Graph to orient
        mode: "exhaustive", "sampled" or "auto" (exhaustive up to
            max_vertices, sampled above)
        max_edges: Ceiling for exhaustive enumeration
        sample_size: Number of random orientations in sampled mode
        seed: Seed for the sampling generator

    Raises:
        SizeLimitExceeded: If exhaustive enumeration would exceed max_edges
    """
    if mode == "auto":
        mode = "exhaustive" if graph.vertex_count <= max_vertices else "sampled"

    if mode == "exhaustive":
        return _count_exhaustive(graph, max_edges)
    if mode == "sampled":
        logger.info(
            "Estimating acyclic orientations from %d samples (%d vertices, %d edges)",
            sample_size, graph.vertex_count, graph.edge_count,
        )
        return _count_sampled(graph, sample_size, seed)
    raise InputError(f"Unknown orientation counting mode: {mode}")
