"""
Simple undirected graph value type.

A Graph holds unique vertex labels and a list of undirected edges (no
self-loops, no duplicate edges). Edge order is preserved because some
recovery strategies select edges by position. An integer index and an
adjacency map are built once at construction, so traversals run in
O(V + E) instead of rescanning the edge list per vertex.

Graphs are immutable: operations return new graphs.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from itertools import combinations, permutations
from typing import Any, Dict, FrozenSet, Hashable, Iterable, List, Optional, Sequence, Tuple

import networkx as nx

from geoconsensus.errors import InputError, SizeLimitExceeded

Vertex = Hashable
Edge = Tuple[Vertex, Vertex]

MAX_ISOMORPHISM_VERTICES = 8


@dataclass
class GraphValidation:
    """Result of validate_graph()."""
    valid: bool
    errors: List[str] = field(default_factory=list)


def _structural_errors(vertices: Sequence[Vertex], edges: Sequence[Edge]) -> List[str]:
    errors: List[str] = []
    seen = set()
    for v in vertices:
        if v in seen:
            errors.append(f"Duplicate vertex: {v}")
        seen.add(v)

    pairs = set()
    for edge in edges:
        if len(edge) != 2:
            errors.append(f"Edge must join two vertices: {edge!r}")
            continue
        u, v = edge
        if u not in seen:
            errors.append(f"Edge references unknown vertex: {u}")
        if v not in seen:
            errors.append(f"Edge references unknown vertex: {v}")
        if u == v:
            errors.append(f"Self-loop on vertex: {u}")
            continue
        key = frozenset((u, v))
        if key in pairs:
            errors.append(f"Duplicate edge: {u}-{v}")
        pairs.add(key)
    return errors


def validate_graph(vertices: Sequence[Vertex], edges: Sequence[Edge]) -> GraphValidation:
    """Validate raw graph input without raising. Empty vertex sets are invalid."""
    errors = []
    if not vertices:
        errors.append("Graph must have at least one vertex")
    errors.extend(_structural_errors(vertices, edges))
    return GraphValidation(valid=not errors, errors=errors)


class Graph:
    """
    Immutable simple undirected graph.

    Raises:
        InputError: On duplicate vertices, unknown endpoints, self-loops
            or duplicate edges
    """

    __slots__ = ("_vertices", "_edges", "_index", "_adjacency", "_ordered")

    def __init__(self, vertices: Iterable[Vertex] = (), edges: Iterable[Edge] = ()):
        vertices = tuple(vertices)
        edges = tuple(tuple(e) for e in edges)
        errors = _structural_errors(vertices, edges)
        if errors:
            raise InputError("; ".join(errors))

        self._vertices: Tuple[Vertex, ...] = vertices
        self._edges: Tuple[Edge, ...] = edges
        self._index: Dict[Vertex, int] = {v: i for i, v in enumerate(vertices)}
        adjacency: Dict[Vertex, set] = {v: set() for v in vertices}
        for u, v in edges:
            adjacency[u].add(v)
            adjacency[v].add(u)
        self._adjacency: Dict[Vertex, FrozenSet[Vertex]] = {
            v: frozenset(n) for v, n in adjacency.items()
        }
        self._ordered: Dict[Vertex, Tuple[Vertex, ...]] = {
            v: tuple(sorted(n, key=self._index.__getitem__)) for v, n in adjacency.items()
        }

    @property
    def vertices(self) -> Tuple[Vertex, ...]:
        return self._vertices

    @property
    def edges(self) -> Tuple[Edge, ...]:
        return self._edges

    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def index_of(self, vertex: Vertex) -> int:
        return self._index[vertex]

    def neighbors(self, vertex: Vertex) -> FrozenSet[Vertex]:
        return self._adjacency[vertex]

    def adjacent(self, vertex: Vertex) -> Tuple[Vertex, ...]:
        """Neighbors in vertex order, for deterministic traversal."""
        return self._ordered[vertex]

    def degree(self, vertex: Vertex) -> int:
        return len(self._adjacency[vertex])

    def has_edge(self, u: Vertex, v: Vertex) -> bool:
        return u in self._adjacency and v in self._adjacency[u]

    def edge_set(self) -> FrozenSet[FrozenSet[Vertex]]:
        return frozenset(frozenset(e) for e in self._edges)

    def indexed_edges(self) -> List[Tuple[int, int]]:
        """Edges as (i, j) integer pairs with i < j, in edge order."""
        out = []
        for u, v in self._edges:
            i, j = self._index[u], self._index[v]
            out.append((i, j) if i < j else (j, i))
        return out

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Graph):
            return NotImplemented
        return set(self._vertices) == set(other._vertices) and self.edge_set() == other.edge_set()

    def __hash__(self) -> int:
        return hash((frozenset(self._vertices), self.edge_set()))

    def __repr__(self) -> str:
        return f"Graph(vertices={self.vertex_count}, edges={self.edge_count})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vertices": list(self._vertices),
            "edges": [list(e) for e in self._edges],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Graph":
        return cls(data.get("vertices", []), [tuple(e) for e in data.get("edges", [])])


def complement(graph: Graph) -> Graph:
    """Graph on the same vertices whose edges are exactly the non-edges of graph."""
    edges = [
        (u, v) for u, v in combinations(graph.vertices, 2) if not graph.has_edge(u, v)
    ]
    return Graph(graph.vertices, edges)


def degree_sequence(graph: Graph) -> List[int]:
    return sorted((graph.degree(v) for v in graph.vertices), reverse=True)


def are_isomorphic(
    g1: Graph,
    g2: Graph,
    max_vertices: int = MAX_ISOMORPHISM_VERTICES,
) -> bool:
    """
    Exact isomorphism test by exhaustive vertex permutation.

    Cheap invariants (vertex count, edge count, degree sequence) are
    compared first. Raises SizeLimitExceeded when the permutation search
    would be needed above max_vertices.
    """
    if g1.vertex_count != g2.vertex_count or g1.edge_count != g2.edge_count:
        return False
    if degree_sequence(g1) != degree_sequence(g2):
        return False
    n = g1.vertex_count
    if n > max_vertices:
        raise SizeLimitExceeded("Isomorphism check", max_vertices, n)

    target = g2.edge_set()
    for perm in permutations(g2.vertices):
        mapping = dict(zip(g1.vertices, perm))
        if all(frozenset((mapping[u], mapping[v])) in target for u, v in g1.edges):
            return True
    return False


def is_self_complementary(graph: Graph, max_vertices: int = MAX_ISOMORPHISM_VERTICES) -> bool:
    n = graph.vertex_count
    if graph.edge_count * 4 != n * (n - 1):
        return False
    return are_isomorphic(graph, complement(graph), max_vertices=max_vertices)


def two_coloring(graph: Graph) -> Optional[Dict[Vertex, int]]:
    """BFS 2-coloring, or None if some component has an odd cycle."""
    color: Dict[Vertex, int] = {}
    for start in graph.vertices:
        if start in color:
            continue
        color[start] = 0
        queue = deque([start])
        while queue:
            u = queue.popleft()
            for v in graph.neighbors(u):
                if v not in color:
                    color[v] = 1 - color[u]
                    queue.append(v)
                elif color[v] == color[u]:
                    return None
    return color


def is_bipartite(graph: Graph) -> bool:
    return two_coloring(graph) is not None


def complete_bipartite(m: int, n: int) -> Graph:
    """K(m, n) with parts A0..A(m-1) and B0..B(n-1)."""
    if m < 0 or n < 0:
        raise InputError("Part sizes must be non-negative")
    left = [f"A{i}" for i in range(m)]
    right = [f"B{j}" for j in range(n)]
    return Graph(left + right, [(a, b) for a in left for b in right])


def graph_statistics(graph: Graph) -> Dict[str, Any]:
    n = graph.vertex_count
    degrees = [graph.degree(v) for v in graph.vertices]
    density = (2 * graph.edge_count) / (n * (n - 1)) if n > 1 else 0.0
    self_complementary = (
        is_self_complementary(graph) if n <= MAX_ISOMORPHISM_VERTICES else None
    )
    return {
        "vertex_count": n,
        "edge_count": graph.edge_count,
        "density": density,
        "min_degree": min(degrees) if degrees else 0,
        "max_degree": max(degrees) if degrees else 0,
        "average_degree": sum(degrees) / n if n else 0.0,
        "is_bipartite": is_bipartite(graph),
        "is_self_complementary": self_complementary,
    }


def to_networkx(graph: Graph) -> nx.Graph:
    G = nx.Graph()
    G.add_nodes_from(graph.vertices)
    G.add_edges_from(graph.edges)
    return G


def from_networkx(G: nx.Graph) -> Graph:
    """Convert an undirected networkx graph. Self-loops are rejected."""
    if G.is_directed():
        raise InputError("Directed graphs are not supported")
    return Graph(list(G.nodes()), list(G.edges()))
