"""
Tutte polynomial for small graphs.

T(G; x, y) is computed by deletion-contraction on multigraphs:

    T(G) = 1                       if G has no edges
    T(G) = y * T(G - e)            if e is a loop
    T(G) = x * T(G / e)            if e is a bridge
    T(G) = T(G - e) + T(G / e)     otherwise

Contraction can create loops and parallel edges, so edges are kept as a
sorted tuple of integer pairs (a multiset). The cost is exponential in the
edge count; graphs above MAX_TUTTE_VERTICES are refused.

Useful specialisations:
    T(2, 0)  = number of acyclic orientations
    T(1, 1)  = number of spanning trees (connected graphs)
    P(G; x)  = (-1)^(n - c) * x^c * T(1 - x, 0)
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from geoconsensus.errors import SizeLimitExceeded
from geoconsensus.graph.chromatic import Polynomial
from geoconsensus.graph.structures import Graph

MAX_TUTTE_VERTICES = 8

MultiEdges = Tuple[Tuple[int, int], ...]
Terms = Dict[Tuple[int, int], int]


@dataclass(frozen=True)
class TuttePolynomial:
    """Sparse bivariate polynomial: terms maps (i, j) to the coefficient of x^i y^j."""
    terms: Tuple[Tuple[Tuple[int, int], int], ...]

    @classmethod
    def from_terms(cls, terms: Terms) -> "TuttePolynomial":
        return cls(tuple(sorted((k, v) for k, v in terms.items() if v)))

    def coefficient(self, i: int, j: int) -> int:
        return dict(self.terms).get((i, j), 0)

    def evaluate(self, x: int, y: int) -> int:
        return sum(c * x ** i * y ** j for (i, j), c in self.terms)

    def to_dict(self) -> Dict[str, Any]:
        return {f"x^{i} y^{j}": c for (i, j), c in self.terms}


def _combine(p: Terms, q: Terms) -> Terms:
    out = dict(p)
    for k, v in q.items():
        out[k] = out.get(k, 0) + v
    return out


def _shift(p: Terms, dx: int, dy: int) -> Terms:
    return {(i + dx, j + dy): c for (i, j), c in p.items()}


def _connected_without(edges: MultiEdges, source: int, target: int) -> bool:
    adjacency: Dict[int, List[int]] = {}
    for a, b in edges:
        adjacency.setdefault(a, []).append(b)
        adjacency.setdefault(b, []).append(a)
    seen = {source}
    queue = deque([source])
    while queue:
        v = queue.popleft()
        if v == target:
            return True
        for w in adjacency.get(v, ()):
            if w not in seen:
                seen.add(w)
                queue.append(w)
    return False


def _contract(edges: MultiEdges, keep: int, drop: int) -> MultiEdges:
    merged = []
    for a, b in edges:
        a = keep if a == drop else a
        b = keep if b == drop else b
        merged.append((a, b) if a <= b else (b, a))
    return tuple(sorted(merged))


class _TutteSolver:
    def __init__(self) -> None:
        self._memo: Dict[MultiEdges, Terms] = {}

    def solve(self, edges: MultiEdges) -> Terms:
        if not edges:
            return {(0, 0): 1}
        if edges in self._memo:
            return self._memo[edges]

        (a, b), rest = edges[0], edges[1:]
        if a == b:
            result = _shift(self.solve(rest), 0, 1)
        elif not _connected_without(rest, a, b):
            result = _shift(self.solve(_contract(rest, a, b)), 1, 0)
        else:
            result = _combine(self.solve(rest), self.solve(_contract(rest, a, b)))

        self._memo[edges] = result
        return result


def tutte_polynomial(graph: Graph, max_vertices: int = MAX_TUTTE_VERTICES) -> TuttePolynomial:
    """
    Raises:
        SizeLimitExceeded: If graph has more than max_vertices vertices
    """
    if graph.vertex_count > max_vertices:
        raise SizeLimitExceeded("Tutte polynomial", max_vertices, graph.vertex_count)
    edges = tuple(sorted(graph.indexed_edges()))
    return TuttePolynomial.from_terms(_TutteSolver().solve(edges))


def _component_count(graph: Graph) -> int:
    parent = list(range(graph.vertex_count))

    def find(v: int) -> int:
        while parent[v] != v:
            parent[v] = parent[parent[v]]
            v = parent[v]
        return v

    for i, j in graph.indexed_edges():
        ri, rj = find(i), find(j)
        if ri != rj:
            parent[ri] = rj
    return len({find(v) for v in range(graph.vertex_count)})


def chromatic_from_tutte(graph: Graph, max_vertices: int = MAX_TUTTE_VERTICES) -> Polynomial:
    """Chromatic polynomial via P(G; x) = (-1)^(n-c) x^c T(1-x, 0)."""
    tutte = tutte_polynomial(graph, max_vertices=max_vertices)
    n = graph.vertex_count
    c = _component_count(graph)

    one_minus_x = Polynomial((1, -1))
    result = Polynomial((0,))
    for (i, j), coeff in tutte.terms:
        if j != 0:
            continue
        term = Polynomial((coeff,))
        for _ in range(i):
            term = term * one_minus_x
        result = result + term

    sign = -1 if (n - c) % 2 else 1
    return Polynomial((0,) * c + (sign,)) * result


def acyclic_orientations_from_tutte(graph: Graph, max_vertices: int = MAX_TUTTE_VERTICES) -> int:
    return tutte_polynomial(graph, max_vertices=max_vertices).evaluate(2, 0)


def spanning_tree_count(graph: Graph, max_vertices: int = MAX_TUTTE_VERTICES) -> int:
    """T(1, 1); meaningful for connected graphs."""
    return tutte_polynomial(graph, max_vertices=max_vertices).evaluate(1, 1)
