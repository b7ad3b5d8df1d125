"""
Chromatic polynomial evaluation.

Three tiers by vertex count:

- n <= SMALL_GRAPH_LIMIT: exact, by deletion-contraction
  P(G) = P(G - e) - P(G / e), with P(edgeless on n vertices) = x^n.
  Dense graphs use the equivalent addition-contraction form
  P(G) = P(G + e) + P(G / e), which terminates at complete graphs
  (falling factorials). Subgraphs are immutable snapshots over integer
  vertex ids and are memoized, so recursive branches never alias.
- n <= MEDIUM_GRAPH_LIMIT: x(x-1)...(x-k+1) * (x-1)^(n-k) where k is a
  greedy coloring estimate of the chromatic number.
- larger: x^n for forests, x^n - n*x^(n-1) otherwise.

The two larger tiers are heuristics and do not satisfy the
deletion-contraction identity. Every Polynomial carries a method tag so
callers can tell an exact result from an estimate; pass exact=True to get
SizeLimitExceeded instead of an estimate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import zip_longest
from typing import Any, Dict, FrozenSet, Sequence, Tuple

from geoconsensus.errors import SizeLimitExceeded
from geoconsensus.graph.cycles import has_cycle
from geoconsensus.graph.structures import Graph

logger = logging.getLogger(__name__)

SMALL_GRAPH_LIMIT = 10
MEDIUM_GRAPH_LIMIT = 20

METHOD_EXACT = "deletion-contraction"
METHOD_GREEDY = "greedy-estimate"
METHOD_CYCLE = "cycle-heuristic"

Coefficients = Tuple[int, ...]


def _trim(coeffs: Sequence[int]) -> Coefficients:
    coeffs = list(coeffs)
    while len(coeffs) > 1 and coeffs[-1] == 0:
        coeffs.pop()
    return tuple(coeffs) if coeffs else (0,)


def _add(p: Sequence[int], q: Sequence[int]) -> Coefficients:
    return _trim([a + b for a, b in zip_longest(p, q, fillvalue=0)])


def _sub(p: Sequence[int], q: Sequence[int]) -> Coefficients:
    return _trim([a - b for a, b in zip_longest(p, q, fillvalue=0)])


def _mul(p: Sequence[int], q: Sequence[int]) -> Coefficients:
    out = [0] * (len(p) + len(q) - 1)
    for i, a in enumerate(p):
        if a == 0:
            continue
        for j, b in enumerate(q):
            out[i + j] += a * b
    return _trim(out)


def _monomial(power: int) -> Coefficients:
    return (0,) * power + (1,)


def _falling_factorial(k: int) -> Coefficients:
    """x(x-1)...(x-k+1)."""
    result: Coefficients = (1,)
    for i in range(k):
        result = _mul(result, (-i, 1))
    return result


def _power(p: Sequence[int], k: int) -> Coefficients:
    result: Coefficients = (1,)
    for _ in range(k):
        result = _mul(result, p)
    return result


@dataclass(frozen=True)
class Polynomial:
    """
    Integer polynomial in x, coefficients from the constant term upward.

    Attributes:
        coefficients: c0, c1, ..., cn
        method: How the polynomial was obtained
    """
    coefficients: Coefficients
    method: str = METHOD_EXACT

    def __post_init__(self) -> None:
        object.__setattr__(self, "coefficients", _trim(self.coefficients))

    @property
    def degree(self) -> int:
        if self.coefficients == (0,):
            return -1
        return len(self.coefficients) - 1

    @property
    def is_exact(self) -> bool:
        return self.method == METHOD_EXACT

    def evaluate(self, x: int) -> int:
        result = 0
        for c in reversed(self.coefficients):
            result = result * x + c
        return result

    def __add__(self, other: "Polynomial") -> "Polynomial":
        return Polynomial(_add(self.coefficients, other.coefficients), self.method)

    def __sub__(self, other: "Polynomial") -> "Polynomial":
        return Polynomial(_sub(self.coefficients, other.coefficients), self.method)

    def __mul__(self, other: "Polynomial") -> "Polynomial":
        return Polynomial(_mul(self.coefficients, other.coefficients), self.method)

    def __str__(self) -> str:
        terms = []
        for power in range(len(self.coefficients) - 1, -1, -1):
            c = self.coefficients[power]
            if c == 0:
                continue
            if power == 0:
                body = str(abs(c))
            else:
                mag = "" if abs(c) == 1 else str(abs(c))
                body = f"{mag}x" + (f"^{power}" if power > 1 else "")
            sign = "-" if c < 0 else "+"
            terms.append((sign, body))
        if not terms:
            return "0"
        first_sign, first_body = terms[0]
        text = ("-" if first_sign == "-" else "") + first_body
        for sign, body in terms[1:]:
            text += f" {sign} {body}"
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "coefficients": list(self.coefficients),
            "degree": self.degree,
            "method": self.method,
            "text": str(self),
        }


Snapshot = Tuple[FrozenSet[int], FrozenSet[Tuple[int, int]]]


class _DeletionContraction:
    """Memoized exact solver over integer-id graph snapshots."""

    def __init__(self) -> None:
        self._memo: Dict[Snapshot, Coefficients] = {}

    @staticmethod
    def _contract(vertices: FrozenSet[int], edges: FrozenSet[Tuple[int, int]], u: int, v: int) -> Snapshot:
        merged = set()
        for a, b in edges:
            a = u if a == v else a
            b = u if b == v else b
            if a != b:
                merged.add((a, b) if a < b else (b, a))
        return vertices - {v}, frozenset(merged)

    def solve(self, vertices: FrozenSet[int], edges: FrozenSet[Tuple[int, int]]) -> Coefficients:
        key = (vertices, edges)
        if key in self._memo:
            return self._memo[key]

        n = len(vertices)
        m = len(edges)
        complete = n * (n - 1) // 2

        if m == 0:
            result = _monomial(n)
        elif m == complete:
            result = _falling_factorial(n)
        elif 2 * m > complete:
            u, v = next(
                (a, b)
                for a in sorted(vertices)
                for b in sorted(vertices)
                if a < b and (a, b) not in edges
            )
            added = self.solve(vertices, edges | {(u, v)})
            contracted = self.solve(*self._contract(vertices, edges, u, v))
            result = _add(added, contracted)
        else:
            u, v = min(edges)
            deleted = self.solve(vertices, edges - {(u, v)})
            contracted = self.solve(*self._contract(vertices, edges - {(u, v)}, u, v))
            result = _sub(deleted, contracted)

        self._memo[key] = result
        return result


def _exact(graph: Graph) -> Polynomial:
    vertices = frozenset(range(graph.vertex_count))
    edges = frozenset(graph.indexed_edges())
    return Polynomial(_DeletionContraction().solve(vertices, edges), METHOD_EXACT)


def greedy_coloring(graph: Graph) -> Dict[Any, int]:
    """Assign each vertex, in vertex order, the smallest color unused by its neighbors."""
    colors: Dict[Any, int] = {}
    for v in graph.vertices:
        used = {colors[w] for w in graph.adjacent(v) if w in colors}
        color = 0
        while color in used:
            color += 1
        colors[v] = color
    return colors


def chromatic_number_estimate(graph: Graph) -> int:
    """Upper bound on the chromatic number from greedy coloring."""
    if graph.vertex_count == 0:
        return 0
    return max(greedy_coloring(graph).values()) + 1


def chromatic_polynomial(
    graph: Graph,
    exact: bool = False,
    small_limit: int = SMALL_GRAPH_LIMIT,
    medium_limit: int = MEDIUM_GRAPH_LIMIT,
) -> Polynomial:
    """
    Chromatic polynomial of graph, exact when small enough.

    Raises:
        SizeLimitExceeded: If exact=True and the graph has more than
            small_limit vertices
    """
    n = graph.vertex_count
    if n <= small_limit:
        return _exact(graph)
    if exact:
        raise SizeLimitExceeded("Exact chromatic polynomial", small_limit, n)

    if n <= medium_limit:
        k = chromatic_number_estimate(graph)
        logger.warning("Chromatic polynomial for %d vertices is a greedy estimate (k=%d)", n, k)
        coeffs = _mul(_falling_factorial(k), _power((-1, 1), n - k))
        return Polynomial(coeffs, METHOD_GREEDY)

    logger.warning("Chromatic polynomial for %d vertices uses the cycle heuristic", n)
    if has_cycle(graph):
        coeffs = _sub(_monomial(n), (0,) * (n - 1) + (n,))
    else:
        coeffs = _monomial(n)
    return Polynomial(coeffs, METHOD_CYCLE)


def validate_consensus(graph: Graph) -> bool:
    """
    Validity predicate used for consensus graphs: P(G, -1) > 0.

    For exact polynomials P(G, -1) = (-1)^n times the number of acyclic
    orientations, so the sign tracks vertex-count parity rather than
    acyclicity. The consensus loop gates on has_cycle() directly; this
    predicate is kept as the polynomial-side check.
    """
    return chromatic_polynomial(graph).evaluate(-1) > 0


def chromatic_summary(graph: Graph) -> Dict[str, Any]:
    poly = chromatic_polynomial(graph)
    return {
        "polynomial": poly.to_dict(),
        "value_at_minus_one": poly.evaluate(-1),
        "chromatic_number_estimate": chromatic_number_estimate(graph),
        "valid": poly.evaluate(-1) > 0,
    }
