"""
Connectivity invariants of undirected graphs.

    b0 = number of connected components (stack-based labeling)
    b1 = E - V + b0                       (cycle rank, exact)
    b2 = max(0, F - E + V - b0)           (F = number of triangles)

b2 is a heuristic "void" count for small, roughly planar graphs, not a
homology computation. The Euler check V - E + F == b0 - b1 + b2 reduces
to F == max(0, F - b1), so it holds exactly on triangle-free graphs;
validate_betti_numbers() reports it rather than assuming it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from geoconsensus.graph.structures import Graph, Vertex

EULER_TOLERANCE = 0.01


@dataclass(frozen=True)
class BettiNumbers:
    beta0: int
    beta1: int
    beta2: int

    @property
    def euler_characteristic(self) -> int:
        return self.beta0 - self.beta1 + self.beta2

    def to_dict(self) -> Dict[str, int]:
        return {"beta0": self.beta0, "beta1": self.beta1, "beta2": self.beta2}


@dataclass
class ConnectivityMetrics:
    betti: BettiNumbers
    is_connected: bool
    is_partitioned: bool
    component_count: int
    largest_component_size: int
    average_component_size: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "betti": self.betti.to_dict(),
            "is_connected": self.is_connected,
            "is_partitioned": self.is_partitioned,
            "component_count": self.component_count,
            "largest_component_size": self.largest_component_size,
            "average_component_size": self.average_component_size,
        }


def find_connected_components(graph: Graph) -> List[List[Vertex]]:
    """Components in order of their first vertex; vertices in discovery order."""
    seen = set()
    components: List[List[Vertex]] = []
    for root in graph.vertices:
        if root in seen:
            continue
        seen.add(root)
        component = []
        stack = [root]
        while stack:
            v = stack.pop()
            component.append(v)
            for w in graph.adjacent(v):
                if w not in seen:
                    seen.add(w)
                    stack.append(w)
        components.append(component)
    return components


def triangle_count(graph: Graph) -> int:
    """Count 3-cliques; each triangle is counted once from its lowest-indexed edge."""
    idx = graph.index_of
    count = 0
    for u, v in graph.edges:
        if idx(u) > idx(v):
            u, v = v, u
        for w in graph.neighbors(u) & graph.neighbors(v):
            if idx(w) > idx(v):
                count += 1
    return count


def beta0(graph: Graph) -> int:
    return len(find_connected_components(graph))


def beta1(graph: Graph) -> int:
    return graph.edge_count - graph.vertex_count + beta0(graph)


def beta2(graph: Graph) -> int:
    faces = triangle_count(graph)
    return max(0, faces - graph.edge_count + graph.vertex_count - beta0(graph))


def betti_numbers(graph: Graph) -> BettiNumbers:
    b0 = beta0(graph)
    v, e = graph.vertex_count, graph.edge_count
    f = triangle_count(graph)
    return BettiNumbers(
        beta0=b0,
        beta1=e - v + b0,
        beta2=max(0, f - e + v - b0),
    )


def euler_characteristic(graph: Graph) -> int:
    """V - E + F with F the triangle count."""
    return graph.vertex_count - graph.edge_count + triangle_count(graph)


def validate_betti_numbers(graph: Graph, betti: Optional[BettiNumbers] = None) -> bool:
    """Non-negativity plus |(V - E + F) - (b0 - b1 + b2)| < EULER_TOLERANCE."""
    betti = betti or betti_numbers(graph)
    if min(betti.beta0, betti.beta1, betti.beta2) < 0:
        return False
    return abs(euler_characteristic(graph) - betti.euler_characteristic) < EULER_TOLERANCE


def connectivity_metrics(graph: Graph) -> ConnectivityMetrics:
    components = find_connected_components(graph)
    sizes = [len(c) for c in components]
    betti = betti_numbers(graph)
    return ConnectivityMetrics(
        betti=betti,
        is_connected=betti.beta0 == 1,
        is_partitioned=betti.beta0 > 1,
        component_count=len(components),
        largest_component_size=max(sizes) if sizes else 0,
        average_component_size=sum(sizes) / len(sizes) if sizes else 0.0,
    )
