"""
Orientable genus classification.

Planarity is decided by networkx's LR-planarity test. A non-planar graph
also yields a Kuratowski subgraph, a subdivision of K5 or K3,3, which is
reported by name.

For a connected simple graph with V >= 3, Euler's formula on a surface of
genus g bounds the genus from below:

    g >= ceil((E - 3V + 6) / 6)      every face has at least 3 sides
    g >= ceil((E - 2V + 4) / 4)      triangle-free, at least 4 sides

The exact minimum genus comes from searching rotation systems. A cyclic
order of neighbors at every vertex fixes one cellular embedding; tracing its
faces gives F and g = (2 - V + E - F) / 2. The search stops as soon as it
meets the Euler bound, and is skipped when the number of rotation systems
exceeds max_rotations, in which case the bound is reported with exact=False.
Genus is additive over connected components.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from itertools import permutations, product
from math import factorial
from typing import Any, Dict, List, Optional, Tuple

import networkx as nx

from geoconsensus.graph.structures import Graph, Vertex, from_networkx, to_networkx

logger = logging.getLogger(__name__)

MAX_ROTATION_SYSTEMS = 50_000
MAX_GEOMETRIC_SHIFT = 3

Rotation = Dict[Vertex, Tuple[Vertex, ...]]


class GenusType(Enum):
    PLANAR = "PLANAR"
    TOROIDAL = "TOROIDAL"
    DOUBLE_TOROIDAL = "DOUBLE_TOROIDAL"
    PRETZEL = "PRETZEL"
    HIGHER = "HIGHER"

    @classmethod
    def for_genus(cls, genus: int) -> "GenusType":
        named = [cls.PLANAR, cls.TOROIDAL, cls.DOUBLE_TOROIDAL, cls.PRETZEL]
        return named[genus] if genus < len(named) else cls.HIGHER


_EMBEDDINGS = {
    GenusType.PLANAR: "Planar embedding (no handles)",
    GenusType.TOROIDAL: "Toroidal embedding (1 handle)",
    GenusType.DOUBLE_TOROIDAL: "Double-toroidal embedding (2 handles)",
    GenusType.PRETZEL: "Pretzel embedding (3 handles)",
}


@dataclass
class GenusClassification:
    """Minimum orientable genus and the surface it names."""
    genus: int
    type: GenusType
    geometric_shift: int
    embedding: str
    exact: bool
    lower_bound: int
    kuratowski: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "genus": self.genus,
            "type": self.type.value,
            "geometric_shift": self.geometric_shift,
            "embedding": self.embedding,
            "exact": self.exact,
            "lower_bound": self.lower_bound,
            "kuratowski": self.kuratowski,
        }


def embedding_description(genus: int) -> str:
    kind = GenusType.for_genus(genus)
    return _EMBEDDINGS.get(kind, f"Higher genus embedding ({genus} handles)")


def geometric_shift(genus: int) -> int:
    """Shift parameter k in {0, 1, 2, 3}."""
    return min(genus, MAX_GEOMETRIC_SHIFT)


def is_planar(graph: Graph) -> bool:
    planar, _ = nx.check_planarity(to_networkx(graph))
    return planar


def kuratowski_subgraph(graph: Graph) -> Optional[Tuple[str, Graph]]:
    """
    A K5 or K3,3 subdivision inside a non-planar graph, or None if planar.

    Branch vertices of the certificate have degree 4 in a K5 subdivision
    and degree 3 in a K3,3 subdivision; every other vertex has degree 2.
    """
    planar, certificate = nx.check_planarity(to_networkx(graph), counterexample=True)
    if planar:
        return None
    branch = [v for v in certificate.nodes() if certificate.degree(v) > 2]
    kind = "K5" if len(branch) == 5 else "K3,3"
    return kind, from_networkx(certificate)


def _components(graph: Graph) -> List[Graph]:
    G = to_networkx(graph)
    return [from_networkx(G.subgraph(nodes).copy()) for nodes in nx.connected_components(G)]


def _is_triangle_free(graph: Graph) -> bool:
    return not any(graph.neighbors(u) & graph.neighbors(v) for u, v in graph.edges)


def _component_bound(component: Graph) -> int:
    v, e = component.vertex_count, component.edge_count
    if v < 3:
        return 0
    # ceil(a / b) == -((-a) // b)
    bound = -((3 * v - 6 - e) // 6)
    if _is_triangle_free(component):
        bound = max(bound, -((2 * v - 4 - e) // 4))
    return max(0, bound)


def euler_genus_bound(graph: Graph) -> int:
    """Sum over components of the Euler lower bound on the genus."""
    return sum(_component_bound(c) for c in _components(graph))


def rotation_system_count(graph: Graph) -> int:
    """Number of distinct rotation systems: the product of (deg - 1)!."""
    total = 1
    for v in graph.vertices:
        deg = graph.degree(v)
        if deg > 1:
            total *= factorial(deg - 1)
    return total


def face_count(rotation: Rotation) -> int:
    """Faces of the embedding fixed by a rotation system."""
    succ: Dict[Tuple[Vertex, Vertex], Vertex] = {}
    for v, order in rotation.items():
        for i, u in enumerate(order):
            succ[(v, u)] = order[(i + 1) % len(order)]

    seen = set()
    faces = 0
    for dart in succ:
        if dart in seen:
            continue
        faces += 1
        a, b = dart
        while (a, b) not in seen:
            seen.add((a, b))
            a, b = b, succ[(b, a)]
    return faces


def _cyclic_orders(neighbors: Tuple[Vertex, ...]) -> List[Tuple[Vertex, ...]]:
    if len(neighbors) < 3:
        return [neighbors]
    first, rest = neighbors[0], neighbors[1:]
    return [(first,) + perm for perm in permutations(rest)]


def _search_genus(component: Graph, bound: int) -> int:
    v, e = component.vertex_count, component.edge_count
    vertices = [x for x in component.vertices if component.degree(x) > 0]
    choices = [_cyclic_orders(component.adjacent(x)) for x in vertices]

    best: Optional[int] = None
    for orders in product(*choices):
        faces = face_count(dict(zip(vertices, orders)))
        genus = (2 - v + e - faces) // 2
        if best is None or genus < best:
            best = genus
            if best <= bound:
                break
    return best if best is not None else 0


def _component_genus(component: Graph, max_rotations: int) -> Tuple[int, bool, int]:
    """(genus, exact, lower bound) for one connected component."""
    if component.edge_count == 0 or is_planar(component):
        return 0, True, 0

    bound = max(1, _component_bound(component))
    rotations = rotation_system_count(component)
    if rotations > max_rotations:
        logger.info(
            "Skipping rotation search over %d systems (%d vertices, %d edges); "
            "reporting Euler bound %d",
            rotations, component.vertex_count, component.edge_count, bound,
        )
        return bound, False, bound
    return _search_genus(component, bound), True, bound


def classify_genus(graph: Graph, max_rotations: int = MAX_ROTATION_SYSTEMS) -> GenusClassification:
    """
    Classify the minimum orientable genus of a graph.

    Args:
        graph: Graph to embed
        max_rotations: Largest rotation-system search attempted per component

    Returns:
        GenusClassification; exact is False when any component fell back
        to its Euler bound
    """
    genus = 0
    lower_bound = 0
    exact = True
    for component in _components(graph):
        g, component_exact, b = _component_genus(component, max_rotations)
        genus += g
        lower_bound += b
        exact = exact and component_exact

    obstruction = kuratowski_subgraph(graph) if genus else None
    kind = GenusType.for_genus(genus)
    logger.debug("Genus %d (%s, exact=%s)", genus, kind.value, exact)
    return GenusClassification(
        genus=genus,
        type=kind,
        geometric_shift=geometric_shift(genus),
        embedding=embedding_description(genus),
        exact=exact,
        lower_bound=lower_bound,
        kuratowski=obstruction[0] if obstruction else None,
    )


def genus_statistics() -> Dict[str, Any]:
    return {
        "supported_types": [t.value for t in GenusType],
        "max_rotation_systems": MAX_ROTATION_SYSTEMS,
        "geometric_shift_mapping": {g: geometric_shift(g) for g in range(MAX_GEOMETRIC_SHIFT + 1)},
    }
