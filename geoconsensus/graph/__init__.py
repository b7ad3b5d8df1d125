"""
Graph layer: the simple-graph value type and the validity oracles built on
it (cycle detection, acyclic orientations, chromatic and Tutte polynomials,
genus and planarity).
"""

from geoconsensus.graph.structures import (
    Graph,
    GraphValidation,
    are_isomorphic,
    complement,
    complete_bipartite,
    from_networkx,
    graph_statistics,
    is_bipartite,
    is_self_complementary,
    to_networkx,
    validate_graph,
)
from geoconsensus.graph.cycles import (
    CycleDetectionResult,
    count_acyclic_orientations,
    detect_cycles,
    exhaustive_count_feasible,
    find_all_simple_cycles,
    has_cycle,
)
from geoconsensus.graph.chromatic import (
    Polynomial,
    chromatic_number_estimate,
    chromatic_polynomial,
    validate_consensus,
)
from geoconsensus.graph.genus import (
    GenusClassification,
    GenusType,
    classify_genus,
    euler_genus_bound,
    is_planar,
    kuratowski_subgraph,
)
from geoconsensus.graph.tutte import (
    TuttePolynomial,
    acyclic_orientations_from_tutte,
    chromatic_from_tutte,
    tutte_polynomial,
)

__all__ = [
    "Graph",
    "GraphValidation",
    "are_isomorphic",
    "complement",
    "complete_bipartite",
    "from_networkx",
    "graph_statistics",
    "is_bipartite",
    "is_self_complementary",
    "to_networkx",
    "validate_graph",
    "CycleDetectionResult",
    "count_acyclic_orientations",
    "detect_cycles",
    "exhaustive_count_feasible",
    "find_all_simple_cycles",
    "has_cycle",
    "Polynomial",
    "chromatic_number_estimate",
    "chromatic_polynomial",
    "validate_consensus",
    "GenusClassification",
    "GenusType",
    "classify_genus",
    "euler_genus_bound",
    "is_planar",
    "kuratowski_subgraph",
    "TuttePolynomial",
    "acyclic_orientations_from_tutte",
    "chromatic_from_tutte",
    "tutte_polynomial",
]
