"""
Unit tests for the simple graph value type and its structural operations.

networkx serves as the independent oracle where it offers the same
operation.
"""

import networkx as nx
import pytest

from geoconsensus.errors import InputError, SizeLimitExceeded
from geoconsensus.graph.structures import (
    Graph,
    are_isomorphic,
    complement,
    complete_bipartite,
    degree_sequence,
    from_networkx,
    graph_statistics,
    is_bipartite,
    is_self_complementary,
    to_networkx,
    two_coloring,
    validate_graph,
)
from tests.factories import complete_graph, cycle_graph, path_graph


class TestGraphConstruction:
    def test_rejects_duplicate_vertices(self):
        """Test duplicate vertex labels are rejected."""
        with pytest.raises(InputError, match="Duplicate vertex: a"):
            Graph(["a", "a"], [])

    def test_rejects_unknown_endpoints(self):
        """Test edges must reference existing vertices."""
        with pytest.raises(InputError, match="unknown vertex: z"):
            Graph(["a", "b"], [("a", "z")])

    def test_rejects_self_loops(self):
        """Test self-loops are rejected."""
        with pytest.raises(InputError, match="Self-loop"):
            Graph(["a"], [("a", "a")])

    def test_rejects_duplicate_edges_in_either_direction(self):
        """Test an edge repeated in reverse counts as a duplicate."""
        with pytest.raises(InputError, match="Duplicate edge"):
            Graph(["a", "b"], [("a", "b"), ("b", "a")])

    def test_empty_graph_allowed(self):
        """Test the empty graph can be constructed."""
        g = Graph()
        assert g.vertex_count == 0
        assert g.edge_count == 0

    def test_adjacency_and_order(self):
        """Test adjacency lookups and preserved edge order."""
        g = Graph(["a", "b", "c"], [("b", "c"), ("a", "b")])
        assert g.edges == (("b", "c"), ("a", "b"))
        assert g.neighbors("b") == frozenset({"a", "c"})
        assert g.adjacent("b") == ("a", "c")
        assert g.degree("a") == 1
        assert g.has_edge("c", "b")
        assert not g.has_edge("a", "c")
        assert g.indexed_edges() == [(1, 2), (0, 1)]


def test_validate_graph_collects_errors():
    """Test validate_graph reports problems without raising."""
    assert not validate_graph([], []).valid
    result = validate_graph(["a", "b", "b"], [("a", "a"), ("a", "c")])
    assert not result.valid
    assert len(result.errors) == 3
    assert validate_graph(["a", "b"], [("a", "b")]).valid


def test_graph_equality_ignores_order():
    """Test equality compares vertex and edge sets."""
    g1 = Graph(["a", "b", "c"], [("a", "b"), ("b", "c")])
    g2 = Graph(["c", "b", "a"], [("c", "b"), ("b", "a")])
    assert g1 == g2
    assert hash(g1) == hash(g2)


def test_complement_matches_networkx():
    """Test complement edges agree with networkx."""
    g = from_networkx(nx.petersen_graph())
    ours = complement(g)
    theirs = nx.complement(to_networkx(g))
    assert ours.edge_set() == frozenset(frozenset(e) for e in theirs.edges())


def test_double_complement_is_identity():
    """Test complement(complement(G)) == G."""
    for g in [path_graph(5), cycle_graph(6), complete_graph(4), from_networkx(nx.petersen_graph())]:
        assert complement(complement(g)) == g


def test_self_complementary_graphs():
    """Test P4 and C5 are self-complementary while K3 is not."""
    assert is_self_complementary(path_graph(4))
    assert is_self_complementary(cycle_graph(5))
    assert not is_self_complementary(complete_graph(3))


class TestIsomorphism:
    def test_relabelled_cycle(self):
        """Test a relabelled cycle is isomorphic to the original."""
        g1 = cycle_graph(5)
        g2 = Graph(["v", "w", "x", "y", "z"], [("v", "x"), ("x", "z"), ("z", "w"), ("w", "y"), ("y", "v")])
        assert are_isomorphic(g1, g2)
        assert nx.is_isomorphic(to_networkx(g1), to_networkx(g2))

    def test_different_degree_sequences(self):
        """Test the star and path on four vertices differ."""
        star = Graph(["h", "a", "b", "c"], [("h", "a"), ("h", "b"), ("h", "c")])
        assert degree_sequence(star) == [3, 1, 1, 1]
        assert not are_isomorphic(star, path_graph(4))

    def test_same_degrees_not_isomorphic(self):
        """Test C6 and two disjoint triangles share degrees but differ."""
        two_triangles = Graph(
            list("abcdef"),
            [("a", "b"), ("b", "c"), ("a", "c"), ("d", "e"), ("e", "f"), ("d", "f")],
        )
        assert not are_isomorphic(cycle_graph(6), two_triangles)

    def test_size_limit(self):
        """Test the permutation search refuses graphs above the ceiling."""
        with pytest.raises(SizeLimitExceeded, match="at most 8 vertices, got 9"):
            are_isomorphic(cycle_graph(9), cycle_graph(9, prefix="d"))


def test_bipartite_matches_networkx():
    """Test bipartiteness against networkx."""
    for g in [cycle_graph(4), cycle_graph(5), path_graph(7), complete_graph(3), from_networkx(nx.petersen_graph())]:
        assert is_bipartite(g) == nx.is_bipartite(to_networkx(g))


def test_two_coloring_is_proper():
    """Test the BFS coloring assigns different colors across every edge."""
    g = cycle_graph(8)
    colors = two_coloring(g)
    assert all(colors[u] != colors[v] for u, v in g.edges)
    assert two_coloring(cycle_graph(7)) is None


def test_complete_bipartite():
    """Test K(2, 3) labels, size and bipartiteness."""
    g = complete_bipartite(2, 3)
    assert g.vertices == ("A0", "A1", "B0", "B1", "B2")
    assert g.edge_count == 6
    assert is_bipartite(g)
    with pytest.raises(InputError):
        complete_bipartite(-1, 2)


def test_graph_statistics():
    """Test summary statistics of K4."""
    stats = graph_statistics(complete_graph(4))
    assert stats["vertex_count"] == 4
    assert stats["edge_count"] == 6
    assert stats["density"] == 1.0
    assert stats["min_degree"] == stats["max_degree"] == 3
    assert stats["average_degree"] == 3.0
    assert stats["is_bipartite"] is False
    assert stats["is_self_complementary"] is False


def test_networkx_round_trip():
    """Test conversion to and from networkx preserves the graph."""
    g = cycle_graph(6)
    assert from_networkx(to_networkx(g)) == g
    with pytest.raises(InputError):
        from_networkx(nx.DiGraph([(1, 2)]))


def test_dict_round_trip():
    """Test to_dict/from_dict."""
    g = path_graph(3)
    assert Graph.from_dict(g.to_dict()) == g
