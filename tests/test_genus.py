"""
Unit tests for genus and planarity classification.
"""

import logging

import networkx as nx
import pytest

from geoconsensus.graph.genus import (
    GenusType,
    classify_genus,
    embedding_description,
    euler_genus_bound,
    face_count,
    genus_statistics,
    is_planar,
    kuratowski_subgraph,
    rotation_system_count,
)
from geoconsensus.graph.structures import Graph, complete_bipartite, from_networkx
from tests.factories import complete_graph, cycle_graph, path_graph


def _disjoint(left, right):
    return Graph(left.vertices + right.vertices, left.edges + right.edges)


class TestPlanar:
    def test_planar_shapes(self, cube_graph):
        """Test trees, cycles, K4 and the cube are planar."""
        for graph in (path_graph(5), cycle_graph(6), complete_graph(4), cube_graph):
            result = classify_genus(graph)
            assert result.genus == 0
            assert result.type is GenusType.PLANAR
            assert result.exact
            assert result.kuratowski is None
            assert result.geometric_shift == 0

    def test_empty_graph(self):
        """Test a graph with no vertices is planar."""
        assert classify_genus(Graph()).genus == 0
        assert kuratowski_subgraph(Graph()) is None

    def test_agrees_with_networkx(self):
        """Test genus zero coincides with networkx planarity on random graphs."""
        for seed in range(5):
            g = from_networkx(nx.gnm_random_graph(7, 13, seed=seed))
            planar, _ = nx.check_planarity(nx.gnm_random_graph(7, 13, seed=seed))
            assert is_planar(g) == planar
            assert (classify_genus(g).genus == 0) == planar


class TestNonPlanar:
    def test_k5_is_toroidal(self):
        """Test K5 embeds on the torus and names its obstruction."""
        result = classify_genus(complete_graph(5))
        assert result.genus == 1
        assert result.type is GenusType.TOROIDAL
        assert result.exact
        assert result.kuratowski == "K5"
        assert result.embedding == "Toroidal embedding (1 handle)"

    def test_k33_is_toroidal(self):
        """Test K3,3 has genus 1 with a K3,3 obstruction."""
        result = classify_genus(complete_bipartite(3, 3))
        assert result.genus == 1
        assert result.exact
        assert result.kuratowski == "K3,3"

    def test_petersen(self):
        """Test the Petersen graph is toroidal with a K3,3 subdivision."""
        petersen = from_networkx(nx.petersen_graph())
        result = classify_genus(petersen)
        assert result.genus == 1
        assert result.kuratowski == "K3,3"
        kind, certificate = kuratowski_subgraph(petersen)
        assert kind == "K3,3"
        assert certificate.edge_set() <= petersen.edge_set()

    def test_genus_adds_over_components(self):
        """Test two disjoint K5 need two handles."""
        result = classify_genus(_disjoint(complete_graph(5, "a"), complete_graph(5, "b")))
        assert result.genus == 2
        assert result.type is GenusType.DOUBLE_TOROIDAL
        assert result.geometric_shift == 2
        assert result.lower_bound == 2

    def test_large_search_falls_back_to_bound(self, caplog):
        """Test K6 reports its Euler bound without searching 24^6 rotations."""
        with caplog.at_level(logging.INFO, logger="geoconsensus.graph.genus"):
            result = classify_genus(complete_graph(6))
        assert result.genus == result.lower_bound == 1
        assert not result.exact
        assert "Skipping rotation search" in caplog.text

    @pytest.mark.parametrize("n, genus, kind", [
        (8, 2, GenusType.DOUBLE_TOROIDAL),
        (9, 3, GenusType.PRETZEL),
        (10, 4, GenusType.HIGHER),
    ])
    def test_complete_graph_bounds(self, n, genus, kind):
        """Test the Euler bound matches the known genus of complete graphs."""
        result = classify_genus(complete_graph(n))
        assert result.genus == genus
        assert result.type is kind
        assert result.geometric_shift == min(genus, 3)


def test_euler_bounds():
    """Test the general and triangle-free Euler bounds."""
    assert euler_genus_bound(complete_graph(7)) == 1
    assert euler_genus_bound(complete_bipartite(3, 3)) == 1
    assert euler_genus_bound(complete_bipartite(4, 4)) == 1
    assert euler_genus_bound(cycle_graph(5)) == 0
    assert euler_genus_bound(path_graph(2)) == 0


def test_face_count():
    """Test face tracing on simple embeddings."""
    assert face_count({"a": ("b",), "b": ("a",)}) == 1
    assert face_count({"a": ("b", "c"), "b": ("a", "c"), "c": ("a", "b")}) == 2


def test_rotation_system_count():
    """Test the rotation-system count is the product of (deg - 1)!."""
    assert rotation_system_count(complete_graph(5)) == 6 ** 5
    assert rotation_system_count(complete_bipartite(3, 3)) == 2 ** 6
    assert rotation_system_count(path_graph(4)) == 1


def test_embedding_description_and_statistics():
    """Test descriptions and the advertised shift mapping."""
    assert embedding_description(0) == "Planar embedding (no handles)"
    assert embedding_description(5) == "Higher genus embedding (5 handles)"
    stats = genus_statistics()
    assert stats["supported_types"][0] == "PLANAR"
    assert stats["geometric_shift_mapping"] == {0: 0, 1: 1, 2: 2, 3: 3}


def test_to_dict():
    """Test classifications serialize to plain values."""
    data = classify_genus(complete_graph(5)).to_dict()
    assert data["type"] == "TOROIDAL"
    assert data["kuratowski"] == "K5"
    assert data["exact"] is True
