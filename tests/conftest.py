# tests/conftest.py
import pytest

from geoconsensus.graph.structures import Graph
from tests.factories import peers_with


@pytest.fixture
def two_triangles():
    """Six vertices forming two disjoint 3-cycles."""
    return Graph(
        ["a", "b", "c", "d", "e", "f"],
        [("a", "b"), ("b", "c"), ("a", "c"), ("d", "e"), ("e", "f"), ("d", "f")],
    )


@pytest.fixture
def cube_graph():
    """The 3-cube Q3 on binary labels."""
    vertices = [format(i, "03b") for i in range(8)]
    edges = [
        (u, v) for i, u in enumerate(vertices) for v in vertices[i + 1:]
        if bin(int(u, 2) ^ int(v, 2)).count("1") == 1
    ]
    return Graph(vertices, edges)


@pytest.fixture
def identical_peers():
    """Four peers all holding 0.5 on every coordinate."""
    return peers_with(*([[0.5] * 7] * 4))
