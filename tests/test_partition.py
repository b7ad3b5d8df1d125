"""
Tests for partition detection and recovery.
"""

import logging

import pytest

from geoconsensus.consensus.config import ConsensusType
from geoconsensus.consensus.engine import Peer
from geoconsensus.errors import InputError
from geoconsensus.graph.structures import Graph
from geoconsensus.topology.betti import beta0
from geoconsensus.topology.partition import (
    CUBE_TEMPLATE,
    OCTAHEDRON_TEMPLATE,
    Network,
    PartitionDetector,
    RecoveryStrategy,
    classify_topology,
    detect_partition,
    dual_template,
)
from tests.factories import complete_graph, cycle_graph


def _network(topology):
    peers = tuple(Peer(str(v)) for v in topology.vertices)
    return Network(peers=peers, topology=topology)


def _two_k4():
    """Disconnected cube-shaped topology: 8 vertices, 12 edges."""
    left = complete_graph(4, prefix="l")
    right = complete_graph(4, prefix="r")
    return Graph(left.vertices + right.vertices, left.edges + right.edges)


class TestDetection:
    def test_two_triangles_partitioned(self, two_triangles):
        """Test two disjoint triangles form two partitions."""
        info = PartitionDetector().detect_partition(_network(two_triangles))
        assert info.is_partitioned
        assert info.partition_count == 2
        assert sorted(sorted(c) for c in info.components) == [["a", "b", "c"], ["d", "e", "f"]]

    def test_connected_network(self):
        """Test a connected topology reports a single component of all vertices."""
        topology = cycle_graph(5)
        info = detect_partition(_network(topology))
        assert not info.is_partitioned
        assert info.partition_count == 1
        assert info.components == [list(topology.vertices)]

    def test_logs_partition(self, two_triangles, caplog):
        """Test detected partitions are logged."""
        with caplog.at_level(logging.INFO, logger="geoconsensus.topology.partition"):
            PartitionDetector().detect_partition(_network(two_triangles))
        assert "Partition detected: 2 components" in caplog.text

    def test_empty_topology_rejected(self):
        """Test an empty topology has no components to report."""
        with pytest.raises(InputError, match="empty topology"):
            PartitionDetector().detect_partition(Network((), Graph()))


class TestRecovery:
    def test_not_partitioned(self):
        """Test recovery is a no-op on a connected network."""
        network = _network(cycle_graph(4))
        recovery = PartitionDetector().recover_from_partition(network)
        assert recovery.success
        assert recovery.steps == 0
        assert recovery.message == "Network is not partitioned"
        assert recovery.recovered_network is network

    def test_duality_cube_to_octahedron(self):
        """Test a disconnected cube-shaped topology is replaced by the octahedron template."""
        network = _network(_two_k4())
        assert classify_topology(network.topology) is ConsensusType.CUBE

        recovery = PartitionDetector().recover_from_partition(network, RecoveryStrategy.DUALITY)
        assert recovery.success
        assert recovery.steps == 1
        assert recovery.strategy is RecoveryStrategy.DUALITY
        assert recovery.message == "Successfully recovered using CUBE -> OCTAHEDRON duality"

        topology = recovery.recovered_network.topology
        assert topology == Graph(*OCTAHEDRON_TEMPLATE)
        assert beta0(topology) == 1
        assert recovery.recovered_network.peers == network.peers

    def test_duality_discards_vertex_labels(self, caplog):
        """Test the original vertex identities do not survive duality recovery."""
        network = _network(_two_k4())
        with caplog.at_level(logging.WARNING, logger="geoconsensus.topology.partition"):
            recovery = PartitionDetector().recover_from_partition(network, "duality")
        assert not set(recovery.recovered_network.topology.vertices) & set(network.topology.vertices)
        assert "original vertex labels are discarded" in caplog.text

    def test_duality_unknown_shape_defaults_to_cube(self, two_triangles):
        """Test an unrecognised shape is treated as a cube."""
        recovery = PartitionDetector().recover_from_partition(_network(two_triangles))
        assert recovery.success
        assert recovery.recovered_network.topology.vertices[0] == "O1"

    def test_geometric_decomposition_failure(self, two_triangles):
        """Test dropping odd-indexed edges cannot reconnect two components."""
        recovery = PartitionDetector().recover_from_partition(
            _network(two_triangles), RecoveryStrategy.GEOMETRIC_DECOMPOSITION
        )
        assert not recovery.success
        assert recovery.steps == 1
        assert recovery.message == "Geometric decomposition did not resolve partition"
        kept = recovery.recovered_network.topology.edges
        assert kept == (("a", "b"), ("a", "c"), ("e", "f"))

    def test_manual(self, two_triangles):
        """Test manual recovery always reports failure."""
        network = _network(two_triangles)
        recovery = PartitionDetector().recover_from_partition(network, RecoveryStrategy.MANUAL)
        assert not recovery.success
        assert recovery.steps == 0
        assert recovery.recovered_network is network
        assert recovery.message == "Manual recovery requires user intervention"

    def test_strategy_parsing(self):
        """Test strategy names are accepted in several spellings."""
        assert RecoveryStrategy.parse("geometric_decomposition") is RecoveryStrategy.GEOMETRIC_DECOMPOSITION
        assert RecoveryStrategy.parse("MANUAL") is RecoveryStrategy.MANUAL
        with pytest.raises(InputError, match="Unknown recovery strategy"):
            RecoveryStrategy.parse("retry")


def test_classify_templates():
    """Test the Platonic signatures of the fixed templates."""
    assert classify_topology(Graph(*CUBE_TEMPLATE)) is ConsensusType.CUBE
    assert classify_topology(Graph(*OCTAHEDRON_TEMPLATE)) is ConsensusType.OCTAHEDRON
    assert classify_topology(complete_graph(4)) is ConsensusType.TETRAHEDRON
    assert classify_topology(cycle_graph(5)) is ConsensusType.CUBE


def test_dual_templates_are_regular_and_connected():
    """Test the dual templates have the expected degrees."""
    octahedron = dual_template(ConsensusType.CUBE)
    cube = dual_template(ConsensusType.OCTAHEDRON)
    tetrahedron = dual_template(ConsensusType.TETRAHEDRON)
    assert {octahedron.degree(v) for v in octahedron.vertices} == {4}
    assert {cube.degree(v) for v in cube.vertices} == {3}
    assert {tetrahedron.degree(v) for v in tetrahedron.vertices} == {3}
    assert beta0(octahedron) == beta0(cube) == beta0(tetrahedron) == 1


def test_network_serialization(two_triangles):
    """Test network and recovery results serialize to plain values."""
    network = _network(two_triangles)
    data = network.to_dict()
    restored = Network.from_dict(data)
    assert restored.topology == two_triangles
    assert [p.id for p in restored.peers] == [p.id for p in network.peers]

    recovery = PartitionDetector().recover_from_partition(network, RecoveryStrategy.MANUAL)
    assert recovery.to_dict()["recovered_network"] == data
    assert recovery.to_dict()["strategy"] == "manual"


def test_detector_statistics():
    """Test the detector advertises strategies and signatures."""
    stats = PartitionDetector().get_statistics()
    assert stats["supported_strategies"] == ["duality", "geometric-decomposition", "manual"]
    assert stats["platonic_signatures"]["CUBE"] == {"vertices": 8, "edges": 12}
    assert stats["dual_pairs"]["CUBE"] == "OCTAHEDRON"
