"""
Partition detection and recovery for peer topologies.

A topology is partitioned when it has more than one connected component
(b0 > 1). Recovery applies a single structural strategy and then
re-detects; it succeeds only if the result is connected:

- DUALITY: classify the topology by (|V|, |E|) against the Platonic
  signatures and replace it with the fixed template of the dual solid
  (cube <-> octahedron, tetrahedron self-dual, unknown shapes treated as a
  cube). The template carries its own vertex labels, so the original
  peer-to-vertex mapping is not preserved.
- GEOMETRIC_DECOMPOSITION: keep the edges at even positions.
- MANUAL: never automated; always reports failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from geoconsensus.consensus.config import ConsensusType
from geoconsensus.consensus.engine import Peer
from geoconsensus.errors import InputError
from geoconsensus.graph.structures import Graph, Vertex
from geoconsensus.topology.betti import find_connected_components

logger = logging.getLogger(__name__)


class RecoveryStrategy(Enum):
    DUALITY = "duality"
    GEOMETRIC_DECOMPOSITION = "geometric-decomposition"
    MANUAL = "manual"

    @classmethod
    def parse(cls, value: Any) -> "RecoveryStrategy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower().replace("_", "-"))
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise InputError(f"Unknown recovery strategy {value!r}; expected one of {valid}")


PLATONIC_SIGNATURES: Dict[Tuple[int, int], ConsensusType] = {
    (4, 6): ConsensusType.TETRAHEDRON,
    (6, 12): ConsensusType.OCTAHEDRON,
    (8, 12): ConsensusType.CUBE,
}

DUAL_OF: Dict[ConsensusType, ConsensusType] = {
    ConsensusType.TETRAHEDRON: ConsensusType.TETRAHEDRON,
    ConsensusType.CUBE: ConsensusType.OCTAHEDRON,
    ConsensusType.OCTAHEDRON: ConsensusType.CUBE,
}

TETRAHEDRON_TEMPLATE = (
    ("T1", "T2", "T3", "T4"),
    (("T1", "T2"), ("T1", "T3"), ("T1", "T4"), ("T2", "T3"), ("T2", "T4"), ("T3", "T4")),
)

OCTAHEDRON_TEMPLATE = (
    ("O1", "O2", "O3", "O4", "O5", "O6"),
    (
        ("O1", "O2"), ("O1", "O3"), ("O1", "O4"), ("O1", "O5"),
        ("O2", "O3"), ("O2", "O4"), ("O2", "O6"),
        ("O3", "O5"), ("O3", "O6"),
        ("O4", "O5"), ("O4", "O6"),
        ("O5", "O6"),
    ),
)

CUBE_TEMPLATE = (
    ("C1", "C2", "C3", "C4", "C5", "C6", "C7", "C8"),
    (
        ("C1", "C2"), ("C1", "C3"), ("C1", "C5"),
        ("C2", "C4"), ("C2", "C6"),
        ("C3", "C4"), ("C3", "C7"),
        ("C4", "C8"),
        ("C5", "C6"), ("C5", "C7"),
        ("C6", "C8"),
        ("C7", "C8"),
    ),
)

TEMPLATES = {
    ConsensusType.TETRAHEDRON: TETRAHEDRON_TEMPLATE,
    ConsensusType.OCTAHEDRON: OCTAHEDRON_TEMPLATE,
    ConsensusType.CUBE: CUBE_TEMPLATE,
}


@dataclass(frozen=True)
class Network:
    """Peers together with their topology graph."""
    peers: Tuple[Peer, ...]
    topology: Graph

    def to_dict(self) -> Dict[str, Any]:
        return {
            "peers": [p.to_dict() for p in self.peers],
            "topology": self.topology.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Network":
        return cls(
            peers=tuple(Peer.from_dict(p) for p in data.get("peers", [])),
            topology=Graph.from_dict(data.get("topology", {})),
        )


@dataclass
class PartitionInfo:
    is_partitioned: bool
    partition_count: int
    components: List[List[Vertex]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_partitioned": self.is_partitioned,
            "partition_count": self.partition_count,
            "components": [list(c) for c in self.components],
        }


@dataclass
class PartitionRecovery:
    success: bool
    strategy: RecoveryStrategy
    recovered_network: Optional[Network]
    steps: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "strategy": self.strategy.value,
            "recovered_network": (
                self.recovered_network.to_dict() if self.recovered_network is not None else None
            ),
            "steps": self.steps,
            "message": self.message,
        }


def classify_topology(graph: Graph) -> ConsensusType:
    """Platonic type matching (|V|, |E|); unknown shapes default to CUBE."""
    return PLATONIC_SIGNATURES.get((graph.vertex_count, graph.edge_count), ConsensusType.CUBE)


def dual_template(solid: ConsensusType) -> Graph:
    vertices, edges = TEMPLATES[DUAL_OF[solid]]
    return Graph(vertices, edges)


def detect_partition(network: Network) -> PartitionInfo:
    """
    Components of the topology. A connected topology is reported as a
    single component holding every vertex. An empty topology has no
    components and is rejected.
    """
    if network.topology.vertex_count == 0:
        raise InputError("Cannot detect partitions of an empty topology")
    components = find_connected_components(network.topology)
    if len(components) > 1:
        return PartitionInfo(True, len(components), components)
    return PartitionInfo(False, 1, [list(network.topology.vertices)])


class PartitionDetector:
    """Detects partitions in a peer topology and applies one recovery strategy."""

    def detect_partition(self, network: Network) -> PartitionInfo:
        info = detect_partition(network)
        if info.is_partitioned:
            logger.info(
                "Partition detected: %d components (sizes %s)",
                info.partition_count, [len(c) for c in info.components],
            )
        return info

    def recover_from_partition(
        self,
        network: Network,
        strategy: RecoveryStrategy = RecoveryStrategy.DUALITY,
    ) -> PartitionRecovery:
        strategy = RecoveryStrategy.parse(strategy)
        if not detect_partition(network).is_partitioned:
            return PartitionRecovery(True, strategy, network, 0, "Network is not partitioned")

        if strategy is RecoveryStrategy.MANUAL:
            logger.info("Manual recovery requested; no automated action taken")
            return PartitionRecovery(
                False, strategy, network, 0, "Manual recovery requires user intervention"
            )

        if strategy is RecoveryStrategy.DUALITY:
            source = classify_topology(network.topology)
            target = DUAL_OF[source]
            topology = dual_template(source)
            logger.warning(
                "Duality recovery replaces the topology with the %s template; "
                "original vertex labels are discarded",
                target.value,
            )
            label = "Duality recovery"
            success_message = (
                f"Successfully recovered using {source.value} -> {target.value} duality"
            )
        else:
            topology = Graph(
                network.topology.vertices,
                [e for i, e in enumerate(network.topology.edges) if i % 2 == 0],
            )
            label = "Geometric decomposition"
            success_message = "Successfully recovered using geometric decomposition"

        recovered = Network(peers=network.peers, topology=topology)
        if detect_partition(recovered).is_partitioned:
            logger.info("%s did not resolve partition", label)
            return PartitionRecovery(False, strategy, recovered, 1, f"{label} did not resolve partition")

        logger.info("%s", success_message)
        return PartitionRecovery(True, strategy, recovered, 1, success_message)

    def get_statistics(self) -> Dict[str, Any]:
        return {
            "supported_strategies": [s.value for s in RecoveryStrategy],
            "platonic_signatures": {
                t.value: {"vertices": v, "edges": e}
                for (v, e), t in PLATONIC_SIGNATURES.items()
            },
            "dual_pairs": {k.value: v.value for k, v in DUAL_OF.items()},
        }
