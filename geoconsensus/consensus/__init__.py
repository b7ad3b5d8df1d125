"""
Consensus layer: configuration and the bounded-step geometric engine.
"""

from geoconsensus.consensus.config import (
    CANONICAL_THRESHOLDS,
    ConsensusConfig,
    ConsensusType,
)
from geoconsensus.consensus.engine import (
    SIMILARITY_TOLERANCE,
    ConsensusEngine,
    ConsensusResult,
    GeometricProof,
    Peer,
    StepTrace,
    peer_agreement,
    similarity_graph,
    validate_peers,
)

__all__ = [
    "CANONICAL_THRESHOLDS",
    "ConsensusConfig",
    "ConsensusType",
    "SIMILARITY_TOLERANCE",
    "ConsensusEngine",
    "ConsensusResult",
    "GeometricProof",
    "Peer",
    "StepTrace",
    "peer_agreement",
    "similarity_graph",
    "validate_peers",
]
