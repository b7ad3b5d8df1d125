"""
geoconsensus - bounded-step geometric consensus with graph validity gating
and partition detection/recovery.

Layers:
- core: 7-dimensional state space and the Ramanujan form sequence
- graph: simple graphs, cycle detection, chromatic and Tutte polynomials
- consensus: configuration and the consensus engine
- topology: Betti-number connectivity and partition recovery

All core operations are in-memory computations over caller-supplied
peers and graphs; transport and storage belong to outer layers.
"""

from geoconsensus.consensus import (
    ConsensusConfig,
    ConsensusEngine,
    ConsensusResult,
    ConsensusType,
    Peer,
)
from geoconsensus.core import State, create_state
from geoconsensus.errors import (
    ConfigurationError,
    ConvergenceExceeded,
    DimensionMismatch,
    GeoConsensusError,
    InputError,
    OutOfRangeError,
    SizeLimitExceeded,
    ZeroNormError,
)
from geoconsensus.graph import Graph
from geoconsensus.topology import (
    Network,
    PartitionDetector,
    PartitionInfo,
    PartitionRecovery,
    RecoveryStrategy,
)

__version__ = "0.1.0"

__all__ = [
    "ConsensusConfig",
    "ConsensusEngine",
    "ConsensusResult",
    "ConsensusType",
    "Peer",
    "State",
    "create_state",
    "ConfigurationError",
    "ConvergenceExceeded",
    "DimensionMismatch",
    "GeoConsensusError",
    "InputError",
    "OutOfRangeError",
    "SizeLimitExceeded",
    "ZeroNormError",
    "Graph",
    "Network",
    "PartitionDetector",
    "PartitionInfo",
    "PartitionRecovery",
    "RecoveryStrategy",
]
