"""
Topology layer: Betti-number connectivity analysis and partition
detection/recovery for peer topologies.
"""

from geoconsensus.topology.betti import (
    BettiNumbers,
    ConnectivityMetrics,
    betti_numbers,
    connectivity_metrics,
    euler_characteristic,
    find_connected_components,
    triangle_count,
    validate_betti_numbers,
)
from geoconsensus.topology.partition import (
    Network,
    PartitionDetector,
    PartitionInfo,
    PartitionRecovery,
    RecoveryStrategy,
    classify_topology,
    detect_partition,
    dual_template,
)

__all__ = [
    "BettiNumbers",
    "ConnectivityMetrics",
    "betti_numbers",
    "connectivity_metrics",
    "euler_characteristic",
    "find_connected_components",
    "triangle_count",
    "validate_betti_numbers",
    "Network",
    "PartitionDetector",
    "PartitionInfo",
    "PartitionRecovery",
    "RecoveryStrategy",
    "classify_topology",
    "detect_partition",
    "dual_template",
]
