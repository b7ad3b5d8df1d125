#!/usr/bin/env python3
"""
Command line interface for geoconsensus.

Reads YAML inputs, runs the core operations and prints JSON to stdout.
Logging goes to stderr.

Usage:
    python -m geoconsensus consensus --peers peers.yaml --config config/geoconsensus.yaml
    python -m geoconsensus partition --network network.yaml --recover duality
    python -m geoconsensus analyze --graph graph.yaml

Without --config, GEOCONSENSUS_* variables (and a local .env file) supply
the consensus config.

Exit codes:
    0  success
    1  invalid configuration or input
    2  consensus did not converge / partition not recovered
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from geoconsensus.consensus.config import ConsensusConfig, ConsensusType
from geoconsensus.consensus.engine import ConsensusEngine, Peer
from geoconsensus.errors import ConvergenceExceeded, GeoConsensusError, InputError
from geoconsensus.graph.chromatic import chromatic_summary
from geoconsensus.graph.cycles import detect_cycles
from geoconsensus.graph.genus import classify_genus
from geoconsensus.graph.structures import Graph, graph_statistics
from geoconsensus.reporting import RunLogWriter
from geoconsensus.topology.betti import connectivity_metrics, validate_betti_numbers
from geoconsensus.topology.partition import Network, PartitionDetector, RecoveryStrategy

logger = logging.getLogger(__name__)


def load_yaml(path: str) -> Any:
    if not Path(path).exists():
        raise InputError(f"Input file {path} not found")
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def load_peers(path: str) -> List[Peer]:
    data = load_yaml(path)
    if isinstance(data, dict):
        data = data.get("peers")
    if not isinstance(data, list):
        raise InputError(f"Expected a list of peers in {path}")
    for i, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise InputError(f"Peer {i} in {path} is not a mapping")
    return [Peer.from_dict(p) for p in data]


def build_config(args: argparse.Namespace) -> ConsensusConfig:
    config = ConsensusConfig.from_yaml(args.config) if args.config else ConsensusConfig.from_env()
    overrides: Dict[str, Any] = {}
    if args.type:
        overrides["type"] = ConsensusType.parse(args.type)
    if args.max_steps is not None:
        overrides["max_steps"] = args.max_steps
    if args.threshold is not None:
        overrides["threshold"] = args.threshold
    return replace(config, **overrides)


def emit(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, default=str))


def cmd_consensus(args: argparse.Namespace, run_log: Optional[RunLogWriter]) -> int:
    engine = ConsensusEngine(build_config(args))
    peers = load_peers(args.peers)
    try:
        result = engine.run(peers)
    except ConvergenceExceeded as e:
        payload = {
            "valid": False,
            "error": str(e),
            "steps": e.steps,
            "type": e.consensus_type,
            "elapsed_time_ms": e.elapsed_time_ms,
        }
        if run_log:
            run_log.record("consensus_failure", payload)
        emit(payload)
        return 2

    payload = result.to_dict()
    if run_log:
        run_log.record("consensus", payload)
    emit(payload)
    return 0


def cmd_partition(args: argparse.Namespace, run_log: Optional[RunLogWriter]) -> int:
    data = load_yaml(args.network)
    if not isinstance(data, dict):
        raise InputError(f"Expected a network mapping in {args.network}")
    network = Network.from_dict(data)
    detector = PartitionDetector()

    info = detector.detect_partition(network)
    payload: Dict[str, Any] = {"partition": info.to_dict()}
    if run_log:
        run_log.record("partition", info.to_dict())

    status = 0
    if args.recover:
        recovery = detector.recover_from_partition(network, RecoveryStrategy.parse(args.recover))
        payload["recovery"] = recovery.to_dict()
        if run_log:
            run_log.record("recovery", recovery.to_dict())
        status = 0 if recovery.success else 2

    emit(payload)
    return status


def cmd_analyze(args: argparse.Namespace, run_log: Optional[RunLogWriter]) -> int:
    data = load_yaml(args.graph)
    if not isinstance(data, dict):
        raise InputError(f"Expected a graph mapping in {args.graph}")
    graph = Graph.from_dict(data)

    cycles = detect_cycles(graph)

    metrics = connectivity_metrics(graph)
    payload = {
        "statistics": graph_statistics(graph),
        "cycles": cycles.to_dict(),
        "chromatic": chromatic_summary(graph),
        "genus": classify_genus(graph).to_dict(),
        "connectivity": metrics.to_dict(),
        "betti_consistent": validate_betti_numbers(graph, metrics.betti),
    }
    if run_log:
        run_log.record("analysis", payload)
    emit(payload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="geoconsensus",
        description="Geometric consensus and partition analysis",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-jsonl", help="Append run records to this JSONL file")
    sub = parser.add_subparsers(dest="command", required=True)

    consensus = sub.add_parser("consensus", help="Run a consensus round over peer states")
    consensus.add_argument("--peers", required=True, help="YAML file with a list of peers")
    consensus.add_argument("--config", help="YAML consensus config (default: GEOCONSENSUS_* env)")
    consensus.add_argument("--type", choices=[t.value for t in ConsensusType], type=str.upper)
    consensus.add_argument("--max-steps", type=int)
    consensus.add_argument("--threshold", type=float)

    partition = sub.add_parser("partition", help="Detect and optionally recover a partition")
    partition.add_argument("--network", required=True, help="YAML file with peers and topology")
    partition.add_argument("--recover", choices=[s.value for s in RecoveryStrategy])

    analyze = sub.add_parser("analyze", help="Report graph validity and connectivity invariants")
    analyze.add_argument("--graph", required=True, help="YAML file with vertices and edges")

    return parser


COMMANDS = {
    "consensus": cmd_consensus,
    "partition": cmd_partition,
    "analyze": cmd_analyze,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    run_log = RunLogWriter(args.log_jsonl) if args.log_jsonl else None
    try:
        return COMMANDS[args.command](args, run_log)
    except GeoConsensusError as e:
        logger.error("%s", e)
        return 1
    finally:
        if run_log:
            run_log.close()


if __name__ == "__main__":
    sys.exit(main())
