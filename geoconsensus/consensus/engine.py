"""
Geometric consensus engine.

One invocation runs a single sequential pass:

    INIT -> ITERATING(step) -> CONVERGED | FAILED

The initial state is the per-coordinate mean of the peers that supplied a
state. At each step the current state is pushed through the step's
Ramanujan form to give a candidate. The candidate is accepted when its
similarity graph (one vertex per coordinate, an edge when two coordinates
lie within SIMILARITY_TOLERANCE) is acyclic and the mean peer agreement
exp(-distance) reaches the threshold. A rejected candidate still becomes
the baseline for the next step.

Peer states are carried through the same form sequence as the consensus
state, so agreement at step k compares values in the same frame.

The engine holds only its configuration; concurrent invocations share no
mutable state.
"""

from __future__ import annotations

import hashlib
import logging
import math
import time
from dataclasses import dataclass, field, replace
from itertools import combinations
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from geoconsensus.consensus.config import ConsensusConfig, ConsensusType
from geoconsensus.core.ramanujan import (
    UNIVERSAL_FORMS,
    RamanujanForm,
    apply_form,
    form_for_step,
)
from geoconsensus.core.state_space import DIMENSION, State, distance, mean_state
from geoconsensus.errors import ConvergenceExceeded, InputError
from geoconsensus.graph.cycles import has_cycle
from geoconsensus.graph.structures import Graph

logger = logging.getLogger(__name__)

SIMILARITY_TOLERANCE = 0.1
PROOF_PREFIX = "GeometricConsensus"
PROOF_DIGEST_LENGTH = 16


@dataclass(frozen=True)
class Peer:
    """A participant: unique id, agreement flag and optional state."""
    id: str
    agrees: bool = True
    state: Optional[State] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "agrees": self.agrees,
            "state": list(self.state.values) if self.state is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Peer":
        peer_id = data.get("id", "")
        values = data.get("state")
        state = None
        if values is not None:
            if not isinstance(values, (list, tuple)):
                raise InputError(
                    f"Peer {peer_id!r} state must be a list of {DIMENSION} numbers, "
                    f"got {type(values).__name__}"
                )
            try:
                state = State(tuple(values))
            except (TypeError, ValueError) as exc:
                raise InputError(f"Peer {peer_id!r} has a malformed state: {exc}") from exc
        return cls(
            id=peer_id,
            agrees=bool(data.get("agrees", True)),
            state=state,
        )


@dataclass(frozen=True)
class GeometricProof:
    """
    Deterministic proof of a converged round.

    Renders as GeometricConsensus:{steps}:{a},{b},{c},{d}:{digest}:{type}
    where digest is a truncated SHA-256 of the state coordinates at six
    decimals.
    """
    steps: int
    form: RamanujanForm
    digest: str
    type: ConsensusType

    @classmethod
    def build(cls, steps: int, form: RamanujanForm, state: State, consensus_type: ConsensusType) -> "GeometricProof":
        canonical = ",".join(f"{v:.6f}" for v in state.values)
        digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:PROOF_DIGEST_LENGTH]
        return cls(steps=steps, form=form, digest=digest, type=consensus_type)

    def __str__(self) -> str:
        return f"{PROOF_PREFIX}:{self.steps}:{self.form}:{self.digest}:{self.type.value}"


@dataclass
class StepTrace:
    step: int
    form: RamanujanForm
    acyclic: bool
    agreement: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step,
            "form": list(self.form),
            "acyclic": self.acyclic,
            "agreement": self.agreement,
        }


@dataclass
class ConsensusResult:
    """Outcome of a converged consensus round."""
    valid: bool
    steps: int
    state: State
    proof: GeometricProof
    type: ConsensusType
    agreement: float
    execution_time_ms: float
    trace: List[StepTrace] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "steps": self.steps,
            "state": list(self.state.values),
            "proof": str(self.proof),
            "type": self.type.value,
            "agreement": self.agreement,
            "execution_time_ms": self.execution_time_ms,
            "trace": [t.to_dict() for t in self.trace],
        }


def similarity_graph(values: Sequence[float], tolerance: float = SIMILARITY_TOLERANCE) -> Graph:
    """Vertices dim_0..dim_6; an edge joins coordinates closer than tolerance."""
    vertices = [f"dim_{i}" for i in range(len(values))]
    edges = [
        (vertices[i], vertices[j])
        for i, j in combinations(range(len(values)), 2)
        if abs(values[i] - values[j]) < tolerance
    ]
    return Graph(vertices, edges)


def peer_agreement(candidate: Sequence[float], frames: Sequence[Sequence[float]]) -> float:
    """Mean exp(-distance) between candidate and each peer frame; 0 with no peers."""
    if not frames:
        return 0.0
    return sum(math.exp(-distance(candidate, f)) for f in frames) / len(frames)


def validate_peers(peers: Sequence[Peer]) -> None:
    """
    Raises:
        InputError: If peers is empty, or an id is missing or repeated
    """
    if not peers:
        raise InputError("At least one peer is required")
    seen = set()
    for i, peer in enumerate(peers):
        if not isinstance(peer, Peer):
            raise InputError(f"Peer {i} is not a Peer: {peer!r}")
        if not isinstance(peer.id, str) or not peer.id:
            raise InputError(f"Peer {i} has no id")
        if peer.id in seen:
            raise InputError(f"Duplicate peer id: {peer.id}")
        seen.add(peer.id)


class ConsensusEngine:
    """
    Bounded-step geometric consensus.

    Example:
        engine = ConsensusEngine(ConsensusConfig(type=ConsensusType.CUBE))
        result = asyncio.run(engine.achieve_consensus(peers))
    """

    def __init__(self, config: Optional[ConsensusConfig] = None):
        config = config or ConsensusConfig()
        config.validate()
        self._config = config
        self._warn_timeout()

    def _warn_timeout(self) -> None:
        if self._config.timeout_ms is not None:
            # TODO: enforce timeout_ms once the loop can be cancelled between steps
            logger.warning(
                "timeout_ms=%s is accepted but not enforced; wrap the call to impose a deadline",
                self._config.timeout_ms,
            )

    def get_config(self) -> ConsensusConfig:
        return self._config

    def update_config(self, **changes: Any) -> ConsensusConfig:
        """Replace config fields; the new config is validated before it is applied."""
        if "type" in changes:
            changes["type"] = ConsensusType.parse(changes["type"])
        config = replace(self._config, **changes)
        config.validate()
        self._config = config
        self._warn_timeout()
        return config

    def get_statistics(self) -> Dict[str, Any]:
        return {
            "type": self._config.type.value,
            "max_steps": self._config.max_steps,
            "threshold": self._config.effective_threshold,
            "canonical_threshold": self._config.canonical_threshold,
            "available_forms": len(UNIVERSAL_FORMS),
            "dimension": DIMENSION,
        }

    @staticmethod
    def initial_state(peers: Sequence[Peer]) -> State:
        """Per-coordinate mean of the supplied peer states (zeros if none)."""
        return mean_state([p.state for p in peers if p.state is not None])

    def run(self, peers: Sequence[Peer]) -> ConsensusResult:
        """
        Run one consensus round synchronously.

        Peer states are pushed through the same form as the candidate, so
        agreement is measured after quantization. Peers whose coordinates
        fall into the same quantization cells (for example all-0.0 and
        all-0.08) are indistinguishable and reach agreement 1.0 even though
        their raw distance is not zero.

        Raises:
            InputError: If peers are invalid
            ConvergenceExceeded: If max_steps pass without convergence
        """
        validate_peers(peers)
        config = self._config
        threshold = config.effective_threshold
        start = time.perf_counter()

        current = self.initial_state(peers).values
        frames: List[Tuple[float, ...]] = [p.state.values for p in peers if p.state is not None]
        trace: List[StepTrace] = []

        logger.debug(
            "Consensus round: %d peers (%d with state), type=%s, threshold=%.4f",
            len(peers), len(frames), config.type.value, threshold,
        )

        for step in range(1, config.max_steps + 1):
            form = form_for_step(step)
            candidate = apply_form(current, form)
            frames = [apply_form(f, form) for f in frames]

            acyclic = not has_cycle(similarity_graph(candidate))
            agreement = peer_agreement(candidate, frames)
            trace.append(StepTrace(step, form, acyclic, agreement))
            logger.debug("step=%d form=(%s) acyclic=%s agreement=%.6f", step, form, acyclic, agreement)

            if acyclic and agreement >= threshold:
                state = State(candidate)
                elapsed = (time.perf_counter() - start) * 1000
                logger.info("Consensus reached at step %d (agreement=%.4f)", step, agreement)
                return ConsensusResult(
                    valid=True,
                    steps=step,
                    state=state,
                    proof=GeometricProof.build(step, form, state, config.type),
                    type=config.type,
                    agreement=agreement,
                    execution_time_ms=elapsed,
                    trace=trace,
                )

            current = candidate

        elapsed = (time.perf_counter() - start) * 1000
        logger.info("Consensus failed after %d steps", config.max_steps)
        raise ConvergenceExceeded(
            f"Consensus not reached within {config.max_steps} steps",
            elapsed_time_ms=elapsed,
            steps=config.max_steps,
            consensus_type=config.type.value,
        )

    async def achieve_consensus(self, peers: Sequence[Peer]) -> ConsensusResult:
        """Async entry point; the body is CPU-bound and does not await I/O."""
        return self.run(peers)
