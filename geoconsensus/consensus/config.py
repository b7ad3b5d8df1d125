"""
Consensus configuration.

The consensus type names a Platonic solid whose canonical agreement
threshold is used when no explicit threshold is configured:

    TETRAHEDRON  1.0     (unanimous)
    CUBE         0.5     (majority)
    OCTAHEDRON   0.8333  (supermajority)

Configs can be built directly, from a mapping, from a YAML file or from
GEOCONSENSUS_* environment variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from geoconsensus.core.ramanujan import MAX_STEPS
from geoconsensus.errors import ConfigurationError

logger = logging.getLogger(__name__)

THRESHOLD_TOLERANCE = 0.01


class ConsensusType(Enum):
    """Geometric consensus types."""
    TETRAHEDRON = "TETRAHEDRON"
    CUBE = "CUBE"
    OCTAHEDRON = "OCTAHEDRON"

    @classmethod
    def parse(cls, value: Union[str, "ConsensusType"]) -> "ConsensusType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            valid = ", ".join(t.value for t in cls)
            raise ConfigurationError(f"Invalid consensus type {value!r}; expected one of {valid}")


CANONICAL_THRESHOLDS: Dict[ConsensusType, float] = {
    ConsensusType.TETRAHEDRON: 1.0,
    ConsensusType.CUBE: 0.5,
    ConsensusType.OCTAHEDRON: 0.8333,
}


@dataclass(frozen=True)
class ConsensusConfig:
    """
    Configuration for a ConsensusEngine.

    Attributes:
        type: Consensus type
        max_steps: Iteration bound, at most MAX_STEPS
        threshold: Required agreement in [0, 1]; None uses the canonical
            threshold of the type
        timeout_ms: Accepted for compatibility; the loop does not enforce it
    """
    type: ConsensusType = ConsensusType.TETRAHEDRON
    max_steps: int = MAX_STEPS
    threshold: Optional[float] = None
    timeout_ms: Optional[float] = None

    @property
    def canonical_threshold(self) -> float:
        return CANONICAL_THRESHOLDS[self.type]

    @property
    def effective_threshold(self) -> float:
        return self.canonical_threshold if self.threshold is None else float(self.threshold)

    def validate(self) -> None:
        """
        Raise ConfigurationError on invalid settings.

        A threshold that differs from the canonical value of the type by
        more than THRESHOLD_TOLERANCE is allowed but logged as a warning.
        """
        errors = []

        if not isinstance(self.type, ConsensusType):
            errors.append(f"type must be a ConsensusType, got {self.type!r}")

        if isinstance(self.max_steps, bool) or not isinstance(self.max_steps, int):
            errors.append(f"max_steps must be an integer, got {self.max_steps!r}")
        elif not 1 <= self.max_steps <= MAX_STEPS:
            errors.append(f"max_steps must be in [1, {MAX_STEPS}], got {self.max_steps}")

        if self.threshold is not None and not 0.0 <= self.threshold <= 1.0:
            errors.append(f"threshold must be in [0, 1], got {self.threshold}")

        if self.timeout_ms is not None and self.timeout_ms <= 0:
            errors.append(f"timeout_ms must be >0, got {self.timeout_ms}")

        if errors:
            raise ConfigurationError(
                "Invalid consensus configuration:\n" + "\n".join(f"  - {e}" for e in errors)
            )

        if abs(self.effective_threshold - self.canonical_threshold) > THRESHOLD_TOLERANCE:
            logger.warning(
                "Threshold %.4f differs from canonical %.4f for %s",
                self.effective_threshold, self.canonical_threshold, self.type.value,
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "max_steps": self.max_steps,
            "threshold": self.effective_threshold,
            "timeout_ms": self.timeout_ms,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConsensusConfig":
        """Build a config from a plain mapping; unknown keys are rejected."""
        allowed = {"type", "max_steps", "threshold", "timeout_ms"}
        unknown = set(data) - allowed
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")

        kwargs: Dict[str, Any] = {}
        if "type" in data:
            kwargs["type"] = ConsensusType.parse(data["type"])
        try:
            if data.get("max_steps") is not None:
                kwargs["max_steps"] = int(data["max_steps"])
            if data.get("threshold") is not None:
                kwargs["threshold"] = float(data["threshold"])
            if data.get("timeout_ms") is not None:
                kwargs["timeout_ms"] = float(data["timeout_ms"])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Malformed configuration value: {e}") from e
        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, filepath: Union[str, Path]) -> "ConsensusConfig":
        """Load a config from a YAML file, optionally nested under a 'consensus' key."""
        with open(filepath, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Expected a mapping in {filepath}")
        if "consensus" in data:
            data = data["consensus"] or {}
        return cls.from_dict(data)

    @classmethod
    def from_env(cls, prefix: str = "GEOCONSENSUS_") -> "ConsensusConfig":
        """
        Load configuration from environment variables.

        Environment variables:
            GEOCONSENSUS_TYPE (default TETRAHEDRON)
            GEOCONSENSUS_MAX_STEPS (default 14)
            GEOCONSENSUS_THRESHOLD (default: canonical for the type)
            GEOCONSENSUS_TIMEOUT_MS (default: unset)
        """
        return cls.from_dict({
            "type": os.getenv(f"{prefix}TYPE", ConsensusType.TETRAHEDRON.value),
            "max_steps": os.getenv(f"{prefix}MAX_STEPS", str(MAX_STEPS)),
            "threshold": os.getenv(f"{prefix}THRESHOLD") or None,
            "timeout_ms": os.getenv(f"{prefix}TIMEOUT_MS") or None,
        })
