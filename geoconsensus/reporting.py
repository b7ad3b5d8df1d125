"""
Append-only JSONL run log for consensus and partition results.

Each record is one compact JSON object per line:

    {"schema_version": "1.0.0", "timestamp": "...Z", "kind": "consensus", "payload": {...}}

Records are flushed as they are written. The core never writes logs itself;
the CLI (or any caller) passes result.to_dict() payloads in.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, TextIO, Union

SCHEMA_VERSION = "1.0.0"
RECORD_KINDS = ("consensus", "consensus_failure", "partition", "recovery", "analysis")


class RunLogWriter:
    """Writes run records to a JSONL file, creating parent directories as needed."""

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file: Optional[TextIO] = self._path.open("a", encoding="utf-8")

    @property
    def path(self) -> Path:
        return self._path

    @property
    def closed(self) -> bool:
        return self._file is None

    def record(self, kind: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Append one record and return it."""
        if self._file is None:
            raise ValueError("Cannot write to a closed RunLogWriter")
        if kind not in RECORD_KINDS:
            raise ValueError(f"Unknown record kind {kind!r}")
        entry = {
            "schema_version": SCHEMA_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "kind": kind,
            "payload": payload,
        }
        self._file.write(json.dumps(entry, separators=(",", ":"), ensure_ascii=False, default=str) + "\n")
        self._file.flush()
        return entry

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "RunLogWriter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def read_run_log(path: Union[str, Path]):
    """Parse every record of a run log, in write order."""
    with open(path, "r", encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]
