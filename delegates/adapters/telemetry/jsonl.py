"""JSON Lines Telemetry adapter.

Deterministic implementation of the Telemetry port: one JSON object per
line, keys sorted, records numbered by a per-sink sequence instead of a
wall-clock timestamp.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import orjson


class JsonlTelemetry:
    def __init__(self, run_id: str, sink_path: Path) -> None:
        self._run_id = str(run_id)
        self._sink_path = sink_path if isinstance(sink_path, Path) else Path(sink_path)
        self._seq = 0

    @property
    def sink_path(self) -> Path:
        return self._sink_path

    def log(self, event: str, **fields: Any) -> None:
        self._seq += 1
        self._write_record({**fields, "event": event, "seq": self._seq, "run_id": self._run_id})

    def _write_record(self, record: Mapping[str, Any]) -> None:
        line = orjson.dumps(record, default=str, option=orjson.OPT_SORT_KEYS)
        self._sink_path.parent.mkdir(parents=True, exist_ok=True)
        with self._sink_path.open("ab") as handle:
            handle.write(line + b"\n")
