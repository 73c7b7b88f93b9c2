"""In-process Telemetry adapters: one that discards, one that buffers."""

from __future__ import annotations

from typing import Any

from delegates.ports.telemetry import Telemetry


class NullTelemetry:
    """Used when no trace sink is configured."""

    def log(self, event: str, **fields: Any) -> None:
        return None


class MemoryTelemetry:
    """
    Buffers events in order. The CLI resolves configuration before it knows
    where the trace goes, so config events are buffered and replayed.
    """

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def log(self, event: str, **fields: Any) -> None:
        self.events.append((event, dict(fields)))

    def replay(self, into: Telemetry) -> None:
        for event, fields in self.events:
            into.log(event, **fields)
        self.events.clear()
