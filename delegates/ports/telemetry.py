"""Telemetry Port Interface.

Contract: log structured events, one call per event, fields as keyword arguments.
"""

from __future__ import annotations

from typing import Any, Protocol


class Telemetry(Protocol):
    def log(self, event: str, **fields: Any) -> None: ...
