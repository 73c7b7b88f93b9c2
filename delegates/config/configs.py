from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

"""
Configuration for the demo runner
"""

Section = Literal["delegates", "events"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

DEFAULT_SECTIONS: list[Section] = ["delegates", "events"]


class TraceConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    path: Optional[Path] = Field(default=None, description="JSONL trace sink; off when unset")


class DemoConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    log_level: LogLevel = Field(default="WARNING", description="Root logger level")
    strict_types: bool = Field(default=False, description="isinstance-check delegate arguments")
    sections: list[Section] = Field(
        default_factory=lambda: list(DEFAULT_SECTIONS), description="Sections run by 'all'"
    )
    trace: TraceConfig = Field(default_factory=TraceConfig, description="Trace sink")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("sections", mode="before")
    @classmethod
    def _split_sections(cls, value: Any) -> Any:
        # env vars and --set deliver "delegates,events"
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value


@dataclass(frozen=True)
class ResolvedConfig:
    config: DemoConfig
    config_hash: str
    layers: tuple[str, ...]
