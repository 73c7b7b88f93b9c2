import hashlib
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence

from pydantic import ValidationError

from ..errors.errors import ConfigurationError
from ..ports.telemetry import Telemetry
from .configs import DemoConfig, ResolvedConfig

"""
Purpose:
    - Merge configuration layers (defaults < file < env < cli)
    - Validate through the DemoConfig schema
    - Hash the canonical result
"""

logger = logging.getLogger(__name__)

ENV_PREFIX = "DELEGATES_"
ENV_NESTING = "__"


# --- layer helpers ---


def merge_layers(base: Mapping[str, Any], layer: Mapping[str, Any]) -> dict[str, Any]:
    """Overlay ``layer`` on ``base``; sections present in both merge key by key."""
    merged = dict(base)
    for key, value in layer.items():
        below = merged.get(key)
        if isinstance(below, Mapping) and isinstance(value, Mapping):
            value = merge_layers(below, value)
        merged[key] = value
    return merged


def set_dotted(tree: dict[str, Any], key: str, value: Any) -> None:
    """Store ``value`` under a dotted config key such as ``trace.path``."""
    parts = [part.strip() for part in key.split(".")]
    if not all(parts):
        raise ValueError(f"Malformed config key {key!r}")
    *sections, leaf = parts
    node = tree
    for section in sections:
        node = node.setdefault(section, {})
        if not isinstance(node, dict):
            raise ValueError(f"'{key}' conflicts with the value already set for '{section}'")
    if isinstance(node.get(leaf), dict):
        raise ValueError(f"'{key}' would replace the whole '{leaf}' section")
    node[leaf] = value


def schema_errors(error: ValidationError) -> list[dict[str, str]]:
    """Flatten a pydantic error into records keyed by dotted config path."""
    return [
        {
            "path": ".".join(str(loc) for loc in err["loc"]),
            "message": err["msg"],
            "error_type": err["type"],
        }
        for err in error.errors()
    ]


class ConfigLoader:
    def __init__(self, telemetry: Telemetry) -> None:
        self.telemetry = telemetry

    def resolve(
        self,
        defaults: Optional[Mapping[str, Any]] = None,
        file_cfg: Optional[Mapping[str, Any]] = None,
        env_cfg: Optional[Mapping[str, Any]] = None,
        cli_overrides: Optional[Mapping[str, Any]] = None,
    ) -> ResolvedConfig:
        """
        Apply layers in order of precedence, later layers win:
        defaults, file, environment, command line.
        Empty or missing layers are skipped.
        """
        config: Mapping[str, Any] = (
            DemoConfig().model_dump(mode="json") if defaults is None else dict(defaults)
        )
        applied = ["defaults"]
        for name, layer in (("file", file_cfg), ("env", env_cfg), ("cli", cli_overrides)):
            if layer:
                config = merge_layers(config, layer)
                applied.append(name)

        try:
            validated = DemoConfig.model_validate(config)
        except ValidationError as e:
            errors = schema_errors(e)
            self.telemetry.log(
                event="config_validation_error",
                layer="schema",
                layers=applied,
                errors=errors,
            )
            first = errors[0]
            raise ConfigurationError(
                f"Invalid value for '{first['path']}': {first['message']}",
                field=first["path"],
                component="config",
            ) from e

        config_hash = self.compute_hash(validated.model_dump(mode="json"))
        logger.debug(f"Config resolved from {'+'.join(applied)} ({config_hash[:12]})")
        self.telemetry.log(
            event="config_resolved",
            config_hash=config_hash,
            layers=applied,
            config=validated.model_dump(mode="json"),
        )
        return ResolvedConfig(config=validated, config_hash=config_hash, layers=tuple(applied))

    def _sort_mapping(self, obj: Any) -> Any:
        if isinstance(obj, Mapping):
            return {k: self._sort_mapping(obj[k]) for k in sorted(obj)}
        if isinstance(obj, Sequence) and not isinstance(obj, (str, bytes, bytearray)):
            return [self._sort_mapping(item) for item in obj]
        return obj

    def compute_hash(self, cfg: Mapping[str, Any]) -> str:
        canonical = self._sort_mapping(cfg)
        payload = json.dumps(canonical, separators=(",", ":"), ensure_ascii=True)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()


# --- layer builders ---


def load_file_layer(path: Path) -> dict[str, Any]:
    """Parse a JSON config file; it must hold an object."""
    try:
        loaded = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            f"Cannot read config file: {e}", field="config", value=path
        ) from e
    if not isinstance(loaded, dict):
        raise ConfigurationError(
            "Config file must contain a JSON object", field="config", value=path
        )
    return loaded


def env_layer(environ: Mapping[str, str], prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """
    Collect prefixed environment variables into a nested dict.
    DELEGATES_TRACE__PATH=/tmp/t.jsonl -> {"trace": {"path": "/tmp/t.jsonl"}}
    """
    tree: dict[str, Any] = {}
    for key in sorted(environ):
        if not key.startswith(prefix):
            continue
        dotted = key[len(prefix) :].lower().replace(ENV_NESTING, ".")
        try:
            set_dotted(tree, dotted, environ[key])
        except ValueError as e:
            raise ConfigurationError(str(e), field=key) from e
    return tree


def parse_overrides(pairs: Iterable[str]) -> dict[str, Any]:
    """Expand ``KEY=VALUE`` pairs (dotted keys allowed) into a nested dict."""
    overrides: dict[str, Any] = {}
    for item in pairs:
        key, sep, value = item.partition("=")
        if sep == "":
            raise ConfigurationError(f"--set requires KEY=VALUE format (got {item!r})", field="set")
        try:
            set_dotted(overrides, key, value)
        except ValueError as e:
            raise ConfigurationError(str(e), field=key) from e
    return overrides
