"""delegates-demo CLI entrypoint.

Subcommands: delegates, events, all (runs the configured sections in order).

Configuration layers, later wins: defaults, --config JSON file,
DELEGATES_* environment variables, --set KEY=VALUE and the dedicated flags.
Demo text goes to stdout; logging goes to stderr; an optional JSONL trace
records each demo step.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, TextIO

from delegates.adapters.telemetry.jsonl import JsonlTelemetry
from delegates.adapters.telemetry.memory import MemoryTelemetry, NullTelemetry
from delegates.config.config_resolver import (
    ConfigLoader,
    env_layer,
    load_file_layer,
    parse_overrides,
    set_dotted,
)
from delegates.config.configs import DemoConfig, ResolvedConfig
from delegates.demos.delegates_demo import run_delegates_demo
from delegates.demos.events_demo import run_events_demo
from delegates.errors.errors import ConfigurationError
from delegates.ports.telemetry import Telemetry

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s: %(message)s"

Runner = Callable[[TextIO, DemoConfig, Telemetry], None]

RUNNERS: dict[str, Runner] = {
    "delegates": lambda out, cfg, tel: run_delegates_demo(
        out, strict=cfg.strict_types, telemetry=tel
    ),
    "events": lambda out, cfg, tel: run_events_demo(out, telemetry=tel),
}


def build_parser() -> argparse.ArgumentParser:
    """
    Return the top-level CLI argument parser.
    """
    p = argparse.ArgumentParser(prog="delegates-demo")
    sub = p.add_subparsers(dest="command", required=True)

    def add_common(sp: argparse.ArgumentParser) -> None:
        """Add arguments shared across all subcommands."""
        sp.add_argument("--config", type=Path, required=False, help="Path to a JSON config file")
        sp.add_argument(
            "--set",
            dest="config_overrides",
            action="append",
            default=[],
            metavar="KEY=VALUE",
            help="Override a config entry (may be repeated)",
        )
        sp.add_argument("--strict", action="store_true", help="Type-check delegate arguments")
        sp.add_argument("--trace", type=Path, help="Write a JSONL trace of demo steps")
        sp.add_argument(
            "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level"
        )

    for name, help_text in (
        ("delegates", "Delegate types, multicast and generic delegates"),
        ("events", "Publisher/subscriber events"),
        ("all", "Every configured section"),
    ):
        add_common(sub.add_parser(name, help=help_text))
    return p


def resolve_config(
    args: argparse.Namespace, environ: Mapping[str, str], telemetry: Telemetry
) -> ResolvedConfig:
    """Build the config layers from parsed arguments and resolve them."""
    file_cfg = load_file_layer(args.config) if args.config else None
    cli_overrides: dict[str, Any] = parse_overrides(args.config_overrides)
    # dedicated flags beat --set
    if args.strict:
        set_dotted(cli_overrides, "strict_types", True)
    if args.trace is not None:
        set_dotted(cli_overrides, "trace.path", str(args.trace))
    if args.log_level:
        set_dotted(cli_overrides, "log_level", args.log_level)

    return ConfigLoader(telemetry).resolve(
        file_cfg=file_cfg,
        env_cfg=env_layer(environ),
        cli_overrides=cli_overrides,
    )


def build_telemetry(resolved: ResolvedConfig) -> Telemetry:
    path = resolved.config.trace.path
    if path is None:
        return NullTelemetry()
    return JsonlTelemetry(run_id=resolved.config_hash[:12], sink_path=path)


def main(
    argv: Optional[list[str]] = None,
    *,
    out: Optional[TextIO] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """CLI entrypoint wrapper compatible with setuptools scripts."""
    parser = build_parser()
    args = parser.parse_args(argv)
    out = out if out is not None else sys.stdout
    environ = environ if environ is not None else os.environ

    # config events are buffered until the trace sink is known
    buffered = MemoryTelemetry()
    try:
        resolved = resolve_config(args, environ, buffered)
    except ConfigurationError as e:
        # a rejected config has no hash; --trace still gets the validation record
        if args.trace is not None:
            buffered.replay(JsonlTelemetry(run_id="invalid", sink_path=args.trace))
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    config = resolved.config
    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)
    telemetry = build_telemetry(resolved)
    buffered.replay(telemetry)

    sections = list(config.sections) if args.command == "all" else [args.command]
    telemetry.log("cli_invocation", command=args.command, sections=sections)
    for index, section in enumerate(sections):
        if index:
            print(file=out)
        RUNNERS[section](out, config, telemetry)
    telemetry.log("cli_finished", command=args.command)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
