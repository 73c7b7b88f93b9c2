import io
import json
from pathlib import Path

from delegates.cli.demo import build_parser, main


def _main(argv, environ=None):
    out = io.StringIO()
    code = main(argv, out=out, environ=environ or {})
    return code, out.getvalue()


def test_build_parser():
    p = build_parser()
    assert p.prog == "delegates-demo"
    args = p.parse_args(
        [
            "all",
            "--config",
            "cfg.json",
            "--set",
            "KEY=VALUE",
            "--strict",
            "--trace",
            "trace.jsonl",
            "--log-level",
            "DEBUG",
        ]
    )
    assert args.command == "all"
    assert args.config == Path("cfg.json")
    assert args.config_overrides == ["KEY=VALUE"]
    assert args.strict is True
    assert args.trace == Path("trace.jsonl")
    assert args.log_level == "DEBUG"


def test_events_command():
    code, output = _main(["events"])
    assert code == 0
    assert output.splitlines()[0] == "Named handler received: Hello from custom event!"


def test_delegates_command_strict():
    code, output = _main(["delegates", "--strict"])
    assert code == 0
    assert output.splitlines()[-1] == "Multicast return value: 6"


def test_all_runs_sections_separated_by_blank_line():
    code, output = _main(["all"])
    assert code == 0
    lines = output.splitlines()
    assert lines[0] == "Custom delegate: 5"
    split = lines.index("Multicast return value: 6")
    assert lines[split + 1] == ""
    assert lines[split + 2] == "Named handler received: Hello from custom event!"


def test_all_respects_sections_from_environment():
    code, output = _main(["all"], environ={"DELEGATES_SECTIONS": "events"})
    assert code == 0
    assert "Custom delegate: 5" not in output
    assert "StandardNotify event triggered." in output


def test_config_file_layer(tmp_path):
    cfg = tmp_path / "cfg.json"
    cfg.write_text(json.dumps({"sections": ["delegates"]}))
    code, output = _main(["all", "--config", str(cfg)])
    assert code == 0
    assert "Named handler received" not in output


def test_invalid_override_exits_with_2(capsys):
    code, output = _main(["events", "--set", "log_level=LOUD"])
    assert code == 2
    assert output == ""
    assert "Configuration error" in capsys.readouterr().err


def test_malformed_override_exits_with_2():
    code, _ = _main(["events", "--set", "no-equals-sign"])
    assert code == 2


def test_unknown_environment_key_exits_with_2():
    code, _ = _main(["events"], environ={"DELEGATES_BOGUS": "1"})
    assert code == 2


def test_trace_records_config_and_steps(tmp_path):
    trace = tmp_path / "runs" / "trace.jsonl"
    code, _ = _main(["events", "--trace", str(trace)])
    assert code == 0

    records = [json.loads(line) for line in trace.read_text(encoding="utf-8").splitlines()]
    events = [r["event"] for r in records]
    assert events[0] == "config_resolved"
    assert events[1] == "cli_invocation"
    assert events[-1] == "cli_finished"
    assert events.count("demo_step") == 4
    assert [r["seq"] for r in records] == list(range(1, len(records) + 1))
    assert len({r["run_id"] for r in records}) == 1
    assert records[0]["config"]["trace"]["path"] == str(trace)


def test_invalid_config_still_reaches_the_trace(tmp_path):
    trace = tmp_path / "trace.jsonl"
    code, output = _main(["events", "--trace", str(trace), "--set", "log_level=LOUD"])
    assert code == 2
    assert output == ""

    records = [json.loads(line) for line in trace.read_text(encoding="utf-8").splitlines()]
    assert [r["event"] for r in records] == ["config_validation_error"]
    assert records[0]["run_id"] == "invalid"
    assert records[0]["errors"][0]["path"] == "log_level"


def test_invalid_config_without_trace_writes_nothing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    code, _ = _main(["events", "--set", "log_level=LOUD"])
    assert code == 2
    assert list(tmp_path.iterdir()) == []


def test_list_override_from_command_line():
    code, output = _main(["all", "--set", "sections=events"])
    assert code == 0
    assert "Custom delegate: 5" not in output
    assert output.splitlines()[0] == "Named handler received: Hello from custom event!"
