import json

import pytest
from typer.testing import CliRunner

from logline.main import app

runner = CliRunner()

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("LOGLINE_LINEBREAK", "LOGLINE_EMOJI", "LOGLINE_TIME_KEY", "LOGLINE_MESSAGE_KEY", "LOGLINE_LEVEL_KEY"):
        monkeypatch.delenv(key, raising=False)

def test_emit_command_writes_json_line():
    result = runner.invoke(app, ["emit", "warn", "Database connection is slow.", "-f", "duration_ms=250", "-f", "database=user_db"])
    assert result.exit_code == 0
    record = json.loads(result.stdout)
    assert record["level"] == "WARN"
    assert record["message"] == "Database connection is slow."
    assert record["duration_ms"] == 250
    assert record["database"] == "user_db"

def test_emit_command_parses_json_field_values():
    result = runner.invoke(app, ["emit", "info", "x", "-f", 'meta={"ok": true}', "-f", "flag=false", "-f", "path=/tmp/a=b"])
    assert result.exit_code == 0
    record = json.loads(result.stdout)
    assert record["meta"] == {"ok": True}
    assert record["flag"] is False
    assert record["path"] == "/tmp/a=b"

def test_emit_command_rejects_field_without_equals():
    result = runner.invoke(app, ["emit", "info", "x", "-f", "oops"])
    assert result.exit_code == 2

def test_view_command_renders_stdin():
    line = json.dumps({"timestamp": "2024-05-01T12:00:00.123Z", "level": "error", "message": "boom", "user": "app-user"})
    result = runner.invoke(app, ["view", "--linebreak", "never"], input=line + "\nnot json\n")
    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert lines[0] == " 12:00:00.123 ERR   boom"
    assert lines[1].endswith('   user: "app-user"')
    assert lines[2] == "🪵  not json"

def test_view_command_options_override_settings():
    line = json.dumps({"time": "1756555555123", "msg": "hi", "level": "info"})
    result = runner.invoke(
        app,
        ["view", "-t", "time", "-m", "msg", "--time-in", "UnixMilli", "--time-out", "%H:%M:%S", "--linebreak", "never"],
        input=line + "\n",
    )
    assert result.exit_code == 0
    assert result.stdout.splitlines() == [" 12:05:55 INFO  hi"]

def test_view_command_rejects_unknown_linebreak():
    result = runner.invoke(app, ["view", "--linebreak", "sometimes"], input="")
    assert result.exit_code == 2

def test_version_command():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.stdout.startswith("logline version: ")

def test_emit_command_keeps_non_finite_numbers_as_strings():
    def reject(constant):
        raise ValueError(constant)

    result = runner.invoke(app, ["emit", "info", "x", "-f", "n=1e999", "-f", "m=NaN", "-f", "k=-Infinity", "-f", "r=0.5"])
    assert result.exit_code == 0
    record = json.loads(result.stdout, parse_constant=reject)
    assert record["n"] == "1e999"
    assert record["m"] == "NaN"
    assert record["k"] == "-Infinity"
    assert record["r"] == 0.5

def test_view_command_survives_invalid_utf8():
    data = b'{"level":"info","message":"ok"}\n\xff\xfe bad\n'
    result = runner.invoke(app, ["view", "--linebreak", "never"], input=data)
    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert lines[0].endswith("INFO  ok")
    assert lines[1].startswith("🪵  ")
    assert lines[1].endswith(" bad")
