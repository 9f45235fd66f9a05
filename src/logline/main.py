from __future__ import annotations

import io
import json
import math
import sys
from dataclasses import replace
from importlib import metadata
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console

from .config import LINEBREAK_STRATEGIES, load_settings
from .obs.metrics import start_metrics_server
from .util.logger import emit as emit_line, get_logger
from .viewer.render import view as render_stream

# Diagnostics go to stderr so they never mix with log lines on stdout
logger = get_logger("logline", stream=sys.stderr)

app = typer.Typer(add_completion=False, help="Structured JSON log lines: write them, read them.")
err_console = Console(stderr=True)

def _finite_float(raw: str) -> float:
    value = float(raw)
    if math.isinf(value):
        raise ValueError(f"out of range: {raw}")
    return value

def _reject_constant(raw: str) -> Any:
    raise ValueError(f"not valid JSON: {raw}")

def _parse_fields(fields: List[str]) -> Dict[str, Any]:
    details: Dict[str, Any] = {}
    for field in fields:
        key, sep, raw = field.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected key=value, got {field!r}", param_hint="--field")
        # NaN and infinities stay strings so the emitted line is strict JSON
        try:
            details[key] = json.loads(raw, parse_float=_finite_float, parse_constant=_reject_constant)
        except ValueError:
            details[key] = raw
    return details

@app.command()
def emit(
    level: str = typer.Argument(..., help="Severity token, upper-cased on output"),
    message: str = typer.Argument(..., help="Human-readable message"),
    field: List[str] = typer.Option([], "--field", "-f", help="Extra field as key=value (value parsed as JSON when possible)"),
):
    """Write one structured log line to stdout."""
    emit_line(level, message, _parse_fields(field))

@app.command()
def view(
    time_key: Optional[str] = typer.Option(None, "--time-key", "-t", help="Name of the time property"),
    message_key: Optional[str] = typer.Option(None, "--message-key", "-m", help="Name of the message property"),
    level_key: Optional[str] = typer.Option(None, "--level-key", "-l", help="Name of the level property"),
    linebreak: Optional[str] = typer.Option(None, "--linebreak", help='"always" | only after "json" | "never"'),
    emoji: Optional[bool] = typer.Option(None, "--emoji/--no-emoji", help="Display levels as emoji instead of text"),
    time_in: Optional[str] = typer.Option(None, "--time-in", help="Input time format: RFC3339, Unix, UnixMilli, UnixMicro or a strptime pattern"),
    time_out: Optional[str] = typer.Option(None, "--time-out", help="Output time format (strftime, %L = milliseconds)"),
    metrics_port: Optional[int] = typer.Option(None, "--metrics-port", help="Expose Prometheus counters on this port"),
):
    """Pretty-print JSON log lines read from stdin."""
    s = load_settings()
    overrides = {
        "time_key": time_key,
        "message_key": message_key,
        "level_key": level_key,
        "linebreak": linebreak.lower() if linebreak else None,
        "emoji": emoji,
        "time_in": time_in,
        "time_out": time_out,
    }
    s = replace(s, **{k: v for k, v in overrides.items() if v is not None})
    if s.linebreak not in LINEBREAK_STRATEGIES:
        raise typer.BadParameter(f"must be one of {', '.join(LINEBREAK_STRATEGIES)}", param_hint="--linebreak")

    if metrics_port:
        start_metrics_server(metrics_port)

    console = Console(soft_wrap=True)
    # Undecodable bytes are replaced instead of aborting the whole stream
    buffer = getattr(sys.stdin, "buffer", None)
    source = io.TextIOWrapper(buffer, encoding="utf-8", errors="replace") if buffer is not None else sys.stdin
    try:
        render_stream(source, console, s)
    except OSError as e:
        err_console.print(f"error reading input: {e}", highlight=False)
        logger.error({"event": "input_read_failed", "error": str(e)})
        raise typer.Exit(code=1)
    finally:
        if source is not sys.stdin:
            source.detach()

@app.command()
def version():
    """Show version information."""
    try:
        v = metadata.version("logline")
    except metadata.PackageNotFoundError:
        v = "dev"
    typer.echo(f"logline version: {v}")

if __name__ == "__main__":
    app()
