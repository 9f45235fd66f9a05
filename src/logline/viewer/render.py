"""Human-friendly rendering of JSON log lines."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Tuple

from rich.console import Console
from rich.json import JSON
from rich.text import Text

from ..config import Settings
from ..obs.metrics import LINES_VIEWED
from .timefmt import format_time

TIME_STYLE = "bright_black"
KEY_STYLE = "bold white"
GUTTER = " " * 15
BORDER_MIN_LINES = 4
BORDER_OUTER = (70, 70, 70)
BORDER_INNER = (150, 150, 150)

# level -> (padded label, emoji, style)
LEVELS: Dict[str, Tuple[str, str, str]] = {
    "TRACE": ("TRACE", "🐾 ", "blue"),
    "DEBUG": ("DEBUG", "🦠 ", "green"),
    "INFO": ("INFO ", "ℹ️ ", "default"),
    "WARNING": ("WARN ", "⚠️ ", "yellow"),
    "WARN": ("WARN ", "⚠️ ", "yellow"),
    "ERROR": ("ERR  ", "❌ ", "red"),
    "ERR": ("ERR  ", "❌ ", "red"),
    "CRITICAL": ("CRITICAL", "CRITICAL", "magenta"),
    "FATAL": ("FATAL", "FATAL", "magenta"),
}


def format_level(level: Any, emoji: bool = False) -> Tuple[Text, str]:
    """Return the coloured level label and the style used for the rest of the headline."""
    upper = str(level).upper() if level else "NO LEVEL"
    label, icon, style = LEVELS.get(upper, (upper, upper, "white"))
    return Text(icon if emoji else label, style=style), style


def format_value(value: Any) -> Text:
    """Pretty-print a field value as highlighted, indented JSON."""
    try:
        return JSON.from_data(value, indent=2, ensure_ascii=False).text
    except (TypeError, ValueError):
        return Text(repr(value), style="red")


def _fade(index: int, total: int) -> str:
    # outer -> inner -> outer along the border
    if total <= 1:
        t = 0.0
    else:
        t = 1.0 - abs(2.0 * index / (total - 1) - 1.0)
    r, g, b = (round(o + (i - o) * t) for o, i in zip(BORDER_OUTER, BORDER_INNER))
    return f"rgb({r},{g},{b})"


def add_border(lines: List[Text]) -> List[Text]:
    """Replace the gutter with a faded border when there are enough field lines."""
    if len(lines) < BORDER_MIN_LINES:
        return [Text(GUTTER) + line for line in lines]
    bordered = []
    for index, line in enumerate(lines):
        if index == 0:
            glyph = "     ┌"
        elif index == len(lines) - 1:
            glyph = "     └"
        else:
            glyph = "     │"
        bordered.append(Text(glyph, style=_fade(index, len(lines))) + line)
    return bordered


def render_entry(entry: Dict[str, Any], settings: Settings) -> List[Text]:
    """Render a parsed JSON object: headline first, then one block per remaining field."""
    entry = dict(entry)
    time_value = entry.pop(settings.time_key, None)
    level_value = entry.pop(settings.level_key, None)
    message_value = entry.pop(settings.message_key, None)

    level_text, style = format_level(level_value, settings.emoji)
    headline = Text(" ")
    headline.append(format_time(time_value, settings.time_in, settings.time_out), style=TIME_STYLE)
    headline.append(" ")
    headline.append_text(level_text)
    headline.append(" ")
    headline.append("" if message_value is None else str(message_value), style=style)

    field_lines: List[Text] = []
    for key, value in entry.items():
        value_lines = format_value(value).split("\n")
        first = Text("   ")
        first.append(str(key), style=KEY_STYLE)
        first.append(": ")
        first.append_text(value_lines[0])
        field_lines.append(first)
        for continuation in value_lines[1:]:
            field_lines.append(Text("   ") + continuation)

    return [headline] + add_border(field_lines)


def wants_linebreak(strategy: str, structured: bool) -> bool:
    if strategy == "always":
        return True
    if strategy == "json":
        return structured
    return False


def render_line(line: str, settings: Settings) -> List[Text]:
    """Render one input line; lines that are not JSON objects pass through as-is."""
    try:
        entry = json.loads(line)
    except ValueError:
        entry = None
    structured = isinstance(entry, dict)
    if structured:
        rendered = render_entry(entry, settings)
        LINES_VIEWED.labels(kind="json").inc()
    else:
        rendered = [Text(f"🪵  {line}")]
        LINES_VIEWED.labels(kind="text").inc()
    if wants_linebreak(settings.linebreak, structured):
        rendered.append(Text(""))
    return rendered


def view(lines: Iterable[str], console: Console, settings: Settings) -> int:
    """Render every line from an input stream. Returns the number of lines read."""
    count = 0
    for raw in lines:
        line = raw.rstrip("\r\n")
        for text in render_line(line, settings):
            console.print(text, soft_wrap=True, highlight=False)
        count += 1
    return count
