"""Reformat time values found in incoming log lines."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

UNIX_FORMATS = ("Unix", "UnixMilli", "UnixMicro")

INTEGER = re.compile(r"[+-]?[0-9]+")
FRACTION = re.compile(r"[0-9]*")
# Seconds fraction of an ISO time; fromisoformat before 3.11 takes only 3 or 6 digits
ISO_FRACTION = re.compile(r"(?<=[0-9]{2}:[0-9]{2}:[0-9]{2})\.([0-9]+)")
DIRECTIVE = re.compile(r"%.")

# Named input formats -> strptime patterns
NAMED_FORMATS = {
    "ANSIC": "%a %b %d %H:%M:%S %Y",
    "UnixDate": "%a %b %d %H:%M:%S %Z %Y",
    "RFC822": "%d %b %y %H:%M %Z",
    "RFC822Z": "%d %b %y %H:%M %z",
    "RFC1123": "%a, %d %b %Y %H:%M:%S %Z",
    "RFC1123Z": "%a, %d %b %Y %H:%M:%S %z",
    "DateTime": "%Y-%m-%d %H:%M:%S",
    "Kitchen": "%I:%M%p",
}


def right_pad(value: str, count: int) -> str:
    """Pad value with zeros on the right up to count, or cut it to count."""
    count = max(count, 0)
    if len(value) >= count:
        return value[:count]
    return value + "0" * (count - len(value))


def _parse_int(value: str) -> int:
    if not INTEGER.fullmatch(value):
        raise ValueError(f"not an integer: {value!r}")
    return int(value)


def parse_unix(fmt: str, value: str) -> datetime:
    """Parse an epoch timestamp. Raises ValueError on malformed input."""
    if fmt == "Unix":
        parts = value.split(".")
        if len(parts) > 2:
            raise ValueError(f"malformed unix timestamp: {value!r}")
        seconds = _parse_int(parts[0])
        nanos = 0
        if len(parts) == 2:
            if not FRACTION.fullmatch(parts[1]):
                raise ValueError(f"malformed unix timestamp: {value!r}")
            nanos = int(right_pad(parts[1], 9))
        return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(microsecond=nanos // 1000)
    if fmt == "UnixMilli":
        ms = _parse_int(value)
        return datetime.fromtimestamp(ms // 1000, tz=timezone.utc).replace(microsecond=(ms % 1000) * 1000)
    if fmt == "UnixMicro":
        us = _parse_int(value)
        return datetime.fromtimestamp(us // 1_000_000, tz=timezone.utc).replace(microsecond=us % 1_000_000)
    raise ValueError(f"unknown unix format: {fmt!r}")


def parse_time(value: str, input_format: str) -> datetime:
    if input_format in UNIX_FORMATS:
        return parse_unix(input_format, value)
    if input_format in ("RFC3339", "RFC3339Nano", "ISO8601"):
        if value.endswith(("Z", "z")):
            value = value[:-1] + "+00:00"
        value = ISO_FRACTION.sub(lambda m: "." + right_pad(m.group(1), 6), value, count=1)
        return datetime.fromisoformat(value)
    return datetime.strptime(value, NAMED_FORMATS.get(input_format, input_format))


def format_time(value: Any, input_format: str, output_format: str) -> str:
    """
    Turn a time value into a prettier time string.

    input_format is RFC3339/ISO8601, Unix, UnixMilli, UnixMicro, one of the
    NAMED_FORMATS or any strptime pattern. output_format is a strftime pattern
    where %L stands for zero-padded milliseconds.

    Naive times are taken as UTC; aware times keep their offset. If parsing
    fails the value is returned unchanged.
    """
    if value is None:
        return ""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return str(value)
    text = str(value)
    try:
        parsed = parse_time(text, input_format)
    except (ValueError, OverflowError, OSError):
        return text
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    millis = f"{parsed.microsecond // 1000:03d}"
    # %%L stays a literal "%L"
    pattern = DIRECTIVE.sub(lambda m: millis if m.group(0) == "%L" else m.group(0), output_format)
    return parsed.strftime(pattern)
