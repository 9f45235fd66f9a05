from __future__ import annotations

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

LINEBREAK_STRATEGIES = ("always", "json", "never")

def _env(key: str, default: str | None = None) -> str | None:
    v = os.getenv(key)
    if v is None or v == "":
        return default
    return v

def _env_bool(key: str, default: bool) -> bool:
    v = _env(key)
    if v is None:
        return default
    return v.lower() in ("true", "1", "yes", "on")

@dataclass(frozen=True)
class Settings:
    # Keys of the three fixed fields in incoming lines
    time_key: str = "timestamp"
    message_key: str = "message"
    level_key: str = "level"

    # Rendering
    linebreak: str = "always"  # always|json|never
    emoji: bool = False
    time_in: str = "RFC3339"
    time_out: str = "%H:%M:%S.%L"  # %L = milliseconds

def load_settings() -> Settings:
    linebreak = (_env("LOGLINE_LINEBREAK", "always") or "always").lower()
    if linebreak not in LINEBREAK_STRATEGIES:
        raise RuntimeError(
            f"LOGLINE_LINEBREAK must be one of {', '.join(LINEBREAK_STRATEGIES)}, got {linebreak!r}."
        )
    return Settings(
        time_key=_env("LOGLINE_TIME_KEY", "timestamp") or "timestamp",
        message_key=_env("LOGLINE_MESSAGE_KEY", "message") or "message",
        level_key=_env("LOGLINE_LEVEL_KEY", "level") or "level",
        linebreak=linebreak,
        emoji=_env_bool("LOGLINE_EMOJI", False),
        time_in=_env("LOGLINE_TIME_IN", "RFC3339") or "RFC3339",
        time_out=_env("LOGLINE_TIME_OUT", "%H:%M:%S.%L") or "%H:%M:%S.%L",
    )
