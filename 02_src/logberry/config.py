"""Logberry settings resolved from environment variables."""

import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

ROOT_MODES = ("immediate", "background")
OUTPUTS = ("text", "json", "none")
STREAMS = ("stdout", "stderr")

DEFAULT_BUFFER = 256


def default_program() -> str:
    """Return the name of the running program."""
    if sys.argv and sys.argv[0]:
        return Path(sys.argv[0]).name
    return "python"


@dataclass(frozen=True)
class Settings:
    """Configuration of the process-wide default root."""

    root_mode: str = "immediate"
    buffer: int = DEFAULT_BUFFER
    output: str = "text"
    stream: str = "stdout"
    program: str = field(default_factory=default_program)


def _choice(env: Mapping[str, str], name: str, choices: tuple[str, ...], default: str) -> str:
    value = env.get(name, "").strip().lower() or default
    if value not in choices:
        raise ValueError(f"{name} must be one of {', '.join(choices)}, got {value!r}")
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from LOGBERRY_* environment variables."""
    env = os.environ if environ is None else environ

    raw_buffer = env.get("LOGBERRY_BUFFER", "").strip()
    try:
        buffer = int(raw_buffer) if raw_buffer else DEFAULT_BUFFER
    except ValueError:
        raise ValueError(f"LOGBERRY_BUFFER must be an integer, got {raw_buffer!r}")
    if buffer < 0:
        raise ValueError(f"LOGBERRY_BUFFER must not be negative, got {buffer}")

    return Settings(
        root_mode=_choice(env, "LOGBERRY_ROOT", ROOT_MODES, "immediate"),
        buffer=buffer,
        output=_choice(env, "LOGBERRY_OUTPUT", OUTPUTS, "text"),
        stream=_choice(env, "LOGBERRY_STREAM", STREAMS, "stdout"),
        program=env.get("LOGBERRY_PROGRAM", "").strip() or default_program(),
    )
