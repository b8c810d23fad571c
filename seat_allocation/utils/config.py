"""Runtime settings resolved from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


ENV_PREFIX = "SEAT_ALLOCATION_"


def _env(name: str, default: str) -> str:
    return os.environ.get(f"{ENV_PREFIX}{name}", default)


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(f"{ENV_PREFIX}{name}")
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str = "Seat Allocation Engine"
    app_version: str = "1.0.0"
    log_level: str = "INFO"
    output_suffix: str = "_output_file.txt"
    input_encoding: str = "utf-8"
    skip_malformed_commands: bool = True


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; tests override with ``dataclasses.replace``."""
    return Settings(
        log_level=_env("LOG_LEVEL", Settings.log_level),
        output_suffix=_env("OUTPUT_SUFFIX", Settings.output_suffix),
        input_encoding=_env("INPUT_ENCODING", Settings.input_encoding),
        skip_malformed_commands=_env_flag("SKIP_MALFORMED", Settings.skip_malformed_commands),
    )
