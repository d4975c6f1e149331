from __future__ import annotations

import os
from dataclasses import dataclass


def _getenv_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None else value


def _getenv_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _getenv_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return float(value)


@dataclass(frozen=True)
class EngineConfig:
    MATCHDAY_AUTOSAVE_DEBOUNCE_SECONDS: float
    MATCHDAY_AUTOSAVE_GRACE_SECONDS: float
    MATCHDAY_STARTING_LINEUP_SIZE: int
    MATCHDAY_MIN_BENCH_SIZE: int
    MATCHDAY_REGULAR_TIME_MINUTES: int
    MATCHDAY_LOG_LEVEL: str


def load_config() -> EngineConfig:
    debounce = _getenv_float("MATCHDAY_AUTOSAVE_DEBOUNCE_SECONDS", 2.5)
    grace = _getenv_float("MATCHDAY_AUTOSAVE_GRACE_SECONDS", 1.0)
    if debounce <= 0:
        raise ValueError("MATCHDAY_AUTOSAVE_DEBOUNCE_SECONDS must be positive.")
    if grace < 0:
        raise ValueError("MATCHDAY_AUTOSAVE_GRACE_SECONDS cannot be negative.")

    return EngineConfig(
        MATCHDAY_AUTOSAVE_DEBOUNCE_SECONDS=debounce,
        MATCHDAY_AUTOSAVE_GRACE_SECONDS=grace,
        MATCHDAY_STARTING_LINEUP_SIZE=_getenv_int("MATCHDAY_STARTING_LINEUP_SIZE", 11),
        MATCHDAY_MIN_BENCH_SIZE=_getenv_int("MATCHDAY_MIN_BENCH_SIZE", 7),
        MATCHDAY_REGULAR_TIME_MINUTES=_getenv_int("MATCHDAY_REGULAR_TIME_MINUTES", 90),
        MATCHDAY_LOG_LEVEL=_getenv_str("MATCHDAY_LOG_LEVEL", "INFO").upper(),
    )
