"""Core engine configuration.

Core config is side-effect free: it does not load dotenv files.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_RATE_LIMIT_MAX = 60
DEFAULT_RATE_LIMIT_WINDOW_SECONDS = 60.0
DEFAULT_VALIDATOR_TIMEOUT_SECONDS = 15.0
DEFAULT_JOB_LIST_LIMIT = 50


@dataclass(frozen=True)
class CoreConfig:
    validator_timeout_seconds: float = DEFAULT_VALIDATOR_TIMEOUT_SECONDS
    rate_limit_max: int = DEFAULT_RATE_LIMIT_MAX
    rate_limit_window_seconds: float = DEFAULT_RATE_LIMIT_WINDOW_SECONDS
    job_store_path: str | None = None
    gateway_url: str | None = None
    gateway_token: str | None = None


def _env_float(name: str, default: float) -> float:
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        parsed = float(val)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _env_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        parsed = int(val)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _env_str(name: str) -> str | None:
    val = (os.getenv(name) or "").strip()
    return val or None


def config_from_env() -> CoreConfig:
    return CoreConfig(
        validator_timeout_seconds=_env_float("VALIDATOR_TIMEOUT_SECONDS", DEFAULT_VALIDATOR_TIMEOUT_SECONDS),
        rate_limit_max=_env_int("RATE_LIMIT_MAX", DEFAULT_RATE_LIMIT_MAX),
        rate_limit_window_seconds=_env_float("RATE_LIMIT_WINDOW_SECONDS", DEFAULT_RATE_LIMIT_WINDOW_SECONDS),
        job_store_path=_env_str("JOB_STORE_PATH"),
        gateway_url=_env_str("FIELDGATE_GATEWAY_URL"),
        gateway_token=_env_str("FIELDGATE_GATEWAY_TOKEN"),
    )


__all__ = [
    "CoreConfig",
    "DEFAULT_JOB_LIST_LIMIT",
    "DEFAULT_RATE_LIMIT_MAX",
    "DEFAULT_RATE_LIMIT_WINDOW_SECONDS",
    "DEFAULT_VALIDATOR_TIMEOUT_SECONDS",
    "config_from_env",
]
