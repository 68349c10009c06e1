"""Startup configuration, read once from the environment."""
import logging
import os
from dataclasses import dataclass

from .errors import ConfigError

DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"
DEFAULT_MIN = 1
DEFAULT_MAX = 65535
DEFAULT_TIMEOUT = 2000  # ms


@dataclass(frozen=True)
class Config:
    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    min_id: int = DEFAULT_MIN
    max_id: int = DEFAULT_MAX
    timeout_ms: int = DEFAULT_TIMEOUT
    sweep_interval_ms: int = max(DEFAULT_TIMEOUT // 4, 1)
    log_level: str = "INFO"


def _env_int(environ, name: str, default: int) -> int:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def load_config(environ=None) -> Config:
    """Build a Config from environment variables.

    Raises ConfigError on non-numeric values or an impossible combination
    (MIN > MAX, non-positive TIMEOUT, port out of range).
    """
    if environ is None:
        environ = os.environ

    port = _env_int(environ, "PORT", DEFAULT_PORT)
    min_id = _env_int(environ, "MIN", DEFAULT_MIN)
    max_id = _env_int(environ, "MAX", DEFAULT_MAX)
    timeout_ms = _env_int(environ, "TIMEOUT", DEFAULT_TIMEOUT)

    if not 1 <= port <= 65535:
        raise ConfigError(f"PORT must be in 1..65535, got {port}")
    if min_id > max_id:
        raise ConfigError(f"MIN ({min_id}) must not exceed MAX ({max_id})")
    if timeout_ms <= 0:
        raise ConfigError(f"TIMEOUT must be positive, got {timeout_ms}")

    sweep_interval_ms = _env_int(environ, "SWEEP_INTERVAL", max(timeout_ms // 4, 1))
    if sweep_interval_ms <= 0:
        raise ConfigError(f"SWEEP_INTERVAL must be positive, got {sweep_interval_ms}")

    log_level = (environ.get("LOG_LEVEL", "").strip() or "INFO").upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"LOG_LEVEL must be a logging level name, got {log_level!r}")

    return Config(
        port=port,
        host=environ.get("HOST", "").strip() or DEFAULT_HOST,
        min_id=min_id,
        max_id=max_id,
        timeout_ms=timeout_ms,
        sweep_interval_ms=sweep_interval_ms,
        log_level=log_level,
    )
