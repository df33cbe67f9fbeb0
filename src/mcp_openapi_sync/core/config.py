from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

ENV_PREFIX = "MCP_OPENAPI_SYNC_"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(ENV_PREFIX + name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from e
    if value < 0:
        raise ConfigurationError(f"{ENV_PREFIX}{name} must not be negative, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    log_level: str
    timeout_s: float
    settle_delay_s: float


def _resolve_env_file() -> Optional[Path]:
    candidate = Path.cwd() / ".env"
    return candidate if candidate.is_file() else None


def load_settings(dotenv: bool = True) -> Settings:
    """Settings from the environment, after an optional ./.env is loaded."""
    env_file = _resolve_env_file() if dotenv else None
    if env_file is not None:
        load_dotenv(env_file, override=False)

    return Settings(
        log_level=os.getenv(ENV_PREFIX + "LOG_LEVEL", "WARNING").strip() or "WARNING",
        timeout_s=_env_float("TIMEOUT", 30.0),
        settle_delay_s=_env_float("SETTLE_DELAY", 0.0),
    )
