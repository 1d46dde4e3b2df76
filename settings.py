from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple


_STORE_PATH_ENV = "FANCTL_STORE_PATH"
_DEPLOYMENT_MODE_ENV = "FANCTL_DEPLOYMENT_MODE"
_REALTIME_ENV = "FANCTL_REALTIME_ENABLED"
_CORS_ORIGINS_ENV = "FANCTL_CORS_ORIGINS"
_HOST_ENV = "HOST"
_PORT_ENV = "PORT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEPLOYMENT_MODES = ("server", "serverless")

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    store_path: Optional[str]
    deployment_mode: str
    realtime_enabled: bool
    cors_origins: Tuple[str, ...]
    host: str
    port: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_port(default: int) -> int:
    value = os.getenv(_PORT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if 0 < parsed < 65536 else default


def _read_deployment_mode(default: str) -> str:
    candidate = _read_str_env(_DEPLOYMENT_MODE_ENV, default).lower()
    return candidate if candidate in DEPLOYMENT_MODES else default


def _read_realtime(default: bool) -> bool:
    value = os.getenv(_REALTIME_ENV)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUTHY:
        return True
    if candidate in _FALSY:
        return False
    return default


def _read_cors_origins(default: str) -> Tuple[str, ...]:
    raw = _read_str_env(_CORS_ORIGINS_ENV, default)
    origins = tuple(part.strip() for part in raw.split(",") if part.strip())
    return origins or (default,)


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    deployment_mode = _read_deployment_mode("server")
    # Serverless hosts cannot keep websocket connections open.
    return Settings(
        store_path=_read_optional_env(_STORE_PATH_ENV, "./tmp/fan_controller.json"),
        deployment_mode=deployment_mode,
        realtime_enabled=_read_realtime(deployment_mode != "serverless"),
        cors_origins=_read_cors_origins("*"),
        host=_read_str_env(_HOST_ENV, "0.0.0.0"),
        port=_read_port(5000),
        log_level=_read_log_level("INFO"),
    )
