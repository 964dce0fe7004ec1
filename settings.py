from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple


_STORE_PATH_ENV = "TELEMETRY_STORE_PATH"
_DEFAULT_UNIT_ENV = "TELEMETRY_DEFAULT_UNIT"
_WINDOW_HOURS_ENV = "TELEMETRY_DEFAULT_WINDOW_HOURS"
_SEED_ENV = "TELEMETRY_SEED_DEMO_DATA"
_CORS_ORIGINS_ENV = "CORS_ORIGINS"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    store_path: Optional[str]
    default_unit: str
    default_window_hours: int
    seed_demo_data: bool
    cors_origins: Tuple[str, ...]
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


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUTHY:
        return True
    if candidate in _FALSY:
        return False
    return default


def _read_origins(default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(_CORS_ORIGINS_ENV)
    if value is None:
        return default
    origins = tuple(part.strip() for part in value.split(",") if part.strip())
    return origins or default


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
    return Settings(
        store_path=_read_optional_env(_STORE_PATH_ENV, "./tmp/telemetry_store.json"),
        default_unit=_read_str_env(_DEFAULT_UNIT_ENV, "C"),
        default_window_hours=_read_positive_int(_WINDOW_HOURS_ENV, 24),
        seed_demo_data=_read_bool(_SEED_ENV, True),
        cors_origins=_read_origins(("http://localhost:5173", "http://localhost:3000")),
        log_level=_read_log_level("INFO"),
    )
