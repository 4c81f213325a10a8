from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_MAX_READINGS_ENV = "SENSOR_MAX_READINGS"
_ANGLE_COERCION_ENV = "SENSOR_ANGLE_COERCION"
_HOST_ENV = "HOST"
_PORT_ENV = "PORT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

ANGLE_COERCION_MODES = ("strict", "lenient")


@dataclass(frozen=True)
class Settings:
    max_readings: int
    angle_coercion: str
    host: str
    port: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


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


def _read_angle_coercion(default: str) -> str:
    candidate = _read_str_env(_ANGLE_COERCION_ENV, default).lower()
    return candidate if candidate in ANGLE_COERCION_MODES else default


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
        max_readings=_read_positive_int(_MAX_READINGS_ENV, 100),
        angle_coercion=_read_angle_coercion("strict"),
        host=_read_str_env(_HOST_ENV, "0.0.0.0"),
        port=_read_positive_int(_PORT_ENV, 3001),
        log_level=_read_log_level("INFO"),
    )
