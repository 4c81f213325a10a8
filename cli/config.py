from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

import httpx

DEFAULT_BASE_URL = "http://localhost:3001"
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_TIMEOUT = 10.0

_BASE_URL_ENV = "API_BASE_URL"
_POLL_INTERVAL_ENV = "CLI_POLL_INTERVAL"
_TIMEOUT_ENV = "CLI_TIMEOUT"


@dataclass(frozen=True)
class CLIConfig:
    base_url: str = DEFAULT_BASE_URL
    poll_interval: float = DEFAULT_POLL_INTERVAL
    timeout: float = DEFAULT_TIMEOUT


def normalize_base_url(raw: str) -> str:
    """Return ``raw`` as an http(s) URL without a trailing slash."""
    try:
        url = httpx.URL(raw.strip())
    except httpx.InvalidURL as exc:
        raise ValueError(f"Invalid service URL {raw!r}: {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise ValueError(f"Service URL must be an http(s) URL with a host, got {raw!r}.")
    return str(url).rstrip("/")


def _env_seconds(name: str, default: float) -> float:
    """Seconds from the environment; blank, malformed or non-positive means default."""
    raw = (os.getenv(name) or "").strip()
    try:
        seconds = float(raw) if raw else default
    except ValueError:
        return default
    return seconds if seconds > 0 else default


def _require_positive(name: str, seconds: float) -> float:
    if seconds <= 0:
        raise ValueError(f"{name} must be greater than zero, got {seconds}.")
    return seconds


def load_config(
    base_url: Optional[str] = None,
    poll_interval: Optional[float] = None,
    timeout: Optional[float] = None,
) -> CLIConfig:
    """Merge explicit options over environment values over defaults.

    Explicit values are validated and raise ``ValueError``; environment values
    that do not parse fall back to the defaults.
    """
    return CLIConfig(
        base_url=normalize_base_url(base_url or os.getenv(_BASE_URL_ENV) or DEFAULT_BASE_URL),
        poll_interval=(
            _require_positive("poll interval", poll_interval)
            if poll_interval is not None
            else _env_seconds(_POLL_INTERVAL_ENV, DEFAULT_POLL_INTERVAL)
        ),
        timeout=(
            _require_positive("timeout", timeout)
            if timeout is not None
            else _env_seconds(_TIMEOUT_ENV, DEFAULT_TIMEOUT)
        ),
    )
