"""Configuration helpers for the Aura Quality backend.

We keep these settings in a dedicated module so the API handlers, the
dashboard session and its background controllers share the same source of
truth.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import List, Optional


DEFAULT_LOCATION_NAME = "Los Angeles, CA"
DEFAULT_LATITUDE = 34.0522
DEFAULT_LONGITUDE = -118.2437


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _env_csv(name: str, default: List[str]) -> List[str]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return list(default)
    parts = [p.strip() for p in value.split(",")]
    return [p for p in parts if p]


def _default_db_path() -> str:
    # Independent from the current working directory.
    backend_dir = Path(__file__).resolve().parents[1]
    return str(backend_dir / "data" / "aura.db")


@dataclass(frozen=True)
class DashboardSettings:
    # Periodic silent re-fetch of the displayed reading.
    refresh_interval_seconds: float

    # Search autocomplete behaviour
    debounce_seconds: float
    blur_grace_seconds: float
    min_query_length: int
    max_suggestions: int

    # Simulated latency of the bundled reading provider.
    provider_latency_seconds: float

    default_location_name: str
    default_latitude: float
    default_longitude: float

    # Upstream services
    nominatim_base_url: str
    http_timeout_seconds: float
    gemini_api_key: Optional[str]
    gemini_model: str

    # Storage
    database_path: str
    sqlite_busy_timeout_ms: int

    allowed_origins: List[str]
    log_level: str


def load_settings() -> DashboardSettings:
    """Load settings from environment variables."""
    return DashboardSettings(
        refresh_interval_seconds=_env_float("AURA_REFRESH_INTERVAL_SECONDS", 300.0),  # 5 min
        debounce_seconds=_env_int("AURA_DEBOUNCE_MS", 300) / 1000.0,
        blur_grace_seconds=_env_int("AURA_BLUR_GRACE_MS", 150) / 1000.0,
        min_query_length=_env_int("AURA_MIN_QUERY_LENGTH", 3),
        max_suggestions=_env_int("AURA_MAX_SUGGESTIONS", 5),
        provider_latency_seconds=_env_float("AURA_PROVIDER_LATENCY_SECONDS", 1.0),
        default_location_name=_env_str("AURA_DEFAULT_LOCATION_NAME", DEFAULT_LOCATION_NAME),
        default_latitude=_env_float("AURA_DEFAULT_LATITUDE", DEFAULT_LATITUDE),
        default_longitude=_env_float("AURA_DEFAULT_LONGITUDE", DEFAULT_LONGITUDE),
        nominatim_base_url=_env_str("AURA_NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org"),
        http_timeout_seconds=_env_float("AURA_HTTP_TIMEOUT_SECONDS", 10.0),
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        gemini_model=_env_str("GEMINI_MODEL", "gemini-2.0-flash-exp"),
        database_path=_env_str("DATABASE_PATH", _default_db_path()),
        sqlite_busy_timeout_ms=_env_int("AURA_SQLITE_BUSY_TIMEOUT_MS", 5000),
        allowed_origins=_env_csv(
            "ALLOWED_ORIGINS",
            ["http://localhost:5173", "http://localhost:3000"],
        ),
        log_level=_env_str("LOG_LEVEL", "INFO").upper(),
    )
