"""Runtime settings read from the environment (and an optional .env file)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

DEFAULT_SBDB_URL = "https://ssd-api.jpl.nasa.gov"
DEFAULT_USGS_URL = "https://earthquake.usgs.gov/fdsnws/event/1/query"
DEFAULT_NEO_URL = "https://data.nasa.gov/resource/b67r-rgxc.json"
DEFAULT_HORIZONS_URL = "https://ssd.jpl.nasa.gov/api/horizons.api"


@dataclass(frozen=True)
class Settings:
    http_timeout_s: float = 10.0
    http_attempts: int = 3
    sbdb_url: str = DEFAULT_SBDB_URL
    usgs_url: str = DEFAULT_USGS_URL
    neo_url: str = DEFAULT_NEO_URL
    horizons_url: str = DEFAULT_HORIZONS_URL
    cors_origins: tuple[str, ...] = ("*",)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def load_settings() -> Settings:
    load_dotenv()
    origins = os.getenv("IMPACTSIM_CORS_ORIGINS", "*")
    return Settings(
        http_timeout_s=_env_float("IMPACTSIM_HTTP_TIMEOUT_S", 10.0),
        http_attempts=max(1, _env_int("IMPACTSIM_HTTP_ATTEMPTS", 3)),
        sbdb_url=os.getenv("IMPACTSIM_SBDB_URL", DEFAULT_SBDB_URL).rstrip("/"),
        usgs_url=os.getenv("IMPACTSIM_USGS_URL", DEFAULT_USGS_URL),
        neo_url=os.getenv("IMPACTSIM_NEO_URL", DEFAULT_NEO_URL),
        horizons_url=os.getenv("IMPACTSIM_HORIZONS_URL", DEFAULT_HORIZONS_URL),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()) or ("*",),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
