"""
config/settings.py
──────────────────────────────────────────────────────────────────────────────
Single source of truth for all tuneable parameters.

All values can be overridden via environment variables or a .env file placed
at the project root.  The frozen dataclass ensures settings are never mutated
at runtime.

  DATABASE_URL        → PostgreSQL connection string (required to serve)
  PORT                → API listening port
  EI_REGIONS_BASE_URL → root of the scraped EI regions site
  STALE_AFTER_DAYS    → cache freshness window
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

from ei_regions.services.freshness import STALE_AFTER

# Load .env from project root (two levels up from this file)
load_dotenv(Path(__file__).parent.parent.parent / ".env")


def _env(key: str, default: str) -> str:
    return os.getenv(key, default)


def _env_int(key: str, default: int) -> int:
    return int(os.getenv(key, str(default)))


def _env_float(key: str, default: float) -> float:
    return float(os.getenv(key, str(default)))


@dataclass(frozen=True)
class Settings:
    """Immutable application settings loaded from environment variables."""

    # ── Database ───────────────────────────────────────────────────────────
    database_url: str = field(
        default_factory=lambda: _env("DATABASE_URL", "")
    )
    # Fly.io Postgres needs SSL without certificate verification ("require").
    db_sslmode: str = field(
        default_factory=lambda: _env("DB_SSLMODE", "prefer")
    )
    db_pool_min: int = field(default_factory=lambda: _env_int("DB_POOL_MIN", 1))
    db_pool_max: int = field(default_factory=lambda: _env_int("DB_POOL_MAX", 10))

    # ── API ────────────────────────────────────────────────────────────────
    port: int = field(default_factory=lambda: _env_int("PORT", 8000))
    log_level: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))

    # ── Remote source ──────────────────────────────────────────────────────
    ei_regions_base_url: str = field(
        default_factory=lambda: _env(
            "EI_REGIONS_BASE_URL",
            "https://srv129.services.gc.ca/ei_regions/eng/",
        )
    )
    http_timeout: float = field(
        default_factory=lambda: _env_float("HTTP_TIMEOUT", 30.0)
    )

    # ── Cache policy ───────────────────────────────────────────────────────
    stale_after_days: int = field(
        default_factory=lambda: _env_int("STALE_AFTER_DAYS", STALE_AFTER.days)
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Returns a cached singleton Settings instance.

    Use this everywhere instead of instantiating Settings() directly —
    it guarantees a single object is shared across the entire process.
    """
    return Settings()
