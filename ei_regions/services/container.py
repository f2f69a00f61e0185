"""
services/container.py
──────────────────────────────────────────────────────────────────────────────
Dependency Injection container.

THIS IS THE ONLY FILE THAT NAMES CONCRETE ADAPTER CLASSES.

Replace the store:
  - from ei_regions.adapters.postgres_store import PostgresCacheStore
  + from ei_regions.adapters.sqlite_store import SQLiteCacheStore

Lifecycle:
  The store handle is the one long-lived, process-wide resource.  It is
  created here and passed to the services explicitly; the API lifespan calls
  Services.store.init_schema() on startup and Services.close() on shutdown.
  @lru_cache(maxsize=1) makes get_services() return the same instance across
  calls within one process.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from ei_regions.adapters.ei_regions_source import EIRegionsSourceAdapter
from ei_regions.adapters.postgres_store import PostgresCacheStore
from ei_regions.config.settings import Settings, get_settings
from ei_regions.ports.source_port import RegionSourcePort
from ei_regions.ports.store_port import CacheStorePort
from ei_regions.services.postal_lookup import PostalLookup
from ei_regions.services.region_fetcher import RegionFetcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Services:
    """Fully wired service graph plus the adapters it owns."""

    store: CacheStorePort
    source: RegionSourcePort
    region_fetcher: RegionFetcher
    postal_lookup: PostalLookup

    def close(self) -> None:
        try:
            self.source.close()
        finally:
            self.store.close()


def build_services(
    settings: Settings,
    store: Optional[CacheStorePort] = None,
    source: Optional[RegionSourcePort] = None,
) -> Services:
    """Wire services around the given adapters (defaults: Postgres + EI site).

    Tests pass in-memory adapters here; production code uses get_services().
    """
    store = store if store is not None else PostgresCacheStore(settings)
    source = source if source is not None else EIRegionsSourceAdapter(settings)

    region_fetcher = RegionFetcher(store=store, source=source, settings=settings)
    postal_lookup = PostalLookup(
        store=store,
        source=source,
        region_fetcher=region_fetcher,
        settings=settings,
    )
    return Services(
        store=store,
        source=source,
        region_fetcher=region_fetcher,
        postal_lookup=postal_lookup,
    )


@lru_cache(maxsize=1)
def get_services() -> Services:
    """Build and return the process-wide Services singleton.

    Raises:
        ConfigurationError: If DATABASE_URL is missing.
    """
    settings = get_settings()
    logger.info(
        "Building services | base_url=%s stale_after_days=%d",
        settings.ei_regions_base_url,
        settings.stale_after_days,
    )
    return build_services(settings)


def get_postal_lookup() -> PostalLookup:
    """Shortcut for interfaces that only need the lookup entry point."""
    return get_services().postal_lookup
