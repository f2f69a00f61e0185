"""
services/region_fetcher.py
──────────────────────────────────────────────────────────────────────────────
Cache-or-fetch for economic-region statistics.

  1. read economic_region_data by region name
  2. fresh row      → return it
  3. missing/stale  → scrape the region page via its locator, stamp, upsert,
                      return the new row

The row is keyed by the region name the caller passes in (the name the
postal record references), not by whatever name the region page prints.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from ei_regions.config.settings import Settings
from ei_regions.domain.models import RegionRecord
from ei_regions.ports.source_port import RegionSourcePort
from ei_regions.ports.store_port import CacheStorePort
from ei_regions.services.freshness import is_stale, utc_now

logger = logging.getLogger(__name__)


class RegionFetcher:
    """Resolves an economic region to its current EI statistics.

    Args:
        store:    Any object satisfying CacheStorePort.
        source:   Any object satisfying RegionSourcePort.
        settings: Shared application settings (freshness window).
        clock:    Returns the current tz-aware time; injectable for tests.
    """

    def __init__(
        self,
        store: CacheStorePort,
        source: RegionSourcePort,
        settings: Settings,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._source = source
        self._max_age = timedelta(days=settings.stale_after_days)
        self._clock = clock

    def lookup(self, region_name: str, region_url: str) -> RegionRecord:
        """Return the region's statistics, from cache when fresh.

        Raises:
            StoreError: If the cache read or write fails.
            FetchError: If the region page cannot be fetched or parsed.
        """
        cached = self._store.get_region(region_name)
        if (
            cached is not None
            and cached.date_retrieved is not None
            and not is_stale(cached.date_retrieved, self._clock(), self._max_age)
        ):
            logger.info("Using cached economic region data | region=%r", region_name)
            return cached

        logger.info(
            "Economic region cache %s | region=%r url=%s",
            "stale" if cached is not None else "miss",
            region_name,
            region_url,
        )
        fetched = self._source.fetch_region_page(region_url)
        record = fetched.model_copy(
            update={"economic_region_name": region_name}
        ).stamped(self._clock())
        self._store.upsert_region(record)
        return record
