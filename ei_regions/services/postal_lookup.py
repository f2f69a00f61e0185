"""
services/postal_lookup.py
──────────────────────────────────────────────────────────────────────────────
Primary entry point: postal code → PostalResult with nested region detail.

Pipeline (strictly sequential, no locks held between steps):
  1. normalise the postal code (uppercase, whitespace removed)
  2. read postal_code_data; a StoreError aborts here
  3. fresh row      → reuse it, no postal page fetch
     missing/stale  → scrape the postal page; a FetchError aborts, nothing
                      written; otherwise stamp and upsert (full overwrite)
  4. RegionFetcher.lookup() for the referenced region, on both paths
  5. compose and return

A region failure fails the whole lookup even if the postal row was just
written; callers never receive a result without its region detail.  Two
concurrent lookups for the same missing key may both scrape and both
upsert. The writes are identical, so the last one wins.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from ei_regions.config.settings import Settings
from ei_regions.domain.models import PostalRecord, PostalResult
from ei_regions.domain.postal import normalise_postal_code
from ei_regions.ports.source_port import RegionSourcePort
from ei_regions.ports.store_port import CacheStorePort
from ei_regions.services.freshness import is_stale, utc_now
from ei_regions.services.region_fetcher import RegionFetcher

logger = logging.getLogger(__name__)


class PostalLookup:
    """Two-level cache-or-fetch lookup.

    Inject via services/container.py — do not instantiate directly in
    application code.

    Args:
        store:          Any object satisfying CacheStorePort.
        source:         Any object satisfying RegionSourcePort.
        region_fetcher: RegionFetcher sharing the same store and source.
        settings:       Shared application settings.
        clock:          Returns the current tz-aware time.
    """

    def __init__(
        self,
        store: CacheStorePort,
        source: RegionSourcePort,
        region_fetcher: RegionFetcher,
        settings: Settings,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._source = source
        self._region_fetcher = region_fetcher
        self._max_age = timedelta(days=settings.stale_after_days)
        self._clock = clock

    # ── Public API ─────────────────────────────────────────────────────────

    def lookup(self, postal_code: str) -> PostalResult:
        """Resolve a postal code to its census geography and EI region.

        Args:
            postal_code: Any spacing or case, e.g. "k1a 0a1".

        Returns:
            PostalResult with economic_region_details populated.

        Raises:
            InvalidPostalCodeError: If the code is empty.
            StoreError:             If a cache read or write fails.
            FetchError:             If a page cannot be fetched or parsed.
        """
        key = normalise_postal_code(postal_code)
        logger.info("lookup | postal_code=%s", key)

        postal = self._resolve_postal(key)
        region = self._region_fetcher.lookup(
            postal.ei_economic_region_name,
            postal.ei_economic_region_url,
        )
        return PostalResult.compose(postal, region)

    # ── Private helpers ────────────────────────────────────────────────────

    def _resolve_postal(self, key: str) -> PostalRecord:
        cached = self._store.get_postal(key)
        if (
            cached is not None
            and cached.date_retrieved is not None
            and cached.ei_economic_region_url
            and not is_stale(cached.date_retrieved, self._clock(), self._max_age)
        ):
            logger.info("Using cached postal code data | postal_code=%s", key)
            return cached

        logger.info(
            "Postal code cache %s | postal_code=%s",
            "stale" if cached is not None else "miss",
            key,
        )
        fetched = self._source.fetch_postal_page(key)
        record = fetched.model_copy(update={"postal_code": key}).stamped(self._clock())
        self._store.upsert_postal(record)
        return record
