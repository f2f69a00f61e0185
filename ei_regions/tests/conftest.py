"""
tests/conftest.py
──────────────────────────────────────────────────────────────────────────────
Shared pytest fixtures and mock adapter implementations.

Mock adapters implement the Port Protocols via structural subtyping — they do
NOT inherit from any base class.  pytest uses them to test service logic
without a real database or network.

Fixture hierarchy:
  memory_store   → implements CacheStorePort (dicts, call counters)
  fake_source    → implements RegionSourcePort (canned Ottawa pages)
  clock          → mutable fixed clock shared by both services
  region_fetcher → RegionFetcher wired with memory_store + fake_source
  postal_lookup  → PostalLookup wired with the same
  services       → container.Services built around the mocks
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from ei_regions.config.settings import Settings
from ei_regions.domain.exceptions import (
    ExtractionError,
    SourceUnavailableError,
    StoreError,
)
from ei_regions.domain.models import PostalRecord, RegionRecord
from ei_regions.services.container import build_services
from ei_regions.services.postal_lookup import PostalLookup
from ei_regions.services.region_fetcher import RegionFetcher

NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)


# ── Settings fixture ───────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def settings() -> Settings:
    """Return a Settings instance with sane test defaults."""
    return Settings(
        database_url="postgresql://localhost/ei_regions_test",
        db_sslmode="disable",
        db_pool_min=1,
        db_pool_max=2,
        port=8000,
        log_level="DEBUG",
        ei_regions_base_url="https://ei.example.test/ei_regions/eng/",
        http_timeout=5.0,
        stale_after_days=30,
    )


# ── Canned source data ─────────────────────────────────────────────────────

OTTAWA_POSTAL = PostalRecord(
    postal_code="K1A0A1",
    census_subdivision_name="Ottawa",
    common_name="Ottawa",
    census_division_name="Ottawa",
    ei_economic_region_name="Ottawa",
    ei_economic_region_url="region/35.aspx",
)

OTTAWA_REGION = RegionRecord(
    province="ON",
    economic_region_code="3520",
    economic_region_name="Ottawa",
    unemployment_rate="5.6",
    insured_hours_required="420",
    min_weeks_payable="14",
    max_weeks_payable="45",
    best_weeks_required="14-22",
)


# ── Mock adapters ──────────────────────────────────────────────────────────

class MockClock:
    """Fixed clock that tests can move forward."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class InMemoryCacheStore:
    """In-memory fake CacheStorePort with per-operation call counters."""

    def __init__(self) -> None:
        self.postal: dict[str, PostalRecord] = {}
        self.region: dict[str, RegionRecord] = {}
        self.calls: list[str] = []
        self.fail_reads = False
        self.fail_writes = False
        self.schema_ready = False
        self.closed = False

    def init_schema(self) -> None:
        self.schema_ready = True

    def get_postal(self, postal_code: str) -> Optional[PostalRecord]:
        self.calls.append("get_postal")
        if self.fail_reads:
            raise StoreError("read failed")
        return self.postal.get(postal_code)

    def upsert_postal(self, record: PostalRecord) -> None:
        self.calls.append("upsert_postal")
        if self.fail_writes:
            raise StoreError("write failed")
        self.postal[record.postal_code] = record.model_copy()

    def get_region(self, region_name: str) -> Optional[RegionRecord]:
        self.calls.append("get_region")
        if self.fail_reads:
            raise StoreError("read failed")
        return self.region.get(region_name)

    def upsert_region(self, record: RegionRecord) -> None:
        self.calls.append("upsert_region")
        if self.fail_writes:
            raise StoreError("write failed")
        self.region[record.economic_region_name] = record.model_copy()

    def close(self) -> None:
        self.closed = True


class FakeRegionSource:
    """Canned RegionSourcePort serving the Ottawa pages."""

    def __init__(self) -> None:
        self.postal_pages: dict[str, PostalRecord] = {"K1A0A1": OTTAWA_POSTAL}
        self.region_pages: dict[str, RegionRecord] = {"region/35.aspx": OTTAWA_REGION}
        self.postal_fetches: list[str] = []
        self.region_fetches: list[str] = []
        self.region_unavailable = False
        self.closed = False

    def fetch_postal_page(self, postal_code: str) -> PostalRecord:
        self.postal_fetches.append(postal_code)
        if postal_code not in self.postal_pages:
            raise ExtractionError(f"No postal code row found for {postal_code}")
        return self.postal_pages[postal_code]

    def fetch_region_page(self, locator: str) -> RegionRecord:
        self.region_fetches.append(locator)
        if self.region_unavailable:
            raise SourceUnavailableError("HTTP status 503")
        if locator not in self.region_pages:
            raise ExtractionError("No economic region rows found")
        return self.region_pages[locator]

    def close(self) -> None:
        self.closed = True


# ── pytest fixtures ────────────────────────────────────────────────────────

@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def ottawa_postal() -> PostalRecord:
    return OTTAWA_POSTAL


@pytest.fixture
def ottawa_region() -> RegionRecord:
    return OTTAWA_REGION


@pytest.fixture
def clock():
    return MockClock()


@pytest.fixture
def memory_store():
    return InMemoryCacheStore()


@pytest.fixture
def fake_source():
    return FakeRegionSource()


@pytest.fixture
def region_fetcher(memory_store, fake_source, settings, clock):
    return RegionFetcher(
        store=memory_store,
        source=fake_source,
        settings=settings,
        clock=clock,
    )


@pytest.fixture
def postal_lookup(memory_store, fake_source, region_fetcher, settings, clock):
    return PostalLookup(
        store=memory_store,
        source=fake_source,
        region_fetcher=region_fetcher,
        settings=settings,
        clock=clock,
    )


@pytest.fixture
def services(memory_store, fake_source, settings):
    return build_services(settings, store=memory_store, source=fake_source)
