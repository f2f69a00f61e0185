"""
tests/integration/test_ei_regions_live.py
──────────────────────────────────────────────────────────────────────────────
Live scrape of the Government of Canada EI regions site.

Marked @pytest.mark.integration and SKIPPED in the standard test run; the
page layout is outside our control, so these are the canary for extraction
rule drift.

Run with:
  pytest -m integration ei_regions/tests/integration/test_ei_regions_live.py -v
"""
from __future__ import annotations

import pytest

pytestmark = pytest.mark.integration


@pytest.fixture(scope="module")
def live_source():
    from ei_regions.adapters.ei_regions_source import EIRegionsSourceAdapter
    from ei_regions.config.settings import get_settings
    adapter = EIRegionsSourceAdapter(get_settings())
    yield adapter
    adapter.close()


class TestLivePages:
    def test_postal_page_has_region_link(self, live_source):
        record = live_source.fetch_postal_page("K1A0A1")
        assert record.ei_economic_region_name
        assert record.ei_economic_region_url

    def test_region_page_has_statistics(self, live_source):
        postal = live_source.fetch_postal_page("K1A0A1")
        region = live_source.fetch_region_page(postal.ei_economic_region_url)
        assert region.economic_region_code
        assert region.unemployment_rate
