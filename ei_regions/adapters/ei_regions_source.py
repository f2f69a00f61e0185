"""
adapters/ei_regions_source.py
──────────────────────────────────────────────────────────────────────────────
Implements RegionSourcePort by scraping the Government of Canada EI regions
site (https://srv129.services.gc.ca/ei_regions/eng/).

Pages:
  postalcode.aspx?_code=K1A0A1
      Table #table; first body row holds five cells:
        PostalCode | CensusSubdivisionName | CommonName | CensusDivisionName |
        <a href="{locator}">{EIEconomicRegionName}</a>
  {locator}   (relative to the base URL, e.g. "region/35.aspx")
      Table #regions; every body row holds eight cells:
        Province | EconomicRegionCode | EconomicRegionName | UnemploymentRate |
        InsuredHoursRequired | MinWeeksPayable | MaxWeeksPayable |
        BestWeeksRequired

Key behaviour:
  - Exactly one GET per fetch; no retries (the caller decides what to do).
  - Transport problems raise SourceUnavailableError; a page that loads but
    has no usable row raises ExtractionError.
  - parse_postal_page() / parse_region_page() are pure functions so the
    extraction rules are unit-testable without HTTP.
"""
from __future__ import annotations

import logging
from urllib.parse import quote, urljoin

import requests
from bs4 import BeautifulSoup

from ei_regions.config.settings import Settings
from ei_regions.domain.exceptions import ExtractionError, SourceUnavailableError
from ei_regions.domain.models import PostalRecord, RegionRecord

logger = logging.getLogger(__name__)

POSTAL_CODE_ENDPOINT = "postalcode.aspx?_code="
USER_AGENT = "Mozilla/5.0 (compatible; EIRegionsLookup/1.0)"

_POSTAL_ROW_SELECTOR = "#table tbody tr"
_REGION_ROW_SELECTOR = "#regions tbody tr"

# Region table column order
_REGION_FIELDS = (
    "province",
    "economic_region_code",
    "economic_region_name",
    "unemployment_rate",
    "insured_hours_required",
    "min_weeks_payable",
    "max_weeks_payable",
    "best_weeks_required",
)


# ── Pure extraction ────────────────────────────────────────────────────────────

def _cell_text(cells: list, index: int) -> str:
    return cells[index].get_text(strip=True) if index < len(cells) else ""


def parse_postal_page(html: str, postal_code: str) -> PostalRecord:
    """Extract the first data row of the postal-code table.

    Args:
        html:        Page HTML.
        postal_code: Normalised key to store the record under.

    Raises:
        ExtractionError: If there is no row or no region anchor.
    """
    soup = BeautifulSoup(html, "html.parser")
    row = soup.select_one(_POSTAL_ROW_SELECTOR)
    if row is None:
        raise ExtractionError(f"No postal code row found for {postal_code}")

    cells = row.find_all("td")
    anchor = cells[4].find("a") if len(cells) > 4 else None
    if anchor is None or not anchor.get("href"):
        raise ExtractionError(f"No economic region link found for {postal_code}")

    scraped_code = "".join(_cell_text(cells, 0).split()).upper()
    if scraped_code != postal_code:
        logger.debug(
            "Postal page row is for %r, requested %s", scraped_code, postal_code
        )

    return PostalRecord(
        postal_code=postal_code,
        census_subdivision_name=_cell_text(cells, 1),
        common_name=_cell_text(cells, 2),
        census_division_name=_cell_text(cells, 3),
        ei_economic_region_name=anchor.get_text(strip=True),
        ei_economic_region_url=anchor["href"].strip(),
    )


def parse_region_page(html: str) -> RegionRecord:
    """Extract the economic-region table.

    Every body row is walked and overwrites the same working fields, so when
    the table lists several rows the last one wins.

    Raises:
        ExtractionError: If the table has no body rows.
    """
    soup = BeautifulSoup(html, "html.parser")
    rows = soup.select(_REGION_ROW_SELECTOR)
    if not rows:
        raise ExtractionError("No economic region rows found")
    if len(rows) > 1:
        logger.debug("Region table has %d rows; keeping the last", len(rows))

    fields: dict[str, str] = {}
    for row in rows:
        cells = row.find_all("td")
        for index, name in enumerate(_REGION_FIELDS):
            fields[name] = _cell_text(cells, index)

    return RegionRecord(**fields)


# ── Adapter ────────────────────────────────────────────────────────────────────

class EIRegionsSourceAdapter:
    """requests + BeautifulSoup implementation of RegionSourcePort.

    Injected into PostalLookup and RegionFetcher via services/container.py.
    """

    def __init__(self, settings: Settings) -> None:
        self._base_url = settings.ei_regions_base_url
        self._timeout = settings.http_timeout
        self._session = requests.Session()
        self._session.headers.update({"User-Agent": USER_AGENT})
        logger.debug("EIRegionsSourceAdapter ready | base_url=%s", self._base_url)

    # ── RegionSourcePort implementation ────────────────────────────────────

    def fetch_postal_page(self, postal_code: str) -> PostalRecord:
        url = f"{self._base_url}{POSTAL_CODE_ENDPOINT}{quote(postal_code)}"
        logger.info("Fetching postal code data from: %s", url)
        return parse_postal_page(self._get_html(url), postal_code)

    def fetch_region_page(self, locator: str) -> RegionRecord:
        url = urljoin(self._base_url, locator)
        logger.info("Fetching economic region data from: %s", url)
        return parse_region_page(self._get_html(url))

    def close(self) -> None:
        self._session.close()

    # ── Private helpers ────────────────────────────────────────────────────

    def _get_html(self, url: str) -> str:
        """Single GET; any transport failure becomes SourceUnavailableError."""
        try:
            resp = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as exc:
            raise SourceUnavailableError(f"HTTP fetch failed: {url} ({exc})") from exc

        if not resp.ok:
            logger.error("EI regions HTTP %d for %s", resp.status_code, url)
            raise SourceUnavailableError(f"HTTP status {resp.status_code}: {url}")
        return resp.text
