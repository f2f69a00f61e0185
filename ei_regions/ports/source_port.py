"""
ports/source_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interface for the remote EI regions source.

Both methods return *undated* records (date_retrieved=None); the services
stamp the retrieval time when they decide to store the result.

Current implementation: EIRegionsSourceAdapter (requests + BeautifulSoup)
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from ei_regions.domain.models import PostalRecord, RegionRecord


@runtime_checkable
class RegionSourcePort(Protocol):
    """Contract for the scraped postal-code and economic-region pages."""

    def fetch_postal_page(self, postal_code: str) -> PostalRecord:
        """Fetch and extract the postal-code detail page.

        Args:
            postal_code: Normalised postal code (no whitespace).

        Returns:
            PostalRecord built from the first data row, keyed by *postal_code*.

        Raises:
            SourceUnavailableError: On transport failure or non-2xx status.
            ExtractionError:        If the page holds no extractable row.
        """
        ...

    def fetch_region_page(self, locator: str) -> RegionRecord:
        """Fetch and extract an economic-region detail page.

        Args:
            locator: Relative URL taken from the postal page's region anchor.

        Returns:
            RegionRecord built from the region table (last row wins).

        Raises:
            SourceUnavailableError: On transport failure or non-2xx status.
            ExtractionError:        If the page holds no extractable row.
        """
        ...

    def close(self) -> None:
        """Release the underlying HTTP session."""
        ...
