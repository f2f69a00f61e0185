"""
ports/store_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interface for the cache store.

Two independent tables, two operations each:
  1. get_*     — read one row by primary key
  2. upsert_*  — insert, or overwrite every non-key column

Each call is atomic on its own.  There is deliberately no transaction
spanning the postal and region tables: a postal row may be written while the
region write that follows it fails, and readers may observe the two writes in
either order.

Current implementation: PostgresCacheStore (psycopg2)
Tests use an in-memory implementation (tests/conftest.py).
"""
from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from ei_regions.domain.models import PostalRecord, RegionRecord


@runtime_checkable
class CacheStorePort(Protocol):
    """Contract for the postal / economic-region cache."""

    def init_schema(self) -> None:
        """Create both tables if they do not exist (idempotent).

        Raises:
            StoreError: On connection or DDL failure.
        """
        ...

    def get_postal(self, postal_code: str) -> Optional[PostalRecord]:
        """Fetch the cached row for a normalised postal code.

        Returns:
            The stored PostalRecord, or None if absent.

        Raises:
            StoreError: On connection or query failure.
        """
        ...

    def upsert_postal(self, record: PostalRecord) -> None:
        """Insert or fully overwrite the row keyed by record.postal_code.

        Raises:
            StoreError: On connection or query failure.
        """
        ...

    def get_region(self, region_name: str) -> Optional[RegionRecord]:
        """Fetch the cached row for an economic region name.

        Returns:
            The stored RegionRecord, or None if absent.

        Raises:
            StoreError: On connection or query failure.
        """
        ...

    def upsert_region(self, record: RegionRecord) -> None:
        """Insert or fully overwrite the row keyed by record.economic_region_name.

        Raises:
            StoreError: On connection or query failure.
        """
        ...

    def close(self) -> None:
        """Release all connections held by the store."""
        ...
