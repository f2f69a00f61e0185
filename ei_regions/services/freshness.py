"""
services/freshness.py
──────────────────────────────────────────────────────────────────────────────
Cache freshness policy shared by PostalLookup and RegionFetcher.

A stored row is stale once its retrieval timestamp is strictly more than
STALE_AFTER old.  Rows with no timestamp never reach this function: callers
treat them as a cache miss.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

STALE_AFTER = timedelta(days=30)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_stale(
    retrieved_at: datetime,
    now: Optional[datetime] = None,
    max_age: timedelta = STALE_AFTER,
) -> bool:
    """Return True iff ``now - retrieved_at > max_age``.

    Naive datetimes are taken to be UTC.
    """
    if now is None:
        now = utc_now()
    if retrieved_at.tzinfo is None:
        retrieved_at = retrieved_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now - retrieved_at > max_age
