"""
adapters/postgres_store.py
──────────────────────────────────────────────────────────────────────────────
Implements CacheStorePort using psycopg2.

Database layout:
  Table : postal_code_data
  Cols  : postal_code (PK), census_subdivision_name, common_name,
          census_division_name, ei_economic_region_name,
          ei_economic_region_url, date_retrieved TIMESTAMPTZ
  Table : economic_region_data
  Cols  : economic_region_name (PK), province, economic_region_code,
          unemployment_rate, insured_hours_required, min_weeks_payable,
          max_weeks_payable, best_weeks_required, date_retrieved TIMESTAMPTZ

Upserts are single INSERT … ON CONFLICT DO UPDATE statements run in
autocommit mode, so every call is atomic on its own and nothing spans both
tables.

Connection management:
  - A ThreadedConnectionPool is opened lazily and shared by all request
    threads (FastAPI runs sync handlers on a worker pool).
  - psycopg2's pool raises PoolError instead of waiting when every
    connection is checked out, so callers first take a slot from a
    BoundedSemaphore sized to DB_POOL_MAX and block until one is free.
  - On OperationalError the broken connection is discarded and one retry is
    attempted with a fresh one.
  - A row that no longer validates (NULL key columns written by older
    clients) is logged and reported as a cache miss, so it gets refetched
    and overwritten.
  - close() releases the pool; the API lifespan calls it on shutdown.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Optional

import psycopg2
import psycopg2.extras
from psycopg2.pool import ThreadedConnectionPool
from pydantic import ValidationError

from ei_regions.config.settings import Settings
from ei_regions.domain.exceptions import ConfigurationError, StoreError
from ei_regions.domain.models import PostalRecord, RegionRecord

logger = logging.getLogger(__name__)

# Column order must match domain/models.py field names
_POSTAL_COLS = (
    "postal_code",
    "census_subdivision_name",
    "common_name",
    "census_division_name",
    "ei_economic_region_name",
    "ei_economic_region_url",
    "date_retrieved",
)
_REGION_COLS = (
    "economic_region_name",
    "province",
    "economic_region_code",
    "unemployment_rate",
    "insured_hours_required",
    "min_weeks_payable",
    "max_weeks_payable",
    "best_weeks_required",
    "date_retrieved",
)

_CREATE_POSTAL_TABLE = """
    CREATE TABLE IF NOT EXISTS postal_code_data (
        postal_code TEXT PRIMARY KEY,
        census_subdivision_name TEXT,
        common_name TEXT,
        census_division_name TEXT,
        ei_economic_region_name TEXT,
        ei_economic_region_url TEXT,
        date_retrieved TIMESTAMPTZ
    )
"""
_CREATE_REGION_TABLE = """
    CREATE TABLE IF NOT EXISTS economic_region_data (
        economic_region_name TEXT PRIMARY KEY,
        province TEXT,
        economic_region_code TEXT,
        unemployment_rate TEXT,
        insured_hours_required TEXT,
        min_weeks_payable TEXT,
        max_weeks_payable TEXT,
        best_weeks_required TEXT,
        date_retrieved TIMESTAMPTZ
    )
"""


def _select_sql(table: str, cols: tuple[str, ...]) -> str:
    return f"SELECT {', '.join(cols)} FROM {table} WHERE {cols[0]} = %s"


def _upsert_sql(table: str, cols: tuple[str, ...]) -> str:
    """INSERT … ON CONFLICT that overwrites every non-key column."""
    key, rest = cols[0], cols[1:]
    placeholders = ", ".join(["%s"] * len(cols))
    updates = ",\n                ".join(f"{c} = EXCLUDED.{c}" for c in rest)
    return f"""
        INSERT INTO {table} ({', '.join(cols)})
        VALUES ({placeholders})
        ON CONFLICT ({key}) DO UPDATE
        SET {updates}
    """


_SELECT_POSTAL = _select_sql("postal_code_data", _POSTAL_COLS)
_UPSERT_POSTAL = _upsert_sql("postal_code_data", _POSTAL_COLS)
_SELECT_REGION = _select_sql("economic_region_data", _REGION_COLS)
_UPSERT_REGION = _upsert_sql("economic_region_data", _REGION_COLS)


class PostgresCacheStore:
    """psycopg2 implementation of CacheStorePort.

    Injected into PostalLookup and RegionFetcher via services/container.py.
    """

    def __init__(self, settings: Settings) -> None:
        if not settings.database_url:
            raise ConfigurationError(
                "DATABASE_URL is not set. "
                "Add it to your .env file or environment."
            )
        self._dsn = settings.database_url
        self._sslmode = settings.db_sslmode
        self._pool_min = settings.db_pool_min
        self._pool_max = settings.db_pool_max
        self._pool: Optional[ThreadedConnectionPool] = None
        self._pool_lock = threading.Lock()
        self._slots = threading.BoundedSemaphore(self._pool_max)
        logger.debug("PostgresCacheStore ready | sslmode=%s", self._sslmode)

    # ── CacheStorePort implementation ──────────────────────────────────────

    def init_schema(self) -> None:
        """Create postal_code_data and economic_region_data if absent."""
        self._execute(_CREATE_POSTAL_TABLE, (), fetch=False)
        self._execute(_CREATE_REGION_TABLE, (), fetch=False)
        logger.info("PostgresCacheStore: schema ensured")

    def get_postal(self, postal_code: str) -> Optional[PostalRecord]:
        rows = self._execute(_SELECT_POSTAL, (postal_code,))
        return self._to_record(PostalRecord, rows, postal_code)

    def upsert_postal(self, record: PostalRecord) -> None:
        params = tuple(getattr(record, c) for c in _POSTAL_COLS)
        self._execute(_UPSERT_POSTAL, params, fetch=False)

    def get_region(self, region_name: str) -> Optional[RegionRecord]:
        rows = self._execute(_SELECT_REGION, (region_name,))
        return self._to_record(RegionRecord, rows, region_name)

    def upsert_region(self, record: RegionRecord) -> None:
        params = tuple(getattr(record, c) for c in _REGION_COLS)
        self._execute(_UPSERT_REGION, params, fetch=False)

    def close(self) -> None:
        """Close every pooled connection."""
        if self._pool is not None and not self._pool.closed:
            self._pool.closeall()
            logger.debug("PostgresCacheStore: pool closed")
        self._pool = None

    # ── Row mapping ────────────────────────────────────────────────────────

    @staticmethod
    def _to_record(model, rows: list[dict[str, Any]], key: str):
        """Build a record from the first row, or None when absent or unusable."""
        if not rows:
            return None
        try:
            return model(**rows[0])
        except ValidationError as exc:
            logger.warning(
                "Ignoring unusable %s row | key=%s | %d error(s)",
                model.__name__, key, exc.error_count(),
            )
            return None

    # ── Connection helpers ─────────────────────────────────────────────────

    def _get_pool(self) -> ThreadedConnectionPool:
        """Return the shared pool, opening it on first use."""
        with self._pool_lock:
            if self._pool is None or self._pool.closed:
                try:
                    self._pool = ThreadedConnectionPool(
                        self._pool_min,
                        self._pool_max,
                        self._dsn,
                        sslmode=self._sslmode,
                    )
                except psycopg2.Error as exc:
                    raise StoreError(f"Cannot connect to database: {exc}") from exc
                logger.debug("PostgresCacheStore: pool opened")
            return self._pool

    def _execute(self, sql: str, params: tuple, fetch: bool = True) -> list[dict[str, Any]]:
        """Execute one statement, returning rows as dicts, with one auto-reconnect.

        Blocks while all DB_POOL_MAX connections are in use.
        """
        with self._slots:
            for attempt in (1, 2):
                pool = self._get_pool()
                try:
                    conn = pool.getconn()
                except psycopg2.Error as exc:
                    raise StoreError(f"Cannot acquire database connection: {exc}") from exc

                broken = False
                try:
                    conn.autocommit = True
                    with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                        cur.execute(sql, params)
                        return [dict(row) for row in cur.fetchall()] if fetch else []
                except psycopg2.OperationalError as exc:
                    broken = True
                    if attempt == 2:
                        raise StoreError(f"DB query failed after reconnect: {exc}") from exc
                    logger.warning("DB OperationalError, reconnecting: %s", exc)
                except psycopg2.Error as exc:
                    raise StoreError(f"DB query failed: {exc}") from exc
                finally:
                    pool.putconn(conn, close=broken)
        return []  # unreachable
