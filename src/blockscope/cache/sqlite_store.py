"""SQLite cache reader for block volumes.

Reads rows from the ``transactions`` table written by the ingestion process:

    transactions(block_id INTEGER, volume INTEGER NULL, created_at TEXT)

The connection is opened once by the process root and shared by all
requests. Queries run in a worker thread via asyncio.to_thread so the event
loop never blocks on disk I/O.
"""

import asyncio
import logging
import numbers
import sqlite3
from pathlib import Path
from typing import Any, Protocol

import pandas as pd

from blockscope.config import settings
from blockscope.models import BlockRange, CacheRow, Sample
from blockscope.timeutil import parse_time_to_epoch

logger = logging.getLogger(__name__)

_RANGE_QUERY = """
    SELECT block_id, volume, created_at
    FROM transactions
    WHERE block_id BETWEEN ? AND ?
    ORDER BY block_id ASC
"""

_DEFAULT_QUERY = """
    SELECT block_id, volume, created_at
    FROM transactions
    ORDER BY block_id ASC
    LIMIT ?
"""


class CacheUnavailable(Exception):
    """Cache storage could not be read."""


class CacheReader(Protocol):
    """Anything the orchestrator can read cached samples from."""

    async def read_samples(
        self, start: int | None = None, end: int | None = None
    ) -> list[Sample]: ...


def open_cache_connection(path: str | Path) -> sqlite3.Connection:
    """Open a read-only connection to the cache database.

    The connection may be used from worker threads.

    Raises:
        sqlite3.Error: If the database cannot be opened
    """
    uri = f"{Path(path).resolve().as_uri()}?mode=ro"
    conn = sqlite3.connect(uri, uri=True, check_same_thread=False)
    logger.info("Connected to SQLite cache database at %s", path)
    return conn


def _is_null(value: Any) -> bool:
    return not isinstance(value, str) and pd.isna(value)


def _as_int(value: Any, column: str) -> int:
    """Convert a stored value to int. Text, NULL and fractional values are rejected."""
    # SQLite does not enforce column types; pandas turns NULL-bearing integer
    # columns into floats
    if isinstance(value, numbers.Integral) and not isinstance(value, bool):
        return int(value)
    if isinstance(value, numbers.Real) and float(value).is_integer():
        return int(value)
    raise ValueError(f"{column} is not an integer: {value!r}")


def row_to_sample(row: CacheRow) -> Sample:
    """Convert a cache row to a Sample. Null volume counts as 0."""
    return Sample(
        epoch=parse_time_to_epoch(row.created_at),
        volume=row.volume or 0,
    )


class SQLiteCacheReader:
    """Async read-only access to the transactions cache.

    Args:
        conn: Shared connection from open_cache_connection, or None when the
            cache could not be opened (every read then raises CacheUnavailable)
        default_window: Row cap when no valid range is requested
    """

    def __init__(
        self,
        conn: sqlite3.Connection | None,
        default_window: int | None = None,
    ) -> None:
        self.conn = conn
        self.default_window = default_window or settings.default_window

    async def read(
        self,
        start: int | None = None,
        end: int | None = None,
    ) -> list[CacheRow]:
        """Read cached rows for a block range, ascending by block_id.

        When either bound is missing the oldest ``default_window`` rows are
        returned instead.

        Raises:
            CacheUnavailable: On any storage-layer failure
        """
        if self.conn is None:
            raise CacheUnavailable("Cache connection is not available")

        block_range = BlockRange(start=start, end=end)
        if block_range.is_bounded:
            query, params = _RANGE_QUERY, [block_range.start, block_range.end]
        else:
            query, params = _DEFAULT_QUERY, [self.default_window]

        def _read() -> pd.DataFrame:
            return pd.read_sql_query(query, self.conn, params=params)

        try:
            df = await asyncio.to_thread(_read)
        except (sqlite3.Error, pd.errors.DatabaseError) as e:
            raise CacheUnavailable(f"Cache query failed: {e}") from e

        logger.debug("Cache returned %d rows for range %s-%s", len(df), start, end)

        try:
            return [
                CacheRow(
                    block_id=_as_int(block_id, "block_id"),
                    volume=None if _is_null(volume) else _as_int(volume, "volume"),
                    created_at=created_at,
                )
                for block_id, volume, created_at in df.itertuples(index=False, name=None)
            ]
        except (ValueError, TypeError) as e:
            raise CacheUnavailable(f"Corrupt cache row: {e}") from e

    async def read_samples(
        self,
        start: int | None = None,
        end: int | None = None,
    ) -> list[Sample]:
        """Read cached rows and convert them to Samples.

        Raises:
            CacheUnavailable: On storage failure or an unparseable created_at
        """
        rows = await self.read(start, end)
        try:
            return [row_to_sample(row) for row in rows]
        except ValueError as e:
            raise CacheUnavailable(f"Corrupt cache row: {e}") from e
