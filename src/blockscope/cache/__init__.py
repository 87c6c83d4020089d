"""Read-only SQLite cache of block transaction volumes.

The cache is populated by an external ingestion process; blockscope only
reads the ``transactions`` table.
"""

from blockscope.cache.sqlite_store import (
    CacheReader,
    CacheUnavailable,
    SQLiteCacheReader,
    open_cache_connection,
    row_to_sample,
)

__all__ = [
    "CacheReader",
    "CacheUnavailable",
    "SQLiteCacheReader",
    "open_cache_connection",
    "row_to_sample",
]
