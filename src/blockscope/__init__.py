"""blockscope — cached, delta-encoded block volume series.

Reads block volume observations from a local SQLite cache, falls back to the
remote explorer API on a miss, and returns the series delta-encoded.
"""

__version__ = "0.1.0"
