"""Timestamp conversion shared by the cache and API paths."""

import pandas as pd


def parse_time_to_epoch(value: str) -> int:
    """Convert a human-readable timestamp to unix epoch microseconds.

    Accepts ISO-8601, SQLite ``YYYY-MM-DD HH:MM:SS`` and RFC 1123
    (``Mon, 15 Jan 2024 10:00:00 GMT``) strings. Naive timestamps are UTC.

    Raises:
        ValueError: If the value is empty, not a string, or unparseable
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid timestamp: {value!r}")

    # pandas resolves keywords such as "now" and "today" to the current time
    if not any(ch.isdigit() for ch in value):
        raise ValueError(f"Invalid timestamp: {value!r}")

    ts = pd.Timestamp(value.strip())
    if pd.isna(ts):
        raise ValueError(f"Invalid timestamp: {value!r}")

    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")

    # Timestamp.value is nanoseconds since epoch
    return int(ts.value) // 1_000
