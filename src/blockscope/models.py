"""Request-scoped data model: samples, cache rows and block ranges."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Sample:
    """One (epoch, volume) observation. Epoch is unix microseconds."""

    epoch: int
    volume: int

    def to_dict(self) -> dict[str, int]:
        return {"epoch": self.epoch, "volume": self.volume}


@dataclass(frozen=True)
class CacheRow:
    """One row of the cache ``transactions`` table."""

    block_id: int
    volume: int | None
    created_at: str


def parse_bound(value: Any) -> int | None:
    """Parse a range bound, returning None when absent or not an integer.

    Parsing is strict: partial numbers such as "12abc" or "1.5" are treated as
    absent rather than truncated to their integer prefix.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


@dataclass(frozen=True)
class BlockRange:
    """Requested block range. Either bound may be missing.

    A range is only applied when both bounds are integers; otherwise readers
    substitute their bounded default window.
    """

    start: int | None = None
    end: int | None = None

    @classmethod
    def from_query(cls, start: Any = None, end: Any = None) -> "BlockRange":
        return cls(start=parse_bound(start), end=parse_bound(end))

    @property
    def is_bounded(self) -> bool:
        return self.start is not None and self.end is not None
