"""Range orchestrator — cache first, explorer API on miss or error.

Flow for one request:
  1. Read samples for the range from the cache.
     - Hit: encode and return {"isCached": True, **encoded}
     - Miss or CacheUnavailable: log and fall back
  2. Fetch the same range from the explorer API, encode and return the
     encoded series without an isCached key.
     - UpstreamUnavailable propagates to the caller

The cache and the API serve the same logical dataset, so a cache problem is
only visible to callers through the missing isCached flag.

Usage:
    async with ExplorerClient() as client:
        orchestrator = RangeOrchestrator(cache=SQLiteCacheReader(conn), client=client)
        envelope = await orchestrator.get_encoded_blocks(start=1, end=50)
"""

import logging
from typing import Any, Iterable

from blockscope.cache import CacheReader, CacheUnavailable
from blockscope.clients import ExplorerClient
from blockscope.encoding import encode
from blockscope.models import Sample

logger = logging.getLogger(__name__)


def _encode_ordered(samples: Iterable[Sample]) -> dict[str, Any]:
    """Encode samples in non-decreasing epoch order."""
    # sorted() is stable, so equal epochs keep block order
    ordered = sorted(samples, key=lambda s: s.epoch)
    return encode(ordered).to_dict()


class RangeOrchestrator:
    """Serves delta-encoded block volume series.

    Args:
        cache: Cache reader (SQLiteCacheReader or any CacheReader)
        client: Entered ExplorerClient used on fallback
    """

    def __init__(self, cache: CacheReader, client: ExplorerClient) -> None:
        self.cache = cache
        self.client = client

    async def get_encoded_blocks(
        self,
        start: int | None = None,
        end: int | None = None,
    ) -> dict[str, Any]:
        """Get the encoded volume series for a block range.

        Args:
            start: First block id (inclusive); None for the default window
            end: Last block id (inclusive); None for the default window

        Returns:
            Response envelope. Contains ``isCached: True`` only on a cache hit.

        Raises:
            UpstreamUnavailable: If the cache could not serve the range and
                the explorer API request failed
        """
        try:
            logger.info("Attempting to fetch blocks from cache")
            samples = await self.cache.read_samples(start, end)
            if samples:
                logger.info("Cache hit for blocks, returned %d records", len(samples))
                return {"isCached": True, **_encode_ordered(samples)}
            logger.info("Cache miss for blocks %s-%s, falling back to API", start, end)
        except CacheUnavailable as e:
            logger.error("Error retrieving data from cache, continuing to API fallback: %s", e)

        samples = await self.client.fetch(start, end)
        logger.info("API returned %d records for blocks %s-%s", len(samples), start, end)
        return _encode_ordered(samples)
