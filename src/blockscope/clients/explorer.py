"""Block explorer API client.

Endpoints used:
    GET /v1/blocks/{start}/{end}   Block records in an inclusive range
    GET /populatetable             Explorer table data

Each block record looks like:
    {
        "id": 1,
        "number": "1",
        "transactions": [{"cmd": "SET", "key": "k", "value": "v"}],
        "size": 512,
        "createdAt": "Mon, 15 Jan 2024 10:00:00 GMT",
        "createdAtEpoch": 1705312800000000
    }

Usage:
    async with ExplorerClient(base_url="http://explorer:8080") as client:
        samples = await client.fetch(start=1, end=50)
"""

import logging
from typing import Any

from blockscope.clients.base import BaseAsyncClient, UpstreamUnavailable
from blockscope.config import settings
from blockscope.models import BlockRange, Sample
from blockscope.timeutil import parse_time_to_epoch

logger = logging.getLogger(__name__)


def record_to_sample(record: dict[str, Any]) -> Sample:
    """Convert a block record to a Sample.

    Volume is the number of embedded transactions; a missing or null list
    counts as 0.

    Raises:
        ValueError: If createdAt is missing or unparseable
    """
    transactions = record.get("transactions") or []
    return Sample(
        epoch=parse_time_to_epoch(record.get("createdAt")),
        volume=len(transactions),
    )


class ExplorerClient(BaseAsyncClient):
    """Async client for the block explorer API.

    Args:
        base_url: Explorer base URL (default: from settings)
        timeout: Request deadline in seconds (default: from settings)
        max_retries: Retries on transient failures (default: from settings)
        default_window: Block count requested when no valid range is given
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        default_window: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            base_url=base_url or settings.explorer_base_url,
            timeout=timeout or settings.explorer_timeout,
            max_retries=settings.explorer_max_retries if max_retries is None else max_retries,
            **kwargs,
        )
        self.default_window = default_window or settings.default_window

    async def get_explorer_data(self) -> Any:
        """Get explorer table data as returned by the API."""
        return await self.get("/populatetable")

    async def get_blocks(self, start: int, end: int) -> list[dict[str, Any]]:
        """Get raw block records for an inclusive range.

        Raises:
            UpstreamUnavailable: On request failure or a non-list payload
        """
        data = await self.get(f"/v1/blocks/{start}/{end}")
        if not isinstance(data, list):
            raise UpstreamUnavailable(
                f"Expected a list of blocks, got {type(data).__name__}"
            )
        return data

    async def fetch(
        self,
        start: int | None = None,
        end: int | None = None,
    ) -> list[Sample]:
        """Fetch blocks and convert them to Samples.

        Requests exactly [start, end] when both bounds are valid, otherwise
        the first ``default_window`` blocks. Never requests the full dataset.

        Raises:
            UpstreamUnavailable: On request failure or malformed records
        """
        block_range = BlockRange(start=start, end=end)
        if block_range.is_bounded:
            records = await self.get_blocks(block_range.start, block_range.end)
        else:
            records = await self.get_blocks(1, self.default_window)

        try:
            samples = [record_to_sample(record) for record in records]
        except (ValueError, TypeError, AttributeError) as e:
            raise UpstreamUnavailable(f"Malformed block record: {e}") from e

        logger.debug("Explorer returned %d blocks for range %s-%s", len(samples), start, end)
        return samples
