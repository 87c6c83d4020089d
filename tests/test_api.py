"""Tests for the HTTP surface."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from blockscope.api import create_app
from blockscope.clients import UpstreamUnavailable
from blockscope.pipeline import RangeOrchestrator

ENCODED = {"length": 1, "base": {"epoch": 1, "volume": 2}, "deltas": {"epoch": [], "volume": []}}


@pytest.fixture
def orchestrator() -> RangeOrchestrator:
    orch = RangeOrchestrator(cache=AsyncMock(), client=AsyncMock())
    orch.get_encoded_blocks = AsyncMock(return_value={"isCached": True, **ENCODED})
    return orch


@pytest.fixture
def http(orchestrator: RangeOrchestrator):
    with TestClient(create_app(orchestrator=orchestrator)) as client:
        yield client


class TestEncodedBlocks:
    """GET /api/v1/explorer/blocks/encoded"""

    def test_success(self, http, orchestrator) -> None:
        response = http.get("/api/v1/explorer/blocks/encoded", params={"start": "1", "end": "5"})

        assert response.status_code == 200
        assert response.json() == {"isCached": True, **ENCODED}
        orchestrator.get_encoded_blocks.assert_awaited_once_with(1, 5)

    def test_invalid_bounds_treated_as_absent(self, http, orchestrator) -> None:
        """Bad bounds never produce a 400 on this route."""
        response = http.get("/api/v1/explorer/blocks/encoded", params={"start": "abc", "end": "5"})

        assert response.status_code == 200
        orchestrator.get_encoded_blocks.assert_awaited_once_with(None, 5)

    def test_no_bounds(self, http, orchestrator) -> None:
        assert http.get("/api/v1/explorer/blocks/encoded").status_code == 200
        orchestrator.get_encoded_blocks.assert_awaited_once_with(None, None)

    def test_upstream_failure(self, http, orchestrator) -> None:
        orchestrator.get_encoded_blocks.side_effect = UpstreamUnavailable("Network error: refused")

        response = http.get("/api/v1/explorer/blocks/encoded", params={"start": "1", "end": "5"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to fetch block data",
            "details": "Network error: refused",
        }


class TestRawBlocks:
    """GET /api/v1/explorer/blocks"""

    def test_requires_both_bounds(self, http, orchestrator) -> None:
        response = http.get("/api/v1/explorer/blocks", params={"start": "1"})

        assert response.status_code == 400
        assert "valid start and end" in response.json()["error"]
        orchestrator.client.get_blocks.assert_not_called()

    def test_invalid_bound(self, http) -> None:
        response = http.get("/api/v1/explorer/blocks", params={"start": "x", "end": "2"})
        assert response.status_code == 400

    def test_success(self, http, orchestrator) -> None:
        orchestrator.client.get_blocks.return_value = [{"id": 1}]

        response = http.get("/api/v1/explorer/blocks", params={"start": "1", "end": "2"})

        assert response.status_code == 200
        assert response.json() == [{"id": 1}]
        orchestrator.client.get_blocks.assert_awaited_once_with(1, 2)

    def test_upstream_failure(self, http, orchestrator) -> None:
        orchestrator.client.get_blocks.side_effect = UpstreamUnavailable("Request timeout: slow")

        response = http.get("/api/v1/explorer/blocks", params={"start": "1", "end": "2"})

        assert response.status_code == 500
        assert response.json()["details"] == "Request timeout: slow"


class TestExplorerData:
    """GET /api/v1/explorer/data"""

    def test_success(self, http, orchestrator) -> None:
        orchestrator.client.get_explorer_data.return_value = {"rows": []}

        response = http.get("/api/v1/explorer/data")

        assert response.status_code == 200
        assert response.json() == {"rows": []}

    def test_upstream_failure(self, http, orchestrator) -> None:
        orchestrator.client.get_explorer_data.side_effect = UpstreamUnavailable("boom")

        response = http.get("/api/v1/explorer/data")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch explorer data", "details": "boom"}


def test_raw_blocks_rejects_partial_numbers(http, orchestrator) -> None:
    """Partial numbers are invalid bounds on the raw route."""
    response = http.get("/api/v1/explorer/blocks", params={"start": "12abc", "end": "20"})

    assert response.status_code == 400
    orchestrator.client.get_blocks.assert_not_called()
