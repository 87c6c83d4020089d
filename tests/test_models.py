"""Tests for request-scoped models."""

import pytest

from blockscope.models import BlockRange, Sample, parse_bound


class TestParseBound:
    """Test query bound parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("10", 10),
            (" 7 ", 7),
            ("-3", -3),
            (42, 42),
            (None, None),
            ("", None),
            ("abc", None),
            ("1.5", None),
            ("12abc", None),
            (True, None),
        ],
    )
    def test_values(self, value, expected) -> None:
        assert parse_bound(value) == expected


class TestBlockRange:
    """Test range boundedness."""

    def test_bounded(self) -> None:
        block_range = BlockRange.from_query("1", "50")
        assert block_range == BlockRange(start=1, end=50)
        assert block_range.is_bounded

    def test_missing_end_is_unbounded(self) -> None:
        assert not BlockRange.from_query("1", None).is_bounded

    def test_invalid_start_is_unbounded(self) -> None:
        block_range = BlockRange.from_query("one", "50")
        assert block_range.start is None
        assert not block_range.is_bounded

    def test_default_is_unbounded(self) -> None:
        assert not BlockRange().is_bounded


def test_sample_to_dict() -> None:
    assert Sample(epoch=1, volume=2).to_dict() == {"epoch": 1, "volume": 2}


def test_partial_numbers_are_not_truncated() -> None:
    """Unlike an integer-prefix parse, "12abc" and "1.5" leave the range unbounded."""
    block_range = BlockRange.from_query("12abc", "1.5")
    assert block_range == BlockRange(start=None, end=None)
    assert not block_range.is_bounded
