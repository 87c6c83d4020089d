"""Delta codec — ordered samples ⇄ base + signed deltas.

The first sample is stored as an absolute base; every following sample is
stored as the signed difference to its predecessor, separately for epoch and
volume. Decoding accumulates the deltas back onto the base.

Wire form:
    {
        "length": 3,
        "base": {"epoch": 1705312800000000, "volume": 12},
        "deltas": {"epoch": [1000000, 2000000], "volume": [3, -4]}
    }

An empty series has ``length`` 0, ``base`` null and empty delta lists.

Usage:
    series = encode(samples)
    payload = series.to_dict()
    assert decode(EncodedSeries.from_dict(payload)) == list(samples)
"""

from dataclasses import dataclass, field
from typing import Any, Iterable

from blockscope.models import Sample


class MalformedSeries(ValueError):
    """Encoded series is inconsistent and cannot be decoded."""


def _require_int(value: Any, name: str) -> int:
    # bool is an int subclass but never a valid sample field
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedSeries(f"{name} must be an integer, got {value!r}")
    return value


@dataclass(frozen=True)
class EncodedSeries:
    """Base sample plus per-field deltas for the remaining samples."""

    length: int
    base: Sample | None = None
    epoch_deltas: tuple[int, ...] = field(default_factory=tuple)
    volume_deltas: tuple[int, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON wire form."""
        return {
            "length": self.length,
            "base": self.base.to_dict() if self.base is not None else None,
            "deltas": {
                "epoch": list(self.epoch_deltas),
                "volume": list(self.volume_deltas),
            },
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "EncodedSeries":
        """Parse the JSON wire form. Unrelated keys (e.g. isCached) are ignored.

        Raises:
            MalformedSeries: If required keys are missing or not integers
        """
        if not isinstance(payload, dict):
            raise MalformedSeries(f"Encoded series must be an object, got {type(payload).__name__}")

        try:
            length = _require_int(payload["length"], "length")
            raw_base = payload["base"]
            deltas = payload["deltas"]
            raw_epoch = deltas["epoch"]
            raw_volume = deltas["volume"]
        except (KeyError, TypeError) as e:
            raise MalformedSeries(f"Missing encoded series field: {e}") from e

        base = None
        if raw_base is not None:
            try:
                base = Sample(
                    epoch=_require_int(raw_base["epoch"], "base.epoch"),
                    volume=_require_int(raw_base["volume"], "base.volume"),
                )
            except (KeyError, TypeError) as e:
                raise MalformedSeries(f"Invalid base sample: {raw_base!r}") from e

        if not isinstance(raw_epoch, list) or not isinstance(raw_volume, list):
            raise MalformedSeries("deltas.epoch and deltas.volume must be lists")

        return cls(
            length=length,
            base=base,
            epoch_deltas=tuple(_require_int(d, "deltas.epoch[]") for d in raw_epoch),
            volume_deltas=tuple(_require_int(d, "deltas.volume[]") for d in raw_volume),
        )


def encode(samples: Iterable[Sample]) -> EncodedSeries:
    """Delta-encode an ordered sequence of samples.

    Args:
        samples: Samples in ascending epoch order (may be empty)

    Returns:
        EncodedSeries that decodes back to exactly the input
    """
    items = list(samples)
    if not items:
        return EncodedSeries(length=0)

    epoch_deltas = []
    volume_deltas = []
    for prev, cur in zip(items, items[1:]):
        epoch_deltas.append(cur.epoch - prev.epoch)
        volume_deltas.append(cur.volume - prev.volume)

    return EncodedSeries(
        length=len(items),
        base=items[0],
        epoch_deltas=tuple(epoch_deltas),
        volume_deltas=tuple(volume_deltas),
    )


def decode(series: EncodedSeries) -> list[Sample]:
    """Reconstruct the original samples from an encoded series.

    Raises:
        MalformedSeries: If the declared length does not match the base and
            delta counts
    """
    if series.length < 0:
        raise MalformedSeries(f"length must be non-negative, got {series.length}")

    if series.length == 0:
        if series.base is not None or series.epoch_deltas or series.volume_deltas:
            raise MalformedSeries("Empty series must not carry a base or deltas")
        return []

    if series.base is None:
        raise MalformedSeries(f"Series of length {series.length} has no base sample")

    expected = series.length - 1
    if len(series.epoch_deltas) != expected or len(series.volume_deltas) != expected:
        raise MalformedSeries(
            f"Expected {expected} deltas for length {series.length}, got "
            f"{len(series.epoch_deltas)} epoch / {len(series.volume_deltas)} volume"
        )

    samples = [series.base]
    epoch, volume = series.base.epoch, series.base.volume
    for d_epoch, d_volume in zip(series.epoch_deltas, series.volume_deltas):
        epoch += d_epoch
        volume += d_volume
        samples.append(Sample(epoch=epoch, volume=volume))

    return samples
