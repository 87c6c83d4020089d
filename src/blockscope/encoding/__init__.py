"""Delta encoding for ordered (epoch, volume) sample series."""

from blockscope.encoding.delta import EncodedSeries, MalformedSeries, decode, encode

__all__ = ["EncodedSeries", "MalformedSeries", "decode", "encode"]
