"""HTTP client layer for blockscope.

Async clients for the remote block explorer API.
"""

from blockscope.clients.base import BaseAsyncClient, UpstreamUnavailable
from blockscope.clients.explorer import ExplorerClient, record_to_sample

__all__ = [
    "BaseAsyncClient",
    "UpstreamUnavailable",
    "ExplorerClient",
    "record_to_sample",
]
