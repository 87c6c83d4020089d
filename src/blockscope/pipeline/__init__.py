"""Range pipeline — Cache → (fallback) Explorer API → Delta Codec → envelope.

Components:
- RangeOrchestrator: tries the cache, falls back to the API, encodes
"""

from blockscope.pipeline.orchestrator import RangeOrchestrator

__all__ = ["RangeOrchestrator"]
