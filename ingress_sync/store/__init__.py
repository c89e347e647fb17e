"""
The store module tracks which translated configuration each source object produces.

- Owners and artifacts are identified by the same hashable key type, typically
  NamedResource.
- Artifact values are opaque and never inspected.
- Updates replace an owner's artifacts and report the ones that fell out so
  the caller can garbage collect them downstream.

This abstract interface allows for various implementations.
"""

from .store import ConfigStore
from .in_memory import InMemoryConfigStore

__all__ = [
    "ConfigStore",
    "InMemoryConfigStore",
]
