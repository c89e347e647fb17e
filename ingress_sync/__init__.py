"""
ingress-sync keeps the configuration of a shared gateway data plane consistent
with the Kubernetes objects it is derived from.

- `store` tracks which translated artifacts each source object produces and
  reports the ones to garbage collect.
- `webhook` holds the admission validators refusing unsafe deletions and
  colliding GatewayProxy objects.
- `sync` applies translated artifacts to the data plane.
"""

__all__ = [
    "manifest",
    "store",
    "sync",
    "webhook",
    "exceptions",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
