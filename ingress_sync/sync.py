"""Synchronization of translated configuration to the data plane.

A reconciler translates its source object into a set of artifacts and calls
`sync_owner`. The store is updated first so readers see the new set, then the
set is pushed. Artifacts the owner no longer produces are deleted from the
data plane, and only once that succeeded are they removed from the store.
"""

from abc import ABC, abstractmethod
from collections.abc import Hashable, Mapping
import logging
from typing import Any

from .context import trace_context
from .exceptions import SyncException
from .store import ConfigStore

__all__ = [
    "DataPlaneClient",
    "sync_owner",
    "remove_owner",
]

_LOGGER = logging.getLogger(__name__)


class DataPlaneClient(ABC):
    """Pushes configuration to the data plane admin API."""

    @abstractmethod
    async def push(self, owner: Hashable, artifacts: Mapping[Any, Any]) -> None:
        """Create or update the artifacts produced by the owner."""

    @abstractmethod
    async def delete(self, owner: Hashable, artifacts: Mapping[Any, Any]) -> None:
        """Delete artifacts the owner no longer produces."""


async def sync_owner(
    store: ConfigStore[Any, Any],
    client: DataPlaneClient,
    owner: Hashable,
    artifacts: Mapping[Any, Any],
) -> dict[Any, Any]:
    """Apply the artifacts produced by the owner and garbage collect the rest.

    Returns:
        The artifacts that were discarded and removed.

    Raises:
        SyncException: If pushing or deleting failed. The discarded artifacts
            are attributed to the owner again so a later sync reports them.
    """
    with trace_context(f"Sync {owner}"):
        discard = store.update(owner, artifacts)
        try:
            await client.push(owner, artifacts)
        except Exception as err:
            store.set_parent_refs(owner, [*artifacts, *discard])
            raise SyncException(f"Failed to push configuration for {owner}: {err}") from err
        if not discard:
            return discard
        try:
            await client.delete(owner, discard)
        except Exception as err:
            store.set_parent_refs(owner, [*artifacts, *discard])
            raise SyncException(
                f"Failed to delete discarded configuration for {owner}: {err}"
            ) from err
        store.delete_config(*discard)
        _LOGGER.debug("Removed %d discarded artifacts for %s", len(discard), owner)
        return discard


async def remove_owner(
    store: ConfigStore[Any, Any], client: DataPlaneClient, owner: Hashable
) -> None:
    """Delete all artifacts of a deleted owner and forget the owner."""
    with trace_context(f"Remove {owner}"):
        artifacts = store.get(owner)
        if artifacts:
            try:
                await client.delete(owner, artifacts)
            except Exception as err:
                raise SyncException(
                    f"Failed to delete configuration for {owner}: {err}"
                ) from err
            store.delete_config(*artifacts)
        store.delete(owner)
