"""Module for in memory configuration store."""

from collections.abc import Iterable, Mapping
import logging
import threading

from .store import ConfigStore, K, T


_LOGGER = logging.getLogger(__name__)


class InMemoryConfigStore(ConfigStore[K, T]):
    """In-memory implementation of the ConfigStore interface.

    Every call holds a single lock for its duration so reconcilers running in
    different threads or tasks observe each call atomically. There are no
    transactions across calls.
    """

    def __init__(self) -> None:
        """Initialize the InMemoryConfigStore."""
        self._lock = threading.Lock()
        self._parent_refs: dict[K, list[K]] = {}
        self._configs: dict[K, T] = {}

    def get_parent_refs(self, owner: K) -> list[K]:
        """Return the artifact keys currently attributed to the owner."""
        with self._lock:
            return list(self._parent_refs.get(owner, []))

    def set_parent_refs(self, owner: K, refs: Iterable[K]) -> None:
        """Replace the artifact keys attributed to the owner."""
        with self._lock:
            self._parent_refs[owner] = list(refs)

    def get(self, owner: K) -> dict[K, T]:
        """Return the materialized artifacts of the owner."""
        with self._lock:
            return {
                ref: self._configs[ref]
                for ref in self._parent_refs.get(owner, [])
                if ref in self._configs
            }

    def list(self) -> dict[K, T]:
        """Return a snapshot of the whole config table."""
        with self._lock:
            return dict(self._configs)

    def update_config(self, value: T, *keys: K) -> None:
        """Set the value of each key in the config table directly."""
        with self._lock:
            for key in keys:
                self._configs[key] = value

    def update(self, owner: K, artifacts: Mapping[K, T]) -> dict[K, T]:
        """Replace the artifacts produced by the owner, returning the discard set."""
        with self._lock:
            old_refs = self._parent_refs.get(owner, [])
            new_refs: list[K] = []
            still_used: set[K] = set()
            for key, value in artifacts.items():
                self._configs[key] = value
                new_refs.append(key)
                still_used.add(key)
            self._parent_refs[owner] = new_refs

            discard: dict[K, T] = {}
            for old in old_refs:
                if old in still_used:
                    continue
                if old in self._configs:
                    discard[old] = self._configs[old]
            _LOGGER.debug(
                "Updated %s with %d artifacts, %d discarded",
                owner,
                len(new_refs),
                len(discard),
            )
            return discard

    def set(self, key: K, value: T) -> None:
        """Set a single config table entry."""
        with self._lock:
            self._configs[key] = value

    def delete(self, owner: K) -> None:
        """Forget the owner's parent refs and its own config table entry."""
        with self._lock:
            _LOGGER.debug("Deleting owner %s from store", owner)
            self._parent_refs.pop(owner, None)
            self._configs.pop(owner, None)

    def delete_config(self, *keys: K) -> None:
        """Remove keys from the config table, leaving parent refs as is."""
        with self._lock:
            for key in keys:
                self._configs.pop(key, None)
