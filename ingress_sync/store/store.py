"""Store module for tracking translated configuration by owning resource."""

from abc import ABC, abstractmethod
from collections.abc import Hashable, Iterable, Mapping
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


class ConfigStore(ABC, Generic[K, T]):
    """Abstract base class for the ownership tracking configuration store.

    Owners (e.g. a Gateway or an IngressClass) produce artifacts (e.g. one
    translated route or service). The store records, per owner, the keys of
    the artifacts it currently produces in its parent refs, and keeps a single
    config table from artifact key to value shared by every owner.

    Owner keys and artifact keys share the same key type. An artifact key may
    be claimed by more than one owner; the config table keeps the last value
    written and there is no reference count.
    """

    @abstractmethod
    def get_parent_refs(self, owner: K) -> list[K]:
        """Return the artifact keys currently attributed to the owner."""

    @abstractmethod
    def set_parent_refs(self, owner: K, refs: Iterable[K]) -> None:
        """Replace the artifact keys attributed to the owner.

        The config table is not modified.
        """

    @abstractmethod
    def get(self, owner: K) -> dict[K, T]:
        """Return the materialized artifacts of the owner.

        Keys in the owner's parent refs without a value in the config table
        are omitted.
        """

    @abstractmethod
    def list(self) -> dict[K, T]:
        """Return a snapshot of the whole config table."""

    @abstractmethod
    def update_config(self, value: T, *keys: K) -> None:
        """Set the value of each key in the config table directly."""

    @abstractmethod
    def update(self, owner: K, artifacts: Mapping[K, T]) -> dict[K, T]:
        """Replace the artifacts produced by the owner.

        Every artifact is written to the config table and the owner's parent
        refs are replaced with the artifact keys.

        Returns:
            The discard set: artifacts previously attributed to the owner that
            it no longer produces, with their current values. The entries are
            left in the config table; callers remove them with `delete_config`
            once the downstream deletion succeeded.
        """

    @abstractmethod
    def set(self, key: K, value: T) -> None:
        """Set a single config table entry."""

    @abstractmethod
    def delete(self, owner: K) -> None:
        """Forget the owner's parent refs and its own config table entry."""

    @abstractmethod
    def delete_config(self, *keys: K) -> None:
        """Remove keys from the config table, leaving parent refs as is."""
