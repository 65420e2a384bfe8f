"""
Grouped key/value cache contract.

A group (for example "every cached page for one owner") holds any number of
named entries and carries a single expiration. Groups are written one entry
at a time and invalidated as a whole; there is no per-entry delete.
"""

from abc import ABC, abstractmethod


class CacheStore(ABC):
    """Contract for grouped cache backends.

    Values are opaque bytes; callers own the serialization format.
    """

    @abstractmethod
    async def set(self, group_key: str, entry_key: str, value: bytes, ttl_seconds: float) -> None:
        """Store ``value`` under ``entry_key`` in ``group_key``.

        Every call resets the expiration of the whole group to ``ttl_seconds``
        from now. It does not add to the remaining lifetime.
        """

    @abstractmethod
    async def get(self, group_key: str, entry_key: str) -> bytes:
        """Return the stored payload.

        Raises:
            CacheMissError: the group or the entry is absent or expired.
        """

    @abstractmethod
    async def delete(self, group_key: str) -> None:
        """Remove the group and every entry in it. No-op if absent."""
