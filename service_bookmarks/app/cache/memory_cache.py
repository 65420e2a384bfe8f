"""
In-process grouped cache.

Entries live in one flat dict under compound ``"<group>:<entry>"`` keys.
A separate record per group holds its expiry deadline and its member keys,
which is what lets a whole group expire or be deleted at once. An expired
group is purged when touched, and writes sweep out every expired group at
most once per ``sweep_interval_seconds`` so untouched groups do not pile up.

Suitable for local development and tests; multiple workers do not share it.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Set

from shared.logging import get_logger
from shared.errors import CacheMissError
from .base import CacheStore


@dataclass
class _GroupRecord:
    expires_at: float
    entry_keys: Set[str] = field(default_factory=set)


class InMemoryCacheStore(CacheStore):
    """Grouped cache held in a dict."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval_seconds: float = 60.0,
    ):
        self._clock = clock
        self.sweep_interval_seconds = sweep_interval_seconds
        self._next_sweep = clock() + sweep_interval_seconds
        self._entries: Dict[str, bytes] = {}
        self._groups: Dict[str, _GroupRecord] = {}
        self.logger = get_logger("bookmarks.cache.memory")

    @staticmethod
    def _compound_key(group_key: str, entry_key: str) -> str:
        return f"{group_key}:{entry_key}"

    def _live_group(self, group_key: str):
        record = self._groups.get(group_key)
        if record is None:
            return None
        if record.expires_at <= self._clock():
            self._drop_group(group_key)
            return None
        return record

    def _drop_group(self, group_key: str) -> None:
        record = self._groups.pop(group_key, None)
        if record is None:
            return
        for entry_key in record.entry_keys:
            self._entries.pop(self._compound_key(group_key, entry_key), None)

    def _sweep_expired(self) -> None:
        now = self._clock()
        if now < self._next_sweep:
            return
        self._next_sweep = now + self.sweep_interval_seconds

        expired = [key for key, record in self._groups.items() if record.expires_at <= now]
        for key in expired:
            self._drop_group(key)
        if expired:
            self.logger.debug("Swept expired cache groups", groups=len(expired))

    async def set(self, group_key: str, entry_key: str, value: bytes, ttl_seconds: float) -> None:
        self._sweep_expired()
        record = self._live_group(group_key)
        expires_at = self._clock() + ttl_seconds
        if record is None:
            record = _GroupRecord(expires_at=expires_at)
            self._groups[group_key] = record
        else:
            record.expires_at = expires_at

        record.entry_keys.add(entry_key)
        self._entries[self._compound_key(group_key, entry_key)] = bytes(value)

    async def get(self, group_key: str, entry_key: str) -> bytes:
        record = self._live_group(group_key)
        if record is None or entry_key not in record.entry_keys:
            raise CacheMissError(group_key, entry_key)
        return self._entries[self._compound_key(group_key, entry_key)]

    async def delete(self, group_key: str) -> None:
        self._drop_group(group_key)

    def __len__(self) -> int:
        return len(self._entries)
