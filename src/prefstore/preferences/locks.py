"""
prefstore.preferences.locks

Per-key mutual exclusion for resolution.

Resolution is an unguarded read-modify-write against the store. Holding the lock for
a root key serializes resolutions of that key within this process; it gives no
protection across processes (the unique `key` column covers concurrent creates there).
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class KeyedLocks:
    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._holders[key] = self._holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if not self._holders[key]:
                # Last holder/waiter gone: drop the lock so the registry doesn't grow unbounded.
                del self._holders[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)
