"""Per-key asyncio locks for single-flight enrichment."""
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Tuple


class KeyedLock:
    """Hands out one asyncio.Lock per key; idle keys are dropped."""

    def __init__(self) -> None:
        # key -> (lock, number of holders and waiters)
        self._locks: Dict[str, Tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock, users = self._locks.get(key, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[key] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[key]
            if users <= 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, users - 1)

    def __len__(self) -> int:
        return len(self._locks)
