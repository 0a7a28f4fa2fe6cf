import asyncio
from contextlib import asynccontextmanager
from typing import Dict


class ConcurrencyManager:
    """
    Serializes state-changing operations on the same session.
    Commands and transport events for one session are awaited one after
    another, never interleaved. Different sessions do not block each other.
    """
    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}

    @asynccontextmanager
    async def acquire_lock(self, resource_id: str):
        lock = self._locks.setdefault(resource_id, asyncio.Lock())
        async with lock:
            yield

    def forget(self, resource_id: str) -> None:
        lock = self._locks.get(resource_id)
        if lock is not None and not lock.locked():
            del self._locks[resource_id]
