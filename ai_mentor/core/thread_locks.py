"""
Per-thread serialization.

Turns, summarization, streaming finalize and judging of one thread must not
interleave. Each thread id maps to an asyncio.Lock; entries are dropped once
no task holds or awaits them. The registry is process-local: deployments
with several workers rely on sticky routing per thread.

Dependencies: asyncio
System role: Thread Lock Registry
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Hashable


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


class ThreadLockRegistry:
    """
    Registry of per-thread locks.

    acquire() and release() may run in different tasks, which the streaming
    path needs: the request task acquires, the background finalize task
    releases.
    """

    def __init__(self) -> None:
        self._entries: dict[Hashable, _Entry] = {}

    async def acquire(self, thread_id: Hashable) -> None:
        entry = self._entries.get(thread_id)
        if entry is None:
            entry = self._entries[thread_id] = _Entry()
        entry.users += 1
        try:
            await entry.lock.acquire()
        except BaseException:
            self._drop_user(thread_id, entry)
            raise

    def release(self, thread_id: Hashable) -> None:
        entry = self._entries.get(thread_id)
        if entry is None or not entry.lock.locked():
            raise RuntimeError(f"Lock for thread {thread_id} is not held")
        entry.lock.release()
        self._drop_user(thread_id, entry)

    def is_locked(self, thread_id: Hashable) -> bool:
        entry = self._entries.get(thread_id)
        return entry is not None and entry.lock.locked()

    def __len__(self) -> int:
        return len(self._entries)

    @asynccontextmanager
    async def hold(self, thread_id: Hashable) -> AsyncIterator[None]:
        """Hold the thread lock for the duration of the block."""
        await self.acquire(thread_id)
        try:
            yield
        finally:
            self.release(thread_id)

    def _drop_user(self, thread_id: Hashable, entry: _Entry) -> None:
        entry.users -= 1
        if entry.users == 0 and self._entries.get(thread_id) is entry:
            del self._entries[thread_id]


thread_locks = ThreadLockRegistry()
