"""
Test suite for ThreadLockRegistry.

System role: Verification of per-thread turn serialization
"""

import asyncio
import uuid

import pytest

from ai_mentor.core.thread_locks import ThreadLockRegistry


class TestThreadLockRegistry:
    """Test suite for per-thread locking."""

    @pytest.mark.asyncio
    async def test_hold_serializes_same_thread(self, locks: ThreadLockRegistry) -> None:
        """Test two holders of one thread never overlap."""
        # Arrange
        thread_id = uuid.uuid4()
        events: list[str] = []

        async def turn(name: str) -> None:
            async with locks.hold(thread_id):
                events.append(f"{name}-start")
                await asyncio.sleep(0.01)
                events.append(f"{name}-end")

        # Act
        await asyncio.gather(turn("a"), turn("b"))

        # Assert
        assert events in (
            ["a-start", "a-end", "b-start", "b-end"],
            ["b-start", "b-end", "a-start", "a-end"],
        )

    @pytest.mark.asyncio
    async def test_different_threads_do_not_block(self, locks: ThreadLockRegistry) -> None:
        """Test locks are independent per thread."""
        # Arrange
        first, second = uuid.uuid4(), uuid.uuid4()

        # Act
        await locks.acquire(first)
        await asyncio.wait_for(locks.acquire(second), timeout=0.5)

        # Assert
        assert locks.is_locked(first)
        assert locks.is_locked(second)
        locks.release(first)
        locks.release(second)

    @pytest.mark.asyncio
    async def test_release_from_another_task(self, locks: ThreadLockRegistry) -> None:
        """Test a lock acquired in one task can be released in another."""
        # Arrange
        thread_id = uuid.uuid4()
        await locks.acquire(thread_id)

        # Act
        await asyncio.create_task(self._release(locks, thread_id))

        # Assert
        assert not locks.is_locked(thread_id)

    @staticmethod
    async def _release(locks: ThreadLockRegistry, thread_id: uuid.UUID) -> None:
        locks.release(thread_id)

    @pytest.mark.asyncio
    async def test_entries_dropped_when_unused(self, locks: ThreadLockRegistry) -> None:
        """Test the registry does not grow with finished threads."""
        # Act
        async with locks.hold(uuid.uuid4()):
            assert len(locks) == 1

        # Assert
        assert len(locks) == 0

    def test_release_without_acquire_raises(self, locks: ThreadLockRegistry) -> None:
        """Test releasing an unheld lock is an error."""
        # Act & Assert
        with pytest.raises(RuntimeError):
            locks.release(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_hold_releases_on_error(self, locks: ThreadLockRegistry) -> None:
        """Test the lock is released when the block raises."""
        # Arrange
        thread_id = uuid.uuid4()

        # Act
        with pytest.raises(ValueError):
            async with locks.hold(thread_id):
                raise ValueError("boom")

        # Assert
        assert not locks.is_locked(thread_id)
        assert len(locks) == 0
