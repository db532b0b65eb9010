"""Per-level exclusive locks for move requests."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Hashable, Optional

logger = logging.getLogger(__name__)


class LevelBusyError(Exception):
    """Raised when exclusive access to a level cannot be acquired in time."""

    def __init__(self, level_id: Hashable, timeout: float):
        self.level_id = level_id
        self.timeout = timeout
        super().__init__(
            f"Level {level_id} is busy: could not acquire it within {timeout:g}s"
        )


class _LockEntry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = asyncio.Lock()
        self.users = 0


class LevelLockRegistry:
    """
    Keyed asyncio locks, one per level id.

    Different ids never share a lock. An entry lives only while some caller
    holds or waits for it, so the registry does not grow with the number of
    levels ever moved.
    """

    def __init__(self):
        self._entries: dict[Hashable, _LockEntry] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable, timeout: Optional[float] = None) -> AsyncIterator[None]:
        """
        Hold the lock for key for the duration of the block.

        Args:
            key: Level id.
            timeout: Seconds to wait for the lock, None to wait forever.

        Raises:
            LevelBusyError: If the lock was not acquired within timeout.
        """
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = _LockEntry()
        entry.users += 1

        try:
            try:
                await asyncio.wait_for(entry.lock.acquire(), timeout)
            except asyncio.TimeoutError:
                logger.warning(f"Timed out after {timeout}s waiting for level {key}")
                raise LevelBusyError(key, timeout) from None

            try:
                yield
            finally:
                entry.lock.release()
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._entries[key]
