"""
Single-slot scheduler for exports.

The browser process is shared by every export, so the whole export is a
critical section: tasks are admitted in submission order and run one at a
time. A task that fails only fails for its own caller; the next queued task
still runs.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ExclusiveScheduler:
    """FIFO mutual exclusion for zero-argument async tasks"""

    def __init__(self):
        # asyncio.Lock hands the slot to the oldest waiter, which gives FIFO admission
        self._lock = asyncio.Lock()
        self._pending = 0

    @property
    def pending(self) -> int:
        """Tasks admitted (running or waiting) but not yet finished"""
        return self._pending

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def run_exclusive(self, task: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``task`` once every previously submitted task has settled.

        Args:
            task: Zero-argument coroutine function

        Returns:
            Whatever the task returns; its exception propagates to this caller only
        """
        self._pending += 1
        try:
            if self._lock.locked():
                logger.debug("Export queued behind %d pending task(s)", self._pending - 1)
            async with self._lock:
                return await task()
        finally:
            self._pending -= 1
