"""Detached best-effort side effects (access counters, delete-after-consume)."""

import asyncio
import logging
from typing import Awaitable, Set

logger = logging.getLogger(__name__)


class BestEffortRunner:
    """
    Runs coroutines whose outcome nobody waits for.

    Failures are logged at WARNING and discarded. drain() lets shutdown
    hooks and tests wait for everything spawned so far.
    """

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Awaitable, description: str) -> asyncio.Task:
        """
        Schedule a coroutine on the running loop.

        Args:
            coro: Coroutine to run
            description: Short label used in log messages

        Returns:
            The created task
        """
        task = asyncio.ensure_future(coro)
        task.set_name(description)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)

        if task.cancelled():
            logger.debug(f"Best-effort task cancelled: {task.get_name()}")
            return

        exc = task.exception()
        if exc is not None:
            logger.warning(f"Best-effort task failed: {task.get_name()}: {exc}")
        else:
            logger.debug(f"Best-effort task finished: {task.get_name()}")

    async def drain(self) -> None:
        """Wait until every spawned task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
