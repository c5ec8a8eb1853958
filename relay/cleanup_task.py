"""Background task for purging expired database payloads."""

import asyncio
import logging
from typing import Callable, Optional

from relay.config import CLEANUP_INTERVAL_SECONDS
from relay.repositories.payload_repository import PayloadRepository
from relay.utils import current_time_ms

logger = logging.getLogger(__name__)


class ExpiredPayloadCleaner:
    """
    Background task that periodically deletes expired rows from encoded_payloads.
    """

    def __init__(
        self,
        interval_seconds: int = CLEANUP_INTERVAL_SECONDS,
        clock: Callable[[], int] = current_time_ms
    ):
        """
        Initialize cleaner task.

        Args:
            interval_seconds: Time between cleanup cycles (default 1 hour)
            clock: Returns the current time in milliseconds
        """
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the background cleanup task."""
        if self._running:
            logger.warning("Cleanup task already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info(f"Started expired payload cleanup task (interval: {self.interval_seconds}s)")

    async def stop(self) -> None:
        """Stop the background cleanup task."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Stopped expired payload cleanup task")

    async def _run(self) -> None:
        """Main loop for cleanup task."""
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)

                if not self._running:
                    break

                await self.cleanup_cycle()

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in cleanup task: {e}", exc_info=True)

    async def cleanup_cycle(self) -> int:
        """
        Execute one cleanup cycle.

        Returns:
            Number of rows deleted
        """
        deleted = await asyncio.to_thread(PayloadRepository.delete_expired, self._clock())
        logger.debug(f"Cleanup cycle complete: {deleted} expired payloads removed")
        return deleted
