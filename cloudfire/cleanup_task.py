"""Background task that purges files left in the trash past retention."""

import asyncio
from datetime import timedelta
from typing import Optional

from common.logging_config import get_logger
from cloudfire import config
from cloudfire.engine import StorageEngine
from cloudfire.exceptions import StoreUnavailableError
from cloudfire.utils import utcnow

logger = get_logger(__name__)

CLEANUP_INTERVAL_SECONDS = 6 * 3600
INITIAL_DELAY_SECONDS = 60


class TrashRetentionCleaner:
    """
    Periodically purges trashed files older than the retention window.

    The first cycle runs shortly after startup so files that expired while
    the server was down do not wait a full interval.
    """

    def __init__(
        self,
        engine: StorageEngine,
        retention_days: Optional[int] = None,
        interval_seconds: int = CLEANUP_INTERVAL_SECONDS,
        initial_delay_seconds: int = INITIAL_DELAY_SECONDS,
    ):
        """
        Args:
            engine: Engine whose trash is cleaned
            retention_days: Days a file may stay in the trash (default from config, 0 disables)
            interval_seconds: Time between cleanup cycles (default 6 hours)
            initial_delay_seconds: Wait before the first cycle
        """
        self.engine = engine
        self.retention_days = config.TRASH_RETENTION_DAYS if retention_days is None else retention_days
        self.interval_seconds = interval_seconds
        self.initial_delay_seconds = initial_delay_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            logger.warning("Trash retention task already running")
            return
        if self.retention_days <= 0:
            logger.info("Trash retention disabled, cleanup task not started")
            return

        self._task = asyncio.create_task(self._run())
        logger.info(
            f"Started trash retention task (retention: {self.retention_days}d, interval: {self.interval_seconds}s)"
        )

    async def stop(self) -> None:
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

        logger.info("Stopped trash retention task")

    async def _run(self) -> None:
        delay = self.initial_delay_seconds
        while True:
            await asyncio.sleep(delay)
            delay = self.interval_seconds
            try:
                await self.cleanup_cycle()
            except StoreUnavailableError as e:
                logger.warning(f"Trash retention cycle skipped, store unavailable: {e}")
            except Exception as e:
                logger.error(f"Error in trash retention task: {e}", exc_info=True)

    async def cleanup_cycle(self) -> int:
        """
        Purge every file trashed more than retention_days ago.

        Returns:
            Number of files purged
        """
        if self.retention_days <= 0:
            return 0

        cutoff = utcnow() - timedelta(days=self.retention_days)
        purged = await self.engine.purge_trashed_before(cutoff)
        logger.info(f"Trash retention cycle complete: {purged} expired files purged")
        return purged
