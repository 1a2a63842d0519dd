"""Quota accounting: per-user consumed bytes."""

from typing import Optional, Tuple

from common.logging_config import get_logger
from cloudfire.exceptions import NotFoundError
from cloudfire.repositories.file_repository import FileRepository
from cloudfire.repositories.user_repository import UserRepository

logger = get_logger(__name__)


class QuotaAccountant:
    """
    Tracks storage_used for every user.

    Adjustments are a single atomic increment in the store, so two uploads
    for the same user finishing at the same time both land. Quota is advisory:
    nothing here rejects an operation for exceeding storage_limit.
    """

    def __init__(self):
        self.user_repo = UserRepository()
        self.file_repo = FileRepository()

    async def adjust_usage(self, user_id: str, delta_bytes: int) -> Optional[int]:
        """
        Add delta_bytes (may be negative) to the user's storage_used.

        A missing user is not an error: the adjustment is skipped so that a
        stale owner reference never fails an upload or purge. The result is
        not clamped; a negative total is persisted and logged as a warning.

        Args:
            user_id: Owner whose usage changes
            delta_bytes: Bytes to add

        Returns:
            New storage_used, or None when the user does not exist
        """
        new_usage = await self.user_repo.increment_storage_used(user_id, delta_bytes)

        if new_usage is None:
            logger.debug(f"Quota adjustment skipped, user not found [user_id={user_id}] delta={delta_bytes}")
            return None

        if new_usage < 0:
            logger.warning(
                f"Storage usage is negative after adjustment [user_id={user_id}] "
                f"delta={delta_bytes} storage_used={new_usage}"
            )
        else:
            logger.debug(f"Adjusted usage [user_id={user_id}] delta={delta_bytes} storage_used={new_usage}")

        return new_usage

    async def get_usage(self, user_id: str) -> Tuple[int, int]:
        """
        Returns:
            (storage_used, storage_limit) for the user

        Raises:
            NotFoundError: If the user does not exist
        """
        user = await self.user_repo.get_by_user_id(user_id)
        if user is None:
            raise NotFoundError(f"User '{user_id}' not found")
        return user.storage_used, user.storage_limit

    async def recalculate_usage(self, user_id: str) -> int:
        """
        Rebuild storage_used from the sizes of the user's files.

        Trashed files are included since they still count against quota. Used
        to repair drift left by an interrupted upload or purge.

        Returns:
            The recalculated usage in bytes

        Raises:
            NotFoundError: If the user does not exist
        """
        total = await self.file_repo.sum_sizes_by_owner(user_id)
        if not await self.user_repo.set_storage_used(user_id, total):
            raise NotFoundError(f"User '{user_id}' not found")

        logger.info(f"Recalculated usage [user_id={user_id}] storage_used={total}")
        return total
