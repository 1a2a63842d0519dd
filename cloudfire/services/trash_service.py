"""Trash lifecycle: soft delete, restore and permanent purge."""

from datetime import datetime
from typing import Optional

from common.logging_config import get_logger
from cloudfire.repositories.file_repository import CloudFile, FileRepository
from cloudfire.repositories.folder_repository import Folder, FolderRepository
from cloudfire.services.quota_service import QuotaAccountant
from cloudfire.types import TrashListing
from cloudfire.utils import utcnow

logger = get_logger(__name__)


class TrashService:
    """
    Moves files and folders between the active and trashed states.

    Operations on ids that do not exist are silent no-ops. Trashed files keep
    counting against their owner's quota until they are purged.
    """

    def __init__(self, quota: Optional[QuotaAccountant] = None):
        self.file_repo = FileRepository()
        self.folder_repo = FolderRepository()
        self.quota = quota or QuotaAccountant()

    async def trash(self, file_id: str) -> Optional[CloudFile]:
        """
        Move a file to the trash. Sharing is revoked in the same transaction.
        """
        trashed = await self.file_repo.mark_trashed(file_id, utcnow())
        if trashed is None:
            logger.debug(f"Trash skipped, file not found [file_id={file_id}]")
            return None

        logger.info(f"Moved file to trash: {trashed.name} [file_id={file_id}]")
        return trashed

    async def restore(self, file_id: str) -> Optional[CloudFile]:
        """
        Bring a file back from the trash. A previous share is not re-enabled.
        """
        restored = await self.file_repo.mark_restored(file_id)
        if restored is None:
            logger.debug(f"Restore skipped, file not found [file_id={file_id}]")
            return None

        logger.info(f"Restored file from trash: {restored.name} [file_id={file_id}]")
        return restored

    async def purge(self, file_id: str) -> bool:
        """
        Permanently delete a file and release its quota.

        Works on active files too, which is how admins remove content. The
        quota is released first; if the delete then fails the release is
        undone and the error propagates.

        Returns:
            True if a file was deleted
        """
        cloud_file = await self.file_repo.get_by_id(file_id)
        if cloud_file is None:
            logger.debug(f"Purge skipped, file not found [file_id={file_id}]")
            return False

        await self.quota.adjust_usage(cloud_file.owner_id, -cloud_file.size)

        try:
            deleted = await self.file_repo.delete_file(file_id)
        except Exception:
            logger.error(f"Failed to delete file record, restoring quota [file_id={file_id}]", exc_info=True)
            try:
                await self.quota.adjust_usage(cloud_file.owner_id, cloud_file.size)
            except Exception as rollback_error:
                logger.error(f"Quota rollback failed [file_id={file_id}]: {rollback_error}")
            raise

        if not deleted:
            # Removed concurrently between the read and the delete.
            await self.quota.adjust_usage(cloud_file.owner_id, cloud_file.size)
            return False

        logger.info(f"Purged file {cloud_file.name} [file_id={file_id}] released={cloud_file.size}")
        return True

    async def get_trashed(self, owner_id: str) -> TrashListing:
        files = await self.file_repo.list_trashed_by_owner(owner_id)
        folders = await self.folder_repo.list_trashed_by_owner(owner_id)
        return TrashListing(files=files, folders=folders)

    async def empty_trash(self, owner_id: str) -> int:
        """
        Purge every trashed file of one owner, one after another.

        Trashed folders are left in place.

        Returns:
            Number of files purged
        """
        trashed_files = await self.file_repo.list_trashed_by_owner(owner_id)
        purged = 0
        for cloud_file in trashed_files:
            if await self.purge(cloud_file.file_id):
                purged += 1

        logger.info(f"Emptied trash [user_id={owner_id}] purged={purged}")
        return purged

    async def purge_trashed_before(self, cutoff: datetime) -> int:
        """
        Purge every trashed file whose trashed_at is at or before cutoff.

        Returns:
            Number of files purged
        """
        expired = await self.file_repo.list_trashed_before(cutoff)
        purged = 0
        for cloud_file in expired:
            if await self.purge(cloud_file.file_id):
                purged += 1

        if purged:
            logger.info(f"Retention cleanup purged {purged} files trashed before {cutoff.isoformat()}")
        return purged

    async def trash_folder(self, folder_id: str) -> Optional[Folder]:
        folder = await self.folder_repo.set_trashed(folder_id, utcnow())
        if folder is None:
            logger.debug(f"Trash skipped, folder not found [folder_id={folder_id}]")
            return None
        logger.info(f"Moved folder to trash: {folder.name} [folder_id={folder_id}]")
        return folder

    async def restore_folder(self, folder_id: str) -> Optional[Folder]:
        folder = await self.folder_repo.set_trashed(folder_id, None)
        if folder is None:
            logger.debug(f"Restore skipped, folder not found [folder_id={folder_id}]")
            return None
        logger.info(f"Restored folder from trash: {folder.name} [folder_id={folder_id}]")
        return folder
