"""File service for business logic."""

from typing import List, Optional

from common.constants import DEFAULT_MIME_TYPE, ROOT_FOLDER_ID
from common.logging_config import get_logger
from cloudfire.exceptions import AccountDisabledError, NotFoundError, ValidationError
from cloudfire.repositories.config_repository import ConfigRepository
from cloudfire.repositories.file_repository import CloudFile, FileRepository
from cloudfire.repositories.folder_repository import Folder, FolderRepository
from cloudfire.repositories.user_repository import UserRepository
from cloudfire.services.quota_service import QuotaAccountant
from cloudfire.types import DirectoryListing
from cloudfire.utils import build_storage_key, classify_file_type, generate_uuid, utcnow

logger = get_logger(__name__)


class FileService:
    def __init__(self, quota: Optional[QuotaAccountant] = None):
        self.file_repo = FileRepository()
        self.folder_repo = FolderRepository()
        self.user_repo = UserRepository()
        self.config_repo = ConfigRepository()
        self.quota = quota or QuotaAccountant()

    async def _ensure_parent(self, parent_id: str, owner_id: str) -> None:
        if parent_id == ROOT_FOLDER_ID:
            return
        parent = await self.folder_repo.get_by_id(parent_id)
        if parent is None or parent.owner_id != owner_id:
            raise NotFoundError(f"Folder '{parent_id}' not found")

    async def upload(
        self,
        owner_id: str,
        parent_id: str,
        name: str,
        mime_type: str,
        size: int,
        content: Optional[bytes] = None,
    ) -> CloudFile:
        """
        Store a new file and charge its size to the owner's quota.

        The quota is charged before the record is written. If the write
        fails the charge is reverted and the write error propagates.

        Args:
            owner_id: Uploading user
            parent_id: Folder id or the root sentinel
            name: File name
            mime_type: Reported mime-type; empty means application/octet-stream
            size: Size in bytes
            content: Raw file bytes

        Returns:
            The stored file metadata

        Raises:
            NotFoundError: If the owner or parent folder does not exist
            AccountDisabledError: If the owner is deactivated
            ValidationError: If size is negative or name is empty
        """
        if size < 0:
            raise ValidationError("File size cannot be negative")
        if not name or not name.strip():
            raise ValidationError("File name is required")

        owner = await self.user_repo.get_by_user_id(owner_id)
        if owner is None:
            raise NotFoundError(f"User '{owner_id}' not found")
        if not owner.is_active:
            raise AccountDisabledError(f"Account '{owner.username}' is disabled")

        await self._ensure_parent(parent_id, owner_id)

        mime_type = mime_type or DEFAULT_MIME_TYPE
        storage_config = await self.config_repo.get()
        root_path = storage_config.root_path if storage_config else None

        cloud_file = CloudFile(
            file_id=generate_uuid(),
            name=name,
            size=size,
            file_type=classify_file_type(mime_type),
            parent_id=parent_id,
            owner_id=owner_id,
            mime_type=mime_type,
            storage_key=build_storage_key(root_path, name),
            created_at=utcnow(),
        )

        new_usage = await self.quota.adjust_usage(owner_id, size)
        if new_usage is not None and new_usage > owner.storage_limit:
            logger.warning(
                f"User over storage limit after upload [user_id={owner_id}] "
                f"storage_used={new_usage} storage_limit={owner.storage_limit}"
            )

        try:
            await self.file_repo.create_file(cloud_file, content)
        except Exception:
            logger.error(f"Failed to persist file {name}, reverting quota charge [user_id={owner_id}]", exc_info=True)
            try:
                await self.quota.adjust_usage(owner_id, -size)
            except Exception as rollback_error:
                logger.error(f"Quota rollback failed [user_id={owner_id}] size={size}: {rollback_error}")
            raise

        logger.info(
            f"Uploaded file {name} [file_id={cloud_file.file_id}] "
            f"size={size} type={cloud_file.file_type.value} owner={owner_id}"
        )
        return cloud_file

    async def list_directory(self, owner_id: str, parent_id: str = ROOT_FOLDER_ID) -> DirectoryListing:
        files = await self.list_files(owner_id, parent_id)
        folders = await self.list_folders(owner_id, parent_id)
        return DirectoryListing(files=files, folders=folders)

    async def list_files(self, owner_id: str, parent_id: str = ROOT_FOLDER_ID) -> List[CloudFile]:
        return await self.file_repo.list_by_parent(parent_id, owner_id)

    async def list_folders(self, owner_id: str, parent_id: str = ROOT_FOLDER_ID) -> List[Folder]:
        return await self.folder_repo.list_by_parent(parent_id, owner_id)

    async def get_file(self, file_id: str) -> Optional[CloudFile]:
        return await self.file_repo.get_by_id(file_id)

    async def get_content(self, file_id: str) -> Optional[bytes]:
        return await self.file_repo.get_content(file_id)

    async def get_folder(self, folder_id: str) -> Optional[Folder]:
        return await self.folder_repo.get_by_id(folder_id)

    async def list_all_files(self) -> List[CloudFile]:
        return await self.file_repo.list_all()

    async def create_folder(self, owner_id: str, name: str, parent_id: str = ROOT_FOLDER_ID) -> Folder:
        if not name or not name.strip():
            raise ValidationError("Folder name is required")

        owner = await self.user_repo.get_by_user_id(owner_id)
        if owner is None:
            raise NotFoundError(f"User '{owner_id}' not found")

        await self._ensure_parent(parent_id, owner_id)

        folder = Folder(
            folder_id=generate_uuid(),
            name=name,
            parent_id=parent_id,
            owner_id=owner_id,
            created_at=utcnow(),
        )
        await self.folder_repo.create_folder(folder)

        logger.info(f"Created folder {name} [folder_id={folder.folder_id}] owner={owner_id}")
        return folder
