"""Single entry point to every storage-engine operation."""

from datetime import datetime
from typing import List, Optional, Tuple

from common.constants import ROOT_FOLDER_ID
from common.logging_config import get_logger
from common.types import Plan, SystemStats
from cloudfire.database import initialize_store
from cloudfire.exceptions import NotFoundError, UnauthorizedAccessError
from cloudfire.repositories.config_repository import StorageConfig
from cloudfire.repositories.file_repository import CloudFile
from cloudfire.repositories.folder_repository import Folder, FolderRepository
from cloudfire.repositories.user_repository import User
from cloudfire.services import (
    AdminService,
    AuthService,
    FileService,
    QuotaAccountant,
    ShareService,
    TrashService,
)
from cloudfire.types import DirectoryListing, TrashListing

logger = get_logger(__name__)


class StorageEngine:
    """
    Facade over the identity, quota, file, trash, share and admin services.

    Every method is a coroutine. The engine is stateless apart from its
    service objects; all state lives in the store opened by
    ``initialize_store``.
    """

    def __init__(self):
        self.quota = QuotaAccountant()
        self.auth_service = AuthService()
        self.file_service = FileService(self.quota)
        self.trash_service = TrashService(self.quota)
        self.share_service = ShareService()
        self.admin_service = AdminService()

    async def start(self) -> User:
        """
        Open the store and seed the admin account.
        """
        await initialize_store()
        return await self.seed_admin()

    # Identity

    async def register(self, username: str, password: str, email: str = "", **kwargs) -> User:
        return await self.auth_service.register_user(username, password, email, **kwargs)

    async def authenticate(self, username: str, password: str) -> Optional[User]:
        return await self.auth_service.authenticate(username, password)

    async def login(self, username: str, password: str) -> Tuple[User, str]:
        return await self.auth_service.login_user(username, password)

    async def validate_api_key(self, api_key: str) -> Optional[User]:
        return await self.auth_service.validate_api_key(api_key)

    async def get_user(self, user_id: str) -> Optional[User]:
        return await self.auth_service.get_user(user_id)

    async def list_users(self) -> List[User]:
        return await self.auth_service.list_users()

    async def update_user(self, user: User) -> User:
        return await self.auth_service.update_user(user)

    async def edit_user(self, username: str, **changes) -> User:
        return await self.auth_service.edit_user(username, **changes)

    async def upgrade_plan(self, user_id: str, plan: Plan) -> User:
        return await self.auth_service.upgrade_plan(user_id, plan)

    async def seed_admin(self) -> User:
        return await self.auth_service.seed_admin()

    async def delete_user(self, username: str, cascade: bool = False) -> bool:
        """
        Delete a user account.

        With cascade, the user's files are purged and their folders removed
        first. Without it, files and folders stay behind owned by a missing id.

        Returns:
            True if the user existed
        """
        if cascade:
            user = await self.auth_service.get_user_by_username(username)
            if user is not None:
                owned_files = await self.file_service.file_repo.list_by_owner(user.user_id)
                for cloud_file in owned_files:
                    await self.trash_service.purge(cloud_file.file_id)
                removed_folders = await FolderRepository.delete_by_owner(user.user_id)
                logger.info(
                    f"Cascade delete for {username}: files={len(owned_files)} folders={removed_folders}"
                )

        return await self.auth_service.delete_user(username)

    # Quota

    async def adjust_usage(self, user_id: str, delta_bytes: int) -> Optional[int]:
        return await self.quota.adjust_usage(user_id, delta_bytes)

    async def recalculate_usage(self, user_id: str) -> int:
        return await self.quota.recalculate_usage(user_id)

    async def get_usage(self, user_id: str) -> Tuple[int, int]:
        return await self.quota.get_usage(user_id)

    # Files and folders

    async def upload(
        self,
        owner_id: str,
        parent_id: str,
        name: str,
        mime_type: str,
        size: int,
        content: Optional[bytes] = None,
    ) -> CloudFile:
        return await self.file_service.upload(owner_id, parent_id, name, mime_type, size, content)

    async def list(self, owner_id: str, parent_id: str = ROOT_FOLDER_ID) -> DirectoryListing:
        return await self.file_service.list_directory(owner_id, parent_id)

    async def list_files(self, owner_id: str, parent_id: str = ROOT_FOLDER_ID) -> List[CloudFile]:
        return await self.file_service.list_files(owner_id, parent_id)

    async def list_folders(self, owner_id: str, parent_id: str = ROOT_FOLDER_ID) -> List[Folder]:
        return await self.file_service.list_folders(owner_id, parent_id)

    async def get_file(self, file_id: str) -> Optional[CloudFile]:
        return await self.file_service.get_file(file_id)

    async def get_folder(self, folder_id: str) -> Optional[Folder]:
        return await self.file_service.get_folder(folder_id)

    async def get_content(self, file_id: str) -> Optional[bytes]:
        return await self.file_service.get_content(file_id)

    async def list_all_files(self) -> List[CloudFile]:
        return await self.file_service.list_all_files()

    async def create_folder(self, owner_id: str, name: str, parent_id: str = ROOT_FOLDER_ID) -> Folder:
        return await self.file_service.create_folder(owner_id, name, parent_id)

    async def get_owned_file(self, file_id: str, user: User) -> CloudFile:
        """
        Fetch a file on behalf of a user.

        Raises:
            NotFoundError: If the file does not exist
            UnauthorizedAccessError: If the user neither owns it nor is an admin
        """
        cloud_file = await self.get_file(file_id)
        if cloud_file is None:
            raise NotFoundError(f"File '{file_id}' not found")
        if cloud_file.owner_id != user.user_id and not user.is_admin:
            raise UnauthorizedAccessError(f"File '{file_id}' belongs to another user")
        return cloud_file

    # Trash

    async def trash(self, file_id: str) -> Optional[CloudFile]:
        return await self.trash_service.trash(file_id)

    async def restore(self, file_id: str) -> Optional[CloudFile]:
        return await self.trash_service.restore(file_id)

    async def purge(self, file_id: str) -> bool:
        return await self.trash_service.purge(file_id)

    async def trash_folder(self, folder_id: str) -> Optional[Folder]:
        return await self.trash_service.trash_folder(folder_id)

    async def restore_folder(self, folder_id: str) -> Optional[Folder]:
        return await self.trash_service.restore_folder(folder_id)

    async def get_trashed(self, owner_id: str) -> TrashListing:
        return await self.trash_service.get_trashed(owner_id)

    async def empty_trash(self, owner_id: str) -> int:
        return await self.trash_service.empty_trash(owner_id)

    async def purge_trashed_before(self, cutoff: datetime) -> int:
        return await self.trash_service.purge_trashed_before(cutoff)

    # Sharing

    async def set_share(self, file_id: str, enabled: bool, token: Optional[str] = None) -> CloudFile:
        return await self.share_service.set_share(file_id, enabled, token)

    async def resolve_share(self, token: str) -> Optional[CloudFile]:
        return await self.share_service.resolve_share(token)

    async def get_shared_content(self, token: str) -> Optional[Tuple[CloudFile, bytes]]:
        return await self.share_service.get_shared_content(token)

    # Admin

    async def get_config(self) -> StorageConfig:
        return await self.admin_service.get_config()

    async def put_config(self, storage_config: StorageConfig) -> StorageConfig:
        return await self.admin_service.put_config(storage_config)

    async def system_stats(self) -> SystemStats:
        return await self.admin_service.system_stats()
