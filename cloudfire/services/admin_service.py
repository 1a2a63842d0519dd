"""Admin-only configuration and aggregation."""

from common.logging_config import get_logger
from common.types import CategoryCount, FileType, SystemStats
from cloudfire.repositories.config_repository import ConfigRepository, StorageConfig
from cloudfire.repositories.file_repository import FileRepository
from cloudfire.repositories.user_repository import UserRepository

logger = get_logger(__name__)


class AdminService:
    def __init__(self):
        self.config_repo = ConfigRepository()
        self.file_repo = FileRepository()
        self.user_repo = UserRepository()

    async def get_config(self) -> StorageConfig:
        storage_config = await self.config_repo.get()
        if storage_config is None:
            return StorageConfig()
        return storage_config

    async def put_config(self, storage_config: StorageConfig) -> StorageConfig:
        await self.config_repo.put(storage_config)
        return storage_config

    async def system_stats(self) -> SystemStats:
        """
        Totals over every user and file, with one breakdown entry per FileType.
        """
        total_users = await self.user_repo.count_users()
        total_files, total_storage = await self.file_repo.get_totals()
        counts = await self.file_repo.count_by_type()

        breakdown = [CategoryCount(name=file_type.value, count=counts.get(file_type, 0)) for file_type in FileType]

        logger.debug(f"System stats: users={total_users} files={total_files} storage={total_storage}")
        return SystemStats(
            total_users=total_users,
            total_files=total_files,
            total_storage=total_storage,
            breakdown_by_category=breakdown,
        )
