"""Repository layer for data access."""

from cloudfire.repositories.user_repository import User, UserRepository
from cloudfire.repositories.file_repository import CloudFile, FileRepository
from cloudfire.repositories.folder_repository import Folder, FolderRepository
from cloudfire.repositories.config_repository import ConfigRepository, StorageConfig

__all__ = [
    "User",
    "UserRepository",
    "CloudFile",
    "FileRepository",
    "Folder",
    "FolderRepository",
    "ConfigRepository",
    "StorageConfig",
]
