"""Pydantic schemas for file, folder, trash and share endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from common.constants import ROOT_FOLDER_ID
from common.types import FileType
from cloudfire.repositories.file_repository import CloudFile
from cloudfire.repositories.folder_repository import Folder


class FileMetadataResponse(BaseModel):
    """Response model for file metadata."""
    file_id: str
    name: str
    size: int
    file_type: FileType
    parent_id: str
    owner_id: str
    mime_type: str
    storage_key: str
    created_at: datetime
    is_shared: bool
    share_token: Optional[str] = None
    share_created_at: Optional[datetime] = None
    is_trashed: bool
    trashed_at: Optional[datetime] = None

    @classmethod
    def from_file(cls, cloud_file: CloudFile) -> "FileMetadataResponse":
        return cls(
            file_id=cloud_file.file_id,
            name=cloud_file.name,
            size=cloud_file.size,
            file_type=cloud_file.file_type,
            parent_id=cloud_file.parent_id,
            owner_id=cloud_file.owner_id,
            mime_type=cloud_file.mime_type,
            storage_key=cloud_file.storage_key,
            created_at=cloud_file.created_at,
            is_shared=cloud_file.is_shared,
            share_token=cloud_file.share_token,
            share_created_at=cloud_file.share_created_at,
            is_trashed=cloud_file.is_trashed,
            trashed_at=cloud_file.trashed_at,
        )


class FolderResponse(BaseModel):
    """Response model for folder metadata."""
    folder_id: str
    name: str
    parent_id: str
    owner_id: str
    created_at: datetime
    is_trashed: bool
    trashed_at: Optional[datetime] = None

    @classmethod
    def from_folder(cls, folder: Folder) -> "FolderResponse":
        return cls(
            folder_id=folder.folder_id,
            name=folder.name,
            parent_id=folder.parent_id,
            owner_id=folder.owner_id,
            created_at=folder.created_at,
            is_trashed=folder.is_trashed,
            trashed_at=folder.trashed_at,
        )


class CreateFolderRequest(BaseModel):
    """Request model for folder creation."""
    name: str
    parent_id: str = ROOT_FOLDER_ID


class ListingResponse(BaseModel):
    """Response model for a directory or trash listing."""
    files: List[FileMetadataResponse]
    folders: List[FolderResponse]

    @classmethod
    def from_listing(cls, listing) -> "ListingResponse":
        """Build from a DirectoryListing or TrashListing."""
        return cls(
            files=[FileMetadataResponse.from_file(f) for f in listing.files],
            folders=[FolderResponse.from_folder(f) for f in listing.folders],
        )


class ShareRequest(BaseModel):
    """Request model for enabling or revoking a share link."""
    enabled: bool


class ShareResponse(BaseModel):
    """Response model for share updates."""
    file_id: str
    is_shared: bool
    share_token: Optional[str] = None
    share_url: Optional[str] = None
