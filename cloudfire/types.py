"""Engine-specific result type definitions."""

from dataclasses import dataclass, field
from typing import List

from cloudfire.repositories.file_repository import CloudFile
from cloudfire.repositories.folder_repository import Folder


@dataclass(frozen=True)
class DirectoryListing:
    """
    Direct, non-trashed children of one folder for one owner.
    """
    files: List[CloudFile] = field(default_factory=list)
    folders: List[Folder] = field(default_factory=list)


@dataclass(frozen=True)
class TrashListing:
    """
    Everything an owner currently has in the trash.
    """
    files: List[CloudFile] = field(default_factory=list)
    folders: List[Folder] = field(default_factory=list)
