"""Shared enumerations and value types used by the engine, API and CLI."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class FileType(str, Enum):
    """
    Coarse classification of a file, derived once from its mime-type.
    """
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"
    AUDIO = "AUDIO"
    DOCUMENT = "DOCUMENT"
    ARCHIVE = "ARCHIVE"
    UNKNOWN = "UNKNOWN"


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


class Plan(str, Enum):
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class Provider(str, Enum):
    LOCAL = "local"
    AWS = "aws"
    WASABI = "wasabi"
    GOOGLE_DRIVE = "google_drive"


@dataclass(frozen=True)
class CategoryCount:
    """
    Number of files of one FileType.
    """
    name: str
    count: int


@dataclass(frozen=True)
class SystemStats:
    """
    Aggregate figures shown on the admin dashboard.
    """
    total_users: int
    total_files: int
    total_storage: int
    breakdown_by_category: List[CategoryCount] = field(default_factory=list)
