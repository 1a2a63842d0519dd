"""Service layer for business logic."""

from cloudfire.services.admin_service import AdminService
from cloudfire.services.auth_service import AuthService
from cloudfire.services.file_service import FileService
from cloudfire.services.quota_service import QuotaAccountant
from cloudfire.services.share_service import ShareService
from cloudfire.services.trash_service import TrashService

__all__ = [
    "AdminService",
    "AuthService",
    "FileService",
    "QuotaAccountant",
    "ShareService",
    "TrashService",
]
