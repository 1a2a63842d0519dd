"""Public share links for files."""

from typing import Optional, Tuple

from common.logging_config import get_logger
from cloudfire.exceptions import NotFoundError, ValidationError
from cloudfire.repositories.file_repository import CloudFile, FileRepository
from cloudfire.utils import utcnow

logger = get_logger(__name__)


class ShareService:
    def __init__(self):
        self.file_repo = FileRepository()

    async def set_share(self, file_id: str, enabled: bool, token: Optional[str] = None) -> CloudFile:
        """
        Enable or disable the public link of a file.

        Args:
            file_id: File to update
            enabled: True to share, False to revoke
            token: Share token, required when enabling

        Returns:
            The updated file

        Raises:
            ValidationError: If enabling without a token or on a trashed file
            NotFoundError: If the file does not exist
        """
        if enabled and not token:
            raise ValidationError("A share token is required to enable sharing")

        updated = await self.file_repo.update_share(
            file_id,
            enabled=enabled,
            token=token if enabled else None,
            shared_at=utcnow() if enabled else None,
        )
        if updated is None:
            logger.warning(f"Share update failed, file not found [file_id={file_id}]")
            raise NotFoundError(f"File '{file_id}' not found")

        if enabled and updated.is_trashed:
            logger.warning(f"Refused to share trashed file [file_id={file_id}]")
            raise ValidationError("Trashed files cannot be shared")

        if enabled:
            logger.info(f"Share enabled for {updated.name} [file_id={file_id}]")
        else:
            logger.info(f"Share revoked for {updated.name} [file_id={file_id}]")
        return updated

    async def resolve_share(self, token: str) -> Optional[CloudFile]:
        if not token:
            return None
        cloud_file = await self.file_repo.find_shared_by_token(token)
        if cloud_file is None:
            logger.debug("Share token did not resolve to a file")
        return cloud_file

    async def get_shared_content(self, token: str) -> Optional[Tuple[CloudFile, bytes]]:
        cloud_file = await self.resolve_share(token)
        if cloud_file is None:
            return None
        content = await self.file_repo.get_content(cloud_file.file_id)
        return cloud_file, content or b""
