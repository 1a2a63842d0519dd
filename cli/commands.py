"""Command handler functions for CLI operations."""

from typing import Optional

from common.logging_config import get_logger
from cli.api_client import CloudFireClient
from cli.config import Config
from cli.models import (
    DownloadCommand,
    EmptyTrashCommand,
    ListCommand,
    LoginCommand,
    LogoutCommand,
    MkdirCommand,
    OpenShareCommand,
    RegisterCommand,
    RemoveCommand,
    RestoreCommand,
    ShareCommand,
    StatsCommand,
    TrashCommand,
    TrashListCommand,
    UploadCommand,
    WhoamiCommand,
)

logger = get_logger(__name__)


_client: Optional[CloudFireClient] = None


def get_client() -> CloudFireClient:
    """
    Get or create global CloudFireClient instance.

    Returns:
        CloudFireClient instance
    """
    global _client
    if _client is None:
        logger.debug("Creating new CloudFireClient instance")
        _client = CloudFireClient(Config())
    return _client


def handle_register(cmd: RegisterCommand, client: Optional[CloudFireClient] = None) -> str:
    """
    Handle 'register' command.

    Args:
        cmd: RegisterCommand with username, password and optional email
        client: Optional CloudFireClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    if client is None:
        client = get_client()
    return client.register(cmd.username, cmd.password, cmd.email)


def handle_login(cmd: LoginCommand, client: Optional[CloudFireClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.login(cmd.username, cmd.password)


def handle_logout(cmd: LogoutCommand, client: Optional[CloudFireClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.logout()


def handle_whoami(cmd: WhoamiCommand, client: Optional[CloudFireClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.whoami()


def handle_list(cmd: ListCommand, client: Optional[CloudFireClient] = None) -> str:
    """
    Handle 'ls' command.

    Args:
        cmd: ListCommand with optional folder_id
        client: Optional CloudFireClient for dependency injection (testing)

    Returns:
        Formatted folder listing
    """
    logger.info(f"Executing ls command: folder={cmd.folder_id or 'root'}")
    if client is None:
        client = get_client()
    return client.list_directory(cmd.folder_id)


def handle_mkdir(cmd: MkdirCommand, client: Optional[CloudFireClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.create_folder(cmd.name, cmd.parent_id)


def handle_upload(cmd: UploadCommand, client: Optional[CloudFireClient] = None) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with local file path and optional target folder
        client: Optional CloudFireClient for dependency injection (testing)

    Returns:
        Success or error message with upload result
    """
    logger.info(f"Executing upload command: path={cmd.file_path} folder={cmd.parent_id or 'root'}")
    if client is None:
        client = get_client()
    result = client.upload(cmd.file_path, cmd.parent_id)
    logger.debug("Upload command completed")
    return result


def handle_download(cmd: DownloadCommand, client: Optional[CloudFireClient] = None) -> str:
    """
    Handle 'download' command.

    Args:
        cmd: DownloadCommand with file_id and optional output_path
        client: Optional CloudFireClient for dependency injection (testing)

    Returns:
        Success or error message with download results
    """
    logger.info(f"Executing download command: file_id={cmd.file_id} output_path={cmd.output_path}")
    if client is None:
        client = get_client()
    result = client.download(cmd.file_id, cmd.output_path)
    logger.debug("Download command completed")
    return result


def handle_trash(cmd: TrashCommand, client: Optional[CloudFireClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.trash(cmd.file_id)


def handle_restore(cmd: RestoreCommand, client: Optional[CloudFireClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.restore(cmd.file_id)


def handle_remove(cmd: RemoveCommand, client: Optional[CloudFireClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.delete_permanently(cmd.file_id)


def handle_trash_list(cmd: TrashListCommand, client: Optional[CloudFireClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.list_trash()


def handle_empty_trash(cmd: EmptyTrashCommand, client: Optional[CloudFireClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.empty_trash()


def handle_share(cmd: ShareCommand, client: Optional[CloudFireClient] = None) -> str:
    """
    Handle 'share' and 'unshare' commands.

    Args:
        cmd: ShareCommand with file_id and enabled flag
        client: Optional CloudFireClient for dependency injection (testing)

    Returns:
        Share link or confirmation of revocation
    """
    if client is None:
        client = get_client()
    return client.share(cmd.file_id, cmd.enabled)


def handle_open_share(cmd: OpenShareCommand, client: Optional[CloudFireClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.open_share(cmd.token)


def handle_stats(cmd: StatsCommand, client: Optional[CloudFireClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.stats()


HANDLERS = {
    RegisterCommand: handle_register,
    LoginCommand: handle_login,
    LogoutCommand: handle_logout,
    WhoamiCommand: handle_whoami,
    ListCommand: handle_list,
    MkdirCommand: handle_mkdir,
    UploadCommand: handle_upload,
    DownloadCommand: handle_download,
    TrashCommand: handle_trash,
    RestoreCommand: handle_restore,
    RemoveCommand: handle_remove,
    TrashListCommand: handle_trash_list,
    EmptyTrashCommand: handle_empty_trash,
    ShareCommand: handle_share,
    OpenShareCommand: handle_open_share,
    StatsCommand: handle_stats,
}
