"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class RegisterCommand:
    """Register a new user account."""

    username: str
    password: str
    email: str = ""
    command: Literal["register"] = "register"


@dataclass(frozen=True)
class LoginCommand:
    """Login with username and password."""

    username: str
    password: str
    command: Literal["login"] = "login"


@dataclass(frozen=True)
class LogoutCommand:
    command: Literal["logout"] = "logout"


@dataclass(frozen=True)
class WhoamiCommand:
    command: Literal["whoami"] = "whoami"


@dataclass(frozen=True)
class ListCommand:
    """List a folder (root when folder_id is None)."""

    folder_id: str | None = None
    command: Literal["ls"] = "ls"


@dataclass(frozen=True)
class MkdirCommand:
    name: str
    parent_id: str | None = None
    command: Literal["mkdir"] = "mkdir"


@dataclass(frozen=True)
class UploadCommand:
    """Upload a local file."""

    file_path: str
    parent_id: str | None = None
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class DownloadCommand:
    """Download file by id."""

    file_id: str
    output_path: str | None = None
    command: Literal["download"] = "download"


@dataclass(frozen=True)
class TrashCommand:
    file_id: str
    command: Literal["trash"] = "trash"


@dataclass(frozen=True)
class RestoreCommand:
    file_id: str
    command: Literal["restore"] = "restore"


@dataclass(frozen=True)
class RemoveCommand:
    """Permanently delete a file."""

    file_id: str
    command: Literal["rm"] = "rm"


@dataclass(frozen=True)
class TrashListCommand:
    command: Literal["trash-list"] = "trash-list"


@dataclass(frozen=True)
class EmptyTrashCommand:
    command: Literal["empty-trash"] = "empty-trash"


@dataclass(frozen=True)
class ShareCommand:
    """Enable (share) or revoke (unshare) a public link."""

    file_id: str
    enabled: bool = True
    command: Literal["share"] = "share"


@dataclass(frozen=True)
class OpenShareCommand:
    token: str
    command: Literal["open-share"] = "open-share"


@dataclass(frozen=True)
class StatsCommand:
    command: Literal["stats"] = "stats"


CommandRequest = (
    RegisterCommand
    | LoginCommand
    | LogoutCommand
    | WhoamiCommand
    | ListCommand
    | MkdirCommand
    | UploadCommand
    | DownloadCommand
    | TrashCommand
    | RestoreCommand
    | RemoveCommand
    | TrashListCommand
    | EmptyTrashCommand
    | ShareCommand
    | OpenShareCommand
    | StatsCommand
)
