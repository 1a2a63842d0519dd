"""Command parser for CLI input."""

import shlex

from cli.models import (
    CommandRequest,
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


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name, args = tokens[0], tokens[1:]

    parser = _PARSERS.get(command_name)
    if parser is None:
        raise ParseError(f"Unknown command: {command_name}")
    return parser(args)


def _expect(name: str, args: list[str], minimum: int, maximum: int, usage: str) -> None:
    if not minimum <= len(args) <= maximum:
        raise ParseError(f"{name} usage: {name} {usage}".rstrip())


def _parse_register(args: list[str]) -> RegisterCommand:
    """Parse 'register <username> <password> [email]' command."""
    _expect("register", args, 2, 3, "<username> <password> [email]")
    email = args[2] if len(args) > 2 else ""
    return RegisterCommand(username=args[0], password=args[1], email=email)


def _parse_login(args: list[str]) -> LoginCommand:
    """Parse 'login <username> <password>' command."""
    _expect("login", args, 2, 2, "<username> <password>")
    username, password = args
    return LoginCommand(username=username, password=password)


def _parse_logout(args: list[str]) -> LogoutCommand:
    _expect("logout", args, 0, 0, "")
    return LogoutCommand()


def _parse_whoami(args: list[str]) -> WhoamiCommand:
    _expect("whoami", args, 0, 0, "")
    return WhoamiCommand()


def _parse_ls(args: list[str]) -> ListCommand:
    _expect("ls", args, 0, 1, "[folder_id]")
    return ListCommand(folder_id=args[0] if args else None)


def _parse_mkdir(args: list[str]) -> MkdirCommand:
    _expect("mkdir", args, 1, 2, "<name> [folder_id]")
    return MkdirCommand(name=args[0], parent_id=args[1] if len(args) > 1 else None)


def _parse_upload(args: list[str]) -> UploadCommand:
    _expect("upload", args, 1, 2, "<path> [folder_id]")
    return UploadCommand(file_path=args[0], parent_id=args[1] if len(args) > 1 else None)


def _parse_download(args: list[str]) -> DownloadCommand:
    """Parse 'download <file_id> [output_path]' command."""
    _expect("download", args, 1, 2, "<file_id> [output_path]")
    return DownloadCommand(file_id=args[0], output_path=args[1] if len(args) > 1 else None)


def _parse_trash(args: list[str]) -> TrashCommand:
    _expect("trash", args, 1, 1, "<file_id>")
    return TrashCommand(file_id=args[0])


def _parse_restore(args: list[str]) -> RestoreCommand:
    _expect("restore", args, 1, 1, "<file_id>")
    return RestoreCommand(file_id=args[0])


def _parse_rm(args: list[str]) -> RemoveCommand:
    _expect("rm", args, 1, 1, "<file_id>")
    return RemoveCommand(file_id=args[0])


def _parse_trash_list(args: list[str]) -> TrashListCommand:
    _expect("trash-list", args, 0, 0, "")
    return TrashListCommand()


def _parse_empty_trash(args: list[str]) -> EmptyTrashCommand:
    _expect("empty-trash", args, 0, 0, "")
    return EmptyTrashCommand()


def _parse_share(args: list[str]) -> ShareCommand:
    _expect("share", args, 1, 1, "<file_id>")
    return ShareCommand(file_id=args[0], enabled=True)


def _parse_unshare(args: list[str]) -> ShareCommand:
    _expect("unshare", args, 1, 1, "<file_id>")
    return ShareCommand(file_id=args[0], enabled=False)


def _parse_open_share(args: list[str]) -> OpenShareCommand:
    """Accepts a bare token or a full share link ending in '?share=<token>'."""
    _expect("open-share", args, 1, 1, "<token>")
    token = args[0]
    if "share=" in token:
        token = token.split("share=", 1)[1].split("&", 1)[0]
    if not token:
        raise ParseError("open-share requires a non-empty token")
    return OpenShareCommand(token=token)


def _parse_stats(args: list[str]) -> StatsCommand:
    _expect("stats", args, 0, 0, "")
    return StatsCommand()


_PARSERS = {
    "register": _parse_register,
    "login": _parse_login,
    "logout": _parse_logout,
    "whoami": _parse_whoami,
    "ls": _parse_ls,
    "mkdir": _parse_mkdir,
    "upload": _parse_upload,
    "download": _parse_download,
    "trash": _parse_trash,
    "restore": _parse_restore,
    "rm": _parse_rm,
    "trash-list": _parse_trash_list,
    "empty-trash": _parse_empty_trash,
    "share": _parse_share,
    "unshare": _parse_unshare,
    "open-share": _parse_open_share,
    "stats": _parse_stats,
}
