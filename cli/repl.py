"""REPL with prompt_toolkit for user interaction."""

import os
import sys
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory

from common.logging_config import get_logger
from cli.api_client import CloudFireClient
from cli.commands import HANDLERS
from cli.completer import CloudFireCompleter
from cli.constants import (
    HELP_TEXT,
    LOGO,
    PROMPT_TEXT,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
from cli.models import CommandRequest
from cli.parser import ParseError, parse_command

logger = get_logger(__name__)


class ExitRepl(Exception):
    """Raised by the 'exit' built-in to leave the loop."""


def clear_screen() -> None:
    """Clear the terminal screen (cross-platform)."""
    os.system("cls" if sys.platform == "win32" else "clear")


def show_welcome() -> None:
    print(LOGO)
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


def _builtin_help() -> None:
    print(HELP_TEXT)


def _builtin_clear() -> None:
    clear_screen()
    show_welcome()


def _builtin_exit() -> None:
    raise ExitRepl()


# REPL-only commands that never reach the server.
BUILTINS = {
    "help": _builtin_help,
    "clear": _builtin_clear,
    "exit": _builtin_exit,
}


def dispatch_command(cmd_obj: CommandRequest, client: Optional[CloudFireClient] = None) -> str:
    """Dispatch parsed command to appropriate handler."""
    handler = HANDLERS.get(type(cmd_obj))
    if handler is None:
        return f"Unknown command type: {type(cmd_obj)}"
    return handler(cmd_obj, client=client)


def execute_line(line: str, client: Optional[CloudFireClient] = None) -> Optional[str]:
    """
    Run one line of input.

    Returns:
        Text to print, or None for blank input and built-ins

    Raises:
        ExitRepl: On 'exit'
    """
    stripped = line.strip()
    if not stripped:
        return None

    builtin = BUILTINS.get(stripped)
    if builtin is not None:
        builtin()
        return None

    try:
        cmd_obj = parse_command(line)
    except ParseError as e:
        return f"Error: {e}"

    logger.debug(f"Dispatching {cmd_obj.command}")
    return dispatch_command(cmd_obj, client=client)


def repl_loop() -> None:
    """Start interactive REPL with prompt_toolkit."""
    session: PromptSession = PromptSession(
        completer=CloudFireCompleter(), history=InMemoryHistory(), style=STYLE
    )

    clear_screen()
    show_welcome()

    while True:
        try:
            result = execute_line(session.prompt([("class:prompt", PROMPT_TEXT)]))
        except KeyboardInterrupt:
            continue
        except (EOFError, ExitRepl):
            print("\nGoodbye!")
            break

        if result is not None:
            print(result)
