"""REPL with prompt_toolkit for user interaction."""

import os
import sys
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import InMemoryHistory

from cli import commands
from cli.constants import (
    COMMANDS,
    HELP_TEXT,
    LOGO,
    PROMPT_TEXT,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
from cli.models import CommandRequest
from cli.parser import ParseError, parse_command

HANDLERS = {
    "encode": "handle_encode",
    "text": "handle_text",
    "decode": "handle_decode",
    "qr": "handle_qr",
}


def clear_screen() -> None:
    """Clear the terminal screen (cross-platform)."""
    os.system("cls" if sys.platform == "win32" else "clear")


def show_welcome() -> None:
    print(LOGO)
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


def dispatch_command(cmd_obj: CommandRequest) -> str:
    """Dispatch parsed command to the handler named by its command field."""
    handler_name = HANDLERS.get(getattr(cmd_obj, "command", None))
    if handler_name is None:
        return f"Unknown command type: {type(cmd_obj)}"
    return getattr(commands, handler_name)(cmd_obj)


def run_builtin(line: str) -> bool:
    """
    Handle REPL-only commands.

    Returns:
        True if the line was a built-in (other than exit) and has been handled

    Raises:
        EOFError: On 'exit', to leave the loop the same way Ctrl-D does
    """
    if line == "exit":
        raise EOFError
    if line == "help":
        print(HELP_TEXT)
        return True
    if line == "clear":
        clear_screen()
        show_welcome()
        return True
    return False


def repl_loop() -> None:
    """Start interactive REPL with prompt_toolkit."""
    session: PromptSession = PromptSession(
        completer=WordCompleter(COMMANDS, ignore_case=True),
        history=InMemoryHistory(),
        style=STYLE,
    )

    clear_screen()
    show_welcome()

    while True:
        try:
            line = session.prompt([("class:prompt", PROMPT_TEXT)]).strip()
            if not line or run_builtin(line):
                continue

            print(dispatch_command(parse_command(line)))

        except ParseError as e:
            print(f"Error: {e}")
        except KeyboardInterrupt:
            continue
        except EOFError:
            print("Goodbye!")
            break
