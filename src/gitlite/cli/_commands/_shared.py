"""Shared CLI utilities for commands.

This module provides common utilities used across CLI command implementations:
- Standardized exit codes
- Plain line output that bypasses rich markup and wrapping
- Repository opening with uniform fatal error handling
"""

from collections.abc import Iterator
from contextlib import contextmanager
from enum import IntEnum
from typing import Never

from rich.console import Console
from rich.markup import escape

from gitlite.cli._context import CLIContext
from gitlite.exceptions import RepositoryNotFoundError
from gitlite.repository import DulwichObjectLayer

__all__ = [
    "USAGE_LINES",
    "ExitCode",
    "exit_with_error",
    "get_error_console",
    "open_layer",
    "say",
]

USAGE_LINES: tuple[str, ...] = (
    "Simple Git Commands:",
    "  gitlite init                    - Initialize repository",
    "  gitlite status                  - Show status",
    "  gitlite add .                   - Add all files",
    "  gitlite add <file>              - Add specific file",
    '  gitlite commit -m "message"     - Commit changes',
    "  gitlite log [-n N]              - Show commit history",
    "  gitlite remote add <name> <url> - Add a remote",
    "  gitlite remote remove <name>    - Remove a remote",
    "  gitlite remote -v               - List remotes",
    "  gitlite push [-u] [remote] [branch]",
    "  gitlite pull [remote] [branch]",
    "  gitlite fetch [--all | remote]",
    "  gitlite checkout [-b] <branch>",
    "  gitlite branch [-r | <name>]",
    "  gitlite merge <branch> | --abort",
    "  gitlite rebase <branch> | --abort | --continue",
    "  gitlite reset --hard <ref>",
)


class ExitCode(IntEnum):
    """Standard exit codes for gitlite CLI commands."""

    SUCCESS = 0
    COMMAND_ERROR = 1


def say(console: Console, *lines: str) -> None:
    """Print lines verbatim: no markup, highlighting or wrapping."""
    if not lines:
        console.print()
    for line in lines:
        console.print(line, markup=False, highlight=False, soft_wrap=True)


def get_error_console() -> Console:
    """Get a Rich console configured for error output to stderr.

    Returns:
        Console instance writing to stderr.
    """
    return Console(stderr=True)


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.COMMAND_ERROR,
    *,
    console: Console | None = None,
) -> Never:
    """Print an error message and exit with the specified code.

    Args:
        message: The error message to display.
        code: The exit code to use (defaults to COMMAND_ERROR).
        console: Optional Rich console for output. If not provided,
            a new stderr console will be created.

    Raises:
        SystemExit: Always raised with the specified exit code.
    """
    if console is None:
        console = get_error_console()

    console.print(f"[red]Error:[/red] {escape(message)}", soft_wrap=True)
    raise SystemExit(code)


@contextmanager
def open_layer(ctx: CLIContext) -> Iterator[DulwichObjectLayer]:
    """Open the repository containing the working directory.

    Exits with COMMAND_ERROR when the directory is not inside a repository.
    """
    try:
        layer = DulwichObjectLayer.discover()
    except RepositoryNotFoundError as e:
        ctx.logger.warning("Repository not found", error=str(e))
        exit_with_error(str(e), console=ctx.error_console)

    with layer:
        yield layer
