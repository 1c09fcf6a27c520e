"""gitlite CLI commands."""
# pyright: reportUnusedCallResult=false

from typing import Annotated

from cyclopts import App, Parameter

from gitlite.cli._context import CLIContext

from ._branch import branch_command, checkout_command, merge_command, rebase_command
from ._remote import app as remote_app
from ._remote import fetch_command, pull_command, push_command
from ._repo import (
    add_command,
    commit_command,
    init_command,
    log_command,
    reset_command,
    status_command,
)
from ._shared import USAGE_LINES, ExitCode, exit_with_error, get_error_console, say

__all__ = [
    "ExitCode",
    "exit_with_error",
    "get_error_console",
    "register_commands",
    "remote_app",
]


def usage_command(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
) -> None:
    """Print the command summary."""
    del tokens
    say(CLIContext.get_current().console, *USAGE_LINES)


def register_commands(app: App) -> None:
    app.default(usage_command)
    app.command(init_command, name="init")
    app.command(status_command, name="status")
    app.command(add_command, name="add")
    app.command(commit_command, name="commit")
    app.command(log_command, name="log")
    app.command(reset_command, name="reset")
    app.command(remote_app)
    app.command(push_command, name="push")
    app.command(pull_command, name="pull")
    app.command(fetch_command, name="fetch")
    app.command(branch_command, name="branch")
    app.command(checkout_command, name="checkout")
    app.command(merge_command, name="merge")
    app.command(rebase_command, name="rebase")
