# pyright: reportUnusedCallResult=false
# ruff: noqa: FBT002
"""Remote commands: remote, push, pull, fetch."""

from functools import partial
from typing import Annotated

from cyclopts import App, Parameter

from gitlite import core
from gitlite.cli._context import CLIContext
from gitlite.exceptions import GitliteError, RemoteError

from ._shared import exit_with_error, open_layer, say

_REMOTE_USAGE = (
    "Usage: gitlite remote add <name> <url>",
    "       gitlite remote remove <name>",
    "       gitlite remote -v",
)

app = App(name="remote", help="Manage remotes", help_on_error=True)


@app.default
def remote_list(
    *,
    verbose: Annotated[
        bool,
        Parameter(name="-v", negative="", help="Show URLs"),
    ] = False,
) -> None:
    """List remotes with their fetch and push URLs.

    Args:
        verbose: Accepted for git compatibility; URLs are always shown.
    """
    del verbose
    ctx = CLIContext.get_current()

    with open_layer(ctx) as layer:
        remotes = core.list_remotes(layer)

    if not remotes:
        say(ctx.console, "No remotes configured")
        return
    for remote in remotes:
        say(
            ctx.console,
            f"{remote.name}\t{remote.url} (fetch)",
            f"{remote.name}\t{remote.url} (push)",
        )


@app.command(name="add")
def remote_add(name: str | None = None, url: str | None = None, /) -> None:
    """Register a remote. GitHub SSH URLs are stored as HTTPS.

    Args:
        name: Remote name, e.g. origin.
        url: Remote URL.
    """
    ctx = CLIContext.get_current()

    if name is None or url is None:
        say(ctx.console, *_REMOTE_USAGE)
        return

    with open_layer(ctx) as layer:
        try:
            stored = core.add_remote(layer, name, url, logger=ctx.logger)
        except RemoteError as e:
            ctx.logger.warning("Remote add failed", remote=name, error=str(e))
            exit_with_error(str(e), console=ctx.error_console)

    if stored != url:
        say(ctx.console, f"Converting SSH URL to HTTPS: {stored}")
    say(ctx.console, f"Added remote {name}: {stored}")


@app.command(name="remove")
def remote_remove(name: str | None = None, /) -> None:
    """Remove a remote and its remote-tracking branches.

    Args:
        name: Remote to remove.
    """
    ctx = CLIContext.get_current()

    if name is None:
        say(ctx.console, *_REMOTE_USAGE)
        return

    with open_layer(ctx) as layer:
        try:
            core.remove_remote(layer, name, logger=ctx.logger)
        except RemoteError as e:
            say(ctx.console, f"Failed to remove remote: {e}")
            return

    say(ctx.console, f"Removed remote {name}")


def _auth(ctx: CLIContext) -> core.GitHubTokenAuth:
    return core.GitHubTokenAuth(
        token=ctx.config.github_token, notify=partial(say, ctx.console)
    )


def _say_fetch_failure(ctx: CLIContext, error: GitliteError) -> None:
    guidance = core.failure_guidance(core.SyncOperation.FETCH, error)
    say(ctx.console, *(f"  {line}" for line in guidance))


def push_command(
    remote: str = "origin",
    branch: str = "main",
    /,
    *,
    set_upstream: Annotated[
        bool,
        Parameter(
            name=["--set-upstream", "-u"], negative="", help="Record the upstream"
        ),
    ] = False,
) -> None:
    """Push a branch to a remote.

    Args:
        remote: Remote name.
        branch: Branch to push.
        set_upstream: Record remote as the branch's upstream.
    """
    ctx = CLIContext.get_current()

    say(ctx.console, f"Pushing to {remote}/{branch}...")
    with open_layer(ctx) as layer:
        try:
            core.push(
                layer,
                _auth(ctx),
                remote=remote,
                branch=branch,
                set_upstream=set_upstream,
                logger=ctx.logger,
            )
        except GitliteError as e:
            say(ctx.console, *core.failure_guidance(core.SyncOperation.PUSH, e))
            return

    say(ctx.console, f"Successfully pushed to {remote}/{branch}")


def pull_command(remote: str = "origin", branch: str = "main", /) -> None:
    """Fetch a remote branch and merge it into the current branch.

    Args:
        remote: Remote name.
        branch: Remote branch to merge.
    """
    ctx = CLIContext.get_current()

    say(ctx.console, f"Pulling from {remote}/{branch}...")
    with open_layer(ctx) as layer:
        try:
            core.pull(layer, _auth(ctx), remote=remote, branch=branch, logger=ctx.logger)
        except GitliteError as e:
            say(ctx.console, *core.failure_guidance(core.SyncOperation.PULL, e))
            return

    say(ctx.console, f"Successfully pulled from {remote}/{branch}")


def fetch_command(
    remote: str = "origin",
    /,
    *,
    all_: Annotated[
        bool,
        Parameter(name="--all", negative="", help="Fetch every remote"),
    ] = False,
) -> None:
    """Fetch a remote, or every remote with --all.

    Args:
        remote: Remote name.
        all_: Fetch all registered remotes.
    """
    ctx = CLIContext.get_current()

    with open_layer(ctx) as layer:
        if all_:
            say(ctx.console, "Fetching all remotes...")
            outcomes = core.fetch_all(
                layer,
                _auth(ctx),
                on_start=lambda name: say(ctx.console, f"Fetching {name}..."),
                on_failure=lambda _name, e: _say_fetch_failure(ctx, e),
                logger=ctx.logger,
            )
            if all(o.ok for o in outcomes):
                say(ctx.console, "Fetch completed for all remotes")
            return

        say(ctx.console, f"Fetching from {remote}...")
        try:
            core.fetch(layer, _auth(ctx), remote=remote, logger=ctx.logger)
        except GitliteError as e:
            say(ctx.console, *core.failure_guidance(core.SyncOperation.FETCH, e))
            return

    say(ctx.console, f"Fetch completed from {remote}")
