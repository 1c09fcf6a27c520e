# pyright: reportUnusedCallResult=false
# ruff: noqa: FBT002
"""Working tree and history commands: init, status, add, commit, log, reset."""

from datetime import UTC
from pathlib import Path
from typing import Annotated

from cyclopts import Parameter

from gitlite import core
from gitlite.cli._context import CLIContext
from gitlite.exceptions import GitliteError
from gitlite.repository import StatusReport

from ._shared import exit_with_error, open_layer, say


def init_command() -> None:
    """Initialize a repository in the current directory."""
    ctx = CLIContext.get_current()
    config = ctx.config

    try:
        result = core.init(
            Path.cwd(),
            default_branch=config.init.default_branch,
            author=config.author.to_author(),
            logger=ctx.logger,
        )
    except (GitliteError, OSError) as e:
        ctx.logger.exception("Init failed")
        exit_with_error(str(e), console=ctx.error_console)

    if result.reinitialized:
        say(ctx.console, "Reinitialized existing Git repository")
    elif result.initial_commit is not None:
        say(ctx.console, "Initialized Git repository with initial commit")
    else:
        say(ctx.console, "Initialized empty Git repository")


def _render_status(report: StatusReport) -> list[str]:
    lines = [f"On branch {report.branch}"]
    if report.clean:
        lines.append("nothing to commit, working tree clean")
        return lines

    if report.staged:
        lines.append("Changes to be committed:")
        lines.extend(f"  {bucket.label}:   {path}" for bucket, path in report.staged)
        lines.append("")
    if report.unstaged:
        lines.append("Changes not staged for commit:")
        lines.extend(f"  {bucket.label}:   {path}" for bucket, path in report.unstaged)
    return lines


def status_command() -> None:
    """Show staged and unstaged changes."""
    ctx = CLIContext.get_current()

    with open_layer(ctx) as layer:
        try:
            report = core.get_status(
                layer,
                default_branch=ctx.config.init.default_branch,
                exclude=ctx.config.status.exclude,
            )
        except GitliteError as e:
            ctx.logger.exception("Status failed")
            exit_with_error(str(e), console=ctx.error_console)

    say(ctx.console, *_render_status(report))


def add_command(path: str = core.WILDCARD, /) -> None:
    """Add a file, or every file with ".", to the index.

    Args:
        path: File to stage, or "." for the whole working tree.
    """
    ctx = CLIContext.get_current()

    with open_layer(ctx) as layer:
        if path == core.WILDCARD:
            outcomes = core.stage_all(layer, logger=ctx.logger)
            added = sum(1 for o in outcomes if o.ok)
            say(ctx.console, f"Added {added} files")
            if ctx.verbose:
                for outcome in outcomes:
                    if not outcome.ok:
                        say(ctx.console, f"  skipped {outcome.item}: {outcome.error}")
            return

        try:
            rel = core.repo_relative(layer.root, path)
            core.stage_file(layer, rel)
        except GitliteError as e:
            ctx.logger.warning("Add failed", path=path, error=str(e))
            exit_with_error(str(e), console=ctx.error_console)

    say(ctx.console, f"Added {path}")


def commit_command(
    *,
    message: Annotated[
        str,
        Parameter(name=["--message", "-m"], help="Commit message"),
    ] = core.INITIAL_COMMIT_MESSAGE,
) -> None:
    """Record the index as a new commit."""
    ctx = CLIContext.get_current()

    if not message.strip():
        say(ctx.console, 'Usage: gitlite commit -m "message"')
        return

    with open_layer(ctx) as layer:
        try:
            info = core.commit(
                layer, message, ctx.config.author.to_author(), logger=ctx.logger
            )
        except GitliteError as e:
            ctx.logger.exception("Commit failed")
            exit_with_error(str(e), console=ctx.error_console)
        branch = core.current_branch_name(layer, ctx.config.init.default_branch)

    say(ctx.console, f"[{branch} {info.short_sha}] {message}")


def log_command(
    *,
    number: Annotated[
        int,
        Parameter(name=["--number", "-n"], help="Number of commits to show"),
    ] = core.DEFAULT_LOG_DEPTH,
) -> None:
    """Show recent commits, newest first."""
    ctx = CLIContext.get_current()

    with open_layer(ctx) as layer:
        try:
            commits = core.log(layer, depth=number)
        except GitliteError as e:
            ctx.logger.exception("Log failed")
            exit_with_error(str(e), console=ctx.error_console)

    if not commits:
        say(ctx.console, "No commits yet")
        return

    for info in commits:
        timestamp = info.timestamp.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.000Z")
        say(
            ctx.console,
            f"commit {info.sha}",
            f"Author: {info.author_name} <{info.author_email}>",
            f"Date: {timestamp}",
            "",
            *(f"    {line}" for line in info.message.rstrip("\n").splitlines()),
            "",
        )


def reset_command(
    ref: str | None = None,
    /,
    *,
    hard: Annotated[bool, Parameter(name="--hard", negative="")] = False,
    soft: Annotated[bool, Parameter(name="--soft", negative="")] = False,
) -> None:
    """Reset the current branch (only --hard is supported).

    Args:
        ref: Commit to reset to, e.g. HEAD~1.
        hard: Reset index and working tree too.
        soft: Not supported.
    """
    ctx = CLIContext.get_current()

    if ref is None and not hard and not soft:
        say(
            ctx.console,
            "Usage: gitlite reset --hard HEAD~1",
            "       gitlite reset --soft HEAD~1",
        )
        return

    if soft and ref is not None and not hard:
        say(
            ctx.console,
            "Soft reset is not fully supported in this implementation",
            "Use --hard for now, or manually manage staged changes",
        )
        return

    if not hard or ref is None:
        say(ctx.console, "Only --hard reset is supported in this implementation")
        return

    say(ctx.console, f"Hard reset to {ref}...")
    with open_layer(ctx) as layer:
        try:
            sha = core.reset_hard(layer, ref, logger=ctx.logger)
        except GitliteError as e:
            ctx.logger.warning("Reset failed", ref=ref, error=str(e))
            say(ctx.console, f"Reset failed: {e}")
            return

    say(ctx.console, f"HEAD is now at {sha[:7]}")
