# pyright: reportUnusedCallResult=false
# ruff: noqa: FBT002
"""Branch commands: branch, checkout, merge, rebase."""

from typing import Annotated

from cyclopts import Parameter

from gitlite import core
from gitlite.cli._context import CLIContext
from gitlite.exceptions import (
    GitliteError,
    MergeConflictError,
    MergeNotSupportedError,
)
from gitlite.repository import ItemOutcome

from ._shared import open_layer, say


def branch_command(
    name: str | None = None,
    /,
    *,
    remote: Annotated[
        bool,
        Parameter(name=["--remote", "-r"], negative="", help="List remote branches"),
    ] = False,
) -> None:
    """List branches, list remote branches, or create a branch.

    Args:
        name: Branch to create at HEAD.
        remote: List remote-tracking branches instead.
    """
    ctx = CLIContext.get_current()

    with open_layer(ctx) as layer:
        if remote:
            _print_remote_branches(ctx, core.list_remote_branches(layer, ctx.logger))
            return

        if name is not None:
            try:
                core.create_branch(layer, name, logger=ctx.logger)
            except GitliteError as e:
                say(ctx.console, f"Branch creation failed: {e}")
                return
            say(ctx.console, f"Created branch {name}")
            return

        listing = core.list_branches(layer, logger=ctx.logger)

    if listing.unborn:
        say(ctx.console, f"* {ctx.config.init.default_branch} (no commits yet)")
        return
    for branch in listing.names:
        marker = "*" if branch == listing.current else " "
        say(ctx.console, f"{marker} {branch}")


def _print_remote_branches(
    ctx: CLIContext, outcomes: list[ItemOutcome[tuple[str, ...]]]
) -> None:
    if not outcomes:
        say(ctx.console, "No remote branches found")
        return

    for outcome in outcomes:
        say(ctx.console, f"Fetching remote branches from {outcome.item}...")
        if not outcome.ok:
            say(ctx.console, f"  Could not fetch branches from {outcome.item}")
            continue
        for branch in outcome.value or ():
            say(ctx.console, f"  remotes/{outcome.item}/{branch}")


def checkout_command(
    ref: str | None = None,
    /,
    *,
    create: Annotated[
        bool,
        Parameter(name="-b", negative="", help="Create the branch first"),
    ] = False,
    force: Annotated[
        bool,
        Parameter(name=["--force", "-f"], negative="", help="Discard local changes"),
    ] = False,
) -> None:
    """Switch branches, or create one with -b.

    Args:
        ref: Branch to switch to.
        create: Create the branch at HEAD and switch to it.
        force: Discard uncommitted changes to tracked files.
    """
    ctx = CLIContext.get_current()

    if ref is None:
        say(
            ctx.console,
            "Usage: gitlite checkout <branch>",
            "       gitlite checkout -b <new-branch>",
        )
        return

    with open_layer(ctx) as layer:
        try:
            result = core.checkout(
                layer, ref, create=create, force=force, logger=ctx.logger
            )
        except GitliteError as e:
            say(ctx.console, f"Checkout failed: {e}")
            return

    if result.created:
        say(ctx.console, f"Switched to a new branch '{result.branch}'")
    else:
        say(ctx.console, f"Switched to branch '{result.branch}'")


def merge_command(
    branch: str | None = None,
    /,
    *,
    abort: Annotated[bool, Parameter(name="--abort", negative="")] = False,
) -> None:
    """Merge a branch into the current branch.

    Args:
        branch: Branch to merge.
        abort: Not supported; prints a notice.
    """
    ctx = CLIContext.get_current()

    if abort:
        say(
            ctx.console,
            "Merge abort is not fully supported in this implementation",
            "You may need to manually resolve conflicts and commit",
        )
        return
    if branch is None:
        say(
            ctx.console,
            "Usage: gitlite merge <branch>",
            "       gitlite merge --abort",
        )
        return

    say(ctx.console, f"Merging {branch} into current branch...")
    with open_layer(ctx) as layer:
        try:
            outcome = core.merge(
                layer, branch, ctx.config.author.to_author(), logger=ctx.logger
            )
        except (MergeConflictError, MergeNotSupportedError) as e:
            say(
                ctx.console,
                "Merge failed: This type of merge is not supported",
                "You may need to resolve conflicts manually",
            )
            if isinstance(e, MergeConflictError):
                for path in e.paths:
                    say(ctx.console, f"  both modified:   {path}")
            return
        except GitliteError as e:
            say(ctx.console, f"Merge failed: {e}")
            return

    if outcome.state is core.MergeState.NO_OP:
        say(ctx.console, "Already up to date.")
    elif outcome.state is core.MergeState.FAST_FORWARD:
        say(ctx.console, "Merge successful!", f"Fast-forward to: {outcome.short_sha}")
    else:
        say(ctx.console, "Merge successful!", f"Merge commit: {outcome.short_sha}")


def rebase_command(
    branch: str | None = None,
    /,
    *,
    abort: Annotated[bool, Parameter(name="--abort", negative="")] = False,
    continue_: Annotated[bool, Parameter(name="--continue", negative="")] = False,
) -> None:
    """Rebase the current branch onto another (merge-based emulation).

    Args:
        branch: Branch to rebase onto.
        abort: Not supported; prints a notice.
        continue_: Not supported; prints a notice.
    """
    ctx = CLIContext.get_current()

    if abort:
        say(
            ctx.console,
            "Rebase abort is not fully supported in this implementation",
            "You may need to reset to the original state manually",
        )
        return
    if continue_:
        say(
            ctx.console,
            "Rebase continue is not fully supported in this implementation",
            "Please resolve conflicts and commit manually",
        )
        return
    if branch is None:
        say(
            ctx.console,
            "Usage: gitlite rebase <branch>",
            "       gitlite rebase --abort",
            "       gitlite rebase --continue",
        )
        return

    say(
        ctx.console,
        f"Rebasing current branch onto {branch}...",
        "Note: Interactive rebase is not supported in this implementation",
    )
    with open_layer(ctx) as layer:
        try:
            plan = core.plan_rebase(layer, branch)
            if plan.same_branch:
                say(ctx.console, f"Already on target branch {branch}")
                return
            if plan.ancestor is None:
                say(
                    ctx.console,
                    "No common ancestor found. Rebase may not work as expected.",
                )
            core.run_rebase(
                layer, plan, ctx.config.author.to_author(), logger=ctx.logger
            )
        except GitliteError as e:
            ctx.logger.warning("Rebase failed", onto=branch, error=str(e))
            say(
                ctx.console,
                f"Rebase failed: {e}",
                "You may need to resolve conflicts manually",
            )
            return

    say(
        ctx.console,
        "Rebase completed (simplified merge-based rebase)",
        "Note: This is a simplified rebase implementation",
    )
