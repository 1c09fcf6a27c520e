"""Branch, checkout and hard reset controllers."""

from dataclasses import dataclass

from structlog.typing import FilteringBoundLogger

from gitlite.exceptions import DirtyWorktreeError, GitliteError
from gitlite.repository import ItemOutcome, ObjectLayer
from gitlite.utils import create_null_logger

from ._refs import resolve
from ._status import dirty_paths


@dataclass(frozen=True, slots=True)
class BranchListing:
    """Local branches and the current one.

    Attributes:
        names: Branch names in sorted order.
        current: Current branch, or None when detached.
        unborn: True when there is nothing to list (no commits yet, or the
            listing failed).
    """

    names: tuple[str, ...]
    current: str | None
    unborn: bool = False


@dataclass(frozen=True, slots=True)
class CheckoutResult:
    """Outcome of a checkout.

    Attributes:
        branch: Branch HEAD now points at.
        created: True when the branch was created by this checkout.
    """

    branch: str
    created: bool = False


def list_branches(
    layer: ObjectLayer, logger: FilteringBoundLogger | None = None
) -> BranchListing:
    """List local branches.

    A failed query or an unborn repository yields an empty, unborn listing
    rather than an error.
    """
    if logger is None:
        logger = create_null_logger()

    try:
        names = tuple(layer.list_branches())
        current = layer.current_branch()
    except GitliteError as e:
        logger.warning("Branch listing failed", error=str(e))
        return BranchListing(names=(), current=None, unborn=True)

    return BranchListing(names=names, current=current, unborn=not names)


def create_branch(
    layer: ObjectLayer, name: str, logger: FilteringBoundLogger | None = None
) -> str:
    """Create a branch at HEAD and return its commit SHA.

    Raises:
        BranchError: If the branch exists, the name is invalid or HEAD is
            unborn.
    """
    if logger is None:
        logger = create_null_logger()

    sha = layer.create_branch(name)
    logger.info("Created branch", branch=name, sha=sha)
    return sha


def checkout(
    layer: ObjectLayer,
    ref: str,
    *,
    create: bool = False,
    force: bool = False,
    logger: FilteringBoundLogger | None = None,
) -> CheckoutResult:
    """Switch branches.

    With create, the branch is created at HEAD and HEAD is pointed at it
    without touching the index or working tree. Otherwise the index and
    working tree are replaced by the target's tree.

    Args:
        layer: The object layer.
        ref: Branch name.
        create: Create the branch first.
        force: Discard uncommitted changes to tracked files.
        logger: Optional logger.

    Raises:
        DirtyWorktreeError: If tracked files have uncommitted changes and
            force is False.
        CheckoutError: If the branch does not exist.
        BranchError: If create is set and the branch cannot be created.
    """
    if logger is None:
        logger = create_null_logger()

    if create:
        layer.create_branch(ref)
        layer.set_head(ref)
        logger.info("Switched to new branch", branch=ref)
        return CheckoutResult(branch=ref, created=True)

    if not force and layer.current_branch() != ref:
        dirty = dirty_paths(layer)
        if dirty:
            msg = (
                "Your local changes to the following files would be "
                f"overwritten by checkout: {', '.join(dirty)}"
            )
            raise DirtyWorktreeError(msg, paths=dirty)

    layer.checkout(ref, force=force)
    logger.info("Switched branch", branch=ref, force=force)
    return CheckoutResult(branch=ref)


def list_remote_branches(
    layer: ObjectLayer, logger: FilteringBoundLogger | None = None
) -> list[ItemOutcome[tuple[str, ...]]]:
    """Remote-tracking branches grouped by remote.

    Returns:
        One ItemOutcome per remote; value holds its branch names.
    """
    if logger is None:
        logger = create_null_logger()

    outcomes: list[ItemOutcome[tuple[str, ...]]] = []
    for remote in layer.list_remotes():
        try:
            names = tuple(layer.list_branches(remote.name))
        except GitliteError as e:
            logger.warning("Remote branch listing failed", remote=remote.name, error=str(e))
            outcomes.append(ItemOutcome(item=remote.name, ok=False, error=str(e)))
        else:
            outcomes.append(ItemOutcome(item=remote.name, ok=True, value=names))
    return outcomes


def reset_hard(
    layer: ObjectLayer, ref: str, logger: FilteringBoundLogger | None = None
) -> str:
    """Move the current branch to ref and force index and working tree.

    Returns:
        The SHA HEAD now points at.

    Raises:
        RefNotFoundError: If ref cannot be resolved.
        CheckoutError: If the index or working tree cannot be rewritten.
    """
    if logger is None:
        logger = create_null_logger()

    sha = resolve(layer, ref)
    layer.reset_hard(sha)
    logger.info("Hard reset", ref=ref, sha=sha)
    return sha
