"""Merge orchestration.

Decides between a no-op, a fast-forward and a true merge before asking the
object layer to move anything.
"""

from dataclasses import dataclass
from enum import StrEnum

from structlog.typing import FilteringBoundLogger

from gitlite.exceptions import DirtyWorktreeError, MergeError, RefNotFoundError
from gitlite.repository import Author, ObjectLayer
from gitlite.utils import create_null_logger

from ._refs import require_current_branch, resolve
from ._status import dirty_paths


class MergeState(StrEnum):
    """Outcome classes of a merge."""

    NO_OP = "no_op"
    FAST_FORWARD = "fast_forward"
    MERGE_COMMIT = "merge_commit"
    CONFLICT = "conflict"


@dataclass(frozen=True, slots=True)
class MergeOutcome:
    """Result of merging theirs into the current branch.

    Attributes:
        state: NO_OP, FAST_FORWARD or MERGE_COMMIT.
        ours: Branch that was merged into.
        theirs: Ref that was merged.
        sha: SHA the branch points at afterwards.
    """

    state: MergeState
    ours: str
    theirs: str
    sha: str

    @property
    def short_sha(self) -> str:
        return self.sha[:7]


def merge(
    layer: ObjectLayer,
    theirs: str,
    author: Author,
    *,
    logger: FilteringBoundLogger | None = None,
) -> MergeOutcome:
    """Merge theirs into the current branch.

    Args:
        layer: The object layer.
        theirs: Branch name or other ref expression to merge.
        author: Identity for a merge commit.
        logger: Optional logger.

    Returns:
        MergeOutcome describing what happened.

    Raises:
        MergeError: If HEAD is detached or a ref cannot be resolved.
        DirtyWorktreeError: If tracked files have uncommitted changes.
        MergeConflictError: If the merge produced conflicts.
        MergeNotSupportedError: If the object layer cannot merge the trees.
    """
    if logger is None:
        logger = create_null_logger()

    ours = require_current_branch(layer)
    try:
        ours_sha = resolve(layer, ours)
        theirs_sha = resolve(layer, theirs)
    except RefNotFoundError as e:
        raise MergeError(str(e)) from e

    if layer.is_ancestor(theirs_sha, ours_sha):
        logger.info("Merge state", state=MergeState.NO_OP, ours=ours, theirs=theirs)
        return MergeOutcome(MergeState.NO_OP, ours, theirs, ours_sha)

    dirty = dirty_paths(layer)
    if dirty:
        msg = (
            "Your local changes to the following files would be "
            f"overwritten by merge: {', '.join(dirty)}"
        )
        raise DirtyWorktreeError(msg, paths=dirty)

    try:
        result = layer.merge_trees(ours, theirs_sha, author)
    except MergeError as e:
        logger.warning(
            "Merge state",
            state=MergeState.CONFLICT,
            ours=ours,
            theirs=theirs,
            error=str(e),
        )
        raise

    if result.sha is None:
        state, sha = MergeState.NO_OP, ours_sha
    elif result.fast_forward:
        state, sha = MergeState.FAST_FORWARD, result.sha
    else:
        state, sha = MergeState.MERGE_COMMIT, result.sha

    logger.info("Merge state", state=state, ours=ours, theirs=theirs, sha=sha)
    return MergeOutcome(state, ours, theirs, sha)
