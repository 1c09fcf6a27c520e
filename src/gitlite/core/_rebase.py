"""Merge-based rebase emulation.

The rebase is approximated by two merges: the current branch is merged into
the target, then the target's new tip is merged back into the current
branch, which fast-forwards it. History is not rewritten.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from structlog.typing import FilteringBoundLogger

from gitlite.exceptions import MergeError, RefNotFoundError
from gitlite.repository import Author, CommitInfo, ObjectLayer
from gitlite.utils import create_null_logger

from ._branches import checkout
from ._merge import MergeOutcome, merge
from ._refs import require_current_branch, resolve


def find_common_ancestor(
    ours_history: Sequence[CommitInfo], theirs_history: Sequence[CommitInfo]
) -> CommitInfo | None:
    """First commit of theirs_history that also appears in ours_history.

    Both histories are expected newest first, so the result is the most
    recent shared commit along theirs_history.
    """
    ours = {c.sha for c in ours_history}
    for candidate in theirs_history:
        if candidate.sha in ours:
            return candidate
    return None


@dataclass(frozen=True, slots=True)
class RebasePlan:
    """Resolved inputs of a rebase.

    Attributes:
        branch: Branch being rebased (current branch).
        onto: Target branch.
        ancestor: Common ancestor, or None when the histories are unrelated.
    """

    branch: str
    onto: str
    ancestor: CommitInfo | None

    @property
    def same_branch(self) -> bool:
        return self.branch == self.onto


@dataclass(frozen=True, slots=True)
class RebaseResult:
    """Outcome of the two merges.

    Attributes:
        plan: The plan that was executed.
        onto_merge: Merge of the current branch into the target.
        branch_merge: Merge of the target back into the current branch.
    """

    plan: RebasePlan
    onto_merge: MergeOutcome
    branch_merge: MergeOutcome

    @property
    def ancestor(self) -> CommitInfo | None:
        return self.plan.ancestor


def plan_rebase(layer: ObjectLayer, onto: str) -> RebasePlan:
    """Resolve both branches and find their common ancestor.

    Raises:
        MergeError: If HEAD is detached or onto cannot be resolved.
    """
    branch = require_current_branch(layer)
    if branch == onto:
        return RebasePlan(branch=branch, onto=onto, ancestor=None)

    try:
        resolve(layer, onto)
    except RefNotFoundError as e:
        raise MergeError(str(e)) from e

    ancestor = find_common_ancestor(layer.log(branch), layer.log(onto))
    return RebasePlan(branch=branch, onto=onto, ancestor=ancestor)


def run_rebase(
    layer: ObjectLayer,
    plan: RebasePlan,
    author: Author,
    logger: FilteringBoundLogger | None = None,
) -> RebaseResult:
    """Execute a plan made by plan_rebase.

    Raises:
        GitliteError: Any checkout or merge failure; HEAD is left on
            whichever branch was checked out when it happened.
    """
    if logger is None:
        logger = create_null_logger()

    logger.info(
        "Rebase started",
        branch=plan.branch,
        onto=plan.onto,
        ancestor=None if plan.ancestor is None else plan.ancestor.sha,
    )

    checkout(layer, plan.onto, logger=logger)
    onto_merge = merge(layer, plan.branch, author, logger=logger)

    checkout(layer, plan.branch, logger=logger)
    branch_merge = merge(layer, plan.onto, author, logger=logger)

    logger.info("Rebase completed", branch=plan.branch, sha=branch_merge.sha)
    return RebaseResult(plan=plan, onto_merge=onto_merge, branch_merge=branch_merge)
