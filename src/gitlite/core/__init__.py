"""Command controllers.

Each controller drives the object layer for one family of verbs and returns
plain result objects; rendering is left to the CLI.

Example:
    >>> from gitlite.core import get_status
    >>> from gitlite.repository import DulwichObjectLayer
    >>> with DulwichObjectLayer.discover() as layer:
    ...     report = get_status(layer)
"""

from ._branches import (
    BranchListing,
    CheckoutResult,
    checkout,
    create_branch,
    list_branches,
    list_remote_branches,
    reset_hard,
)
from ._history import (
    DEFAULT_LOG_DEPTH,
    INITIAL_COMMIT_MESSAGE,
    InitResult,
    commit,
    init,
    log,
)
from ._merge import MergeOutcome, MergeState, merge
from ._rebase import (
    RebasePlan,
    RebaseResult,
    find_common_ancestor,
    plan_rebase,
    run_rebase,
)
from ._refs import current_branch_name, head_commit, require_current_branch, resolve
from ._remotes import (
    GitHubTokenAuth,
    SyncOperation,
    add_remote,
    classify_sync_error,
    failure_guidance,
    fetch,
    fetch_all,
    list_remotes,
    normalize_remote_url,
    pull,
    push,
    remove_remote,
)
from ._staging import (
    WILDCARD,
    iter_worktree_files,
    repo_relative,
    stage_all,
    stage_file,
)
from ._status import (
    ExclusionPolicy,
    classify,
    classify_entry,
    dirty_paths,
    get_status,
)

__all__ = [
    "DEFAULT_LOG_DEPTH",
    "INITIAL_COMMIT_MESSAGE",
    "WILDCARD",
    "BranchListing",
    "CheckoutResult",
    "ExclusionPolicy",
    "GitHubTokenAuth",
    "InitResult",
    "MergeOutcome",
    "MergeState",
    "RebasePlan",
    "RebaseResult",
    "SyncOperation",
    "add_remote",
    "checkout",
    "classify",
    "classify_entry",
    "classify_sync_error",
    "commit",
    "create_branch",
    "current_branch_name",
    "dirty_paths",
    "failure_guidance",
    "fetch",
    "fetch_all",
    "find_common_ancestor",
    "get_status",
    "head_commit",
    "init",
    "iter_worktree_files",
    "list_branches",
    "list_remote_branches",
    "list_remotes",
    "log",
    "merge",
    "normalize_remote_url",
    "plan_rebase",
    "pull",
    "push",
    "remove_remote",
    "repo_relative",
    "require_current_branch",
    "reset_hard",
    "resolve",
    "run_rebase",
    "stage_all",
    "stage_file",
]
