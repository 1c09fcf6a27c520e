"""Reference resolution helpers shared by the controllers."""

from gitlite.exceptions import MergeError, RefNotFoundError
from gitlite.repository import ObjectLayer


def resolve(layer: ObjectLayer, ref: str) -> str:
    """Resolve a branch name, HEAD, HEAD~N or (abbreviated) hash to a SHA.

    Raises:
        RefNotFoundError: If ref does not name a commit.
    """
    return layer.resolve_ref(ref)


def head_commit(layer: ObjectLayer) -> str | None:
    """SHA HEAD points at, or None for an unborn branch."""
    try:
        return layer.resolve_ref("HEAD")
    except RefNotFoundError:
        return None


def current_branch_name(layer: ObjectLayer, default_branch: str) -> str:
    """Current branch for display, falling back to default_branch.

    Args:
        layer: The object layer.
        default_branch: Name shown when HEAD is detached.
    """
    return layer.current_branch() or default_branch


def require_current_branch(layer: ObjectLayer) -> str:
    """Current branch name for operations that move a branch.

    Raises:
        MergeError: If HEAD is detached.
    """
    branch = layer.current_branch()
    if branch is None:
        msg = "HEAD is detached; check out a branch first"
        raise MergeError(msg)
    return branch
