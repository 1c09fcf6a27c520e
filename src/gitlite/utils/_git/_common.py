"""Common git utility functions.

This module provides shared helper functions used by the object layer
including repository discovery, path handling, and byte/string conversion.
"""

import re
from pathlib import Path

from dulwich.errors import NotGitRepository
from dulwich.repo import Repo

from gitlite.exceptions import RepositoryNotFoundError

HEADS_PREFIX = "refs/heads/"
REMOTES_PREFIX = "refs/remotes/"


def decode_bytes(value: bytes | str) -> str:
    """Decode bytes to str if needed.

    Args:
        value: A bytes or str value.

    Returns:
        The value as a string.
    """
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def encode_str(value: bytes | str) -> bytes:
    """Encode str to bytes if needed."""
    if isinstance(value, str):
        return value.encode("utf-8")
    return value


def resolve_repo(start: Path | None = None) -> Repo:
    """Discover the repository containing start.

    Args:
        start: Directory to start the upward search from. If None, uses the
            current working directory.

    Returns:
        The discovered Repo instance.

    Raises:
        RepositoryNotFoundError: If no Git repository is found.
    """
    search = start if start is not None else Path.cwd()
    try:
        return Repo.discover(str(search))
    except NotGitRepository as e:
        msg = "not a git repository (or any of the parent directories): .git"
        raise RepositoryNotFoundError(msg, path=search) from e


def get_worktree_dir(repo: Repo) -> Path:
    """Get the worktree directory for a repository.

    Args:
        repo: The repository instance.

    Returns:
        Resolved path to the worktree directory.
    """
    repo_path = decode_bytes(repo.path)

    path = Path(repo_path)
    # If path is .git directory, return parent
    if path.name == ".git":
        return path.parent.resolve()
    return path.resolve()


def strip_refs_heads(branch: bytes | str | None) -> str | None:
    """Strip refs/heads/ prefix from a branch reference.

    Args:
        branch: Branch reference (bytes or str), possibly with refs/heads/ prefix.

    Returns:
        Branch name without prefix, or None if input is None.
    """
    if branch is None:
        return None
    branch_str = decode_bytes(branch)
    if branch_str.startswith(HEADS_PREFIX):
        return branch_str[len(HEADS_PREFIX) :]
    return branch_str


# "main~2", "HEAD^", "abc123~" -> base plus first-parent steps
_ANCESTRY_SUFFIX = re.compile(r"(~\d*|\^)+$")
_ANCESTRY_STEP = re.compile(r"~\d*|\^")


def split_ancestry(ref: str) -> tuple[str, int]:
    """Split a ref expression into its base and first-parent step count.

    Args:
        ref: Ref expression such as "main~2" or "HEAD^".

    Returns:
        Tuple of (base ref, number of first-parent steps).

    Example:
        >>> split_ancestry("main~2^")
        ('main', 3)
    """
    match = _ANCESTRY_SUFFIX.search(ref)
    if match is None or match.start() == 0:
        return ref, 0

    steps = 0
    for step in _ANCESTRY_STEP.findall(match.group(0)):
        steps += 1 if step in ("~", "^") else int(step[1:])
    return ref[: match.start()], steps
