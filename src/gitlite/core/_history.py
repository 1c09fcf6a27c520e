"""Repository initialisation, commit and log controllers."""

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from structlog.typing import FilteringBoundLogger

from gitlite.exceptions import CommitError
from gitlite.repository import Author, CommitInfo, ObjectLayer, init_repository
from gitlite.utils import create_null_logger

DEFAULT_LOG_DEPTH: Final = 5
INITIAL_COMMIT_MESSAGE: Final = "Initial commit"


@dataclass(frozen=True, slots=True)
class InitResult:
    """Outcome of initialising a repository.

    Attributes:
        root: Worktree root.
        reinitialized: True when a repository already existed.
        initial_commit: SHA of the initial empty commit, or None when the
            repository was left unborn.
    """

    root: Path
    reinitialized: bool
    initial_commit: str | None = None


def init(
    path: Path,
    *,
    default_branch: str,
    author: Author,
    logger: FilteringBoundLogger | None = None,
) -> InitResult:
    """Create a repository at path with an initial empty commit.

    An existing repository is left untouched. If the initial commit cannot
    be written the repository stays unborn.

    Args:
        path: Worktree directory.
        default_branch: Branch HEAD points at.
        author: Identity for the initial commit.
        logger: Optional logger.
    """
    if logger is None:
        logger = create_null_logger()

    layer, reinitialized = init_repository(path, default_branch)
    with layer:
        if reinitialized:
            logger.info("Repository already initialized", path=str(layer.root))
            return InitResult(root=layer.root, reinitialized=True)

        try:
            sha = layer.create_commit(INITIAL_COMMIT_MESSAGE, author)
        except CommitError as e:
            logger.warning("Initial commit failed", error=str(e))
            return InitResult(root=layer.root, reinitialized=False)

        logger.info("Repository initialized", path=str(layer.root), sha=sha)
        return InitResult(root=layer.root, reinitialized=False, initial_commit=sha)


def commit(
    layer: ObjectLayer,
    message: str,
    author: Author,
    logger: FilteringBoundLogger | None = None,
) -> CommitInfo:
    """Commit the index on the current branch.

    Args:
        layer: The object layer.
        message: Commit message; must not be blank.
        author: Identity used as author and committer.
        logger: Optional logger.

    Returns:
        CommitInfo of the new commit.

    Raises:
        CommitError: If the message is blank or the commit cannot be written.
    """
    if logger is None:
        logger = create_null_logger()

    if not message.strip():
        msg = "Aborting commit due to empty commit message"
        raise CommitError(msg)

    sha = layer.create_commit(message, author)
    logger.info("Created commit", sha=sha, author=str(author))
    return layer.log(sha, depth=1)[0]


def log(layer: ObjectLayer, depth: int = DEFAULT_LOG_DEPTH) -> list[CommitInfo]:
    """Up to depth commits reachable from HEAD, newest first.

    Returns an empty list for an unborn branch.
    """
    return layer.log("HEAD", depth=depth)
