"""Remote registry and network synchronisation controllers.

Push, pull and fetch share one credential policy (GitHubTokenAuth) and one
failure classification (classify_sync_error). Failures are returned to the
caller as SyncError with a SyncFailureKind so the dispatcher can render
remediation guidance instead of a traceback.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Final

from structlog.typing import FilteringBoundLogger

from gitlite.exceptions import GitliteError, SyncError, SyncFailureKind
from gitlite.repository import Credentials, ItemOutcome, ObjectLayer, Remote
from gitlite.utils import create_null_logger

GITHUB_SSH_PREFIX: Final = "git@github.com:"
GITHUB_HTTPS_PREFIX: Final = "https://github.com/"
TOKEN_USERNAME: Final = "token"

_AUTH_MARKERS: Final = re.compile(r"401|authentication|unauthorized", re.IGNORECASE)
_NOT_FOUND_MARKERS: Final = re.compile(r"404|not found", re.IGNORECASE)


class SyncOperation(StrEnum):
    """Network operations, valued by their display name."""

    PUSH = "Push"
    PULL = "Pull"
    FETCH = "Fetch"


def normalize_remote_url(url: str) -> str:
    """Rewrite GitHub SSH URLs to HTTPS.

    ``git@github.com:org/repo`` becomes ``https://github.com/org/repo.git``.
    Any other URL is returned unchanged.

    Example:
        >>> normalize_remote_url("git@github.com:org/repo")
        'https://github.com/org/repo.git'
    """
    if not url.startswith(GITHUB_SSH_PREFIX):
        return url

    path = url.removeprefix(GITHUB_SSH_PREFIX)
    if not path.endswith(".git"):
        path = f"{path}.git"
    return f"{GITHUB_HTTPS_PREFIX}{path}"


def add_remote(
    layer: ObjectLayer,
    name: str,
    url: str,
    logger: FilteringBoundLogger | None = None,
) -> str:
    """Register a remote under its normalised URL.

    Returns:
        The URL actually stored.

    Raises:
        RemoteError: If the remote already exists.
    """
    if logger is None:
        logger = create_null_logger()

    normalized = normalize_remote_url(url)
    if normalized != url:
        logger.info("Rewrote SSH remote URL", original=url, url=normalized)

    layer.add_remote(name, normalized)
    logger.info("Added remote", remote=name, url=normalized)
    return normalized


def remove_remote(
    layer: ObjectLayer, name: str, logger: FilteringBoundLogger | None = None
) -> None:
    """Remove a remote and its remote-tracking branches.

    Raises:
        RemoteError: If the remote does not exist.
    """
    if logger is None:
        logger = create_null_logger()

    layer.remove_remote(name)
    logger.info("Removed remote", remote=name)


def list_remotes(layer: ObjectLayer) -> list[Remote]:
    """Registered remotes in configuration order."""
    return layer.list_remotes()


@dataclass(slots=True)
class GitHubTokenAuth:
    """Credential policy for HTTPS remotes.

    Supplies ``token:<GITHUB_TOKEN>`` when a token is configured and goes
    anonymous otherwise. Rejected credentials are never retried.

    Attributes:
        token: The configured GitHub token, if any.
        notify: Optional callback receiving user-facing progress lines.
    """

    token: str | None = field(default=None, repr=False)
    notify: Callable[[str], None] | None = None

    def credentials(self, url: str) -> Credentials | None:
        """Credentials callback: token credentials, or None to go anonymous."""
        del url
        if self.token:
            self._say("Using GitHub token for authentication")
            return Credentials(username=TOKEN_USERNAME, password=self.token)
        self._say("No authentication provided (trying as public repo)")
        return None

    def on_failure(self, url: str) -> Credentials | None:
        """Auth failure callback: always cancels."""
        del url
        self._say("Authentication failed.")
        self._say("For private repos, set GITHUB_TOKEN environment variable.")
        return None

    def _say(self, line: str) -> None:
        if self.notify is not None:
            self.notify(line)


def classify_sync_error(error: BaseException) -> SyncFailureKind:
    """Bucket a transport failure for user messaging.

    SyncError carries its own classification; anything else is classified
    from its message.
    """
    if isinstance(error, SyncError) and error.kind is not SyncFailureKind.GENERIC:
        return error.kind

    message = str(error)
    if _AUTH_MARKERS.search(message):
        return SyncFailureKind.AUTH_REQUIRED
    if _NOT_FOUND_MARKERS.search(message):
        return SyncFailureKind.NOT_FOUND
    return SyncFailureKind.GENERIC


def failure_guidance(operation: SyncOperation, error: BaseException) -> list[str]:
    """Remediation lines for a failed push, pull or fetch."""
    kind = classify_sync_error(error)
    if kind is SyncFailureKind.AUTH_REQUIRED:
        return [
            f"{operation} failed: Authentication required",
            "This might be a private repository.",
            "For private repos, you need to set a GitHub token:",
            "  export GITHUB_TOKEN=your_personal_access_token",
        ]
    if kind is SyncFailureKind.NOT_FOUND:
        return [
            f"{operation} failed: Repository not found",
            "Make sure the repository exists and the URL is correct",
        ]

    lines = [f"{operation} failed: {error}"]
    if operation is SyncOperation.PUSH:
        lines.append("Make sure the remote repository exists and you have push access")
    return lines


def _log_failure(
    logger: FilteringBoundLogger,
    operation: SyncOperation,
    remote: str,
    error: SyncError,
) -> None:
    logger.warning(
        "Sync failed",
        operation=operation.value,
        remote=remote,
        kind=classify_sync_error(error).value,
        error=str(error),
    )


def push(
    layer: ObjectLayer,
    auth: GitHubTokenAuth,
    *,
    remote: str = "origin",
    branch: str = "main",
    set_upstream: bool = False,
    logger: FilteringBoundLogger | None = None,
) -> None:
    """Push a local branch to the same name on a remote.

    With set_upstream the remote is recorded as the branch's upstream after
    a successful push.

    Raises:
        SyncError: Classified transport failure. No local state changes.
    """
    if logger is None:
        logger = create_null_logger()

    try:
        layer.push(
            remote,
            branch,
            on_auth=auth.credentials,
            on_auth_failure=auth.on_failure,
        )
    except SyncError as e:
        _log_failure(logger, SyncOperation.PUSH, remote, e)
        raise

    if set_upstream:
        layer.set_upstream(branch, remote)
    logger.info("Pushed", remote=remote, branch=branch, set_upstream=set_upstream)


def pull(
    layer: ObjectLayer,
    auth: GitHubTokenAuth,
    *,
    remote: str = "origin",
    branch: str = "main",
    logger: FilteringBoundLogger | None = None,
) -> None:
    """Fetch a remote branch and merge it into the current branch.

    Raises:
        SyncError: Classified transport or merge failure.
    """
    if logger is None:
        logger = create_null_logger()

    try:
        layer.pull(
            remote,
            branch,
            on_auth=auth.credentials,
            on_auth_failure=auth.on_failure,
        )
    except SyncError as e:
        _log_failure(logger, SyncOperation.PULL, remote, e)
        raise
    logger.info("Pulled", remote=remote, branch=branch)


def fetch(
    layer: ObjectLayer,
    auth: GitHubTokenAuth,
    *,
    remote: str = "origin",
    logger: FilteringBoundLogger | None = None,
) -> None:
    """Fetch a remote into its remote-tracking branches.

    Raises:
        SyncError: Classified transport failure.
    """
    if logger is None:
        logger = create_null_logger()

    try:
        layer.fetch(remote, on_auth=auth.credentials, on_auth_failure=auth.on_failure)
    except SyncError as e:
        _log_failure(logger, SyncOperation.FETCH, remote, e)
        raise
    logger.info("Fetched", remote=remote)


def fetch_all(
    layer: ObjectLayer,
    auth: GitHubTokenAuth,
    *,
    on_start: Callable[[str], None] | None = None,
    on_failure: Callable[[str, GitliteError], None] | None = None,
    logger: FilteringBoundLogger | None = None,
) -> list[ItemOutcome[None]]:
    """Fetch every registered remote independently.

    One remote failing does not stop the others.

    Args:
        layer: The object layer.
        auth: Credential policy.
        on_start: Called with each remote name before it is fetched.
        on_failure: Called with the remote name and its error as soon as
            that remote fails, before the next remote starts.
        logger: Optional logger.

    Returns:
        One ItemOutcome per remote, in configuration order.
    """
    if logger is None:
        logger = create_null_logger()

    outcomes: list[ItemOutcome[None]] = []
    for registered in layer.list_remotes():
        if on_start is not None:
            on_start(registered.name)
        try:
            fetch(layer, auth, remote=registered.name, logger=logger)
        except GitliteError as e:
            if on_failure is not None:
                on_failure(registered.name, e)
            outcomes.append(ItemOutcome(item=registered.name, ok=False, error=str(e)))
        else:
            outcomes.append(ItemOutcome(item=registered.name, ok=True))
    return outcomes
