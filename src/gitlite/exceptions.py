"""gitlite exceptions."""

from enum import StrEnum
from pathlib import Path


class GitliteError(Exception):
    """Base exception for gitlite errors."""


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(GitliteError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


# =============================================================================
# Repository Exceptions
# =============================================================================


class RepositoryError(GitliteError):
    """Base exception for repository errors."""


class RepositoryNotFoundError(RepositoryError):
    """Raised when no git repository contains the working directory.

    Attributes:
        path: The directory the search started from.
    """

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        """Initialize with error message and path context.

        Args:
            message: Human-readable error message.
            path: The directory the search started from.
        """
        super().__init__(message)
        self.path: Path | None = path


class RefNotFoundError(RepositoryError, KeyError):
    """Raised when a ref, branch or abbreviated hash cannot be resolved.

    Attributes:
        ref: The ref expression that failed to resolve.
    """

    def __init__(self, message: str, *, ref: str) -> None:
        """Initialize with error message and the unresolved ref.

        Args:
            message: Human-readable error message.
            ref: The ref expression that failed to resolve.
        """
        super().__init__(message)
        self.ref: str = ref

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class StagingError(RepositoryError):
    """Raised when a specific path cannot be added to the index.

    Attributes:
        path: The repository-relative path that failed to stage.
    """

    def __init__(self, message: str, *, path: str) -> None:
        """Initialize with error message and path context.

        Args:
            message: Human-readable error message.
            path: The repository-relative path that failed to stage.
        """
        super().__init__(message)
        self.path: str = path


class CommitError(RepositoryError):
    """Raised when the object layer refuses to create a commit."""


class BranchError(RepositoryError):
    """Raised when a branch cannot be created or listed."""


class CheckoutError(RepositoryError):
    """Raised when HEAD cannot be switched to a ref."""


class DirtyWorktreeError(CheckoutError):
    """Raised when tracked files have uncommitted changes.

    Attributes:
        paths: Repository-relative paths with uncommitted changes.
    """

    def __init__(self, message: str, *, paths: tuple[str, ...] = ()) -> None:
        """Initialize with error message and the dirty paths.

        Args:
            message: Human-readable error message.
            paths: Repository-relative paths with uncommitted changes.
        """
        super().__init__(message)
        self.paths: tuple[str, ...] = paths


# =============================================================================
# Merge Exceptions
# =============================================================================


class MergeError(RepositoryError):
    """Base exception for merge errors."""


class MergeNotSupportedError(MergeError):
    """Raised when a merge needs machinery the object layer does not provide."""


class MergeConflictError(MergeError):
    """Raised when a three-way merge produced conflicting paths.

    Attributes:
        paths: Repository-relative paths with conflicts.
    """

    def __init__(self, message: str, *, paths: tuple[str, ...] = ()) -> None:
        """Initialize with error message and conflicting paths.

        Args:
            message: Human-readable error message.
            paths: Repository-relative paths with conflicts.
        """
        super().__init__(message)
        self.paths: tuple[str, ...] = paths


# =============================================================================
# Remote Exceptions
# =============================================================================


class RemoteError(GitliteError):
    """Raised when a remote cannot be registered, removed or read."""


class SyncFailureKind(StrEnum):
    """Classification of network synchronisation failures."""

    AUTH_REQUIRED = "auth_required"
    NOT_FOUND = "not_found"
    GENERIC = "generic"


class SyncError(GitliteError):
    """Raised when a fetch, push or pull fails.

    Attributes:
        kind: Classified failure bucket used for user messaging.
        remote: Name of the remote the operation targeted.
        cause: The underlying transport exception, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: SyncFailureKind = SyncFailureKind.GENERIC,
        remote: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        """Initialize with error message and classification context.

        Args:
            message: Human-readable error message.
            kind: Classified failure bucket.
            remote: Name of the remote the operation targeted.
            cause: The underlying transport exception, if any.
        """
        super().__init__(message)
        self.kind: SyncFailureKind = kind
        self.remote: str | None = remote
        self.cause: BaseException | None = cause
