"""Object layer protocol for type-safe dependency injection.

This module defines the runtime-checkable Protocol that the command
controllers depend on. DulwichObjectLayer implements it on top of dulwich;
FakeObjectLayer implements it in memory for tests.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Protocol, runtime_checkable

from gitlite.repository._models import (
    Author,
    CommitInfo,
    Credentials,
    MergeResult,
    Remote,
    StatusEntry,
)

CredentialsCallback = Callable[[str], Credentials | None]
"""Called with the remote URL; returns credentials or None to go anonymous."""

AuthFailureCallback = Callable[[str], Credentials | None]
"""Called after the remote rejected credentials; None cancels the attempt."""


@runtime_checkable
class ObjectLayer(Protocol):
    """Narrow interface to content-addressable storage and ref management.

    Controllers only ever talk to the repository through this protocol.
    Ref arguments accept branch names, full refs, ``HEAD``, ``HEAD~N`` and
    full or abbreviated commit SHAs. Paths are repository-relative POSIX
    strings.
    """

    @property
    def root(self) -> Path:
        """Working tree root directory."""
        ...

    def close(self) -> None:
        """Release file handles held by the repository."""
        ...

    # Commits

    def create_commit(self, message: str, author: Author) -> str:
        """Commit the current index on the current branch and return its SHA."""
        ...

    def log(self, ref: str = "HEAD", depth: int | None = None) -> list[CommitInfo]:
        """Commits reachable from ref, newest first; empty when unborn."""
        ...

    # Index and working tree

    def status_matrix(self) -> list[StatusEntry]:
        """Three-way comparison of HEAD, index and working tree."""
        ...

    def stage_path(self, path: str) -> None:
        """Add a single working tree file to the index."""
        ...

    # Refs

    def resolve_ref(self, ref: str) -> str:
        """Resolve a ref expression to a full commit SHA."""
        ...

    def current_branch(self) -> str | None:
        """Branch HEAD points at, or None when detached."""
        ...

    def list_branches(self, remote: str | None = None) -> list[str]:
        """Local branch names, or remote-tracking branch names of a remote."""
        ...

    def create_branch(self, name: str, start: str = "HEAD") -> str:
        """Create refs/heads/<name> at start and return the commit SHA."""
        ...

    def checkout(self, ref: str, *, force: bool = False) -> None:
        """Switch HEAD to ref and update index and working tree."""
        ...

    def set_head(self, branch: str) -> None:
        """Point HEAD at a branch without touching index or working tree."""
        ...

    def reset_hard(self, sha: str) -> None:
        """Move the current branch to sha; force index and working tree."""
        ...

    # Merging

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """True when ancestor is reachable from descendant (or equal)."""
        ...

    def merge_trees(self, ours: str, theirs: str, author: Author) -> MergeResult:
        """Merge theirs into the current branch ours."""
        ...

    # Remotes

    def add_remote(self, name: str, url: str) -> None:
        """Register a remote."""
        ...

    def remove_remote(self, name: str) -> None:
        """Delete a remote and its remote-tracking refs."""
        ...

    def list_remotes(self) -> list[Remote]:
        """Registered remotes in configuration order."""
        ...

    def set_upstream(self, branch: str, remote: str) -> None:
        """Record remote/branch as the upstream of a local branch."""
        ...

    # Network

    def fetch(
        self,
        remote: str,
        *,
        on_auth: CredentialsCallback,
        on_auth_failure: AuthFailureCallback,
    ) -> None:
        """Fetch a remote's refs into refs/remotes/<remote>/."""
        ...

    def push(
        self,
        remote: str,
        ref: str,
        *,
        on_auth: CredentialsCallback,
        on_auth_failure: AuthFailureCallback,
    ) -> None:
        """Push a local branch to the same name on a remote."""
        ...

    def pull(
        self,
        remote: str,
        ref: str,
        *,
        on_auth: CredentialsCallback,
        on_auth_failure: AuthFailureCallback,
    ) -> None:
        """Fetch a remote branch and merge it into the current branch."""
        ...
