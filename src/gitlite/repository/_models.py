"""Repository models.

This module defines the data structures exchanged between the object layer
and the command controllers. All models are immutable snapshots; nothing
here is persisted.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum, StrEnum
from typing import Generic, TypeVar

T = TypeVar("T")


class FileState(IntEnum):
    """State of one side of the three-way comparison for a path.

    For the HEAD side, UNCHANGED means the path is present in HEAD. For the
    index and working tree sides, UNCHANGED means identical to the HEAD blob
    and CHANGED means present with different content, or present while HEAD
    lacks the path.
    """

    ABSENT = 0
    UNCHANGED = 1
    CHANGED = 2


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """One row of the three-way comparison.

    Attributes:
        path: Repository-relative POSIX path.
        head: Presence of the path in the HEAD tree.
        workdir: Working tree content relative to HEAD.
        stage: Index content relative to HEAD.
    """

    path: str
    head: FileState
    workdir: FileState
    stage: FileState


class StatusBucket(StrEnum):
    """User-facing status display categories."""

    STAGED_NEW = "staged-new"
    STAGED_MODIFIED = "staged-modified"
    UNSTAGED_NEW = "unstaged-new"
    UNSTAGED_MODIFIED = "unstaged-modified"

    @property
    def staged(self) -> bool:
        """True for the buckets shown under "Changes to be committed"."""
        return self in (StatusBucket.STAGED_NEW, StatusBucket.STAGED_MODIFIED)

    @property
    def label(self) -> str:
        """Short label used in status listings."""
        if self in (StatusBucket.STAGED_NEW, StatusBucket.UNSTAGED_NEW):
            return "new file"
        return "modified"


@dataclass(frozen=True, slots=True)
class StatusReport:
    """Classified status of the working tree.

    Attributes:
        branch: Current branch name (or the configured default).
        entries: (bucket, path) pairs in discovery order.
    """

    branch: str
    entries: tuple[tuple[StatusBucket, str], ...]

    @property
    def clean(self) -> bool:
        """True when no path needs reporting."""
        return not self.entries

    @property
    def staged(self) -> tuple[tuple[StatusBucket, str], ...]:
        """Entries under "Changes to be committed"."""
        return tuple(e for e in self.entries if e[0].staged)

    @property
    def unstaged(self) -> tuple[tuple[StatusBucket, str], ...]:
        """Entries under "Changes not staged for commit"."""
        return tuple(e for e in self.entries if not e[0].staged)


@dataclass(frozen=True, slots=True)
class Author:
    """Commit identity.

    Attributes:
        name: Display name.
        email: Email address.
    """

    name: str
    email: str

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"

    def to_bytes(self) -> bytes:
        """Identity in the "Name <email>" form stored in commit objects."""
        return str(self).encode("utf-8")


@dataclass(frozen=True, slots=True)
class CommitInfo:
    """Information about a single commit.

    Attributes:
        sha: Full 40-character commit SHA hex string.
        message: Complete commit message.
        author_name: Author name from commit.
        author_email: Author email from commit.
        timestamp: Author timestamp with the recorded timezone.
        tree_sha: SHA hex string of the commit's root tree.
        parent_shas: SHA hex strings of parent commits (empty tuple for root).
    """

    sha: str
    message: str
    author_name: str
    author_email: str
    timestamp: datetime
    tree_sha: str
    parent_shas: tuple[str, ...]

    @property
    def short_sha(self) -> str:
        """Seven-character abbreviated SHA."""
        return self.sha[:7]

    @property
    def subject(self) -> str:
        """First line of the message."""
        lines = self.message.splitlines()
        return lines[0] if lines else ""


@dataclass(frozen=True, slots=True)
class MergeResult:
    """Result of merging one ref into another.

    Attributes:
        sha: Resulting commit SHA, or None when already up to date.
        fast_forward: True when the branch advanced without a merge commit.
    """

    sha: str | None
    fast_forward: bool = False

    @property
    def up_to_date(self) -> bool:
        """True when nothing was merged."""
        return self.sha is None


@dataclass(frozen=True, slots=True)
class Remote:
    """A registered remote.

    Attributes:
        name: Remote name (e.g. "origin").
        url: Fetch and push URL.
    """

    name: str
    url: str


@dataclass(frozen=True, slots=True)
class Credentials:
    """Username/password pair handed to the HTTP transport.

    Attributes:
        username: HTTP basic-auth username ("token" for GitHub tokens).
        password: HTTP basic-auth password or token.
    """

    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass(frozen=True, slots=True)
class ItemOutcome(Generic[T]):
    """Outcome of one item in a bulk operation.

    Attributes:
        item: The item that was processed (path, remote name, ...).
        ok: True when the item succeeded.
        value: Optional payload produced for the item.
        error: Error message when the item failed.
    """

    item: str
    ok: bool
    value: T | None = None
    error: str | None = None
