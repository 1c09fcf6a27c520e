# ruff: noqa: TC003  # Path needed at runtime for dataclass fields
"""Fake object layer for testing.

This module provides a FakeObjectLayer class that implements ObjectLayer
in memory, for use in tests without requiring an actual Git repository.
"""

import hashlib
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from types import TracebackType
from typing import Self

from gitlite.exceptions import (
    BranchError,
    CheckoutError,
    CommitError,
    MergeConflictError,
    MergeError,
    MergeNotSupportedError,
    RefNotFoundError,
    RemoteError,
    StagingError,
    SyncError,
    SyncFailureKind,
)
from gitlite.repository._models import (
    Author,
    CommitInfo,
    FileState,
    MergeResult,
    Remote,
    StatusEntry,
)
from gitlite.repository._protocol import AuthFailureCallback, CredentialsCallback
from gitlite.utils._git import split_ancestry


@dataclass(slots=True)
class FakeCommit:
    """A commit held by FakeObjectLayer: metadata plus a full file snapshot."""

    info: CommitInfo
    files: dict[str, str]


@dataclass(slots=True)
class FakeObjectLayer:
    """Fake repository for testing.

    Implements ObjectLayer without touching the filesystem. File contents
    are plain strings keyed by repository-relative path.

    The fake maintains internal state that can be manipulated for testing:
    - workdir and index hold the working tree and staged snapshots
    - branches maps branch names to commit SHAs (absent while unborn)
    - remote_heads holds the branches each remote serves to fetch
    - errors maps an operation name to an exception it raises once
    - private_remotes maps a remote name to the password it accepts

    Example:
        >>> layer = FakeObjectLayer()
        >>> layer.write("README.md", "hello")
        >>> layer.stage_path("README.md")
        >>> sha = layer.create_commit("Add readme", Author("Ada", "ada@example.com"))
        >>> layer.log()[0].message
        'Add readme'
    """

    root: Path = field(default_factory=lambda: Path("/fake/project"))
    head: str = "main"
    detached: str | None = None
    branches: dict[str, str] = field(default_factory=dict)
    commits: dict[str, FakeCommit] = field(default_factory=dict)
    index: dict[str, str] = field(default_factory=dict)
    workdir: dict[str, str] = field(default_factory=dict)
    remotes: dict[str, str] = field(default_factory=dict)
    remote_branches: dict[str, dict[str, str]] = field(default_factory=dict)
    remote_heads: dict[str, dict[str, str]] = field(default_factory=dict)
    upstreams: dict[str, str] = field(default_factory=dict)
    pushed: list[tuple[str, str]] = field(default_factory=list)
    private_remotes: dict[str, str] = field(default_factory=dict)
    errors: dict[str, Exception] = field(default_factory=dict)
    merge_supported: bool = True
    closed: bool = False
    _clock: int = field(default=1_700_000_000)

    # =========================================================================
    # Context Manager Protocol
    # =========================================================================

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Mark the fake closed."""
        self.closed = True

    # =========================================================================
    # Test Helpers
    # =========================================================================

    def write(self, path: str, content: str) -> None:
        """Create or overwrite a working tree file."""
        self.workdir[path] = content

    def commit_files(self, message: str, files: dict[str, str]) -> str:
        """Write, stage and commit files in one step.

        Args:
            message: Commit message.
            files: Paths and contents to write before committing.

        Returns:
            The new commit SHA.
        """
        for path, content in files.items():
            self.write(path, content)
            self.stage_path(path)
        return self.create_commit(message, Author("Test User", "test@example.com"))

    def fail(self, operation: str, error: Exception) -> None:
        """Make the next call of operation raise error."""
        self.errors[operation] = error

    def _maybe_fail(self, operation: str) -> None:
        error = self.errors.pop(operation, None)
        if error is not None:
            raise error

    def _head_sha(self) -> str | None:
        if self.detached is not None:
            return self.detached
        return self.branches.get(self.head)

    def _head_files(self) -> dict[str, str]:
        sha = self._head_sha()
        if sha is None:
            return {}
        return self.commits[sha].files

    def _new_commit(
        self, message: str, author: Author, files: dict[str, str], parents: tuple[str, ...]
    ) -> str:
        self._clock += 60
        digest = hashlib.sha1(  # noqa: S324
            f"{self._clock}\0{message}\0{sorted(files.items())}\0{parents}".encode()
        ).hexdigest()
        self.commits[digest] = FakeCommit(
            info=CommitInfo(
                sha=digest,
                message=message,
                author_name=author.name,
                author_email=author.email,
                timestamp=datetime.fromtimestamp(self._clock, tz=UTC),
                tree_sha=hashlib.sha1(  # noqa: S324
                    repr(sorted(files.items())).encode()
                ).hexdigest(),
                parent_shas=parents,
            ),
            files=dict(files),
        )
        return digest

    def _advance(self, sha: str) -> None:
        if self.detached is not None:
            self.detached = sha
        else:
            self.branches[self.head] = sha

    # =========================================================================
    # Commits
    # =========================================================================

    def create_commit(self, message: str, author: Author) -> str:
        """Commit the index on the current branch."""
        self._maybe_fail("create_commit")
        if not message:
            msg = "Empty commit message"
            raise CommitError(msg)

        parent = self._head_sha()
        parents = () if parent is None else (parent,)
        sha = self._new_commit(message, author, self.index, parents)
        self._advance(sha)
        return sha

    def log(self, ref: str = "HEAD", depth: int | None = None) -> list[CommitInfo]:
        """Commits reachable from ref, newest first, by commit time."""
        self._maybe_fail("log")
        try:
            start = self.resolve_ref(ref)
        except RefNotFoundError:
            if ref == "HEAD":
                return []
            raise

        seen: set[str] = set()
        pending = [start]
        found: list[CommitInfo] = []
        while pending:
            sha = pending.pop()
            if sha in seen:
                continue
            seen.add(sha)
            info = self.commits[sha].info
            found.append(info)
            pending.extend(info.parent_shas)

        found.sort(key=lambda c: c.timestamp, reverse=True)
        return found if depth is None else found[:depth]

    # =========================================================================
    # Index and Working Tree
    # =========================================================================

    def status_matrix(self) -> list[StatusEntry]:
        """Three-way comparison of the HEAD snapshot, index and workdir."""
        self._maybe_fail("status_matrix")
        head = self._head_files()
        entries: list[StatusEntry] = []
        for path in sorted(head.keys() | self.index.keys() | self.workdir.keys()):
            head_content = head.get(path)
            entries.append(
                StatusEntry(
                    path=path,
                    head=FileState.ABSENT
                    if head_content is None
                    else FileState.UNCHANGED,
                    workdir=_compare(self.workdir.get(path), head_content),
                    stage=_compare(self.index.get(path), head_content),
                )
            )
        return entries

    def stage_path(self, path: str) -> None:
        """Copy a working tree file into the index."""
        self._maybe_fail(f"stage_path:{path}")
        if path not in self.workdir:
            msg = f"pathspec '{path}' did not match any files"
            raise StagingError(msg, path=path)
        self.index[path] = self.workdir[path]

    # =========================================================================
    # Refs
    # =========================================================================

    def resolve_ref(self, ref: str) -> str:
        """Resolve HEAD, branch names, remote-tracking names and SHA prefixes."""
        base, steps = split_ancestry(ref)
        sha = self._resolve_base(base)
        if sha is None:
            msg = f"unknown revision '{ref}'"
            raise RefNotFoundError(msg, ref=ref)

        for _ in range(steps):
            parents = self.commits[sha].info.parent_shas
            if not parents:
                msg = f"unknown revision '{ref}'"
                raise RefNotFoundError(msg, ref=ref)
            sha = parents[0]
        return sha

    def _resolve_base(self, ref: str) -> str | None:
        if ref == "HEAD":
            return self._head_sha()
        name = ref.removeprefix("refs/heads/")
        if name in self.branches:
            return self.branches[name]
        remote_name = ref.removeprefix("refs/remotes/")
        if "/" in remote_name:
            remote, branch = remote_name.split("/", 1)
            if branch in self.remote_branches.get(remote, {}):
                return self.remote_branches[remote][branch]
        if len(ref) >= 4:
            matches = [sha for sha in self.commits if sha.startswith(ref)]
            if len(matches) == 1:
                return matches[0]
        return None

    def current_branch(self) -> str | None:
        """Current branch, or None when detached."""
        return None if self.detached is not None else self.head

    def list_branches(self, remote: str | None = None) -> list[str]:
        """Local branches with commits, or one remote's tracking branches."""
        self._maybe_fail("list_branches")
        if remote is None:
            return sorted(self.branches)
        return sorted(self.remote_branches.get(remote, {}))

    def create_branch(self, name: str, start: str = "HEAD") -> str:
        """Create a branch at start."""
        self._maybe_fail("create_branch")
        if not name or name.startswith("-") or " " in name or ".." in name:
            msg = f"'{name}' is not a valid branch name"
            raise BranchError(msg)
        try:
            sha = self.resolve_ref(start)
        except RefNotFoundError as e:
            msg = f"Not a valid object name: '{start}'"
            raise BranchError(msg) from e
        if name in self.branches:
            msg = f"A branch named '{name}' already exists"
            raise BranchError(msg)
        self.branches[name] = sha
        return sha

    def checkout(self, ref: str, *, force: bool = False) -> None:
        """Switch to a branch and replace index and workdir with its snapshot."""
        self._maybe_fail("checkout")
        if ref not in self.branches:
            owners = [r for r, heads in self.remote_branches.items() if ref in heads]
            if len(owners) != 1:
                msg = f"pathspec '{ref}' did not match any branch"
                raise CheckoutError(msg)
            self.branches[ref] = self.remote_branches[owners[0]][ref]

        if not force and any(
            e.head is not FileState.ABSENT
            and FileState.CHANGED in (e.stage, e.workdir)
            for e in self.status_matrix()
        ):
            msg = "Your local changes would be overwritten by checkout"
            raise CheckoutError(msg)

        self._load_snapshot(self.commits[self.branches[ref]].files)
        self.head = ref
        self.detached = None

    def _load_snapshot(self, files: dict[str, str]) -> None:
        for path in self._head_files():
            self.workdir.pop(path, None)
        for path in list(self.index):
            self.workdir.pop(path, None)
        self.index = dict(files)
        self.workdir.update(files)

    def set_head(self, branch: str) -> None:
        """Point HEAD at a branch without touching index or workdir."""
        self.head = branch
        self.detached = None

    def reset_hard(self, sha: str) -> None:
        """Move the current branch and force index and workdir."""
        self._maybe_fail("reset_hard")
        files = self.commits[sha].files
        for path in self.index:
            self.workdir.pop(path, None)
        self._advance(sha)
        self.index = dict(files)
        self.workdir.update(files)

    # =========================================================================
    # Merging
    # =========================================================================

    def _ancestors(self, sha: str) -> set[str]:
        seen: set[str] = set()
        pending = [sha]
        while pending:
            current = pending.pop()
            if current not in seen:
                seen.add(current)
                pending.extend(self.commits[current].info.parent_shas)
        return seen

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """True when ancestor is descendant or in its history."""
        return ancestor in self._ancestors(descendant)

    def merge_trees(self, ours: str, theirs: str, author: Author) -> MergeResult:
        """Merge theirs into the current branch with a per-path three-way merge."""
        self._maybe_fail("merge_trees")
        if self.current_branch() != ours:
            msg = f"Cannot merge into '{ours}': it is not the current branch"
            raise MergeError(msg)

        ours_sha = self.resolve_ref(ours)
        theirs_sha = self.resolve_ref(theirs)
        if self.is_ancestor(theirs_sha, ours_sha):
            return MergeResult(sha=None)
        if self.is_ancestor(ours_sha, theirs_sha):
            self.reset_hard(theirs_sha)
            return MergeResult(sha=theirs_sha, fast_forward=True)
        if not self.merge_supported:
            msg = "merge strategy not available"
            raise MergeNotSupportedError(msg)

        common = self._ancestors(ours_sha) & self._ancestors(theirs_sha)
        base_files: dict[str, str] = {}
        if common:
            newest = max(common, key=lambda s: self.commits[s].info.timestamp)
            base_files = self.commits[newest].files

        ours_files = self.commits[ours_sha].files
        theirs_files = self.commits[theirs_sha].files
        merged: dict[str, str] = {}
        conflicts: list[str] = []
        for path in sorted(base_files.keys() | ours_files.keys() | theirs_files.keys()):
            base, mine, other = (
                base_files.get(path),
                ours_files.get(path),
                theirs_files.get(path),
            )
            if mine == other or other == base:
                result = mine
            elif mine == base:
                result = other
            else:
                conflicts.append(path)
                continue
            if result is not None:
                merged[path] = result

        if conflicts:
            msg = f"Automatic merge failed; fix conflicts in: {', '.join(conflicts)}"
            raise MergeConflictError(msg, paths=tuple(conflicts))

        sha = self._new_commit(
            f"Merge {theirs} into {ours}", author, merged, (ours_sha, theirs_sha)
        )
        self.reset_hard(sha)
        return MergeResult(sha=sha)

    # =========================================================================
    # Remotes
    # =========================================================================

    def add_remote(self, name: str, url: str) -> None:
        """Register a remote."""
        if name in self.remotes:
            msg = f"remote {name} already exists"
            raise RemoteError(msg)
        self.remotes[name] = url

    def remove_remote(self, name: str) -> None:
        """Delete a remote and its tracking branches."""
        if name not in self.remotes:
            msg = f"No such remote: '{name}'"
            raise RemoteError(msg)
        del self.remotes[name]
        self.remote_branches.pop(name, None)

    def list_remotes(self) -> list[Remote]:
        """Registered remotes in insertion order."""
        return [Remote(name=n, url=u) for n, u in self.remotes.items()]

    def set_upstream(self, branch: str, remote: str) -> None:
        """Record the upstream remote of a branch."""
        self.upstreams[branch] = remote

    # =========================================================================
    # Network
    # =========================================================================

    def _authenticate(
        self,
        remote: str,
        on_auth: CredentialsCallback,
        on_auth_failure: AuthFailureCallback,
    ) -> None:
        self._maybe_fail(f"sync:{remote}")
        url = self.remotes.get(remote, remote)
        if remote not in self.remotes:
            msg = f"HTTP 404: repository not found at {url}"
            raise SyncError(msg, kind=SyncFailureKind.NOT_FOUND, remote=remote)

        required = self.private_remotes.get(remote)
        if required is None:
            return
        credentials = on_auth(url)
        if credentials is not None and credentials.password == required:
            return
        retry = on_auth_failure(url)
        if retry is not None and retry.password == required:
            return
        msg = f"HTTP 401: authentication required for {url}"
        raise SyncError(msg, kind=SyncFailureKind.AUTH_REQUIRED, remote=remote)

    def fetch(
        self,
        remote: str,
        *,
        on_auth: CredentialsCallback,
        on_auth_failure: AuthFailureCallback,
    ) -> None:
        """Copy remote_heads[remote] into the remote-tracking branches."""
        self._authenticate(remote, on_auth, on_auth_failure)
        self.remote_branches[remote] = dict(self.remote_heads.get(remote, {}))

    def push(
        self,
        remote: str,
        ref: str,
        *,
        on_auth: CredentialsCallback,
        on_auth_failure: AuthFailureCallback,
    ) -> None:
        """Record the push and update the remote's heads."""
        self._authenticate(remote, on_auth, on_auth_failure)
        if ref not in self.branches:
            msg = f"src refspec {ref} does not match any"
            raise SyncError(msg, remote=remote)
        self.remote_heads.setdefault(remote, {})[ref] = self.branches[ref]
        self.remote_branches.setdefault(remote, {})[ref] = self.branches[ref]
        self.pushed.append((remote, ref))

    def pull(
        self,
        remote: str,
        ref: str,
        *,
        on_auth: CredentialsCallback,
        on_auth_failure: AuthFailureCallback,
    ) -> None:
        """Fetch, then merge remote/ref into the current branch."""
        self.fetch(remote, on_auth=on_auth, on_auth_failure=on_auth_failure)
        if ref not in self.remote_branches[remote]:
            msg = f"couldn't find remote ref refs/heads/{ref}"
            raise SyncError(msg, remote=remote)

        theirs = self.remote_branches[remote][ref]
        ours = self._head_sha()
        if ours is None:
            self._advance(theirs)
            self._load_snapshot(self.commits[theirs].files)
            return
        branch = self.current_branch()
        if branch is None:
            msg = "cannot pull into a detached HEAD"
            raise SyncError(msg, remote=remote)
        try:
            self.merge_trees(branch, theirs, Author("Test User", "test@example.com"))
        except MergeError as e:
            raise SyncError(str(e), remote=remote, cause=e) from e


def _compare(content: str | None, head_content: str | None) -> FileState:
    if content is None:
        return FileState.ABSENT
    if content == head_content:
        return FileState.UNCHANGED
    return FileState.CHANGED
