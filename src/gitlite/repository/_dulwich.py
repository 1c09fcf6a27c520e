"""Object layer backed by dulwich.

This module adapts dulwich's repository, porcelain and graph APIs to the
ObjectLayer protocol. It owns every conversion between dulwich's bytes
world and the str-based models the controllers use, and it translates
dulwich exceptions into the gitlite exception hierarchy.
"""

import io
import os
from collections.abc import Callable, Iterator
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import TracebackType
from typing import Any, Final, Self, cast

from dulwich import porcelain
from dulwich.client import HTTPProxyUnauthorized, HTTPUnauthorized
from dulwich.errors import GitProtocolError, HangupException, NotGitRepository
from dulwich.graph import can_fast_forward
from dulwich.ignore import IgnoreFilterManager
from dulwich.index import blob_from_path_and_stat
from dulwich.objects import Commit
from dulwich.objectspec import parse_commit
from dulwich.refs import check_ref_format
from dulwich.repo import Repo

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
    Credentials,
    FileState,
    MergeResult,
    Remote,
    StatusEntry,
)
from gitlite.repository._protocol import AuthFailureCallback, CredentialsCallback
from gitlite.utils._git import (
    HEADS_PREFIX,
    REMOTES_PREFIX,
    decode_bytes,
    encode_str,
    get_worktree_dir,
    resolve_repo,
    split_ancestry,
    strip_refs_heads,
)

_GIT_DIR: Final = ".git"


class DulwichObjectLayer:
    """ObjectLayer implementation over a dulwich Repo.

    The class implements the context manager protocol; the underlying
    Repo is closed when exiting the context.

    Attributes:
        root: The resolved path to the working tree root directory.
    """

    __slots__: Final = ("_repo", "_root")
    _repo: Repo
    _root: Path

    def __init__(self, repo: Repo) -> None:
        """Wrap an open dulwich Repo.

        Args:
            repo: The repository to operate on.
        """
        self._repo = repo
        self._root = get_worktree_dir(repo)

    @classmethod
    def discover(cls, working_dir: Path | None = None) -> Self:
        """Open the repository containing working_dir.

        Args:
            working_dir: Directory to search upward from. Defaults to cwd.

        Returns:
            An object layer for the discovered repository.

        Raises:
            RepositoryNotFoundError: If no repository contains working_dir.
        """
        return cls(resolve_repo(working_dir))

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
        """Close the underlying git repository."""
        self._repo.close()

    @property
    def root(self) -> Path:
        """Get the resolved root path of the working tree."""
        return self._root

    # =========================================================================
    # Commits
    # =========================================================================

    def create_commit(self, message: str, author: Author) -> str:
        """Commit the current index on the current branch.

        Args:
            message: Commit message.
            author: Identity used as both author and committer.

        Returns:
            The new commit SHA as a hex string.

        Raises:
            CommitError: If dulwich refuses to write the commit.
        """
        identity = author.to_bytes()
        try:
            sha = porcelain.commit(
                self._repo,
                message=message.encode("utf-8"),
                author=identity,
                committer=identity,
            )
        except (porcelain.Error, OSError, ValueError) as e:
            raise CommitError(str(e) or type(e).__name__) from e
        return decode_bytes(sha)

    def log(self, ref: str = "HEAD", depth: int | None = None) -> list[CommitInfo]:
        """Walk commits reachable from ref, newest first.

        Args:
            ref: Ref expression to start from.
            depth: Maximum number of commits. None walks the full history.

        Returns:
            List of CommitInfo. Empty when ref is HEAD of an unborn branch.

        Raises:
            RefNotFoundError: If ref is not HEAD and cannot be resolved.
        """
        try:
            sha = self.resolve_ref(ref)
        except RefNotFoundError:
            if ref == "HEAD":
                return []
            raise

        walker = self._repo.get_walker(include=[encode_str(sha)], max_entries=depth)
        return [self._commit_to_info(entry.commit) for entry in walker]

    def _commit_to_info(self, commit: Commit) -> CommitInfo:
        """Convert a dulwich Commit to CommitInfo.

        Args:
            commit: The commit object.

        Returns:
            CommitInfo populated from the commit data.
        """
        author_str = decode_bytes(cast("bytes", commit.author))
        # Parse "Name <email>" format
        if "<" in author_str and author_str.endswith(">"):
            name_part = author_str.rsplit("<", 1)[0].strip()
            email_part = author_str.rsplit("<", 1)[1].rstrip(">")
        else:
            name_part = author_str
            email_part = ""

        # dulwich parses "+0100" to 3600: seconds east of UTC
        tz = timezone(timedelta(seconds=cast("int", commit.author_timezone)))
        timestamp = datetime.fromtimestamp(cast("int", commit.author_time), tz=tz)

        return CommitInfo(
            sha=decode_bytes(commit.id),
            message=decode_bytes(cast("bytes", commit.message)),
            author_name=name_part,
            author_email=email_part,
            timestamp=timestamp,
            tree_sha=decode_bytes(cast("bytes", commit.tree)),
            parent_shas=tuple(decode_bytes(p) for p in commit.parents),
        )

    # =========================================================================
    # Index and Working Tree
    # =========================================================================

    def status_matrix(self) -> list[StatusEntry]:
        """Compare HEAD, index and working tree for every known path.

        Untracked paths ignored by .gitignore are omitted. Paths are
        returned in sorted order.

        Returns:
            One StatusEntry per path present on at least one side.
        """
        head = self._head_blobs()
        index = {
            decode_bytes(path): decode_bytes(sha)
            for path, sha, _mode in self._repo.open_index().iterobjects()
        }
        tracked = head.keys() | index.keys()
        workdir = dict(self._walk_workdir(tracked))

        entries: list[StatusEntry] = []
        for path in sorted(head.keys() | index.keys() | workdir.keys()):
            head_sha = head.get(path)
            entries.append(
                StatusEntry(
                    path=path,
                    head=FileState.ABSENT if head_sha is None else FileState.UNCHANGED,
                    workdir=_compare(workdir.get(path), head_sha),
                    stage=_compare(index.get(path), head_sha),
                )
            )
        return entries

    def _head_blobs(self) -> dict[str, str]:
        """Map every file path in the HEAD tree to its blob SHA."""
        try:
            head_commit = self._repo[b"HEAD"]
        except KeyError:
            # Unborn branch
            return {}

        tree_sha = cast("bytes", getattr(head_commit, "tree", b""))
        return {
            decode_bytes(entry.path): decode_bytes(entry.sha)
            for entry in self._repo.object_store.iter_tree_contents(tree_sha)
        }

    def _walk_workdir(self, tracked: set[str]) -> Iterator[tuple[str, str]]:
        """Yield (path, blob SHA) for working tree files.

        Skips .git directories. Untracked files and directories matched by
        the repository's ignore rules are skipped.

        Args:
            tracked: Paths present in HEAD or the index; never skipped.
        """
        ignore = IgnoreFilterManager.from_repo(self._repo)
        tracked_dirs = {p.rsplit("/", 1)[0] for p in tracked if "/" in p}

        for dirpath, dirnames, filenames in os.walk(self._root):
            rel_dir = Path(dirpath).relative_to(self._root).as_posix()
            prefix = "" if rel_dir == "." else f"{rel_dir}/"

            kept: list[str] = []
            for name in sorted(dirnames):
                rel = f"{prefix}{name}"
                if name == _GIT_DIR:
                    continue
                if not _has_tracked_under(rel, tracked_dirs) and ignore.is_ignored(
                    f"{rel}/"
                ):
                    continue
                kept.append(name)
            dirnames[:] = kept

            for name in sorted(filenames):
                rel = f"{prefix}{name}"
                if rel not in tracked and ignore.is_ignored(rel):
                    continue
                full = os.path.join(dirpath, name)
                st = os.lstat(full)
                blob = blob_from_path_and_stat(os.fsencode(full), st)
                yield rel, decode_bytes(blob.id)

    def stage_path(self, path: str) -> None:
        """Add a single working tree file to the index.

        Args:
            path: Repository-relative path of a file.

        Raises:
            StagingError: If the path does not exist, is untracked and
                ignored, or dulwich fails to add it.
        """
        full = self._root / path
        if not full.is_file() and not full.is_symlink():
            msg = f"pathspec '{path}' did not match any files"
            raise StagingError(msg, path=path)

        try:
            _added, ignored = porcelain.add(self._repo, paths=[str(full)])
        except (porcelain.Error, OSError, ValueError) as e:
            raise StagingError(str(e), path=path) from e

        if not ignored:
            return

        # porcelain.add skips ignored paths even when the index already tracks them
        if encode_str(path) not in self._repo.open_index():
            msg = f"The following paths are ignored by one of your .gitignore files: {path}"
            raise StagingError(msg, path=path)
        try:
            self._repo.get_worktree().stage([path])
        except (OSError, ValueError) as e:
            raise StagingError(str(e), path=path) from e

    # =========================================================================
    # Refs
    # =========================================================================

    def resolve_ref(self, ref: str) -> str:
        """Resolve a ref expression to a full commit SHA.

        Supports branch and remote-tracking names, HEAD, full and abbreviated
        SHAs, and first-parent suffixes such as ``HEAD~2`` or ``main^``.

        Args:
            ref: The ref expression.

        Returns:
            40-character commit SHA hex string.

        Raises:
            RefNotFoundError: If the expression cannot be resolved.
        """
        base, steps = split_ancestry(ref)
        msg = f"unknown revision '{ref}'"
        try:
            commit = parse_commit(self._repo, encode_str(base))
        except (KeyError, ValueError, NotGitRepository) as e:
            raise RefNotFoundError(msg, ref=ref) from e

        for _ in range(steps):
            if not commit.parents:
                raise RefNotFoundError(msg, ref=ref)
            commit = cast("Commit", self._repo[commit.parents[0]])

        return decode_bytes(commit.id)

    def current_branch(self) -> str | None:
        """Get the current branch name.

        Returns:
            Branch name without refs/heads/ prefix, or None if detached HEAD.
        """
        head_ref = self._repo.refs.get_symrefs().get(b"HEAD")
        if head_ref is None:
            return None

        head_ref_str = decode_bytes(head_ref)
        if head_ref_str.startswith(HEADS_PREFIX):
            return strip_refs_heads(head_ref_str)
        return None

    def list_branches(self, remote: str | None = None) -> list[str]:
        """List local branches, or remote-tracking branches of one remote.

        Args:
            remote: Remote name. None lists local branches.

        Returns:
            Sorted branch names without their ref prefix.
        """
        base = HEADS_PREFIX if remote is None else f"{REMOTES_PREFIX}{remote}/"
        names = (decode_bytes(n) for n in self._repo.refs.keys(base=encode_str(base)))
        return sorted(n for n in names if n != "HEAD")

    def create_branch(self, name: str, start: str = "HEAD") -> str:
        """Create a branch.

        Args:
            name: New branch name.
            start: Ref expression the branch starts at.

        Returns:
            The commit SHA the branch points at.

        Raises:
            BranchError: If the name is invalid, the branch exists, or start
                does not resolve (e.g. an unborn HEAD).
        """
        ref = encode_str(HEADS_PREFIX + name)
        if not check_ref_format(ref):
            msg = f"'{name}' is not a valid branch name"
            raise BranchError(msg)

        try:
            sha = self.resolve_ref(start)
        except RefNotFoundError as e:
            msg = f"Not a valid object name: '{start}'"
            raise BranchError(msg) from e

        if not self._repo.refs.add_if_new(ref, encode_str(sha)):
            msg = f"A branch named '{name}' already exists"
            raise BranchError(msg)
        return sha

    def checkout(self, ref: str, *, force: bool = False) -> None:
        """Switch to a branch and update index and working tree.

        A name that only exists as a remote-tracking branch creates a local
        branch of the same name first.

        Args:
            ref: Branch name.
            force: Discard local changes that would be overwritten.

        Raises:
            CheckoutError: If the branch does not exist or local changes
                would be overwritten.
        """
        if ref not in self.list_branches():
            tracking = self._find_tracking_branch(ref)
            if tracking is None:
                msg = f"pathspec '{ref}' did not match any branch"
                raise CheckoutError(msg)
            self.create_branch(ref, tracking)

        try:
            porcelain.checkout(self._repo, target=encode_str(ref), force=force)
        except (porcelain.Error, KeyError, OSError) as e:
            raise CheckoutError(str(e) or type(e).__name__) from e

    def _find_tracking_branch(self, name: str) -> str | None:
        """Find the unique remote-tracking ref for a branch name."""
        matches = [
            f"{REMOTES_PREFIX}{remote.name}/{name}"
            for remote in self.list_remotes()
            if name in self.list_branches(remote.name)
        ]
        return matches[0] if len(matches) == 1 else None

    def set_head(self, branch: str) -> None:
        """Point HEAD at refs/heads/<branch>.

        Args:
            branch: Existing branch name.
        """
        self._repo.refs.set_symbolic_ref(b"HEAD", encode_str(HEADS_PREFIX + branch))

    def reset_hard(self, sha: str) -> None:
        """Move the current branch to sha and force index and working tree.

        Args:
            sha: Target commit SHA.

        Raises:
            CheckoutError: If dulwich cannot rewrite the index or working tree.
        """
        try:
            porcelain.reset(self._repo, "hard", encode_str(sha))
        except (porcelain.Error, KeyError, OSError) as e:
            raise CheckoutError(str(e) or type(e).__name__) from e

    # =========================================================================
    # Merging
    # =========================================================================

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """Check whether ancestor is reachable from descendant.

        Args:
            ancestor: Candidate ancestor SHA.
            descendant: Candidate descendant SHA.

        Returns:
            True when equal or ancestor is in descendant's history.
        """
        return bool(
            can_fast_forward(self._repo, encode_str(ancestor), encode_str(descendant))
        )

    def merge_trees(self, ours: str, theirs: str, author: Author) -> MergeResult:
        """Merge theirs into the current branch.

        Args:
            ours: The current branch name.
            theirs: Ref expression to merge in.
            author: Identity for a merge commit.

        Returns:
            MergeResult. sha is None when theirs is already merged.

        Raises:
            MergeError: If ours is not the current branch.
            MergeConflictError: If the three-way merge produced conflicts.
            MergeNotSupportedError: If dulwich cannot perform the merge.
        """
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

        identity = author.to_bytes()
        try:
            merge_sha, conflicts = porcelain.merge(
                self._repo,
                encode_str(theirs_sha),
                author=identity,
                committer=identity,
            )
        except (porcelain.Error, NotImplementedError) as e:
            raise MergeNotSupportedError(str(e) or type(e).__name__) from e

        if conflicts:
            paths = tuple(decode_bytes(p) for p in conflicts)
            msg = f"Automatic merge failed; fix conflicts in: {', '.join(paths)}"
            raise MergeConflictError(msg, paths=paths)
        if merge_sha is None:
            msg = "Merge did not produce a commit"
            raise MergeNotSupportedError(msg)

        return MergeResult(sha=decode_bytes(merge_sha))

    # =========================================================================
    # Remotes
    # =========================================================================

    def add_remote(self, name: str, url: str) -> None:
        """Register a remote.

        Raises:
            RemoteError: If a remote with that name exists.
        """
        try:
            porcelain.remote_add(self._repo, name, url)
        except porcelain.Error as e:
            msg = f"remote {name} already exists"
            raise RemoteError(msg) from e

    def remove_remote(self, name: str) -> None:
        """Delete a remote's config section and remote-tracking refs.

        Raises:
            RemoteError: If no such remote exists.
        """
        config = self._repo.get_config()
        section = (b"remote", encode_str(name))
        if not config.has_section(section):
            msg = f"No such remote: '{name}'"
            raise RemoteError(msg)

        del config[section]
        config.write_to_path()

        base = encode_str(f"{REMOTES_PREFIX}{name}/")
        for ref in list(self._repo.refs.keys(base=base)):
            del self._repo.refs[base + ref]

    def list_remotes(self) -> list[Remote]:
        """List registered remotes in configuration order."""
        config = self._repo.get_config()
        remotes: list[Remote] = []
        for section in config.sections():
            if len(section) != 2 or section[0] != b"remote":
                continue
            try:
                url = config.get(section, b"url")
            except KeyError:
                continue
            remotes.append(Remote(name=decode_bytes(section[1]), url=decode_bytes(url)))
        return remotes

    def set_upstream(self, branch: str, remote: str) -> None:
        """Record branch.<branch>.remote and branch.<branch>.merge."""
        config = self._repo.get_config()
        section = (b"branch", encode_str(branch))
        config.set(section, b"remote", encode_str(remote))
        config.set(section, b"merge", encode_str(HEADS_PREFIX + branch))
        config.write_to_path()

    def _remote_url(self, remote: str) -> str:
        """URL registered for remote, or remote itself when it is a URL."""
        for registered in self.list_remotes():
            if registered.name == remote:
                return registered.url
        return remote

    # =========================================================================
    # Network
    # =========================================================================

    def fetch(
        self,
        remote: str,
        *,
        on_auth: CredentialsCallback,
        on_auth_failure: AuthFailureCallback,
    ) -> None:
        """Fetch a remote into refs/remotes/<remote>/.

        Raises:
            SyncError: Classified transport failure.
        """

        def _fetch(**auth: str) -> None:
            porcelain.fetch(
                self._repo,
                remote,
                outstream=io.BytesIO(),
                errstream=io.BytesIO(),
                **auth,
            )

        self._sync(remote, _fetch, on_auth, on_auth_failure)

    def push(
        self,
        remote: str,
        ref: str,
        *,
        on_auth: CredentialsCallback,
        on_auth_failure: AuthFailureCallback,
    ) -> None:
        """Push refs/heads/<ref> to the same name on remote.

        Raises:
            SyncError: Classified transport failure.
        """
        refspec = encode_str(HEADS_PREFIX + ref)

        def _push(**auth: str) -> None:
            porcelain.push(
                self._repo,
                remote,
                refspecs=[refspec],
                outstream=io.BytesIO(),
                errstream=io.BytesIO(),
                **auth,
            )

        self._sync(remote, _push, on_auth, on_auth_failure)

    def pull(
        self,
        remote: str,
        ref: str,
        *,
        on_auth: CredentialsCallback,
        on_auth_failure: AuthFailureCallback,
    ) -> None:
        """Fetch refs/heads/<ref> from remote and merge it into HEAD.

        Raises:
            SyncError: Classified transport failure.
        """
        refspec = encode_str(HEADS_PREFIX + ref)

        def _pull(**auth: str) -> None:
            porcelain.pull(
                self._repo,
                remote,
                refspecs=[refspec],
                outstream=io.BytesIO(),
                errstream=io.BytesIO(),
                **auth,
            )

        self._sync(remote, _pull, on_auth, on_auth_failure)

    def _sync(
        self,
        remote: str,
        operation: Callable[..., None],
        on_auth: CredentialsCallback,
        on_auth_failure: AuthFailureCallback,
    ) -> None:
        """Run a transport operation under the credential callbacks.

        The credentials callback is consulted once up front; a rejection
        consults the failure callback, which may supply replacement
        credentials for a single retry or cancel.

        Raises:
            SyncError: With kind set from the transport exception type.
        """
        url = self._remote_url(remote)
        try:
            try:
                operation(**_auth_kwargs(on_auth(url)))
            except (HTTPUnauthorized, HTTPProxyUnauthorized):
                retry = on_auth_failure(url)
                if retry is None:
                    raise
                operation(**_auth_kwargs(retry))
        except (HTTPUnauthorized, HTTPProxyUnauthorized) as e:
            msg = f"HTTP 401: authentication required for {url}"
            raise SyncError(
                msg, kind=SyncFailureKind.AUTH_REQUIRED, remote=remote, cause=e
            ) from e
        except NotGitRepository as e:
            msg = f"HTTP 404: repository not found at {url}"
            raise SyncError(
                msg, kind=SyncFailureKind.NOT_FOUND, remote=remote, cause=e
            ) from e
        except (
            porcelain.Error,
            GitProtocolError,
            HangupException,
            OSError,
            KeyError,
            ValueError,
        ) as e:
            raise SyncError(
                str(e) or type(e).__name__, remote=remote, cause=e
            ) from e


def _auth_kwargs(credentials: Credentials | None) -> dict[str, Any]:
    if credentials is None:
        return {}
    return {"username": credentials.username, "password": credentials.password}


def _compare(sha: str | None, head_sha: str | None) -> FileState:
    if sha is None:
        return FileState.ABSENT
    if sha == head_sha:
        return FileState.UNCHANGED
    return FileState.CHANGED


def _has_tracked_under(directory: str, tracked_dirs: set[str]) -> bool:
    return any(d == directory or d.startswith(f"{directory}/") for d in tracked_dirs)


def init_repository(path: Path, default_branch: str) -> tuple[DulwichObjectLayer, bool]:
    """Create a repository at path, or open the one already there.

    Args:
        path: Working tree directory.
        default_branch: Branch HEAD points at in a fresh repository.

    Returns:
        Tuple of (object layer, reinitialized). reinitialized is True when
        path already held a repository, in which case refs are untouched.
    """
    if (path / _GIT_DIR).exists():
        return DulwichObjectLayer(Repo(str(path))), True

    path.mkdir(parents=True, exist_ok=True)
    repo = Repo.init(str(path))
    repo.refs.set_symbolic_ref(b"HEAD", encode_str(HEADS_PREFIX + default_branch))
    return DulwichObjectLayer(repo), False
