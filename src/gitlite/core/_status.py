"""Status classification.

Turns the object layer's three-way comparison into the user-facing status
buckets, dropping every path the exclusion policy matches.
"""

from collections.abc import Iterable, Sequence
from typing import Self

from pathspec import PathSpec

from gitlite.repository import (
    FileState,
    ObjectLayer,
    StatusBucket,
    StatusEntry,
    StatusReport,
)
from gitlite.utils import IgnoreConfig, create_pathspec

from ._refs import current_branch_name


class ExclusionPolicy:
    """Decides which paths status never reports.

    Combines the built-in patterns (.git/, node_modules/, lock files, logs)
    with configured extra patterns. A .gitignore only hides untracked files,
    which the object layer already leaves out of its comparison.
    """

    __slots__ = ("_spec",)

    def __init__(self, spec: PathSpec) -> None:
        self._spec = spec

    @classmethod
    def from_patterns(cls, extra_patterns: Sequence[str] = ()) -> Self:
        """Build the policy from the built-in and extra patterns.

        Args:
            extra_patterns: Additional gitignore-style patterns.
        """
        config = IgnoreConfig(extra_patterns=tuple(extra_patterns))
        return cls(create_pathspec(config))

    def excludes(self, path: str) -> bool:
        """True when path must not appear in status output."""
        return self._spec.match_file(path)


def classify_entry(entry: StatusEntry) -> StatusBucket | None:
    """Map one three-way comparison row to a status bucket.

    A path changed in the index is reported as staged even when its working
    tree copy differs again; otherwise a changed working tree copy is
    reported as unstaged.

    Returns:
        The bucket, or None when the path is not reported.
    """
    if entry.stage is FileState.CHANGED:
        if entry.head is FileState.ABSENT:
            return StatusBucket.STAGED_NEW
        return StatusBucket.STAGED_MODIFIED
    if entry.workdir is FileState.CHANGED:
        if entry.head is FileState.ABSENT:
            return StatusBucket.UNSTAGED_NEW
        return StatusBucket.UNSTAGED_MODIFIED
    return None


def classify(
    entries: Iterable[StatusEntry], policy: ExclusionPolicy
) -> tuple[tuple[StatusBucket, str], ...]:
    """Classify entries in order, skipping excluded and unreported paths."""
    result: list[tuple[StatusBucket, str]] = []
    for entry in entries:
        if policy.excludes(entry.path):
            continue
        bucket = classify_entry(entry)
        if bucket is not None:
            result.append((bucket, entry.path))
    return tuple(result)


def get_status(
    layer: ObjectLayer,
    *,
    default_branch: str = "main",
    exclude: Sequence[str] = (),
) -> StatusReport:
    """Compute the classified status of the working tree.

    Args:
        layer: The object layer.
        default_branch: Branch name shown when HEAD is detached.
        exclude: Extra exclusion patterns from configuration.

    Returns:
        StatusReport with the branch name and (bucket, path) pairs.
    """
    policy = ExclusionPolicy.from_patterns(exclude)
    entries = classify(layer.status_matrix(), policy)
    return StatusReport(
        branch=current_branch_name(layer, default_branch),
        entries=entries,
    )


def dirty_paths(layer: ObjectLayer) -> tuple[str, ...]:
    """Tracked paths whose index or working tree copy differs from HEAD.

    Untracked files never count. A path staged as new counts, since
    switching trees would drop it from the index.
    """
    dirty: list[str] = []
    for entry in layer.status_matrix():
        if entry.stage is FileState.CHANGED:
            dirty.append(entry.path)
        elif entry.head is not FileState.ABSENT and (
            entry.stage is not FileState.UNCHANGED
            or entry.workdir is not FileState.UNCHANGED
        ):
            dirty.append(entry.path)
    return tuple(dirty)