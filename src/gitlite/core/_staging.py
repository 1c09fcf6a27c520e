"""Staging controller: bulk and single-path index updates."""

from collections.abc import Iterator
from pathlib import Path
from typing import Final

from structlog.typing import FilteringBoundLogger

from gitlite.exceptions import GitliteError, StagingError
from gitlite.repository import ItemOutcome, ObjectLayer
from gitlite.utils import create_null_logger

WILDCARD: Final = "."

_SKIPPED_DIRS: Final = frozenset({"node_modules"})


def iter_worktree_files(root: Path) -> Iterator[str]:
    """Yield repository-relative paths of worktree files in sorted order.

    Hidden entries (leading ".") and node_modules directories are skipped
    at every level.
    """

    def _walk(directory: Path) -> Iterator[str]:
        for child in sorted(directory.iterdir(), key=lambda p: p.name):
            if child.name.startswith(".") or child.name in _SKIPPED_DIRS:
                continue
            if child.is_dir() and not child.is_symlink():
                yield from _walk(child)
            elif child.is_file() or child.is_symlink():
                yield child.relative_to(root).as_posix()

    yield from _walk(root)


def repo_relative(root: Path, target: str, cwd: Path | None = None) -> str:
    """Convert a user-supplied path into a repository-relative POSIX path.

    Args:
        root: Worktree root.
        target: Path as typed by the user, relative to cwd or absolute.
        cwd: Directory target is relative to. Defaults to the process cwd.

    Raises:
        StagingError: If target lies outside the worktree.
    """
    base = cwd if cwd is not None else Path.cwd()
    candidate = Path(target)
    if not candidate.is_absolute():
        candidate = base / candidate

    resolved = Path(*_normalize_parts(candidate))
    try:
        return resolved.relative_to(root).as_posix()
    except ValueError as e:
        msg = f"'{target}' is outside repository at '{root}'"
        raise StagingError(msg, path=target) from e


def _normalize_parts(path: Path) -> list[str]:
    # Lexical normalisation; the file may not exist yet.
    parts: list[str] = []
    for part in path.parts:
        if part == "..":
            if len(parts) > 1:
                parts.pop()
        elif part != ".":
            parts.append(part)
    return parts


def stage_all(
    layer: ObjectLayer,
    logger: FilteringBoundLogger | None = None,
) -> list[ItemOutcome[None]]:
    """Stage every visible worktree file individually.

    Per-file failures are collected instead of aborting the walk.

    Args:
        layer: The object layer.
        logger: Optional logger for per-file failures.

    Returns:
        One ItemOutcome per file, in walk order.
    """
    if logger is None:
        logger = create_null_logger()

    outcomes: list[ItemOutcome[None]] = []
    for path in iter_worktree_files(layer.root):
        try:
            layer.stage_path(path)
        except GitliteError as e:
            logger.warning("Failed to stage file", path=path, error=str(e))
            outcomes.append(ItemOutcome(item=path, ok=False, error=str(e)))
        else:
            outcomes.append(ItemOutcome(item=path, ok=True))

    logger.info(
        "Staged worktree",
        staged=sum(1 for o in outcomes if o.ok),
        failed=sum(1 for o in outcomes if not o.ok),
    )
    return outcomes


def stage_file(layer: ObjectLayer, path: str) -> str:
    """Stage a single repository-relative path.

    Raises:
        StagingError: If the path is missing or cannot be added.
    """
    try:
        layer.stage_path(path)
    except StagingError:
        raise
    except GitliteError as e:
        raise StagingError(str(e), path=path) from e
    return path
