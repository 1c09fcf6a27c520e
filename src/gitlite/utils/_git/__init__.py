"""Git utilities for gitlite.

This package provides helper functions shared by the dulwich object layer.
"""

from gitlite.utils._git._common import (
    HEADS_PREFIX,
    REMOTES_PREFIX,
    decode_bytes,
    encode_str,
    get_worktree_dir,
    resolve_repo,
    split_ancestry,
    strip_refs_heads,
)

__all__ = [
    "HEADS_PREFIX",
    "REMOTES_PREFIX",
    "decode_bytes",
    "encode_str",
    "get_worktree_dir",
    "resolve_repo",
    "split_ancestry",
    "strip_refs_heads",
]
