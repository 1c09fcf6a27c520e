"""Shared utilities: logging, exclusion patterns and user paths."""

from gitlite.utils._ignore import (
    DEFAULT_EXCLUDE_PATTERNS,
    IgnoreConfig,
    collect_patterns,
    create_pathspec,
)
from gitlite.utils._logging import create_cli_logger, create_null_logger
from gitlite.utils._paths import get_gitlite_cli_log_file, get_gitlite_log_dir

__all__ = [
    "DEFAULT_EXCLUDE_PATTERNS",
    "IgnoreConfig",
    "collect_patterns",
    "create_cli_logger",
    "create_null_logger",
    "create_pathspec",
    "get_gitlite_cli_log_file",
    "get_gitlite_log_dir",
]
