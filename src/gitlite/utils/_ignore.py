"""Gitignore-style pattern matching using pathspec.

This module builds the exclusion policy applied to status output from the
built-in patterns and configured extra patterns. Untracked files matched by
a .gitignore are dropped earlier, by the object layer's working tree walk,
so a tracked file stays visible even when a .gitignore pattern matches it.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from pathspec import PathSpec
from pathspec.patterns.gitwildmatch import GitWildMatchPattern

DEFAULT_EXCLUDE_PATTERNS: tuple[str, ...] = (
    ".git/",
    "node_modules/",
    ".DS_Store",
    "*.log",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
)
"""Patterns never reported by status, regardless of configuration."""


@dataclass(frozen=True, slots=True)
class IgnoreConfig:
    """Configuration for exclusion pattern loading.

    Attributes:
        include_defaults: Whether to include DEFAULT_EXCLUDE_PATTERNS.
        extra_patterns: Additional patterns to include.
    """

    include_defaults: bool = True
    extra_patterns: tuple[str, ...] = field(default_factory=tuple)


def collect_patterns(config: IgnoreConfig | None = None) -> list[str]:
    """Collect exclusion patterns from all configured sources.

    Gathers patterns from:
    1. Default patterns (if include_defaults is True)
    2. Extra patterns from config

    Args:
        config: Configuration for pattern sources. Uses defaults if None.

    Returns:
        List of all collected patterns, deduplicated while preserving order.
    """
    if config is None:
        config = IgnoreConfig()

    patterns: list[str] = []
    seen: set[str] = set()

    def add_patterns(new_patterns: Iterable[str]) -> None:
        for pattern in new_patterns:
            if pattern not in seen:
                seen.add(pattern)
                patterns.append(pattern)

    if config.include_defaults:
        add_patterns(DEFAULT_EXCLUDE_PATTERNS)

    add_patterns(config.extra_patterns)
    return patterns


def create_pathspec(config: IgnoreConfig | None = None) -> PathSpec:
    """Create a PathSpec from collected exclusion patterns.

    Args:
        config: Configuration for pattern sources. Uses defaults if None.

    Returns:
        A PathSpec instance configured with gitignore-style pattern matching.
    """
    patterns = collect_patterns(config)
    return PathSpec.from_lines(GitWildMatchPattern, patterns)
