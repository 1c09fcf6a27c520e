"""Default configuration values.

This module defines the built-in default configuration values that are used
when no other configuration sources provide values.
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
    "author": {
        "name": "Gitlite User",
        "email": "user@gitlite.local",
    },
    "init": {
        "default_branch": "main",
    },
    "status": {
        "exclude": [],
    },
    "logging": {
        "level": "info",
        "format": "json",
        "file": "",
    },
}

ENV_KEYS: dict[str, str] = {
    "GITLITE_AUTHOR_NAME": "author.name",
    "GITLITE_AUTHOR_EMAIL": "author.email",
    "GITLITE_DEFAULT_BRANCH": "init.default_branch",
    "GITLITE_LOG_LEVEL": "logging.level",
    "GITLITE_LOG_FORMAT": "logging.format",
    "GITLITE_LOG_FILE": "logging.file",
    "GITHUB_TOKEN": "github_token",
}
"""Environment variables recognised as configuration, mapped to dotted keys."""
