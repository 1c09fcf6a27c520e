"""Config path discovery utilities.

This module determines the platform-specific configuration file paths.
"""

import os
from pathlib import Path

import platformdirs


def get_user_config_path() -> Path:
    r"""Get platform-specific user config file path.

    Returns the path to the user's gitlite configuration file, using
    the platform-appropriate location:

    - Linux: ``~/.config/gitlite/config.toml``
    - macOS: ``~/Library/Application Support/gitlite/config.toml``
    - Windows: ``%APPDATA%\gitlite\config.toml``

    The path is returned regardless of whether the file exists.

    Returns:
        Path to the user config file for the current platform.
    """
    config_dir = platformdirs.user_config_path("gitlite")
    return config_dir / "config.toml"


def get_env_config_path() -> Path | None:
    """Get the config file named by GITLITE_CONFIG, if set.

    Returns:
        Path from the environment, or None when unset or empty.
    """
    value = os.environ.get("GITLITE_CONFIG")
    return Path(value) if value else None
