"""gitlite configuration.

This module provides the public API for gitlite configuration management,
including loading, validation, and typed access to configuration values.

Example:
    >>> from gitlite.config import Config
    >>> config = Config.load()
    >>> config.init.default_branch
    'main'
"""

from gitlite.exceptions import ConfigError, ConfigLoadError

from ._defaults import DEFAULT_CONFIG, ENV_KEYS
from ._discovery import get_env_config_path, get_user_config_path
from ._load import safe_load_config
from ._loader import deep_merge, parse_env_vars, read_toml_file, set_nested_key
from ._models import (
    AuthorConfig,
    Config,
    InitConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    StatusConfig,
)

__all__ = [
    "DEFAULT_CONFIG",
    "ENV_KEYS",
    "AuthorConfig",
    "Config",
    "ConfigError",
    "ConfigLoadError",
    "InitConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "StatusConfig",
    "deep_merge",
    "get_env_config_path",
    "get_user_config_path",
    "parse_env_vars",
    "read_toml_file",
    "safe_load_config",
    "set_nested_key",
]
