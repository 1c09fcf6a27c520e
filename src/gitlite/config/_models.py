# pyright: reportExplicitAny=false, reportAny=false
"""Configuration models with typed access.

This module provides the Config class that serves as the primary
interface for accessing gitlite configuration values.
"""

from collections.abc import Mapping
from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from gitlite.config._defaults import DEFAULT_CONFIG
from gitlite.config._loader import deep_merge, parse_env_vars, read_toml_file
from gitlite.exceptions import ConfigError
from gitlite.repository._models import Author


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class AuthorConfig(BaseModel):
    """Identity recorded on commits and merge commits.

    Attributes:
        name: Author and committer name.
        email: Author and committer email.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    name: str = "Gitlite User"
    email: str = "user@gitlite.local"

    def to_author(self) -> Author:
        """Convert to the repository layer's Author value."""
        return Author(name=self.name, email=self.email)


class InitConfig(BaseModel):
    """Repository initialization settings."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    default_branch: str = "main"


class StatusConfig(BaseModel):
    """Status display settings.

    Attributes:
        exclude: Extra gitignore-style patterns hidden from status output.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    exclude: tuple[str, ...] = ()


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty uses the platform log directory).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    file: str = ""

    @field_validator("level", mode="before")
    @classmethod
    def _parse_level(cls, value: Any) -> LogLevel:
        try:
            return LogLevel(str(value).lower())
        except ValueError:
            return LogLevel.INFO

    @field_validator("format", mode="before")
    @classmethod
    def _parse_format(cls, value: Any) -> LogFormat:
        try:
            return LogFormat(str(value).lower())
        except ValueError:
            return LogFormat.JSON


class Config(BaseModel):
    """Configuration container with typed access.

    This class provides immutable, type-safe access to gitlite configuration.
    Use factory methods to create instances rather than the constructor.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    author: AuthorConfig = Field(default_factory=AuthorConfig)
    init: InitConfig = Field(default_factory=InitConfig)
    status: StatusConfig = Field(default_factory=StatusConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    github_token: str | None = Field(default=None, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create configuration from a dictionary merged over the defaults.

        Args:
            data: Dictionary of configuration values.

        Returns:
            Configuration object from the dictionary.

        Raises:
            ConfigError: If a value has the wrong shape.
        """
        merged = deep_merge(DEFAULT_CONFIG, data)
        try:
            return cls.model_validate(merged)
        except ValidationError as e:
            msg = f"Invalid configuration: {e}"
            raise ConfigError(msg) from e

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Load configuration from a specific TOML file.

        Args:
            path: Path to the TOML config file.

        Returns:
            Configuration object from the specified file only.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigLoadError: If the file cannot be parsed.
        """
        return cls.from_dict(read_toml_file(path))

    @classmethod
    def load(
        cls,
        *,
        config_path: Path | None = None,
        user_config_path: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> Self:
        """Load merged configuration from all sources.

        Sources are merged lowest to highest precedence: defaults, the user
        config file, an explicit config file, then environment variables.

        Args:
            config_path: Explicit TOML file (--config or GITLITE_CONFIG).
            user_config_path: User config file. Defaults to the platform
                config directory; skipped when missing.
            environ: Environment mapping. Defaults to os.environ.

        Returns:
            Merged configuration object.

        Raises:
            FileNotFoundError: If config_path does not exist.
            ConfigLoadError: If a config file cannot be parsed.
        """
        from gitlite.config._discovery import get_user_config_path  # noqa: PLC0415

        if user_config_path is None:
            user_config_path = get_user_config_path()

        merged: dict[str, Any] = {}
        if user_config_path.is_file():
            merged = deep_merge(merged, read_toml_file(user_config_path))
        if config_path is not None:
            merged = deep_merge(merged, read_toml_file(config_path))
        merged = deep_merge(merged, parse_env_vars(environ))

        return cls.from_dict(merged)
