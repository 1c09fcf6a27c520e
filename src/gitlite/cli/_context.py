# pyright: reportUnusedCallResult=false
"""CLI context for global state management.

This module provides thread-safe context management for CLI options and
loaded configuration. The CLIContext is set once at CLI startup and
made available to all commands via contextvars.
"""

import contextvars
from dataclasses import dataclass, field
from typing import Self

from rich.console import Console
from structlog.typing import FilteringBoundLogger

from gitlite.config import Config
from gitlite.utils import create_null_logger


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Global CLI context with configuration and options.

    Attributes:
        config: Loaded configuration object.
        verbose: Show per-item failures and extra detail.
        config_error: Error message if config loading failed.
        logger: Structured logger for CLI commands (writes to file only).
        console: Console for regular output.
        error_console: Console for fatal error output.
    """

    config: Config = field(repr=False)
    verbose: bool = False
    config_error: str | None = None
    logger: FilteringBoundLogger = field(default_factory=create_null_logger, repr=False)
    console: Console = field(default_factory=Console, repr=False)
    error_console: Console = field(
        default_factory=lambda: Console(stderr=True), repr=False
    )

    @classmethod
    def get_current(cls) -> Self:
        """Get current active CLIContext, or create a default if not set.

        Returns:
            The currently active CLIContext, or a default instance if none is set.
        """
        ctx = _current_cli_context.get()
        if ctx is not None:
            return ctx  # pyright: ignore[reportReturnType]
        return cls(config=Config.from_dict({}))

    @classmethod
    def set_current(cls, ctx: Self) -> None:
        """Set the current active CLIContext.

        Args:
            ctx: The CLIContext to set as current.
        """
        _current_cli_context.set(ctx)

    @classmethod
    def reset(cls) -> None:
        """Reset to default context.

        This is primarily useful for testing to ensure a clean state between tests.
        """
        _current_cli_context.set(None)


# Thread-safe context variable for CLIContext
_current_cli_context: contextvars.ContextVar[CLIContext | None] = (
    contextvars.ContextVar("cli_context", default=None)
)
