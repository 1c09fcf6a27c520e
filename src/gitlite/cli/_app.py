"""The command-line interface for gitlite."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console

from gitlite.config import safe_load_config
from gitlite.utils import create_cli_logger

from ._commands import register_commands
from ._context import CLIContext

_HELP = "A small git-like command line client."


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    """Build the gitlite application.

    Args:
        console: Console for regular output.
        error_console: Console for fatal errors.
        exit_on_error: Exit on cyclopts parse errors instead of raising.

    Returns:
        The app; run it through ``app.meta`` so global options apply.
    """
    if console is None:
        console = Console()
    if error_console is None:
        error_console = Console(stderr=True)
    app = App(
        name="gitlite",
        help=_HELP,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.meta.default
    def _default(  # pyright: ignore[reportUnusedFunction]
        *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
        verbose: Annotated[
            bool,
            Parameter(name="--verbose", negative="", help="Enable verbose output"),
        ] = False,
        config: Annotated[
            Path | None, Parameter(name="--config", help="Path to config file")
        ] = None,
    ) -> None:
        """Run gitlite with global options.

        Args:
            tokens: Command tokens to pass to subcommands.
            verbose: Show per-item failures and extra detail.
            config: Explicit path to config file.
        """
        loaded_config, config_error = safe_load_config(config_path=config)

        cli_logger = create_cli_logger(
            level=loaded_config.logging.level.value,
            log_format=loaded_config.logging.format.value,  # type: ignore[arg-type]
            log_file=loaded_config.logging.file,
            command=tokens[0] if tokens else "",
        )

        ctx = CLIContext(
            config=loaded_config,
            verbose=verbose,
            config_error=config_error,
            logger=cli_logger,
            console=console,
            error_console=error_console,
        )
        CLIContext.set_current(ctx)

        try:
            app(tokens)
        finally:
            CLIContext.reset()

    register_commands(app)
    return app


def main() -> None:
    """Default entrypoint for the `gitlite` CLI."""
    app = create_app()
    app.meta()
