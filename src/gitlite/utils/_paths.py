from pathlib import Path

import platformdirs


def get_gitlite_log_dir() -> Path:
    """Get the per-user log directory for gitlite."""
    return platformdirs.user_log_path("gitlite")


def get_gitlite_cli_log_file() -> Path:
    """Get the path to the CLI log file inside the user log directory."""
    return get_gitlite_log_dir() / "cli.log"
