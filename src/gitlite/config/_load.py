import os
import sys
from pathlib import Path

from gitlite.exceptions import ConfigError

from ._discovery import get_env_config_path
from ._models import Config


def safe_load_config(
    *,
    config_path: Path | None = None,
) -> tuple[Config, str | None]:
    """Load configuration with error handling.

    Attempts to load configuration and handles errors based on the
    GITLITE_STRICT_CONFIG environment variable:
    - If unset or "0": warn to stderr and return default config
    - If "1": fail fast with sys.exit(1)

    When config_path is provided (or GITLITE_CONFIG is set), the file must
    exist.

    Args:
        config_path: Explicit path to config file (--config flag).

    Returns:
        Tuple of (Config, error_message). On success, error_message is None.
        On failure (non-strict mode), returns default Config with error message.
    """
    strict_mode = os.environ.get("GITLITE_STRICT_CONFIG", "0") == "1"

    if config_path is None:
        config_path = get_env_config_path()

    if config_path is not None and not config_path.exists():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    try:
        config = Config.load(config_path=config_path)
    except ConfigError as e:
        error_msg = str(e)
    except OSError as e:
        error_msg = f"Failed to load config: {e}"
    else:
        return config, None

    if strict_mode:
        print(f"Error: {error_msg}", file=sys.stderr)  # noqa: T201
        sys.exit(1)
    print(f"Warning: {error_msg}", file=sys.stderr)  # noqa: T201
    return Config.from_dict({}), error_msg
