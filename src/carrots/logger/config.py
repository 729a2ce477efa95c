"""Log levels and file location.

Bootstrap values come from the environment, because modules create their
loggers at import time; the levels of the loaded server configuration
are applied afterwards with update_logger_from_config().
"""

import os
from pathlib import Path
from typing import TYPE_CHECKING

from carrots.constants import (
    DEFAULT_CONFIG_SUBDIR,
    DEFAULT_CONSOLE_LOG_LEVEL,
    DEFAULT_LOG_LEVEL,
    ENV_LOG_DIR,
    ENV_LOG_LEVEL,
    LOG_FILE_NAME,
)
from carrots.logger.runtime import level_number, set_handler_levels

if TYPE_CHECKING:
    from carrots.types import ServerConfig


def load_log_settings() -> tuple[str, str, Path]:
    """Load the bootstrap console level, file level and log file path.

    Environment Variable Override:
        CARROTS_LOG_DIR: Directory of the log file. The test suite points
        it at a temporary directory so tests never write to the user's
        real log file.
        LOG_LEVEL: Console level.

    Returns:
        Tuple of (console_level, file_level, log_path)

    """
    console_level = os.getenv(ENV_LOG_LEVEL, DEFAULT_CONSOLE_LOG_LEVEL).upper()

    env_log_dir = os.getenv(ENV_LOG_DIR)
    if env_log_dir:
        log_dir = Path(env_log_dir).expanduser()
    else:
        log_dir = Path.home() / ".config" / DEFAULT_CONFIG_SUBDIR / "logs"

    return console_level, DEFAULT_LOG_LEVEL, log_dir / LOG_FILE_NAME


def update_logger_from_config(config: "ServerConfig") -> None:
    """Apply the configured levels to the running handlers.

    LOG_LEVEL keeps precedence over the configured console level.

    Example:
        >>> settings = SettingsManager().load()
        >>> update_logger_from_config(settings)

    """
    console_level = os.getenv(ENV_LOG_LEVEL) or config["console_log_level"]
    set_handler_levels(
        level_number(console_level),
        level_number(config["log_level"]),
    )
