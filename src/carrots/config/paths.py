"""Path constants and utilities for carrots."""

import os
from pathlib import Path

from carrots.constants import DEFAULT_CONFIG_SUBDIR, ENV_CONFIG_DIR


class Paths:
    """Filesystem locations used by the server."""

    HOME: Path = Path.home()
    DEFAULT_CONFIG_DIR: Path = HOME / ".config" / DEFAULT_CONFIG_SUBDIR

    @classmethod
    def config_dir(cls) -> Path:
        """Return the configuration directory.

        CARROTS_CONFIG_DIR takes precedence over ~/.config/carrots.
        """
        env_dir = os.getenv(ENV_CONFIG_DIR)
        if env_dir:
            return Path(env_dir).expanduser()
        return cls.DEFAULT_CONFIG_DIR
