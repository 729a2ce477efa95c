"""Server settings manager for INI settings and environment overrides.

Settings are resolved in three layers, later layers winning:
1. Built-in defaults
2. Optional ``settings.conf`` in the configuration directory
3. Environment variables (ACCOUNT, REPOSITORY, TOKEN, HOST, PORT,
   CACHE_MINUTES)
"""

import configparser
import os
from collections.abc import Mapping
from pathlib import Path

from carrots.config.paths import Paths
from carrots.constants import (
    CACHE_DURATION_MINUTES,
    CONFIG_FILE_NAME,
    DEFAULT_CONSOLE_LOG_LEVEL,
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_CONCURRENT_FETCHES,
    DEFAULT_PORT,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_TIMEOUT_SECONDS,
    ENV_ACCOUNT,
    ENV_CACHE_MINUTES,
    ENV_HOST,
    ENV_PORT,
    ENV_REPOSITORY,
    ENV_TOKEN,
)
from carrots.exceptions import ConfigurationError
from carrots.infrastructure.auth import validate_github_token
from carrots.logger import get_logger
from carrots.types import NetworkConfig, ServerConfig

logger = get_logger(__name__)

SECTION_DEFAULT = "DEFAULT"
SECTION_NETWORK = "network"

# Environment variable -> settings key
_ENV_OVERRIDES: dict[str, str] = {
    ENV_ACCOUNT: "account",
    ENV_REPOSITORY: "repository",
    ENV_TOKEN: "token",
    ENV_HOST: "host",
    ENV_PORT: "port",
    ENV_CACHE_MINUTES: "cache_minutes",
}


class SettingsManager:
    """Loads and validates the server configuration."""

    def __init__(
        self,
        config_dir: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize settings manager.

        Args:
            config_dir: Configuration directory path
                (defaults to Paths.config_dir())
            environ: Environment mapping (defaults to os.environ)

        """
        self.config_dir = config_dir or Paths.config_dir()
        self.settings_file = self.config_dir / CONFIG_FILE_NAME
        self.environ = os.environ if environ is None else environ

    @staticmethod
    def get_default_settings() -> dict[str, str | dict[str, str]]:
        """Get default configuration values as raw strings."""
        return {
            "account": "",
            "repository": "",
            "token": "",
            "host": DEFAULT_HOST,
            "port": str(DEFAULT_PORT),
            "cache_minutes": str(CACHE_DURATION_MINUTES),
            "log_level": DEFAULT_LOG_LEVEL,
            "console_log_level": DEFAULT_CONSOLE_LOG_LEVEL,
            SECTION_NETWORK: {
                "timeout_seconds": str(DEFAULT_TIMEOUT_SECONDS),
                "retry_attempts": str(DEFAULT_RETRY_ATTEMPTS),
                "max_concurrent_fetches": str(DEFAULT_MAX_CONCURRENT_FETCHES),
            },
        }

    def _read_settings_file(self) -> configparser.ConfigParser:
        parser = configparser.ConfigParser(
            inline_comment_prefixes=("#", ";"),
            interpolation=None,
        )
        if self.settings_file.exists():
            try:
                parser.read(self.settings_file, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigurationError(
                    str(e), target=str(self.settings_file)
                ) from e
            logger.debug("Loaded settings from %s", self.settings_file)
        return parser

    def load(self) -> ServerConfig:
        """Load, merge and validate the server configuration.

        Returns:
            Validated server configuration

        Raises:
            ConfigurationError: If a required value is missing or a value
                cannot be parsed

        """
        raw = self.get_default_settings()
        network_raw = dict(raw.pop(SECTION_NETWORK))  # type: ignore[arg-type]

        parser = self._read_settings_file()
        for key in raw:
            if parser.has_option(SECTION_DEFAULT, key):
                raw[key] = parser.get(SECTION_DEFAULT, key).strip()
        if parser.has_section(SECTION_NETWORK):
            for key in network_raw:
                if parser.has_option(SECTION_NETWORK, key):
                    network_raw[key] = parser.get(SECTION_NETWORK, key).strip()

        for env_name, key in _ENV_OVERRIDES.items():
            value = self.environ.get(env_name)
            if value:
                raw[key] = value.strip()

        return self._validate(raw, network_raw)

    def _validate(
        self,
        raw: dict[str, str | dict[str, str]],
        network_raw: dict[str, str],
    ) -> ServerConfig:
        account = str(raw["account"])
        repository = str(raw["repository"])
        if not account:
            raise ConfigurationError(
                f"set {ENV_ACCOUNT} or 'account' in {CONFIG_FILE_NAME}",
                target="account",
            )
        if not repository:
            raise ConfigurationError(
                f"set {ENV_REPOSITORY} or 'repository' in {CONFIG_FILE_NAME}",
                target="repository",
            )

        token = str(raw["token"]) or None
        if token and not validate_github_token(token):
            logger.warning(
                "Configured token does not look like a GitHub token; "
                "using it anyway"
            )

        network = NetworkConfig(
            timeout_seconds=_positive_int(
                network_raw["timeout_seconds"], "timeout_seconds"
            ),
            retry_attempts=_positive_int(
                network_raw["retry_attempts"], "retry_attempts"
            ),
            max_concurrent_fetches=_positive_int(
                network_raw["max_concurrent_fetches"], "max_concurrent_fetches"
            ),
        )

        return ServerConfig(
            account=account,
            repository=repository,
            token=token,
            host=str(raw["host"]),
            port=_positive_int(str(raw["port"]), "port"),
            cache_minutes=_positive_int(
                str(raw["cache_minutes"]), "cache_minutes"
            ),
            log_level=str(raw["log_level"]).upper(),
            console_log_level=str(raw["console_log_level"]).upper(),
            network=network,
        )


def _positive_int(value: str, key: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"expected an integer, got {value!r}", target=key
        ) from e
    if number <= 0:
        raise ConfigurationError(
            f"expected a positive integer, got {number}", target=key
        )
    return number
