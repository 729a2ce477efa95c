"""Configuration management - settings loading and path utilities."""

from carrots.config.paths import Paths
from carrots.config.settings import SettingsManager
from carrots.types import NetworkConfig, ServerConfig

__all__ = [
    "NetworkConfig",
    "Paths",
    "ServerConfig",
    "SettingsManager",
]
