"""Centralized constants module for carrots.

This module serves as the single source of truth for all shared constants
across the carrots codebase. Constants are organized by logical categories
and use typing.Final annotations to ensure immutability.

Usage:
    from carrots.constants import CACHE_DURATION_SECONDS
"""

from typing import Final

# =============================================================================
# Release Cache Constants
# =============================================================================

# How long a successful refresh is considered fresh
CACHE_DURATION_MINUTES: Final[int] = 15
CACHE_DURATION_SECONDS: Final[int] = CACHE_DURATION_MINUTES * 60

# Releases requested from upstream in a single page (no pagination)
RELEASES_PER_PAGE: Final[int] = 100

# Reserved asset name of the Squirrel.Windows delta index
DELTA_INDEX_ASSET_NAME: Final[str] = "RELEASES"

# =============================================================================
# GitHub API Constants
# =============================================================================

GITHUB_API_URL: Final[str] = "https://api.github.com"
GITHUB_WEB_URL: Final[str] = "https://github.com"
GITHUB_RELEASES_MEDIA_TYPE: Final[str] = "application/vnd.github+json"
GITHUB_ASSET_MEDIA_TYPE: Final[str] = "application/octet-stream"

# Remaining-request budget below which a warning is logged
RATE_LIMIT_WARNING_THRESHOLD: Final[int] = 10

HTTP_FORBIDDEN: Final[int] = 403
HTTP_BAD_REQUEST: Final[int] = 400

# =============================================================================
# Network Defaults
# =============================================================================

DEFAULT_TIMEOUT_SECONDS: Final[int] = 15
DEFAULT_RETRY_ATTEMPTS: Final[int] = 2
DEFAULT_MAX_CONCURRENT_FETCHES: Final[int] = 5

# =============================================================================
# Server Defaults
# =============================================================================

DEFAULT_HOST: Final[str] = "0.0.0.0"  # noqa: S104
DEFAULT_PORT: Final[int] = 3000

CONFIG_FILE_NAME: Final[str] = "settings.conf"
DEFAULT_CONFIG_SUBDIR: Final[str] = "carrots"

# Environment variables read at startup
ENV_CONFIG_DIR: Final[str] = "CARROTS_CONFIG_DIR"
ENV_LOG_DIR: Final[str] = "CARROTS_LOG_DIR"
ENV_LOG_LEVEL: Final[str] = "LOG_LEVEL"
ENV_ACCOUNT: Final[str] = "ACCOUNT"
ENV_REPOSITORY: Final[str] = "REPOSITORY"
ENV_TOKEN: Final[str] = "TOKEN"
ENV_HOST: Final[str] = "HOST"
ENV_PORT: Final[str] = "PORT"
ENV_CACHE_MINUTES: Final[str] = "CACHE_MINUTES"

# =============================================================================
# Logging Constants
# =============================================================================

DEFAULT_LOG_LEVEL: Final[str] = "INFO"
DEFAULT_CONSOLE_LOG_LEVEL: Final[str] = "INFO"

# Maximum size for rotated log files (bytes)
LOG_ROTATION_THRESHOLD_BYTES: Final[int] = 1024 * 1024  # 1 MB

# Number of backup files to keep for rotated logs
LOG_BACKUP_COUNT: Final[int] = 3

LOG_FILE_NAME: Final[str] = "carrots.log"

# Console and file format strings used by the logger
LOG_CONSOLE_FORMAT: Final[str] = (
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
LOG_CONSOLE_DATE_FORMAT: Final[str] = "%H:%M:%S"
LOG_FILE_FORMAT: Final[str] = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "%(funcName)s:%(lineno)d - %(message)s"
)
LOG_FILE_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

# Color mapping for console output levels
LOG_COLORS: Final[dict[str, str]] = {
    "DEBUG": "\033[36m",  # Cyan
    "INFO": "\033[32m",  # Green
    "WARNING": "\033[33m",  # Yellow
    "ERROR": "\033[31m",  # Red
    "CRITICAL": "\033[35m",  # Magenta
    "RESET": "\033[0m",
}
