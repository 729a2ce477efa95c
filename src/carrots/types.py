"""Centralized type definitions for carrots.

This module contains the TypedDict definitions used across the application
for configuration and for the raw payloads returned by the GitHub API.
"""

from typing import TypedDict

# =============================================================================
# Network and Configuration Types
# =============================================================================


class NetworkConfig(TypedDict):
    """Network configuration options."""

    timeout_seconds: int
    retry_attempts: int
    max_concurrent_fetches: int


class ServerConfig(TypedDict):
    """Server configuration."""

    account: str
    repository: str
    token: str | None
    host: str
    port: int
    cache_minutes: int
    log_level: str
    console_log_level: str
    network: NetworkConfig


# =============================================================================
# GitHub API Payload Types
# =============================================================================


class GitHubAssetPayload(TypedDict, total=False):
    """Asset entry of a GitHub release listing."""

    url: str
    name: str
    size: int
    content_type: str
    browser_download_url: str


class GitHubReleasePayload(TypedDict, total=False):
    """Release entry of a GitHub release listing."""

    name: str | None
    body: str | None
    draft: bool
    tag_name: str
    prerelease: bool
    published_at: str | None
    assets: list[GitHubAssetPayload]
