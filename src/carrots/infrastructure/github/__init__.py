"""GitHub API access."""

from carrots.infrastructure.github.client import ReleaseAPIClient

__all__ = ["ReleaseAPIClient"]
