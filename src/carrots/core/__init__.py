"""Core services: release fetching, caching and queries."""

from carrots.core.cache import ReleaseCache
from carrots.core.fetcher import ReleaseFetcher
from carrots.core.service import LatestSummary, ReleaseService, VersionSummary

__all__ = [
    "LatestSummary",
    "ReleaseCache",
    "ReleaseFetcher",
    "ReleaseService",
    "VersionSummary",
]
