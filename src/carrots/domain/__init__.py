"""Domain models: platform taxonomy, releases and versions."""

from carrots.domain.asset import PlatformAsset
from carrots.domain.classifier import classify, resolve_platform
from carrots.domain.platforms import (
    PLATFORMS,
    WINDOWS_FAMILY,
    PlatformIdentifier,
    PlatformInfo,
)
from carrots.domain.release import ReleaseAsset, ReleaseMetadata

# Full per-platform history: platform -> version -> asset
PlatformHistory = dict[PlatformIdentifier, dict[str, PlatformAsset]]

__all__ = [
    "PLATFORMS",
    "WINDOWS_FAMILY",
    "PlatformAsset",
    "PlatformHistory",
    "PlatformIdentifier",
    "PlatformInfo",
    "ReleaseAsset",
    "ReleaseMetadata",
    "classify",
    "resolve_platform",
]
