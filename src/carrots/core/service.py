"""Release query service.

Answers "latest" and "specific version" questions for the HTTP layer
from the cached per-platform history. Every read goes through the
release cache; callers only ever see "data available" or None.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from carrots.domain.classifier import resolve_platform
from carrots.domain.version import clean_version, version_key
from carrots.exceptions import UpstreamError
from carrots.logger import get_logger

if TYPE_CHECKING:
    from carrots.core.cache import ReleaseCache
    from carrots.domain import PlatformAsset, PlatformHistory, PlatformIdentifier
    from carrots.infrastructure.github.client import ReleaseAPIClient

logger = get_logger(__name__)

# "<sha1> <filename>.nupkg <size>" lines of a Squirrel RELEASES file
_DELTA_LINE_RE = re.compile(r"([A-Fa-f0-9]+)\s([^\s]+\.nupkg)\s(\d+)")


@dataclass(slots=True, frozen=True)
class LatestSummary:
    """Latest asset per platform plus a representative header version.

    Attributes:
        latest: Latest asset keyed by platform
        platforms: Platforms with a latest asset, sorted by identifier
        version: Version of the first platform's latest asset
        date: Publish date of the first platform's latest asset

    """

    latest: dict[PlatformIdentifier, PlatformAsset]
    platforms: list[PlatformIdentifier]
    version: str
    date: str


@dataclass(slots=True)
class VersionSummary:
    """All assets published under one version."""

    version: str
    name: str
    notes: str
    date: str
    assets: dict[PlatformIdentifier, PlatformAsset] = field(
        default_factory=dict
    )


def latest_of(entries: dict[str, PlatformAsset]) -> PlatformAsset | None:
    """Return the entry with the highest semantic version."""
    if not entries:
        return None
    return entries[max(entries, key=version_key)]


class ReleaseService:
    """Query façade over the release cache."""

    def __init__(
        self,
        cache: ReleaseCache,
        api_client: ReleaseAPIClient | None = None,
    ) -> None:
        """Initialize the release service.

        Args:
            cache: Release cache to read from
            api_client: API client used to sign download URLs
                (public URLs are served when omitted)

        """
        self.cache = cache
        self.api_client = api_client

    async def _history(self) -> PlatformHistory | None:
        return await self.cache.get()

    async def get_latest(self) -> LatestSummary | None:
        """Compute the latest asset of every platform.

        Returns:
            Latest summary, or None when no release data is available

        """
        history = await self._history()
        if not history:
            return None

        latest: dict[PlatformIdentifier, PlatformAsset] = {}
        for platform in sorted(history):
            asset = latest_of(history[platform])
            if asset is not None:
                latest[platform] = asset
        if not latest:
            return None

        platforms = list(latest)
        first = latest[platforms[0]]
        return LatestSummary(
            latest=latest,
            platforms=platforms,
            version=first.version,
            date=first.date,
        )

    async def get_version(
        self, platform: PlatformIdentifier, version: str
    ) -> PlatformAsset | None:
        """Look up one version of one platform.

        Args:
            platform: Canonical platform identifier
            version: Version string, with or without a leading "v"

        Returns:
            Matching asset, or None if the platform or version is unknown

        """
        cleaned = clean_version(version)
        if cleaned is None:
            return None
        history = await self._history()
        if not history:
            return None
        return history.get(platform, {}).get(cleaned)

    async def get_versions(self) -> list[VersionSummary] | None:
        """Group the history by version, newest first.

        Returns:
            Version summaries, or None when no release data is available

        """
        history = await self._history()
        if not history:
            return None

        versions: dict[str, VersionSummary] = {}
        for platform in sorted(history):
            for version, asset in history[platform].items():
                summary = versions.get(version)
                if summary is None:
                    summary = versions[version] = VersionSummary(
                        version=version,
                        name=asset.name,
                        notes=asset.notes,
                        date=asset.date,
                    )
                summary.assets[platform] = asset

        ordered = sorted(versions, key=version_key, reverse=True)
        return [versions[version] for version in ordered]

    async def find_asset(
        self, platform: PlatformIdentifier, filename: str
    ) -> PlatformAsset | None:
        """Find the entry of a platform whose filename matches exactly.

        Alternates are searched too. When several versions carry the
        same filename, the highest version wins.
        """
        history = await self._history()
        if not history:
            return None
        matches = {}
        for version, asset in history.get(platform, {}).items():
            found = asset.find_file(filename)
            if found is not None:
                matches[version] = found
        return latest_of(matches)

    @staticmethod
    def resolve_platform(token: str) -> PlatformIdentifier | None:
        """Resolve a user-supplied platform token."""
        return resolve_platform(token)

    @staticmethod
    def patch_delta_index(asset: PlatformAsset, base_url: str) -> str | None:
        """Point the delta packages of a RELEASES file at this server.

        Args:
            asset: Windows-family asset carrying a delta index
            base_url: Public base address of this server, ending in "/"

        Returns:
            Rewritten delta index, or None when the asset has none

        """
        if asset.delta_index is None:
            return None
        # Escape backslashes so the base address is taken literally
        prefix = f"{base_url}download/nupkg/".replace("\\", "\\\\")
        return _DELTA_LINE_RE.sub(rf"\1 {prefix}\2 \3", asset.delta_index)

    async def resolve_download_url(self, asset: PlatformAsset) -> str:
        """Return the URL a client should download the asset from.

        With an authenticated API client the signed upstream location is
        preferred, so private release assets can be served without
        exposing the token. Otherwise the public download URL is used.
        """
        if self.api_client is None or not self.api_client.auth_manager.has_token:
            return asset.url
        try:
            location = await self.api_client.resolve_download_location(
                asset.api_url
            )
        except UpstreamError as e:
            logger.warning(
                "Could not sign download of %s: %s", asset.filename, e
            )
            return asset.url
        return location or asset.url
