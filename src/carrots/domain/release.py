"""Upstream release models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from carrots.constants import DELTA_INDEX_ASSET_NAME
from carrots.domain.version import clean_version

if TYPE_CHECKING:
    from carrots.types import GitHubAssetPayload, GitHubReleasePayload


@dataclass(slots=True, frozen=True)
class ReleaseAsset:
    """A file attached to an upstream release.

    Attributes:
        name: Asset filename
        size: Asset size in bytes
        url: Authenticated API URL used to fetch the asset content
        browser_download_url: Public download URL
        content_type: MIME type reported by upstream

    """

    name: str
    size: int
    url: str
    browser_download_url: str
    content_type: str

    @classmethod
    def from_api_response(
        cls, asset_data: GitHubAssetPayload
    ) -> ReleaseAsset | None:
        """Create ReleaseAsset from GitHub API response data.

        Returns:
            ReleaseAsset instance or None if required fields are missing

        """
        try:
            name = asset_data.get("name", "")
            download_url = asset_data.get("browser_download_url", "")
            if not name or not download_url:
                return None

            return cls(
                name=name,
                size=int(asset_data.get("size", 0) or 0),
                url=asset_data.get("url", "") or download_url,
                browser_download_url=download_url,
                content_type=asset_data.get(
                    "content_type", "application/octet-stream"
                ),
            )
        except (AttributeError, TypeError, ValueError):
            return None

    @property
    def is_delta_index(self) -> bool:
        """Check whether this is the reserved delta-index asset."""
        return self.name == DELTA_INDEX_ASSET_NAME


@dataclass(slots=True, frozen=True)
class ReleaseMetadata:
    """Represents one upstream release with its assets.

    Attributes:
        name: Release title
        notes: Release body (markdown)
        tag: Original tag name
        version: Cleaned semantic version, None when the tag is invalid
        published_at: ISO 8601 publish timestamp
        draft: Whether the release is a draft
        prerelease: Whether the release is a prerelease
        assets: Release assets

    """

    name: str
    notes: str
    tag: str
    version: str | None
    published_at: str
    draft: bool
    prerelease: bool
    assets: tuple[ReleaseAsset, ...]

    @classmethod
    def from_api_response(
        cls, api_data: GitHubReleasePayload
    ) -> ReleaseMetadata:
        """Create ReleaseMetadata from GitHub API response data."""
        tag = api_data.get("tag_name", "") or ""
        assets = []
        for asset_data in api_data.get("assets", []) or []:
            if not isinstance(asset_data, dict):
                continue
            asset = ReleaseAsset.from_api_response(asset_data)
            if asset:
                assets.append(asset)

        return cls(
            name=api_data.get("name") or tag,
            notes=api_data.get("body") or "",
            tag=tag,
            version=clean_version(tag),
            published_at=api_data.get("published_at") or "",
            draft=bool(api_data.get("draft", False)),
            prerelease=bool(api_data.get("prerelease", False)),
            assets=tuple(assets),
        )

    @property
    def is_servable(self) -> bool:
        """Check whether the release may be offered to clients.

        Drafts, prereleases and releases without a valid semantic version
        tag are never served.
        """
        return self.version is not None and not (self.draft or self.prerelease)

    @property
    def delta_index(self) -> ReleaseAsset | None:
        """Return the delta-index asset of this release, if any."""
        for asset in self.assets:
            if asset.is_delta_index:
                return asset
        return None

    @property
    def installable_assets(self) -> list[ReleaseAsset]:
        """Return every asset except the delta index."""
        return [asset for asset in self.assets if not asset.is_delta_index]
