"""Per-platform projection of a release asset."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from carrots.domain.release import ReleaseAsset, ReleaseMetadata


def bytes_to_megabytes(size: int) -> float:
    """Convert a byte count to megabytes rounded to one decimal."""
    return round(size / 1_000_000, 1)


@dataclass(slots=True, frozen=True)
class PlatformAsset:
    """A downloadable asset as served for one platform.

    Attributes:
        version: Cleaned semantic version of the release
        tag: Original release tag
        name: Release title
        notes: Release notes
        date: ISO 8601 publish timestamp
        filename: Asset filename
        url: Public download URL
        api_url: Authenticated content-fetch URL
        content_type: MIME type reported by upstream
        size: Size in megabytes, rounded to one decimal
        delta_index: Squirrel.Windows RELEASES content (Windows only)
        alternates: Assets of the same release displaced from this
            (platform, version) slot, still reachable by filename

    """

    version: str
    tag: str
    name: str
    notes: str
    date: str
    filename: str
    url: str
    api_url: str
    content_type: str
    size: float
    delta_index: str | None = None
    alternates: tuple[PlatformAsset, ...] = ()

    @classmethod
    def from_release(
        cls, release: ReleaseMetadata, asset: ReleaseAsset
    ) -> PlatformAsset:
        """Project a release asset for use as a platform entry.

        Args:
            release: Servable release the asset belongs to
            asset: Asset to project

        Returns:
            PlatformAsset instance

        """
        return cls(
            version=release.version or release.tag,
            tag=release.tag,
            name=release.name,
            notes=release.notes,
            date=release.published_at,
            filename=asset.name,
            url=asset.browser_download_url,
            api_url=asset.url,
            content_type=asset.content_type,
            size=bytes_to_megabytes(asset.size),
        )

    def with_delta_index(self, content: str) -> PlatformAsset:
        """Return a copy carrying the given delta-index content."""
        return replace(self, delta_index=content)

    def displacing(self, previous: PlatformAsset) -> PlatformAsset:
        """Return a copy that keeps ``previous`` as an alternate.

        Only assets of the same release are kept; an asset of another
        release is simply replaced.
        """
        if previous.tag != self.tag:
            return self
        kept = (*previous.alternates, replace(previous, alternates=()))
        return replace(self, alternates=(*self.alternates, *kept))

    def find_file(self, filename: str) -> PlatformAsset | None:
        """Return this asset or an alternate with the given filename."""
        for candidate in (self, *self.alternates):
            if candidate.filename == filename:
                return candidate
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary for JSON responses."""
        return {
            "version": self.version,
            "tag": self.tag,
            "name": self.name,
            "notes": self.notes,
            "date": self.date,
            "filename": self.filename,
            "url": self.url,
            "content_type": self.content_type,
            "size": self.size,
        }
