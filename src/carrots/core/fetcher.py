"""Release fetching and per-platform history building.

The fetcher turns one upstream release listing into the full
per-platform history. Upstream failures never escape: they are logged
and reported as "no data" (None) so the cache can fall back to its
backup snapshot.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from carrots.constants import DEFAULT_MAX_CONCURRENT_FETCHES
from carrots.domain.asset import PlatformAsset
from carrots.domain.classifier import classify
from carrots.domain.platforms import is_windows_family
from carrots.domain.release import ReleaseMetadata
from carrots.exceptions import RateLimitError, UpstreamError
from carrots.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from carrots.domain import PlatformHistory
    from carrots.infrastructure.github.client import ReleaseAPIClient

logger = get_logger(__name__)


def select_servable(payloads: Iterable[dict[str, Any]]) -> list[ReleaseMetadata]:
    """Parse release payloads and keep only servable releases.

    Args:
        payloads: Release payloads in upstream order (newest first)

    Returns:
        Servable releases, upstream order preserved

    """
    releases = [ReleaseMetadata.from_api_response(p) for p in payloads]
    servable = [release for release in releases if release.is_servable]
    skipped = len(releases) - len(servable)
    if skipped:
        logger.debug(
            "Skipped %d draft, prerelease or non-semver releases", skipped
        )
    return servable


def build_history(releases: list[ReleaseMetadata]) -> PlatformHistory:
    """Build the per-platform history from servable releases.

    Releases are processed oldest-first and a later write replaces an
    earlier one for the same (platform, version), so the most recently
    published release wins a collision. Displaced assets of the same
    release (e.g. full and delta nupkg packages) stay reachable as
    alternates.

    Args:
        releases: Servable releases in upstream order (newest first)

    Returns:
        Mapping of platform to version to asset

    """
    history: PlatformHistory = {}
    for release in reversed(releases):
        for asset in release.installable_assets:
            platforms = classify(asset.name)
            if not platforms:
                logger.debug(
                    "Dropping unclassifiable asset %s of %s",
                    asset.name,
                    release.tag,
                )
                continue
            entry = PlatformAsset.from_release(release, asset)
            for platform in platforms:
                entries = history.setdefault(platform, {})
                previous = entries.get(entry.version)
                if previous is None:
                    entries[entry.version] = entry
                else:
                    entries[entry.version] = entry.displacing(previous)
    return history


def attach_delta_indexes(
    history: PlatformHistory, indexes: dict[str, str]
) -> PlatformHistory:
    """Attach delta-index content to Windows-family entries.

    Args:
        history: Per-platform history
        indexes: Delta-index content keyed by release tag

    Returns:
        The same history, with Windows-family entries replaced

    """
    for platform, entries in history.items():
        if not is_windows_family(platform):
            continue
        for version, asset in entries.items():
            content = indexes.get(asset.tag)
            if content is not None:
                entries[version] = asset.with_delta_index(content)
    return history


class ReleaseFetcher:
    """Builds the per-platform release history from the GitHub API.

    Delta-index bodies are fetched concurrently (bounded by a semaphore)
    and remembered by asset URL; GitHub gives a re-uploaded asset a new
    URL, so only new indexes cost a request on later refreshes.
    """

    def __init__(
        self,
        api_client: ReleaseAPIClient,
        max_concurrent_fetches: int = DEFAULT_MAX_CONCURRENT_FETCHES,
    ) -> None:
        """Initialize the release fetcher.

        Args:
            api_client: Low-level GitHub API client
            max_concurrent_fetches: Upper bound on parallel index fetches

        """
        self.api_client = api_client
        self.max_concurrent_fetches = max(1, max_concurrent_fetches)
        self._delta_index_memo: dict[str, str] = {}

    @property
    def repository(self) -> str:
        """Repository coordinates as owner/name."""
        return f"{self.api_client.owner}/{self.api_client.repo}"

    async def fetch_all(self) -> PlatformHistory | None:
        """Fetch and classify the release listing.

        Returns:
            Per-platform history, or None when upstream could not be read

        """
        try:
            payloads = await self.api_client.list_releases()
        except RateLimitError as e:
            logger.error("Rate limited while listing %s: %s", self.repository, e)
            return None
        except UpstreamError as e:
            logger.warning(
                "Could not list releases of %s: %s", self.repository, e
            )
            return None

        releases = select_servable(payloads)
        history = build_history(releases)

        targets = {
            release.tag: release.delta_index.url
            for release in releases
            if release.delta_index is not None
        }
        indexes = await self._fetch_delta_indexes(targets)
        attach_delta_indexes(history, indexes)

        logger.debug(
            "Built history for %s: %d releases, %d platforms",
            self.repository,
            len(releases),
            len(history),
        )
        return history

    async def _fetch_delta_indexes(
        self, targets: dict[str, str]
    ) -> dict[str, str]:
        """Fetch delta-index bodies concurrently.

        A failed fetch only removes the index of that release; it never
        aborts the others.

        Args:
            targets: Delta-index asset URL keyed by release tag

        Returns:
            Delta-index content keyed by release tag

        """
        pending = [
            (tag, url)
            for tag, url in targets.items()
            if url not in self._delta_index_memo
        ]
        semaphore = asyncio.Semaphore(self.max_concurrent_fetches)

        async def fetch_one(url: str) -> str:
            async with semaphore:
                return await self.api_client.fetch_asset_text(url)

        results = await asyncio.gather(
            *(fetch_one(url) for _, url in pending), return_exceptions=True
        )

        fetched: dict[str, str] = {}
        for (tag, url), result in zip(pending, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning(
                    "Delta index for %s unavailable: %s", tag, result
                )
                continue
            fetched[url] = result

        # Keep only indexes still referenced by the current listing
        self._delta_index_memo = {
            url: self._delta_index_memo.get(url, fetched.get(url, ""))
            for url in targets.values()
            if url in self._delta_index_memo or url in fetched
        }

        return {
            tag: self._delta_index_memo[url]
            for tag, url in targets.items()
            if url in self._delta_index_memo
        }
