"""In-memory cache service for the per-platform release history.

The cache keeps two snapshots: the live history served to clients and
a backup of the last successful fetch. A refresh that fails keeps
serving the backup, so an upstream outage degrades to stale data
instead of errors. Concurrent callers share one refresh, so upstream is
queried at most once per expiry no matter how many requests arrive.
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any, Protocol

from carrots.constants import CACHE_DURATION_SECONDS
from carrots.domain import PlatformHistory
from carrots.logger import get_logger

logger = get_logger(__name__)


class HistorySource(Protocol):
    """Anything able to build a fresh per-platform history."""

    async def fetch_all(self) -> PlatformHistory | None: ...


@dataclass(slots=True, frozen=True)
class _CacheState:
    """Snapshot of the cache, replaced as a whole on every change.

    Attributes:
        live: History served to callers
        backup: Last history built from a successful fetch
        refreshed_at: Clock reading of the last successful fetch,
            None until the first one

    """

    live: PlatformHistory | None = None
    backup: PlatformHistory | None = None
    refreshed_at: float | None = None


class ReleaseCache:
    """Time-bounded cache of the per-platform release history.

    Usage:
        fetcher = ReleaseFetcher(api_client)
        cache = ReleaseCache(fetcher, cache_duration_seconds=900)
        history = await cache.get()
    """

    def __init__(
        self,
        fetcher: HistorySource,
        cache_duration_seconds: float = CACHE_DURATION_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the release cache.

        Args:
            fetcher: Source of fresh histories
            cache_duration_seconds: Lifetime of a successful fetch
            clock: Monotonic clock, replaceable in tests

        """
        self.fetcher = fetcher
        self.cache_duration_seconds = cache_duration_seconds
        self._clock = clock
        self._state = _CacheState()
        self._refresh_task: asyncio.Task[PlatformHistory | None] | None = None
        self._fetch_count = 0
        self._failure_count = 0

    def is_fresh(self) -> bool:
        """Check whether the last successful fetch is still within bounds."""
        refreshed_at = self._state.refreshed_at
        if refreshed_at is None:
            return False
        return self._clock() - refreshed_at < self.cache_duration_seconds

    async def get(self) -> PlatformHistory | None:
        """Return the current history, refreshing it when expired.

        Returns:
            Fresh or backup history, or None when nothing was ever fetched

        """
        if self.is_fresh():
            return self._state.live

        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = asyncio.create_task(self._refresh())
        # Shielded so a cancelled request does not cancel the shared fetch
        return await asyncio.shield(self._refresh_task)

    async def _refresh(self) -> PlatformHistory | None:
        self._fetch_count += 1
        try:
            history = await self.fetcher.fetch_all()
        except Exception:
            logger.exception("Unexpected error while refreshing releases")
            history = None

        if history:
            self._state = _CacheState(
                live=history,
                backup=history,
                refreshed_at=self._clock(),
            )
            logger.info(
                "Release cache refreshed: %d platforms, %d entries",
                len(history),
                sum(len(entries) for entries in history.values()),
            )
            return history

        self._failure_count += 1
        backup = self._state.backup
        if backup is None:
            logger.warning("Release fetch failed and no backup is available")
            return None

        logger.warning("Release fetch failed; serving backup history")
        self._state = replace(self._state, live=backup)
        return backup

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dictionary with cache statistics

        """
        state = self._state
        age = None
        if state.refreshed_at is not None:
            age = round(self._clock() - state.refreshed_at, 1)
        return {
            "fresh": self.is_fresh(),
            "age_seconds": age,
            "has_backup": state.backup is not None,
            "platforms": len(state.live or {}),
            "fetches": self._fetch_count,
            "failures": self._failure_count,
            "cache_duration_seconds": self.cache_duration_seconds,
        }
