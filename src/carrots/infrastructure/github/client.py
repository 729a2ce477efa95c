"""Low-level GitHub API client for HTTP communication.

This module handles direct HTTP communication with the GitHub API,
including authentication, rate-limit tracking and retry logic. Failures
are raised as UpstreamError; deciding what a failure means is left to
the callers.
"""

import asyncio
from typing import Any
from urllib.parse import quote

import aiohttp
import orjson

from carrots.constants import (
    DEFAULT_RETRY_ATTEMPTS,
    GITHUB_API_URL,
    GITHUB_ASSET_MEDIA_TYPE,
    GITHUB_RELEASES_MEDIA_TYPE,
    HTTP_BAD_REQUEST,
    HTTP_FORBIDDEN,
    RELEASES_PER_PAGE,
)
from carrots.exceptions import RateLimitError, UpstreamError
from carrots.infrastructure.auth import GitHubAuthManager
from carrots.logger import get_logger
from carrots.types import GitHubReleasePayload

logger = get_logger(__name__)

HTTP_REDIRECT_MIN = 300
HTTP_REDIRECT_MAX = 399


class ReleaseAPIClient:
    """Handles direct communication with GitHub API for release data."""

    def __init__(
        self,
        owner: str,
        repo: str,
        session: aiohttp.ClientSession,
        auth_manager: GitHubAuthManager | None = None,
        retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
    ) -> None:
        """Initialize the API client.

        Args:
            owner: Repository owner
            repo: Repository name
            session: aiohttp session for making requests
            auth_manager: GitHub authentication manager
                (unauthenticated when not provided)
            retry_attempts: Attempts per request for network failures

        """
        self.owner = owner
        self.repo = repo
        self.session = session
        self.auth_manager = auth_manager or GitHubAuthManager()
        self.retry_attempts = max(1, retry_attempts)

    @property
    def releases_url(self) -> str:
        """Release listing URL with the repository coordinates encoded."""
        owner = quote(self.owner, safe="")
        repo = quote(self.repo, safe="")
        return (
            f"{GITHUB_API_URL}/repos/{owner}/{repo}/releases"
            f"?per_page={RELEASES_PER_PAGE}"
        )

    def _check_status(self, response: aiohttp.ClientResponse, url: str) -> None:
        if response.status == HTTP_FORBIDDEN:
            raise RateLimitError(
                "GitHub refused the request (HTTP 403)",
                target=url,
                status=response.status,
            )
        if response.status >= HTTP_BAD_REQUEST:
            raise UpstreamError(
                f"GitHub answered HTTP {response.status}",
                target=url,
                status=response.status,
            )

    async def _fetch(self, url: str, accept: str, *, as_text: bool) -> Any:
        """Fetch a GitHub URL, retrying network failures.

        Args:
            url: URL to fetch
            accept: Accept header value
            as_text: Return the body as text instead of decoded JSON

        Returns:
            Decoded JSON or text body

        Raises:
            RateLimitError: On HTTP 403
            UpstreamError: On any other error status, undecodable body,
                or when the retry budget is exhausted

        """
        headers = self.auth_manager.apply_auth({"Accept": accept})

        for attempt in range(1, self.retry_attempts + 1):
            try:
                async with self.session.get(url, headers=headers) as response:
                    self.auth_manager.update_rate_limit_info(response.headers)
                    self._check_status(response, url)
                    if as_text:
                        return await response.text()
                    return await response.json(
                        loads=orjson.loads, content_type=None
                    )
            except (aiohttp.ClientError, TimeoutError) as e:
                if attempt == self.retry_attempts:
                    raise UpstreamError(
                        f"{type(e).__name__}: {e}", target=url
                    ) from e
                backoff = 2 ** (attempt - 1)
                logger.warning(
                    "Attempt %d/%d for %s failed: %s",
                    attempt,
                    self.retry_attempts,
                    url,
                    e,
                )
                await asyncio.sleep(backoff)
            except ValueError as e:
                raise UpstreamError(
                    f"Undecodable response body: {e}", target=url
                ) from e

        # Unreachable: the loop either returns or raises
        raise UpstreamError("No attempts were made", target=url)

    async def list_releases(self) -> list[GitHubReleasePayload]:
        """Fetch the most recent releases (one page, newest first).

        Returns:
            Release payloads as returned by GitHub

        Raises:
            RateLimitError: If GitHub rate limits the request
            UpstreamError: If the listing cannot be fetched or is not a list

        """
        url = self.releases_url
        data = await self._fetch(url, GITHUB_RELEASES_MEDIA_TYPE, as_text=False)
        if not isinstance(data, list):
            raise UpstreamError(
                f"Expected a list of releases, got {type(data).__name__}",
                target=url,
            )
        return [release for release in data if isinstance(release, dict)]

    async def fetch_asset_text(self, api_url: str) -> str:
        """Fetch the content of an asset as text.

        Args:
            api_url: Authenticated asset API URL

        Returns:
            Asset content

        Raises:
            UpstreamError: If the asset cannot be fetched

        """
        return await self._fetch(api_url, GITHUB_ASSET_MEDIA_TYPE, as_text=True)

    async def resolve_download_location(self, api_url: str) -> str | None:
        """Resolve the signed download location of an asset.

        GitHub answers an authenticated asset request with a redirect to a
        short-lived download URL; that URL is returned so private assets
        can be handed to clients without exposing the token.

        Args:
            api_url: Authenticated asset API URL

        Returns:
            Redirect location, or None if GitHub did not redirect

        Raises:
            UpstreamError: On network failure or an error status

        """
        headers = self.auth_manager.apply_auth(
            {"Accept": GITHUB_ASSET_MEDIA_TYPE}
        )
        try:
            async with self.session.get(
                api_url, headers=headers, allow_redirects=False
            ) as response:
                self._check_status(response, api_url)
                if HTTP_REDIRECT_MIN <= response.status <= HTTP_REDIRECT_MAX:
                    return response.headers.get("Location")
                return None
        except (aiohttp.ClientError, TimeoutError) as e:
            raise UpstreamError(
                f"{type(e).__name__}: {e}", target=api_url
            ) from e
