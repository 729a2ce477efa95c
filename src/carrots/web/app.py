"""Application factory and service wiring.

The release service and everything below it (HTTP session, API client,
fetcher, cache) live exactly as long as the web application: they are
created on startup and the session is closed on cleanup.

Usage:
    >>> config = SettingsManager().load()
    >>> app = create_app(config)
    >>> web.run_app(app, host=config["host"], port=config["port"])
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from aiohttp import web

from carrots.core.cache import ReleaseCache
from carrots.core.fetcher import ReleaseFetcher
from carrots.core.service import ReleaseService
from carrots.infrastructure.auth import GitHubAuthManager
from carrots.infrastructure.github.client import ReleaseAPIClient
from carrots.infrastructure.http_session import create_http_session
from carrots.logger import get_logger
from carrots.web.keys import CONFIG_KEY, SERVICE_KEY
from carrots.web.routes import routes

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    import aiohttp

    from carrots.types import ServerConfig

logger = get_logger(__name__)


def build_release_service(
    config: ServerConfig, session: aiohttp.ClientSession
) -> ReleaseService:
    """Wire the release service for one repository.

    Args:
        config: Server configuration
        session: Shared HTTP session for upstream calls

    Returns:
        Release service backed by a fresh, empty cache

    """
    network = config["network"]
    api_client = ReleaseAPIClient(
        config["account"],
        config["repository"],
        session,
        auth_manager=GitHubAuthManager(config["token"]),
        retry_attempts=network["retry_attempts"],
    )
    fetcher = ReleaseFetcher(
        api_client, max_concurrent_fetches=network["max_concurrent_fetches"]
    )
    cache = ReleaseCache(
        fetcher, cache_duration_seconds=config["cache_minutes"] * 60
    )
    return ReleaseService(cache, api_client)


async def _release_service_ctx(app: web.Application) -> AsyncIterator[None]:
    config = app[CONFIG_KEY]
    async with create_http_session(config) as session:
        app[SERVICE_KEY] = build_release_service(config, session)
        logger.debug(
            "Serving releases of %s/%s", config["account"], config["repository"]
        )
        yield


def create_app(
    config: ServerConfig, service: ReleaseService | None = None
) -> web.Application:
    """Create the web application.

    Args:
        config: Server configuration
        service: Prebuilt release service; when omitted one is wired on
            startup with its own HTTP session

    Returns:
        aiohttp application with every route registered

    """
    app = web.Application()
    app[CONFIG_KEY] = config
    if service is not None:
        app[SERVICE_KEY] = service
    else:
        app.cleanup_ctx.append(_release_service_ctx)
    app.add_routes(routes)
    return app
