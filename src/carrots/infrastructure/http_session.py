"""Shared aiohttp session for upstream calls.

One session serves the whole process; the connector bounds how many
sockets are opened towards GitHub at once.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiohttp

from carrots.types import ServerConfig

# Total sockets across all hosts
CONNECTION_LIMIT = 10


def build_timeout(timeout_seconds: int) -> aiohttp.ClientTimeout:
    """Timeout for a whole upstream request, with a tighter connect bound."""
    return aiohttp.ClientTimeout(
        total=timeout_seconds,
        sock_connect=min(timeout_seconds, 5),
    )


@asynccontextmanager
async def create_http_session(
    config: ServerConfig,
) -> AsyncIterator[aiohttp.ClientSession]:
    """Open the upstream session for the lifetime of the context.

    Args:
        config: Server configuration; only the network section is used

    Yields:
        Session closed when the context exits

    """
    network = config["network"]
    async with aiohttp.ClientSession(
        timeout=build_timeout(network["timeout_seconds"]),
        connector=aiohttp.TCPConnector(
            limit=CONNECTION_LIMIT,
            limit_per_host=network["max_concurrent_fetches"],
        ),
    ) as session:
        yield session
