"""HTTP routes of the update server.

Handlers are thin: they resolve request tokens, ask the release service
and map "no data" to 500, unknown platforms and invalid versions to 400
and missing versions or files to 404.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import orjson
from aiohttp import web

from carrots.constants import DELTA_INDEX_ASSET_NAME
from carrots.domain.platforms import get_platform_info
from carrots.domain.version import clean_version, is_valid_version, versions_equal
from carrots.logger import get_logger
from carrots.web.keys import CONFIG_KEY, SERVICE_KEY
from carrots.web.page import (
    render_home_page,
    render_version_page,
    render_versions_page,
)

if TYPE_CHECKING:
    from carrots.core.service import LatestSummary, ReleaseService
    from carrots.domain import PlatformAsset, PlatformIdentifier

logger = get_logger(__name__)

routes = web.RouteTableDef()

ROBOTS_TXT = "User-agent: *\nDisallow: /download\nDisallow: /update\n"
UNAVAILABLE_REASON = "Failed to fetch latest releases"


def json_response(data: Any, status: int = 200) -> web.Response:
    """Build a JSON response encoded with orjson."""
    return web.Response(
        body=orjson.dumps(data),
        status=status,
        content_type="application/json",
        charset="utf-8",
    )


def base_url(request: web.Request) -> str:
    """Public address of this server, ending in "/".

    The scheme comes from X-Forwarded-Proto when a proxy sets it; local
    hosts are assumed to be plain http and everything else https.
    """
    host = request.host or ""
    scheme = request.headers.get("X-Forwarded-Proto")
    if not scheme:
        local = "localhost" in host or "[::]" in host
        scheme = "http" if local else "https"
    return f"{scheme}://{host}/"


def _service(request: web.Request) -> ReleaseService:
    return request.app[SERVICE_KEY]


async def _require_latest(request: web.Request) -> LatestSummary:
    latest = await _service(request).get_latest()
    if latest is None:
        raise web.HTTPInternalServerError(reason=UNAVAILABLE_REASON)
    return latest


def _require_platform(
    request: web.Request, latest: LatestSummary
) -> tuple[PlatformIdentifier, PlatformAsset]:
    """Resolve the platform token of the request to a served platform."""
    token = request.match_info["platform"]
    platform = _service(request).resolve_platform(token)
    if platform is None or platform not in latest.latest:
        raise web.HTTPBadRequest(reason="Invalid platform")
    return platform, latest.latest[platform]


@routes.get("/")
async def home(request: web.Request) -> web.Response:
    """Overview of the latest download per platform."""
    latest = await _require_latest(request)
    html = render_home_page(request.app[CONFIG_KEY], latest)
    return web.Response(text=html, content_type="text/html")


@routes.get("/versions")
async def versions(request: web.Request) -> web.Response:
    """List of every servable version."""
    entries = await _service(request).get_versions()
    if entries is None:
        raise web.HTTPInternalServerError(reason=UNAVAILABLE_REASON)
    html = render_versions_page(request.app[CONFIG_KEY], entries)
    return web.Response(text=html, content_type="text/html")


@routes.get("/versions/{version}")
async def version_page(request: web.Request) -> web.Response:
    """Downloads and notes of one version."""
    entries = await _service(request).get_versions()
    if entries is None:
        raise web.HTTPInternalServerError(reason=UNAVAILABLE_REASON)
    wanted = clean_version(request.match_info["version"])
    for entry in entries:
        if entry.version == wanted:
            html = render_version_page(request.app[CONFIG_KEY], entry)
            return web.Response(text=html, content_type="text/html")
    raise web.HTTPNotFound(reason="Unknown version")


@routes.get("/download/{platform}")
async def download_latest(request: web.Request) -> web.Response:
    """Redirect to the latest asset of a platform."""
    latest = await _require_latest(request)
    _, asset = _require_platform(request, latest)
    location = await _service(request).resolve_download_url(asset)
    raise web.HTTPFound(location)


@routes.get("/download/{platform}/{file}")
async def download_file(request: web.Request) -> web.Response:
    """Redirect to a platform asset chosen by version or filename."""
    latest = await _require_latest(request)
    platform, _ = _require_platform(request, latest)
    service = _service(request)

    file = request.match_info["file"]
    if is_valid_version(file):
        asset = await service.get_version(platform, file)
    else:
        asset = await service.find_asset(platform, file)
    if asset is None:
        raise web.HTTPNotFound(reason="Unknown file")
    location = await service.resolve_download_url(asset)
    raise web.HTTPFound(location)


@routes.get("/update/{platform}/{version}")
@routes.get("/update/{platform}/{version}/{file}")
async def update(request: web.Request) -> web.Response:
    """Update check for Electron and Squirrel clients.

    Any client version different from the latest is offered the latest
    release, so a server-side rollback also downgrades clients.
    """
    latest = await _require_latest(request)
    platform, asset = _require_platform(request, latest)

    client_version = request.match_info["version"]
    if not is_valid_version(client_version):
        raise web.HTTPBadRequest(reason="Invalid version")
    if versions_equal(client_version, asset.version):
        return web.Response(status=204)

    address = base_url(request)
    file = request.match_info.get("file")
    if file is not None and file.upper() == DELTA_INDEX_ASSET_NAME:
        patched = _service(request).patch_delta_index(asset, address)
        if patched is None:
            return web.Response(status=204)
        return web.Response(
            body=patched.encode("utf-8"),
            content_type="application/octet-stream",
        )

    logger.debug(
        "Offering %s %s to client on %s", platform, asset.version, client_version
    )
    return json_response(
        {
            "url": f"{address}download/{request.match_info['platform']}",
            "name": asset.version,
            "notes": asset.notes,
            "pub_date": asset.date,
        }
    )


@routes.get("/api/semver")
async def api_semver(request: web.Request) -> web.Response:
    """Representative latest version."""
    latest = await _require_latest(request)
    return json_response({"version": latest.version})


@routes.get("/api/latest")
async def api_latest(request: web.Request) -> web.Response:
    """Latest asset of every platform as JSON."""
    latest = await _require_latest(request)
    address = base_url(request)
    payload = []
    for platform in latest.platforms:
        asset = latest.latest[platform]
        info = get_platform_info(platform)
        payload.append(
            {
                "id": platform.value,
                "name": info.name,
                "platform": info.os,
                "os": info.os,
                "arch": info.arch,
                "ext": info.ext,
                "version": asset.version,
                "date": asset.date,
                "url": f"{address}download/{platform.value}",
                "size": asset.size,
            }
        )
    return json_response(payload)


@routes.get("/robots.txt")
async def robots(request: web.Request) -> web.Response:
    """Keep crawlers away from download and update endpoints."""
    return web.Response(text=ROBOTS_TXT, content_type="text/plain")
