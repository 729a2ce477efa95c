"""HTML rendering for the download pages.

Pure functions: they receive already computed release data and return a
complete HTML document. All dynamic text is escaped.
"""

from __future__ import annotations

from datetime import datetime
from html import escape
from typing import TYPE_CHECKING

from carrots.constants import GITHUB_WEB_URL
from carrots.domain.platforms import PLATFORMS
from carrots.utils.datetime_utils import format_absolute, format_relative

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from carrots.core.service import LatestSummary, VersionSummary
    from carrots.domain import PlatformAsset, PlatformIdentifier
    from carrots.types import ServerConfig

_STYLE = """
body { font-family: system-ui, -apple-system, sans-serif; margin: 0;
       background: #0d0d0d; color: #fff; font-size: .875rem; line-height: 1.5; }
main { padding: 2rem 1.5rem; margin: 0 auto; max-width: 768px;
       display: flex; flex-direction: column; gap: 1rem; }
h1 { font-size: 1.25rem; font-weight: 700; margin: 0; }
h2 { font-size: 1rem; font-weight: 500; color: #d9d9d9; margin: 0; }
a { color: #3ddc84; text-decoration: none; }
table { width: 100%; border-collapse: collapse; }
th, td { padding: .75rem 1rem; text-align: left;
         border-bottom: 1px solid #262626; }
th { font-size: .75rem; font-weight: 500; text-transform: uppercase; }
.muted { opacity: .5; }
.badge { padding: .1rem .6rem; border-radius: 9999px; font-size: .75rem;
         background: #1b4d2e; color: #7ce6a6; text-transform: uppercase; }
.notes { background: #1a1a1a; border: 1px solid #4d4d4d; border-radius: .5rem;
         padding: 1.5rem; white-space: pre-wrap; word-break: break-word; }
"""


def _layout(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="utf-8">'
        '<meta name="viewport" content="width=device-width, initial-scale=1">'
        f"<title>{escape(title)}</title><style>{_STYLE}</style></head>"
        f"<body><main>{body}</main></body></html>"
    )


def _repository_title(config: ServerConfig) -> str:
    return f"{config['account']}/{config['repository']}"


def _describe_date(date: str, now: datetime | None) -> str:
    absolute = format_absolute(date)
    if not absolute:
        return ""
    relative = format_relative(date, now)
    return f'<time datetime="{escape(date)}">{escape(absolute)}</time> ({escape(relative)})'


def _download_table(
    assets: dict[PlatformIdentifier, PlatformAsset],
    link: Callable[[PlatformIdentifier, PlatformAsset], str],
) -> str:
    """Render assets as a table grouped by OS and file type."""
    groups: dict[tuple[str, str], dict[str, tuple[PlatformIdentifier, PlatformAsset]]] = {}
    architectures: set[str] = set()
    for platform, asset in assets.items():
        info = PLATFORMS[platform]
        groups.setdefault((info.os, info.ext), {})[info.arch] = (platform, asset)
        architectures.add(info.arch)

    columns = sorted(architectures)
    header = "".join(f"<th>{escape(arch)}</th>" for arch in columns)
    rows = []
    for (os_name, ext), by_arch in sorted(groups.items()):
        cells = []
        for arch in columns:
            entry = by_arch.get(arch)
            if entry is None:
                cells.append("<td></td>")
                continue
            platform, asset = entry
            cells.append(
                f'<td><a href="{escape(link(platform, asset))}" '
                f'title="{escape(asset.filename)}">{escape(ext)}</a> '
                f'<span class="muted">{asset.size} MB</span></td>'
            )
        rows.append(
            f"<tr><td>{escape(os_name)}</td>{''.join(cells)}</tr>"
        )
    return (
        f"<table><tr><th>Platform</th>{header}</tr>{''.join(rows)}</table>"
    )


def render_home_page(
    config: ServerConfig,
    summary: LatestSummary,
    now: datetime | None = None,
) -> str:
    """Render the overview of the latest download per platform.

    Args:
        config: Server configuration (repository coordinates)
        summary: Latest asset per platform
        now: Reference time for relative dates

    Returns:
        HTML document

    """
    title = _repository_title(config)
    github = f"{GITHUB_WEB_URL}/{title}"
    body = (
        f"<div><h1>{escape(title)}</h1>"
        f'<h2>Latest Version <span class="muted">({escape(summary.version)})</span></h2>'
        f"<p>{_describe_date(summary.date, now)}</p></div>"
        + _download_table(
            summary.latest, lambda platform, _asset: f"/download/{platform}"
        )
        + '<p><a href="/versions">View all versions</a> · '
        f'<a href="{escape(github)}/releases/tag/{escape(summary.version)}">Release notes</a> · '
        f'<a href="{escape(github)}">GitHub</a></p>'
    )
    return _layout(title, body)


def render_versions_page(
    config: ServerConfig,
    versions: Iterable[VersionSummary],
    now: datetime | None = None,
) -> str:
    """Render the list of every servable version, newest first."""
    title = _repository_title(config)
    rows = []
    for index, entry in enumerate(versions):
        badge = ' <span class="badge">latest</span>' if index == 0 else ""
        rows.append(
            f'<tr><td><a href="/versions/{escape(entry.version)}">'
            f"{escape(entry.version)}</a>{badge}</td>"
            f"<td>{len(entry.assets)} platforms</td>"
            f"<td>{_describe_date(entry.date, now)}</td></tr>"
        )
    body = (
        f'<div><p><a href="/">Back to latest version</a></p>'
        f"<h1>{escape(title)}</h1><h2>All Versions</h2></div>"
        "<table><tr><th>Version</th><th>Platforms</th><th>Release Date</th></tr>"
        f"{''.join(rows)}</table>"
    )
    return _layout(f"{title} versions", body)


def render_version_page(
    config: ServerConfig,
    version: VersionSummary,
    now: datetime | None = None,
) -> str:
    """Render the downloads and release notes of one version."""
    title = _repository_title(config)
    notes = (
        f'<div class="notes">{escape(version.notes)}</div>'
        if version.notes
        else ""
    )
    body = (
        f'<div><p><a href="/versions">Back to all versions</a></p>'
        f"<h1>{escape(title)}</h1><h2>Version {escape(version.version)}</h2>"
        f"<p>{_describe_date(version.date, now)}</p></div>"
        + _download_table(
            version.assets,
            lambda platform, asset: f"/download/{platform}/{asset.version}",
        )
        + notes
    )
    return _layout(f"{title} {version.version}", body)
