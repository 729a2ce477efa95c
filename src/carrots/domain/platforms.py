"""Platform taxonomy for release assets.

Every platform identifier maps to a static PlatformInfo record with its
display name, OS, CPU architecture, canonical extension, request aliases
and ordered filename patterns.

Patterns are evaluated against normalized filenames (lowercase,
underscores replaced by hyphens). Within a record they go from
architecture-tagged to "universal" builds; across the table, specific
records are listed before permissive ones.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum


class PlatformIdentifier(StrEnum):
    """Canonical platform identifiers served by the update server."""

    APPIMAGE_ARM64 = "appimage-arm64"
    APPIMAGE_ARM = "appimage-arm"
    APPIMAGE_X64 = "appimage-x64"
    DARWIN_ARM64 = "darwin-arm64"
    DARWIN_X64 = "darwin-x64"
    DMG_ARM64 = "dmg-arm64"
    DMG_X64 = "dmg-x64"
    DEBIAN_ARM64 = "deb-arm64"
    DEBIAN_ARM = "deb-arm"
    DEBIAN_X64 = "deb-x64"
    FEDORA_ARM64 = "rpm-arm64"
    FEDORA_ARM = "rpm-arm"
    FEDORA_X64 = "rpm-x64"
    WIN32_ARM64 = "win32-arm64"
    WIN32_IA32 = "win32-ia32"
    WIN32_X64 = "win32-x64"
    NUPKG = "nupkg"
    SNAP_ARM64 = "snap-arm64"
    SNAP_ARM = "snap-arm"
    SNAP_X64 = "snap-x64"


@dataclass(slots=True, frozen=True)
class PlatformInfo:
    """Static description of a platform.

    Attributes:
        name: Human readable name shown on download pages
        os: Operating system ("darwin", "win32", "linux")
        arch: CPU architecture ("x64", "arm64", "arm", "ia32")
        ext: Canonical file extension
        aliases: Normalized request tokens accepted for this platform
        file_patterns: Ordered, compiled filename patterns

    """

    name: str
    os: str
    arch: str
    ext: str
    aliases: tuple[str, ...]
    file_patterns: tuple[re.Pattern[str], ...]


def _patterns(*expressions: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(expr, re.IGNORECASE) for expr in expressions)


# Order is important for file to platform matching
PLATFORMS: dict[PlatformIdentifier, PlatformInfo] = {
    PlatformIdentifier.DMG_ARM64: PlatformInfo(
        name="macOS Apple Silicon",
        os="darwin",
        arch="arm64",
        ext="dmg",
        aliases=("dmg-arm64",),
        file_patterns=_patterns(
            r".*darwin.*arm64.*\.dmg$",
            r".*mac.*arm64.*\.dmg$",
            r".*osx.*arm64.*\.dmg$",
            r".*darwin.*universal.*\.dmg$",
            r".*mac.*universal.*\.dmg$",
            r".*osx.*universal.*\.dmg$",
        ),
    ),
    PlatformIdentifier.DMG_X64: PlatformInfo(
        name="macOS Intel",
        os="darwin",
        arch="x64",
        ext="dmg",
        aliases=("dmg",),
        file_patterns=_patterns(
            r".*darwin.*x64.*\.dmg$",
            r".*mac.*x64.*\.dmg$",
            r".*osx.*x64.*\.dmg$",
            r".*darwin.*universal.*\.dmg$",
            r".*mac.*universal.*\.dmg$",
            r".*osx.*universal.*\.dmg$",
        ),
    ),
    PlatformIdentifier.DARWIN_ARM64: PlatformInfo(
        name="macOS Apple Silicon",
        os="darwin",
        arch="arm64",
        ext="zip",
        aliases=("darwin-arm64", "mac-arm64", "macos-arm64", "osx-arm64"),
        file_patterns=_patterns(
            r".*darwin.*arm64.*\.zip$",
            r".*mac.*arm64.*\.zip$",
            r".*osx.*arm64.*\.zip$",
            r".*darwin.*universal.*\.zip$",
            r".*mac.*universal.*\.zip$",
            r".*osx.*universal.*\.zip$",
        ),
    ),
    PlatformIdentifier.DARWIN_X64: PlatformInfo(
        name="macOS Intel",
        os="darwin",
        arch="x64",
        ext="zip",
        aliases=("darwin", "mac", "macos", "osx"),
        file_patterns=_patterns(
            r".*darwin.*x64.*\.zip$",
            r".*mac.*x64.*\.zip$",
            r".*osx.*x64.*\.zip$",
            r".*darwin.*universal.*\.zip$",
            r".*mac.*universal.*\.zip$",
            r".*osx.*universal.*\.zip$",
        ),
    ),
    PlatformIdentifier.WIN32_IA32: PlatformInfo(
        name="Windows 32-bit",
        os="win32",
        arch="ia32",
        ext="exe",
        aliases=("x86",),
        file_patterns=_patterns(r".*win32.*ia32.*\.exe$"),
    ),
    PlatformIdentifier.WIN32_ARM64: PlatformInfo(
        name="Windows ARM",
        os="win32",
        arch="arm64",
        ext="exe",
        aliases=(),
        file_patterns=_patterns(r".*win32.*arm64.*\.exe$"),
    ),
    PlatformIdentifier.WIN32_X64: PlatformInfo(
        name="Windows 64-bit",
        os="win32",
        arch="x64",
        ext="exe",
        aliases=("exe", "win", "win32", "windows", "win64", "x64"),
        file_patterns=_patterns(r".*win32.*x64.*\.exe$"),
    ),
    PlatformIdentifier.NUPKG: PlatformInfo(
        name="Windows Update",
        os="win32",
        arch="x64",
        ext="nupkg",
        aliases=(),
        file_patterns=_patterns(r".*\.nupkg$"),
    ),
    PlatformIdentifier.APPIMAGE_ARM64: PlatformInfo(
        name="Linux AppImage aarch64",
        os="linux",
        arch="arm64",
        ext="AppImage",
        aliases=("appimage-arm64", "linux-arm64"),
        file_patterns=_patterns(
            r".*arm64.*\.appimage$",
            r".*aarch64.*\.appimage$",
        ),
    ),
    PlatformIdentifier.APPIMAGE_X64: PlatformInfo(
        name="Linux AppImage x86_64",
        os="linux",
        arch="x64",
        ext="AppImage",
        aliases=("appimage", "linux"),
        file_patterns=_patterns(
            r".*x64.*\.appimage$",
            r".*amd64.*\.appimage$",
            r".*x86-64.*\.appimage$",
        ),
    ),
    PlatformIdentifier.APPIMAGE_ARM: PlatformInfo(
        name="Linux AppImage armhf",
        os="linux",
        arch="arm",
        ext="AppImage",
        aliases=("appimage-armhf",),
        file_patterns=_patterns(
            r".*armhf.*\.appimage$",
            r".*armv7l.*\.appimage$",
            r".*armv7hl.*\.appimage$",
        ),
    ),
    PlatformIdentifier.DEBIAN_ARM64: PlatformInfo(
        name="Debian aarch64",
        os="linux",
        arch="arm64",
        ext="deb",
        aliases=("deb-arm64", "debian-arm64"),
        file_patterns=_patterns(r".*arm64.*\.deb$", r".*aarch64.*\.deb$"),
    ),
    PlatformIdentifier.DEBIAN_X64: PlatformInfo(
        name="Debian x86_64",
        os="linux",
        arch="x64",
        ext="deb",
        aliases=("deb", "debian"),
        file_patterns=_patterns(
            r".*x64.*\.deb$",
            r".*amd64.*\.deb$",
            r".*x86-64.*\.deb$",
        ),
    ),
    PlatformIdentifier.DEBIAN_ARM: PlatformInfo(
        name="Debian armhf",
        os="linux",
        arch="arm",
        ext="deb",
        aliases=("deb-armhf", "debian-armhf"),
        file_patterns=_patterns(
            r".*armhf.*\.deb$",
            r".*armv7l.*\.deb$",
            r".*armv7hl.*\.deb$",
        ),
    ),
    PlatformIdentifier.FEDORA_ARM64: PlatformInfo(
        name="Fedora aarch64",
        os="linux",
        arch="arm64",
        ext="rpm",
        aliases=("rpm-arm64",),
        file_patterns=_patterns(r".*arm64.*\.rpm$", r".*aarch64.*\.rpm$"),
    ),
    PlatformIdentifier.FEDORA_X64: PlatformInfo(
        name="Fedora x86_64",
        os="linux",
        arch="x64",
        ext="rpm",
        aliases=("fedora", "rpm"),
        file_patterns=_patterns(
            r".*x64.*\.rpm$",
            r".*amd64.*\.rpm$",
            r".*x86-64.*\.rpm$",
        ),
    ),
    PlatformIdentifier.FEDORA_ARM: PlatformInfo(
        name="Fedora armhf",
        os="linux",
        arch="arm",
        ext="rpm",
        aliases=("rpm-armhf",),
        file_patterns=_patterns(
            r".*armhf.*\.rpm$",
            r".*armv7l.*\.rpm$",
            r".*armv7hl.*\.rpm$",
        ),
    ),
    PlatformIdentifier.SNAP_ARM64: PlatformInfo(
        name="Snap aarch64",
        os="linux",
        arch="arm64",
        ext="snap",
        aliases=("snap-arm64",),
        file_patterns=_patterns(r".*arm64.*\.snap$", r".*aarch64.*\.snap$"),
    ),
    PlatformIdentifier.SNAP_X64: PlatformInfo(
        name="Snap x86_64",
        os="linux",
        arch="x64",
        ext="snap",
        aliases=("snap",),
        file_patterns=_patterns(
            r".*x64.*\.snap$",
            r".*amd64.*\.snap$",
            r".*x86-64.*\.snap$",
        ),
    ),
    PlatformIdentifier.SNAP_ARM: PlatformInfo(
        name="Snap armhf",
        os="linux",
        arch="arm",
        ext="snap",
        aliases=("snap-armhf",),
        file_patterns=_patterns(
            r".*armhf.*\.snap$",
            r".*armv7l.*\.snap$",
            r".*armv7hl.*\.snap$",
        ),
    ),
}

# Platforms whose entries receive the Squirrel.Windows delta index
WINDOWS_FAMILY: frozenset[PlatformIdentifier] = frozenset(
    {
        PlatformIdentifier.WIN32_X64,
        PlatformIdentifier.WIN32_IA32,
        PlatformIdentifier.WIN32_ARM64,
        PlatformIdentifier.NUPKG,
    }
)


def _check_taxonomy() -> None:
    """Fail at import time when an identifier has no PlatformInfo."""
    missing = set(PlatformIdentifier) - set(PLATFORMS)
    if missing:
        names = ", ".join(sorted(missing))
        msg = f"Platform table is missing entries for: {names}"
        raise RuntimeError(msg)


_check_taxonomy()


def get_platform_info(platform: PlatformIdentifier) -> PlatformInfo:
    """Return the static description of a platform."""
    return PLATFORMS[platform]


def is_windows_family(platform: PlatformIdentifier) -> bool:
    """Check whether a platform receives delta-index payloads."""
    return platform in WINDOWS_FAMILY
