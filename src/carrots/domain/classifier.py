"""Filename and request-token classification against the platform table."""

from __future__ import annotations

from carrots.domain.platforms import PLATFORMS, PlatformIdentifier

# Architecture marker assumed for filenames that carry none
FALLBACK_ARCH_MARKER = "-x64"


def normalize(value: str) -> str:
    """Lowercase a filename or token and replace underscores with hyphens."""
    return value.strip().lower().replace("_", "-")


def _match(normalized_name: str) -> frozenset[PlatformIdentifier]:
    matches = [
        platform
        for platform, info in PLATFORMS.items()
        if any(p.match(normalized_name) for p in info.file_patterns)
    ]
    return frozenset(matches)


def _with_fallback_arch(normalized_name: str) -> str | None:
    """Insert the fallback architecture marker before the extension.

    Returns None when the name has no extension to anchor on.
    """
    stem, dot, ext = normalized_name.rpartition(".")
    if not dot or not stem:
        return None
    return f"{stem}{FALLBACK_ARCH_MARKER}.{ext}"


def classify(filename: str) -> frozenset[PlatformIdentifier]:
    """Return every platform whose patterns match an asset filename.

    A universal macOS build legitimately matches both the arm64 and the
    x64 entries. Names without an architecture are retried once as x64
    builds; names that still match nothing yield an empty set.

    Args:
        filename: Raw asset filename from the release listing

    Returns:
        Matching platform identifiers (possibly empty)

    """
    normalized = normalize(filename)
    platforms = _match(normalized)
    if platforms:
        return platforms

    fallback = _with_fallback_arch(normalized)
    if fallback is None:
        return platforms
    return _match(fallback)


def resolve_platform(token: str) -> PlatformIdentifier | None:
    """Resolve a request token to a canonical platform identifier.

    Accepts identifiers and aliases in any case, with underscores or
    hyphens (``Darwin_ARM64``, ``darwin-arm64`` and ``darwin_arm64`` are
    the same platform).

    Args:
        token: Platform token taken from a request path

    Returns:
        Platform identifier, or None for unrecognized tokens

    """
    sanitized = normalize(token)
    for platform, info in PLATFORMS.items():
        if platform.value == sanitized or sanitized in info.aliases:
            return platform
    return None
