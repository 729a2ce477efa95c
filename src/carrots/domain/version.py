"""Semantic version validation and comparison utilities.

Release tags are only served when they are valid SemVer 2.0 versions.
Comparison follows SemVer precedence rather than PEP 440, since the
published desktop apps version themselves with npm-style tags.
"""

from functools import cmp_to_key

from semver import Version


def parse_version(tag: str | None) -> Version | None:
    """Parse a tag with an optional leading "v" or "=" into a Version.

    Returns:
        Parsed version, or None if the tag is not valid SemVer

    """
    if not tag:
        return None

    tag = tag.strip()
    if tag[:1] in ("v", "="):
        tag = tag[1:]
    try:
        return Version.parse(tag)
    except ValueError:
        return None


def clean_version(tag: str | None) -> str | None:
    """Return the normalized version string of a tag, or None if invalid.

    Build metadata is dropped, so tags that only differ in build
    metadata name the same version.

    Examples:
        >>> clean_version("v1.2.3")
        '1.2.3'
        >>> clean_version(" =2.0.0-beta.1+sha.5 ")
        '2.0.0-beta.1'
        >>> clean_version("not-a-version") is None
        True

    """
    version = parse_version(tag)
    if version is None:
        return None
    return str(version.replace(build=None))


def is_valid_version(tag: str | None) -> bool:
    """Check whether a tag is a valid semantic version."""
    return parse_version(tag) is not None


def compare_versions(version1: str, version2: str) -> int:
    """Compare two semantic version strings.

    Returns -1 if version1 < version2, 0 if equal, 1 if version1 > version2.
    Build metadata does not take part in precedence.

    Raises:
        ValueError: If either argument is not a valid semantic version

    """
    parsed1 = parse_version(version1)
    parsed2 = parse_version(version2)
    if parsed1 is None or parsed2 is None:
        msg = f"Invalid semantic version: {version1!r} or {version2!r}"
        raise ValueError(msg)
    return parsed1.compare(parsed2)


def versions_equal(version1: str, version2: str) -> bool:
    """Check two versions for equal precedence; invalid input is unequal."""
    try:
        return compare_versions(version1, version2) == 0
    except ValueError:
        return False


version_key = cmp_to_key(compare_versions)
