"""Tests for release and asset models."""

import pytest

from carrots.domain.asset import PlatformAsset, bytes_to_megabytes
from carrots.domain.release import ReleaseAsset, ReleaseMetadata
from tests.factories import make_asset_payload, make_release, make_release_payload


class TestReleaseAsset:
    """Test ReleaseAsset parsing."""

    def test_from_api_response(self) -> None:
        """Test a complete asset payload is parsed."""
        asset = ReleaseAsset.from_api_response(
            make_asset_payload("app-win32-x64.exe", size=42)
        )
        assert asset is not None
        assert asset.name == "app-win32-x64.exe"
        assert asset.size == 42
        assert asset.url.startswith("https://api.github.com/")
        assert asset.browser_download_url.endswith("/app-win32-x64.exe")

    @pytest.mark.parametrize("missing", ["name", "browser_download_url"])
    def test_missing_required_field(self, missing) -> None:
        """Test assets without a name or download URL are skipped."""
        payload = make_asset_payload("app.zip")
        del payload[missing]
        assert ReleaseAsset.from_api_response(payload) is None

    def test_invalid_size(self) -> None:
        """Test an unparsable size rejects the asset."""
        payload = make_asset_payload("app.zip")
        payload["size"] = "big"
        assert ReleaseAsset.from_api_response(payload) is None

    def test_delta_index_detection(self) -> None:
        """Test only the exact reserved name is a delta index."""
        index = ReleaseAsset.from_api_response(make_asset_payload("RELEASES"))
        other = ReleaseAsset.from_api_response(make_asset_payload("releases"))
        assert index.is_delta_index
        assert not other.is_delta_index


class TestReleaseMetadata:
    """Test ReleaseMetadata parsing and eligibility."""

    def test_from_api_response(self) -> None:
        """Test release fields are mapped."""
        release = make_release("v1.2.3", ["app-win32-x64.exe", "RELEASES"])
        assert release.tag == "v1.2.3"
        assert release.version == "1.2.3"
        assert release.name == "Release v1.2.3"
        assert release.notes == "Release notes"
        assert release.published_at == "2024-03-12T10:00:00Z"
        assert len(release.assets) == 2

    def test_malformed_assets_are_skipped(self) -> None:
        """Test non-dict and incomplete assets are dropped."""
        payload = make_release_payload("v1.0.0", ["app.zip"])
        payload["assets"].extend(["junk", {"name": "no-url.zip"}])
        release = ReleaseMetadata.from_api_response(payload)
        assert [a.name for a in release.assets] == ["app.zip"]

    def test_missing_name_falls_back_to_tag(self) -> None:
        """Test an unnamed release is titled by its tag."""
        payload = make_release_payload("v1.0.0")
        payload["name"] = None
        payload["body"] = None
        release = ReleaseMetadata.from_api_response(payload)
        assert release.name == "v1.0.0"
        assert release.notes == ""

    @pytest.mark.parametrize(
        ("tag", "kwargs"),
        [
            ("v1.0.0", {"draft": True}),
            ("v1.0.0", {"prerelease": True}),
            ("not-a-version", {}),
            ("", {}),
        ],
    )
    def test_not_servable(self, tag, kwargs) -> None:
        """Test drafts, prereleases and invalid tags are excluded."""
        assert not make_release(tag, **kwargs).is_servable

    def test_servable(self) -> None:
        """Test a stable, valid release is servable."""
        assert make_release("v1.0.0").is_servable

    def test_delta_index_and_installable_assets(self) -> None:
        """Test the delta index is separated from installable assets."""
        release = make_release(
            "v1.0.0", ["app-win32-x64.exe", "RELEASES", "app-1.0.0-full.nupkg"]
        )
        assert release.delta_index is not None
        assert release.delta_index.name == "RELEASES"
        assert [a.name for a in release.installable_assets] == [
            "app-win32-x64.exe",
            "app-1.0.0-full.nupkg",
        ]

    def test_without_delta_index(self) -> None:
        """Test releases without an index report None."""
        assert make_release("v1.0.0", ["app.zip"]).delta_index is None


class TestPlatformAsset:
    """Test the per-platform projection."""

    @pytest.mark.parametrize(
        ("size", "expected"),
        [(2_500_000, 2.5), (0, 0.0), (1_234_567, 1.2), (1_250_001, 1.3)],
    )
    def test_bytes_to_megabytes(self, size, expected) -> None:
        """Test sizes are rounded to one decimal megabyte."""
        assert bytes_to_megabytes(size) == expected

    def test_from_release(self) -> None:
        """Test the projection carries release and asset fields."""
        release = make_release(
            "v1.2.3",
            [make_asset_payload("app-darwin-arm64.zip", size=2_500_000)],
        )
        asset = PlatformAsset.from_release(release, release.assets[0])
        assert asset.version == "1.2.3"
        assert asset.tag == "v1.2.3"
        assert asset.filename == "app-darwin-arm64.zip"
        assert asset.size == 2.5
        assert asset.date == release.published_at
        assert asset.api_url == release.assets[0].url
        assert asset.delta_index is None

    def test_with_delta_index_returns_copy(self) -> None:
        """Test attaching an index leaves the original untouched."""
        release = make_release("v1.0.0", ["app-win32-x64.exe"])
        asset = PlatformAsset.from_release(release, release.assets[0])
        patched = asset.with_delta_index("abc app.nupkg 1")
        assert patched.delta_index == "abc app.nupkg 1"
        assert asset.delta_index is None

    def test_to_dict_hides_internal_fields(self) -> None:
        """Test the authenticated URL and index are not exposed."""
        release = make_release("v1.0.0", ["app-win32-x64.exe"])
        asset = PlatformAsset.from_release(release, release.assets[0])
        data = asset.with_delta_index("content").to_dict()
        assert "api_url" not in data
        assert "delta_index" not in data
        assert "alternates" not in data
        assert data["version"] == "1.0.0"

    def test_displacing_keeps_same_release_assets(self) -> None:
        """Test a displaced asset of the same release stays findable."""
        release = make_release(
            "v1.0.0", ["app-1.0.0-full.nupkg", "app-1.0.0-delta.nupkg"]
        )
        full, delta = (
            PlatformAsset.from_release(release, asset) for asset in release.assets
        )

        entry = delta.displacing(full)

        assert entry.filename == "app-1.0.0-delta.nupkg"
        assert entry.find_file("app-1.0.0-full.nupkg") == full
        assert entry.find_file("app-1.0.0-delta.nupkg") is entry
        assert entry.find_file("app-0.9.0-full.nupkg") is None

    def test_displacing_drops_other_releases(self) -> None:
        """Test an asset of another release is replaced outright."""
        old = make_release("1.0.0", ["app-win32-x64.exe"])
        new = make_release("v1.0.0", ["app-win32-x64.exe"])
        previous = PlatformAsset.from_release(old, old.assets[0])
        current = PlatformAsset.from_release(new, new.assets[0])

        assert current.displacing(previous) is current
