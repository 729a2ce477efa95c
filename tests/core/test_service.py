"""Tests for the release query service."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from carrots.core.fetcher import attach_delta_indexes, build_history
from carrots.core.service import ReleaseService, latest_of
from carrots.domain.platforms import PlatformIdentifier
from carrots.exceptions import UpstreamError
from tests.factories import make_asset_payload, make_release

P = PlatformIdentifier

DELTA_INDEX = (
    "0A1B2C3D4E5F app-1.2.0-full.nupkg 1024\n"
    "ABCDEF012345 app-1.2.0-delta.nupkg 256\n"
)


def make_cache(history):
    """Provide a mock cache returning ``history``."""
    cache = MagicMock()
    cache.get = AsyncMock(return_value=history)
    return cache


@pytest.fixture
def history():
    """Three stable versions of a windows and mac app."""
    releases = [
        make_release(
            "v1.1.0",
            ["app-win32-x64.exe", "app-darwin-x64.zip"],
            published_at="2024-02-01T00:00:00Z",
        ),
        make_release(
            "v1.2.0",
            ["app-win32-x64.exe", "app-1.2.0-full.nupkg", "app-1.2.0-delta.nupkg"],
            published_at="2024-03-01T00:00:00Z",
        ),
        make_release(
            "v1.0.0",
            ["app-win32-x64.exe", "app-darwin-x64.zip"],
            published_at="2024-01-01T00:00:00Z",
        ),
    ]
    return attach_delta_indexes(build_history(releases), {"v1.2.0": DELTA_INDEX})


@pytest.fixture
def service(history):
    """Provide a service over the sample history."""
    return ReleaseService(make_cache(history))


class TestGetLatest:
    """Test get_latest()."""

    @pytest.mark.asyncio
    async def test_highest_version_wins(self, service) -> None:
        """Test the latest entry is chosen by semver, not by order."""
        summary = await service.get_latest()
        assert summary.latest[P.WIN32_X64].version == "1.2.0"
        assert summary.latest[P.DARWIN_X64].version == "1.1.0"

    @pytest.mark.asyncio
    async def test_platforms_are_sorted(self, service) -> None:
        """Test the platform list is in identifier order."""
        summary = await service.get_latest()
        assert summary.platforms == sorted(summary.platforms)
        assert set(summary.platforms) == {P.WIN32_X64, P.DARWIN_X64, P.NUPKG}

    @pytest.mark.asyncio
    async def test_representative_version_is_deterministic(self, service) -> None:
        """Test the header version comes from the smallest identifier."""
        summary = await service.get_latest()
        assert summary.platforms[0] is P.DARWIN_X64
        assert summary.version == "1.1.0"
        assert summary.date == "2024-02-01T00:00:00Z"

    @pytest.mark.asyncio
    async def test_no_data(self) -> None:
        """Test unavailable data is reported as None."""
        assert await ReleaseService(make_cache(None)).get_latest() is None
        assert await ReleaseService(make_cache({})).get_latest() is None

    @pytest.mark.asyncio
    async def test_end_to_end_scenario(self) -> None:
        """Test a mac and windows asset of v1.2.3 are both latest."""
        release = make_release(
            "v1.2.3",
            [
                make_asset_payload("app-darwin-arm64.zip", size=2_500_000),
                make_asset_payload("app-win32-x64.exe", asset_id=2),
            ],
        )
        service = ReleaseService(make_cache(build_history([release])))

        summary = await service.get_latest()

        assert set(summary.platforms) == {P.DARWIN_ARM64, P.WIN32_X64}
        assert {a.version for a in summary.latest.values()} == {"1.2.3"}
        assert summary.latest[P.DARWIN_ARM64].size == 2.5


class TestGetVersion:
    """Test get_version()."""

    @pytest.mark.asyncio
    async def test_exact_lookup(self, service) -> None:
        """Test a version is found with or without the v prefix."""
        assert (await service.get_version(P.WIN32_X64, "1.1.0")).version == "1.1.0"
        assert (await service.get_version(P.WIN32_X64, "v1.0.0")).version == "1.0.0"

    @pytest.mark.asyncio
    async def test_missing_version(self, service) -> None:
        """Test an absent version is None."""
        assert await service.get_version(P.DARWIN_X64, "1.2.0") is None
        assert await service.get_version(P.WIN32_X64, "garbage") is None

    @pytest.mark.asyncio
    async def test_missing_platform(self, service) -> None:
        """Test a platform without releases is None."""
        assert await service.get_version(P.SNAP_X64, "1.0.0") is None


class TestGetVersions:
    """Test get_versions()."""

    @pytest.mark.asyncio
    async def test_newest_first_with_all_platforms(self, service) -> None:
        """Test versions are grouped and sorted by precedence."""
        versions = await service.get_versions()
        assert [v.version for v in versions] == ["1.2.0", "1.1.0", "1.0.0"]
        assert set(versions[1].assets) == {P.WIN32_X64, P.DARWIN_X64}
        assert versions[0].date == "2024-03-01T00:00:00Z"

    @pytest.mark.asyncio
    async def test_no_data(self) -> None:
        """Test unavailable data is reported as None."""
        assert await ReleaseService(make_cache(None)).get_versions() is None


class TestFindAsset:
    """Test find_asset()."""

    @pytest.mark.asyncio
    async def test_find_by_filename(self, service) -> None:
        """Test a delta package is found by its exact name."""
        asset = await service.find_asset(P.NUPKG, "app-1.2.0-delta.nupkg")
        assert asset.filename == "app-1.2.0-delta.nupkg"

    @pytest.mark.asyncio
    async def test_displaced_package_is_still_found(self, service) -> None:
        """Test the full package sharing a version with the delta is served."""
        asset = await service.find_asset(P.NUPKG, "app-1.2.0-full.nupkg")
        assert asset.filename == "app-1.2.0-full.nupkg"
        assert asset.version == "1.2.0"

    @pytest.mark.asyncio
    async def test_duplicate_filename_prefers_newest(self, service) -> None:
        """Test a filename reused across versions resolves to the newest."""
        asset = await service.find_asset(P.WIN32_X64, "app-win32-x64.exe")
        assert asset.version == "1.2.0"

    @pytest.mark.asyncio
    async def test_unknown_filename(self, service) -> None:
        """Test an unknown file is None."""
        assert await service.find_asset(P.NUPKG, "other.nupkg") is None


class TestPatchDeltaIndex:
    """Test patch_delta_index()."""

    @pytest.mark.asyncio
    async def test_rewrites_package_urls(self, service) -> None:
        """Test nupkg lines point at this server's download proxy."""
        asset = await service.get_version(P.WIN32_X64, "1.2.0")

        patched = service.patch_delta_index(asset, "https://updates.example.com/")

        assert patched == (
            "0A1B2C3D4E5F https://updates.example.com/download/nupkg/"
            "app-1.2.0-full.nupkg 1024\n"
            "ABCDEF012345 https://updates.example.com/download/nupkg/"
            "app-1.2.0-delta.nupkg 256\n"
        )

    @pytest.mark.asyncio
    async def test_without_index(self, service) -> None:
        """Test assets without an index yield None."""
        asset = await service.get_version(P.WIN32_X64, "1.1.0")
        assert service.patch_delta_index(asset, "http://localhost/") is None


class TestResolveDownloadUrl:
    """Test resolve_download_url()."""

    @pytest.fixture
    def api_client(self):
        """Provide an authenticated mock API client."""
        client = MagicMock()
        client.auth_manager.has_token = True
        client.resolve_download_location = AsyncMock(
            return_value="https://objects.githubusercontent.com/signed"
        )
        return client

    @pytest.mark.asyncio
    async def test_public_url_without_client(self, service) -> None:
        """Test the public URL is used without an API client."""
        asset = await service.get_version(P.WIN32_X64, "1.2.0")
        assert await service.resolve_download_url(asset) == asset.url

    @pytest.mark.asyncio
    async def test_signed_url_with_token(self, history, api_client) -> None:
        """Test the signed location is preferred when authenticated."""
        service = ReleaseService(make_cache(history), api_client)
        asset = await service.get_version(P.WIN32_X64, "1.2.0")

        url = await service.resolve_download_url(asset)

        assert url == "https://objects.githubusercontent.com/signed"
        api_client.resolve_download_location.assert_awaited_once_with(
            asset.api_url
        )

    @pytest.mark.asyncio
    async def test_public_url_without_token(self, history, api_client) -> None:
        """Test unauthenticated servers never sign."""
        api_client.auth_manager.has_token = False
        service = ReleaseService(make_cache(history), api_client)
        asset = await service.get_version(P.WIN32_X64, "1.2.0")

        assert await service.resolve_download_url(asset) == asset.url
        api_client.resolve_download_location.assert_not_called()

    @pytest.mark.asyncio
    async def test_falls_back_on_upstream_error(
        self, history, api_client
    ) -> None:
        """Test a signing failure falls back to the public URL."""
        api_client.resolve_download_location.side_effect = UpstreamError("down")
        service = ReleaseService(make_cache(history), api_client)
        asset = await service.get_version(P.WIN32_X64, "1.2.0")

        assert await service.resolve_download_url(asset) == asset.url

    @pytest.mark.asyncio
    async def test_falls_back_without_redirect(self, history, api_client) -> None:
        """Test a missing redirect falls back to the public URL."""
        api_client.resolve_download_location.return_value = None
        service = ReleaseService(make_cache(history), api_client)
        asset = await service.get_version(P.WIN32_X64, "1.2.0")

        assert await service.resolve_download_url(asset) == asset.url


def test_latest_of_empty() -> None:
    """Test latest_of() on an empty history."""
    assert latest_of({}) is None


def test_resolve_platform() -> None:
    """Test the service exposes token resolution."""
    assert ReleaseService.resolve_platform("Darwin_ARM64") is P.DARWIN_ARM64
    assert ReleaseService.resolve_platform("beos") is None
