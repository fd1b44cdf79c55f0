"""Tests for the remote version probe."""

import httpx
import pytest

from surreal_engine.engine.http import HttpEngine
from surreal_engine.exceptions import UnsupportedVersion, VersionRetrievalFailure
from surreal_engine.version import (
    DEFAULT_VERSION_TIMEOUT,
    is_version_supported,
    parse_version,
    retrieve_remote_version,
    version_url,
)
from tests.conftest import FakeSurreal


class TestVersionUrl:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("http://localhost:8000/rpc", "http://localhost:8000/version"),
            ("https://db.example.com/rpc", "https://db.example.com/version"),
            ("ws://localhost:8000/rpc", "http://localhost:8000/version"),
            ("wss://db.example.com/rpc", "https://db.example.com/version"),
            ("http://localhost:8000", "http://localhost:8000/version"),
        ],
    )
    def test_maps_to_version_endpoint(self, url: str, expected: str) -> None:
        assert str(version_url(url)) == expected

    def test_unsupported_scheme(self) -> None:
        with pytest.raises(VersionRetrievalFailure, match="scheme"):
            version_url("ftp://localhost/rpc")


class TestVersionRange:
    def test_parse(self) -> None:
        assert parse_version("2.1.4") == (2, 1, 4)
        assert parse_version("3.0.0-beta.1") == (3, 0, 0)

    def test_parse_invalid(self) -> None:
        with pytest.raises(ValueError):
            parse_version("latest")

    @pytest.mark.parametrize("version", ["2.0.0", "2.1.4", "3.9.9"])
    def test_supported(self, version: str) -> None:
        assert is_version_supported(version)

    @pytest.mark.parametrize("version", ["1.5.6", "4.0.0"])
    def test_unsupported(self, version: str) -> None:
        assert not is_version_supported(version)


class TestRetrieveRemoteVersion:
    @pytest.mark.asyncio
    async def test_strips_prefix(self, server: FakeSurreal, http_client: httpx.AsyncClient) -> None:
        version = await retrieve_remote_version("http://surreal.test/rpc", client=http_client)

        assert version == "2.1.4"
        assert server.requests[-1].method == "GET"
        assert server.requests[-1].url.path == "/version"

    @pytest.mark.asyncio
    async def test_unsupported_version(self, server: FakeSurreal, http_client: httpx.AsyncClient) -> None:
        server.version = "surrealdb-1.5.6"

        with pytest.raises(UnsupportedVersion) as exc_info:
            await retrieve_remote_version("http://surreal.test", client=http_client)

        assert exc_info.value.version == "1.5.6"

    @pytest.mark.asyncio
    async def test_garbage_version(self, server: FakeSurreal, http_client: httpx.AsyncClient) -> None:
        server.version = "<html>"
        with pytest.raises(VersionRetrievalFailure, match="parse"):
            await retrieve_remote_version("http://surreal.test", client=http_client)

    @pytest.mark.asyncio
    async def test_non_200(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(503))
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(VersionRetrievalFailure, match="503"):
                await retrieve_remote_version("http://surreal.test", client=client)

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        def slow(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(slow)) as client:
            with pytest.raises(VersionRetrievalFailure) as exc_info:
                await retrieve_remote_version("http://surreal.test", timeout=0.1, client=client)

        assert isinstance(exc_info.value.cause, httpx.ReadTimeout)

    @pytest.mark.asyncio
    async def test_engine_delegates(self, engine: HttpEngine, server: FakeSurreal) -> None:
        assert await engine.version("ws://surreal.test/rpc", 1.0) == "2.1.4"
        assert str(server.requests[-1].url) == "http://surreal.test/version"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("timeout", "expected"), [(None, DEFAULT_VERSION_TIMEOUT), (0, 0), (2.5, 2.5)])
    async def test_engine_passes_timeout(
        self, engine: HttpEngine, monkeypatch: pytest.MonkeyPatch, timeout: float | None, expected: float
    ) -> None:
        seen: list[float] = []

        async def fake_retrieve(url: str, timeout: float, client: httpx.AsyncClient | None = None) -> str:
            seen.append(timeout)
            return "2.1.4"

        monkeypatch.setattr("surreal_engine.engine.http.retrieve_remote_version", fake_retrieve)

        await engine.version("http://surreal.test/rpc", timeout)

        assert seen == [expected]
