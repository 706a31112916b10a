"""Tests for MusicInfoClient using httpx.MockTransport."""

import asyncio
import logging

import httpx
import pytest

from songlib.config import MusicInfoSettings
from songlib.domain.entities import SongDetail
from songlib.domain.exceptions import (
    ProviderBadResponseError,
    ProviderUnavailableError,
)
from songlib.infrastructure.integrations import MusicInfoClient

PROVIDER_URL = "http://music-info.test/info"


def _client(handler, timeout: float = 5.0, url: str = PROVIDER_URL) -> MusicInfoClient:
    settings = MusicInfoSettings(url=url, timeout=timeout)
    return MusicInfoClient(settings, transport=httpx.MockTransport(handler))


class TestFetch:
    """Test successful provider calls."""

    async def test_sends_group_and_song(
        self, request_logger: logging.LoggerAdapter
    ) -> None:
        """Test one GET with group and song as query parameters."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "releaseDate": "16.07.2006",
                    "text": "Ooh baby, don't you know I suffer?\n\nOoh baby, can you hear me moan?",
                    "link": "https://www.youtube.com/watch?v=Xsp3_a-PMTw",
                },
            )

        client = _client(handler)
        detail = await client.fetch("Muse", "Supermassive Black Hole", request_logger)
        await client.close()

        assert len(seen) == 1
        assert seen[0].method == "GET"
        assert seen[0].url.params["group"] == "Muse"
        assert seen[0].url.params["song"] == "Supermassive Black Hole"
        assert detail.release_date == "16.07.2006"
        assert detail.lyrics.startswith("Ooh baby")
        assert detail.link == "https://www.youtube.com/watch?v=Xsp3_a-PMTw"

    async def test_lyrics_alias_and_missing_keys(
        self, request_logger: logging.LoggerAdapter
    ) -> None:
        """Test "lyrics" is accepted and missing keys become empty strings."""
        client = _client(lambda request: httpx.Response(200, json={"lyrics": "a\n\nb"}))

        detail = await client.fetch("Muse", "Uprising", request_logger)

        assert detail == SongDetail(release_date="", lyrics="a\n\nb", link="")


class TestFailures:
    """Test error classification."""

    async def test_server_error(self, request_logger: logging.LoggerAdapter) -> None:
        """Test a 500 is a bad response carrying the status."""
        client = _client(lambda request: httpx.Response(500, text="oops"))

        with pytest.raises(ProviderBadResponseError) as exc_info:
            await client.fetch("Muse", "Uprising", request_logger)

        assert exc_info.value.status_code == 500

    async def test_invalid_json(self, request_logger: logging.LoggerAdapter) -> None:
        """Test a non-JSON body is a bad response."""
        client = _client(lambda request: httpx.Response(200, text="<html>nope</html>"))

        with pytest.raises(ProviderBadResponseError):
            await client.fetch("Muse", "Uprising", request_logger)

    async def test_json_array(self, request_logger: logging.LoggerAdapter) -> None:
        """Test a JSON value that isn't an object is a bad response."""
        client = _client(lambda request: httpx.Response(200, json=["not", "an", "object"]))

        with pytest.raises(ProviderBadResponseError):
            await client.fetch("Muse", "Uprising", request_logger)

    async def test_connect_error(self, request_logger: logging.LoggerAdapter) -> None:
        """Test a refused connection means the provider is unavailable."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ProviderUnavailableError):
            await _client(handler).fetch("Muse", "Uprising", request_logger)

    async def test_read_timeout(self, request_logger: logging.LoggerAdapter) -> None:
        """Test an httpx timeout means the provider is unavailable."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        with pytest.raises(ProviderUnavailableError, match="timed out"):
            await _client(handler).fetch("Muse", "Uprising", request_logger)

    async def test_overall_deadline(self, request_logger: logging.LoggerAdapter) -> None:
        """Test a provider slower than the timeout is cut off."""

        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, json={})

        client = _client(handler, timeout=0.05)

        with pytest.raises(ProviderUnavailableError, match="timed out"):
            await client.fetch("Muse", "Uprising", request_logger)

    async def test_not_configured(self, request_logger: logging.LoggerAdapter) -> None:
        """Test an empty URL fails without any request."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        with pytest.raises(ProviderUnavailableError, match="not configured"):
            await _client(handler, url="").fetch("Muse", "Uprising", request_logger)


class TestLifecycle:
    """Test lazy client creation and close."""

    async def test_client_reused_and_closed(
        self, request_logger: logging.LoggerAdapter
    ) -> None:
        """Test one AsyncClient serves several calls and close() drops it."""
        client = _client(lambda request: httpx.Response(200, json={}))

        await client.fetch("Muse", "Uprising", request_logger)
        first = client._client
        await client.fetch("Muse", "Hysteria", request_logger)

        assert client._client is first
        await client.close()
        assert client._client is None

    async def test_context_manager_closes(
        self, request_logger: logging.LoggerAdapter
    ) -> None:
        """Test async with closes the client."""
        async with _client(lambda request: httpx.Response(200, json={})) as client:
            await client.fetch("Muse", "Uprising", request_logger)

        assert client._client is None
