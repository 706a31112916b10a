"""HTTP client for the external song metadata provider."""

import asyncio
from typing import Any

import httpx

from songlib.config import MusicInfoSettings
from songlib.domain.entities import SongDetail, split_verses
from songlib.domain.exceptions import (
    ProviderBadResponseError,
    ProviderUnavailableError,
)
from songlib.domain.ports import IMusicInfoClient, RequestLogger


class MusicInfoClient(IMusicInfoClient):
    """Fetches release date, lyrics and link for a (group, song) pair."""

    # Hey future me, the provider speaks a tiny protocol: GET <url>?group=..&song=.. and a
    # JSON object back with releaseDate / text / link. Some deployments send "lyrics"
    # instead of "text", so both are read. Missing keys just become "".
    RELEASE_DATE_KEY = "releaseDate"
    LYRICS_KEYS = ("text", "lyrics")
    LINK_KEY = "link"

    def __init__(
        self,
        settings: MusicInfoSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize metadata client.

        Args:
            settings: Provider URL, timeout and enrichment policy
            transport: Optional httpx transport (tests pass an httpx.MockTransport)
        """
        self.settings = settings
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    headers={"Accept": "application/json"},
                    timeout=self.settings.timeout,
                    transport=self._transport,
                )
            return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "MusicInfoClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()

    # Listen future me, the timeout is enforced at two scopes: httpx's timeout bounds each
    # connect/read phase, asyncio.timeout bounds the whole call. A provider trickling bytes
    # slowly passes the first but not the second. Either way the caller sees
    # ProviderUnavailableError and never waits longer than settings.timeout.
    async def fetch(self, group: str, title: str, logger: RequestLogger) -> SongDetail:
        """
        Fetch enrichment data for a song.

        Args:
            group: Band/artist name
            title: Song title
            logger: Request-scoped logger

        Returns:
            Release date, lyrics and link (empty strings for missing keys)

        Raises:
            ProviderUnavailableError: Not configured, transport failure or timeout
            ProviderBadResponseError: Non-2xx status or unparsable body
        """
        if not self.settings.url:
            raise ProviderUnavailableError("Music info provider URL is not configured")

        logger.debug(
            "provider: fetching details for '%s' by '%s'",
            title,
            group,
            extra={"provider_url": self.settings.url},
        )

        client = await self._get_client()
        try:
            async with asyncio.timeout(self.settings.timeout):
                response = await client.get(
                    self.settings.url, params={"group": group, "song": title}
                )
        except (TimeoutError, httpx.TimeoutException) as e:
            raise ProviderUnavailableError(
                f"Music info provider timed out after {self.settings.timeout}s"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderUnavailableError(
                f"Music info provider request failed: {type(e).__name__}"
            ) from e

        if not response.is_success:
            raise ProviderBadResponseError(
                f"Music info provider returned status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderBadResponseError(
                "Music info provider returned invalid JSON",
                status_code=response.status_code,
            ) from e

        if not isinstance(data, dict):
            raise ProviderBadResponseError(
                "Music info provider returned an unexpected payload",
                status_code=response.status_code,
            )

        detail = self._parse_detail(data)
        logger.debug(
            "provider: got details for '%s' (%d verses of lyrics)",
            title,
            len(split_verses(detail.lyrics)),
        )
        return detail

    def _parse_detail(self, data: dict[str, Any]) -> SongDetail:
        """Map the provider payload onto SongDetail."""
        lyrics = ""
        for key in self.LYRICS_KEYS:
            if data.get(key):
                lyrics = str(data[key])
                break

        return SongDetail(
            release_date=str(data.get(self.RELEASE_DATE_KEY) or ""),
            lyrics=lyrics,
            link=str(data.get(self.LINK_KEY) or ""),
        )
