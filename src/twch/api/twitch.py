"""Twitch Helix API client."""

import logging
from typing import Any

import aiohttp

from ..core.models import TwitchStream
from ..core.settings import Settings
from .base import ApiError, BaseApiClient, safe_json

logger = logging.getLogger(__name__)

# Helix caps page size at 100
MAX_PAGE_SIZE = 100


class TwitchApiError(ApiError):
    """A Helix request failed."""


class TwitchApiClient(BaseApiClient):
    """Client for the Twitch Helix API."""

    BASE_URL = "https://api.twitch.tv/helix"
    name = "Twitch"

    def __init__(
        self,
        client_id: str,
        oauth_token: str,
        session: aiohttp.ClientSession | None = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ) -> None:
        super().__init__(session)
        self.client_id = client_id
        self.oauth_token = oauth_token
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "TwitchApiClient":
        settings.require_auth()
        return cls(settings.client_id, settings.oauth_token, **kwargs)

    def _get_headers(self) -> dict[str, str]:
        """Get headers for API requests."""
        return {
            "Client-ID": self.client_id,
            "Authorization": f"Bearer {self.oauth_token}",
        }

    async def _get(self, path: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        """GET a Helix endpoint and return its ``data`` list."""

        async def request() -> list[dict[str, Any]]:
            async with self.session.get(
                f"{self.BASE_URL}{path}",
                headers=self._get_headers(),
                params=params,
            ) as resp:
                if resp.status != 200:
                    body = await safe_json(resp)
                    error = f"GET {path} failed with status {resp.status}"
                    if isinstance(body, dict) and body.get("message"):
                        error = f"{error}: {body['message']}"
                    raise TwitchApiError(error, status=resp.status)
                data = await safe_json(resp)
                if not isinstance(data, dict):
                    raise TwitchApiError(f"GET {path} returned an unexpected body", status=resp.status)
                return data.get("data", [])

        return await self._retry_with_backoff(
            request, max_retries=self.max_retries, base_delay=self.retry_delay
        )

    async def get_streams(self, limit: int = 10) -> list[TwitchStream]:
        """Get the most watched live streams."""
        data = await self._get("/streams", {"first": str(min(limit, MAX_PAGE_SIZE))})
        logger.debug(f"Fetched {len(data)} streams")
        return [TwitchStream.from_stream(stream) for stream in data]

    async def search_channels(self, query: str, limit: int = 10) -> list[TwitchStream]:
        """Search live channels by name."""
        data = await self._get(
            "/search/channels",
            {
                "query": query,
                "first": str(min(limit, MAX_PAGE_SIZE)),
                "live_only": "true",
            },
        )
        logger.debug(f"Search {query!r} matched {len(data)} channels")
        return [TwitchStream.from_channel(channel) for channel in data]
