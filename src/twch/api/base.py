"""Base API client interface."""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import aiohttp

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """An API request failed."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status

    @property
    def is_retryable(self) -> bool:
        """Whether the status indicates a transient error worth retrying."""
        # Retry on server errors (5xx) and rate limiting (429)
        return self.status is not None and (self.status >= 500 or self.status == 429)


async def safe_json(resp: aiohttp.ClientResponse) -> dict | list | None:
    """Safely parse JSON from response, returning None on error.

    This handles common error cases:
    - HTML error pages (ContentTypeError)
    - Malformed JSON (JSONDecodeError)
    """
    try:
        return await resp.json()
    except (aiohttp.ContentTypeError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to parse JSON response: {e}")
        return None


# Retry configuration
DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 1.0  # seconds
DEFAULT_MAX_DELAY = 10.0  # seconds

T = TypeVar("T")


class BaseApiClient:
    """HTTP session handling and retry policy shared by API clients."""

    name = "API"

    def __init__(self, session: aiohttp.ClientSession | None = None) -> None:
        self._session = session
        self._owns_session = session is None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create the HTTP session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=30)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _retry_with_backoff(
        self,
        operation: Callable[[], Awaitable[T]],
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_delay: float = DEFAULT_BASE_DELAY,
        max_delay: float = DEFAULT_MAX_DELAY,
    ) -> T:
        """Execute an operation with exponential backoff retry.

        Network errors, timeouts and retryable :class:`ApiError` statuses are
        retried; anything else propagates immediately.

        Raises:
            The last exception if all retries fail.
        """
        for attempt in range(max_retries + 1):
            try:
                return await operation()
            except (aiohttp.ClientError, asyncio.TimeoutError, ApiError) as e:
                if isinstance(e, ApiError) and not e.is_retryable:
                    raise
                if attempt >= max_retries:
                    logger.error(f"{self.name}: All {max_retries + 1} attempts failed. Last error: {e}")
                    raise

                delay = min(base_delay * (2**attempt), max_delay)
                logger.warning(
                    f"{self.name}: Attempt {attempt + 1}/{max_retries + 1} failed: {e}. "
                    f"Retrying in {delay:.1f}s..."
                )
                await asyncio.sleep(delay)

        raise AssertionError("unreachable")
