"""API clients for Twitch."""

from .base import ApiError, BaseApiClient
from .twitch import TwitchApiClient, TwitchApiError

__all__ = [
    "ApiError",
    "BaseApiClient",
    "TwitchApiClient",
    "TwitchApiError",
]
