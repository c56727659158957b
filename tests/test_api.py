"""Tests for the Twitch Helix API client."""

import pytest

from twch.api.twitch import TwitchApiClient, TwitchApiError
from twch.core.models import TwitchStream
from twch.core.settings import ConfigError, Settings


class FakeResponse:
    def __init__(self, status: int, body):
        self.status = status
        self._body = body

    async def json(self):
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class FakeSession:
    """Records GET requests and replays canned responses."""

    def __init__(self, *responses: FakeResponse):
        self._responses = list(responses)
        self.requests: list[dict] = []
        self.closed = False

    def get(self, url, headers=None, params=None):
        self.requests.append({"url": url, "headers": headers, "params": params})
        return self._responses.pop(0)

    async def close(self):
        self.closed = True


def _client(*responses: FakeResponse) -> tuple[TwitchApiClient, FakeSession]:
    session = FakeSession(*responses)
    return TwitchApiClient("client-id", "token", session=session, max_retries=2, retry_delay=0), session


STREAM_DATA = {
    "user_login": "ronni",
    "user_name": "Ronni",
    "game_name": "Just Chatting",
    "title": "  hello chat  ",
    "viewer_count": 1234,
}


@pytest.mark.asyncio
async def test_get_streams():
    client, session = _client(FakeResponse(200, {"data": [STREAM_DATA]}))
    streams = await client.get_streams(5)

    assert streams == [TwitchStream("ronni", "Ronni", "Just Chatting", "  hello chat  ", 1234)]
    request = session.requests[0]
    assert request["url"] == "https://api.twitch.tv/helix/streams"
    assert request["params"] == {"first": "5"}
    assert request["headers"] == {"Client-ID": "client-id", "Authorization": "Bearer token"}


@pytest.mark.asyncio
async def test_get_streams_caps_page_size():
    client, session = _client(FakeResponse(200, {"data": []}))
    await client.get_streams(500)
    assert session.requests[0]["params"]["first"] == "100"


@pytest.mark.asyncio
async def test_search_channels():
    channel = {
        "broadcaster_login": "ronni",
        "display_name": "Ronni",
        "game_name": "",
        "title": "zzz",
    }
    client, session = _client(FakeResponse(200, {"data": [channel]}))
    streams = await client.search_channels("ron", 3)

    assert streams == [TwitchStream("ronni", "Ronni", "", "zzz", None)]
    assert session.requests[0]["url"] == "https://api.twitch.tv/helix/search/channels"
    assert session.requests[0]["params"] == {"query": "ron", "first": "3", "live_only": "true"}


@pytest.mark.asyncio
async def test_client_error_is_not_retried():
    client, session = _client(FakeResponse(401, {"message": "Invalid OAuth token"}))
    with pytest.raises(TwitchApiError) as exc_info:
        await client.get_streams()
    assert exc_info.value.status == 401
    assert "Invalid OAuth token" in str(exc_info.value)
    assert len(session.requests) == 1


@pytest.mark.asyncio
async def test_server_error_is_retried():
    client, session = _client(
        FakeResponse(503, {}),
        FakeResponse(200, {"data": [STREAM_DATA]}),
    )
    streams = await client.get_streams()
    assert len(streams) == 1
    assert len(session.requests) == 2


@pytest.mark.asyncio
async def test_retries_give_up():
    client, session = _client(*(FakeResponse(429, {}) for _ in range(3)))
    with pytest.raises(TwitchApiError):
        await client.get_streams()
    assert len(session.requests) == 3


@pytest.mark.asyncio
async def test_close_leaves_borrowed_session_open():
    client, session = _client()
    await client.close()
    assert session.closed is False


def test_from_settings_requires_credentials():
    with pytest.raises(ConfigError):
        TwitchApiClient.from_settings(Settings())
