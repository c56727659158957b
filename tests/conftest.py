"""Shared test fixtures for twch tests."""

import asyncio

import pytest

from twch.chat.models import ChatMessage, Emote, TwitchColor
from twch.chat.parser import parse_irc_message

RONNI_RAW = (
    "@badge-info=;badges=global_mod/1,turbo/1;color=#0D4200;display-name=ronni;"
    "emotes=25:0-4,12-16/1902:6-10;id=b34ccfc7-4977-403a-8a94-33c6bac34fb8;mod=0;"
    "room-id=1337;subscriber=0;tmi-sent-ts=1507246572675;turbo=1;user-id=1337;"
    "user-type=global_mod :ronni!ronni@ronni.tmi.twitch.tv PRIVMSG #ronni :Kappa Keepo Kappa"
)


def _privmsg(text: str = "hello", tags: str | None = "user-id=1", nick: str = "viewer") -> str:
    """Build a raw PRIVMSG line."""
    tag_block = f"@{tags} " if tags is not None else ""
    return f"{tag_block}:{nick}!{nick}@{nick}.tmi.twitch.tv PRIVMSG #channel :{text}"


async def _frames_from(lines, error: Exception | None = None):
    """Async frame source over raw lines, optionally failing at the end."""
    for line in lines:
        yield parse_irc_message(line)
    if error is not None:
        raise error


class QueueFrameSource:
    """Frame source fed by the test; ``None`` ends it, an exception fails it."""

    def __init__(self):
        self.queue: asyncio.Queue = asyncio.Queue()

    def push(self, line: str) -> None:
        self.queue.put_nowait(parse_irc_message(line))

    def end(self) -> None:
        self.queue.put_nowait(None)

    def fail(self, error: Exception) -> None:
        self.queue.put_nowait(error)

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self.queue.get()
        if item is None:
            raise StopAsyncIteration
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def ronni_raw():
    return RONNI_RAW


@pytest.fixture
def privmsg():
    """Builder for raw PRIVMSG lines."""
    return _privmsg


@pytest.fixture
def frames_from():
    """Async frame source over raw lines."""
    return _frames_from


@pytest.fixture
def ronni_frame():
    return parse_irc_message(RONNI_RAW)


@pytest.fixture
def ronni_message():
    return ChatMessage(
        user_id=1337,
        nick_name="ronni",
        content="Kappa Keepo Kappa",
        display_name="ronni",
        color=TwitchColor(13, 66, 0),
        is_action=False,
        emotes=[
            Emote(id=25, ranges=[(0, 5), (12, 17)]),
            Emote(id=1902, ranges=[(6, 11)]),
        ],
    )


@pytest.fixture
def frame_queue():
    return QueueFrameSource()


@pytest.fixture
def frame_source_factory():
    """Factory for independent queue-fed frame sources."""
    return QueueFrameSource
