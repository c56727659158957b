"""Twitch IRC chat connection over WebSocket."""

import logging
import time
from collections.abc import AsyncIterator

import aiohttp

from .parser import IrcCommand, IrcFrame, parse_irc_message
from .stream import ChannelMessageStream

logger = logging.getLogger(__name__)

TWITCH_IRC_WS_URL = "wss://irc-ws.chat.twitch.tv:443"

# IRC capabilities to request
IRC_CAPS = [
    "twitch.tv/tags",
]


def anonymous_nick() -> str:
    """Read-only login name accepted by Twitch without a password."""
    return f"justinfan{int(time.time()) % 100000}"


class TwitchChatConnection:
    """Anonymous, read-only connection to one channel's chat.

    Produces raw IRC frames; answering server PINGs is handled here so
    consumers only see channel traffic. There is no reconnect: when the
    socket closes, :meth:`frames` ends.
    """

    def __init__(
        self,
        channel: str,
        url: str = TWITCH_IRC_WS_URL,
        session: aiohttp.ClientSession | None = None,
    ):
        self.channel = channel.lower()
        self._url = url
        self._session = session
        self._owns_session = session is None
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._nick = ""

    @property
    def is_connected(self) -> bool:
        return self._ws is not None and not self._ws.closed

    async def connect(self) -> None:
        """Open the socket, request tags and join the channel."""
        if self._session is None:
            self._session = aiohttp.ClientSession()
        try:
            self._ws = await self._session.ws_connect(self._url, heartbeat=None)

            for cap in IRC_CAPS:
                await self._ws.send_str(f"CAP REQ :{cap}")

            self._nick = anonymous_nick()
            logger.info(f"Twitch IRC: connecting as {self._nick} to #{self.channel}")
            await self._ws.send_str(f"NICK {self._nick}")
            await self._ws.send_str(f"JOIN #{self.channel}")
        except BaseException:
            await self.close()
            raise

    async def frames(self) -> AsyncIterator[IrcFrame]:
        """Yield every frame received until the socket closes."""
        if self._ws is None:
            raise ConnectionError("not connected")

        async for msg in self._ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                for line in msg.data.split("\r\n"):
                    if not line:
                        continue
                    frame = parse_irc_message(line)
                    if frame.command is IrcCommand.PING:
                        await self._ws.send_str(f"PONG :{frame.text or 'tmi.twitch.tv'}")
                        continue
                    yield frame
            elif msg.type == aiohttp.WSMsgType.ERROR:
                raise ConnectionError(f"websocket error: {self._ws.exception()}")
            elif msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSED):
                break

        logger.info(f"Twitch IRC: #{self.channel} connection closed")

    async def close(self) -> None:
        """Clean up WebSocket and session."""
        if self._ws and not self._ws.closed:
            await self._ws.close()
        self._ws = None
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None if self._owns_session else self._session

    async def __aenter__(self) -> "TwitchChatConnection":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


async def _frames_then_close(connection: TwitchChatConnection) -> AsyncIterator[IrcFrame]:
    try:
        async for frame in connection.frames():
            yield frame
    finally:
        await connection.close()


async def open_channel_stream(channel: str, **kwargs) -> ChannelMessageStream:
    """Connect to a channel and wrap its frames in a message stream.

    The connection is closed when the stream's frame source ends or the
    stream is closed with ``aclose()``.
    """
    connection = TwitchChatConnection(channel, **kwargs)
    await connection.connect()
    return ChannelMessageStream(_frames_then_close(connection))
