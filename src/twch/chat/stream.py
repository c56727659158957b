"""Chat message stream over a raw IRC frame source."""

import logging
from collections.abc import AsyncIterator

from .colors import FallbackColorCache
from .models import ChatMessage
from .parser import IrcFrame, ParseError, parse_chat_message

logger = logging.getLogger(__name__)


class ChannelMessageStream:
    """Async iterator of chat messages for one channel.

    Frames that are not chat posts, or that fail to parse, are skipped.
    Messages without a color get a per-user fallback color. The stream ends
    for good as soon as the frame source ends or raises.
    """

    def __init__(
        self,
        frames: AsyncIterator[IrcFrame],
        color_cache: FallbackColorCache | None = None,
    ):
        self._frames = frames
        self._color_cache = color_cache if color_cache is not None else FallbackColorCache()
        self._finished = False
        self.dropped = 0  # Frames discarded because they failed to parse

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def color_cache(self) -> FallbackColorCache:
        return self._color_cache

    def __aiter__(self) -> "ChannelMessageStream":
        return self

    async def __anext__(self) -> ChatMessage:
        while not self._finished:
            try:
                frame = await self._frames.__anext__()
            except StopAsyncIteration:
                logger.info("Chat frame source ended")
                self._finished = True
                break
            except Exception as e:
                logger.warning(f"Chat frame source failed: {e}")
                self._finished = True
                break

            try:
                message = parse_chat_message(frame)
            except ParseError as e:
                self.dropped += 1
                logger.debug(f"Dropped {frame.raw_command or 'empty'} frame: {e}")
                continue

            if message.color is None:
                message.color = self._color_cache.color_for(message.user_id)
            return message

        raise StopAsyncIteration

    async def aclose(self) -> None:
        """Stop the stream and close the frame source if it supports it."""
        self._finished = True
        aclose = getattr(self._frames, "aclose", None)
        if aclose is not None:
            await aclose()
