"""Chat output stream with keep-alive filler for long-lived HTTP responses."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Callable

from ..chat.models import ChatMessage
from ..chat.render import format_message

logger = logging.getLogger(__name__)

# space + backspace: renders as nothing but keeps idle connections alive
FILLER = " \x08"

DEFAULT_HEARTBEAT_INTERVAL = 10.0  # seconds


async def _next_message(messages: AsyncIterator[ChatMessage]) -> ChatMessage:
    return await messages.__anext__()


async def heartbeat_chunks(
    messages: AsyncIterator[ChatMessage],
    interval: float = DEFAULT_HEARTBEAT_INTERVAL,
    render: Callable[[ChatMessage], str] = format_message,
) -> AsyncIterator[str]:
    """Yield rendered message batches, or filler when chat is idle.

    Every message that is ready without waiting goes into the same chunk,
    one line each. When nothing is ready, the generator waits for the next
    message or for ``interval`` seconds since the last chunk, whichever
    comes first; only the timeout produces a filler chunk.

    The output ends as soon as the message stream ends. A batch that was
    being collected at that point is dropped.
    """
    if interval <= 0:
        raise ValueError("heartbeat interval must be positive")

    loop = asyncio.get_running_loop()
    pending: asyncio.Future[ChatMessage] | None = None
    deadline = loop.time() + interval

    try:
        while True:
            buf: list[str] = []

            # Drain whatever is ready right now
            while True:
                if pending is None:
                    pending = asyncio.ensure_future(_next_message(messages))
                    # One loop step lets an already-available item complete
                    await asyncio.sleep(0)
                if not pending.done():
                    break
                try:
                    message = pending.result()
                except StopAsyncIteration:
                    logger.info("Message stream ended, closing output")
                    pending = None
                    return
                pending = None
                buf.append(render(message))
                buf.append("\n")

            if buf:
                yield "".join(buf)
                deadline = loop.time() + interval
                continue

            timeout = max(deadline - loop.time(), 0)
            done, _ = await asyncio.wait({pending}, timeout=timeout)
            if pending in done:
                continue

            yield FILLER
            deadline = loop.time() + interval
    finally:
        if pending is not None:
            # The pull must be finished before the stream can close its source
            pending.cancel()
            with contextlib.suppress(asyncio.CancelledError, StopAsyncIteration):
                await pending
