"""Message renderer - turns chat messages into styled text."""

from ..core.styles import ITALIC, PLAIN, UNDERLINE, Style, StyledText, to_ansi
from .models import ChatMessage


def emote_ranges(message: ChatMessage) -> list[tuple[int, int]]:
    """All emote ranges of a message, ordered by start offset.

    The sort is stable, so ranges with equal starts keep arrival order.
    """
    ranges = [r for emote in message.emotes for r in emote.ranges]
    ranges.sort(key=lambda r: r[0])
    return ranges


def render_content(content: str, ranges: list[tuple[int, int]], base: Style = PLAIN) -> list[StyledText]:
    """Split content into plain and underlined (emote) runs.

    ``ranges`` must already be sorted by start. Overlapping ranges never move
    the cursor backwards; a range that starts inside already emitted text
    only contributes the part past the cursor.
    """
    spans: list[StyledText] = []
    emote_style = base.merge(UNDERLINE)

    prev_end = 0
    for start, end in ranges:
        if prev_end < start and content[prev_end:start]:
            spans.append(StyledText(content[prev_end:start], base))
        start = max(start, prev_end)
        if start < end and content[start:end]:
            spans.append(StyledText(content[start:end], emote_style))
        prev_end = max(prev_end, end)

    if prev_end < len(content):
        spans.append(StyledText(content[prev_end:], base))

    return spans


def render_message(message: ChatMessage) -> list[StyledText]:
    """Render a message as name, separator and content spans."""
    spans = [StyledText(message.name, Style(color=message.color))]

    if message.is_action:
        spans.append(StyledText(" "))
        base = ITALIC
    else:
        spans.append(StyledText(": "))
        base = PLAIN

    spans.extend(render_content(message.content, emote_ranges(message), base))
    return spans


def format_message(message: ChatMessage) -> str:
    """Render a message to an ANSI terminal string."""
    return to_ansi(render_message(message))
