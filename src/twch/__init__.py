"""twch - Twitch stream listings and live chat in the terminal or over HTTP."""

from .chat.models import ChatMessage, Emote, TwitchColor
from .chat.parser import InvalidValue, MissingValue, ParseError, parse_chat_message
from .chat.render import format_message, render_message
from .chat.stream import ChannelMessageStream

__version__ = "0.1.0"

__all__ = [
    "ChannelMessageStream",
    "ChatMessage",
    "Emote",
    "InvalidValue",
    "MissingValue",
    "ParseError",
    "TwitchColor",
    "format_message",
    "parse_chat_message",
    "render_message",
]
