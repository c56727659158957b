"""Twitch IRC frame parsing.

Turns raw IRC lines into :class:`IrcFrame` values and chat posts
(``PRIVMSG`` frames) into :class:`~twch.chat.models.ChatMessage` values.
"""

import re
from dataclasses import dataclass, field
from enum import Enum

from .models import ChatMessage, Emote, TwitchColor

ACTION_PREFIX = "\x01ACTION "
ACTION_SUFFIX = "\x01"

_TAG_ESCAPES = {":": ";", "s": " ", "\\": "\\", "r": "\r", "n": "\n"}
_TAG_ESCAPE_RE = re.compile(r"\\(.?)")


class ParseError(Exception):
    """A frame could not be turned into a chat message."""

    label = "Parse error"

    def __init__(self, field_name: str):
        super().__init__(f"{self.label}: {field_name}")
        self.field = field_name


class MissingValue(ParseError):
    """A required value is absent."""

    label = "Missing value"


class InvalidValue(ParseError):
    """A value is present but malformed."""

    label = "Invalid value"


class IrcCommand(str, Enum):
    """IRC commands seen on Twitch chat."""

    PRIVMSG = "PRIVMSG"
    PING = "PING"
    PONG = "PONG"
    JOIN = "JOIN"
    PART = "PART"
    NOTICE = "NOTICE"
    CAP = "CAP"
    CLEARCHAT = "CLEARCHAT"
    CLEARMSG = "CLEARMSG"
    USERNOTICE = "USERNOTICE"
    USERSTATE = "USERSTATE"
    ROOMSTATE = "ROOMSTATE"
    GLOBALUSERSTATE = "GLOBALUSERSTATE"
    RECONNECT = "RECONNECT"
    UNKNOWN = ""

    @classmethod
    def from_raw(cls, raw: str) -> "IrcCommand":
        try:
            return cls(raw.upper())
        except ValueError:
            return cls.UNKNOWN


@dataclass
class IrcFrame:
    """One parsed IRC line.

    ``tags`` holds ``(key, value)`` pairs in wire order, or None when the line
    carried no tag block. A bare tag (``key`` without ``=``) has value None.
    """

    command: IrcCommand
    raw_command: str = ""
    tags: list[tuple[str, str | None]] | None = None
    prefix: str = ""
    params: list[str] = field(default_factory=list)
    trailing: str | None = None

    @property
    def source_nickname(self) -> str | None:
        """Nickname from a ``nick!user@host`` prefix, None for servers."""
        if not self.prefix:
            return None
        if "!" not in self.prefix and "@" not in self.prefix and "." in self.prefix:
            return None
        nick = self.prefix.split("!", 1)[0].split("@", 1)[0]
        return nick or None

    @property
    def text(self) -> str:
        """The message text (trailing parameter, or last middle one)."""
        if self.trailing is not None:
            return self.trailing
        if len(self.params) > 1:
            return self.params[-1]
        return ""


def unescape_tag_value(value: str) -> str:
    """Undo IRCv3 tag value escaping."""
    return _TAG_ESCAPE_RE.sub(lambda m: _TAG_ESCAPES.get(m.group(1), m.group(1)), value)


def parse_irc_tag_pairs(tag_string: str) -> list[tuple[str, str | None]]:
    """Parse IRC tags string into ``(key, value)`` pairs in wire order.

    Tags format: @key1=value1;key2=value2;...
    Repeated keys are kept, one pair per occurrence.
    """
    if tag_string.startswith("@"):
        tag_string = tag_string[1:]

    pairs: list[tuple[str, str | None]] = []
    for pair in tag_string.split(";"):
        if not pair:
            continue
        if "=" in pair:
            key, value = pair.split("=", 1)
            pairs.append((key, unescape_tag_value(value)))
        else:
            pairs.append((pair, None))

    return pairs


def parse_irc_tags(tag_string: str) -> dict[str, str | None]:
    """Parse IRC tags string into a dictionary; the last repeated key wins."""
    return dict(parse_irc_tag_pairs(tag_string))


def parse_irc_message(raw: str) -> IrcFrame:
    """Parse a raw IRC line into an :class:`IrcFrame`."""
    raw = raw.rstrip("\r\n")
    frame = IrcFrame(command=IrcCommand.UNKNOWN)
    pos = 0

    if raw.startswith("@"):
        space_idx = raw.find(" ")
        if space_idx < 0:
            frame.tags = parse_irc_tag_pairs(raw)
            return frame
        frame.tags = parse_irc_tag_pairs(raw[:space_idx])
        pos = space_idx + 1
        while pos < len(raw) and raw[pos] == " ":
            pos += 1

    if pos >= len(raw):
        return frame

    if raw[pos] == ":":
        space_idx = raw.find(" ", pos)
        if space_idx < 0:
            frame.prefix = raw[pos + 1 :]
            return frame
        frame.prefix = raw[pos + 1 : space_idx]
        pos = space_idx + 1

    trailing_idx = raw.find(" :", pos)
    if trailing_idx >= 0:
        frame.trailing = raw[trailing_idx + 2 :]
        remaining = raw[pos:trailing_idx]
    elif raw.startswith(":", pos):
        frame.trailing = raw[pos + 1 :]
        remaining = ""
    else:
        remaining = raw[pos:]

    parts = remaining.split()
    if parts:
        frame.raw_command = parts[0]
        frame.command = IrcCommand.from_raw(parts[0])
        frame.params = parts[1:]

    return frame


def parse_emote(section: str) -> Emote:
    """Parse one ``id:start-end,start-end`` emote entry.

    Twitch sends inclusive end offsets; the returned ranges are half-open.

    Raises:
        ValueError: On any malformed part.
    """
    id_str, ranges_str = section.split(":", 1)
    ranges: list[tuple[int, int]] = []
    for range_str in ranges_str.split(","):
        start_str, end_str = range_str.split("-", 1)
        ranges.append((_parse_unsigned(start_str), _parse_unsigned(end_str) + 1))
    return Emote(id=_parse_unsigned(id_str), ranges=ranges)


def parse_emotes(emotes_tag: str) -> list[Emote]:
    """Parse the ``emotes`` tag.

    Format: emote_id:start-end,start-end/emote_id:start-end
    """
    return [parse_emote(section) for section in emotes_tag.split("/")]


def _parse_unsigned(value: str) -> int:
    # int() alone would accept signs, whitespace and underscores
    if not (value.isascii() and value.isdigit()):
        raise ValueError(f"not an unsigned integer: {value!r}")
    return int(value)


def strip_action(content: str) -> tuple[str, bool]:
    """Remove the CTCP ACTION markers from /me content."""
    if not content.startswith(ACTION_PREFIX):
        return content, False
    stripped = content[len(ACTION_PREFIX) :]
    if stripped.endswith(ACTION_SUFFIX):
        stripped = stripped[: -len(ACTION_SUFFIX)]
    return stripped, True


def parse_chat_message(frame: IrcFrame) -> ChatMessage:
    """Build a chat message from a PRIVMSG frame.

    Raises:
        MissingValue: If the nick name, tag block or user id is absent.
        InvalidValue: If the frame is not a PRIVMSG or a recognized tag is
            malformed.
    """
    if frame.command is not IrcCommand.PRIVMSG:
        raise InvalidValue("not a PRIVMSG")

    nick_name = frame.source_nickname
    if nick_name is None:
        raise MissingValue("nick name")

    content, is_action = strip_action(frame.text)

    if frame.tags is None:
        raise MissingValue("tags")

    user_id: int | None = None
    display_name: str | None = None
    color: TwitchColor | None = None
    emotes: list[Emote] = []

    for key, value in frame.tags:
        if not value:
            continue

        if key == "user-id":
            try:
                user_id = _parse_unsigned(value)
            except ValueError:
                raise InvalidValue("user-id") from None
        elif key == "display-name":
            display_name = value
        elif key == "color":
            try:
                color = TwitchColor.from_hex(value)
            except ValueError:
                raise InvalidValue("color") from None
        elif key == "emotes":
            try:
                emotes = parse_emotes(value)
            except ValueError:
                raise InvalidValue("emotes") from None

    if user_id is None:
        raise MissingValue("user-id")

    return ChatMessage(
        user_id=user_id,
        nick_name=nick_name,
        content=content,
        display_name=display_name,
        color=color,
        is_action=is_action,
        emotes=emotes,
    )
