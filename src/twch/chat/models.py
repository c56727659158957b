"""Data models for chat messages."""

import random
from dataclasses import dataclass, field

# Twitch web chat assigns one of these to users without a chosen color.
NUM_FALLBACK_COLORS = 15


@dataclass(frozen=True)
class TwitchColor:
    """An RGB display color."""

    r: int
    g: int
    b: int

    @classmethod
    def from_hex(cls, value: str) -> "TwitchColor":
        """Parse a ``#RRGGBB`` string.

        Raises:
            ValueError: If the value is not exactly 7 ASCII characters of the
                form ``#`` followed by six hex digits.
        """
        if not (value.isascii() and len(value) == 7 and value.startswith("#")):
            raise ValueError(f"invalid color: {value!r}")
        digits = value[1:]
        if not all(ch in "0123456789abcdefABCDEF" for ch in digits):
            raise ValueError(f"invalid color: {value!r}")
        return cls(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    @property
    def hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"


FALLBACK_PALETTE: tuple[TwitchColor, ...] = (
    TwitchColor(255, 0, 0),
    TwitchColor(0, 0, 255),
    TwitchColor(0, 128, 0),
    TwitchColor(178, 34, 34),
    TwitchColor(255, 127, 80),
    TwitchColor(154, 205, 50),
    TwitchColor(255, 69, 0),
    TwitchColor(46, 139, 87),
    TwitchColor(218, 165, 32),
    TwitchColor(210, 105, 30),
    TwitchColor(95, 158, 160),
    TwitchColor(30, 144, 255),
    TwitchColor(255, 105, 180),
    TwitchColor(138, 43, 226),
    TwitchColor(0, 255, 127),
)


@dataclass(frozen=True)
class FallbackColor:
    """Index into the fallback palette."""

    index: int

    def __post_init__(self) -> None:
        if not 0 <= self.index < NUM_FALLBACK_COLORS:
            raise ValueError(f"fallback color index out of range: {self.index}")

    def to_color(self) -> TwitchColor:
        return FALLBACK_PALETTE[self.index]


def sample_fallback_color() -> FallbackColor:
    """Draw a fallback color uniformly at random."""
    return FallbackColor(random.randrange(NUM_FALLBACK_COLORS))


@dataclass
class Emote:
    """A Twitch emote and the content ranges it occupies.

    Ranges are half-open ``(start, end)`` codepoint offsets into the message
    content.
    """

    id: int
    ranges: list[tuple[int, int]] = field(default_factory=list)


@dataclass
class ChatMessage:
    """Represents a single chat post."""

    user_id: int
    nick_name: str
    content: str
    display_name: str | None = None
    color: TwitchColor | None = None
    is_action: bool = False  # /me messages
    emotes: list[Emote] = field(default_factory=list)

    @property
    def name(self) -> str:
        """Name shown in front of the message."""
        if self.display_name is None:
            return self.nick_name
        if self.display_name.lower() == self.nick_name.lower():
            return self.display_name
        return f"{self.display_name} ({self.nick_name})"
