"""Text styles and their ANSI terminal serialization."""

from dataclasses import dataclass
from enum import IntEnum

from ..chat.models import TwitchColor

ANSI_RESET = "\x1b[0m"


class NamedColor(IntEnum):
    """Basic 8-color terminal palette (SGR foreground codes)."""

    BLACK = 30
    RED = 31
    GREEN = 32
    YELLOW = 33
    BLUE = 34
    PURPLE = 35
    CYAN = 36
    WHITE = 37


@dataclass(frozen=True)
class Style:
    """Immutable text style."""

    color: TwitchColor | NamedColor | None = None
    italic: bool = False
    underline: bool = False

    @property
    def is_plain(self) -> bool:
        return self.color is None and not self.italic and not self.underline

    def merge(self, other: "Style") -> "Style":
        """Layer ``other`` on top of this style, field by field."""
        return Style(
            color=other.color if other.color is not None else self.color,
            italic=self.italic or other.italic,
            underline=self.underline or other.underline,
        )

    def sgr_codes(self) -> list[str]:
        codes: list[str] = []
        if self.italic:
            codes.append("3")
        if self.underline:
            codes.append("4")
        if isinstance(self.color, TwitchColor):
            codes.append(f"38;2;{self.color.r};{self.color.g};{self.color.b}")
        elif self.color is not None:
            codes.append(str(int(self.color)))
        return codes


PLAIN = Style()
ITALIC = Style(italic=True)
UNDERLINE = Style(underline=True)


@dataclass(frozen=True)
class StyledText:
    """A run of text sharing one style."""

    text: str
    style: Style = PLAIN


def paint(text: str, style: Style) -> str:
    """Wrap text in the ANSI escapes for a style."""
    if style.is_plain:
        return text
    return f"\x1b[{';'.join(style.sgr_codes())}m{text}{ANSI_RESET}"


def to_ansi(spans: list[StyledText]) -> str:
    """Serialize styled spans to an ANSI terminal string."""
    return "".join(paint(span.text, span.style) for span in spans)


def to_plain(spans: list[StyledText]) -> str:
    """Concatenate span text, dropping all styling."""
    return "".join(span.text for span in spans)
