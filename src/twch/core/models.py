"""Core data models for twch."""

from dataclasses import dataclass
from typing import Any

from .styles import NamedColor, Style, StyledText, to_ansi


@dataclass
class TwitchStream:
    """A live broadcast as listed by the Helix API."""

    user_login: str
    user_name: str
    game_name: str = ""
    title: str = ""
    viewer_count: int | None = None  # Unknown for search results

    @classmethod
    def from_stream(cls, data: dict[str, Any]) -> "TwitchStream":
        """Build from a ``/helix/streams`` entry."""
        return cls(
            user_login=data["user_login"],
            user_name=data["user_name"],
            game_name=data.get("game_name") or "",
            title=data.get("title") or "",
            viewer_count=data.get("viewer_count"),
        )

    @classmethod
    def from_channel(cls, data: dict[str, Any]) -> "TwitchStream":
        """Build from a ``/helix/search/channels`` entry."""
        return cls(
            user_login=data["broadcaster_login"],
            user_name=data["display_name"],
            game_name=data.get("game_name") or "",
            title=data.get("title") or "",
        )

    @property
    def url(self) -> str:
        return f"https://twitch.tv/{self.user_login}"

    def render(self) -> list[StyledText]:
        """Styled summary: name, login, game, viewers and title."""
        spans = [
            StyledText(self.user_name, Style(color=NamedColor.GREEN)),
            StyledText(f" /{self.user_login}"),
        ]
        if self.game_name:
            spans.append(StyledText(" - "))
            spans.append(StyledText(self.game_name, Style(color=NamedColor.BLUE)))
        if self.viewer_count is not None:
            spans.append(StyledText(f" ({self.viewer_count} viewers)"))

        title = self.title.strip()
        if title:
            spans.append(StyledText(f"\n{title}"))
        return spans

    def __str__(self) -> str:
        return to_ansi(self.render())


def format_streams(streams: list[TwitchStream]) -> str:
    """Listing text: one entry per stream, separated by blank lines."""
    return "\n".join(f"{stream}\n" for stream in streams)
