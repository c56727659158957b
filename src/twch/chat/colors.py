"""Per-session fallback colors for users without a chosen color."""

from collections.abc import Callable

from .models import FallbackColor, TwitchColor, sample_fallback_color


class FallbackColorCache:
    """Remembers the random color given to each user id.

    One instance belongs to one channel stream and lives only as long as it.
    """

    def __init__(self, sampler: Callable[[], FallbackColor] = sample_fallback_color):
        self._sampler = sampler
        self._colors: dict[int, FallbackColor] = {}

    def __len__(self) -> int:
        return len(self._colors)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._colors

    def color_for(self, user_id: int) -> TwitchColor:
        """Get the color for a user, assigning one on first sight."""
        fallback = self._colors.get(user_id)
        if fallback is None:
            fallback = self._sampler()
            self._colors[user_id] = fallback
        return fallback.to_color()
