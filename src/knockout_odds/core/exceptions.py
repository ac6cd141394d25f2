"""Exception and warning types raised by the simulation engine."""

from __future__ import annotations


class KnockoutOddsError(Exception):
    """Base class for all errors raised by knockout_odds."""


class ConfigurationError(KnockoutOddsError, ValueError):
    """Raised when a bracket, schedule, fixture or run setting is invalid."""


class UnknownPlayerError(KnockoutOddsError, LookupError):
    """Raised when a fixtured player has no entry in the ratings table."""

    def __init__(
        self,
        player: str,
        round_index: int = 1,
        slot: int | None = None,
    ) -> None:
        self.player = player
        self.round_index = round_index
        self.slot = slot
        message = f"No rating for player {player!r} (round {round_index}"
        if slot is not None:
            message += f", fixture slot {slot}"
        message += ")"
        super().__init__(message)


class ModelRangeError(KnockoutOddsError, ValueError):
    """Raised when a frame probability falls outside [0, 1] and the
    range policy is ``"raise"``."""


class ModelRangeWarning(UserWarning):
    """Emitted when a frame probability falls outside [0, 1]."""
