"""
Single-elimination bracket structure.

Matches live in one flat arena indexed by match number. Every match after
the first round names the two previous-round matches whose winners fill its
player 1 and player 2 slots, so the bracket is a strictly layered graph that
can be shared read-only across any number of simulated trials.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from knockout_odds.core.constants import NAMED_ROUNDS
from knockout_odds.core.exceptions import ConfigurationError
from knockout_odds.tournament_prediction.match_predictor import (
    validate_best_of,
)

BestOfSchedule = Union[int, Sequence[int]]


@dataclass(frozen=True)
class Match:
    """A single match slot in the bracket."""

    index: int  # Unique across the bracket, contiguous by round
    round_index: int  # 1-based
    position: int  # 0-based position within the round
    feeders: Optional[tuple[int, int]] = None  # Previous-round match indices

    @property
    def is_first_round(self) -> bool:
        return self.feeders is None


@dataclass(frozen=True)
class Round:
    """An ordered set of matches played over the same best-of length."""

    index: int
    matches: tuple[Match, ...]
    best_of: int

    def __len__(self) -> int:
        return len(self.matches)

    @property
    def first_match(self) -> int:
        return self.matches[0].index


@dataclass(frozen=True)
class Bracket:
    """A validated single-elimination bracket."""

    rounds: tuple[Round, ...]

    def __post_init__(self) -> None:
        if not self.rounds:
            raise ConfigurationError("Bracket must have at least one round")

        expected_index = 0
        for r, round_ in enumerate(self.rounds, start=1):
            if round_.index != r:
                raise ConfigurationError(
                    f"Round at position {r} has index {round_.index}"
                )
            validate_best_of(round_.best_of)
            for position, match in enumerate(round_.matches):
                if (
                    match.index != expected_index
                    or match.round_index != r
                    or match.position != position
                ):
                    raise ConfigurationError(
                        f"Match {match.index} is out of place in round {r}"
                    )
                expected_index += 1

        if len(self.rounds[-1]) != 1:
            raise ConfigurationError("The final round must have one match")
        if any(m.feeders is not None for m in self.rounds[0].matches):
            raise ConfigurationError("First-round matches cannot have feeders")

        for previous, current in zip(self.rounds, self.rounds[1:]):
            self._validate_links(previous, current)

    @staticmethod
    def _validate_links(previous: Round, current: Round) -> None:
        if 2 * len(current) != len(previous):
            raise ConfigurationError(
                f"Round {current.index} has {len(current)} matches; "
                f"expected half of round {previous.index}'s {len(previous)}"
            )
        previous_indices = {m.index for m in previous.matches}
        referenced: set[int] = set()
        for match in current.matches:
            if match.feeders is None:
                raise ConfigurationError(
                    f"Match {match.index} in round {current.index} has no "
                    f"feeders"
                )
            first, second = match.feeders
            if first == second:
                raise ConfigurationError(
                    f"Match {match.index} is fed twice by match {first}"
                )
            for feeder in match.feeders:
                if feeder not in previous_indices:
                    raise ConfigurationError(
                        f"Match {match.index} is fed by match {feeder}, "
                        f"which is not in round {previous.index}"
                    )
                if feeder in referenced:
                    raise ConfigurationError(
                        f"Match {feeder} feeds more than one match in "
                        f"round {current.index}"
                    )
                referenced.add(feeder)

    @property
    def num_rounds(self) -> int:
        return len(self.rounds)

    @property
    def num_entrants(self) -> int:
        return 2 * len(self.rounds[0])

    @property
    def num_matches(self) -> int:
        return sum(len(round_) for round_ in self.rounds)

    @property
    def best_of(self) -> tuple[int, ...]:
        return tuple(round_.best_of for round_ in self.rounds)

    @property
    def matches(self) -> tuple[Match, ...]:
        """Every match in the bracket, indexed by match number."""
        return tuple(m for round_ in self.rounds for m in round_.matches)

    def round(self, round_index: int) -> Round:
        """Get a round by its 1-based index."""
        if not 1 <= round_index <= self.num_rounds:
            raise IndexError(
                f"round_index must be in 1..{self.num_rounds}, "
                f"got {round_index}"
            )
        return self.rounds[round_index - 1]

    def round_labels(self) -> tuple[str, ...]:
        """Names for each round: "Last 32", ..., "Semi-final", "Final"."""
        labels = []
        for round_ in self.rounds:
            from_final = self.num_rounds - round_.index
            if from_final < len(NAMED_ROUNDS):
                labels.append(NAMED_ROUNDS[from_final])
            else:
                labels.append(f"Last {2 ** (from_final + 1)}")
        return tuple(labels)

    def path(self, slot: int) -> tuple[int, ...]:
        """Match indices an entrant in round-1 ``slot`` would play, in order.

        Slots are numbered in fixture order: fixture pair ``k`` fills
        slots ``2k`` and ``2k + 1``.
        """
        if not 0 <= slot < self.num_entrants:
            raise IndexError(
                f"slot must be in 0..{self.num_entrants - 1}, got {slot}"
            )
        match_index = self.rounds[0].matches[slot // 2].index
        path = [match_index]
        for round_ in self.rounds[1:]:
            match_index = next(
                m.index for m in round_.matches if match_index in m.feeders
            )
            path.append(match_index)
        return tuple(path)

    def meeting_round(self, slot_a: int, slot_b: int) -> int:
        """Round in which entrants from two round-1 slots would meet if both
        kept winning."""
        if slot_a == slot_b:
            raise ValueError(f"Slots must differ, got {slot_a} twice")
        paths = zip(self.path(slot_a), self.path(slot_b))
        for round_index, (match_a, match_b) in enumerate(paths, start=1):
            if match_a == match_b:
                return round_index
        return self.num_rounds


def _is_power_of_two(n: int) -> bool:
    return n >= 1 and n & (n - 1) == 0


def _expand_schedule(best_of: BestOfSchedule, num_rounds: int) -> list[int]:
    if isinstance(best_of, numbers.Integral) and not isinstance(best_of, bool):
        return [validate_best_of(best_of)] * num_rounds
    schedule = list(best_of)
    if len(schedule) != num_rounds:
        raise ConfigurationError(
            f"best_of schedule has {len(schedule)} entries for "
            f"{num_rounds} rounds"
        )
    return [validate_best_of(value) for value in schedule]


class BracketBuilder:
    """Build the round/match graph for a power-of-two draw."""

    def __init__(self, best_of: BestOfSchedule = 1):
        """Initialize builder.

        Args:
            best_of: Match length for every round, or one odd value per
                round (first round first)
        """
        self.best_of = best_of

    def build(self, num_entrants: int) -> Bracket:
        """Build a bracket for ``num_entrants`` players.

        Round 1 matches take the fixture pairs in order. Match ``k`` of
        every later round is fed by matches ``2k`` and ``2k + 1`` of the
        round before, so each round consumes the previous one contiguously
        and the draw's halves stay apart until the final.

        Raises:
            ConfigurationError: If num_entrants is not a power of two >= 2,
                or the best-of schedule is invalid
        """
        if (
            isinstance(num_entrants, bool)
            or not isinstance(num_entrants, numbers.Integral)
            or num_entrants < 2
            or not _is_power_of_two(int(num_entrants))
        ):
            raise ConfigurationError(
                f"num_entrants must be a power of two >= 2, "
                f"got {num_entrants!r}"
            )
        num_entrants = int(num_entrants)
        num_rounds = num_entrants.bit_length() - 1
        schedule = _expand_schedule(self.best_of, num_rounds)

        rounds = []
        next_index = 0
        n_matches = num_entrants // 2
        previous: Optional[Round] = None
        for round_index, best_of in enumerate(schedule, start=1):
            matches = []
            for position in range(n_matches):
                feeders = None
                if previous is not None:
                    start = previous.first_match
                    feeders = (start + 2 * position, start + 2 * position + 1)
                matches.append(
                    Match(
                        index=next_index,
                        round_index=round_index,
                        position=position,
                        feeders=feeders,
                    )
                )
                next_index += 1
            previous = Round(
                index=round_index, matches=tuple(matches), best_of=best_of
            )
            rounds.append(previous)
            n_matches //= 2

        return Bracket(rounds=tuple(rounds))


def build_bracket(num_entrants: int, best_of: BestOfSchedule = 1) -> Bracket:
    """Build a bracket; see :meth:`BracketBuilder.build`."""
    return BracketBuilder(best_of).build(num_entrants)
