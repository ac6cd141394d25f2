"""Typed records produced by the simulator and the aggregator."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
import polars as pl
from scipy.stats import norm

from knockout_odds.core.constants import DEFAULT_CONFIDENCE_LEVEL
from knockout_odds.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from typing import Sequence


@dataclass(frozen=True)
class Player:
    """A tournament entrant and its skill rating."""

    name: str
    rating: float


@dataclass(frozen=True)
class TrialOutcome:
    """Result of one simulated tournament.

    ``rounds_won[i]`` is the last round reached by ``players[i]``: the
    index of the last round whose match the player won. A first-round
    loser has 0 and the champion has ``num_rounds``.
    """

    players: tuple[str, ...]
    rounds_won: tuple[int, ...]
    num_rounds: int

    def as_dict(self) -> dict[str, int]:
        return dict(zip(self.players, self.rounds_won))

    @property
    def champion(self) -> str:
        for player, reached in zip(self.players, self.rounds_won):
            if reached == self.num_rounds:
                return player
        raise ValueError("Trial outcome has no champion")


def fold_outcome(counts: np.ndarray, outcome: TrialOutcome) -> np.ndarray:
    """Add one trial to a ``(n_players, n_rounds)`` counter array in place.

    Every round up to and including the reached round is incremented, so
    ``counts[p, r - 1]`` counts the trials in which player ``p`` survived
    through round ``r``.
    """
    for row, reached in enumerate(outcome.rounds_won):
        if reached:
            counts[row, :reached] += 1
    return counts


def counts_from_reach_histogram(histogram: np.ndarray) -> np.ndarray:
    """Convert last-round-reached histograms into survival counts.

    ``histogram[p, w]`` is the number of trials in which player ``p`` reached
    exactly round ``w`` (0 for a first-round loser). The result has one
    column fewer and holds, for each round ``r``, the trials in which the
    player reached round ``r`` or later, matching :func:`fold_outcome`.
    """
    survived = np.cumsum(histogram[:, ::-1], axis=1)[:, ::-1]
    return np.ascontiguousarray(survived[:, 1:], dtype=np.int64)


@dataclass(eq=False)
class AggregateResult:
    """Per-player, per-round advancement counts over many trials.

    Attributes:
        players: Entrant names; row order of ``counts``.
        counts: Integer array of shape ``(n_players, n_rounds)``.
            ``counts[p, r - 1]`` is the number of trials in which player
            ``p`` reached round ``r``.
        n_trials: Number of trials folded into ``counts``.
        seed: Run seed, when the run was seeded from one.
        round_labels: Human-readable round names, one per round.
    """

    players: tuple[str, ...]
    counts: np.ndarray
    n_trials: int
    seed: int | None = None
    round_labels: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        self.players = tuple(self.players)
        self.counts = np.asarray(self.counts, dtype=np.int64)
        if self.counts.shape[0] != len(self.players):
            raise ConfigurationError(
                f"counts has {self.counts.shape[0]} rows for "
                f"{len(self.players)} players"
            )
        if not self.round_labels:
            self.round_labels = tuple(
                f"Round {r}" for r in range(1, self.num_rounds + 1)
            )
        elif len(self.round_labels) != self.num_rounds:
            raise ConfigurationError(
                f"{len(self.round_labels)} round labels for "
                f"{self.num_rounds} rounds"
            )
        self._row = {player: i for i, player in enumerate(self.players)}

    @classmethod
    def empty(
        cls,
        players: Sequence[str],
        num_rounds: int,
        seed: int | None = None,
        round_labels: Sequence[str] = (),
    ) -> "AggregateResult":
        """Create a zero-count result to fold trials into."""
        return cls(
            players=tuple(players),
            counts=np.zeros((len(players), num_rounds), dtype=np.int64),
            n_trials=0,
            seed=seed,
            round_labels=tuple(round_labels),
        )

    @property
    def num_rounds(self) -> int:
        return int(self.counts.shape[1])

    def add(self, outcome: TrialOutcome) -> None:
        """Fold a single trial outcome into this result."""
        if outcome.players != self.players:
            raise ConfigurationError(
                "Trial outcome players do not match the result's players"
            )
        fold_outcome(self.counts, outcome)
        self.n_trials += 1

    def merge(self, other: "AggregateResult") -> "AggregateResult":
        """Combine two results over the same players by elementwise sum."""
        if other.players != self.players:
            raise ConfigurationError(
                "Cannot merge results over different players"
            )
        if other.num_rounds != self.num_rounds:
            raise ConfigurationError(
                f"Cannot merge results with {self.num_rounds} and "
                f"{other.num_rounds} rounds"
            )
        seed = self.seed if self.seed == other.seed else None
        return AggregateResult(
            players=self.players,
            counts=self.counts + other.counts,
            n_trials=self.n_trials + other.n_trials,
            seed=seed,
            round_labels=self.round_labels,
        )

    __add__ = merge

    def _check_trials(self) -> None:
        if self.n_trials < 1:
            raise ConfigurationError("Result holds no trials")

    def probabilities(self) -> np.ndarray:
        """Fraction of trials in which each player reached each round."""
        self._check_trials()
        return self.counts / self.n_trials

    def odds(self) -> np.ndarray:
        """Decimal odds, ``1 / probability``; ``inf`` where probability is 0."""
        probabilities = self.probabilities()
        odds = np.full(probabilities.shape, np.inf)
        np.divide(1.0, probabilities, out=odds, where=probabilities > 0)
        return odds

    def _index(self, player: str, round_index: int) -> tuple[int, int]:
        if player not in self._row:
            raise KeyError(f"Unknown player {player!r}")
        if not 1 <= round_index <= self.num_rounds:
            raise IndexError(
                f"round_index must be in 1..{self.num_rounds}, "
                f"got {round_index}"
            )
        return self._row[player], round_index - 1

    def count(self, player: str, round_index: int) -> int:
        row, column = self._index(player, round_index)
        return int(self.counts[row, column])

    def probability(self, player: str, round_index: int) -> float:
        self._check_trials()
        return self.count(player, round_index) / self.n_trials

    def odds_for(self, player: str, round_index: int) -> float:
        probability = self.probability(player, round_index)
        return math.inf if probability == 0 else 1.0 / probability

    def champion_probabilities(self) -> dict[str, float]:
        """Probability of winning the tournament, by player."""
        final = self.probabilities()[:, -1]
        return dict(zip(self.players, final.tolist()))

    def confidence_intervals(
        self, level: float = DEFAULT_CONFIDENCE_LEVEL
    ) -> tuple[np.ndarray, np.ndarray]:
        """Wilson score intervals for every probability estimate.

        Args:
            level: Two-sided confidence level in (0, 1).

        Returns:
            Tuple of (lower, upper) arrays shaped like ``counts``.
        """
        if not 0.0 < level < 1.0:
            raise ConfigurationError(
                f"Confidence level must be in (0, 1), got {level}"
            )
        p = self.probabilities()
        n = self.n_trials
        z = norm.ppf(0.5 + level / 2.0)
        denominator = 1.0 + z**2 / n
        centre = (p + z**2 / (2 * n)) / denominator
        half_width = (
            z * np.sqrt(p * (1.0 - p) / n + z**2 / (4 * n**2)) / denominator
        )
        lower = np.clip(centre - half_width, 0.0, 1.0)
        upper = np.clip(centre + half_width, 0.0, 1.0)
        return lower, upper

    def to_dataframe(self, id_column: str = "player") -> pl.DataFrame:
        """Convert to a table with one probability and one odds column per
        round.

        Columns are ``round_{r}_probability`` followed by
        ``round_{r}_odds`` for ``r`` in ``1..num_rounds``. Rows are sorted
        by championship probability, most likely winner first.
        """
        probabilities = self.probabilities()
        odds = self.odds()
        columns: dict[str, list] = {id_column: list(self.players)}
        for r in range(self.num_rounds):
            columns[f"round_{r + 1}_probability"] = probabilities[:, r].tolist()
        for r in range(self.num_rounds):
            columns[f"round_{r + 1}_odds"] = odds[:, r].tolist()
        dataframe = pl.DataFrame(columns)
        return dataframe.sort(
            [f"round_{self.num_rounds}_probability", id_column],
            descending=[True, False],
        )
