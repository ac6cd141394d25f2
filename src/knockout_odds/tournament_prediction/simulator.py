"""
Single-trial tournament simulation.

A :class:`TournamentSimulator` binds a bracket, a ratings table and the
first-round fixture once, precomputes the match-win probability of every
possible pairing in every round, and then plays any number of independent
trials against caller-supplied random generators.
"""

from __future__ import annotations

import math
from typing import Mapping, Optional, Sequence

import numpy as np

from knockout_odds.core.exceptions import (
    ConfigurationError,
    UnknownPlayerError,
)
from knockout_odds.core.logging import get_logger
from knockout_odds.core.results import Player, TrialOutcome
from knockout_odds.tournament_prediction.bracket import Bracket
from knockout_odds.tournament_prediction.frame_model import (
    FrameProbabilityModel,
)
from knockout_odds.tournament_prediction.match_predictor import (
    MatchProbabilityModel,
)

logger = get_logger(__name__)

Fixture = Sequence[tuple[str, str]]


def bind_fixture(
    bracket: Bracket, ratings: Mapping[str, float], round1_fixture: Fixture
) -> tuple[Player, ...]:
    """Resolve the first-round fixture into players in slot order.

    Fixture pair ``k`` fills slots ``2k`` (player 1) and ``2k + 1``
    (player 2) of first-round match ``k``.

    Raises:
        ConfigurationError: If the fixture does not fill the first round
            exactly once per entrant
        UnknownPlayerError: If a fixtured player has no rating
    """
    expected = len(bracket.rounds[0])
    if len(round1_fixture) != expected:
        raise ConfigurationError(
            f"Fixture has {len(round1_fixture)} matches; a "
            f"{bracket.num_entrants}-entrant bracket needs {expected}"
        )

    players = []
    seen: dict[str, int] = {}
    for match_number, pair in enumerate(round1_fixture):
        if len(pair) != 2:
            raise ConfigurationError(
                f"Fixture match {match_number} must name two players, "
                f"got {pair!r}"
            )
        for side, name in enumerate(pair):
            slot = 2 * match_number + side
            if name in seen:
                raise ConfigurationError(
                    f"Player {name!r} appears in fixture slots {seen[name]} "
                    f"and {slot}"
                )
            seen[name] = slot
            if name not in ratings:
                raise UnknownPlayerError(name, round_index=1, slot=slot)
            rating = _rating(name, ratings, slot)
            players.append(Player(name=name, rating=rating))
    return tuple(players)


def _rating(name: str, ratings: Mapping[str, float], slot: int) -> float:
    try:
        rating = float(ratings[name])
    except (TypeError, ValueError) as error:
        raise ConfigurationError(
            f"Rating for player {name!r} (fixture slot {slot}) is not a "
            f"number: {ratings[name]!r}"
        ) from error
    if not math.isfinite(rating):
        raise ConfigurationError(
            f"Rating for player {name!r} (fixture slot {slot}) must be "
            f"finite, got {rating}"
        )
    return rating


class TournamentSimulator:
    """Play randomized passes over a bracket."""

    def __init__(
        self,
        bracket: Bracket,
        ratings: Mapping[str, float],
        round1_fixture: Fixture,
        frame_model: Optional[FrameProbabilityModel] = None,
    ):
        """Bind inputs and precompute match probabilities.

        Args:
            bracket: Bracket to play; also supplies each round's best-of
            ratings: Player name to rating
            round1_fixture: Ordered (player 1, player 2) pairs for round 1
            frame_model: Frame-win model (default: linear, scaling 0.7)
        """
        self.bracket = bracket
        self.entrants = bind_fixture(bracket, ratings, round1_fixture)
        self.players = tuple(p.name for p in self.entrants)
        self.match_model = MatchProbabilityModel(frame_model)

        # Frame probabilities do not depend on the round; evaluate and
        # range-check them once
        frame_probs = self.frame_model.pairwise(
            [p.rating for p in self.entrants],
            names=self.players,
            meeting_round=bracket.meeting_round,
        )
        self._probabilities = tuple(
            self.match_model.matrix_from_frame_probabilities(
                frame_probs, round_.best_of
            )
            for round_ in bracket.rounds
        )
        # Nested lists index faster than numpy scalars in the trial loop
        self._lookup = tuple(m.tolist() for m in self._probabilities)
        self._schedule = tuple(
            tuple((m.index, m.feeders) for m in round_.matches)
            for round_ in bracket.rounds
        )
        logger.debug(
            "Bound %d entrants to a %d-round bracket (best of %s)",
            len(self.players),
            bracket.num_rounds,
            list(bracket.best_of),
        )

    @property
    def frame_model(self) -> FrameProbabilityModel:
        return self.match_model.frame_model

    def match_probability(
        self, player1: str, player2: str, round_index: int
    ) -> float:
        """Probability that ``player1`` beats ``player2`` in a given round."""
        self.bracket.round(round_index)
        try:
            i = self.players.index(player1)
            j = self.players.index(player2)
        except ValueError as error:
            missing = player1 if player1 not in self.players else player2
            raise UnknownPlayerError(
                missing, round_index=round_index
            ) from error
        return float(self._probabilities[round_index - 1][i, j])

    def probability_matrix(self, round_index: int) -> np.ndarray:
        """Read-only pairwise match-win matrix for a round."""
        self.bracket.round(round_index)
        matrix = self._probabilities[round_index - 1].view()
        matrix.flags.writeable = False
        return matrix

    def simulate(self, rng: np.random.Generator) -> TrialOutcome:
        """Play one trial.

        One uniform draw is taken per match, in match-index order; player 1
        wins when the draw is below their match-win probability.

        Args:
            rng: Random source; advanced by ``bracket.num_matches`` draws

        Returns:
            Last round reached by every entrant
        """
        draws = rng.random(self.bracket.num_matches).tolist()
        winners = [0] * len(draws)
        rounds_won = [0] * len(self.players)

        for round_index, (matches, lookup) in enumerate(
            zip(self._schedule, self._lookup), start=1
        ):
            for match_index, feeders in matches:
                if feeders is None:
                    player1 = 2 * match_index
                    player2 = player1 + 1
                else:
                    player1 = winners[feeders[0]]
                    player2 = winners[feeders[1]]
                if draws[match_index] < lookup[player1][player2]:
                    winner = player1
                else:
                    winner = player2
                winners[match_index] = winner
                rounds_won[winner] = round_index

        return TrialOutcome(
            players=self.players,
            rounds_won=tuple(rounds_won),
            num_rounds=self.bracket.num_rounds,
        )


def simulate(
    bracket: Bracket,
    ratings: Mapping[str, float],
    round1_fixture: Fixture,
    rng: np.random.Generator,
    frame_model: Optional[FrameProbabilityModel] = None,
) -> TrialOutcome:
    """Play one trial; see :meth:`TournamentSimulator.simulate`."""
    simulator = TournamentSimulator(
        bracket, ratings, round1_fixture, frame_model
    )
    return simulator.simulate(rng)
