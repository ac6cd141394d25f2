"""Best-of-N match outcome probabilities by exact scoreline enumeration."""

from __future__ import annotations

import math
import numbers
from functools import lru_cache
from typing import Optional, Sequence

import numpy as np

from knockout_odds.core.exceptions import ConfigurationError
from knockout_odds.tournament_prediction.frame_model import (
    FrameProbabilityModel,
)


def validate_best_of(best_of: int) -> int:
    """Return ``best_of`` as an int, or raise if it is not positive and odd.

    An even length admits drawn scores, which a knockout match cannot end on.
    """
    if (
        isinstance(best_of, bool)
        or not isinstance(best_of, numbers.Integral)
        or best_of < 1
        or best_of % 2 == 0
    ):
        raise ConfigurationError(
            f"best_of must be a positive odd integer, got {best_of!r}"
        )
    return int(best_of)


def frames_to_win(best_of: int) -> int:
    """Frames needed to win a best-of-``best_of`` match."""
    return (validate_best_of(best_of) + 1) // 2


@lru_cache(maxsize=None)
def _path_counts(first_to: int) -> tuple[int, ...]:
    # Orderings reaching (first_to, s2) with the winner taking the last frame
    return tuple(
        math.comb(first_to - 1 + s2, s2) for s2 in range(first_to)
    )


def match_win_probability(frame_prob: float, best_of: int) -> float:
    """Probability of winning a best-of-N match given a frame-win probability.

    Sums, over every winning scoreline (first_to, s2) with
    s2 in 0..first_to-1, the number of frame orderings ending in that score
    times p^first_to * (1 - p)^s2.

    Args:
        frame_prob: Probability of winning a single frame
        best_of: Match length, a positive odd integer

    Returns:
        Probability of winning the match

    Raises:
        ConfigurationError: If best_of is not a positive odd integer
    """
    first_to = frames_to_win(best_of)
    lose_prob = 1.0 - frame_prob
    win_all = frame_prob**first_to
    total = 0.0
    for opponent_frames, paths in enumerate(_path_counts(first_to)):
        total += paths * win_all * lose_prob**opponent_frames
    return total


def scoreline_probabilities(
    frame_prob: float, best_of: int
) -> dict[tuple[int, int], float]:
    """Probability of every possible final score.

    Keys are ``(frames_won, frames_lost)`` from the focal player's side.
    Values sum to 1 for any ``frame_prob`` in [0, 1]; the match-win
    probability is the sum over keys with ``frames_won > frames_lost``.
    """
    first_to = frames_to_win(best_of)
    lose_prob = 1.0 - frame_prob
    scores = {}
    for other, paths in enumerate(_path_counts(first_to)):
        scores[(first_to, other)] = (
            paths * frame_prob**first_to * lose_prob**other
        )
        scores[(other, first_to)] = (
            paths * lose_prob**first_to * frame_prob**other
        )
    return scores


class MatchProbabilityModel:
    """Predict match outcomes from ratings and the match length."""

    def __init__(self, frame_model: Optional[FrameProbabilityModel] = None):
        """Initialize with a frame model.

        Args:
            frame_model: Model converting a rating difference into a
                frame-win probability (default: linear, scaling 0.7)
        """
        self.frame_model = frame_model or FrameProbabilityModel()

    def win_probability(
        self, player_a_rating: float, player_b_rating: float, best_of: int
    ) -> float:
        """Probability of player A beating player B over ``best_of`` frames."""
        frame_prob = self.frame_model.probability(
            player_a_rating - player_b_rating
        )
        return match_win_probability(frame_prob, best_of)

    def matrix(
        self,
        ratings: Sequence[float],
        best_of: int,
        names: Optional[Sequence[str]] = None,
    ) -> np.ndarray:
        """Pairwise match-win probabilities.

        Args:
            ratings: Ratings in entrant order
            best_of: Match length
            names: Entrant names used in range diagnostics

        Returns:
            Array ``M`` with ``M[i, j]`` the probability that entrant ``i``
            beats entrant ``j``
        """
        validate_best_of(best_of)
        frame_probs = self.frame_model.pairwise(ratings, names)
        return self.matrix_from_frame_probabilities(frame_probs, best_of)

    @staticmethod
    def matrix_from_frame_probabilities(
        frame_probs: np.ndarray, best_of: int
    ) -> np.ndarray:
        """Apply :func:`match_win_probability` to a frame-probability matrix."""
        validate_best_of(best_of)
        frame_probs = np.asarray(frame_probs, dtype=float)
        # Per-entry scalar evaluation keeps the matrix identical to
        # match_win_probability for every pair.
        return np.array(
            [
                [match_win_probability(p, best_of) for p in row]
                for row in frame_probs.tolist()
            ],
            dtype=float,
        ).reshape(frame_probs.shape)
