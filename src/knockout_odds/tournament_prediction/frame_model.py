"""Frame-win probability from a rating differential."""

from __future__ import annotations

import math
import warnings
from typing import Callable, Optional, Sequence

import numpy as np

from knockout_odds.core.config import (
    FrameModelConfig,
    validate_scaling_factor,
)
from knockout_odds.core.constants import (
    DEFAULT_RANGE_POLICY,
    DEFAULT_SCALING_FACTOR,
    RANGE_POLICIES,
    RANGE_POLICY_CLAMP,
    RANGE_POLICY_RAISE,
)
from knockout_odds.core.exceptions import (
    ConfigurationError,
    ModelRangeError,
    ModelRangeWarning,
)
from knockout_odds.core.logging import get_logger

logger = get_logger(__name__)


def frame_win_probability(
    rating_diff: float, scaling_factor: float = DEFAULT_SCALING_FACTOR
) -> float:
    """Probability that the higher-rated side of ``rating_diff`` wins a frame.

    Implements: p = 0.5 + scaling_factor * rating_diff

    The result is not clamped; differentials larger than
    ``0.5 / scaling_factor`` in magnitude leave [0, 1].
    """
    return 0.5 + scaling_factor * rating_diff


# Pairs named individually in an out-of-range diagnostic
MAX_REPORTED_PAIRS = 5


class FrameProbabilityModel:
    """Linear frame-win model with an explicit out-of-range policy."""

    def __init__(
        self,
        scaling_factor: float = DEFAULT_SCALING_FACTOR,
        range_policy: str = DEFAULT_RANGE_POLICY,
    ):
        """Initialize the model.

        Args:
            scaling_factor: Slope applied to the rating difference
            range_policy: "clamp" clamps to [0, 1] and warns, "warn" keeps
                the raw value and warns, "raise" raises ModelRangeError
        """
        validate_scaling_factor(scaling_factor)
        if range_policy not in RANGE_POLICIES:
            raise ConfigurationError(
                f"range_policy must be one of {RANGE_POLICIES}, "
                f"got {range_policy!r}"
            )
        self.scaling_factor = float(scaling_factor)
        self.range_policy = range_policy

    @classmethod
    def from_config(
        cls, config: Optional[FrameModelConfig] = None
    ) -> "FrameProbabilityModel":
        config = config or FrameModelConfig()
        config.validate()
        return cls(config.scaling_factor, config.range_policy)

    def __repr__(self) -> str:
        return (
            f"FrameProbabilityModel(scaling_factor={self.scaling_factor}, "
            f"range_policy={self.range_policy!r})"
        )

    def probability(self, rating_diff: float) -> float:
        """Frame-win probability for a single rating difference."""
        if not math.isfinite(rating_diff):
            raise ConfigurationError(
                f"Rating difference must be finite, got {rating_diff!r}"
            )
        p = frame_win_probability(rating_diff, self.scaling_factor)
        if 0.0 <= p <= 1.0:
            return p
        self._report_out_of_range(
            f"Frame probability {p:.4f} for rating difference "
            f"{rating_diff:+.4f} is outside [0, 1]"
        )
        if self.range_policy == RANGE_POLICY_CLAMP:
            return min(max(p, 0.0), 1.0)
        return p

    def probabilities(self, rating_diffs: np.ndarray) -> np.ndarray:
        """Vectorized :meth:`probability` over an array of differences.

        All out-of-range entries are reported in a single diagnostic.
        """
        rating_diffs = np.asarray(rating_diffs, dtype=float)
        if not np.isfinite(rating_diffs).all():
            raise ConfigurationError("Rating differences must be finite")
        p = 0.5 + self.scaling_factor * rating_diffs
        out_of_range = (p < 0.0) | (p > 1.0)
        if not out_of_range.any():
            return p

        worst = float(np.abs(rating_diffs[out_of_range]).max())
        self._report_out_of_range(
            f"{int(out_of_range.sum())} frame probabilities are outside "
            f"[0, 1] (largest rating difference {worst:.4f}, "
            f"scaling factor {self.scaling_factor})"
        )
        return self._apply_policy(p)

    def pairwise(
        self,
        ratings: Sequence[float],
        names: Optional[Sequence[str]] = None,
        meeting_round: Optional[Callable[[int, int], int]] = None,
    ) -> np.ndarray:
        """Frame-win probabilities for every ordered pair of entrants.

        Out-of-range pairings are reported once, by name, counting each
        unordered pair a single time.

        Args:
            ratings: Ratings in entrant order
            names: Entrant names for diagnostics (default: "entrant i")
            meeting_round: Maps two entrant positions to the round in which
                they could meet; named in diagnostics when given

        Returns:
            Array ``P`` with ``P[i, j]`` the probability that entrant ``i``
            wins a frame against entrant ``j``
        """
        ratings = np.asarray(ratings, dtype=float)
        if names is None:
            names = [f"entrant {i}" for i in range(len(ratings))]
        non_finite = np.flatnonzero(~np.isfinite(ratings))
        if non_finite.size:
            raise ConfigurationError(
                f"Ratings must be finite; got {ratings[non_finite[0]]} "
                f"for {names[non_finite[0]]!r}"
            )

        diffs = ratings[:, None] - ratings[None, :]
        p = 0.5 + self.scaling_factor * diffs
        out_of_range = (p < 0.0) | (p > 1.0)
        rows, columns = np.nonzero(np.triu(out_of_range | out_of_range.T, 1))
        if rows.size == 0:
            return p

        pairs = []
        reported = zip(
            rows[:MAX_REPORTED_PAIRS].tolist(),
            columns[:MAX_REPORTED_PAIRS].tolist(),
        )
        for i, j in reported:
            detail = f"rating difference {diffs[i, j]:+.4f}"
            if meeting_round is not None:
                detail += f", could meet in round {meeting_round(i, j)}"
            pairs.append(f"{names[i]!r} v {names[j]!r} ({detail})")
        if rows.size > MAX_REPORTED_PAIRS:
            pairs.append(f"and {rows.size - MAX_REPORTED_PAIRS} more")
        self._report_out_of_range(
            f"{rows.size} pairing(s) have frame probabilities outside "
            f"[0, 1] at scaling factor {self.scaling_factor}: "
            + "; ".join(pairs)
        )
        return self._apply_policy(p)

    def _apply_policy(self, p: np.ndarray) -> np.ndarray:
        if self.range_policy == RANGE_POLICY_CLAMP:
            return np.clip(p, 0.0, 1.0)
        return p

    def _report_out_of_range(self, message: str) -> None:
        if self.range_policy == RANGE_POLICY_RAISE:
            raise ModelRangeError(message)
        if self.range_policy == RANGE_POLICY_CLAMP:
            message += "; clamping"
        logger.warning(message)
        warnings.warn(message, ModelRangeWarning, stacklevel=3)
