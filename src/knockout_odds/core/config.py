"""Configuration dataclasses for the simulation engine."""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from typing import Optional

from knockout_odds.core.constants import (
    DEFAULT_EXECUTOR,
    DEFAULT_N_TRIALS,
    DEFAULT_RANGE_POLICY,
    DEFAULT_SCALING_FACTOR,
    EXECUTOR_SERIAL,
    EXECUTORS,
    RANGE_POLICIES,
)
from knockout_odds.core.exceptions import ConfigurationError


@dataclass
class FrameModelConfig:
    """Configuration for the frame-win probability model."""

    # Slope of the linear rating-difference model
    scaling_factor: float = DEFAULT_SCALING_FACTOR

    # "clamp", "warn" or "raise" for probabilities outside [0, 1]
    range_policy: str = DEFAULT_RANGE_POLICY

    def validate(self) -> None:
        """Raise ConfigurationError if any field is out of range."""
        validate_scaling_factor(self.scaling_factor)
        if self.range_policy not in RANGE_POLICIES:
            raise ConfigurationError(
                f"range_policy must be one of {RANGE_POLICIES}, "
                f"got {self.range_policy!r}"
            )


@dataclass
class SimulationConfig:
    """Configuration for a Monte Carlo run."""

    n_trials: int = DEFAULT_N_TRIALS

    # Run seed; None draws fresh entropy, recorded on the result
    seed: Optional[int] = None

    # "serial", "thread" or "process"
    executor: str = DEFAULT_EXECUTOR
    max_workers: Optional[int] = None

    # Trials per chunk; None splits evenly across workers
    chunk_size: Optional[int] = None

    frame_model: FrameModelConfig = field(default_factory=FrameModelConfig)

    def validate(self) -> None:
        """Raise ConfigurationError if any field is out of range."""
        validate_n_trials(self.n_trials)
        if self.executor not in EXECUTORS:
            raise ConfigurationError(
                f"executor must be one of {EXECUTORS}, got {self.executor!r}"
            )
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigurationError(
                f"max_workers must be >= 1, got {self.max_workers}"
            )
        if self.chunk_size is not None and self.chunk_size < 1:
            raise ConfigurationError(
                f"chunk_size must be >= 1, got {self.chunk_size}"
            )
        if self.seed is not None and self.seed < 0:
            raise ConfigurationError(f"seed must be >= 0, got {self.seed}")
        self.frame_model.validate()

    @property
    def is_parallel(self) -> bool:
        return self.executor != EXECUTOR_SERIAL


def validate_n_trials(n_trials: int) -> None:
    """Raise ConfigurationError unless ``n_trials`` is an integer >= 1."""
    if isinstance(n_trials, bool) or not isinstance(
        n_trials, numbers.Integral
    ):
        raise ConfigurationError(
            f"n_trials must be an integer, got {type(n_trials).__name__}"
        )
    if n_trials < 1:
        raise ConfigurationError(f"n_trials must be >= 1, got {n_trials}")


def validate_scaling_factor(scaling_factor: float) -> None:
    """Raise ConfigurationError unless ``scaling_factor`` is a finite real."""
    if (
        isinstance(scaling_factor, bool)
        or not isinstance(scaling_factor, numbers.Real)
        or not math.isfinite(scaling_factor)
    ):
        raise ConfigurationError(
            f"scaling_factor must be a finite number, got {scaling_factor!r}"
        )
