"""Core records, configuration and utilities for the simulation engine."""

from knockout_odds.core.config import FrameModelConfig, SimulationConfig
from knockout_odds.core.convert import fixture_from_frame, ratings_from_frame
from knockout_odds.core.exceptions import (
    ConfigurationError,
    KnockoutOddsError,
    ModelRangeError,
    ModelRangeWarning,
    UnknownPlayerError,
)
from knockout_odds.core.logging import get_logger, log_timing, setup_logging
from knockout_odds.core.results import (
    AggregateResult,
    Player,
    TrialOutcome,
    counts_from_reach_histogram,
    fold_outcome,
)

__all__ = [
    # Configuration
    "FrameModelConfig",
    "SimulationConfig",
    # Input conversion
    "fixture_from_frame",
    "ratings_from_frame",
    # Errors
    "ConfigurationError",
    "KnockoutOddsError",
    "ModelRangeError",
    "ModelRangeWarning",
    "UnknownPlayerError",
    # Logging
    "get_logger",
    "log_timing",
    "setup_logging",
    # Results
    "AggregateResult",
    "Player",
    "TrialOutcome",
    "counts_from_reach_histogram",
    "fold_outcome",
]
