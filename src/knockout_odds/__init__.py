"""Monte Carlo odds for single-elimination knockout tournaments."""

from __future__ import annotations

from knockout_odds.core import (
    AggregateResult,
    ConfigurationError,
    FrameModelConfig,
    KnockoutOddsError,
    ModelRangeError,
    ModelRangeWarning,
    Player,
    SimulationConfig,
    TrialOutcome,
    UnknownPlayerError,
    fixture_from_frame,
    ratings_from_frame,
    setup_logging,
)
from knockout_odds.core.constants import (
    DEFAULT_N_TRIALS,
    DEFAULT_SCALING_FACTOR,
    WORLD_CHAMPIONSHIP_BEST_OF,
)
from knockout_odds.tournament_prediction import (
    Bracket,
    BracketBuilder,
    FrameProbabilityModel,
    MatchProbabilityModel,
    MonteCarloAggregator,
    TournamentSimulator,
    build_bracket,
    frame_win_probability,
    match_win_probability,
    run,
    simulate,
)

__version__ = "0.1.0"

__all__ = [
    # Engine
    "build_bracket",
    "frame_win_probability",
    "match_win_probability",
    "simulate",
    "run",
    "Bracket",
    "BracketBuilder",
    "FrameProbabilityModel",
    "MatchProbabilityModel",
    "TournamentSimulator",
    "MonteCarloAggregator",
    # Records and configuration
    "Player",
    "TrialOutcome",
    "AggregateResult",
    "FrameModelConfig",
    "SimulationConfig",
    # Input conversion
    "ratings_from_frame",
    "fixture_from_frame",
    # Errors
    "KnockoutOddsError",
    "ConfigurationError",
    "UnknownPlayerError",
    "ModelRangeError",
    "ModelRangeWarning",
    # Logging
    "setup_logging",
    # Constants
    "DEFAULT_N_TRIALS",
    "DEFAULT_SCALING_FACTOR",
    "WORLD_CHAMPIONSHIP_BEST_OF",
    # Version
    "__version__",
]
