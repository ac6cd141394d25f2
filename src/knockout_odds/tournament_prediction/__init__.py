"""Knockout tournament prediction by Monte Carlo simulation."""

from __future__ import annotations

from knockout_odds.tournament_prediction.bracket import (
    Bracket,
    BracketBuilder,
    Match,
    Round,
    build_bracket,
)
from knockout_odds.tournament_prediction.frame_model import (
    FrameProbabilityModel,
    frame_win_probability,
)
from knockout_odds.tournament_prediction.match_predictor import (
    MatchProbabilityModel,
    match_win_probability,
    scoreline_probabilities,
)
from knockout_odds.tournament_prediction.monte_carlo import (
    MonteCarloAggregator,
    run,
)
from knockout_odds.tournament_prediction.simulator import (
    TournamentSimulator,
    simulate,
)

__all__ = [
    "Bracket",
    "BracketBuilder",
    "Match",
    "Round",
    "build_bracket",
    "FrameProbabilityModel",
    "frame_win_probability",
    "MatchProbabilityModel",
    "match_win_probability",
    "scoreline_probabilities",
    "TournamentSimulator",
    "simulate",
    "MonteCarloAggregator",
    "run",
]
