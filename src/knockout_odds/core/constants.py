"""
Default parameters for the knockout simulation engine.

This module centralizes the default model and run parameters so that the
probability models, the bracket builder and the aggregator agree on them.
"""

# =============================================================================
# Probability Model Parameters
# =============================================================================

# Frame-win probability slope: p = 0.5 + scaling_factor * rating_diff
DEFAULT_SCALING_FACTOR: float = 0.7

# What to do with frame probabilities outside [0, 1]
RANGE_POLICY_CLAMP = "clamp"
RANGE_POLICY_WARN = "warn"
RANGE_POLICY_RAISE = "raise"
RANGE_POLICIES = (RANGE_POLICY_CLAMP, RANGE_POLICY_WARN, RANGE_POLICY_RAISE)
DEFAULT_RANGE_POLICY: str = RANGE_POLICY_CLAMP

# =============================================================================
# Tournament Formats
# =============================================================================

# 32-entrant World Championship: last 32, last 16, quarters, semis, final
WORLD_CHAMPIONSHIP_BEST_OF: tuple[int, ...] = (19, 25, 25, 33, 35)

# Named rounds, counted back from the final
NAMED_ROUNDS: tuple[str, ...] = ("Final", "Semi-final", "Quarter-final")

# =============================================================================
# Monte Carlo Run Parameters
# =============================================================================

DEFAULT_N_TRIALS: int = 100_000
DEFAULT_MIN_CHUNK_SIZE: int = 1_000

EXECUTOR_SERIAL = "serial"
EXECUTOR_THREAD = "thread"
EXECUTOR_PROCESS = "process"
EXECUTORS = (EXECUTOR_SERIAL, EXECUTOR_THREAD, EXECUTOR_PROCESS)
DEFAULT_EXECUTOR: str = EXECUTOR_SERIAL

# Confidence level for Monte Carlo probability intervals
DEFAULT_CONFIDENCE_LEVEL: float = 0.95
