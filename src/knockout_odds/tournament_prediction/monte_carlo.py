"""Monte Carlo aggregation of tournament outcomes."""

from __future__ import annotations

import math
import os
from concurrent.futures import (
    Executor,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    as_completed,
)
from functools import partial
from typing import Callable, Mapping, Optional

import numpy as np

from knockout_odds.core.config import (
    FrameModelConfig,
    SimulationConfig,
    validate_n_trials,
)
from knockout_odds.core.constants import (
    DEFAULT_EXECUTOR,
    DEFAULT_MIN_CHUNK_SIZE,
    DEFAULT_RANGE_POLICY,
    DEFAULT_SCALING_FACTOR,
    EXECUTOR_THREAD,
)
from knockout_odds.core.logging import get_logger, log_timing
from knockout_odds.core.results import (
    AggregateResult,
    counts_from_reach_histogram,
)
from knockout_odds.tournament_prediction.bracket import Bracket
from knockout_odds.tournament_prediction.frame_model import (
    FrameProbabilityModel,
)
from knockout_odds.tournament_prediction.simulator import (
    Fixture,
    TournamentSimulator,
)

logger = get_logger(__name__)

RngFactory = Callable[[int], np.random.Generator]


def seeded_rng(seed: int, trial_index: int) -> np.random.Generator:
    """Independent generator for one trial of a seeded run.

    The stream depends only on ``(seed, trial_index)``, never on which
    worker runs the trial or in which order.
    """
    return np.random.default_rng([seed, trial_index])


def default_rng_factory(seed: int) -> RngFactory:
    """Picklable per-trial generator factory for a run seed."""
    return partial(seeded_rng, seed)


def fresh_seed() -> int:
    """Draw a run seed from operating-system entropy."""
    return int(np.random.SeedSequence().entropy)


def chunk_bounds(n_trials: int, chunk_size: int) -> list[tuple[int, int]]:
    """Split ``range(n_trials)`` into contiguous ``[start, stop)`` chunks."""
    return [
        (start, min(start + chunk_size, n_trials))
        for start in range(0, n_trials, chunk_size)
    ]


def simulate_chunk(
    simulator: TournamentSimulator,
    rng_factory: RngFactory,
    start: int,
    stop: int,
) -> np.ndarray:
    """Play trials ``start..stop-1`` into a chunk-local histogram.

    Returns:
        Integer array of shape ``(n_players, num_rounds + 1)`` where entry
        ``[p, w]`` counts the trials in which player ``p`` reached exactly
        round ``w``
    """
    n_players = len(simulator.players)
    histogram = np.zeros(
        (n_players, simulator.bracket.num_rounds + 1), dtype=np.int64
    )
    rows = np.arange(n_players)
    for trial_index in range(start, stop):
        outcome = simulator.simulate(rng_factory(trial_index))
        histogram[rows, outcome.rounds_won] += 1
    return histogram


class MonteCarloAggregator:
    """Run many independent trials and reduce them into advancement counts."""

    def __init__(self, config: Optional[SimulationConfig] = None):
        """Initialize aggregator.

        Args:
            config: Run configuration (trial count, seed, executor)
        """
        self.config = config or SimulationConfig()
        self.config.validate()

    def run(
        self,
        bracket: Bracket,
        ratings: Mapping[str, float],
        round1_fixture: Fixture,
        n_trials: Optional[int] = None,
        rng_factory: Optional[RngFactory] = None,
    ) -> AggregateResult:
        """Simulate the tournament ``n_trials`` times.

        Args:
            bracket: Bracket to play
            ratings: Player name to rating
            round1_fixture: Ordered first-round pairs
            n_trials: Number of trials (default: ``config.n_trials``)
            rng_factory: Callable mapping a trial index to its generator
                (default: seeded from the run seed and the trial index)

        Returns:
            Per-player, per-round advancement counts

        Raises:
            ConfigurationError: If n_trials < 1 or inputs are inconsistent
            UnknownPlayerError: If a fixtured player has no rating
        """
        n_trials = self.config.n_trials if n_trials is None else n_trials
        validate_n_trials(n_trials)
        frame_model = FrameProbabilityModel.from_config(
            self.config.frame_model
        )
        simulator = TournamentSimulator(
            bracket, ratings, round1_fixture, frame_model=frame_model
        )
        return self.run_simulator(simulator, n_trials, rng_factory)

    def run_simulator(
        self,
        simulator: TournamentSimulator,
        n_trials: Optional[int] = None,
        rng_factory: Optional[RngFactory] = None,
    ) -> AggregateResult:
        """Simulate an already bound :class:`TournamentSimulator`."""
        n_trials = self.config.n_trials if n_trials is None else n_trials
        validate_n_trials(n_trials)

        seed = self.config.seed
        if rng_factory is None:
            if seed is None:
                seed = fresh_seed()
                logger.info("No seed configured; drew run seed %d", seed)
            rng_factory = default_rng_factory(seed)

        chunks = chunk_bounds(n_trials, self._chunk_size(n_trials))
        bracket = simulator.bracket
        with log_timing(
            logger,
            f"simulating {n_trials:,} trials of a {bracket.num_entrants}-"
            f"entrant bracket in {len(chunks)} chunk(s) "
            f"({self.config.executor})",
        ):
            histogram = self._reduce(simulator, rng_factory, chunks)

        champions = int(histogram[:, -1].sum())
        if champions != n_trials:
            raise RuntimeError(
                f"{champions} champions recorded over {n_trials} trials"
            )

        return AggregateResult(
            players=simulator.players,
            counts=counts_from_reach_histogram(histogram),
            n_trials=n_trials,
            seed=seed,
            round_labels=bracket.round_labels(),
        )

    def _max_workers(self) -> int:
        return self.config.max_workers or os.cpu_count() or 1

    def _chunk_size(self, n_trials: int) -> int:
        if self.config.chunk_size is not None:
            return self.config.chunk_size
        if not self.config.is_parallel:
            return n_trials
        # About four chunks per worker
        per_chunk = math.ceil(n_trials / (4 * self._max_workers()))
        return min(n_trials, max(per_chunk, DEFAULT_MIN_CHUNK_SIZE))

    def _make_executor(self, n_chunks: int) -> Executor:
        workers = min(self._max_workers(), n_chunks)
        if self.config.executor == EXECUTOR_THREAD:
            return ThreadPoolExecutor(max_workers=workers)
        return ProcessPoolExecutor(max_workers=workers)

    def _reduce(
        self,
        simulator: TournamentSimulator,
        rng_factory: RngFactory,
        chunks: list[tuple[int, int]],
    ) -> np.ndarray:
        shape = (len(simulator.players), simulator.bracket.num_rounds + 1)
        total = np.zeros(shape, dtype=np.int64)

        if not self.config.is_parallel or len(chunks) == 1:
            for start, stop in chunks:
                total += simulate_chunk(simulator, rng_factory, start, stop)
            return total

        with self._make_executor(len(chunks)) as executor:
            futures = [
                executor.submit(
                    simulate_chunk, simulator, rng_factory, start, stop
                )
                for start, stop in chunks
            ]
            for i, future in enumerate(as_completed(futures)):
                # Integer addition is order independent
                total += future.result()
                logger.debug(f"Completed chunk {i + 1}/{len(chunks)}")
        return total


def run(
    bracket: Bracket,
    ratings: Mapping[str, float],
    round1_fixture: Fixture,
    n_trials: int,
    rng_factory: Optional[RngFactory] = None,
    seed: Optional[int] = None,
    executor: str = DEFAULT_EXECUTOR,
    max_workers: Optional[int] = None,
    scaling_factor: float = DEFAULT_SCALING_FACTOR,
    range_policy: str = DEFAULT_RANGE_POLICY,
) -> AggregateResult:
    """Run a Monte Carlo simulation; see :meth:`MonteCarloAggregator.run`."""
    config = SimulationConfig(
        n_trials=n_trials,
        seed=seed,
        executor=executor,
        max_workers=max_workers,
        frame_model=FrameModelConfig(
            scaling_factor=scaling_factor, range_policy=range_policy
        ),
    )
    return MonteCarloAggregator(config).run(
        bracket, ratings, round1_fixture, rng_factory=rng_factory
    )
