"""Tests for trial outcomes and aggregate results."""

import math

import numpy as np
import polars as pl
import pytest

from knockout_odds.core.exceptions import ConfigurationError
from knockout_odds.core.results import (
    AggregateResult,
    TrialOutcome,
    counts_from_reach_histogram,
    fold_outcome,
)


def make_result(**overrides):
    fields = dict(
        players=("A", "B", "C", "D"),
        counts=np.array([[8, 6], [2, 1], [7, 3], [3, 0]]),
        n_trials=10,
        seed=5,
    )
    fields.update(overrides)
    return AggregateResult(**fields)


class TestTrialOutcome:
    """Test single-trial outcome records."""

    def setup_method(self):
        self.outcome = TrialOutcome(
            players=("A", "B", "C", "D"), rounds_won=(0, 2, 1, 0), num_rounds=2
        )

    def test_as_dict(self):
        assert self.outcome.as_dict() == {"A": 0, "B": 2, "C": 1, "D": 0}

    def test_champion(self):
        assert self.outcome.champion == "B"

    def test_missing_champion(self):
        outcome = TrialOutcome(
            players=("A", "B"), rounds_won=(0, 0), num_rounds=1
        )
        with pytest.raises(ValueError):
            outcome.champion


class TestReachHistogram:
    """Test conversion of last-round histograms into survival counts."""

    def test_matches_fold_outcome(self):
        players = ("A", "B", "C", "D")
        trials = [(2, 0, 1, 0), (0, 1, 0, 2), (1, 0, 2, 0), (2, 0, 1, 0)]
        folded = np.zeros((4, 2), dtype=np.int64)
        histogram = np.zeros((4, 3), dtype=np.int64)
        for rounds_won in trials:
            fold_outcome(folded, TrialOutcome(players, rounds_won, 2))
            histogram[np.arange(4), rounds_won] += 1
        counts = counts_from_reach_histogram(histogram)
        assert counts.dtype == np.int64
        assert np.array_equal(counts, folded)

    def test_first_round_losers_contribute_nothing(self):
        histogram = np.array([[5, 0, 0], [0, 0, 5]])
        counts = counts_from_reach_histogram(histogram)
        assert counts.tolist() == [[0, 0], [5, 5]]


class TestAggregateResult:
    """Test probability, odds and table views of aggregate counts."""

    def setup_method(self):
        self.result = make_result()

    def test_default_round_labels(self):
        assert self.result.round_labels == ("Round 1", "Round 2")
        assert self.result.num_rounds == 2

    def test_probabilities(self):
        probabilities = self.result.probabilities()
        assert probabilities[0].tolist() == [0.8, 0.6]
        assert probabilities[3].tolist() == [0.3, 0.0]

    def test_odds_are_reciprocal(self):
        odds = self.result.odds()
        assert odds[0, 0] == pytest.approx(1.25)
        assert odds[1, 1] == pytest.approx(10.0)

    def test_zero_probability_has_infinite_odds(self):
        assert math.isinf(self.result.odds()[3, 1])
        assert math.isinf(self.result.odds_for("D", 2))

    def test_point_lookups(self):
        assert self.result.count("C", 1) == 7
        assert self.result.probability("C", 2) == pytest.approx(0.3)
        assert self.result.odds_for("A", 2) == pytest.approx(1 / 0.6)

    def test_unknown_player_lookup(self):
        with pytest.raises(KeyError):
            self.result.count("Z", 1)

    @pytest.mark.parametrize("round_index", [0, 3])
    def test_round_lookup_bounds(self, round_index):
        with pytest.raises(IndexError):
            self.result.count("A", round_index)

    def test_champion_probabilities(self):
        assert self.result.champion_probabilities() == {
            "A": 0.6,
            "B": 0.1,
            "C": 0.3,
            "D": 0.0,
        }

    def test_to_dataframe_layout(self):
        df = self.result.to_dataframe()
        assert isinstance(df, pl.DataFrame)
        assert df.columns == [
            "player",
            "round_1_probability",
            "round_2_probability",
            "round_1_odds",
            "round_2_odds",
        ]
        assert df["player"].to_list() == ["A", "C", "B", "D"]
        assert df["round_2_odds"].to_list()[-1] == math.inf

    def test_to_dataframe_breaks_ties_by_name(self):
        result = make_result(
            players=("D", "C", "B", "A"),
            counts=np.array([[5, 2], [5, 2], [5, 3], [5, 3]]),
        )
        df = result.to_dataframe(id_column="name")
        assert df["name"].to_list() == ["A", "B", "C", "D"]

    def test_merge_sums_counts(self):
        merged = self.result.merge(make_result())
        assert merged.n_trials == 20
        assert merged.count("A", 1) == 16
        assert merged.seed == 5
        assert np.array_equal(
            merged.probabilities(), self.result.probabilities()
        )

    def test_merge_drops_differing_seeds(self):
        merged = self.result + make_result(seed=6)
        assert merged.seed is None

    def test_merge_rejects_different_players(self):
        other = make_result(players=("A", "B", "C", "E"))
        with pytest.raises(ConfigurationError):
            self.result.merge(other)

    def test_merge_rejects_different_round_counts(self):
        other = make_result(counts=np.zeros((4, 3), dtype=np.int64))
        with pytest.raises(ConfigurationError):
            self.result.merge(other)

    def test_add_folds_outcomes(self):
        result = AggregateResult.empty(("A", "B", "C", "D"), 2, seed=1)
        result.add(TrialOutcome(("A", "B", "C", "D"), (2, 0, 1, 0), 2))
        result.add(TrialOutcome(("A", "B", "C", "D"), (0, 1, 0, 2), 2))
        assert result.n_trials == 2
        assert result.counts.tolist() == [[1, 1], [1, 0], [1, 0], [1, 1]]

    def test_add_rejects_other_players(self):
        result = AggregateResult.empty(("A", "B"), 1)
        with pytest.raises(ConfigurationError):
            result.add(TrialOutcome(("A", "C"), (1, 0), 1))

    def test_empty_result_has_no_probabilities(self):
        result = AggregateResult.empty(("A", "B"), 1)
        with pytest.raises(ConfigurationError):
            result.probabilities()
        with pytest.raises(ConfigurationError):
            result.to_dataframe()

    def test_row_count_must_match_players(self):
        with pytest.raises(ConfigurationError):
            make_result(players=("A", "B", "C"))

    def test_label_count_must_match_rounds(self):
        with pytest.raises(ConfigurationError):
            make_result(round_labels=("Final",))


class TestConfidenceIntervals:
    """Test Wilson score intervals."""

    def setup_method(self):
        self.result = make_result()

    def test_intervals_bracket_estimate(self):
        lower, upper = self.result.confidence_intervals()
        probabilities = self.result.probabilities()
        assert lower.shape == upper.shape == probabilities.shape
        assert np.all(lower <= probabilities)
        assert np.all(probabilities <= upper)
        assert np.all((lower >= 0.0) & (upper <= 1.0))

    def test_zero_count_interval_is_nonempty(self):
        lower, upper = self.result.confidence_intervals()
        assert lower[3, 1] == pytest.approx(0.0, abs=1e-12)
        assert upper[3, 1] > 0.0

    def test_wider_at_higher_level(self):
        lower_90, upper_90 = self.result.confidence_intervals(0.90)
        lower_99, upper_99 = self.result.confidence_intervals(0.99)
        assert np.all(upper_99 - lower_99 > upper_90 - lower_90)

    def test_known_value(self):
        # Wilson interval for 6/10 at 95%
        result = make_result()
        lower, upper = result.confidence_intervals(0.95)
        assert lower[0, 1] == pytest.approx(0.3127, abs=1e-4)
        assert upper[0, 1] == pytest.approx(0.8318, abs=1e-4)

    @pytest.mark.parametrize("level", [0.0, 1.0, 1.5, -0.1])
    def test_invalid_level(self, level):
        with pytest.raises(ConfigurationError):
            self.result.confidence_intervals(level)
