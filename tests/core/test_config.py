"""Tests for configuration validation."""

import pytest

from knockout_odds.core.config import (
    FrameModelConfig,
    SimulationConfig,
    validate_n_trials,
)
from knockout_odds.core.constants import DEFAULT_N_TRIALS
from knockout_odds.core.exceptions import ConfigurationError


class TestSimulationConfig:
    """Test SimulationConfig defaults and validation."""

    def test_defaults(self):
        config = SimulationConfig()
        config.validate()
        assert config.n_trials == DEFAULT_N_TRIALS
        assert config.seed is None
        assert not config.is_parallel
        assert config.frame_model.range_policy == "clamp"

    def test_parallel_executors(self):
        assert SimulationConfig(executor="thread").is_parallel
        assert SimulationConfig(executor="process").is_parallel

    @pytest.mark.parametrize(
        "overrides",
        [
            {"n_trials": 0},
            {"executor": "cluster"},
            {"max_workers": 0},
            {"chunk_size": 0},
            {"seed": -1},
            {"frame_model": FrameModelConfig(range_policy="ignore")},
            {"frame_model": FrameModelConfig(scaling_factor=float("nan"))},
            {"frame_model": FrameModelConfig(scaling_factor="0.7")},
        ],
    )
    def test_invalid_fields(self, overrides):
        with pytest.raises(ConfigurationError):
            SimulationConfig(**overrides).validate()


class TestValidateTrials:
    """Test the trial-count check."""

    @pytest.mark.parametrize("n_trials", [1, 100_000])
    def test_valid(self, n_trials):
        validate_n_trials(n_trials)

    @pytest.mark.parametrize("n_trials", [0, -1, 1.0, "10", True, None])
    def test_invalid(self, n_trials):
        with pytest.raises(ConfigurationError):
            validate_n_trials(n_trials)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            validate_n_trials(0)
