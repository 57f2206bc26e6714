"""
Tests for SimulationConfig defaults and validation.
"""

import dataclasses

import pytest

from tacsim import ConfigurationError, SimulationConfig, SimulationConstants


class TestSimulationConfig:
    def test_defaults(self):
        config = SimulationConfig()

        assert config.capacity == 7
        assert config.probability_cap == 0.95
        assert config.p_inconclusive == 0.1
        assert config.cq_range == (20.0, 35.0)
        assert config.amp_score_positive == SimulationConstants.AMP_SCORE_POSITIVE
        assert config.cq_confidence_negative == (0.0, 0.5)
        assert config.seed is None
        assert config.label == "TAC"

    def test_from_dict_ignores_unknown_keys(self):
        config = SimulationConfig.from_dict(
            {"capacity": 4, "seed": 11, "n_households": 30, "sample_types": ["effluent"]}
        )

        assert config.capacity == 4
        assert config.seed == 11

    def test_ranges_normalised_to_float_tuples(self):
        config = SimulationConfig(cq_range=[18, 30])
        assert config.cq_range == (18.0, 30.0)

    @pytest.mark.parametrize("capacity", [0, -3, 1.5, "7"])
    def test_invalid_capacity(self, capacity):
        with pytest.raises(ConfigurationError):
            SimulationConfig(capacity=capacity)

    @pytest.mark.parametrize("field", ["probability_cap", "p_inconclusive"])
    @pytest.mark.parametrize("value", [-0.01, 1.01])
    def test_probabilities_must_lie_in_unit_interval(self, field, value):
        with pytest.raises(ConfigurationError):
            SimulationConfig(**{field: value})

    def test_inverted_range_rejected(self):
        with pytest.raises(ConfigurationError, match="cq_sd_positive"):
            SimulationConfig(cq_sd_positive=(1.0, 0.1))

    def test_malformed_range_rejected(self):
        with pytest.raises(ConfigurationError):
            SimulationConfig(cq_range=(20.0, 30.0, 35.0))

    @pytest.mark.parametrize("field", ["cq_range", "amp_score_negative", "cq_sd_positive"])
    @pytest.mark.parametrize("bound", [float("nan"), float("inf")])
    def test_non_finite_range_rejected(self, field, bound):
        with pytest.raises(ConfigurationError, match=field):
            SimulationConfig(**{field: (0.1, bound)})
        with pytest.raises(ConfigurationError, match=field):
            SimulationConfig(**{field: (bound, 0.1)})

    @pytest.mark.parametrize("label", ["runs/A", "a\\b", "C:", "[TAC]", "TAC*", "TAC?"])
    def test_label_with_path_or_sheet_characters_rejected(self, label):
        with pytest.raises(ConfigurationError, match="forbidden"):
            SimulationConfig(label=label)

    def test_plain_label_accepted(self):
        assert SimulationConfig(label="WASH-2024_r1").label == "WASH-2024_r1"

    def test_empty_label_rejected(self):
        with pytest.raises(ConfigurationError):
            SimulationConfig(label="")

    def test_frozen(self):
        config = SimulationConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.capacity = 3

    def test_replace_revalidates(self):
        with pytest.raises(ConfigurationError):
            dataclasses.replace(SimulationConfig(), capacity=0)
