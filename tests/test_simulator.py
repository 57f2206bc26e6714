"""
Tests for DetectionSimulator.

These cover the detection probability chain (baseline, sample-type factor,
clamp) and the consistency of the derived Cq / amplification / result fields.
"""

import numpy as np
import pandas as pd
import pytest

from tacsim import (
    RESULT_COLUMNS,
    SAMPLE_TYPE_NTC,
    CardQualityControl,
    ConfigurationError,
    DetectionSimulator,
    SampleBatcher,
    SampleDescriptor,
    SampleTypeAdjustment,
    SimulationConfig,
    TargetCatalog,
)


def _single_sample_card(sample_type="typeX"):
    return SampleBatcher.batch([SampleDescriptor("S1", "HH1", sample_type)], 1)[0]


def _default_card_frame(samples, seed=0, config=None):
    card = SampleBatcher.batch(samples, 7)[0]
    return DetectionSimulator.simulate(
        card,
        TargetCatalog.default(),
        SampleTypeAdjustment.default(),
        np.random.default_rng(seed),
        config or SimulationConfig(),
    )


class TestTwoTargetScenario:
    """Catalog {A: 0.5, B: 0.0}, one real sample plus the NTC."""

    def test_produces_four_rows(self, two_target_catalog, type_x_adjustment):
        frame = DetectionSimulator.simulate(
            _single_sample_card(),
            two_target_catalog,
            type_x_adjustment,
            np.random.default_rng(42),
        )

        assert len(frame) == 4
        assert list(frame["Sample"]) == ["S1", "S1", "NTC_card01", "NTC_card01"]
        assert list(frame["Target"]) == ["A", "B", "A", "B"]

    @pytest.mark.parametrize("seed", range(25))
    def test_zero_prevalence_and_controls_never_detected(
        self, two_target_catalog, type_x_adjustment, seed
    ):
        frame = DetectionSimulator.simulate(
            _single_sample_card(),
            two_target_catalog,
            type_x_adjustment,
            np.random.default_rng(seed),
        )

        b_row = frame[(frame["Sample"] == "S1") & (frame["Target"] == "B")]
        assert not b_row["Detected"].iloc[0]

        ntc_rows = frame[frame["Sample Type"] == SAMPLE_TYPE_NTC]
        assert len(ntc_rows) == 2
        assert not ntc_rows["Detected"].any()
        assert (ntc_rows["Result"] != "Positive").all()

    def test_target_a_detected_sometimes(self, two_target_catalog, type_x_adjustment):
        outcomes = []
        for seed in range(200):
            frame = DetectionSimulator.simulate(
                _single_sample_card(),
                two_target_catalog,
                type_x_adjustment,
                np.random.default_rng(seed),
            )
            outcomes.append(bool(frame["Detected"].iloc[0]))

        assert 0.3 < np.mean(outcomes) < 0.7


class TestDetectionProbability:
    def test_baseline_times_factor(self):
        assert DetectionSimulator.detection_probability(0.5, 0.6, "compost", 0.95) == pytest.approx(0.3)

    def test_clamped_to_cap(self):
        assert DetectionSimulator.detection_probability(0.9, 5.0, "typeX", 0.95) == 0.95
        assert DetectionSimulator.detection_probability(0.9, 1.0, "typeX", 0.5) == 0.5

    def test_clamped_below_at_zero(self):
        assert DetectionSimulator.detection_probability(0.5, -1.0, "typeX", 0.95) == 0.0

    def test_ntc_forced_to_zero(self):
        assert DetectionSimulator.detection_probability(1.0, 1.0, SAMPLE_TYPE_NTC, 1.0) == 0.0

    def test_probability_column_never_exceeds_cap(self):
        catalog = TargetCatalog(["A", "B"], {"A": 0.9, "B": 0.4})
        adjustment = SampleTypeAdjustment({"hot": 5.0, SAMPLE_TYPE_NTC: 0.0})
        config = SimulationConfig(probability_cap=0.7)

        frame = DetectionSimulator.simulate(
            _single_sample_card("hot"), catalog, adjustment, np.random.default_rng(1), config
        )

        assert (frame["Detection Probability"] <= 0.7).all()
        real = frame[frame["Sample"] == "S1"].set_index("Target")
        assert real.loc["A", "Detection Probability"] == 0.7
        assert real.loc["B", "Detection Probability"] == 0.7


class TestDerivedFields:
    """Consistency of Cq, Amp Status, Result and the quality scores."""

    def test_default_run_satisfies_invariants(self, mixed_samples):
        frame = _default_card_frame(mixed_samples)
        assert CardQualityControl.check_invariants(frame) == []

    def test_cq_amp_and_positive_coincide(self, mixed_samples):
        for seed in range(5):
            frame = _default_card_frame(mixed_samples, seed)

            has_cq = frame["Cq"].notna()
            assert (has_cq == frame["Detected"]).all()
            assert (has_cq == (frame["Amp Status"] == "Amp")).all()
            assert (has_cq == (frame["Result"] == "Positive")).all()
            assert (has_cq == frame["Cq SD"].notna()).all()

    def test_equivocal_exactly_when_inconclusive(self, mixed_samples):
        frame = _default_card_frame(mixed_samples, seed=3)
        negatives = frame[~frame["Detected"]]

        assert set(negatives["Amp Status"]) <= {"No Amp", "Inconclusive"}
        assert ((negatives["Amp Status"] == "Inconclusive") == (negatives["Result"] == "Equivocal")).all()
        assert ((negatives["Amp Status"] == "No Amp") == (negatives["Result"] == "Negative")).all()

    def test_positive_values_within_ranges(self):
        catalog = TargetCatalog(["A", "B", "C"], {"A": 1.0, "B": 1.0, "C": 1.0})
        adjustment = SampleTypeAdjustment({"typeX": 1.0, SAMPLE_TYPE_NTC: 0.0})
        config = SimulationConfig(probability_cap=1.0)
        samples = [SampleDescriptor(f"S{i}", f"HH{i}", "typeX") for i in range(7)]
        card = SampleBatcher.batch(samples, 7)[0]

        frame = DetectionSimulator.simulate(card, catalog, adjustment, np.random.default_rng(9), config)
        real = frame[frame["Sample Type"] == "typeX"]

        assert real["Detected"].all()
        assert real["Cq"].between(20.0, 35.0).all()
        assert real["Amp Score"].between(1.2, 2.0).all()
        assert real["Cq Confidence"].between(0.8, 1.0).all()
        assert real["Cq SD"].between(0.1, 1.0).all()
        assert (real["Cq"] == real["Cq"].round(2)).all()

    def test_negative_values_within_ranges(self, mixed_samples):
        frame = _default_card_frame(mixed_samples, seed=11)
        negatives = frame[~frame["Detected"]]

        assert negatives["Amp Score"].between(0.0, 1.1).all()
        assert negatives["Cq Confidence"].between(0.0, 0.5).all()
        assert negatives["Cq"].isna().all()
        assert negatives["Cq SD"].isna().all()

    def test_inconclusive_rate_extremes(self, two_target_catalog, type_x_adjustment):
        always = SimulationConfig(p_inconclusive=1.0)
        never = SimulationConfig(p_inconclusive=0.0)
        card = _single_sample_card()

        frame = DetectionSimulator.simulate(
            card, two_target_catalog, type_x_adjustment, np.random.default_rng(0), always
        )
        negatives = frame[~frame["Detected"]]
        assert (negatives["Result"] == "Equivocal").all()

        frame = DetectionSimulator.simulate(
            card, two_target_catalog, type_x_adjustment, np.random.default_rng(0), never
        )
        negatives = frame[~frame["Detected"]]
        assert (negatives["Result"] == "Negative").all()

    def test_ntc_never_positive_with_certain_targets(self):
        catalog = TargetCatalog(["A"], {"A": 1.0})
        adjustment = SampleTypeAdjustment({"typeX": 1.0, SAMPLE_TYPE_NTC: 1.0})
        config = SimulationConfig(probability_cap=1.0)

        frame = DetectionSimulator.simulate(
            _single_sample_card(), catalog, adjustment, np.random.default_rng(5), config
        )

        ntc = frame[frame["Sample Type"] == SAMPLE_TYPE_NTC]
        assert ntc["Detection Probability"].iloc[0] == 0.0
        assert not ntc["Detected"].iloc[0]


class TestSimulateContract:
    def test_columns_and_order(self, mixed_samples):
        frame = _default_card_frame(mixed_samples)
        catalog = TargetCatalog.default()
        card = SampleBatcher.batch(mixed_samples, 7)[0]

        assert list(frame.columns) == RESULT_COLUMNS
        assert len(frame) == card.size * len(catalog)
        assert list(frame["Sample"]) == [
            s.sample_id for s in card.samples for _ in range(len(catalog))
        ]
        assert list(frame["Target"]) == list(catalog.targets) * card.size
        assert (frame["Card"] == 1).all()

    def test_missing_adjustment_factor(self, two_target_catalog, type_x_adjustment):
        card = _single_sample_card("effluent")

        with pytest.raises(ConfigurationError, match="effluent"):
            DetectionSimulator.simulate(
                card, two_target_catalog, type_x_adjustment, np.random.default_rng(0)
            )

    def test_same_seed_same_table(self, mixed_samples):
        first = _default_card_frame(mixed_samples, seed=123)
        second = _default_card_frame(mixed_samples, seed=123)

        pd.testing.assert_frame_equal(first, second)

    def test_different_seed_different_table(self, mixed_samples):
        first = _default_card_frame(mixed_samples, seed=1)
        second = _default_card_frame(mixed_samples, seed=2)

        assert not first.equals(second)
