"""DetectionSimulator — per-card detection draws and dependent result fields.

For every (sample, target) pair on a card the simulator computes a detection
probability from the catalog baseline and the sample-type multiplier, draws
the outcome, and derives Cq, amplification status, result call and the
quality scores so that they always agree with each other.
No Streamlit dependency — all methods are pure computation.
"""

import numpy as np
import pandas as pd

from tacsim.batching import Card
from tacsim.catalog import SampleTypeAdjustment, TargetCatalog
from tacsim.config import SimulationConfig
from tacsim.constants import (
    AMP_STATUS_AMP,
    AMP_STATUS_INCONCLUSIVE,
    AMP_STATUS_NO_AMP,
    RESULT_COLUMNS,
    RESULT_EQUIVOCAL,
    RESULT_NEGATIVE,
    RESULT_POSITIVE,
    SAMPLE_TYPE_NTC,
    SimulationConstants,
)


class DetectionSimulator:
    @staticmethod
    def detection_probability(
        baseline: float, factor: float, sample_type: str, cap: float
    ) -> float:
        """Baseline x sample-type factor, clamped into [0, cap].

        No-template controls always get 0 so they can never be a true positive.
        """
        if sample_type == SAMPLE_TYPE_NTC:
            return 0.0
        return float(min(max(baseline * factor, 0.0), cap))

    @staticmethod
    def _uniform(rng: np.random.Generator, bounds, decimals: int) -> float:
        low, high = bounds
        return round(float(rng.uniform(low, high)), decimals)

    @staticmethod
    def derive_fields(
        detected: bool, rng: np.random.Generator, config: SimulationConfig
    ) -> dict:
        """Draw the fields that depend on the detection outcome."""
        score_dp = SimulationConstants.SCORE_DECIMALS

        if detected:
            return {
                "Cq": DetectionSimulator._uniform(
                    rng, config.cq_range, SimulationConstants.CQ_DECIMALS
                ),
                "Amp Status": AMP_STATUS_AMP,
                "Result": RESULT_POSITIVE,
                "Amp Score": DetectionSimulator._uniform(
                    rng, config.amp_score_positive, score_dp
                ),
                "Cq Confidence": DetectionSimulator._uniform(
                    rng, config.cq_confidence_positive, score_dp
                ),
                "Cq SD": DetectionSimulator._uniform(
                    rng, config.cq_sd_positive, score_dp
                ),
            }

        inconclusive = bool(rng.random() < config.p_inconclusive)
        return {
            "Cq": np.nan,
            "Amp Status": AMP_STATUS_INCONCLUSIVE if inconclusive else AMP_STATUS_NO_AMP,
            "Result": RESULT_EQUIVOCAL if inconclusive else RESULT_NEGATIVE,
            "Amp Score": DetectionSimulator._uniform(
                rng, config.amp_score_negative, score_dp
            ),
            "Cq Confidence": DetectionSimulator._uniform(
                rng, config.cq_confidence_negative, score_dp
            ),
            "Cq SD": np.nan,
        }

    @staticmethod
    def simulate(
        card: Card,
        catalog: TargetCatalog,
        adjustment: SampleTypeAdjustment,
        rng: np.random.Generator,
        config: SimulationConfig = None,
    ) -> pd.DataFrame:
        """Simulate one result row per (sample, target) pair on a card.

        Args:
            card: Card whose samples (real + NTC) are assayed.
            catalog: Target catalog; its order fixes the row order per sample.
            adjustment: Per-sample-type prevalence multipliers.
            rng: Generator used for every draw on this card.
            config: Probability cap, inconclusive rate and score ranges.

        Returns:
            DataFrame in RESULT_COLUMNS order, grouped by sample in card order
            and by catalog order within a sample. The Well column is left
            empty for WellAssigner.

        Raises:
            ConfigurationError: if a sample type has no adjustment factor.
        """
        config = config or SimulationConfig()

        # Resolve every factor before drawing anything
        factors = [adjustment.factor(s.sample_type) for s in card.samples]

        rows = []
        for sample, factor in zip(card.samples, factors):
            for target in catalog:
                probability = DetectionSimulator.detection_probability(
                    catalog.baseline(target),
                    factor,
                    sample.sample_type,
                    config.probability_cap,
                )
                detected = bool(rng.random() < probability)

                row = {
                    "Well": None,
                    "Card": card.index,
                    "Sample": sample.sample_id,
                    "Household": sample.household_id,
                    "Sample Type": sample.sample_type,
                    "Target": target,
                    "Detection Probability": probability,
                    "Detected": detected,
                }
                row.update(DetectionSimulator.derive_fields(detected, rng, config))
                rows.append(row)

        return pd.DataFrame(rows, columns=RESULT_COLUMNS)
