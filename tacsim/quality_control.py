"""CardQualityControl — consistency checks and positivity summaries for card tables.

Verifies that the Cq / amplification / result fields agree, flags
no-template controls that did not come back clean, and compares observed
positivity per target with the probabilities the simulator used.
No Streamlit dependency — all methods are pure computation.
"""

import numpy as np
import pandas as pd
from scipy import stats

from tacsim.constants import (
    AMP_STATUS_AMP,
    AMP_STATUS_INCONCLUSIVE,
    AMP_STATUS_NO_AMP,
    RESULT_EQUIVOCAL,
    RESULT_NEGATIVE,
    RESULT_POSITIVE,
    SAMPLE_TYPE_NTC,
)


class CardQualityControl:
    CQ_HIGH_THRESHOLD = 35.0
    POSITIVITY_ALPHA = 0.05

    @staticmethod
    def check_invariants(frame: pd.DataFrame) -> list:
        """Return one message per row whose fields contradict each other."""
        if frame is None or frame.empty:
            return []

        problems = []
        for _, row in frame.iterrows():
            label = f"{row['Sample']}/{row['Target']}"
            has_cq = pd.notna(row["Cq"])

            if has_cq != bool(row["Detected"]):
                problems.append(f"{label}: Cq present={has_cq} but Detected={row['Detected']}")
            if has_cq:
                if row["Amp Status"] != AMP_STATUS_AMP or row["Result"] != RESULT_POSITIVE:
                    problems.append(
                        f"{label}: Cq reported with {row['Amp Status']}/{row['Result']}"
                    )
                if pd.isna(row["Cq SD"]):
                    problems.append(f"{label}: Cq reported without Cq SD")
            else:
                if row["Amp Status"] not in (AMP_STATUS_NO_AMP, AMP_STATUS_INCONCLUSIVE):
                    problems.append(f"{label}: no Cq but Amp Status {row['Amp Status']}")
                expected = (
                    RESULT_EQUIVOCAL
                    if row["Amp Status"] == AMP_STATUS_INCONCLUSIVE
                    else RESULT_NEGATIVE
                )
                if row["Result"] != expected:
                    problems.append(
                        f"{label}: {row['Amp Status']} should be {expected}, got {row['Result']}"
                    )
                if pd.notna(row["Cq SD"]):
                    problems.append(f"{label}: Cq SD reported without Cq")

        return problems

    @staticmethod
    def ntc_contamination(frame: pd.DataFrame) -> pd.DataFrame:
        """Rows where a no-template control reads Positive."""
        if frame is None or frame.empty:
            return pd.DataFrame()

        ntc = frame[frame["Sample Type"] == SAMPLE_TYPE_NTC]
        return ntc[ntc["Result"] == RESULT_POSITIVE][["Card", "Sample", "Target", "Well", "Cq"]]

    @staticmethod
    def positivity_summary(frame: pd.DataFrame) -> pd.DataFrame:
        """Observed vs expected positivity per target over real samples.

        The p-value is a two-sided exact binomial test of the positive count
        against the mean detection probability the simulator used.
        """
        if frame is None or frame.empty:
            return pd.DataFrame()

        real = frame[frame["Sample Type"] != SAMPLE_TYPE_NTC]
        if real.empty:
            return pd.DataFrame()

        summary = (
            real.groupby("Target", sort=False)
            .agg(
                Tested=("Detected", "size"),
                Positives=("Detected", "sum"),
                Equivocal=("Result", lambda s: int((s == RESULT_EQUIVOCAL).sum())),
                Expected_Rate=("Detection Probability", "mean"),
            )
            .reset_index()
        )
        summary["Positives"] = summary["Positives"].astype(int)
        summary["Observed_Rate"] = (summary["Positives"] / summary["Tested"]).round(3)
        summary["Expected_Rate"] = summary["Expected_Rate"].round(3)

        def binomial_p(row):
            expected = float(np.clip(row["Expected_Rate"], 0.0, 1.0))
            return stats.binomtest(int(row["Positives"]), int(row["Tested"]), expected).pvalue

        summary["p_value"] = summary.apply(binomial_p, axis=1).round(4)
        summary["Flag"] = np.where(
            summary["p_value"] < CardQualityControl.POSITIVITY_ALPHA, "Check", "OK"
        )

        return summary[
            [
                "Target",
                "Tested",
                "Positives",
                "Equivocal",
                "Observed_Rate",
                "Expected_Rate",
                "p_value",
                "Flag",
            ]
        ]

    @staticmethod
    def get_card_summary_stats(frame: pd.DataFrame) -> dict:
        """Overall totals for one card or for several cards concatenated."""
        if frame is None or frame.empty:
            return {}

        positives = frame[frame["Result"] == RESULT_POSITIVE]
        ntc = frame[frame["Sample Type"] == SAMPLE_TYPE_NTC]

        return {
            "cards": int(frame["Card"].nunique()),
            "samples": int(frame["Sample"].nunique()),
            "ntc_samples": int(ntc["Sample"].nunique()),
            "total_wells": len(frame),
            "positive_wells": len(positives),
            "equivocal_wells": int((frame["Result"] == RESULT_EQUIVOCAL).sum()),
            "negative_wells": int((frame["Result"] == RESULT_NEGATIVE).sum()),
            "positivity_pct": round(len(positives) / len(frame) * 100, 1),
            "cq_mean": round(float(positives["Cq"].mean()), 2) if not positives.empty else np.nan,
            "high_cq_count": int((positives["Cq"] > CardQualityControl.CQ_HIGH_THRESHOLD).sum()),
            "ntc_contaminated": len(CardQualityControl.ntc_contamination(frame)),
            "invariant_violations": len(CardQualityControl.check_invariants(frame)),
        }
