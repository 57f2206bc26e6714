"""Writers and workbook export for generated datasets.

Card writers are the persistence collaborators the CardEmitter calls once per
card: CsvCardWriter puts one CSV per card in a directory, MemoryCardWriter
keeps the tables in memory. export_dataset_to_excel bundles survey,
enumeration and card tables into a single multi-sheet workbook.
"""

import io
import logging
from collections import OrderedDict
from pathlib import Path
from typing import Dict

import pandas as pd

LOGGER = logging.getLogger(__name__)


class CsvCardWriter:
    """Write each card table to `<directory>/<name>`."""

    def __init__(self, directory):
        self.directory = Path(directory)

    def __call__(self, name: str, frame: pd.DataFrame) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / name
        frame.to_csv(path, index=False)
        LOGGER.debug("wrote %s rows to %s", len(frame), path)


class MemoryCardWriter:
    """Collect card tables in emission order."""

    def __init__(self):
        self.tables = OrderedDict()

    def __call__(self, name: str, frame: pd.DataFrame) -> None:
        self.tables[name] = frame

    def to_csv_bytes(self, name: str) -> bytes:
        return self.tables[name].to_csv(index=False).encode("utf-8")


def export_dataset_to_excel(
    cards: Dict[str, pd.DataFrame],
    survey: pd.DataFrame = None,
    enumeration: pd.DataFrame = None,
    params: dict = None,
    qc_stats: dict = None,
) -> bytes:
    """Export the whole dataset as one workbook.

    Args:
        cards: Artifact name -> card result table, in card order.
        survey: Optional household survey table.
        enumeration: Optional Quanti-Tray enumeration table.
        params: Optional generation parameters dict.
        qc_stats: Optional dict from CardQualityControl.get_card_summary_stats().
    """
    output = io.BytesIO()

    with pd.ExcelWriter(output, engine="xlsxwriter") as writer:
        if params:
            pd.DataFrame([params]).to_excel(
                writer, sheet_name="Generation_Parameters", index=False
            )

        if survey is not None and not survey.empty:
            survey.to_excel(writer, sheet_name="Household_Survey", index=False)

        if enumeration is not None and not enumeration.empty:
            enumeration.to_excel(writer, sheet_name="Enumeration", index=False)

        # Card sheets: strip the extension, Excel allows 31 characters
        for name, frame in cards.items():
            sheet_name = Path(name).stem[:31]
            frame.to_excel(writer, sheet_name=sheet_name, index=False)

        _write_qc_sheet(writer, qc_stats)

    return output.getvalue()


def _write_qc_sheet(writer, qc_stats: dict = None):
    """Write QC Report sheet with card-level summary stats."""
    if not qc_stats:
        return

    labels = {
        "cards": "Cards",
        "samples": "Samples",
        "ntc_samples": "NTC Samples",
        "total_wells": "Total Wells",
        "positive_wells": "Positive Wells",
        "equivocal_wells": "Equivocal Wells",
        "negative_wells": "Negative Wells",
        "positivity_pct": "Positivity (%)",
        "cq_mean": "Cq Mean (positives)",
        "high_cq_count": "High Cq Wells (>35)",
        "ntc_contaminated": "Contaminated NTC Wells",
        "invariant_violations": "Invariant Violations",
    }
    rows = [
        {"Metric": label, "Value": qc_stats.get(key, "")}
        for key, label in labels.items()
    ]
    pd.DataFrame(rows).to_excel(writer, sheet_name="QC_Report", index=False)
