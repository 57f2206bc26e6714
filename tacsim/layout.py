"""WellAssigner — maps each sample's result rows onto the card well grid.

Addressing is local to a sample: the i-th catalog target always lands in
grid[i mod len(grid)], so every sample on a card shares one layout.
Also provides the per-sample layout heatmap.
"""

from typing import Sequence

import numpy as np
import pandas as pd
import plotly.graph_objects as go

from tacsim.catalog import TargetCatalog
from tacsim.errors import ConfigurationError
from tacsim.utils import split_well


class WellAssigner:
    @staticmethod
    def _check_grid(grid: Sequence[str]):
        if len(grid) == 0:
            raise ConfigurationError("Well grid is empty")

    @staticmethod
    def layout(catalog: TargetCatalog, grid: Sequence[str]) -> dict:
        """Return the target -> well mapping shared by every sample."""
        WellAssigner._check_grid(grid)
        return {target: grid[i % len(grid)] for i, target in enumerate(catalog)}

    @staticmethod
    def assign(frame: pd.DataFrame, grid: Sequence[str]) -> pd.DataFrame:
        """Populate the Well column by position inside each sample's block.

        Rows must already be grouped by sample and in catalog order within a
        sample, as DetectionSimulator.simulate produces them. Numbering restarts
        at every sample block, so the i-th catalog target lands in
        grid[i % len(grid)] even when two blocks share a sample id.
        """
        WellAssigner._check_grid(grid)

        result = frame.copy()
        if result.empty:
            result["Well"] = pd.Series(dtype=object)
            return result

        # A block starts where the sample id changes or the first catalog target recurs
        starts = (result["Sample"] != result["Sample"].shift()) | (
            result["Target"] == result["Target"].iloc[0]
        )
        blocks = starts.cumsum()
        positions = result.groupby(blocks, sort=False).cumcount()
        result["Well"] = [grid[i % len(grid)] for i in positions]
        return result


def create_card_heatmap(frame: pd.DataFrame, sample: str) -> go.Figure:
    """Draw one sample's well grid with Cq as colour."""
    if frame is None or frame.empty:
        return go.Figure()

    sample_rows = frame[frame["Sample"] == sample]
    if sample_rows.empty:
        return go.Figure()

    wells = [split_well(w) for w in sample_rows["Well"]]
    rows = sorted({r for r, _ in wells})
    cols = sorted({c for _, c in wells})

    plate_values = np.full((len(rows), len(cols)), np.nan)
    plate_text = [["" for _ in cols] for _ in rows]

    for (well_row, well_col), (_, row) in zip(wells, sample_rows.iterrows()):
        r_idx = rows.index(well_row)
        c_idx = cols.index(well_col)

        if pd.notna(row["Cq"]):
            plate_values[r_idx, c_idx] = row["Cq"]
            cq_text = f"Cq: {row['Cq']:.2f}"
        else:
            cq_text = row["Amp Status"]

        plate_text[r_idx][c_idx] = (
            f"{row['Well']}<br>{str(row['Target'])[:18]}<br>{cq_text}"
        )

    fig = go.Figure(
        data=go.Heatmap(
            z=plate_values,
            x=[str(c) for c in cols],
            y=rows,
            text=plate_text,
            hoverinfo="text",
            colorscale=[[0, "#e74c3c"], [0.5, "#f1c40f"], [1, "#2ecc71"]],
            zmin=15,
            zmax=40,
            colorbar=dict(title="Cq"),
        )
    )

    fig.update_layout(
        title=f"Card Layout: {sample}",
        xaxis=dict(title="Column", side="top", dtick=1),
        yaxis=dict(title="Row", autorange="reversed"),
        height=350,
        width=900,
    )

    return fig
