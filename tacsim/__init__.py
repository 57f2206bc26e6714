"""TAC Training Dataset Simulator.

Generates linked synthetic datasets for analyst training. Provides:
- TargetCatalog / SampleTypeAdjustment: validated prevalence tables
- SampleBatcher: splits samples into array cards with one NTC each
- DetectionSimulator: per (sample, target) detection and result fields
- WellAssigner: per-sample well layout on the card grid
- CardEmitter / emit_all: end-to-end card generation and writing
- CardQualityControl: consistency checks and positivity summaries
- survey: sample sheet, household survey and Quanti-Tray enumeration samplers
- export: CSV / in-memory card writers and multi-sheet Excel export
"""

from tacsim.constants import (
    TAC_TARGETS,
    TARGET_PREVALENCE,
    SAMPLE_TYPES,
    SAMPLE_TYPE_ADJUSTMENT,
    SAMPLE_TYPE_NTC,
    RESULT_COLUMNS,
    SimulationConstants,
)
from tacsim.errors import ConfigurationError
from tacsim.config import SimulationConfig
from tacsim.catalog import TargetCatalog, SampleTypeAdjustment, build_well_grid
from tacsim.batching import SampleDescriptor, Card, SampleBatcher, control_sample
from tacsim.simulator import DetectionSimulator
from tacsim.layout import WellAssigner, create_card_heatmap
from tacsim.emitter import CardEmitter, card_filename, card_generators, emit_all
from tacsim.quality_control import CardQualityControl
from tacsim.survey import (
    household_ids,
    build_sample_sheet,
    generate_household_survey,
    generate_enumeration_table,
    quanti_tray_mpn,
)
from tacsim.export import CsvCardWriter, MemoryCardWriter, export_dataset_to_excel
from tacsim.utils import natural_sort_key, split_well

__all__ = [
    "TAC_TARGETS",
    "TARGET_PREVALENCE",
    "SAMPLE_TYPES",
    "SAMPLE_TYPE_ADJUSTMENT",
    "SAMPLE_TYPE_NTC",
    "RESULT_COLUMNS",
    "SimulationConstants",
    "ConfigurationError",
    "SimulationConfig",
    "TargetCatalog",
    "SampleTypeAdjustment",
    "build_well_grid",
    "SampleDescriptor",
    "Card",
    "SampleBatcher",
    "control_sample",
    "DetectionSimulator",
    "WellAssigner",
    "create_card_heatmap",
    "CardEmitter",
    "card_filename",
    "card_generators",
    "emit_all",
    "CardQualityControl",
    "household_ids",
    "build_sample_sheet",
    "generate_household_survey",
    "generate_enumeration_table",
    "quanti_tray_mpn",
    "CsvCardWriter",
    "MemoryCardWriter",
    "export_dataset_to_excel",
    "natural_sort_key",
    "split_well",
]
