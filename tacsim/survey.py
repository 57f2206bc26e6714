"""Sample sheet, household survey and microbial enumeration samplers.

These tables sit beside the array-card results: the sample sheet feeds the
card batcher, the survey describes each household, and the enumeration table
holds Quanti-Tray style MPN counts with resistance indicators for every real
sample. All draws go through an explicit numpy Generator.
"""

from datetime import date, timedelta
from typing import Iterable, List, Sequence

import numpy as np
import pandas as pd
from scipy.optimize import brentq

from tacsim.batching import SampleDescriptor
from tacsim.constants import (
    SAMPLE_TYPE_CODES,
    SAMPLE_TYPE_COMPOST,
    SAMPLE_TYPE_EFFLUENT,
    SAMPLE_TYPE_PRODUCE,
)
from tacsim.errors import ConfigurationError

# ==================== SURVEY VOCABULARY ====================
VILLAGES = ["Kibera North", "Kibera South", "Mathare", "Korogocho", "Mukuru"]
WATER_SOURCES = ["Piped (yard)", "Piped (public tap)", "Borehole", "Protected well", "Vendor"]
WATER_SOURCE_WEIGHTS = [0.15, 0.35, 0.2, 0.15, 0.15]
SANITATION_TYPES = ["Flush toilet", "Pit latrine (slab)", "Pit latrine (no slab)", "Shared latrine", "Open defecation"]
SANITATION_WEIGHTS = [0.1, 0.3, 0.2, 0.35, 0.05]

# ==================== QUANTI-TRAY GEOMETRY ====================
LARGE_WELLS = 49
SMALL_WELLS = 48
LARGE_WELL_ML = 1.86
SMALL_WELL_ML = 0.186
MPN_CEILING = 2419.6

# Per sample type: (mean log10 coliforms per 100 mL or g, SD, dilution factor)
ENUMERATION_PROFILE = {
    SAMPLE_TYPE_EFFLUENT: (6.5, 0.5, 10000),
    SAMPLE_TYPE_COMPOST: (5.0, 0.7, 1000),
    SAMPLE_TYPE_PRODUCE: (3.0, 0.8, 10),
}

# log10(E. coli / coliforms) and log10(ESBL E. coli / E. coli) ranges
ECOLI_LOG_RATIO = (-1.5, -0.3)
ESBL_LOG_RATIO = (-3.0, -0.5)

# Probability an E. coli-positive sample carries each resistance phenotype
RESISTANCE_RATES = {
    SAMPLE_TYPE_EFFLUENT: {"CIP Resistant": 0.45, "TET Resistant": 0.65},
    SAMPLE_TYPE_COMPOST: {"CIP Resistant": 0.30, "TET Resistant": 0.55},
    SAMPLE_TYPE_PRODUCE: {"CIP Resistant": 0.15, "TET Resistant": 0.35},
}


# ==================== SAMPLE SHEET ====================
def household_ids(n: int, prefix: str = "HH") -> List[str]:
    """Sequential household identifiers (HH001, HH002, ...)."""
    if n < 0:
        raise ConfigurationError(f"Household count must be non-negative, got {n}")
    return [f"{prefix}{i:03d}" for i in range(1, n + 1)]


def build_sample_sheet(
    households: Iterable[str],
    sample_types: Sequence[str] = (
        SAMPLE_TYPE_EFFLUENT,
        SAMPLE_TYPE_COMPOST,
        SAMPLE_TYPE_PRODUCE,
    ),
) -> List[SampleDescriptor]:
    """Cross households with sample types, household-major.

    Sample identifiers look like "HH001_EF". No-template controls are added
    by the batcher and cannot be requested here.
    """
    unknown = [t for t in sample_types if t not in SAMPLE_TYPE_CODES]
    if unknown:
        raise ConfigurationError(
            f"Sample types not available for field samples: {', '.join(unknown)}"
        )

    return [
        SampleDescriptor(
            sample_id=f"{hh}_{SAMPLE_TYPE_CODES[sample_type]}",
            household_id=hh,
            sample_type=sample_type,
        )
        for hh in households
        for sample_type in sample_types
    ]


# ==================== HOUSEHOLD SURVEY ====================
def generate_household_survey(
    households: Sequence[str],
    rng: np.random.Generator,
    start_date: date = date(2024, 3, 4),
    field_days: int = 28,
) -> pd.DataFrame:
    """One survey record per household."""
    n = len(households)
    if n == 0:
        return pd.DataFrame()

    size = np.clip(rng.poisson(4.5, n), 1, 12)
    under5 = np.minimum(rng.binomial(size, 0.2), size - 1)
    survey_dates = [
        start_date + timedelta(days=int(d)) for d in rng.integers(0, field_days, n)
    ]

    return pd.DataFrame(
        {
            "Household": list(households),
            "Village": [str(v) for v in rng.choice(VILLAGES, n)],
            "Survey Date": survey_dates,
            "Household Size": size,
            "Children Under 5": under5,
            "Water Source": [str(v) for v in rng.choice(WATER_SOURCES, n, p=WATER_SOURCE_WEIGHTS)],
            "Sanitation": [str(v) for v in rng.choice(SANITATION_TYPES, n, p=SANITATION_WEIGHTS)],
            "Chickens": rng.negative_binomial(2, 0.25, n),
            "Cattle": rng.binomial(4, 0.15, n),
            "Pigs": rng.binomial(3, 0.1, n),
            "Antibiotic Use (30d)": rng.random(n) < 0.3,
            "Composts Manure": rng.random(n) < 0.55,
            "Vegetable Garden": rng.random(n) < 0.6,
        }
    )


# ==================== ENUMERATION ====================
def quanti_tray_mpn(large_positive: int, small_positive: int) -> float:
    """Most probable number per 100 mL for a 49/48 well tray.

    Maximum likelihood estimate of the organism density given the number of
    positive large and small wells. 0 when no well is positive; the tray
    ceiling when every well is positive.
    """
    if not 0 <= large_positive <= LARGE_WELLS or not 0 <= small_positive <= SMALL_WELLS:
        raise ValueError(
            f"Positive well counts out of range: large={large_positive}, small={small_positive}"
        )

    if large_positive == 0 and small_positive == 0:
        return 0.0
    if large_positive == LARGE_WELLS and small_positive == SMALL_WELLS:
        return MPN_CEILING

    negative_volume = (LARGE_WELLS - large_positive) * LARGE_WELL_ML + (
        SMALL_WELLS - small_positive
    ) * SMALL_WELL_ML

    def score(density):
        positive_term = (
            large_positive * LARGE_WELL_ML / np.expm1(density * LARGE_WELL_ML)
            + small_positive * SMALL_WELL_ML / np.expm1(density * SMALL_WELL_ML)
        )
        return positive_term - negative_volume

    with np.errstate(over="ignore"):
        density_per_ml = brentq(score, 1e-8, 1e3)
    return round(min(density_per_ml * 100, MPN_CEILING), 1)


def _positive_wells(rng, density_per_ml):
    large = rng.binomial(LARGE_WELLS, -np.expm1(-density_per_ml * LARGE_WELL_ML))
    small = rng.binomial(SMALL_WELLS, -np.expm1(-density_per_ml * SMALL_WELL_ML))
    return int(large), int(small)


def _thin_wells(rng, wells, parent_density, child_density):
    """Draw the child organism's positive wells as a subset of the parent's."""
    large, small = wells
    if parent_density <= 0:
        return 0, 0
    keep_large = np.expm1(-child_density * LARGE_WELL_ML) / np.expm1(-parent_density * LARGE_WELL_ML)
    keep_small = np.expm1(-child_density * SMALL_WELL_ML) / np.expm1(-parent_density * SMALL_WELL_ML)
    return (
        int(rng.binomial(large, min(keep_large, 1.0))),
        int(rng.binomial(small, min(keep_small, 1.0))),
    )


def generate_enumeration_table(
    samples: Sequence[SampleDescriptor], rng: np.random.Generator
) -> pd.DataFrame:
    """Quanti-Tray counts, MPN and resistance indicators per real sample.

    E. coli wells are a subset of coliform wells and ESBL E. coli wells a
    subset of E. coli wells, so the MPN values never invert.
    """
    rows = []
    for sample in samples:
        if sample.is_control:
            continue
        if sample.sample_type not in ENUMERATION_PROFILE:
            raise ConfigurationError(
                f"No enumeration profile for sample type '{sample.sample_type}'"
            )

        log_mean, log_sd, dilution = ENUMERATION_PROFILE[sample.sample_type]
        coliform_density = 10 ** rng.normal(log_mean, log_sd) / 100 / dilution
        ecoli_density = coliform_density * 10 ** rng.uniform(*ECOLI_LOG_RATIO)
        esbl_density = ecoli_density * 10 ** rng.uniform(*ESBL_LOG_RATIO)

        coliform_wells = _positive_wells(rng, coliform_density)
        ecoli_wells = _thin_wells(rng, coliform_wells, coliform_density, ecoli_density)
        esbl_wells = _thin_wells(rng, ecoli_wells, ecoli_density, esbl_density)

        row = {
            "Sample": sample.sample_id,
            "Household": sample.household_id,
            "Sample Type": sample.sample_type,
            "Dilution": dilution,
        }
        for organism, (large, small) in (
            ("Coliform", coliform_wells),
            ("E. coli", ecoli_wells),
            ("ESBL E. coli", esbl_wells),
        ):
            row[f"{organism} Large Wells"] = large
            row[f"{organism} Small Wells"] = small
            row[f"{organism} MPN/100mL"] = round(quanti_tray_mpn(large, small) * dilution, 1)

        ecoli_present = row["E. coli MPN/100mL"] > 0
        row["ESBL Positive"] = row["ESBL E. coli MPN/100mL"] > 0
        row["CTX Resistant"] = row["ESBL Positive"]
        for phenotype, rate in RESISTANCE_RATES[sample.sample_type].items():
            row[phenotype] = bool(ecoli_present and rng.random() < rate)

        rows.append(row)

    return pd.DataFrame(rows)
