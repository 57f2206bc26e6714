"""Target catalog, sample-type adjustment table, and well grid.

Both lookup tables are validated when they are built, so a missing entry
fails at startup with ConfigurationError instead of surfacing mid-run.
"""

from types import MappingProxyType
from typing import Iterable, Mapping, Tuple

from tacsim.constants import (
    SAMPLE_TYPE_ADJUSTMENT,
    TAC_TARGETS,
    TARGET_PREVALENCE,
    WELL_COLUMNS,
    WELL_ROWS,
)
from tacsim.errors import ConfigurationError


class TargetCatalog:
    """Ordered, immutable list of assay targets with baseline prevalence."""

    def __init__(self, targets: Iterable[str], prevalence: Mapping[str, float]):
        targets = tuple(targets)
        if not targets:
            raise ConfigurationError("Target catalog is empty")

        duplicates = sorted({t for t in targets if targets.count(t) > 1})
        if duplicates:
            raise ConfigurationError(
                f"Duplicate targets in catalog: {', '.join(duplicates)}"
            )

        missing = [t for t in targets if t not in prevalence]
        if missing:
            raise ConfigurationError(
                f"No prevalence configured for: {', '.join(missing)}"
            )

        out_of_range = [t for t in targets if not 0.0 <= prevalence[t] <= 1.0]
        if out_of_range:
            raise ConfigurationError(
                f"Prevalence outside [0, 1] for: {', '.join(out_of_range)}"
            )

        self._targets = targets
        self._positions = MappingProxyType({t: i for i, t in enumerate(targets)})
        self._prevalence = MappingProxyType(
            {t: float(prevalence[t]) for t in targets}
        )

    @classmethod
    def default(cls) -> "TargetCatalog":
        return cls(TAC_TARGETS, TARGET_PREVALENCE)

    @property
    def targets(self) -> Tuple[str, ...]:
        return self._targets

    @property
    def prevalence(self) -> Mapping[str, float]:
        return self._prevalence

    def baseline(self, target: str) -> float:
        try:
            return self._prevalence[target]
        except KeyError:
            raise ConfigurationError(f"Unknown target '{target}'") from None

    def position(self, target: str) -> int:
        try:
            return self._positions[target]
        except KeyError:
            raise ConfigurationError(f"Unknown target '{target}'") from None

    def __len__(self):
        return len(self._targets)

    def __iter__(self):
        return iter(self._targets)

    def __contains__(self, target):
        return target in self._prevalence

    def __repr__(self):
        return f"TargetCatalog({len(self._targets)} targets)"


class SampleTypeAdjustment:
    """Per-sample-type multiplier applied to baseline prevalence."""

    def __init__(self, factors: Mapping[str, float]):
        negative = [k for k, v in factors.items() if v < 0]
        if negative:
            raise ConfigurationError(
                f"Adjustment factors must be non-negative: {', '.join(negative)}"
            )
        self._factors = MappingProxyType({k: float(v) for k, v in factors.items()})

    @classmethod
    def default(cls) -> "SampleTypeAdjustment":
        return cls(SAMPLE_TYPE_ADJUSTMENT)

    @property
    def factors(self) -> Mapping[str, float]:
        return self._factors

    def factor(self, sample_type: str) -> float:
        try:
            return self._factors[sample_type]
        except KeyError:
            raise ConfigurationError(
                f"No adjustment factor configured for sample type '{sample_type}'"
            ) from None

    def __contains__(self, sample_type):
        return sample_type in self._factors


def build_well_grid(rows: str = WELL_ROWS, columns: Iterable[int] = WELL_COLUMNS) -> Tuple[str, ...]:
    """Enumerate well addresses row-major (A1, A2, ..., A12, B1, ...)."""
    columns = tuple(columns)
    return tuple(f"{row}{col}" for row in rows for col in columns)
