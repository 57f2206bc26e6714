"""Simulation settings.

`SimulationConfig` collects every tunable of a card generation run. Defaults
come from `SimulationConstants`; the Streamlit sidebar hands its settings in
as a plain dict through `SimulationConfig.from_dict`.
"""

import math
from dataclasses import dataclass, fields
from typing import Optional, Tuple

from tacsim.constants import SimulationConstants
from tacsim.errors import ConfigurationError

Range = Tuple[float, float]

_RANGE_FIELDS = (
    "cq_range",
    "amp_score_positive",
    "amp_score_negative",
    "cq_confidence_positive",
    "cq_confidence_negative",
    "cq_sd_positive",
)

# Not allowed in file names or Excel sheet names
LABEL_FORBIDDEN_CHARS = '/\\:[]*?'


@dataclass(frozen=True)
class SimulationConfig:
    capacity: int = SimulationConstants.CARD_CAPACITY
    probability_cap: float = SimulationConstants.PROBABILITY_CAP
    p_inconclusive: float = SimulationConstants.P_INCONCLUSIVE
    cq_range: Range = SimulationConstants.CQ_RANGE
    amp_score_positive: Range = SimulationConstants.AMP_SCORE_POSITIVE
    amp_score_negative: Range = SimulationConstants.AMP_SCORE_NEGATIVE
    cq_confidence_positive: Range = SimulationConstants.CQ_CONFIDENCE_POSITIVE
    cq_confidence_negative: Range = SimulationConstants.CQ_CONFIDENCE_NEGATIVE
    cq_sd_positive: Range = SimulationConstants.CQ_SD_POSITIVE
    seed: Optional[int] = None
    label: str = SimulationConstants.CARD_LABEL

    def __post_init__(self):
        if isinstance(self.capacity, bool) or not isinstance(self.capacity, int):
            raise ConfigurationError(
                f"Card capacity must be an integer, got {self.capacity!r}"
            )
        if self.capacity <= 0:
            raise ConfigurationError(
                f"Card capacity must be positive, got {self.capacity}"
            )

        for name in ("probability_cap", "p_inconclusive"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must lie in [0, 1], got {value}")

        for name in _RANGE_FIELDS:
            value = getattr(self, name)
            if (
                len(value) != 2
                or not all(math.isfinite(v) for v in value)
                or value[0] > value[1]
            ):
                raise ConfigurationError(
                    f"{name} must be a (low, high) pair of finite numbers with low <= high, got {value}"
                )
            # Normalise lists coming from JSON / widgets into tuples
            object.__setattr__(self, name, (float(value[0]), float(value[1])))

        if not isinstance(self.label, str) or not self.label:
            raise ConfigurationError("Card label must be a non-empty string")
        bad = sorted({c for c in self.label if c in LABEL_FORBIDDEN_CHARS})
        if bad:
            raise ConfigurationError(
                f"Card label {self.label!r} contains forbidden characters: {''.join(bad)}"
            )

    @classmethod
    def from_dict(cls, settings: dict) -> "SimulationConfig":
        """Build a config from a settings dict, ignoring keys it does not know."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in settings.items() if k in known})
