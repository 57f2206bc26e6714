"""CardEmitter — runs batching, simulation and well layout for every card.

Each finished card table is handed to a writer callable `writer(name, frame)`
under a dated artifact name. Row generation is fully determined by the seed;
only the artifact names depend on the injected clock.
"""

import dataclasses
import logging
from datetime import date, datetime, timedelta
from typing import Callable, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from tacsim.batching import Card, SampleBatcher, SampleDescriptor
from tacsim.catalog import SampleTypeAdjustment, TargetCatalog, build_well_grid
from tacsim.config import SimulationConfig
from tacsim.constants import SimulationConstants
from tacsim.errors import ConfigurationError
from tacsim.layout import WellAssigner
from tacsim.simulator import DetectionSimulator

LOGGER = logging.getLogger(__name__)

Writer = Callable[[str, pd.DataFrame], None]
Clock = Callable[[], datetime]


def card_filename(
    card_index: int,
    label: str,
    epoch: Union[date, datetime],
    generated_at: datetime,
    extension: str = SimulationConstants.FILE_EXTENSION,
) -> str:
    """Build `card<NN>_<label>_<YYYYMMDD>_Results_<YYYYMMDD>_<HHMMSS>.<ext>`.

    The run date is the epoch shifted by `card_index` days, so consecutive
    cards look like consecutive runs.
    """
    run_day = (epoch + timedelta(days=card_index)).strftime("%Y%m%d")
    return (
        f"card{card_index:02d}_{label}_{run_day}_Results_{run_day}_"
        f"{generated_at:%H%M%S}.{extension}"
    )


def card_generators(
    n_cards: int, seed: Union[int, np.random.SeedSequence, None] = None
) -> List[np.random.Generator]:
    """One independent generator per card, spawned from a single seed.

    A SeedSequence passed in is copied before spawning, so reusing the same
    object always yields the same streams.
    """
    if isinstance(seed, np.random.SeedSequence):
        root = np.random.SeedSequence(
            seed.entropy, spawn_key=seed.spawn_key, pool_size=seed.pool_size
        )
    else:
        root = np.random.SeedSequence(seed)
    children = root.spawn(n_cards)
    return [np.random.default_rng(child) for child in children]


class CardEmitter:
    def __init__(
        self,
        catalog: TargetCatalog = None,
        adjustment: SampleTypeAdjustment = None,
        grid: Sequence[str] = None,
        config: SimulationConfig = None,
        writer: Writer = None,
        clock: Clock = None,
        epoch: Union[date, datetime] = None,
    ):
        self.catalog = catalog or TargetCatalog.default()
        self.adjustment = adjustment or SampleTypeAdjustment.default()
        self.grid = tuple(grid) if grid is not None else build_well_grid()
        self.config = config or SimulationConfig()
        self.writer = writer
        self.clock = clock or datetime.now
        self.epoch = epoch

        if not self.grid:
            raise ConfigurationError("Well grid is empty")

    def iter_cards(
        self, samples: Sequence[SampleDescriptor], seed=None
    ) -> Iterator[Tuple[Card, pd.DataFrame]]:
        """Yield (card, result table) for every card without persisting anything."""
        seed = self.config.seed if seed is None else seed
        cards = SampleBatcher.batch(samples, self.config.capacity)

        for card, rng in zip(cards, card_generators(len(cards), seed)):
            frame = DetectionSimulator.simulate(
                card, self.catalog, self.adjustment, rng, self.config
            )
            frame = WellAssigner.assign(frame, self.grid)
            LOGGER.debug(
                "simulated card=%s samples=%s rows=%s positives=%s",
                card.index,
                card.size,
                len(frame),
                int(frame["Detected"].sum()),
            )
            yield card, frame

    def emit_all(
        self, samples: Sequence[SampleDescriptor], seed=None
    ) -> List[str]:
        """Generate every card and pass each table to the writer.

        Returns:
            Artifact names in card order.

        Raises:
            ConfigurationError: on invalid configuration or missing writer.
            Exception: whatever the writer raises; the run stops at that card.
        """
        if self.writer is None:
            raise ConfigurationError("No writer configured for card emission")

        generated_at = self.clock()
        epoch = self.epoch if self.epoch is not None else generated_at.date()

        names = []
        for card, frame in self.iter_cards(samples, seed):
            name = card_filename(card.index, self.config.label, epoch, generated_at)
            try:
                self.writer(name, frame)
            except Exception:
                LOGGER.error("writer failed for card=%s name=%s", card.index, name, exc_info=True)
                raise
            names.append(name)

        LOGGER.info("emitted %s cards for %s samples", len(names), len(samples))
        return names


def emit_all(
    samples: Sequence[SampleDescriptor],
    capacity: Optional[int] = None,
    catalog: TargetCatalog = None,
    adjustment: SampleTypeAdjustment = None,
    rng_seed: Optional[int] = None,
    writer: Writer = None,
    clock: Clock = None,
    grid: Sequence[str] = None,
    config: SimulationConfig = None,
) -> List[str]:
    """Functional entry point: batch, simulate, lay out and write every card.

    `capacity` overrides the capacity of `config` when given; otherwise the
    config's own capacity (default 7) applies.
    """
    config = config or SimulationConfig()
    if capacity is not None:
        config = dataclasses.replace(config, capacity=capacity)
    emitter = CardEmitter(
        catalog=catalog,
        adjustment=adjustment,
        grid=grid,
        config=config,
        writer=writer,
        clock=clock,
    )
    return emitter.emit_all(samples, seed=rng_seed)
