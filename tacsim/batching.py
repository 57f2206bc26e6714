"""SampleBatcher — partitions an ordered sample list into array cards.

Each card holds up to `capacity` real samples followed by one synthesized
no-template control whose identifier embeds the card index.
"""

import math
from typing import NamedTuple, Optional, Sequence, Tuple

from tacsim.constants import NTC_ID_TEMPLATE, SAMPLE_TYPE_NTC
from tacsim.errors import ConfigurationError


class SampleDescriptor(NamedTuple):
    sample_id: str
    household_id: Optional[str]
    sample_type: str

    @property
    def is_control(self) -> bool:
        return self.sample_type == SAMPLE_TYPE_NTC


class Card(NamedTuple):
    index: int
    samples: Tuple[SampleDescriptor, ...]

    @property
    def real_samples(self) -> Tuple[SampleDescriptor, ...]:
        return self.samples[:-1]

    @property
    def control(self) -> SampleDescriptor:
        return self.samples[-1]

    @property
    def size(self) -> int:
        return len(self.samples)


def control_sample(card_index: int) -> SampleDescriptor:
    """Synthesize the no-template control for a card."""
    return SampleDescriptor(
        sample_id=NTC_ID_TEMPLATE.format(index=card_index),
        household_id=None,
        sample_type=SAMPLE_TYPE_NTC,
    )


class SampleBatcher:
    @staticmethod
    def card_count(n_samples: int, capacity: int) -> int:
        SampleBatcher._check_capacity(capacity)
        return math.ceil(n_samples / capacity)

    @staticmethod
    def batch(samples: Sequence[SampleDescriptor], capacity: int) -> list:
        """Split samples into contiguous cards of `capacity`, plus one NTC each.

        The final card may hold fewer real samples; it is never padded.

        Args:
            samples: Ordered sample descriptors.
            capacity: Real samples per card (positive integer).

        Returns:
            List of Card with 1-based, gap-free indices. Empty input gives [].

        Raises:
            ConfigurationError: on invalid capacity, a repeated sample_id, or
                a sample_id that collides with a synthesized control id.
        """
        SampleBatcher._check_capacity(capacity)
        samples = list(samples)
        SampleBatcher._check_sample_ids(samples, SampleBatcher.card_count(len(samples), capacity))

        cards = []
        for start in range(0, len(samples), capacity):
            index = start // capacity + 1
            chunk = tuple(samples[start:start + capacity])
            cards.append(Card(index=index, samples=chunk + (control_sample(index),)))
        return cards

    @staticmethod
    def _check_sample_ids(samples, n_cards):
        seen = set()
        duplicates = set()
        for sample in samples:
            if sample.sample_id in seen:
                duplicates.add(sample.sample_id)
            seen.add(sample.sample_id)
        if duplicates:
            raise ConfigurationError(f"Duplicate sample ids: {sorted(duplicates)}")

        control_ids = {control_sample(i).sample_id for i in range(1, n_cards + 1)}
        clashes = seen & control_ids
        if clashes:
            raise ConfigurationError(
                f"Sample ids collide with no-template control ids: {sorted(clashes)}"
            )

    @staticmethod
    def _check_capacity(capacity):
        if isinstance(capacity, bool) or not isinstance(capacity, int):
            raise ConfigurationError(
                f"Card capacity must be an integer, got {capacity!r}"
            )
        if capacity <= 0:
            raise ConfigurationError(f"Card capacity must be positive, got {capacity}")
