"""Explicitly owned source of random draws.

Every sampling call in the estimation package receives a RandomSource. A run
owns one source for its whole lifetime; parallel workers get independent
children spawned from the parent's seed sequence.
"""

import logging
import time
from typing import List, Optional, Union

import numpy as np

logger = logging.getLogger(__name__)


def seed_from_time_of_day() -> int:
    """Derive a seed from the wall clock, mixing seconds and microseconds."""
    now = time.time()
    seconds = int(now)
    microseconds = int((now - seconds) * 1_000_000)
    return ((seconds >> 10) ^ (microseconds << 10)) + 1


class RandomSource:
    """Uniform(0, 1) and zero-mean Gaussian draws backed by a numpy Generator.

    Args:
        seed_sequence: Seed sequence the underlying generator is built from
    """

    def __init__(self, seed_sequence: np.random.SeedSequence) -> None:
        self.seed_sequence = seed_sequence
        self.generator = np.random.default_rng(seed_sequence)

    @classmethod
    def from_seed(cls, seed: Optional[int] = None) -> 'RandomSource':
        """Create a source from an integer seed, or from the time of day.

        Args:
            seed: Seed value (None = derive from the wall clock)

        Returns:
            New RandomSource
        """
        if seed is None:
            seed = seed_from_time_of_day()
        logger.info(f"Setting random seed to {seed}")
        return cls(np.random.SeedSequence(seed))

    @property
    def seed(self) -> Optional[int]:
        entropy = self.seed_sequence.entropy
        return entropy if isinstance(entropy, int) else None

    def uniform(self, size: Optional[int] = None) -> Union[float, np.ndarray]:
        """Draw from Uniform[0, 1)."""
        return self.generator.random(size)

    def gaussian(self, sigma: float, size: Optional[int] = None) -> Union[float, np.ndarray]:
        """Draw from Gaussian(0, sigma). Callers add the mean."""
        return self.generator.normal(0.0, sigma, size)

    def spawn(self, count: int) -> List['RandomSource']:
        """Create independent child sources, one per parallel unit of work."""
        return [RandomSource(child) for child in self.seed_sequence.spawn(count)]
