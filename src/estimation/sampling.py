"""Gaussian sampling restricted to the open phase interval (-pi, pi)."""

import math
from typing import Optional

import numpy as np

from estimation.random_source import RandomSource


class SamplingBudgetExceededError(RuntimeError):
    """Raised when the restricted sampler runs out of its attempt budget."""


def sample_restricted_gaussian(
    mu: float,
    sigma: float,
    count: int,
    source: RandomSource,
    max_attempts: Optional[int] = None
) -> np.ndarray:
    """Draw `count` samples from Gaussian(mu, sigma), rejecting |x| >= pi.

    Candidates are drawn in batches and accepted in draw order until enough
    fall inside the interval. Without an attempt budget the loop runs until it
    succeeds, which can take many draws when sigma is large relative to pi or
    mu lies far outside the interval.

    Args:
        mu: Mean of the Gaussian
        sigma: Standard deviation of the Gaussian
        count: Number of samples to return
        source: Random source to draw from
        max_attempts: Maximum candidate draws before giving up (None = unbounded)

    Returns:
        Array of shape (count,) with every value strictly inside (-pi, pi)

    Raises:
        SamplingBudgetExceededError: If max_attempts candidates were drawn
            without collecting `count` valid samples
    """
    samples = np.empty(count, dtype=np.float64)
    filled = 0
    attempts = 0

    while filled < count:
        batch_size = count - filled
        if max_attempts is not None:
            if attempts >= max_attempts:
                raise SamplingBudgetExceededError(
                    f"Collected {filled} of {count} samples from Gaussian({mu}, {sigma}) "
                    f"restricted to (-pi, pi) within {max_attempts} attempts"
                )
            batch_size = min(batch_size, max_attempts - attempts)

        candidates = source.gaussian(sigma, batch_size) + mu
        attempts += batch_size

        valid = candidates[np.abs(candidates) < math.pi]
        samples[filled:filled + len(valid)] = valid
        filled += len(valid)

    return samples
