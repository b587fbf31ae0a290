"""Rejection filtering Bayesian update of the phase belief.

Each prior sample is a hypothesis for the phase. Its likelihood of producing
the observed evidence histogram is accumulated in log space, shifted so the
best hypothesis has log-likelihood 0, and exponentiated. The resulting
weights lie in [0, 1] with a maximum of exactly 1, so a single uniform draw
per sample is a valid accept/reject test without a separate normalisation
constant. The accepted samples approximate the posterior; their empirical
mean and standard deviation become the new Gaussian belief.

Degenerate acceptance counts:
- one accepted sample: its value becomes the mean, the previous standard
  deviation is halved;
- no accepted sample (only possible when every hypothesis is ruled out by the
  evidence): the mean is kept, the previous standard deviation is inflated by
  `zero_acceptance_inflation_factor` and capped at pi.
"""

import logging
import math

import numpy as np

from config import FilterConfig
from data_types import BeliefState, DerivedParameters, EvidenceHistogram, FilterResult
from estimation.circuit import outcome_zero_probability
from estimation.random_source import RandomSource

logger = logging.getLogger(__name__)


def _shift_to_max(log_likelihoods: np.ndarray) -> np.ndarray:
    """Subtract the largest finite log-likelihood from every entry.

    Left unchanged when every entry is -inf (all hypotheses ruled out).
    """
    finite = np.isfinite(log_likelihoods)
    if not finite.any():
        return log_likelihoods
    return log_likelihoods - log_likelihoods[finite].max()


class RejectionFilter:
    """Posterior update from prior samples and one evidence histogram.

    Args:
        config: FilterConfig with the standard deviation adjustment factors
    """

    def __init__(self, config: FilterConfig) -> None:
        self.posterior_std_increase_factor = config.posterior_std_increase_factor
        self.zero_acceptance_inflation_factor = config.zero_acceptance_inflation_factor

    def log_likelihoods(
        self,
        prior_samples: np.ndarray,
        evidence: EvidenceHistogram,
        parameters: DerivedParameters
    ) -> np.ndarray:
        """Shifted log-likelihood of the evidence under each prior sample.

        The running maximum is subtracted after each outcome's contribution,
        so the result has a maximum of 0 (or is all -inf).
        """
        q0 = outcome_zero_probability(prior_samples, parameters)
        log_likelihoods = np.zeros(len(prior_samples), dtype=np.float64)

        for count, probabilities in ((evidence.count0, q0), (evidence.count1, 1 - q0)):
            # 0 * log(0) would be nan; an outcome never observed contributes nothing
            if count > 0:
                with np.errstate(divide='ignore'):
                    log_likelihoods += count * np.log(probabilities)
            log_likelihoods = _shift_to_max(log_likelihoods)

        return log_likelihoods

    def weights(
        self,
        prior_samples: np.ndarray,
        evidence: EvidenceHistogram,
        parameters: DerivedParameters
    ) -> np.ndarray:
        """Unnormalised acceptance probabilities in [0, 1]."""
        return np.exp(self.log_likelihoods(prior_samples, evidence, parameters))

    def update(
        self,
        prior_samples: np.ndarray,
        evidence: EvidenceHistogram,
        parameters: DerivedParameters,
        belief: BeliefState,
        source: RandomSource
    ) -> FilterResult:
        """Compute the posterior belief.

        Args:
            prior_samples: Samples drawn from the current belief
            evidence: Observed outcome counts for this iteration
            parameters: Circuit controls used to produce the evidence
            belief: Current belief (used by the degenerate-acceptance branches)
            source: Random source for the accept/reject draws

        Returns:
            FilterResult with the new belief and the number of accepted samples
        """
        weights = self.weights(prior_samples, evidence, parameters)
        uniforms = source.uniform(len(prior_samples))
        accepted = prior_samples[uniforms <= weights]
        accepted_count = len(accepted)

        if accepted_count == 0:
            standard_deviation = min(belief.standard_deviation * self.zero_acceptance_inflation_factor, math.pi)
            logger.debug(
                f"No prior sample accepted; keeping mean {belief.mean:.6e}, "
                f"widening standard deviation to {standard_deviation:.6e}"
            )
            return FilterResult(BeliefState(belief.mean, standard_deviation), 0)

        if accepted_count == 1:
            logger.debug("Single prior sample accepted; halving the standard deviation")
            return FilterResult(BeliefState(float(accepted[0]), belief.standard_deviation / 2), 1)

        mean = float(accepted.mean())
        variance = float(np.mean(accepted * accepted)) - mean * mean
        standard_deviation = math.sqrt(max(variance, 0.0)) * self.posterior_std_increase_factor
        return FilterResult(BeliefState(mean, standard_deviation), accepted_count)
