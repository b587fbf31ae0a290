"""Configuration dataclasses for AQPE via RFPE experiments."""

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from constants import (
    DEFAULT_ALPHA,
    DEFAULT_PRECISION,
    DEFAULT_PRIOR_SAMPLES,
    DEFAULT_REPETITIONS,
    DEFAULT_TARGET_PHI,
    INITIAL_MEAN,
    INITIAL_STANDARD_DEVIATION,
    MAX_ALPHA,
    MAX_AUTO_EVIDENCE_SAMPLES,
    MAX_ITERATIONS,
    MAX_PHI,
    MAX_PRECISION,
    MIN_ALPHA,
    MIN_PHI,
    MIN_PRECISION,
    POSTERIOR_STD_INCREASE_FACTOR,
    PRINT_MODES,
    WRONG_CONVERGENCE_SIGMA,
    ZERO_ACCEPTANCE_INFLATION_FACTOR,
)

logger = logging.getLogger(__name__)


def auto_evidence_sample_count(precision: float, alpha: float) -> int:
    """Number of circuit shots per iteration needed to reach `precision`.

    Uses 4 ln(1/precision) for alpha == 1, otherwise
    (2 / (1 - alpha)) * (precision^(-2(1 - alpha)) - 1).
    """
    if alpha == 1.0:
        return int(math.ceil(4 * math.log(1 / precision)))
    return int(math.ceil((2 / (1 - alpha)) * (1 / precision ** (2 * (1 - alpha)) - 1)))


def resolve_evidence_sample_count(
    precision: float,
    alpha: float,
    requested: Optional[int] = None
) -> int:
    """Resolve the evidence sample count for an experiment.

    Args:
        precision: Target precision of the phase estimate
        alpha: Contrast exponent
        requested: None to auto-derive with the cap applied, 0 to auto-derive
            without the cap, or a positive count used as-is

    Returns:
        Number of evidence samples per iteration
    """
    if requested is not None and requested > 0:
        return requested

    count = auto_evidence_sample_count(precision, alpha)
    if requested is None and count > MAX_AUTO_EVIDENCE_SAMPLES:
        logger.warning(
            f"Required evidence samples N = {count} exceed the allowed maximum of "
            f"{MAX_AUTO_EVIDENCE_SAMPLES}. Using the maximum allowed "
            f"(request 0 samples to permit the full count)."
        )
        count = MAX_AUTO_EVIDENCE_SAMPLES
    return count


def required_circuit_depth(precision: float, alpha: float) -> int:
    """Quantum circuit depth 1 / precision^alpha, rounded up."""
    return int(math.ceil(1 / precision ** alpha))


@dataclass(frozen=True)
class ExperimentConfig:
    """Parameters of a single AQPE experiment.

    `number_of_evidence_samples` left as None is auto-derived from precision
    and alpha (capped); an explicit integer, including 0, is used literally.
    """

    target_phi: float = DEFAULT_TARGET_PHI
    precision: float = DEFAULT_PRECISION
    alpha: float = DEFAULT_ALPHA
    number_of_evidence_samples: Optional[int] = None
    number_of_prior_samples: int = DEFAULT_PRIOR_SAMPLES
    max_iterations: int = MAX_ITERATIONS
    initial_mean: float = INITIAL_MEAN
    initial_standard_deviation: float = INITIAL_STANDARD_DEVIATION
    wrong_convergence_sigma: float = WRONG_CONVERGENCE_SIGMA

    def __post_init__(self) -> None:
        if not MIN_PHI <= self.target_phi <= MAX_PHI:
            raise ValueError(f"Invalid target_phi: {self.target_phi}. Must be in [{MIN_PHI}, {MAX_PHI}]")
        if not MIN_PRECISION <= self.precision <= MAX_PRECISION:
            raise ValueError(
                f"Invalid precision: {self.precision}. Must be in [{MIN_PRECISION}, {MAX_PRECISION}]"
            )
        if not MIN_ALPHA <= self.alpha <= MAX_ALPHA:
            raise ValueError(f"Invalid alpha: {self.alpha}. Must be in [{MIN_ALPHA}, {MAX_ALPHA}]")
        if self.number_of_prior_samples <= 0:
            raise ValueError(f"Invalid number_of_prior_samples: {self.number_of_prior_samples}. Must be positive")
        if self.max_iterations <= 0:
            raise ValueError(f"Invalid max_iterations: {self.max_iterations}. Must be positive")
        if self.initial_standard_deviation <= 0:
            raise ValueError(
                f"Invalid initial_standard_deviation: {self.initial_standard_deviation}. Must be positive"
            )

        if self.number_of_evidence_samples is None:
            evidence = resolve_evidence_sample_count(self.precision, self.alpha)
            # Use object.__setattr__ because frozen=True
            object.__setattr__(self, 'number_of_evidence_samples', evidence)
        elif self.number_of_evidence_samples < 0:
            raise ValueError(
                f"Invalid number_of_evidence_samples: {self.number_of_evidence_samples}. Must be non-negative"
            )

    @property
    def tolerance(self) -> float:
        """Largest error of a converged estimate that is not a wrong convergence."""
        return self.wrong_convergence_sigma * self.precision

    @property
    def circuit_depth(self) -> int:
        return required_circuit_depth(self.precision, self.alpha)


@dataclass(frozen=True)
class FilterConfig:
    """Tuning knobs of the rejection filtering update."""

    posterior_std_increase_factor: float = POSTERIOR_STD_INCREASE_FACTOR
    zero_acceptance_inflation_factor: float = ZERO_ACCEPTANCE_INFLATION_FACTOR
    # None = retry the restricted Gaussian draw until it succeeds
    max_sampling_attempts: Optional[int] = None

    def __post_init__(self) -> None:
        if self.posterior_std_increase_factor <= 0:
            raise ValueError(
                f"Invalid posterior_std_increase_factor: {self.posterior_std_increase_factor}. Must be positive"
            )
        if self.zero_acceptance_inflation_factor < 1:
            raise ValueError(
                f"Invalid zero_acceptance_inflation_factor: {self.zero_acceptance_inflation_factor}. Must be >= 1"
            )
        if self.max_sampling_attempts is not None and self.max_sampling_attempts <= 0:
            raise ValueError(f"Invalid max_sampling_attempts: {self.max_sampling_attempts}. Must be positive")


@dataclass(frozen=True)
class RunConfig:
    """Configuration for a batch of repeated experiments."""

    number_of_repetitions: int = DEFAULT_REPETITIONS
    seed: Optional[int] = None  # None = seed from time of day
    workers: int = 1  # >1 runs experiments in worker processes

    # Print mode options:
    #   'human'   - Per-iteration and per-experiment details plus the summary
    #   'minimal' - Configuration header, one line per experiment, and summary
    #   'silent'  - No console output
    print_mode: str = 'minimal'
    show_charts: bool = False

    def __post_init__(self) -> None:
        if self.number_of_repetitions <= 0:
            raise ValueError(f"Invalid number_of_repetitions: {self.number_of_repetitions}. Must be positive")
        if self.seed is not None and self.seed < 0:
            raise ValueError(f"Invalid seed: {self.seed}. Must be non-negative")
        if self.workers <= 0:
            raise ValueError(f"Invalid workers: {self.workers}. Must be positive")
        if self.print_mode not in PRINT_MODES:
            raise ValueError(f"Invalid print_mode: {self.print_mode}. Use one of {PRINT_MODES}")


@dataclass
class Config:
    """Master configuration combining all config sections."""

    experiment: ExperimentConfig = field(default_factory=ExperimentConfig)
    filter: FilterConfig = field(default_factory=FilterConfig)
    run: RunConfig = field(default_factory=RunConfig)
