"""Type definitions for AQPE via RFPE experiments."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple


class BeliefState(NamedTuple):
    """Gaussian approximation of the posterior over the phase."""

    mean: float
    standard_deviation: float


class DerivedParameters(NamedTuple):
    """Circuit controls derived from the current belief."""

    M: float
    theta: float


class EvidenceHistogram(NamedTuple):
    """Outcome counts of one batch of circuit shots."""

    count0: int
    count1: int

    @property
    def total(self) -> int:
        return self.count0 + self.count1


class FilterResult(NamedTuple):
    """Posterior produced by one rejection filtering update."""

    belief: BeliefState
    accepted_count: int


class IterationRecord(NamedTuple):
    """Belief after a given iteration (iteration 0 is the initial belief)."""

    iteration: int
    mean: float
    standard_deviation: float
    accepted_count: int = 0


class ExperimentStatus(Enum):
    """States of the experiment convergence loop."""
    RUNNING = "running"
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"


class ConvergenceClass(Enum):
    """Classification of a finished experiment by the aggregator."""
    NOT_CONVERGED = "not_converged"
    CONVERGED = "converged"
    WRONG_CONVERGENCE = "wrong_convergence"


@dataclass
class ExperimentOutcome:
    """Terminal result of one experiment.

    `iteration_count` is the iteration at which the precision was reached, or
    the iteration budget when the experiment did not converge.
    """

    experiment_number: int
    converged: bool
    iteration_count: int
    estimated_phi: float
    final_standard_deviation: float
    history: List[IterationRecord] = field(default_factory=list)

    @property
    def status(self) -> ExperimentStatus:
        return ExperimentStatus.CONVERGED if self.converged else ExperimentStatus.EXHAUSTED

    def absolute_error(self, target_phi: float) -> float:
        return abs(target_phi - self.estimated_phi)
