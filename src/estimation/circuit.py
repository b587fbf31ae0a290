"""Closed-form model of the phase estimation circuit.

The circuit is a projective two-outcome measurement: outcome 0 occurs with
probability (1 + cos(M * (phi - theta))) / 2. No quantum state is evolved;
shots are independent Bernoulli trials.
"""

from typing import Union

import numpy as np

from constants import EVIDENCE_CHUNK_SIZE
from data_types import BeliefState, DerivedParameters, EvidenceHistogram
from estimation.random_source import RandomSource


def calculate_m(standard_deviation: float, alpha: float) -> float:
    """Number of applications of the unitary, standard_deviation^(-alpha)."""
    if standard_deviation == 0.0:
        return 1.0
    return 1 / standard_deviation ** alpha


def calculate_theta(mean: float, standard_deviation: float) -> float:
    return mean - standard_deviation


def derive_parameters(belief: BeliefState, alpha: float) -> DerivedParameters:
    """Circuit controls (M, theta) for the current belief."""
    return DerivedParameters(
        M=calculate_m(belief.standard_deviation, alpha),
        theta=calculate_theta(belief.mean, belief.standard_deviation),
    )


def outcome_zero_probability(
    phi: Union[float, np.ndarray],
    parameters: DerivedParameters
) -> Union[float, np.ndarray]:
    """Probability of measuring 0 given phase phi (scalar or array)."""
    return (1 + np.cos(parameters.M * (phi - parameters.theta))) / 2


def run_phase_circuit(
    phi: float,
    parameters: DerivedParameters,
    number_of_samples: int,
    source: RandomSource
) -> EvidenceHistogram:
    """Simulate `number_of_samples` shots of the circuit for true phase phi.

    Args:
        phi: True phase
        parameters: Circuit controls M and theta
        number_of_samples: Number of shots
        source: Random source for the uniform draws

    Returns:
        EvidenceHistogram whose counts sum to number_of_samples
    """
    p0 = outcome_zero_probability(phi, parameters)

    count0 = 0
    remaining = number_of_samples
    while remaining > 0:
        chunk = min(remaining, EVIDENCE_CHUNK_SIZE)
        count0 += int(np.count_nonzero(source.uniform(chunk) < p0))
        remaining -= chunk

    # Outcome 1 is the complement of outcome 0, not a separate draw
    return EvidenceHistogram(count0=count0, count1=number_of_samples - count0)
