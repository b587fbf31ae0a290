"""Phase estimation components for AQPE via rejection filtering."""

from estimation.random_source import RandomSource, seed_from_time_of_day
from estimation.sampling import sample_restricted_gaussian, SamplingBudgetExceededError
from estimation.circuit import (
    calculate_m,
    calculate_theta,
    derive_parameters,
    outcome_zero_probability,
    run_phase_circuit,
)
from estimation.rejection_filter import RejectionFilter
from estimation.runner import run_iteration, run_experiment
from estimation.aggregator import AggregateReport, ExperimentAggregator

__all__ = [
    'RandomSource',
    'seed_from_time_of_day',
    'sample_restricted_gaussian',
    'SamplingBudgetExceededError',
    'calculate_m',
    'calculate_theta',
    'derive_parameters',
    'outcome_zero_probability',
    'run_phase_circuit',
    'RejectionFilter',
    'run_iteration',
    'run_experiment',
    'AggregateReport',
    'ExperimentAggregator',
]
