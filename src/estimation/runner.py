"""Convergence loop for a single AQPE experiment.

Each iteration derives the circuit controls from the current belief, runs the
circuit for the true phase, draws a fresh prior sample set from the belief,
and replaces the belief with the rejection filtering posterior. The loop
stops as soon as the posterior standard deviation drops below the precision
(CONVERGED) or when the iteration budget is used up (EXHAUSTED).
"""

import logging
from typing import Optional

from config import ExperimentConfig, FilterConfig
from data_types import BeliefState, ExperimentOutcome, FilterResult, IterationRecord
from estimation.circuit import derive_parameters, run_phase_circuit
from estimation.random_source import RandomSource
from estimation.rejection_filter import RejectionFilter
from estimation.sampling import sample_restricted_gaussian

logger = logging.getLogger(__name__)


def run_iteration(
    belief: BeliefState,
    config: ExperimentConfig,
    rejection_filter: RejectionFilter,
    source: RandomSource,
    max_sampling_attempts: Optional[int] = None
) -> FilterResult:
    """Run one circuit mapping and Bayesian update.

    Args:
        belief: Current belief over the phase
        config: Experiment parameters (true phase, alpha, sample counts)
        rejection_filter: Filter performing the posterior update
        source: Random source shared by the circuit, sampler and filter
        max_sampling_attempts: Attempt budget for the restricted sampler

    Returns:
        FilterResult with the posterior belief
    """
    parameters = derive_parameters(belief, config.alpha)

    evidence = run_phase_circuit(config.target_phi, parameters, config.number_of_evidence_samples, source)
    prior_samples = sample_restricted_gaussian(
        belief.mean,
        belief.standard_deviation,
        config.number_of_prior_samples,
        source,
        max_attempts=max_sampling_attempts,
    )

    return rejection_filter.update(prior_samples, evidence, parameters, belief, source)


def run_experiment(
    config: ExperimentConfig,
    filter_config: FilterConfig,
    source: RandomSource,
    experiment_number: int = 1,
    record_history: bool = True
) -> ExperimentOutcome:
    """Run one experiment until convergence or until the iteration budget ends.

    Args:
        config: Experiment parameters
        filter_config: Rejection filter settings
        source: Random source for every draw in this experiment
        experiment_number: 1-indexed number used in records and logs
        record_history: Whether to keep one IterationRecord per iteration;
            when False the outcome carries an empty history

    Returns:
        ExperimentOutcome with the final estimate and per-iteration history
    """
    rejection_filter = RejectionFilter(filter_config)
    belief = BeliefState(config.initial_mean, config.initial_standard_deviation)
    history = [IterationRecord(0, belief.mean, belief.standard_deviation)] if record_history else []

    for iteration in range(config.max_iterations):
        result = run_iteration(
            belief,
            config,
            rejection_filter,
            source,
            max_sampling_attempts=filter_config.max_sampling_attempts,
        )
        belief = result.belief
        if record_history:
            history.append(
                IterationRecord(iteration + 1, belief.mean, belief.standard_deviation, result.accepted_count)
            )

        if belief.standard_deviation < config.precision:
            logger.debug(f"Experiment {experiment_number} converged after {iteration + 1} iterations")
            return ExperimentOutcome(
                experiment_number=experiment_number,
                converged=True,
                iteration_count=iteration + 1,
                estimated_phi=belief.mean,
                final_standard_deviation=belief.standard_deviation,
                history=history,
            )

    logger.debug(f"Experiment {experiment_number} exhausted {config.max_iterations} iterations")
    return ExperimentOutcome(
        experiment_number=experiment_number,
        converged=False,
        iteration_count=config.max_iterations,
        estimated_phi=belief.mean,
        final_standard_deviation=belief.standard_deviation,
        history=history,
    )
