"""Output formatting utilities for experiment reports.

Pure functions turning configuration, iteration records, experiment outcomes,
and the aggregate report into console text.
"""

from typing import TYPE_CHECKING, List

from config import Config, ExperimentConfig, auto_evidence_sample_count
from data_types import ExperimentOutcome, IterationRecord

if TYPE_CHECKING:
    from estimation.aggregator import AggregateReport


def format_configuration(config: Config) -> str:
    """Format the experiment parameters and derived circuit requirements."""
    experiment = config.experiment
    lines = [
        f"targetPhi = {experiment.target_phi:.6f}",
        f"alpha = {experiment.alpha:.6f}",
        f"precision = {experiment.precision:.6e}",
        f"numberOfEvidenceSamplesPerIteration = {experiment.number_of_evidence_samples}",
        f"numberOfPriorTestSamplesPerIteration = {experiment.number_of_prior_samples}",
        f"numberOfRepetitions = {config.run.number_of_repetitions}",
        "",
        f"Required Quantum Circuit Depth = 1 / precision^{{alpha}} = {experiment.circuit_depth}",
        f"Required Quantum Circuit Samples (N) = "
        f"{auto_evidence_sample_count(experiment.precision, experiment.alpha)}",
    ]
    return '\n'.join(lines)


def format_iteration(record: IterationRecord) -> str:
    return (
        f"Iteration {record.iteration}: Mean value of estimate Phi: {record.mean:.6e},\t"
        f"Standard deviation of estimate Phi: {record.standard_deviation:.6e}"
    )


def format_experiment(outcome: ExperimentOutcome) -> str:
    """Format the conclusion line of one experiment."""
    if outcome.converged:
        return (
            f"AQPE Experiment #{outcome.experiment_number}: Successfully achieved precision in "
            f"{outcome.iteration_count} iterative circuit mappings to quantum hardware! "
            f"The final estimate has mean value {outcome.estimated_phi:.6e} and standard deviation "
            f"{outcome.final_standard_deviation:.6e}."
        )
    return (
        f"AQPE Experiment #{outcome.experiment_number}: Could not converge within the maximum allowed "
        f"number of {outcome.iteration_count} iterative circuit mappings to quantum hardware! "
        f"The final estimate has mean value {outcome.estimated_phi:.6e} and standard deviation "
        f"{outcome.final_standard_deviation:.6e}."
    )


def format_experiment_details(outcome: ExperimentOutcome) -> str:
    """Format the header, every iteration, and the conclusion of one experiment."""
    header = f"Starting AQPE Experiment #{outcome.experiment_number}:"
    lines: List[str] = [header, "-" * len(header)]
    lines.extend(format_iteration(record) for record in outcome.history)
    lines.append("")
    lines.append(format_experiment(outcome))
    return '\n'.join(lines)


def format_report(report: "AggregateReport", experiment: ExperimentConfig) -> str:
    """Format the summary across all experiments.

    Args:
        report: Totals over every experiment
        experiment: Parameters the experiments ran with (iteration budget,
            precision and the wrong-convergence multiple)
    """
    if not report.has_converged:
        return (
            f"Convergence failed for all {report.number_of_repetitions} AQPE experiments within the "
            f"allowed maximum limit of {experiment.max_iterations} iterative circuit mappings to quantum hardware!"
        )

    return (
        f"Convergence achieved on average in {report.average_iterations:.6f} iterative circuit "
        f"mappings to quantum hardware in {report.convergence_count} of {report.number_of_repetitions} "
        f"AQPE experiments and yielded an average phase estimation error of "
        f"{report.average_absolute_error:.6e}.\n\n"
        f"In {report.wrong_convergence_count} out of {report.convergence_count} converging experiments, "
        f"the phase estimation error was greater than {experiment.wrong_convergence_sigma:g} times the input "
        f"precision {experiment.precision:.6e}."
    )
